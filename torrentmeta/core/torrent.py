"""Torrent metainfo extraction.

Maps a decoded bencode tree onto :class:`TorrentDescriptor` and computes the
info hash as required by the BitTorrent protocol (BEP 3).
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from torrentmeta.core.bencode import BencodeValue, decode, encode
from torrentmeta.models import (
    PIECE_HASH_LENGTH,
    CodecConfig,
    FileInfo,
    InfoDict,
    TorrentDescriptor,
)
from torrentmeta.utils.exceptions import (
    BencodeEncodeError,
    EmptyFilesError,
    EmptyPathError,
    FileSystemError,
    InfoHashError,
    InvalidPiecesLengthError,
    InvalidTextError,
    InvalidValueError,
    MissingKeyError,
    NoLengthOrFilesError,
    TorrentError,
    TorrentFileNotFoundError,
    TypeMismatchError,
)
from torrentmeta.utils.logging_config import LoggingContext, log_exception

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)

_TYPE_NAMES = {
    int: "integer",
    bytes: "byte string",
    list: "list",
    dict: "dictionary",
}

_RESERVED_SEGMENTS = frozenset({"", ".", ".."})


def _type_name(value: Any) -> str:
    return _TYPE_NAMES.get(type(value), type(value).__name__)


def _require(value: Any, expected: type, field: str) -> Any:
    # bool never comes out of the decoder but is an int subclass
    if not isinstance(value, expected) or isinstance(value, bool):
        msg = f"Expected {_TYPE_NAMES[expected]} for '{field}', got {_type_name(value)}"
        raise TypeMismatchError(
            msg, field, {"expected": _TYPE_NAMES[expected], "actual": _type_name(value)}
        )
    return value


def _require_dict(value: Any, field: str) -> dict[bytes, BencodeValue]:
    return _require(value, dict, field)


def _require_list(value: Any, field: str) -> list[BencodeValue]:
    return _require(value, list, field)


def _require_int(value: Any, field: str) -> int:
    return _require(value, int, field)


def _require_bytes(value: Any, field: str) -> bytes:
    return _require(value, bytes, field)


def _require_key(
    data: dict[bytes, BencodeValue],
    key: bytes,
    parent: str,
) -> tuple[BencodeValue, str]:
    name = key.decode("ascii")
    field = f"{parent}.{name}" if parent else name
    if key not in data:
        msg = f"Required key missing: '{field}'"
        raise MissingKeyError(msg, field)
    return data[key], field


def _decode_text(raw: bytes, field: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"'{field}' is not valid UTF-8: {e.reason}"
        raise InvalidTextError(msg, field) from e


def _get_text(data: dict[bytes, BencodeValue], key: bytes, parent: str) -> str:
    value, field = _require_key(data, key, parent)
    return _decode_text(_require_bytes(value, field), field)


def _get_int(
    data: dict[bytes, BencodeValue],
    key: bytes,
    parent: str,
    minimum: int,
) -> int:
    value, field = _require_key(data, key, parent)
    number = _require_int(value, field)
    if number < minimum:
        msg = f"'{field}' must be at least {minimum}, got {number}"
        raise InvalidValueError(msg, field, {"value": number})
    return number


def _build(model: type[BaseModel], field: str, **kwargs: Any) -> Any:
    try:
        return model(**kwargs)
    except PydanticValidationError as e:
        msg = f"Invalid '{field}': {e.errors()[0]['msg']}"
        raise InvalidValueError(msg, field) from e


def compute_info_hash(info: BencodeValue) -> bytes:
    """Return the SHA-1 digest of the canonical encoding of ``info``."""
    try:
        info_bencoded = encode(info)
    except BencodeEncodeError as e:
        msg = f"Cannot re-encode info dictionary for hashing: {e}"
        raise InfoHashError(msg, "info") from e
    return hashlib.sha1(info_bencoded).digest()  # nosec B324 - SHA-1 required by BitTorrent protocol (BEP 3)


def split_pieces(pieces: bytes, field: str = "info.pieces") -> tuple[bytes, ...]:
    """Split concatenated piece hashes into 20-byte digests."""
    if len(pieces) % PIECE_HASH_LENGTH != 0:
        msg = (
            f"Invalid pieces data length: {len(pieces)} bytes "
            f"(should be multiple of {PIECE_HASH_LENGTH})"
        )
        raise InvalidPiecesLengthError(msg, field, {"length": len(pieces)})
    return tuple(
        pieces[i : i + PIECE_HASH_LENGTH]
        for i in range(0, len(pieces), PIECE_HASH_LENGTH)
    )


def _get_path_segment(value: BencodeValue, field: str) -> str:
    segment = _decode_text(_require_bytes(value, field), field)
    # Segments are joined under the download directory and must stay inside it
    if (
        segment in _RESERVED_SEGMENTS
        or "/" in segment
        or "\\" in segment
        or "\x00" in segment
        or os.path.isabs(segment)
        or os.path.splitdrive(segment)[0]
    ):
        msg = f"Unsafe path segment {segment!r} in '{field}'"
        raise InvalidValueError(msg, field, {"segment": segment})
    return segment


def extract_file(value: BencodeValue, field: str = "file") -> FileInfo:
    """Build a :class:`FileInfo` from one entry of ``info.files``.

    Path segments are joined in list order with ``os.sep``. Empty segments,
    ``.`` and ``..``, and segments holding a separator or drive are rejected
    with :class:`InvalidValueError`.
    """
    try:
        entry = _require_dict(value, field)
        length = _get_int(entry, b"length", field, minimum=0)

        path_value, path_field = _require_key(entry, b"path", field)
        raw_segments = _require_list(path_value, path_field)
        if not raw_segments:
            msg = f"Empty path segment list in '{path_field}'"
            raise EmptyPathError(msg, path_field)

        segments = tuple(
            _get_path_segment(segment, f"{path_field}[{i}]")
            for i, segment in enumerate(raw_segments)
        )

        return _build(
            FileInfo,
            field,
            length=length,
            path=os.sep.join(segments),
            path_segments=segments,
        )
    except TorrentError as e:
        log_exception(logger, e, "Failed to decode file info")
        raise


def extract_files_info(value: BencodeValue, field: str = "files") -> tuple[FileInfo, ...]:
    """Build the file list of a multi-file torrent."""
    try:
        entries = _require_list(value, field)
        if not entries:
            msg = f"Files list must not be empty: '{field}'"
            raise EmptyFilesError(msg, field)
    except TorrentError as e:
        log_exception(logger, e, "Failed to decode files info")
        raise

    # Each entry logs its own failures
    return tuple(
        extract_file(entry, f"{field}[{i}]") for i, entry in enumerate(entries)
    )


def extract_info(value: BencodeValue, field: str = "info") -> InfoDict:
    """Build an :class:`InfoDict` and compute its info hash."""
    try:
        info = _require_dict(value, field)
        name = _get_text(info, b"name", field)
        piece_length = _get_int(info, b"piece length", field, minimum=1)

        pieces_value, pieces_field = _require_key(info, b"pieces", field)
        pieces = split_pieces(_require_bytes(pieces_value, pieces_field), pieces_field)

        length = None
        if b"length" in info:
            length = _get_int(info, b"length", field, minimum=0)
        elif b"files" not in info:
            msg = f"Neither length nor files present in '{field}'"
            raise NoLengthOrFilesError(msg, field)
    except TorrentError as e:
        log_exception(logger, e, "Failed to decode info")
        raise

    files = None
    if length is None:
        logger.debug("No length key in '%s', parsing as multi-file torrent", field)
        files = extract_files_info(info[b"files"], f"{field}.files")

    try:
        return _build(
            InfoDict,
            field,
            name=name,
            piece_length=piece_length,
            pieces=pieces,
            length=length,
            files=files,
            info_hash=compute_info_hash(info),
        )
    except TorrentError as e:
        log_exception(logger, e, "Failed to decode info")
        raise


def extract_descriptor(value: BencodeValue) -> TorrentDescriptor:
    """Build a :class:`TorrentDescriptor` from a decoded torrent document.

    Args:
        value: Root value returned by :func:`torrentmeta.core.bencode.decode`

    Raises:
        TorrentError: If the document does not have the expected shape

    """
    try:
        root = _require_dict(value, "<root>")
        announce = _get_text(root, b"announce", "")
        info_value, info_field = _require_key(root, b"info", "")
    except TorrentError as e:
        log_exception(logger, e, "Failed to decode metainfo")
        raise

    info = extract_info(info_value, info_field)
    return TorrentDescriptor(announce=announce, info=info)


class TorrentParser:
    """Parser for BitTorrent torrent files."""

    def __init__(self, config: CodecConfig | None = None) -> None:
        """Initialize the torrent parser.

        Args:
            config: Decoder limits. Defaults to :class:`CodecConfig` defaults.

        """
        self.config = config or CodecConfig()

    def decode(self, data: bytes | bytearray | memoryview) -> BencodeValue:
        """Decode ``data`` using the configured limits."""
        return decode(
            data,
            max_depth=self.config.max_depth,
            max_size=self.config.max_input_size,
            strict=self.config.strict,
        )

    def parse_bytes(self, data: bytes | bytearray | memoryview) -> TorrentDescriptor:
        """Parse a bencoded torrent held in memory."""
        return extract_descriptor(self.decode(data))

    def parse(self, torrent_path: str | Path) -> TorrentDescriptor:
        """Parse a torrent file from a local path.

        Raises:
            TorrentFileNotFoundError: If the file does not exist
            FileSystemError: If the file cannot be read
            BencodeDecodeError: If the file is not valid bencode
            TorrentError: If the document is not valid torrent metainfo

        """
        with LoggingContext("parse torrent", path=str(torrent_path)):
            return self.parse_bytes(self._read_from_file(torrent_path))

    def _read_from_file(self, file_path: str | Path) -> bytes:
        path = Path(file_path)
        if not path.exists():
            msg = f"Torrent file not found: {path}"
            raise TorrentFileNotFoundError(msg, {"path": str(path)})

        try:
            return path.read_bytes()
        except OSError as e:
            msg = f"Failed to read torrent file {path}: {e}"
            raise FileSystemError(msg, {"path": str(path)}) from e


def parse_torrent_bytes(
    data: bytes | bytearray | memoryview,
    config: CodecConfig | None = None,
) -> TorrentDescriptor:
    """Decode and extract a torrent held in memory."""
    return TorrentParser(config).parse_bytes(data)


def load_torrent(
    torrent_path: str | Path,
    config: CodecConfig | None = None,
) -> TorrentDescriptor:
    """Read, decode and extract a torrent file."""
    return TorrentParser(config).parse(torrent_path)

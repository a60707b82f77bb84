"""Exception hierarchy for torrentmeta.

Syntax errors raised by the codec and shape errors raised by the descriptor
extractor are distinct classes so callers can tell them apart with
``except`` clauses or ``isinstance`` checks.
"""

from __future__ import annotations

from typing import Any


class TorrentMetaError(Exception):
    """Base exception for all torrentmeta errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize torrentmeta error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(TorrentMetaError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class DiskError(TorrentMetaError):
    """Disk I/O related errors."""


class FileSystemError(DiskError):
    """File system operation errors."""


class TorrentFileNotFoundError(FileSystemError):
    """Torrent file does not exist."""


# Codec


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class BencodeDecodeError(BencodeError):
    """Malformed bencoded input.

    ``details["position"]`` holds the byte offset at which the problem was
    detected.
    """

    def __init__(self, message: str, position: int, details: dict[str, Any] | None = None):
        """Initialize decode error at ``position``."""
        merged = {"position": position}
        if details:
            merged.update(details)
        super().__init__(message, merged)
        self.position = position


class UnrecognizedTagError(BencodeDecodeError):
    """Leading byte does not start any bencode value."""


class EmptyInputError(UnrecognizedTagError):
    """No bytes left where a value was expected."""


class TruncatedIntegerError(BencodeDecodeError):
    """Integer has no terminating ``e``."""


class MalformedIntegerError(BencodeDecodeError):
    """Integer digits are not a valid signed 64-bit base-10 number."""


class TruncatedLengthPrefixError(BencodeDecodeError):
    """Byte string length prefix has no ``:`` separator."""


class MalformedLengthError(BencodeDecodeError):
    """Byte string length prefix is not a non-negative integer."""


class BufferUnderrunError(BencodeDecodeError):
    """Byte string declares more bytes than the buffer holds."""


class TruncatedListError(BencodeDecodeError):
    """List has no terminating ``e``."""


class TruncatedDictionaryError(BencodeDecodeError):
    """Dictionary has no terminating ``e``."""


class NonStringKeyError(BencodeDecodeError):
    """Dictionary key decoded to something other than a byte string."""


class NestingTooDeepError(BencodeDecodeError):
    """Lists/dictionaries nest deeper than the configured limit."""


class InputTooLargeError(BencodeDecodeError):
    """Input buffer exceeds the configured maximum size."""


class TrailingDataError(BencodeDecodeError):
    """Bytes remain after the top-level value in strict mode."""


class BencodeEncodeError(BencodeError):
    """Value cannot be represented in bencode."""


# Descriptor extraction


class TorrentError(ValidationError):
    """Torrent metainfo does not have the expected shape.

    ``details["field"]`` names the offending field, e.g. ``info.files[1].path``.
    """

    def __init__(self, message: str, field: str, details: dict[str, Any] | None = None):
        """Initialize torrent error for ``field``."""
        merged = {"field": field}
        if details:
            merged.update(details)
        super().__init__(message, merged)
        self.field = field


class TypeMismatchError(TorrentError):
    """Value has the wrong bencode type for its position."""


class MissingKeyError(TorrentError):
    """Required dictionary key is absent."""


class EmptyPathError(TorrentError):
    """File entry has an empty path segment list."""


class EmptyFilesError(TorrentError):
    """Multi-file torrent has an empty files list."""


class InvalidPiecesLengthError(TorrentError):
    """Piece hash string length is not a multiple of 20."""


class NoLengthOrFilesError(TorrentError):
    """Info dictionary has neither ``length`` nor ``files``."""


class InvalidValueError(TorrentError):
    """Integer field is outside its allowed range."""


class InvalidTextError(TorrentError):
    """Text field is not valid UTF-8."""


class InfoHashError(TorrentError):
    """Info dictionary could not be re-encoded for hashing."""

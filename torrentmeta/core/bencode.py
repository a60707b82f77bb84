"""Bencode encoding and decoding.

Decoded values use native Python types for the four bencode variants:

- Integer -> ``int`` (signed 64-bit)
- Byte string -> ``bytes``
- List -> ``list``
- Dictionary -> ``dict`` with ``bytes`` keys

The encoder always emits dictionary keys in ascending byte order, so
``encode`` produces the canonical form that info hashes are computed over.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from torrentmeta.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    BufferUnderrunError,
    EmptyInputError,
    InputTooLargeError,
    MalformedIntegerError,
    MalformedLengthError,
    NestingTooDeepError,
    NonStringKeyError,
    TrailingDataError,
    TruncatedDictionaryError,
    TruncatedIntegerError,
    TruncatedLengthPrefixError,
    TruncatedListError,
    UnrecognizedTagError,
)

logger = logging.getLogger(__name__)

BencodeValue = int | bytes | list["BencodeValue"] | dict[bytes, "BencodeValue"]

DEFAULT_MAX_DEPTH = 200

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT = ord("i")
_LIST = ord("l")
_DICT = ord("d")
_END = ord("e")
_ZERO = ord("0")
_NINE = ord("9")

_INTEGER_RE = re.compile(rb"-?[0-9]+")
_LENGTH_RE = re.compile(rb"[0-9]+")

# Widest decimal magnitude that can still fit in 64 bits.
_MAX_SIGNIFICANT_DIGITS = 19


def _significant_digits(digits: bytes) -> int:
    return len(digits.lstrip(b"-").lstrip(b"0"))


class BencodeDecoder:
    """Single-pass bencode decoder over an in-memory buffer.

    ``pos`` is advanced past every value that is decoded, so after
    :meth:`decode` it equals the number of bytes the value occupied.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the decoder.

        Args:
            data: Buffer holding bencoded data
            max_depth: Maximum nesting of lists and dictionaries

        """
        self.data = bytes(data)
        self.pos = 0
        self.max_depth = max_depth

    def decode(self) -> BencodeValue:
        """Decode the value starting at the current position."""
        return self._decode_value(0)

    def _decode_value(self, depth: int) -> BencodeValue:
        if self.pos >= len(self.data):
            msg = "Unexpected end of input, expected a bencoded value"
            raise EmptyInputError(msg, self.pos)

        tag = self.data[self.pos]
        if tag == _INT:
            return self._decode_int()
        if _ZERO <= tag <= _NINE:
            return self._decode_bytes()
        if tag == _LIST:
            return self._decode_list(depth + 1)
        if tag == _DICT:
            return self._decode_dict(depth + 1)

        msg = f"Unrecognized value tag {bytes([tag])!r}"
        raise UnrecognizedTagError(msg, self.pos)

    def _decode_int(self) -> int:
        start = self.pos
        end = self.data.find(b"e", start + 1)
        if end == -1:
            msg = "Truncated integer: missing terminating 'e'"
            raise TruncatedIntegerError(msg, start)

        digits = self.data[start + 1 : end]
        if (
            not _INTEGER_RE.fullmatch(digits)
            or _significant_digits(digits) > _MAX_SIGNIFICANT_DIGITS
        ):
            msg = f"Malformed integer {digits!r}"
            raise MalformedIntegerError(msg, start)

        value = int(digits)
        if not INT64_MIN <= value <= INT64_MAX:
            msg = f"Malformed integer {digits!r}: outside 64-bit range"
            raise MalformedIntegerError(msg, start)

        self.pos = end + 1
        return value

    def _decode_bytes(self) -> bytes:
        start = self.pos
        colon = self.data.find(b":", start)
        if colon == -1:
            msg = "Truncated length prefix: missing ':' separator"
            raise TruncatedLengthPrefixError(msg, start)

        prefix = self.data[start:colon]
        if (
            not _LENGTH_RE.fullmatch(prefix)
            or _significant_digits(prefix) > _MAX_SIGNIFICANT_DIGITS
        ):
            msg = f"Malformed length prefix {prefix!r}"
            raise MalformedLengthError(msg, start)

        length = int(prefix)
        body_start = colon + 1
        body_end = body_start + length
        if body_end > len(self.data):
            msg = (
                f"Buffer underrun: string declares {length} bytes, "
                f"{len(self.data) - body_start} available"
            )
            raise BufferUnderrunError(msg, start)

        self.pos = body_end
        return self.data[body_start:body_end]

    def _check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            msg = f"Nesting deeper than {self.max_depth} levels"
            raise NestingTooDeepError(msg, self.pos, {"max_depth": self.max_depth})

    def _decode_list(self, depth: int) -> list[BencodeValue]:
        self._check_depth(depth)
        start = self.pos
        self.pos += 1
        items: list[BencodeValue] = []

        while True:
            if self.pos >= len(self.data):
                msg = "Truncated list: missing terminating 'e'"
                raise TruncatedListError(msg, start)
            if self.data[self.pos] == _END:
                self.pos += 1
                return items
            items.append(self._decode_value(depth))

    def _decode_dict(self, depth: int) -> dict[bytes, BencodeValue]:
        self._check_depth(depth)
        start = self.pos
        self.pos += 1
        result: dict[bytes, BencodeValue] = {}

        while True:
            if self.pos >= len(self.data):
                msg = "Truncated dictionary: missing terminating 'e'"
                raise TruncatedDictionaryError(msg, start)
            if self.data[self.pos] == _END:
                self.pos += 1
                return result

            key_pos = self.pos
            key = self._decode_value(depth)
            if not isinstance(key, bytes):
                msg = f"Dictionary key must be a byte string, got {type(key).__name__}"
                raise NonStringKeyError(msg, key_pos)

            if self.pos >= len(self.data):
                msg = f"Truncated dictionary: no value for key {key!r}"
                raise TruncatedDictionaryError(msg, start)

            # Later duplicates overwrite earlier ones.
            result[key] = self._decode_value(depth)


class BencodeEncoder:
    """Canonical bencode encoder."""

    def encode(self, value: Any) -> bytes:
        """Encode ``value`` to bencoded bytes.

        Raises:
            BencodeEncodeError: If ``value`` contains a type with no bencode form

        """
        chunks: list[bytes] = []
        self._encode_value(value, chunks)
        return b"".join(chunks)

    def _encode_value(self, value: Any, out: list[bytes]) -> None:
        # bool is an int subclass but not a bencode integer
        if isinstance(value, bool):
            msg = "Cannot bencode bool"
            raise BencodeEncodeError(msg)
        if isinstance(value, int):
            self._encode_int(value, out)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._encode_bytes(bytes(value), out)
        elif isinstance(value, str):
            self._encode_bytes(value.encode("utf-8"), out)
        elif isinstance(value, (list, tuple)):
            out.append(b"l")
            for item in value:
                self._encode_value(item, out)
            out.append(b"e")
        elif isinstance(value, dict):
            self._encode_dict(value, out)
        else:
            msg = f"Cannot bencode value of type {type(value).__name__}"
            raise BencodeEncodeError(msg)

    def _encode_int(self, value: int, out: list[bytes]) -> None:
        if not INT64_MIN <= value <= INT64_MAX:
            msg = f"Integer {value} outside 64-bit range"
            raise BencodeEncodeError(msg)
        out.append(b"i%de" % value)

    def _encode_bytes(self, value: bytes, out: list[bytes]) -> None:
        out.append(b"%d:" % len(value))
        out.append(value)

    def _encode_dict(self, value: dict[Any, Any], out: list[bytes]) -> None:
        items: dict[bytes, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                raw_key = key.encode("utf-8")
            elif isinstance(key, (bytes, bytearray, memoryview)):
                raw_key = bytes(key)
            else:
                msg = f"Dictionary key must be bytes or str, got {type(key).__name__}"
                raise BencodeEncodeError(msg)
            if raw_key in items:
                msg = f"Duplicate dictionary key {raw_key!r}"
                raise BencodeEncodeError(msg)
            items[raw_key] = item

        out.append(b"d")
        for raw_key in sorted(items):
            self._encode_bytes(raw_key, out)
            self._encode_value(items[raw_key], out)
        out.append(b"e")


def decode_prefix(
    data: bytes | bytearray | memoryview,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[BencodeValue, int]:
    """Decode the value at the start of ``data``.

    Returns:
        The decoded value and the number of bytes it occupied. Anything after
        that offset is left for the caller.

    """
    decoder = BencodeDecoder(data, max_depth=max_depth)
    value = decoder.decode()
    return value, decoder.pos


def decode(
    data: bytes | bytearray | memoryview,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_size: int | None = None,
    strict: bool = False,
) -> BencodeValue:
    """Decode a bencoded document.

    Args:
        data: Bencoded document
        max_depth: Maximum nesting of lists and dictionaries
        max_size: Reject buffers larger than this many bytes
        strict: Raise :class:`TrailingDataError` if bytes follow the value

    Raises:
        BencodeDecodeError: If ``data`` is not valid bencode

    """
    if max_size is not None and len(data) > max_size:
        msg = f"Input of {len(data)} bytes exceeds limit of {max_size}"
        raise InputTooLargeError(msg, 0, {"max_size": max_size})

    decoder = BencodeDecoder(data, max_depth=max_depth)
    value = decoder.decode()

    trailing = len(decoder.data) - decoder.pos
    if trailing:
        if strict:
            msg = f"{trailing} bytes of trailing data after bencoded value"
            raise TrailingDataError(msg, decoder.pos)
        logger.debug("Ignoring %d trailing bytes after bencoded value", trailing)
    return value


def encode(value: Any) -> bytes:
    """Encode ``value`` to canonical bencoded bytes."""
    return BencodeEncoder().encode(value)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeValue",
    "decode",
    "decode_prefix",
    "encode",
]

"""Bencoding module.

This module provides a convenient interface to the core bencode functionality.
"""

from __future__ import annotations

from torrentmeta.core.bencode import (
    BencodeDecodeError,
    BencodeDecoder,
    BencodeEncodeError,
    BencodeEncoder,
    BencodeValue,
    decode,
    decode_prefix,
    encode,
)

__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeValue",
    "decode",
    "decode_prefix",
    "encode",
]

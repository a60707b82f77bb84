"""Core torrent metainfo implementation.

This module contains:
- Bencoding (encoding/decoding)
- Torrent descriptor extraction and info hash computation
"""

from __future__ import annotations

from torrentmeta.core.bencode import (
    BencodeDecoder,
    BencodeEncoder,
    BencodeValue,
    decode,
    decode_prefix,
    encode,
)
from torrentmeta.core.torrent import (
    TorrentParser,
    compute_info_hash,
    extract_descriptor,
    extract_file,
    extract_files_info,
    extract_info,
    load_torrent,
    parse_torrent_bytes,
)

__all__ = [
    # Bencoding
    "BencodeDecoder",
    "BencodeEncoder",
    "BencodeValue",
    # Torrent
    "TorrentParser",
    "compute_info_hash",
    "decode",
    "decode_prefix",
    "encode",
    "extract_descriptor",
    "extract_file",
    "extract_files_info",
    "extract_info",
    "load_torrent",
    "parse_torrent_bytes",
]

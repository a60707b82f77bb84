"""torrentmeta - bencode codec and torrent metainfo extraction."""

from __future__ import annotations

__version__ = "0.1.0"

from torrentmeta.core.bencode import decode, decode_prefix, encode
from torrentmeta.core.torrent import (
    TorrentParser,
    compute_info_hash,
    extract_descriptor,
    load_torrent,
    parse_torrent_bytes,
)
from torrentmeta.models import FileInfo, InfoDict, TorrentDescriptor
from torrentmeta.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    BencodeError,
    TorrentError,
    TorrentMetaError,
)

__all__ = [
    "BencodeDecodeError",
    "BencodeEncodeError",
    "BencodeError",
    "FileInfo",
    "InfoDict",
    "TorrentDescriptor",
    "TorrentError",
    "TorrentMetaError",
    "TorrentParser",
    "__version__",
    "compute_info_hash",
    "decode",
    "decode_prefix",
    "encode",
    "extract_descriptor",
    "load_torrent",
    "parse_torrent_bytes",
]

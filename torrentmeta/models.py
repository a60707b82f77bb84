"""Pydantic models for torrentmeta.

Provides the torrent descriptor built by the extractor and the configuration
models read by :mod:`torrentmeta.config`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from torrentmeta.core.bencode import DEFAULT_MAX_DEPTH

PIECE_HASH_LENGTH = 20


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FileInfo(BaseModel):
    """One file of a multi-file torrent."""

    model_config = ConfigDict(frozen=True)

    length: int = Field(..., ge=0, description="File length in bytes")
    path: str = Field(..., description="Relative path joined with the OS separator")
    path_segments: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Path components as listed in the torrent",
    )

    @property
    def name(self) -> str:
        """File name (last path component)."""
        return self.path_segments[-1]


class InfoDict(BaseModel):
    """Content description from the torrent ``info`` dictionary."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Suggested file or directory name")
    piece_length: int = Field(..., gt=0, description="Piece length in bytes")
    pieces: tuple[bytes, ...] = Field(
        default_factory=tuple,
        description="SHA-1 hash of every piece, in order",
    )
    length: int | None = Field(
        None,
        ge=0,
        description="Total length for single-file torrents",
    )
    files: tuple[FileInfo, ...] | None = Field(
        None,
        description="File list for multi-file torrents",
    )
    info_hash: bytes = Field(
        ...,
        min_length=20,
        max_length=20,
        description="SHA-1 of the canonical bencoded info dictionary",
    )

    @field_validator("pieces")
    @classmethod
    def validate_pieces(cls, v: tuple[bytes, ...]) -> tuple[bytes, ...]:
        """Every piece hash must be exactly 20 bytes."""
        for index, piece in enumerate(v):
            if len(piece) != PIECE_HASH_LENGTH:
                msg = f"Piece hash {index} is {len(piece)} bytes, expected {PIECE_HASH_LENGTH}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_layout(self) -> InfoDict:
        """Exactly one of ``length`` and ``files`` is set."""
        if (self.length is None) == (self.files is None):
            msg = "Exactly one of length (single file) or files (multi-file) must be set"
            raise ValueError(msg)
        return self

    @property
    def is_multi_file(self) -> bool:
        """Whether the torrent lists several files."""
        return self.files is not None

    @property
    def num_pieces(self) -> int:
        """Number of pieces."""
        return len(self.pieces)

    @property
    def total_length(self) -> int:
        """Total content length in bytes."""
        if self.files is not None:
            return sum(f.length for f in self.files)
        return self.length or 0

    @property
    def info_hash_hex(self) -> str:
        """Info hash as lowercase hex."""
        return self.info_hash.hex()

    def piece_hash(self, index: int) -> bytes:
        """Get the SHA-1 hash for piece ``index``."""
        if index < 0 or index >= len(self.pieces):
            msg = f"Invalid piece index: {index}"
            raise IndexError(msg)
        return self.pieces[index]


class TorrentDescriptor(BaseModel):
    """Decoded torrent metainfo."""

    model_config = ConfigDict(frozen=True)

    announce: str = Field(..., description="Tracker announce URL")
    info: InfoDict = Field(..., description="Content information")

    @property
    def name(self) -> str:
        """Torrent name."""
        return self.info.name

    @property
    def info_hash(self) -> bytes:
        """Info hash of the torrent."""
        return self.info.info_hash


class CodecConfig(BaseModel):
    """Limits applied when decoding untrusted input."""

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=400,
        description="Maximum nesting of lists and dictionaries",
    )
    max_input_size: int | None = Field(
        default=None,
        gt=0,
        description="Reject documents larger than this many bytes",
    )
    strict: bool = Field(
        default=False,
        description="Reject trailing bytes after the top-level value",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Emit JSON log lines instead of Rich console output",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class Config(BaseModel):
    """Main configuration model."""

    codec: CodecConfig = Field(
        default_factory=CodecConfig,
        description="Decoder limits",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

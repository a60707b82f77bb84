"""Pytest configuration and shared fixtures for torrentmeta tests."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from torrentmeta.config import reset_config
from torrentmeta.core.bencode import encode


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("core", "marks tests as core functionality tests"),
        ("config", "marks tests as configuration tests"),
        ("property", "marks tests as property-based tests"),
        ("integration", "marks tests as integration tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # setup_logging() turns propagation off, which would hide records from caplog
    package_logger = logging.getLogger("torrentmeta")
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep config discovery away from the developer's home directory."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in (
        "TORRENTMETA_MAX_DEPTH",
        "TORRENTMETA_MAX_INPUT_SIZE",
        "TORRENTMETA_STRICT",
        "TORRENTMETA_LOG_LEVEL",
        "TORRENTMETA_LOG_FILE",
        "TORRENTMETA_STRUCTURED_LOGGING",
        "TORRENTMETA_LOG_CORRELATION_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def end_to_end_document() -> bytes:
    """Raw single-file torrent with the info keys in non-canonical order."""
    return (
        b"d8:announce11:here i come4:infod4:name4:temp12:piece lengthi212314e"
        b"6:pieces40:" + b"a" * 40 + b"6:lengthi424628eee"
    )


@pytest.fixture
def single_file_torrent() -> dict[bytes, Any]:
    """Decoded single-file torrent document."""
    return {
        b"announce": b"http://tracker.example.com:6969/announce",
        b"info": {
            b"name": b"test_file.txt",
            b"length": 12345,
            b"piece length": 16384,
            b"pieces": b"x" * 40,
        },
    }


@pytest.fixture
def multi_file_torrent() -> dict[bytes, Any]:
    """Decoded multi-file torrent document."""
    return {
        b"announce": b"http://tracker.example.com:6969/announce",
        b"info": {
            b"name": b"TestDirectory",
            b"piece length": 32768,
            b"pieces": b"y" * 60,
            b"files": [
                {b"length": 1000, b"path": [b"file1.txt"]},
                {b"length": 2000, b"path": [b"subdir", b"file2.txt"]},
            ],
        },
    }


@pytest.fixture
def torrent_file(tmp_path, single_file_torrent):
    """Single-file torrent written to disk."""
    path = tmp_path / "sample.torrent"
    path.write_bytes(encode(single_file_torrent))
    return path

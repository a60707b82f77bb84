"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

pytestmark = [pytest.mark.unit]

from torrentmeta.models import LogLevel, ObservabilityConfig
from torrentmeta.utils.exceptions import MissingKeyError
from torrentmeta.utils.logging_config import (
    CorrelationFilter,
    LoggingContext,
    StructuredFormatter,
    get_correlation_id,
    get_logger,
    log_exception,
    set_correlation_id,
    setup_logging,
)
from torrentmeta.utils.rich_logging import (
    CorrelationRichHandler,
    FileFormatter,
    create_rich_handler,
    strip_rich_markup,
)


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord(
        name="torrentmeta.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Test cases for StructuredFormatter."""

    def test_json_output(self):
        """Records are rendered as a JSON object."""
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "torrentmeta.test"
        assert entry["message"] == "hello world"

    def test_extra_fields(self):
        """Fields passed via ``extra`` are included."""
        entry = json.loads(
            StructuredFormatter().format(_record(field="info.name", correlation_id="abc"))
        )
        assert entry["field"] == "info.name"
        assert entry["correlation_id"] == "abc"


class TestCorrelation:
    """Test cases for correlation IDs."""

    def test_set_and_get(self):
        """An explicit ID round-trips through the context."""
        assert set_correlation_id("abc-123") == "abc-123"
        assert get_correlation_id() == "abc-123"

    def test_generated(self):
        """A fresh ID is generated when none is given."""
        corr_id = set_correlation_id()
        assert corr_id
        assert get_correlation_id() == corr_id

    def test_filter(self):
        """The filter stamps the current ID on records."""
        set_correlation_id("xyz")
        record = _record()
        assert CorrelationFilter().filter(record) is True
        assert record.correlation_id == "xyz"


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_structured_console(self, capsys):
        """Structured logging writes JSON lines to stdout."""
        setup_logging(
            ObservabilityConfig(log_level=LogLevel.DEBUG, structured_logging=True)
        )
        logger = logging.getLogger("torrentmeta")
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

        get_logger("core.torrent").info("parsed %s", "temp")
        out = capsys.readouterr().out.strip().splitlines()
        entry = json.loads(out[-1])
        assert entry["message"] == "parsed temp"
        assert entry["logger"] == "torrentmeta.core.torrent"
        assert entry["correlation_id"] != "no-correlation-id"

    def test_rich_console(self):
        """Without structured logging a Rich handler is installed."""
        setup_logging(ObservabilityConfig())
        handlers = logging.getLogger("torrentmeta").handlers
        assert any(isinstance(h, CorrelationRichHandler) for h in handlers)

    def test_log_file(self, tmp_path):
        """Records are written to the configured file."""
        log_file = tmp_path / "logs" / "torrentmeta.log"
        setup_logging(ObservabilityConfig(log_file=str(log_file), log_level=LogLevel.INFO))

        logging.getLogger("torrentmeta.core.bencode").warning("something [red]odd[/red]")
        for handler in logging.getLogger("torrentmeta").handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "something odd" in text
        assert "WARNING" in text

    def test_level_filters(self, capsys):
        """Records below the configured level are dropped."""
        setup_logging(
            ObservabilityConfig(log_level=LogLevel.ERROR, structured_logging=True)
        )
        logging.getLogger("torrentmeta.core.torrent").info("quiet")
        assert "quiet" not in capsys.readouterr().out


class TestHelpers:
    """Test cases for logger helpers."""

    def test_get_logger_prefixes(self):
        """Loggers are placed under the package logger."""
        assert get_logger("config").name == "torrentmeta.config"
        assert get_logger("torrentmeta.core").name == "torrentmeta.core"
        assert get_logger("torrentmeta").name == "torrentmeta"

    def test_logging_context_success(self, caplog):
        """Completed operations are logged at info level."""
        with caplog.at_level(logging.INFO, logger="torrentmeta"):
            with LoggingContext("parse", path="a.torrent"):
                pass
        messages = [r.getMessage() for r in caplog.records]
        assert "Starting parse" in messages
        assert any(m.startswith("Completed parse") for m in messages)

    def test_logging_context_failure(self, caplog):
        """Failures are logged and the exception propagates."""
        with caplog.at_level(logging.INFO, logger="torrentmeta"):
            with pytest.raises(ValueError, match="bad"):
                with LoggingContext("parse"):
                    raise ValueError("bad")
        assert any(
            r.levelno == logging.ERROR and r.getMessage().startswith("Failed parse")
            for r in caplog.records
        )

    def test_log_exception_details(self, caplog):
        """Project errors are logged with their details."""
        logger = get_logger("test")
        with caplog.at_level(logging.ERROR, logger="torrentmeta"):
            try:
                raise MissingKeyError("Required key missing: 'info'", "info")
            except MissingKeyError as e:
                log_exception(logger, e, "extract")
        record = caplog.records[-1]
        assert record.getMessage() == "extract: Required key missing: 'info'"
        assert record.details == {"field": "info"}

    def test_strip_rich_markup(self):
        """Markup tags are removed but bracketed field paths survive."""
        assert strip_rich_markup("[bold]hi[/bold]") == "hi"
        assert strip_rich_markup("info.files[0].path") == "info.files[0].path"

    def test_file_formatter(self):
        """The file formatter strips markup."""
        formatter = FileFormatter("%(message)s")
        assert formatter.format(_record("[green]ok[/green]", ())) == "ok"

    def test_create_rich_handler(self):
        """The factory returns a correlation-aware Rich handler."""
        handler = create_rich_handler(level=logging.DEBUG)
        assert isinstance(handler, CorrelationRichHandler)
        assert handler.level == logging.DEBUG

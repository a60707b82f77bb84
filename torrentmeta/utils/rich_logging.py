"""Rich logging integration for torrentmeta.

Provides a Rich console handler that carries the correlation ID and a plain
formatter for log files.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

_MARKUP_RE = re.compile(r"\[/?[a-z#@][^\]]*\]")


class CorrelationRichHandler(RichHandler):
    """RichHandler that prefixes messages with the calling function.

    Log messages routinely contain ``bytes`` reprs and indexed field names such
    as ``info.files[0]``, so markup is left disabled.
    """

    def __init__(self, *args: Any, console: Console | None = None, **kwargs: Any) -> None:
        """Initialize handler, defaulting to a stdout console."""
        if console is None:
            console = Console(file=sys.stdout, markup=False)
        kwargs.setdefault("markup", False)
        super().__init__(*args, console=console, **kwargs)

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record with its correlation ID attached."""
        if not hasattr(record, "correlation_id"):
            from torrentmeta.utils.logging_config import get_correlation_id

            record.correlation_id = get_correlation_id() or "no-correlation-id"

        func_name = getattr(record, "funcName", None)
        if func_name and func_name != "<module>":
            record.msg = f"{func_name}: {record.getMessage()}"
            record.args = ()
        super().emit(record)


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup tags like ``[red]`` or ``[/bold]`` from text."""
    return _MARKUP_RE.sub("", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        return strip_rich_markup(super().format(record))


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.INFO,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> logging.Handler:
    """Create a RichHandler with correlation ID support.

    Args:
        console: Optional Rich Console instance
        level: Log level
        show_path: Whether to show file paths in log output
        rich_tracebacks: Whether to use rich tracebacks

    Returns:
        Configured RichHandler instance

    """
    return CorrelationRichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
    )

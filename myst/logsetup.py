"""Logging configuration writing timestamped lines to a file."""

from __future__ import annotations

import logging
from datetime import datetime


class _LineFormatter(logging.Formatter):
    """Formats records as ``[date][time:micros][target][LEVEL] message``."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("[%Y-%m-%d][%H:%M:%S:%f]")
        return f"{stamp}[{record.name}][{record.levelname}] {record.getMessage()}"


def setup_logger(filename: str) -> logging.Handler:
    """Send log records at INFO and above to ``filename``.

    Returns the handler installed on the root logger. Raises OSError when the
    file cannot be opened.
    """
    handler = logging.FileHandler(filename)
    handler.setFormatter(_LineFormatter())
    handler.setLevel(logging.INFO)
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(handler)
    return handler
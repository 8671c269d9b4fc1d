"""
structlog setup.

The terminal belongs to the UI while it runs, so log events are written to a
file (``~/.proxyswitch/proxyswitch.log`` unless configured otherwise).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import structlog

_log_stream: TextIO | None = None


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Route structlog events at ``level`` and above to ``log_file``."""
    global _log_stream

    if log_file is not None:
        log_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        if _log_stream is not None:
            _log_stream.close()
        _log_stream = log_file.open("a", encoding="utf-8")
        factory = structlog.PrintLoggerFactory(file=_log_stream)
    else:
        factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=factory,
        cache_logger_on_first_use=False,
    )

"""Logging utilities for profwrap commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping

_LOGGER_NAME = "profwrap"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the profwrap hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class FileLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the source file it concerns."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['file']}: {msg}", kwargs


def file_logger(logger: logging.Logger, file_name: str | Path) -> FileLogAdapter:
    """Wrap ``logger`` so records carry ``file_name``."""
    return FileLogAdapter(logger, {"file": str(file_name)})


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the profwrap logger with stderr output and an optional file sink.

    ``quiet`` keeps only warnings on the console so machine-readable command
    output (``scan --json``) stays clean on stdout.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[profwrap] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["FileLogAdapter", "configure_logging", "file_logger", "get_logger"]

"""Logging utilities for javadep runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "javadep"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the javadep hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(*, quiet: bool = False, verbose: bool = False, debug: bool = False) -> int:
    """Map the CLI verbosity flags to a logging level; the most verbose flag wins."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    return logging.WARNING


def configure_logging(
    *,
    quiet: bool = False,
    verbose: bool = False,
    debug: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the javadep logger with console output and optional file sink."""
    level = resolve_level(quiet=quiet, verbose=verbose, debug=debug)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[javadep] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger", "resolve_level"]

"""Logging utilities for codelocator runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "codelocator"

# SDK loggers that echo full request payloads (including prompts) at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "urllib3")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the codelocator hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the codelocator logger with console output and an optional file sink.

    Provider SDK loggers are capped at WARNING unless ``verbose`` is set so
    uploaded source code never ends up in the console through request dumps.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The service and the CLI may both configure logging in one process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[codelocator] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    third_party_level = logging.DEBUG if verbose else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return logger


__all__ = ["configure_logging", "get_logger"]

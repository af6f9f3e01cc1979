# system/log_utils.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")

LOGGER_NAME = "salesboard"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: int | str = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure console (and optional file) output for the service logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(fmt=DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    for handler in list(_logger.handlers):
        _logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    _logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        _logger.addHandler(file_handler)

    _logger.setLevel(level)
    _logger.propagate = False
    return _logger


def _fmt(msg: str, fields: dict[str, Any]) -> str:
    if not fields:
        return msg
    extra = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{msg} {extra}"


def verbose(msg: str, **fields: Any) -> None:
    _logger.log(VERBOSE, _fmt(msg, fields))


def debug(msg: str, **fields: Any) -> None:
    _logger.debug(_fmt(msg, fields))


def info(msg: str, **fields: Any) -> None:
    _logger.info(_fmt(msg, fields))


def warn(msg: str, **fields: Any) -> None:
    _logger.warning(_fmt(msg, fields))


def error(msg: str, **fields: Any) -> None:
    _logger.error(_fmt(msg, fields))

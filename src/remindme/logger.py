"""Logging setup.

Levels: TRACE/DEBUG/INFO/WARNING/ERROR/CRITICAL (FATAL is accepted as an alias for CRITICAL).

Call setup_logging once at startup, then use logger.info(...) and friends everywhere else.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal, Union

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "FATAL"]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "{name}:{function}:{line} - {message}"
)

_LEVEL_ALIAS = {"FATAL": "CRITICAL"}


def _normalize_level(level: Union[str, LogLevel]) -> str:
    return _LEVEL_ALIAS.get(str(level).upper(), str(level).upper())


def _file_handler(
    path: Path,
    *,
    level: str,
    retention: str,
) -> dict:
    return {
        "sink": path,
        "level": level,
        "format": FILE_FORMAT,
        "rotation": "10 MB",
        "retention": retention,
        "compression": "zip",
        "encoding": "utf-8",
    }


def setup_logging(
    log_level: LogLevel,
    log_file: Union[str, Path, None],
    console_level: LogLevel = "INFO",
) -> None:
    """Route logs to stderr and, when log_file is given, to a main and an error file."""
    handlers: list[dict] = [
        {
            "sink": sys.stderr,
            "level": _normalize_level(console_level),
            "format": CONSOLE_FORMAT,
            "colorize": True,
        }
    ]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        error_log_file = log_file.with_name(f"{log_file.stem}_error{log_file.suffix}")
        handlers.append(_file_handler(log_file, level=_normalize_level(log_level), retention="30 days"))
        handlers.append(_file_handler(error_log_file, level="ERROR", retention="90 days"))

    logger.configure(handlers=handlers)


def get_logger():
    """Return the global logger."""
    return logger


__all__ = ["setup_logging", "get_logger", "logger", "LogLevel"]

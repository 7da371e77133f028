"""Logging setup for replnexus.

The host editor owns the terminal, so records go to a log file beside the
config file. A stream handler is attached only when a stream is passed.
"""

from __future__ import annotations

import logging as py_logging
from pathlib import Path
from typing import TextIO

LOGGER_NAME = "replnexus"
LOG_FILE_NAME = "replnexus.log"
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = py_logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else py_logging.INFO


def default_log_path(config_path: str | Path) -> Path:
    return Path(config_path).expanduser().parent / "logs" / LOG_FILE_NAME


def _file_handler(log_file: str | Path) -> py_logging.Handler | None:
    path = Path(log_file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return py_logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return None


def configure_logging(
    level: str | int = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[py_logging.Handler] = []
    if stream is not None:
        handlers.append(py_logging.StreamHandler(stream))
    if log_file is not None:
        file_handler = _file_handler(log_file)
        if file_handler is not None:
            handlers.append(file_handler)
    if not handlers:
        # Keep records away from logging.lastResort, which writes to stderr.
        handlers.append(py_logging.NullHandler())

    formatter = py_logging.Formatter(_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger

"""Logging setup for the restwell service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_HANDLER_NAME = "restwell"


def _make_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    return handler


def _install(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    logger.setLevel(level)
    logger.handlers = [h for h in logger.handlers if h.get_name() != _HANDLER_NAME]
    logger.addHandler(handler)


def configure_logging(level: str | int = "INFO") -> None:
    """Install one stream handler on the root and uvicorn loggers.

    Safe to call repeatedly; a previously installed restwell handler is
    replaced rather than duplicated.
    """
    numeric_level = logging.getLevelName(level) if isinstance(level, str) else level
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    handler = _make_handler(numeric_level)
    _install(logging.getLogger(), handler, numeric_level)

    # Uvicorn loggers do not propagate; give them the same handler.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        _install(uvicorn_logger, handler, numeric_level)
        uvicorn_logger.propagate = False

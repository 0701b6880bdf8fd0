"""
crm_assistant/core/logger.py

Centralised logging configuration for the assistant.
Every module should obtain its logger via:

    from crm_assistant.core.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys

from crm_assistant.core.config import settings

#: Third-party loggers that are chatty at INFO (HTTP calls, telemetry, model loads).
_NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "chromadb",
    "sentence_transformers",
)


def _level() -> int:
    return logging.DEBUG if settings.debug else logging.INFO


def _build_handler() -> logging.StreamHandler:
    """Return a stdout handler using the pipe-separated line format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_level())
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _configure_root_logger() -> None:
    """Attach the stdout handler to the root logger once, at import time."""
    root = logging.getLogger()
    if root.handlers:
        # pytest / uvicorn already installed handlers.
        return

    root.setLevel(_level())
    root.addHandler(_build_handler())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger.

    >>> logger = get_logger(__name__)
    >>> logger.info("Session %s loaded", "crm_ai_chat_history:42")
    """
    return logging.getLogger(name)

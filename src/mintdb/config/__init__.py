"""mintdb configuration module."""

from __future__ import annotations

from typing import Any

import structlog

from mintdb.config.logging import configure_library_logging, configure_logging
from mintdb.config.logging import get_logger as _get_logger
from mintdb.config.settings import (
    CONNECTION_FIELDS,
    MintDBSettings,
    clear_settings_cache,
    get_settings,
    set_settings,
)
from mintdb.config.settings import (
    reset_settings as _reset_settings,
)

__all__ = [
    "CONNECTION_FIELDS",
    "MintDBSettings",
    "clear_settings_cache",
    "configure_logging",
    "get_logger",
    "get_settings",
    "reset_settings",
    "set_settings",
]

_structlog_initialized = False
_logger_cache: dict[str, Any] = {}


def _ensure_structlog_configured() -> None:
    """Give structlog a handler-free setup unless the application made one.

    Stdlib handlers are only installed by an explicit ``configure_logging``
    call (the CLI makes one), so importing mintdb never changes them.
    """
    global _structlog_initialized
    if not _structlog_initialized:
        if not structlog.is_configured():
            configure_library_logging()
        _structlog_initialized = True


def get_logger(name: str) -> Any:
    """Get a configured logger instance.

    Loggers are cached locally so hot paths skip the structlog lookup.

    Args:
        name: Logger name (usually __name__).

    Returns:
        Configured structlog logger (cached after first use).
    """
    if name in _logger_cache:
        return _logger_cache[name]

    _ensure_structlog_configured()

    logger = _get_logger(name)
    _logger_cache[name] = logger
    return logger


def reset_settings() -> None:
    """Reset settings and clear logger cache.

    This resets both the settings and the logger cache, ensuring a clean
    state for testing or reconfiguration.
    """
    global _structlog_initialized
    _reset_settings()
    _structlog_initialized = False
    _logger_cache.clear()

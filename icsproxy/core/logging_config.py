"""
Logging setup for the proxy server.

Every record is tagged with the id of the calendar request it belongs to so
that the fetch, transform and response lines of one request can be grouped.
Library loggers (aiohttp, httpx, asyncio) stay at WARNING unless noted.
"""

import logging
import os
from typing import Optional

_TRUTHY = ("1", "true", "yes")
_ACCEPTED_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

LIBRARY_LOG_LEVELS: dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "aiohttp.web_log": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}

FALLBACK_FORMAT = "[%(asctime)s] [%(request_id)s] %(levelname)s - %(name)s - %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Stamp ``record.request_id`` with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        from icsproxy.api.middleware.correlation_id import get_request_id

        record.request_id = get_request_id()
        return True


def _debug_enabled(debug_mode: bool, force_debug: Optional[bool]) -> bool:
    if force_debug is not None:
        return force_debug
    return debug_mode or os.getenv("ICSPROXY_DEBUG", "").lower() in _TRUTHY


def _root_level(debug: bool, log_level: Optional[str]) -> int:
    name = (os.getenv("ICSPROXY_LOG_LEVEL") or log_level or "").upper()
    if name in _ACCEPTED_LEVELS:
        return getattr(logging, name)
    return logging.DEBUG if debug else logging.INFO


def _attach_request_id_filter(root: logging.Logger, level: int) -> None:
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FALLBACK_FORMAT))
        root.addHandler(handler)

    # Handlers from icsproxy._init_logging keep their colour formatter
    for handler in root.handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Apply server log levels.

    Args:
        debug_mode: Log icsproxy modules at DEBUG
        force_debug: When not None, overrides both debug_mode and ICSPROXY_DEBUG
        log_level: Root level from configuration

    Environment Variables:
        ICSPROXY_DEBUG: '1', 'true' or 'yes' turns on debug_mode
        ICSPROXY_LOG_LEVEL: Root level; takes precedence over log_level
    """
    debug = _debug_enabled(debug_mode, force_debug)
    level = _root_level(debug, log_level)

    root = logging.getLogger()
    root.setLevel(level)
    _attach_request_id_filter(root, level)

    for name, library_level in LIBRARY_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)
    logging.getLogger("icsproxy").setLevel(logging.DEBUG if debug else logging.INFO)

    if debug:
        root.info("Debug logging enabled for icsproxy")
    else:
        root.debug("Server logging configured at %s", logging.getLevelName(level))


def get_logging_status() -> dict[str, str]:
    """Current level names of the root, icsproxy and main library loggers."""
    names = ("icsproxy", "aiohttp.access", "httpx", "asyncio")
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    status.update({name: logging.getLevelName(logging.getLogger(name).level) for name in names})
    return status

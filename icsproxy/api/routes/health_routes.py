"""Health check route for container orchestration."""

from __future__ import annotations

import logging
import time
from typing import Any

from aiohttp import web

from icsproxy.core.config_manager import get_config_value
from icsproxy.core.logging_config import get_logging_status
from icsproxy.core.timezone_utils import DEFAULT_TARGET_TIMEZONE

logger = logging.getLogger(__name__)


def register_health_routes(app: web.Application, config: Any, started_at: float) -> None:
    """Register GET /health.

    Args:
        app: aiohttp web application
        config: Application configuration
        started_at: ``time.monotonic()`` value taken when the server started
    """
    from icsproxy import __version__

    async def health_check(_request: web.Request) -> web.Response:
        """Liveness probe; the proxy holds no state that could be unhealthy."""
        return web.json_response(
            {
                "status": "ok",
                "version": __version__,
                "uptime_seconds": round(time.monotonic() - started_at, 1),
                "default_timezone": get_config_value(
                    config, "target_tz", DEFAULT_TARGET_TIMEZONE
                ),
                "log_levels": get_logging_status(),
            }
        )

    app.router.add_get("/health", health_check)
    logger.debug("Health routes registered")

"""aiohttp server for the ICS timezone proxy.

The proxy is stateless: every /calendar.ics request fetches the upstream
feed, rewrites it and returns it. The only process-wide resources are the
shared httpx clients, closed on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import time
from typing import Any

from aiohttp import web

from icsproxy.api.middleware import correlation_id_middleware, cors_middleware
from icsproxy.api.routes import register_calendar_routes, register_health_routes
from icsproxy.core.config_manager import get_config_value
from icsproxy.core.fetcher import IcsFetcher
from icsproxy.core.http_client import close_all_clients
from icsproxy.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _make_app(config: Any, fetcher: IcsFetcher | None = None) -> web.Application:
    """Create the aiohttp application with middlewares and routes.

    Args:
        config: ProxyConfig or mapping
        fetcher: Optional fetcher; one bound to ``config`` is created when omitted
    """
    app = web.Application(middlewares=[correlation_id_middleware, cors_middleware])

    register_calendar_routes(app, config, fetcher or IcsFetcher(config))
    register_health_routes(app, config, started_at=time.monotonic())

    async def _close_upstream_clients(_app: web.Application) -> None:
        try:
            await close_all_clients()
        except Exception as e:
            logger.warning("Upstream HTTP clients not closed cleanly: %s", e)

    app.on_shutdown.append(_close_upstream_clients)
    return app


def _log_startup_banner(config: Any, host: str, port: int) -> None:
    logger.info("ICS proxy listening on http://%s:%d", host, port)
    logger.info("  Endpoint:        /calendar.ics?url=<ics-url>&tz=<IANA>&override=1")
    logger.info("  Health:          /health")
    logger.info(
        "  Default source:  %s",
        get_config_value(config, "source_url") or "(none, ?url= required)",
    )
    logger.info("  Default timezone: %s", get_config_value(config, "target_tz"))
    logger.info("  Override existing: %s", get_config_value(config, "override_existing", True))
    logger.info("  CORS:            any origin (reflected, with credentials)")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def _request_stop() -> None:
        logger.info("Signal received, stopping proxy")
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, _request_stop)


async def _serve(config: Any, external_stop_event: asyncio.Event | None = None) -> None:
    """Serve the proxy until ``external_stop_event`` (or SIGINT/SIGTERM) fires.

    Args:
        config: ProxyConfig or mapping
        external_stop_event: Stop event owned by the caller. When given, no
            signal handlers are installed.

    Raises:
        OSError: The listening socket could not be bound
    """
    host = get_config_value(config, "server_bind", "0.0.0.0")  # nosec: B104 - container default
    port = int(get_config_value(config, "server_port", 3000))

    runner = web.AppRunner(_make_app(config))
    await runner.setup()
    try:
        await web.TCPSite(runner, host=host, port=port).start()
    except OSError:
        logger.exception("Cannot listen on %s:%d", host, port)
        await runner.cleanup()
        raise

    _log_startup_banner(config, host, port)

    if external_stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)
    else:
        stop_event = external_stop_event
        logger.debug("Caller owns the stop event; signal handlers not installed")

    try:
        await stop_event.wait()
    finally:
        logger.info("Stopping ICS proxy")
        await runner.cleanup()
    logger.info("ICS proxy stopped")


def start_server(config: Any) -> None:
    """Configure logging and run the proxy in a new event loop.

    Blocks until SIGINT or SIGTERM. ``config`` is a ProxyConfig or a mapping
    with the same keys (server_bind, server_port, source_url, target_tz,
    override_existing, cache_max_age, request_timeout, log_level,
    debug_logging).
    """
    configure_logging(
        debug_mode=bool(get_config_value(config, "debug_logging", False)),
        log_level=get_config_value(config, "log_level"),
    )

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("ICS proxy interrupted")
    except Exception:
        logger.exception("ICS proxy exited with an error")
        raise

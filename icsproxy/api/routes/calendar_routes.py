"""Calendar proxy route: fetch, transform and serve an ICS feed."""

from __future__ import annotations

import logging
import time
from typing import Any

from aiohttp import web

from icsproxy.calendar.datetime_rewriter import TransformOptions
from icsproxy.calendar.pipeline import transform_ics
from icsproxy.core.config_manager import get_config_value
from icsproxy.core.exceptions import IcsProxyError, MissingSourceError
from icsproxy.core.fetcher import IcsFetcher
from icsproxy.core.models import CalendarRequest
from icsproxy.core.timezone_utils import DEFAULT_TARGET_TIMEZONE, is_likely_iana

logger = logging.getLogger(__name__)

CALENDAR_CONTENT_TYPE = "text/calendar"

MISSING_SOURCE_MESSAGE = (
    "Missing source ICS URL. Provide ?url=... or set ICSPROXY_SOURCE_URL env."
)


def resolve_calendar_request(query: Any, config: Any) -> CalendarRequest:
    """Combine query parameters with configured defaults.

    Args:
        query: Request query mapping (``url``, ``tz``, ``override``)
        config: ProxyConfig or mapping with ``source_url``, ``target_tz``,
            ``override_existing``

    Raises:
        MissingSourceError: Neither the query nor the config supplies a URL
    """
    url_param = query.get("url")
    source_url = url_param if url_param else get_config_value(config, "source_url")
    if not source_url:
        raise MissingSourceError(MISSING_SOURCE_MESSAGE)

    tz_param = query.get("tz")
    if is_likely_iana(tz_param):
        target_tz = tz_param
    else:
        target_tz = get_config_value(config, "target_tz", DEFAULT_TARGET_TIMEZONE)

    override_param = query.get("override")
    if override_param is not None:
        override_existing = override_param == "1"
    else:
        override_existing = bool(get_config_value(config, "override_existing", True))

    return CalendarRequest(
        source_url=source_url, target_tz=target_tz, override_existing=override_existing
    )


def _error_response(status: int, message: str) -> web.Response:
    return web.Response(status=status, text=message, content_type="text/plain")


def register_calendar_routes(app: web.Application, config: Any, fetcher: IcsFetcher) -> None:
    """Register the /calendar.ics proxy route.

    Args:
        app: aiohttp web application
        config: Application configuration (ProxyConfig or mapping)
        fetcher: Upstream fetcher used for every request
    """
    cache_max_age = int(get_config_value(config, "cache_max_age", 600))

    async def calendar_ics(request: web.Request) -> web.Response:
        """Fetch the upstream feed and return it with timezones fixed."""
        start = time.perf_counter()
        logger.info("%s %s from %s", request.method, request.path_qs, request.remote or "unknown")
        logger.debug("Query params: %s", dict(request.query))

        try:
            params = resolve_calendar_request(request.query, config)
            logger.info(
                "Processing: source_url=%s, target_tz=%s, override=%s",
                params.source_url,
                params.target_tz,
                params.override_existing,
            )

            raw = await fetcher.fetch_text(params.source_url)
            logger.info("Fetched ICS data: %d characters", len(raw))

            body = transform_ics(
                raw,
                TransformOptions(
                    target_tz=params.target_tz, override_existing=params.override_existing
                ),
            )
            logger.info("Transformed ICS data: %d characters", len(body))
        except IcsProxyError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.warning("Request failed with %d: %s (%.0fms)", e.http_status, e, duration_ms)
            return _error_response(e.http_status, str(e))
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception("Proxy error: %s (%.0fms)", e, duration_ms)
            return _error_response(500, f"Proxy error: {e}")

        response = web.Response(text=body, content_type=CALENDAR_CONTENT_TYPE, charset="utf-8")
        response.headers["Cache-Control"] = f"public, max-age={cache_max_age}"
        logger.info("Request completed in %.0fms", (time.perf_counter() - start) * 1000)
        return response

    app.router.add_get("/calendar.ics", calendar_ics)
    logger.debug("Calendar routes registered")

"""Upstream ICS fetcher.

A single best-effort GET per request: no retry, no partial results. A
non-success status, a transport failure or an empty body is reported to the
caller as an icsproxy.core.exceptions boundary error.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from icsproxy.core.exceptions import InvalidSourceError, UpstreamEmptyError, UpstreamError
from icsproxy.core.http_client import build_timeout, get_request_headers, get_shared_client
from icsproxy.core.models import FetchResponse

logger = logging.getLogger(__name__)


def validate_source_url(url: str) -> bool:
    """Return True if ``url`` is an http(s) URL with a hostname."""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        logger.debug("URL validation error for %s: %s", url, e)
        return False

    if parsed.scheme not in ("http", "https"):
        logger.debug("Blocked non-HTTP(S) URL: %s", url)
        return False
    if not parsed.hostname:
        logger.debug("Blocked URL with missing hostname: %s", url)
        return False
    return True


class IcsFetcher:
    """Async HTTP client for downloading ICS calendar files."""

    def __init__(self, settings: Any = None, client: Optional[httpx.AsyncClient] = None) -> None:
        """Initialize ICS fetcher.

        Args:
            settings: Object or mapping providing ``request_timeout`` (seconds)
            client: Optional HTTP client; the shared client is used when omitted
        """
        self.settings = settings
        self.client = client

    def _request_timeout(self) -> Optional[float]:
        if self.settings is None:
            return None
        if isinstance(self.settings, dict):
            value = self.settings.get("request_timeout")
        else:
            value = getattr(self.settings, "request_timeout", None)
        return float(value) if value is not None else None

    async def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = await get_shared_client(
                "fetcher", timeout=build_timeout(self._request_timeout())
            )
        return self.client

    async def fetch(self, url: str) -> FetchResponse:
        """Download ``url`` once.

        Args:
            url: Upstream ICS URL

        Returns:
            FetchResponse; ``success`` is False for non-2xx statuses and
            transport errors. Never raises for network problems.
        """
        client = await self._get_client()
        logger.debug("Fetching ICS from %s", url)
        try:
            response = await client.get(url, headers=get_request_headers())
        except httpx.HTTPError as e:
            logger.warning("Transport error fetching ICS from %s: %s", url, e)
            return FetchResponse(success=False, error_message=f"Transport error: {e}")

        if not response.is_success:
            logger.warning("Upstream fetch of %s failed with status %d", url, response.status_code)
            return FetchResponse(
                success=False,
                status_code=response.status_code,
                headers=dict(response.headers),
                error_message=f"HTTP {response.status_code}: {response.reason_phrase}",
            )

        logger.debug("Fetched %s: %d bytes", url, len(response.content))
        return FetchResponse(
            success=True,
            content=response.text,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def fetch_text(self, url: str) -> str:
        """Download ``url`` and return its body, raising boundary errors.

        Raises:
            InvalidSourceError: URL is not http(s) or has no hostname
            UpstreamError: Non-success status or transport failure
            UpstreamEmptyError: Upstream returned an empty body
        """
        if not validate_source_url(url):
            raise InvalidSourceError(f"Invalid source ICS URL: {url}")

        result = await self.fetch(url)
        if not result.success:
            status = result.status_code if result.status_code is not None else "no response"
            raise UpstreamError(f"Upstream fetch failed ({status})", result.status_code)
        if result.content_length == 0:
            raise UpstreamEmptyError("Upstream returned empty body", result.status_code)
        logger.debug(
            "Upstream %s answered %s with %d characters",
            url,
            result.status_code,
            result.content_length,
        )
        return result.content

"""Pooled httpx clients for upstream calendar requests.

Clients are keyed by name and live until close_all_clients() runs at server
shutdown, so repeated polls of the same Office 365 feed reuse connections.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 30.0

_POOL_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5)

# Some Office 365 tenants reject non-browser user agents
UPSTREAM_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/calendar, text/plain, application/octet-stream, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
}

_clients: dict[str, httpx.AsyncClient] = {}
_clients_lock = asyncio.Lock()


def build_timeout(read_timeout: Optional[float]) -> httpx.Timeout:
    """Timeout with ``read_timeout`` seconds for the body (default 30)."""
    read = DEFAULT_READ_TIMEOUT if read_timeout is None else float(read_timeout)
    return httpx.Timeout(connect=CONNECT_TIMEOUT, read=read, write=CONNECT_TIMEOUT, pool=read)


def get_request_headers() -> dict[str, str]:
    """Upstream headers, tagged with the current request id when serving a request."""
    from icsproxy.api.middleware.correlation_id import NO_REQUEST_ID, get_request_id

    headers = dict(UPSTREAM_HEADERS)
    request_id = get_request_id()
    if request_id != NO_REQUEST_ID:
        headers["X-Request-ID"] = request_id
    return headers


def _create_client(timeout: httpx.Timeout) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=UPSTREAM_HEADERS,
        timeout=timeout,
        limits=_POOL_LIMITS,
        follow_redirects=True,
    )


async def get_shared_client(
    name: str = "default", timeout: Optional[httpx.Timeout] = None
) -> httpx.AsyncClient:
    """Return the pooled client called ``name``, creating it on first use.

    Args:
        name: Pool key
        timeout: Applied only when the client is created

    Raises:
        RuntimeError: The client could not be constructed
    """
    async with _clients_lock:
        client = _clients.get(name)
        if client is None or client.is_closed:
            try:
                client = _create_client(timeout or build_timeout(None))
            except Exception as e:
                logger.exception("Could not create HTTP client %r", name)
                raise RuntimeError(f"Could not create HTTP client {name!r}: {e}") from e
            _clients[name] = client
            logger.debug("Created HTTP client %r", name)
        return client


async def close_all_clients() -> None:
    """Close every pooled client; called on server shutdown."""
    async with _clients_lock:
        while _clients:
            name, client = _clients.popitem()
            if client.is_closed:
                continue
            try:
                await client.aclose()
            except Exception as e:
                logger.warning("Error closing HTTP client %r: %s", name, e)
            else:
                logger.debug("Closed HTTP client %r", name)
    logger.debug("HTTP clients closed")

"""aiohttp middlewares for the icsproxy server."""

from .correlation_id import correlation_id_middleware, get_request_id
from .cors import cors_middleware

__all__ = ["correlation_id_middleware", "cors_middleware", "get_request_id"]

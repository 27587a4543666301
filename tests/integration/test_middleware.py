"""Integration tests for correlation id and CORS middlewares."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from icsproxy.api.middleware import correlation_id_middleware, cors_middleware, get_request_id

pytestmark = pytest.mark.integration


@pytest.fixture
def test_app() -> web.Application:
    """Create a test application echoing the request id seen by the handler."""
    app = web.Application(middlewares=[correlation_id_middleware, cors_middleware])

    async def echo(request: web.Request) -> web.Response:
        return web.json_response(
            {"context_id": get_request_id(), "request_id": request["correlation_id"]}
        )

    app.router.add_get("/echo", echo)
    return app


@pytest.fixture
async def test_client(test_app: web.Application):
    """Create a test client for the app."""
    async with TestClient(TestServer(test_app)) as client:
        yield client


class TestCorrelationIdMiddleware:
    """Tests for correlation_id_middleware."""

    async def test_request_id_header_is_propagated(self, test_client: TestClient) -> None:
        response = await test_client.get("/echo", headers={"X-Request-ID": "abc-123"})

        data = await response.json()
        assert data == {"context_id": "abc-123", "request_id": "abc-123"}
        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_correlation_id_header_used_as_fallback(self, test_client: TestClient) -> None:
        response = await test_client.get("/echo", headers={"X-Correlation-ID": "corr-9"})

        assert response.headers["X-Request-ID"] == "corr-9"

    async def test_request_id_generated_when_absent(self, test_client: TestClient) -> None:
        response = await test_client.get("/echo")

        data = await response.json()
        assert len(response.headers["X-Request-ID"]) == 36
        assert data["context_id"] == response.headers["X-Request-ID"]

    async def test_context_reset_after_request(self, test_client: TestClient) -> None:
        await test_client.get("/echo", headers={"X-Request-ID": "abc-123"})

        assert get_request_id() == "no-request-id"


class TestCorsMiddleware:
    """Tests for cors_middleware."""

    async def test_origin_is_reflected_with_credentials(self, test_client: TestClient) -> None:
        response = await test_client.get("/echo", headers={"Origin": "https://calendar.example"})

        assert response.headers["Access-Control-Allow-Origin"] == "https://calendar.example"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"

    async def test_no_cors_headers_without_origin(self, test_client: TestClient) -> None:
        response = await test_client.get("/echo")

        assert "Access-Control-Allow-Origin" not in response.headers

    async def test_preflight_returns_204(self, test_client: TestClient) -> None:
        response = await test_client.options(
            "/echo",
            headers={
                "Origin": "https://calendar.example",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status == 204
        assert "GET" in response.headers["Access-Control-Allow-Methods"]
        assert response.headers["Access-Control-Allow-Origin"] == "https://calendar.example"

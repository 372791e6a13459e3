"""Tests for HttpFetcher."""

import httpx
import pytest
from fsp_collection.errors import TransportError
from fsp_collection.transport import HttpFetcher

pytestmark = pytest.mark.anyio


def _fetcher(handler, **kwargs) -> HttpFetcher:
    client = httpx.AsyncClient(base_url="http://api.test", transport=httpx.MockTransport(handler))
    return HttpFetcher(client=client, **kwargs)


class TestHttpFetcher:
    """Tests for HttpFetcher.fetch()."""

    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [{"id": 1}], "total": 31, "total_pages": 3})

        result = await _fetcher(handler).fetch("/participants", "page=2&per_page=15")

        assert result.rows == [{"id": 1}]
        assert result.total == 31
        assert result.total_pages == 3
        assert seen[0].url.path == "/participants"
        assert seen[0].url.params["page"] == "2"

    async def test_empty_query_string(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "http://api.test/items"
            return httpx.Response(200, json={"data": []})

        result = await _fetcher(handler).fetch("/items", "")
        assert result.total_pages == 1

    async def test_error_status_uses_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="database unavailable")

        with pytest.raises(TransportError) as exc_info:
            await _fetcher(handler).fetch("/items", "page=1")
        assert str(exc_info.value) == "database unavailable"
        assert exc_info.value.status_code == 500

    async def test_error_status_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with pytest.raises(TransportError, match="HTTP 404"):
            await _fetcher(handler).fetch("/items", "page=1")

    async def test_unauthorized_calls_hook(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Authentication required")

        fetcher = _fetcher(handler, on_unauthorized=lambda: calls.append("login"))
        with pytest.raises(TransportError, match="Authentication required"):
            await fetcher.fetch("/items", "page=1")
        assert calls == ["login"]

    async def test_unauthorized_on_auth_endpoint_skips_hook(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401)

        fetcher = _fetcher(handler, on_unauthorized=lambda: calls.append("login"))
        with pytest.raises(TransportError):
            await fetcher.fetch("/auth/sessions", "page=1")
        assert calls == []

    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="connection refused"):
            await _fetcher(handler).fetch("/items", "page=1")

    async def test_unparsable_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(TransportError, match="Invalid response body"):
            await _fetcher(handler).fetch("/items", "page=1")

    async def test_wrong_payload_shape(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"id": 1}})

        with pytest.raises(TransportError, match="Invalid response body"):
            await _fetcher(handler).fetch("/items", "page=1")


class TestHttpFetcherClient:
    """Tests for client construction and teardown."""

    async def test_default_headers(self):
        fetcher = HttpFetcher(base_url="http://api.test", headers={"X-Session-ID": "abc"})
        try:
            assert fetcher.client.headers["Content-Type"] == "application/json"
            assert fetcher.client.headers["X-Session-ID"] == "abc"
            assert fetcher.client.base_url.host == "api.test"
        finally:
            await fetcher.aclose()
        assert fetcher.client.is_closed

    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(base_url="http://api.test")
        async with HttpFetcher(client=client):
            pass
        assert not client.is_closed
        await client.aclose()

"""
Upstream client tests

The remote service is replaced by httpx.MockTransport (see conftest.py).
"""

import httpx
import pytest

from cat_proxy.upstream import UpstreamClient
from conftest import UPSTREAM_URL


class TestFetch:
    """UpstreamClient.fetch"""

    @pytest.mark.asyncio
    async def test_fetch_success(self, fake_upstream, upstream_client):
        fake_upstream.images["418"] = b"teapot"

        assert await upstream_client.fetch("418") == b"teapot"
        assert fake_upstream.requests == ["/418"]

    @pytest.mark.asyncio
    async def test_fetch_not_found(self, upstream_client):
        assert await upstream_client.fetch("999") is None

    @pytest.mark.asyncio
    async def test_fetch_server_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        client = UpstreamClient(base_url=UPSTREAM_URL, transport=transport)

        assert await client.fetch("200") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_unreachable(self, fake_upstream, upstream_client):
        fake_upstream.images["200"] = b"ok"
        fake_upstream.reachable = False

        assert await upstream_client.fetch("200") is None

    @pytest.mark.asyncio
    async def test_follows_five_redirects(self, fake_upstream, upstream_client):
        fake_upstream.images["301"] = b"moved"
        fake_upstream.redirects["301"] = 5

        assert await upstream_client.fetch("301") == b"moved"
        assert fake_upstream.requests[-1] == "/301/hop/5"

    @pytest.mark.asyncio
    async def test_sixth_redirect_fails(self, fake_upstream, upstream_client):
        fake_upstream.images["301"] = b"moved"
        fake_upstream.redirects["301"] = 6

        assert await upstream_client.fetch("301") is None

    @pytest.mark.asyncio
    async def test_no_retry(self, fake_upstream, upstream_client):
        fake_upstream.reachable = False

        await upstream_client.fetch("200")
        assert fake_upstream.requests == ["/200"]

    @pytest.mark.asyncio
    async def test_invalid_url_is_a_failed_fetch(self):
        def handler(request):
            raise httpx.InvalidURL("bad upstream url")

        client = UpstreamClient(base_url=UPSTREAM_URL, transport=httpx.MockTransport(handler))

        assert await client.fetch("200") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        def handler(request):
            raise RuntimeError("bug in transport")

        client = UpstreamClient(base_url=UPSTREAM_URL, transport=httpx.MockTransport(handler))

        with pytest.raises(RuntimeError):
            await client.fetch("200")
        await client.aclose()


class TestClientSetup:

    def test_url_for_strips_trailing_slash(self):
        client = UpstreamClient(base_url="https://http.cat/")
        assert client.url_for("404") == "https://http.cat/404"

    def test_redirect_limit(self):
        client = UpstreamClient(max_redirects=5)
        assert client.http_client.follow_redirects is True
        assert client.http_client.max_redirects == 5

    def test_default_timeout_is_httpx_default(self):
        client = UpstreamClient()
        assert client.http_client.timeout == httpx.AsyncClient().timeout

    def test_configured_timeout(self):
        client = UpstreamClient(timeout=12.5)
        assert client.http_client.timeout == httpx.Timeout(12.5)

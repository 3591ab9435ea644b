"""
Cat Proxy test configuration

Fixtures shared by all test modules:
- stores (in-memory and on-disk)
- a scripted upstream image service backed by httpx.MockTransport
- a FastAPI TestClient wired to both
"""

import sys
from pathlib import Path
from typing import Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from cat_proxy.app import create_app
from cat_proxy.config import ProxySettings
from cat_proxy.store import DiskImageStore, MemoryImageStore
from cat_proxy.upstream import UpstreamClient


UPSTREAM_URL = "https://cats.test"


# ============================================
# Upstream Fakes
# ============================================

class FakeUpstream:
    """
    Scripted stand-in for the remote image service.

    - images:    code -> bytes served with 200
    - redirects: code -> number of 302 hops before the image is served
    - reachable: when False every request fails with a connection error
    """

    def __init__(self):
        self.images: Dict[str, bytes] = {}
        self.redirects: Dict[str, int] = {}
        self.reachable = True
        self.requests: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        if not self.reachable:
            raise httpx.ConnectError("upstream unreachable", request=request)

        parts = request.url.path.strip("/").split("/")
        code = parts[0]
        hop = int(parts[2]) if len(parts) == 3 and parts[1] == "hop" else 0

        if hop < self.redirects.get(code, 0):
            return httpx.Response(302, headers={"Location": f"/{code}/hop/{hop + 1}"})
        if code in self.images:
            return httpx.Response(
                200,
                content=self.images[code],
                headers={"Content-Type": "image/jpeg"},
            )
        return httpx.Response(404, text="Not Found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def fetch_count(self) -> int:
        return sum(1 for path in self.requests if "/hop/" not in path)


@pytest.fixture
def fake_upstream():
    """Upstream service with no images and full reachability."""
    return FakeUpstream()


@pytest.fixture
def upstream_client(fake_upstream):
    """UpstreamClient talking to the fake upstream."""
    return UpstreamClient(base_url=UPSTREAM_URL, transport=fake_upstream.transport())


# ============================================
# Store Fixtures
# ============================================

@pytest.fixture
def memory_store():
    return MemoryImageStore()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def disk_store(cache_dir):
    return DiskImageStore(cache_dir)


# ============================================
# App Fixtures
# ============================================

@pytest.fixture
def settings(cache_dir):
    return ProxySettings(host="127.0.0.1", port=0, cache_dir=cache_dir, upstream_url=UPSTREAM_URL)


@pytest.fixture
def app(settings, disk_store, upstream_client):
    return create_app(settings, store=disk_store, upstream=upstream_client)


@pytest.fixture
def client(app):
    """TestClient with lifespan events running (closes the upstream client)."""
    with TestClient(app) as test_client:
        yield test_client

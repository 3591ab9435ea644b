"""
Upstream Client

Fetches cat images from the remote image-by-code service on a cache miss.
Any failure (network error, non-2xx status, too many redirects) is
reported as "no image" so the caller can answer 404. Nothing is retried.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_URL = "https://http.cat"
DEFAULT_MAX_REDIRECTS = 5


class UpstreamClient:
    """
    Thin wrapper around httpx.AsyncClient for `GET <base_url>/<code>`.

    Usage:
        upstream = UpstreamClient()
        data = await upstream.fetch("418")
        await upstream.aclose()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_UPSTREAM_URL,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")

        client_kwargs: Dict[str, Any] = {
            "follow_redirects": True,
            "max_redirects": max_redirects,
            "headers": {"Accept": "image/*,*/*;q=0.8"},
        }
        # Leave the transport default in place unless a timeout is configured
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport

        self.http_client = httpx.AsyncClient(**client_kwargs)

    def url_for(self, code: str) -> str:
        return f"{self.base_url}/{code}"

    async def fetch(self, code: str) -> Optional[bytes]:
        """
        Download the image for `code`.

        Returns:
            The full response body on success, None on any HTTP or
            transport failure. Other errors propagate to the caller.
        """
        url = self.url_for(code)
        try:
            logger.info(f"[Upstream] Fetching: {url}")
            response = await self.http_client.get(url)
            response.raise_for_status()
        except httpx.TooManyRedirects:
            logger.warning(f"[Upstream] Too many redirects: {url}")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"[Upstream] HTTP error {e.response.status_code}: {url}")
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"[Upstream] Fetch error for {url}: {e!r}")
            return None

        data = response.content
        logger.info(f"[Upstream] Fetched: {url} ({len(data)} bytes)")
        return data

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

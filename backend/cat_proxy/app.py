"""
Cat Proxy Application

FastAPI app factory. Wires the image store, the upstream client and the
cache-aside service together, and makes sure every failure leaves the
server as one of the fixed plain-text responses.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ProxySettings
from .errors import ProxyError, UnsupportedMethod
from .routes_fastapi import error_response, internal_error_response, raw_request_path, router
from .service import CatImageService, code_from_path
from .store import DiskImageStore, ImageStore
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ProxySettings] = None,
    store: Optional[ImageStore] = None,
    upstream: Optional[UpstreamClient] = None,
) -> FastAPI:
    """
    Build the proxy app.

    Args:
        settings: Runtime settings (defaults to ProxySettings.from_env())
        store: Image store; a DiskImageStore on settings.cache_dir if omitted
        upstream: Upstream client; built from settings if omitted
    """
    if settings is None:
        settings = ProxySettings.from_env()
    if store is None:
        store = DiskImageStore(settings.cache_dir)
    if upstream is None:
        upstream = UpstreamClient(
            base_url=settings.upstream_url,
            max_redirects=settings.max_redirects,
            timeout=settings.fetch_timeout,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await upstream.aclose()
        logger.info("[CatProxy] Upstream client closed")

    app = FastAPI(
        title="Cat Proxy",
        description="Caching proxy for cat images keyed by HTTP status code",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = CatImageService(store=store, upstream=upstream)

    app.include_router(router)

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Routing-level rejections (e.g. an unlisted method) still follow
        # the path-first rule: bad path is 400, otherwise 405.
        try:
            code_from_path(raw_request_path(request))
        except ProxyError as e:
            return error_response(e)
        if exc.status_code == 405:
            return error_response(UnsupportedMethod())
        logger.warning(f"[CatProxy] Unexpected routing error {exc.status_code}: {request.url.path}")
        return internal_error_response()

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"[CatProxy] Unhandled exception: {exc!r}", exc_info=True)
        return internal_error_response()

    return app

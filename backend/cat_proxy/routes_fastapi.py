"""
Cat Proxy API Routes

Single catch-all route:
- GET    /<code>  image from cache, or fetched from upstream and cached
- PUT    /<code>  store the request body as the image for <code>
- DELETE /<code>  remove the cached image for <code>

Any other method gets 405. A path whose first segment isn't a 3-digit
code gets 400 whatever the method.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

from .errors import ProxyError, UnsupportedMethod
from .service import CatImageService, code_from_path

logger = logging.getLogger(__name__)

# Starlette answers 405 itself for methods not listed here; app.py routes
# that case back through the same path check.
ROUTED_METHODS = ["GET", "PUT", "DELETE", "POST", "PATCH", "OPTIONS", "TRACE"]


def raw_request_path(request: Request) -> str:
    """
    The request path as sent on the wire, before percent-decoding.

    Codes are matched against this form so `/%34%31%38` is not read as
    `/418`.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return request.url.path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


def text_response(status_code: int, message: str, headers=None) -> PlainTextResponse:
    """Plain-text, newline-terminated UTF-8 body."""
    return PlainTextResponse(f"{message}\n", status_code=status_code, headers=headers)


def error_response(exc: ProxyError) -> PlainTextResponse:
    return text_response(exc.status_code, exc.message, headers=exc.headers)


def internal_error_response() -> PlainTextResponse:
    return text_response(500, "Internal Server Error")


# ============================================
# Router
# ============================================

router = APIRouter(tags=["Cat Proxy"])


@router.api_route("/{path:path}", methods=ROUTED_METHODS, include_in_schema=False)
async def handle_code(request: Request):
    """
    Validate the path, then dispatch on the method.

    Example:
        GET /418
    """
    service: CatImageService = request.app.state.service
    try:
        code = code_from_path(raw_request_path(request))
        method = request.method.upper()

        if method == "GET":
            result = await service.read(code)
            return Response(
                content=result.data,
                media_type=result.content_type,
                headers={"X-Cache": "HIT" if result.cached else "MISS"},
            )
        if method == "PUT":
            body = await request.body()
            await service.store_image(code, body)
            return text_response(201, "Created")
        if method == "DELETE":
            await service.delete(code)
            return text_response(200, "OK")

        raise UnsupportedMethod()

    except ProxyError as e:
        logger.debug(f"[CatProxy] {request.method} {request.url.path} -> {e.status_code}")
        return error_response(e)
    except Exception:
        logger.exception(f"[CatProxy] Unhandled error: {request.method} {request.url.path}")
        return internal_error_response()

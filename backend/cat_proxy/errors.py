"""
Cat Proxy Errors

Fixed error taxonomy for the proxy. Every failure a request can hit is
one of these, turned into a plain-text response at the request boundary.
Nothing about the underlying cause is sent back to the caller.
"""

from typing import Dict, Optional

ALLOWED_METHODS = ("GET", "PUT", "DELETE")


class ProxyError(Exception):
    """Base class for errors that map onto a fixed HTTP response."""

    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    @property
    def headers(self) -> Dict[str, str]:
        return {}


class InvalidCode(ProxyError):
    """Path segment is not a 3-digit status code."""

    status_code = 400
    message = "Bad Request: path must be /<http-code>"


class EmptyPayload(ProxyError):
    """PUT without a body."""

    status_code = 400
    message = "Empty body"


class EntryAbsent(ProxyError):
    """No cache entry, and (for reads) the upstream could not supply one."""

    status_code = 404
    message = "Not Found"


class UnsupportedMethod(ProxyError):
    """Anything other than GET, PUT or DELETE."""

    status_code = 405
    message = "Method Not Allowed"

    @property
    def headers(self) -> Dict[str, str]:
        return {"Allow": ", ".join(ALLOWED_METHODS)}

"""
Cat Image Service

Cache-aside logic in front of the upstream image service:

- read:   local store first, upstream on miss (and populate the store)
- store:  overwrite the entry for a code
- delete: remove the entry for a code

Codes are validated by the caller. Requests are not serialized per code:
two concurrent misses for the same code both fetch and both write, and the
last write wins.
"""

import logging
import re
from dataclasses import dataclass

from .errors import EmptyPayload, EntryAbsent, InvalidCode
from .store import ImageStore
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"[0-9]{3}")

IMAGE_CONTENT_TYPE = "image/jpeg"


def is_status_code(segment: str) -> bool:
    """True if `segment` is exactly three ASCII digits."""
    return CODE_PATTERN.fullmatch(segment) is not None


def code_from_path(path: str) -> str:
    """
    Extract the status code from a request path.

    Leading and trailing slashes are stripped and only the first segment
    is kept, so `/404/` and `/404/anything` both yield `404`.

    Raises:
        InvalidCode: if the first segment is not a 3-digit code.
    """
    segment = path.strip("/").split("/")[0]
    if not is_status_code(segment):
        raise InvalidCode()
    return segment


@dataclass
class ImageResult:
    """Bytes returned by a read, plus whether they came from the store."""
    data: bytes
    cached: bool
    content_type: str = IMAGE_CONTENT_TYPE


class CatImageService:
    """Resolves status codes to image bytes using a store and an upstream."""

    def __init__(self, store: ImageStore, upstream: UpstreamClient):
        self.store = store
        self.upstream = upstream

    async def read(self, code: str) -> ImageResult:
        """
        Get the image for `code`.

        1. Return the stored entry if there is one (no staleness check)
        2. Otherwise fetch from upstream and save the bytes before returning

        Raises:
            EntryAbsent: cache miss and either the upstream fetch or the
                write to the store failed.
        """
        data = await self.store.load(code)
        if data is not None:
            logger.debug(f"[CatProxy] Cache hit: {code}")
            return ImageResult(data=data, cached=True)

        data = await self.upstream.fetch(code)
        if data is None:
            raise EntryAbsent()

        try:
            await self.store.save(code, data)
        except OSError as e:
            logger.warning(f"[CatProxy] Could not cache {code}: {e!r}")
            raise EntryAbsent()
        logger.info(f"[CatProxy] Cached {code} ({len(data)} bytes)")
        return ImageResult(data=data, cached=False)

    async def store_image(self, code: str, data: bytes) -> None:
        """
        Replace the entry for `code` with `data`.

        Raises:
            EmptyPayload: `data` is empty; the store is left untouched.
        """
        if not data:
            raise EmptyPayload()
        await self.store.save(code, data)
        logger.info(f"[CatProxy] Stored {code} ({len(data)} bytes)")

    async def delete(self, code: str) -> None:
        """
        Remove the entry for `code`.

        Raises:
            EntryAbsent: there was no entry.
        """
        if not await self.store.remove(code):
            raise EntryAbsent()
        logger.info(f"[CatProxy] Deleted {code}")

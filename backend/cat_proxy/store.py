"""
Image Store

Storage capability behind the cat proxy. The service only talks to an
ImageStore, so the disk-backed implementation can be swapped for the
in-memory one in tests.

Disk layout:
cache_dir/
├── 200.jpg
├── 404.jpg
└── ...

The directory listing is the index: no metadata file, no expiry, no
checksum. Writes are plain overwrites and are not atomic against a
concurrent reader of the same code.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

IMAGE_EXTENSION = ".jpg"


class ImageStore(ABC):
    """Read/write/delete image bytes by status code."""

    @abstractmethod
    async def load(self, code: str) -> Optional[bytes]:
        """Return the stored bytes for `code`, or None if there is no entry."""

    @abstractmethod
    async def save(self, code: str, data: bytes) -> None:
        """Write `data` for `code`, replacing any existing entry."""

    @abstractmethod
    async def remove(self, code: str) -> bool:
        """Delete the entry for `code`. Returns False if there was none."""


class DiskImageStore(ImageStore):
    """
    Stores one `<code>.jpg` file per cached code in a flat directory.

    File operations run in a worker thread so a slow disk does not stall
    other requests on the event loop.
    """

    def __init__(self, cache_dir: Union[str, Path], create: bool = True):
        self.cache_dir = Path(cache_dir)
        if create:
            self._init_cache_dir()

    def _init_cache_dir(self) -> None:
        """Create the cache directory if it doesn't exist."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"[ImageStore] Cache directory: {self.cache_dir.resolve()}")

    def path_for(self, code: str) -> Path:
        """Get the file path for a cached image."""
        return self.cache_dir / f"{code}{IMAGE_EXTENSION}"

    async def load(self, code: str) -> Optional[bytes]:
        path = self.path_for(code)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            # An unreadable entry (directory, permissions) counts as a miss
            logger.warning(f"[ImageStore] Cannot read {path.name}: {e!r}")
            return None
        logger.debug(f"[ImageStore] Read {path.name} ({len(data)} bytes)")
        return data

    async def save(self, code: str, data: bytes) -> None:
        path = self.path_for(code)
        await asyncio.to_thread(path.write_bytes, data)
        logger.debug(f"[ImageStore] Wrote {path.name} ({len(data)} bytes)")

    async def remove(self, code: str) -> bool:
        path = self.path_for(code)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"[ImageStore] Cannot remove {path.name}: {e!r}")
            return False
        logger.debug(f"[ImageStore] Removed {path.name}")
        return True


class MemoryImageStore(ImageStore):
    """Dict-backed store with the same contract as DiskImageStore."""

    def __init__(self, entries: Optional[Dict[str, bytes]] = None):
        self._entries: Dict[str, bytes] = dict(entries or {})

    def __contains__(self, code: str) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self, code: str) -> Optional[bytes]:
        return self._entries.get(code)

    async def save(self, code: str, data: bytes) -> None:
        self._entries[code] = bytes(data)

    async def remove(self, code: str) -> bool:
        return self._entries.pop(code, None) is not None

"""
Cat Proxy

Caching proxy for cat images keyed by HTTP status code.

Features:
- Disk cache of one <code>.jpg per status code
- Read-through fetch from the upstream image service on cache miss
- Direct store (PUT) and delete (DELETE) on the same keyspace
"""

from .app import create_app
from .config import ProxySettings
from .service import CatImageService, ImageResult, code_from_path, is_status_code
from .store import DiskImageStore, ImageStore, MemoryImageStore
from .upstream import UpstreamClient

__version__ = "1.0.0"

__all__ = [
    "create_app",
    "ProxySettings",
    "CatImageService",
    "ImageResult",
    "code_from_path",
    "is_status_code",
    "ImageStore",
    "DiskImageStore",
    "MemoryImageStore",
    "UpstreamClient",
]

"""
Cat Proxy Configuration

Settings come from CAT_PROXY_* environment variables; explicit values
(e.g. CLI flags) take precedence.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .upstream import DEFAULT_MAX_REDIRECTS, DEFAULT_UPSTREAM_URL

ENV_PREFIX = "CAT_PROXY_"


class ProxySettings(BaseModel):
    """Runtime settings for the proxy server."""
    host: str = Field("127.0.0.1", description="Interface to listen on")
    port: int = Field(8080, ge=0, le=65535, description="TCP port to listen on")
    cache_dir: Path = Field(Path("./cache"), description="Directory holding <code>.jpg files")

    upstream_url: str = Field(DEFAULT_UPSTREAM_URL, description="Remote image-by-code service")
    max_redirects: int = Field(DEFAULT_MAX_REDIRECTS, ge=0, description="Redirect hops followed per fetch")
    fetch_timeout: Optional[float] = Field(None, gt=0, description="Upstream timeout in seconds (None: httpx default)")

    log_level: str = Field("info", description="Logging level name")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ProxySettings":
        """
        Build settings from the environment.

        Overrides that are None are ignored so optional CLI flags fall back
        to the environment and then to the defaults.
        """
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

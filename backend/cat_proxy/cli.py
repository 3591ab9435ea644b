"""
Cat Proxy command line entry point.

    cat-proxy --host 127.0.0.1 --port 8080 --cache ./cache

Creates the cache directory if needed, configures logging and serves the
app with uvicorn.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError

from .app import create_app
from .config import ProxySettings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="cat-proxy",
    help="Serve http.cat images from a local disk cache.",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


@app.command()
def serve(
    host: str = typer.Option(..., "--host", "-h", help="Server host."),
    port: int = typer.Option(..., "--port", "-p", min=0, max=65535, help="Server port (0-65535)."),
    cache: Path = typer.Option(..., "--cache", "-c", help="Cache directory, created if absent."),
    upstream: Optional[str] = typer.Option(None, "--upstream", help="Upstream image service base URL."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Run the caching proxy."""
    try:
        settings = ProxySettings.from_env(
            host=host,
            port=port,
            cache_dir=cache,
            upstream_url=upstream,
            log_level=log_level,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e))

    configure_logging(settings.log_level)
    proxy = create_app(settings)

    logger.info(
        f"Server listening on http://{settings.host}:{settings.port} "
        f"(cache: {settings.cache_dir.resolve()})"
    )
    uvicorn.run(
        proxy,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()

"""CLI entry point for the OpenAPI reader."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from .config import Settings, get_settings
from .logging import configure_logging
from .openapi import OpenAPILoadError
from .server import build_server

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve operation details from an OpenAPI document over MCP"
    )
    parser.add_argument(
        "source",
        nargs="?",
        default=None,
        help="OpenAPI file, directory holding openapi.yaml/openapi.yml, or URL "
        "(defaults to OPENAPI_PATH)",
    )
    return parser.parse_args(argv)


async def _run(settings: Settings) -> None:
    mcp, app = await build_server(settings)

    if app is not None:
        config = uvicorn.Config(app, host=settings.reader_host, port=settings.reader_port)
        server = uvicorn.Server(config)
        await server.serve()
        return
    await mcp.run_stdio_async()


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()
    if args.source:
        settings = settings.model_copy(update={"openapi_path": args.source})
    configure_logging(settings.reader_log_level)

    try:
        asyncio.run(_run(settings))
    except OpenAPILoadError as exc:
        logger.error("Failed to initialize OpenAPI server: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()

"""MCP server setup for the OpenAPI reader."""

import logging
from typing import Annotated, Any, Dict

from fastmcp import FastMCP
from pydantic import Field
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import Settings
from .openapi import OpenAPILoader
from .service import ReaderService

logger = logging.getLogger(__name__)

TOOL_NAME = "get_api_details"
TOOL_DESCRIPTION = "Get API details by operationId from OpenAPI specification loaded at startup"

# READER_TRANSPORT value -> FastMCP.http_app options; anything else runs over stdio.
HTTP_TRANSPORTS: Dict[str, Dict[str, Any]] = {
    "http": {"transport": "http", "stateless_http": True, "json_response": True},
    "streamable-http": {
        "transport": "streamable-http",
        "stateless_http": True,
        "json_response": True,
    },
    "sse": {"transport": "sse"},
}


async def build_server(settings: Settings) -> tuple[FastMCP, object | None]:
    loader = OpenAPILoader(
        timeout_seconds=settings.openapi_timeout_seconds,
        strict_operation_ids=settings.strict_operation_ids,
    )
    description = await loader.load(settings.openapi_path)
    service = ReaderService(description)

    mcp = FastMCP(settings.service_name, version=settings.service_version)
    mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)(_tool_handler(service))
    logger.info("Registered tool: %s", TOOL_NAME)

    return mcp, _build_http_app(mcp, settings.reader_transport)


def _tool_handler(service: ReaderService):  # type: ignore[no-untyped-def]
    async def get_api_details(
        operation_id: Annotated[str, Field(description="the operationId to get details for")],
    ) -> str:
        return service.get_api_details(operation_id)

    return get_api_details


def _build_http_app(mcp: FastMCP, transport: str):  # type: ignore[no-untyped-def]
    options = HTTP_TRANSPORTS.get(transport.lower())
    if options is None:
        return None

    app = mcp.http_app(**options)
    app.add_route("/health", _healthcheck, methods=["GET"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("Serving MCP over %s", options["transport"])
    return app


async def _healthcheck(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})

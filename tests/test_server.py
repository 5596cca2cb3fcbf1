"""MCP server and CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastmcp import Client
from starlette.testclient import TestClient

from openapi_reader import main as main_module
from openapi_reader.config import Settings, get_settings
from openapi_reader.openapi import OpenAPILoadError
from openapi_reader.server import TOOL_NAME, build_server

PETSTORE = Path(__file__).parent / "fixtures" / "petstore.yaml"


def _settings(**overrides) -> Settings:
    return Settings(openapi_path=str(PETSTORE), **overrides)


@pytest.mark.asyncio
async def test_tool_is_registered() -> None:
    mcp, app = await build_server(_settings())
    assert app is None

    async with Client(mcp) as client:
        tools = await client.list_tools()

    assert [tool.name for tool in tools] == [TOOL_NAME]
    schema = tools[0].inputSchema
    assert schema["required"] == ["operation_id"]
    assert schema["properties"]["operation_id"]["type"] == "string"
    assert schema["properties"]["operation_id"]["description"] == (
        "the operationId to get details for"
    )


@pytest.mark.asyncio
async def test_call_tool_returns_details() -> None:
    mcp, _ = await build_server(_settings())

    async with Client(mcp) as client:
        result = await client.call_tool(TOOL_NAME, {"operation_id": "createOrder"})

    assert result.is_error is False
    text = result.content[0].text
    assert '"operation_id": "createOrder"' in text
    assert '"request_body"' in text


@pytest.mark.asyncio
async def test_call_tool_not_found_is_not_an_error() -> None:
    mcp, _ = await build_server(_settings())

    async with Client(mcp) as client:
        result = await client.call_tool(TOOL_NAME, {"operation_id": "doesNotExist"})

    assert result.is_error is False
    assert result.content[0].text == (
        "Operation with ID 'doesNotExist' not found in the OpenAPI specification"
    )


@pytest.mark.asyncio
async def test_build_server_fails_without_document(tmp_path) -> None:
    with pytest.raises(OpenAPILoadError):
        await build_server(Settings(openapi_path=str(tmp_path)))


@pytest.mark.asyncio
async def test_strict_operation_ids(tmp_path) -> None:
    (tmp_path / "openapi.yaml").write_text(
        "openapi: 3.0.0\n"
        "paths:\n"
        "  /a:\n"
        "    get: {operationId: dup}\n"
        "  /b:\n"
        "    get: {operationId: dup}\n"
    )
    with pytest.raises(OpenAPILoadError, match="duplicate operationId"):
        await build_server(Settings(openapi_path=str(tmp_path), strict_operation_ids=True))


@pytest.mark.asyncio
async def test_http_transport_exposes_healthcheck() -> None:
    _, app = await build_server(_settings(reader_transport="http"))
    assert app is not None

    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_sse_transport_exposes_healthcheck() -> None:
    _, app = await build_server(_settings(reader_transport="SSE"))

    response = TestClient(app).get("/health")

    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_unknown_transport_falls_back_to_stdio() -> None:
    _, app = await build_server(_settings(reader_transport="carrier-pigeon"))
    assert app is None


@pytest.mark.asyncio
async def test_non_string_summary_stops_startup(tmp_path) -> None:
    (tmp_path / "openapi.yaml").write_text(
        "openapi: 3.0.0\n"
        "paths:\n"
        "  /a:\n"
        "    get:\n"
        "      operationId: getA\n"
        "      summary: 2024-01-01\n"
    )
    with pytest.raises(OpenAPILoadError, match="'summary' must be a string"):
        await build_server(Settings(openapi_path=str(tmp_path)))


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("OPENAPI_PATH", "/srv/api")
    monkeypatch.setenv("READER_TRANSPORT", "sse")
    monkeypatch.setenv("STRICT_OPERATION_IDS", "true")
    get_settings.cache_clear()
    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.openapi_path == "/srv/api"
    assert settings.reader_transport == "sse"
    assert settings.strict_operation_ids is True
    assert settings.service_name == "openapi-reader"


def test_main_exits_on_load_failure(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(main_module, "configure_logging", lambda level: None)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([str(tmp_path / "missing.yaml")])

    assert excinfo.value.code == 1


def test_main_uses_positional_source(monkeypatch) -> None:
    captured = {}

    async def fake_run(settings: Settings) -> None:
        captured["openapi_path"] = settings.openapi_path

    monkeypatch.setattr(main_module, "_run", fake_run)
    monkeypatch.setattr(main_module, "configure_logging", lambda level: None)

    main_module.main([str(PETSTORE)])

    assert captured == {"openapi_path": str(PETSTORE)}

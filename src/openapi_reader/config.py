"""Configuration for the OpenAPI reader MCP server."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    service_name: str = Field(default="openapi-reader")
    service_version: str = Field(default="v1.0.0")

    openapi_path: str = Field(default=".")
    openapi_timeout_seconds: float = Field(default=30)
    strict_operation_ids: bool = Field(default=False)

    reader_transport: str = Field(default="stdio")
    reader_host: str = Field(default="0.0.0.0")
    reader_port: int = Field(default=8000)

    reader_log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

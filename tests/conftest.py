"""pytest fixtures for the OpenAPI reader."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from openapi_reader.models import Description
from openapi_reader.openapi import OpenAPILoader

FIXTURES = Path(__file__).parent / "fixtures"
PETSTORE = FIXTURES / "petstore.yaml"


@pytest.fixture
def petstore_spec() -> dict:
    return yaml.safe_load(PETSTORE.read_text(encoding="utf-8"))


@pytest.fixture
def description(petstore_spec: dict) -> Description:
    return OpenAPILoader().build_description(petstore_spec)

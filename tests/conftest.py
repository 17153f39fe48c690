from __future__ import annotations

import pytest

from tests._fixtures.schema_builder import SchemaBuilder
from wasmjsgen.config import GenerationConfig
from wasmjsgen.filters import FilterCriteria


@pytest.fixture
def schema_builder() -> SchemaBuilder:
    """Provide a fresh schema builder per test."""
    return SchemaBuilder()


@pytest.fixture
def config() -> GenerationConfig:
    return GenerationConfig().validate()


@pytest.fixture
def criteria() -> FilterCriteria:
    return FilterCriteria()

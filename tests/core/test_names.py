"""Tests for wasmjsgen.core.names."""

from __future__ import annotations

import pytest

from wasmjsgen.core.names import NameConverter


@pytest.fixture
def names() -> NameConverter:
    return NameConverter()


def test_camel_and_pascal_only_touch_first_character(names: NameConverter) -> None:
    assert names.to_camel_case("LibraryService") == "libraryService"
    assert names.to_camel_case("HTTPServer") == "hTTPServer"
    assert names.to_pascal_case("findBooks") == "FindBooks"
    assert names.to_camel_case("") == ""


def test_snake_case_splits_every_capital(names: NameConverter) -> None:
    assert names.to_snake_case("LibraryService") == "library_service"
    assert names.to_snake_case("HTTPServer") == "h_t_t_p_server"


def test_module_name_and_namespace(names: NameConverter) -> None:
    assert names.to_module_name("library.v1") == "library_v1_services"
    assert names.to_module_name("") == "services"
    assert names.to_js_namespace("Library.V1") == "library_v1"
    assert names.to_js_namespace("my-pkg.v1") == "my_pkg_v1"


def test_package_alias_uses_last_two_segments(names: NameConverter) -> None:
    assert names.to_package_alias("github.com/acme/library/v1") == "libraryv1"
    assert names.to_package_alias("my-lib") == "mylib"
    assert names.to_package_alias("") == "pkg"


def test_generated_type_names(names: NameConverter) -> None:
    assert names.to_factory_name("library.v1") == "LibraryV1Factory"
    assert names.to_deserializer_name("my_pkg.v2") == "MyPkgV2Deserializer"
    assert names.to_schema_registry_name("library.v1") == "libraryV1Schemas"
    assert names.to_schema_registry_name("") == "schemas"


def test_go_function_and_client_file_names(names: NameConverter) -> None:
    assert names.to_go_func_name("LibraryService", "FindBooks") == "libraryServiceFindBooks"
    assert names.to_client_file_stem("LibraryService") == "libraryServiceClient"


def test_json_name_from_field_name(names: NameConverter) -> None:
    assert names.to_json_name("page_count") == "pageCount"
    assert names.to_json_name("title") == "title"


def test_ts_property_name_from_json_name(names: NameConverter) -> None:
    assert names.to_ts_property_name("PageCount") == "pageCount"
    assert names.to_ts_property_name("isbn") == "isbn"


def test_sanitize_identifier(names: NameConverter) -> None:
    assert names.sanitize_identifier("my-pkg.v1") == "my_pkg_v1"
    assert names.sanitize_identifier("1abc") == "_abc"
    assert names.sanitize_identifier("") == "identifier"

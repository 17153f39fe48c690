"""Tests for wasmjsgen.builders.go."""

from __future__ import annotations

from tests._fixtures.schema_builder import SchemaBuilder, io_messages, method, service
from wasmjsgen.builders import GoDataBuilder
from wasmjsgen.builders.go import GoImport, go_import_path
from wasmjsgen.collector import ArtifactCatalog, ArtifactCollector
from wasmjsgen.config import GenerationConfig
from wasmjsgen.filters import FilterCriteria, parse_criteria
from wasmjsgen.models import SchemaFile


def test_template_data_for_package(schema_builder: SchemaBuilder, config: GenerationConfig) -> None:
    schema_builder.file(
        "library/v1/lib.proto",
        "library.v1",
        services=[
            service(
                "LibraryService",
                method("FindBooks", "library.v1"),
                method("Prompt", "library.v1", options={"async_method": True}),
            ),
            service("BrowserAPI", method("Alert", "library.v1"), options={"browser_provided": True}),
        ],
        messages=io_messages("FindBooks", "Prompt", "Alert"),
        options={"go_package": "github.com/acme/gen/library/v1;libraryv1"},
    )
    criteria = parse_criteria(rename="FindBooks:searchBooks")
    catalog = ArtifactCollector().collect_all_artifacts(schema_builder.files, config, criteria)

    data = GoDataBuilder(catalog).build_template_data(catalog.packages["library.v1"], config)

    assert data.module_name == "library_v1_services"
    assert data.js_namespace == "library_v1"
    assert data.go_package == "github.com/acme/gen/library/v1"
    assert data.go_package_name == "v1_wasm"
    assert data.imports == [GoImport("github.com/acme/gen/library/v1", "libraryv1")]

    (library,) = data.services
    assert library.go_type == "libraryv1.LibraryServiceServer"
    assert library.js_name == "libraryService"
    find, prompt = library.methods
    assert find.js_name == "searchBooks"
    assert find.go_func_name == "libraryServiceFindBooks"
    assert find.request_type == "libraryv1.FindBooksRequest"
    assert find.request_ts_type == "FindBooksRequest"
    assert prompt.is_async

    (browser,) = data.browser_clients
    assert browser.go_type == "libraryv1.BrowserAPIClient"
    assert browser.is_browser_provided
    assert data.has_browser_clients and not data.has_streaming


def test_services_without_methods_are_dropped(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.file(
        "library/v1/lib.proto",
        "library.v1",
        services=[service("LibraryService", method("Purge", "library.v1"))],
        messages=io_messages("Purge"),
    )
    criteria = parse_criteria(exclude="Purge")
    catalog = ArtifactCollector().collect_all_artifacts(schema_builder.files, config, criteria)
    data = GoDataBuilder(catalog).build_template_data(catalog.packages["library.v1"], config)
    assert data.services == []


def test_go_import_path_falls_back_to_package() -> None:
    assert go_import_path(SchemaFile(path="a.proto", package="library.v1")) == "library/v1"


def test_build_script_data() -> None:
    config = GenerationConfig(wasm_export_path="cmd/wasm").validate()
    data = GoDataBuilder(ArtifactCatalog()).build_script_data({"packages": ["library.v1"]}, config)
    assert data.targets[0].directory == "cmd/wasm/library/v1"
    assert data.targets[0].module_name == "library_v1_services"


def test_well_known_method_types_use_go_known_packages(
    schema_builder: SchemaBuilder, config: GenerationConfig, criteria: FilterCriteria
) -> None:
    schema_builder.file(
        "lib/v1/lib.proto",
        "lib.v1",
        services=[
            service(
                "Health",
                method("Ping", "lib.v1", input="google.protobuf.Empty", output="google.protobuf.Empty"),
            )
        ],
    )
    catalog = ArtifactCollector().collect_all_artifacts(schema_builder.files, config, criteria)

    data = GoDataBuilder(catalog).build_template_data(catalog.packages["lib.v1"], config)

    (ping,) = data.services[0].methods
    assert ping.request_type == "emptypb.Empty"
    assert ping.response_type == "emptypb.Empty"
    assert ping.request_ts_type == "Empty"
    assert GoImport("google.golang.org/protobuf/types/known/emptypb", "emptypb") in data.imports
    assert not [imp for imp in data.imports if imp.path == "google/protobuf"]

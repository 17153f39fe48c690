"""End-to-end tests for wasmjsgen.generator."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.schema_builder import SchemaBuilder, field, message, method, service
from wasmjsgen.builders import TSDataBuilder, TypeData
from wasmjsgen.collector import ArtifactCatalog
from wasmjsgen.config import GenerationConfig
from wasmjsgen.fileset import DirectoryHost, MemoryHost
from wasmjsgen.generator import GenerationError, Generator
from wasmjsgen.planning import FilePlan, FilePlanner, FileSpec


class _ReadmePlanner(FilePlanner):
    target = "typescript"

    def plan_files(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FilePlan:
        return FilePlan(specs=[FileSpec(name="readme", path="README.md", type="readme")])


def test_generate_renders_every_planned_file(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.library()
    host = MemoryHost()

    result = Generator().generate(schema_builder.files, config, host)

    assert sorted(result.files) == sorted(result.plan.paths())
    assert set(host.contents()) == set(result.files)
    assert "library/v1/library_v1.wasm.go" in result.files
    assert "library/v1/main.go.example" in result.files

    client = result.files["library/v1/services/libraryServiceClient.ts"]
    assert "export class LibraryServiceClient extends ServiceClient" in client

    wasm = result.files["library/v1/library_v1.wasm.go"]
    assert "package v1_wasm" in wasm
    assert 'libraryv1 "library/v1"' in wasm
    assert "func (s *LibraryV1ServicesServices) libraryServiceFindBooks(" in wasm

    deserializer = result.files["library/v1/models/deserializer.ts"]
    assert "new Library_v1Factory()" in deserializer

    aggregate = result.files["library/v1/schemas.ts"]
    assert '"./models/schemas"' in aggregate
    assert '"./services/schemas"' in aggregate


def test_typescript_only(schema_builder: SchemaBuilder) -> None:
    schema_builder.library()
    config = GenerationConfig(generate_wasm=False).validate()

    result = Generator().generate(schema_builder.files, config)

    assert "index.ts" in result.files
    assert not [path for path in result.files if path.endswith((".go", ".example"))]


def test_deserializer_without_factory_requires_one(schema_builder: SchemaBuilder) -> None:
    schema_builder.file(
        "shop/v1/cart.proto",
        "shop.v1",
        messages=[message("Cart", field("total", 1, "int64"))],
    )
    config = GenerationConfig(generate_factories=False, generate_wasm=False).validate()

    result = Generator().generate(schema_builder.files, config)

    deserializer = result.files["shop/v1/deserializer.ts"]
    assert "factory: FactoryInterface\n" in deserializer
    assert "DEFAULT_FACTORY" not in deserializer


def test_empty_catalog_generates_nothing(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.file("google/protobuf/timestamp.proto", "google.protobuf", generate=False)
    host = MemoryHost()

    result = Generator().generate(schema_builder.files, config, host)

    assert result.is_empty
    assert result.files == {}
    assert host.contents() == {}


def test_directory_host_is_committed(
    tmp_path: Path, schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.library()

    result = Generator().generate(schema_builder.files, config, DirectoryHost(tmp_path))

    assert (tmp_path / "index.ts").is_file()
    assert (tmp_path / "library" / "v1" / "library_v1.wasm.go").is_file()
    assert len(result.written) == len(result.files)


def test_plan_only(schema_builder: SchemaBuilder, config: GenerationConfig) -> None:
    schema_builder.library()
    catalog, plan = Generator().plan(schema_builder.files, config)
    assert len(catalog.services) == 1
    assert "index.ts" in plan.paths()


def test_invalid_config_is_wrapped(schema_builder: SchemaBuilder) -> None:
    schema_builder.library()
    config = GenerationConfig(js_structure="nested")
    with pytest.raises(GenerationError, match="invalid js_structure"):
        Generator().generate(schema_builder.files, config)


def test_unknown_method_type_is_wrapped(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.file(
        "a/v1/a.proto",
        "a.v1",
        services=[service("Ping", method("Ping", "a.v1", output="missing.v1.Pong"))],
        messages=[message("PingRequest")],
    )
    with pytest.raises(GenerationError, match="references unknown type missing.v1.Pong"):
        Generator().generate(schema_builder.files, config)


def test_unrecognized_file_type_is_wrapped(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.library()
    generator = Generator(planners={"typescript": _ReadmePlanner()})
    with pytest.raises(GenerationError, match="unrecognized type 'readme'"):
        generator.generate(schema_builder.files, config)


def test_data_builder_failures_are_wrapped(
    monkeypatch: pytest.MonkeyPatch, schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    def broken(self: TSDataBuilder, messages: object, enums: object) -> TypeData:
        raise ValueError("field number 0 is reserved")

    monkeypatch.setattr(TSDataBuilder, "build_type_data", broken)
    schema_builder.library()

    with pytest.raises(GenerationError, match="failed to build data for .*: field number 0"):
        Generator().generate(schema_builder.files, config)


def test_factory_dependencies_with_shared_version_render(
    schema_builder: SchemaBuilder, config: GenerationConfig
) -> None:
    schema_builder.file("alpha/v1/a.proto", "alpha.v1", messages=[message("A", field("x", 1))])
    schema_builder.file("beta/v1/b.proto", "beta.v1", messages=[message("B", field("y", 1))])
    schema_builder.file(
        "lib/v1/lib.proto",
        "lib.v1",
        messages=[
            message(
                "Holder",
                field("a", 1, "message", type_name="alpha.v1.A"),
                field("b", 2, "message", type_name="beta.v1.B"),
            )
        ],
    )

    result = Generator().generate(schema_builder.files, config)

    factory = result.files["lib/v1/factory.ts"]
    assert "private alpha_v1Factory = new Alpha_v1Factory();" in factory
    assert "private beta_v1Factory = new Beta_v1Factory();" in factory

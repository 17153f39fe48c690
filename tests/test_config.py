"""Tests for wasmjsgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmjsgen.config import (
    ConfigError,
    GenerationConfig,
    load_config,
    parse_options,
    parse_parameter,
)


def test_parse_parameter_keeps_comma_lists_together() -> None:
    options = parse_parameter("services=LibraryService,ShelfService, js_structure=flat")
    assert options == {"services": "LibraryService,ShelfService", "js_structure": "flat"}


def test_parse_parameter_rejects_leading_bare_segment() -> None:
    with pytest.raises(ConfigError, match="expected key=value"):
        parse_parameter("flat,js_structure=flat")


def test_parse_options_from_parameter_string() -> None:
    config = parse_options(
        "ts_export_path=web/gen,generate_wasm=false,method_exclude=Internal*,Debug*"
    )
    assert config.ts_export_path == "web/gen"
    assert config.generate_wasm is False
    assert config.generate_typescript is True
    assert config.method_exclude == ["Internal*", "Debug*"]


def test_disabling_both_targets_enables_both() -> None:
    config = parse_options({"generate_wasm": False, "generate_typescript": "no"})
    assert config.generate_wasm is True
    assert config.generate_typescript is True


def test_rename_mapping_is_flattened() -> None:
    config = parse_options({"method_rename": {"FindBooks": "searchBooks"}})
    assert config.method_rename == ["FindBooks:searchBooks"]


def test_parse_options_layers_on_base() -> None:
    base = GenerationConfig(module_name="library_api")
    config = parse_options({"js_structure": "service_based"}, base)
    assert config.module_name == "library_api"
    assert config.js_structure == "service_based"
    assert base.js_structure == "namespaced"


@pytest.mark.parametrize(
    "options, message",
    [
        ({"js_structure": "nested"}, "invalid js_structure"),
        ({"colour": "blue"}, "unknown option: colour"),
        ({"generate_types": "maybe"}, "generate_types must be a boolean"),
        ({"ts_export_path": ""}, "ts_export_path cannot be empty"),
    ],
)
def test_parse_options_rejects_bad_values(options: dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        parse_options(options)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == GenerationConfig()
    assert config.js_structure == "namespaced"
    assert config.wasm_package_suffix == "wasm"


def test_load_config_reads_yaml_and_applies_overrides(tmp_path: Path) -> None:
    (tmp_path / ".wasmjsgen.yml").write_text(
        """
ts_export_path: web/src/gen
js_structure: flat
services: [LibraryService]
method_rename:
  FindBooks: searchBooks
generate_build_script: true
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path, {"js_structure": "service_based"})

    assert config.ts_export_path == "web/src/gen"
    assert config.js_structure == "service_based"
    assert config.services == ["LibraryService"]
    assert config.method_rename == ["FindBooks:searchBooks"]
    assert config.generate_build_script is True


def test_load_config_accepts_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("module_name: shelf\n", encoding="utf-8")
    assert load_config(config_file).module_name == "shelf"


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".wasmjsgen.yml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".wasmjsgen.yml").write_text("js_structure: [flat\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse .wasmjsgen.yml"):
        load_config(tmp_path)

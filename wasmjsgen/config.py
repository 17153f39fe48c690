"""Configuration loading for wasmjsgen (.wasmjsgen.yml and flat option maps)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

CONFIG_FILENAME = ".wasmjsgen.yml"
JS_STRUCTURES = ("namespaced", "flat", "service_based")


class ConfigError(RuntimeError):
    """Raised when generation options are malformed."""


@dataclass
class GenerationConfig:
    """Target settings and raw filter options for one generation pass.

    Filter options are kept as plain lists here; they become a
    :class:`~wasmjsgen.filters.criteria.FilterCriteria` through
    :func:`~wasmjsgen.filters.criteria.criteria_from_config`.
    """

    wasm_export_path: str = "."
    ts_export_path: str = "."
    js_structure: str = "namespaced"
    js_namespace: str = ""
    module_name: str = ""
    wasm_package_suffix: str = "wasm"
    generate_wasm: bool = True
    generate_typescript: bool = True
    generate_clients: bool = True
    generate_types: bool = True
    generate_factories: bool = True
    generate_build_script: bool = False
    services: List[str] = field(default_factory=list)
    method_include: List[str] = field(default_factory=list)
    method_exclude: List[str] = field(default_factory=list)
    method_rename: List[str] = field(default_factory=list)

    def validate(self) -> "GenerationConfig":
        """Check structural settings; returns ``self`` so calls can be chained."""
        if not self.generate_wasm and not self.generate_typescript:
            self.generate_wasm = True
            self.generate_typescript = True
        if not self.js_structure:
            self.js_structure = "namespaced"
        if self.js_structure not in JS_STRUCTURES:
            raise ConfigError(
                f"invalid js_structure: {self.js_structure} "
                f"(supported: {', '.join(JS_STRUCTURES)})"
            )
        if self.generate_typescript and not self.ts_export_path:
            raise ConfigError("ts_export_path cannot be empty")
        if self.generate_wasm and not self.wasm_export_path:
            raise ConfigError("wasm_export_path cannot be empty")
        if not self.wasm_package_suffix:
            self.wasm_package_suffix = "wasm"
        return self


_LIST_KEYS = {"services", "method_include", "method_exclude"}
_BOOL_KEYS = {f.name for f in fields(GenerationConfig) if f.type in ("bool", bool)}
_STR_KEYS = {
    f.name for f in fields(GenerationConfig) if f.type in ("str", str)
}
_KNOWN_KEYS = {f.name for f in fields(GenerationConfig)}


def parse_parameter(parameter: str) -> Dict[str, str]:
    """Split a ``key=value,key=value`` plugin parameter into a flat map.

    A segment without ``=`` continues the previous value, so
    ``services=A,B,js_structure=flat`` keeps ``A,B`` together.
    """
    options: Dict[str, str] = {}
    last_key: Optional[str] = None
    for segment in parameter.split(","):
        segment = segment.strip()
        if not segment:
            continue
        if "=" in segment:
            key, value = segment.split("=", 1)
            last_key = key.strip()
            options[last_key] = value.strip()
        elif last_key is not None:
            options[last_key] = f"{options[last_key]},{segment}"
        else:
            raise ConfigError(f"invalid option segment: {segment} (expected key=value)")
    return options


def parse_options(
    options: Mapping[str, Any] | str, base: GenerationConfig | None = None
) -> GenerationConfig:
    """Build a validated config from a flat option map.

    Values may be strings (as they arrive from the compiler) or native
    YAML types. Unknown keys are rejected.
    """
    if isinstance(options, str):
        options = parse_parameter(options)
    config = replace(base) if base is not None else GenerationConfig()
    for key, value in options.items():
        if key not in _KNOWN_KEYS:
            raise ConfigError(f"unknown option: {key}")
        if key in _BOOL_KEYS:
            setattr(config, key, _as_bool(key, value))
        elif key in _LIST_KEYS:
            setattr(config, key, _as_str_list(value))
        elif key == "method_rename":
            config.method_rename = _as_rename_list(value)
        elif key in _STR_KEYS:
            setattr(config, key, _as_str(value))
    return config.validate()


def load_config(
    config_path: Path, overrides: Mapping[str, Any] | None = None
) -> GenerationConfig:
    """Load ``.wasmjsgen.yml`` (if present) and apply flat ``overrides`` on top."""
    config_file = _resolve_config_path(config_path)
    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
    merged = dict(data)
    if overrides:
        merged.update(overrides)
    return parse_options(merged)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        items = [str(value)]
    return [item.strip() for item in items if item and item.strip()]


def _as_rename_list(value: Any) -> List[str]:
    if isinstance(value, Mapping):
        return [f"{old}:{new}" for old, new in value.items()]
    return _as_str_list(value)


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GenerationConfig",
    "JS_STRUCTURES",
    "load_config",
    "parse_options",
    "parse_parameter",
]

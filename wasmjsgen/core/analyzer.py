"""Annotation-driven questions about schema elements.

All annotation knowledge lives here. Annotations are read from the generic
``options`` mapping each schema element carries; a payload of the wrong shape
is logged and treated as if the annotation were absent.
"""

from __future__ import annotations

import posixpath
from typing import Any, List, Mapping, Optional, Tuple

from ..logging import get_logger
from ..models import FieldDef, MessageDef, MethodDef, SchemaFile, ServiceDef

ANNOTATION_NAMESPACE = "wasmjs.v1"

BROWSER_PROVIDED = "browser_provided"
SERVICE_EXCLUDE = "wasm_service_exclude"
SERVICE_NAME = "wasm_service_name"
METHOD_EXCLUDE = "wasm_method_exclude"
METHOD_NAME = "wasm_method_name"
ASYNC_METHOD = "async_method"
TS_FACTORY = "ts_factory"

_MISSING = object()


class SchemaAnalyzer:
    """Side-effect free predicates over services, methods, messages and files."""

    def __init__(self) -> None:
        self.logger = get_logger("analyzer")

    # -- annotation access -------------------------------------------------

    def _lookup(self, options: Mapping[str, Any], key: str) -> Any:
        if key in options:
            return options[key]
        qualified = f"{ANNOTATION_NAMESPACE}.{key}"
        if qualified in options:
            return options[qualified]
        return _MISSING

    def _flag(self, options: Mapping[str, Any], key: str, owner: str) -> bool:
        value = self._lookup(options, key)
        if value is _MISSING or value is None:
            return False
        if isinstance(value, bool):
            return value
        self.logger.warning(
            "Ignoring malformed %s annotation on %s: expected a boolean, got %r",
            key,
            owner,
            value,
        )
        return False

    def _text(self, options: Mapping[str, Any], key: str, owner: str) -> Optional[str]:
        value = self._lookup(options, key)
        if value is _MISSING or value is None:
            return None
        if isinstance(value, str):
            return value.strip() or None
        self.logger.warning(
            "Ignoring malformed %s annotation on %s: expected a string, got %r",
            key,
            owner,
            value,
        )
        return None

    # -- services ----------------------------------------------------------

    def is_browser_provided(self, service: ServiceDef) -> bool:
        return self._flag(service.options, BROWSER_PROVIDED, service.name)

    def is_service_excluded(self, service: ServiceDef) -> bool:
        return self._flag(service.options, SERVICE_EXCLUDE, service.name)

    def custom_service_name(self, service: ServiceDef) -> Optional[str]:
        return self._text(service.options, SERVICE_NAME, service.name)

    # -- methods -----------------------------------------------------------

    def is_method_excluded(self, method: MethodDef) -> bool:
        return self._flag(method.options, METHOD_EXCLUDE, method.name)

    def custom_method_name(self, method: MethodDef) -> Optional[str]:
        return self._text(method.options, METHOD_NAME, method.name)

    def is_async(self, method: MethodDef) -> bool:
        """``async_method`` accepts either ``true`` or ``{is_async: true}``."""
        value = self._lookup(method.options, ASYNC_METHOD)
        if value is _MISSING or value is None:
            return False
        if isinstance(value, Mapping):
            value = value.get("is_async", False)
        if isinstance(value, bool):
            return value
        self.logger.warning(
            "Ignoring malformed %s annotation on %s: %r", ASYNC_METHOD, method.name, value
        )
        return False

    # -- messages and files ------------------------------------------------

    def is_map_entry(self, message: MessageDef) -> bool:
        return message.map_entry

    def is_map_field(self, field: FieldDef, parent: MessageDef) -> bool:
        return self.map_entry_for(field, parent) is not None

    def map_entry_for(self, field: FieldDef, parent: MessageDef) -> Optional[MessageDef]:
        if not field.type_name:
            return None
        entry_name = extract_message_name(field.type_name)
        for nested in parent.messages:
            if nested.name == entry_name and nested.map_entry:
                return nested
        return None

    def map_key_value_types(self, field: FieldDef, parent: MessageDef) -> Tuple[str, str]:
        entry = self.map_entry_for(field, parent)
        if entry is None:
            return "any", "any"
        key_type = value_type = "any"
        for entry_field in entry.fields:
            resolved = (
                extract_message_name(entry_field.type_name)
                if entry_field.type_name
                else entry_field.type
            )
            if entry_field.name == "key":
                key_type = resolved
            elif entry_field.name == "value":
                value_type = resolved
        return key_type, value_type

    def oneof_groups(self, message: MessageDef) -> List[str]:
        groups: List[str] = []
        for field in message.fields:
            if field.oneof and field.oneof not in groups:
                groups.append(field.oneof)
        return groups

    def has_factory_marker(self, schema_file: SchemaFile) -> bool:
        return self._flag(schema_file.options, TS_FACTORY, schema_file.path)


def extract_package_name(full_type: str) -> str:
    """``library.v1.Book`` -> ``library.v1``."""
    parts = full_type.lstrip(".").split(".")
    if len(parts) <= 1:
        return ""
    return ".".join(parts[:-1])


def extract_message_name(full_type: str) -> str:
    return full_type.lstrip(".").split(".")[-1]


def base_file_name(schema_path: str) -> str:
    """``library/v1/library.proto`` -> ``library``."""
    name = posixpath.basename(schema_path)
    stem, _ = posixpath.splitext(name)
    return stem


__all__ = [
    "ANNOTATION_NAMESPACE",
    "ASYNC_METHOD",
    "BROWSER_PROVIDED",
    "METHOD_EXCLUDE",
    "METHOD_NAME",
    "SERVICE_EXCLUDE",
    "SERVICE_NAME",
    "SchemaAnalyzer",
    "TS_FACTORY",
    "base_file_name",
    "extract_message_name",
    "extract_package_name",
]

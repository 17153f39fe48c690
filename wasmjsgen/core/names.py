"""Identifier, file-name and module-name conversions."""

from __future__ import annotations

import re
from typing import List

_SEPARATORS = re.compile(r"[.\-_]")


def _split_package(package_name: str) -> List[str]:
    return [part for part in _SEPARATORS.split(package_name) if part]


class NameConverter:
    """Pure string-casing helpers used by the planners and data builders."""

    def to_camel_case(self, value: str) -> str:
        """Lowercase the first character only: ``LibraryService`` -> ``libraryService``."""
        if not value:
            return value
        return value[:1].lower() + value[1:]

    def to_pascal_case(self, value: str) -> str:
        if not value:
            return value
        return value[:1].upper() + value[1:]

    def to_snake_case(self, value: str) -> str:
        """Insert ``_`` before every uppercase letter after the first.

        Runs of capitals are split letter by letter, so ``HTTPServer`` becomes
        ``h_t_t_p_server``.
        """
        if not value:
            return value
        chars: List[str] = []
        for index, char in enumerate(value):
            if index > 0 and char.isupper():
                chars.append("_")
            chars.append(char.lower())
        return "".join(chars)

    def to_package_alias(self, package_path: str) -> str:
        """Go import alias from the last two path segments (``.../library/v1`` -> ``libraryv1``)."""
        if not package_path:
            return "pkg"
        parts = package_path.split("/")
        if len(parts) >= 2:
            pkg = parts[-2].replace("-", "").replace("_", "")
            version = parts[-1].replace(".", "")
            return (pkg + version).lower()
        last = parts[-1].replace(".", "").replace("-", "").replace("_", "")
        return last.lower() or "pkg"

    def to_js_namespace(self, package_name: str) -> str:
        if not package_name:
            return ""
        return package_name.lower().replace(".", "_").replace("-", "_")

    def to_module_name(self, package_name: str) -> str:
        if not package_name:
            return "services"
        return package_name.replace(".", "_") + "_services"

    def to_factory_name(self, package_name: str) -> str:
        return "".join(self.to_pascal_case(p) for p in _split_package(package_name)) + "Factory"

    def to_deserializer_name(self, package_name: str) -> str:
        return (
            "".join(self.to_pascal_case(p) for p in _split_package(package_name))
            + "Deserializer"
        )

    def to_schema_registry_name(self, package_name: str) -> str:
        if not package_name:
            return "schemas"
        parts = _split_package(package_name)
        head = parts[0].lower() if parts else ""
        return head + "".join(self.to_pascal_case(p) for p in parts[1:]) + "Schemas"

    def to_go_func_name(self, service_name: str, method_name: str) -> str:
        return self.to_camel_case(service_name) + method_name

    def to_ts_property_name(self, json_name: str) -> str:
        return self.to_camel_case(json_name)

    def to_json_name(self, field_name: str) -> str:
        """Schema field name to its JSON name: ``author_name`` -> ``authorName``."""
        chars: List[str] = []
        upper_next = False
        for char in field_name:
            if char == "_":
                upper_next = True
                continue
            chars.append(char.upper() if upper_next else char)
            upper_next = False
        return "".join(chars)

    def to_client_file_stem(self, service_name: str) -> str:
        """Stem of a per-service client file: ``LibraryService`` -> ``libraryServiceClient``."""
        return self.to_camel_case(service_name) + "Client"

    def sanitize_identifier(self, name: str) -> str:
        """Replace anything that is not a letter, digit or ``_`` with ``_``."""
        if not name:
            return "identifier"
        first = name[0]
        chars = [first if first.isalpha() or first == "_" else "_"]
        for char in name[1:]:
            chars.append(char if char.isalnum() or char == "_" else "_")
        return "".join(chars)


__all__ = ["NameConverter"]

"""Loads schema descriptor documents (YAML or JSON) into :mod:`wasmjsgen.models`.

A descriptor document lists every file visible to the invocation::

    files:
      - path: library/v1/library.proto
        package: library.v1
        generate: true
        imports: [library/v1/book.proto]
        options: {go_package: "example.com/gen/library/v1"}
        services:
          - name: LibraryService
            methods:
              - {name: FindBooks, input: FindBooksRequest, output: FindBooksResponse}
        messages:
          - name: Book
            fields:
              - {name: title, number: 1, type: string}
              - {name: tags, number: 2, map: {key: string, value: string}}
        enums:
          - {name: Genre, values: [{name: GENRE_UNSPECIFIED, number: 0}]}

Type references may be fully qualified (``library.v1.Book``) or relative to
the enclosing message or package.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import yaml

from .logging import get_logger
from .models import (
    EnumDef,
    EnumValueDef,
    FieldDef,
    MessageDef,
    MethodDef,
    SchemaFile,
    ServiceDef,
)

SCALAR_TYPES = frozenset(
    {
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "string",
        "bytes",
    }
)

logger = get_logger("descriptors")


class DescriptorError(RuntimeError):
    """Raised when a descriptor document is malformed."""


def load_descriptor_set(path: Path) -> List[SchemaFile]:
    """Read ``path`` and return its schema files in document order."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorError(f"cannot read descriptor set {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DescriptorError(f"failed to parse {path.name}: {exc}") from exc
    files = parse_descriptor_set(document)
    logger.debug("Loaded %d schema files from %s", len(files), path)
    return files


def parse_descriptor_set(document: Any) -> List[SchemaFile]:
    if document is None:
        return []
    if not isinstance(document, Mapping):
        raise DescriptorError("descriptor set must be a mapping with a 'files' list")
    entries = document.get("files") or []
    if not isinstance(entries, list):
        raise DescriptorError("'files' must be a list")
    files = [_parse_file(entry, index) for index, entry in enumerate(entries)]
    _TypeResolver(files).resolve()
    return files


# -- parsing -----------------------------------------------------------------


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DescriptorError(f"{where} must be a mapping")
    return value


def _require_name(entry: Mapping[str, Any], where: str) -> str:
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise DescriptorError(f"{where} is missing a name")
    return name


def _list(entry: Mapping[str, Any], key: str, where: str) -> List[Any]:
    value = entry.get(key) or []
    if not isinstance(value, list):
        raise DescriptorError(f"{where}: '{key}' must be a list")
    return value


def _options(entry: Mapping[str, Any], where: str) -> Dict[str, Any]:
    value = entry.get("options") or {}
    if not isinstance(value, Mapping):
        raise DescriptorError(f"{where}: 'options' must be a mapping")
    return dict(value)


def _parse_file(raw: Any, index: int) -> SchemaFile:
    entry = _require_mapping(raw, f"files[{index}]")
    path = entry.get("path")
    if not isinstance(path, str) or not path:
        raise DescriptorError(f"files[{index}] is missing a path")
    package = entry.get("package") or ""
    if not isinstance(package, str):
        raise DescriptorError(f"{path}: 'package' must be a string")
    imports = [str(item) for item in _list(entry, "imports", path)]
    return SchemaFile(
        path=path,
        package=package,
        generate=bool(entry.get("generate", True)),
        services=[_parse_service(item, path) for item in _list(entry, "services", path)],
        messages=[_parse_message(item, path) for item in _list(entry, "messages", path)],
        enums=[_parse_enum(item, path) for item in _list(entry, "enums", path)],
        imports=imports,
        options=_options(entry, path),
    )


def _parse_service(raw: Any, where: str) -> ServiceDef:
    entry = _require_mapping(raw, f"{where}: service")
    name = _require_name(entry, f"{where}: service")
    scope = f"{where}: service {name}"
    return ServiceDef(
        name=name,
        methods=[_parse_method(item, scope) for item in _list(entry, "methods", scope)],
        options=_options(entry, scope),
        comment=str(entry.get("comment") or ""),
    )


def _parse_method(raw: Any, where: str) -> MethodDef:
    entry = _require_mapping(raw, f"{where}: method")
    name = _require_name(entry, f"{where}: method")
    for key in ("input", "output"):
        if not isinstance(entry.get(key), str) or not entry.get(key):
            raise DescriptorError(f"{where}: method {name} is missing '{key}'")
    return MethodDef(
        name=name,
        input_type=entry["input"],
        output_type=entry["output"],
        client_streaming=bool(entry.get("client_streaming", False)),
        server_streaming=bool(entry.get("server_streaming", False)),
        options=_options(entry, f"{where}: method {name}"),
        comment=str(entry.get("comment") or ""),
    )


def _parse_enum(raw: Any, where: str) -> EnumDef:
    entry = _require_mapping(raw, f"{where}: enum")
    name = _require_name(entry, f"{where}: enum")
    values: List[EnumValueDef] = []
    for position, item in enumerate(_list(entry, "values", f"{where}: enum {name}")):
        if isinstance(item, str):
            values.append(EnumValueDef(name=item, number=position))
            continue
        value = _require_mapping(item, f"{where}: enum {name} value")
        values.append(
            EnumValueDef(
                name=_require_name(value, f"{where}: enum {name} value"),
                number=int(value.get("number", position)),
                comment=str(value.get("comment") or ""),
            )
        )
    return EnumDef(
        name=name,
        values=values,
        options=_options(entry, f"{where}: enum {name}"),
        comment=str(entry.get("comment") or ""),
    )


def _parse_message(raw: Any, where: str) -> MessageDef:
    entry = _require_mapping(raw, f"{where}: message")
    name = _require_name(entry, f"{where}: message")
    scope = f"{where}: message {name}"
    oneofs = [str(item) for item in _list(entry, "oneofs", scope)]
    message = MessageDef(
        name=name,
        messages=[_parse_message(item, scope) for item in _list(entry, "messages", scope)],
        enums=[_parse_enum(item, scope) for item in _list(entry, "enums", scope)],
        options=_options(entry, scope),
        map_entry=bool(entry.get("map_entry", False)),
        comment=str(entry.get("comment") or ""),
    )
    for item in _list(entry, "fields", scope):
        message.fields.append(_parse_field(item, scope, oneofs, message))
    return message


def _parse_field(
    raw: Any, where: str, oneofs: List[str], parent: MessageDef
) -> FieldDef:
    entry = _require_mapping(raw, f"{where}: field")
    name = _require_name(entry, f"{where}: field")
    if "number" not in entry:
        raise DescriptorError(f"{where}: field {name} is missing a number")

    oneof = entry.get("oneof")
    if isinstance(oneof, int) and not isinstance(oneof, bool):
        if not 0 <= oneof < len(oneofs):
            raise DescriptorError(f"{where}: field {name} has unknown oneof index {oneof}")
        oneof = oneofs[oneof]

    field_def = FieldDef(
        name=name,
        number=int(entry["number"]),
        type=str(entry.get("type") or ""),
        type_name=entry.get("type_name"),
        repeated=bool(entry.get("repeated", False)) or entry.get("label") == "repeated",
        optional=bool(entry.get("optional", False)),
        oneof=str(oneof) if oneof is not None else None,
        json_name=entry.get("json_name"),
        comment=str(entry.get("comment") or ""),
    )

    if "map" in entry:
        _expand_map_field(field_def, entry["map"], where, parent)
    elif field_def.type not in SCALAR_TYPES and field_def.type not in ("message", "enum"):
        if not field_def.type:
            raise DescriptorError(f"{where}: field {name} is missing a type")
        # A bare type name; message or enum is decided once every file is parsed.
        field_def.type_name = field_def.type
        field_def.type = ""
    elif field_def.type in ("message", "enum") and not field_def.type_name:
        raise DescriptorError(f"{where}: field {name} needs a type_name")
    return field_def


def _expand_map_field(field_def: FieldDef, raw: Any, where: str, parent: MessageDef) -> None:
    """Rewrite a ``map: {key, value}`` field as a repeated reference to a synthesized entry."""
    spec = _require_mapping(raw, f"{where}: map field {field_def.name}")
    key_type = str(spec.get("key") or "")
    value_type = str(spec.get("value") or "")
    if key_type not in SCALAR_TYPES or not value_type:
        raise DescriptorError(
            f"{where}: map field {field_def.name} needs a scalar key and a value type"
        )
    entry_name = "".join(part[:1].upper() + part[1:] for part in field_def.name.split("_")) + "Entry"
    value_field = FieldDef(name="value", number=2, type=value_type)
    if value_type not in SCALAR_TYPES:
        value_field.type_name = value_type
        value_field.type = ""
    parent.messages.append(
        MessageDef(
            name=entry_name,
            fields=[FieldDef(name="key", number=1, type=key_type), value_field],
            map_entry=True,
        )
    )
    field_def.type = "message"
    field_def.type_name = entry_name
    field_def.repeated = True


# -- reference resolution ------------------------------------------------------


class _TypeResolver:
    """Qualifies type references and decides message versus enum for bare names."""

    def __init__(self, files: Iterable[SchemaFile]) -> None:
        self.files = list(files)
        self.messages: Set[str] = set()
        self.enums: Set[str] = set()
        for schema_file in self.files:
            prefix = schema_file.package
            for message in schema_file.messages:
                self._index_message(message, prefix)
            for enum in schema_file.enums:
                self.enums.add(_join(prefix, enum.name))

    def _index_message(self, message: MessageDef, scope: str) -> None:
        full_name = _join(scope, message.name)
        self.messages.add(full_name)
        for nested in message.messages:
            self._index_message(nested, full_name)
        for enum in message.enums:
            self.enums.add(_join(full_name, enum.name))

    def resolve(self) -> None:
        for schema_file in self.files:
            for service in schema_file.services:
                for method in service.methods:
                    method.input_type = self._qualify(method.input_type, schema_file.package)[0]
                    method.output_type = self._qualify(method.output_type, schema_file.package)[0]
            for message in schema_file.messages:
                self._resolve_message(message, schema_file.package)

    def _resolve_message(self, message: MessageDef, scope: str) -> None:
        full_name = _join(scope, message.name)
        for field_def in message.fields:
            if not field_def.type_name:
                continue
            qualified, kind = self._qualify(field_def.type_name, full_name)
            field_def.type_name = qualified
            if not field_def.type:
                field_def.type = kind or "message"
        for nested in message.messages:
            self._resolve_message(nested, full_name)

    def _qualify(self, reference: str, scope: str) -> Tuple[str, Optional[str]]:
        """Search ``scope`` and its parents for ``reference``, innermost first."""
        if reference.startswith("."):
            name = reference[1:]
            return name, self._kind(name)
        candidates: List[str] = []
        parts = scope.split(".") if scope else []
        for depth in range(len(parts), -1, -1):
            candidates.append(_join(".".join(parts[:depth]), reference))
        for candidate in candidates:
            kind = self._kind(candidate)
            if kind is not None:
                return candidate, kind
        # Unknown references stay as written; the collector reports them.
        return reference, None

    def _kind(self, full_name: str) -> Optional[str]:
        if full_name in self.messages:
            return "message"
        if full_name in self.enums:
            return "enum"
        return None


def _join(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


__all__ = [
    "DescriptorError",
    "SCALAR_TYPES",
    "load_descriptor_set",
    "parse_descriptor_set",
]

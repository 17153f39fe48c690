"""Lookup of every message and enum visible to the invocation, by qualified name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..models import EnumDef, MessageDef, PackageInfo, SchemaFile


@dataclass(frozen=True)
class TypeLocation:
    package: str
    local_name: str
    schema_file: str
    directory: str
    is_nested: bool


class TypeIndex:
    """Resolves ``library.v1.Book.Chapter`` to its package, flattened name and file."""

    def __init__(self, packages: Dict[str, PackageInfo]) -> None:
        self._messages: Dict[str, Tuple[TypeLocation, MessageDef]] = {}
        self._enums: Dict[str, Tuple[TypeLocation, EnumDef]] = {}
        for name in sorted(packages):
            for schema_file in packages[name].files:
                self._index_file(schema_file)

    def _index_file(self, schema_file: SchemaFile) -> None:
        for message in schema_file.messages:
            self._index_message(schema_file, message, ())
        for enum in schema_file.enums:
            self._add_enum(schema_file, enum, ())

    def _index_message(
        self, schema_file: SchemaFile, message: MessageDef, parents: Tuple[str, ...]
    ) -> None:
        lineage = parents + (message.name,)
        self._messages[self._qualify(schema_file, lineage)] = (
            self._location(schema_file, lineage),
            message,
        )
        for nested in message.messages:
            self._index_message(schema_file, nested, lineage)
        for enum in message.enums:
            self._add_enum(schema_file, enum, lineage)

    def _add_enum(self, schema_file: SchemaFile, enum: EnumDef, parents: Tuple[str, ...]) -> None:
        lineage = parents + (enum.name,)
        self._enums[self._qualify(schema_file, lineage)] = (
            self._location(schema_file, lineage),
            enum,
        )

    @staticmethod
    def _qualify(schema_file: SchemaFile, lineage: Tuple[str, ...]) -> str:
        return ".".join(filter(None, (schema_file.package,) + lineage))

    @staticmethod
    def _location(schema_file: SchemaFile, lineage: Tuple[str, ...]) -> TypeLocation:
        return TypeLocation(
            package=schema_file.package,
            local_name="_".join(lineage),
            schema_file=schema_file.path,
            directory=schema_file.directory,
            is_nested=len(lineage) > 1,
        )

    def message(self, full_name: str) -> Optional[Tuple[TypeLocation, MessageDef]]:
        return self._messages.get(full_name.lstrip("."))

    def enum(self, full_name: str) -> Optional[Tuple[TypeLocation, EnumDef]]:
        return self._enums.get(full_name.lstrip("."))

    def locate(self, full_name: str) -> Optional[TypeLocation]:
        found = self.message(full_name) or self.enum(full_name)
        return found[0] if found else None

    def message_names(self) -> Iterable[str]:
        return sorted(self._messages)


__all__ = ["TypeIndex", "TypeLocation"]

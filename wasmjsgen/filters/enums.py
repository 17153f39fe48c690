"""Enum collection across schema files."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.analyzer import SchemaAnalyzer
from ..models import EnumDef, MessageDef, SchemaFile
from .criteria import FilterCriteria
from .results import CollectionResult


@dataclass(frozen=True)
class EnumValueInfo:
    name: str
    number: int
    comment: str = ""


@dataclass(frozen=True)
class EnumInfo:
    name: str
    fully_qualified_name: str
    package_name: str
    schema_file: str
    values: Tuple[EnumValueInfo, ...] = field(default_factory=tuple)
    is_nested: bool = False
    comment: str = ""


class EnumCollector:
    """Collects top-level enums and enums nested inside messages."""

    def __init__(self, analyzer: SchemaAnalyzer | None = None) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()

    def collect_enums(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> CollectionResult[EnumInfo]:
        items: List[EnumInfo] = []
        total = 0
        for schema_file in files:
            for enum in schema_file.enums:
                total += 1
                items.append(self._build(enum, schema_file, ()))
            if criteria.exclude_nested_enums:
                continue
            for message in schema_file.messages:
                total += self._collect_nested(message, schema_file, criteria, items, ())
        return CollectionResult(items=items, total_found=total, files_scanned=len(files))

    def _collect_nested(
        self,
        message: MessageDef,
        schema_file: SchemaFile,
        criteria: FilterCriteria,
        items: List[EnumInfo],
        parents: Tuple[str, ...],
    ) -> int:
        if criteria.exclude_map_entries and self.analyzer.is_map_entry(message):
            return 0
        lineage = parents + (message.name,)
        found = 0
        for enum in message.enums:
            found += 1
            items.append(self._build(enum, schema_file, lineage))
        for nested in message.messages:
            found += self._collect_nested(nested, schema_file, criteria, items, lineage)
        return found

    def _build(
        self, enum: EnumDef, schema_file: SchemaFile, parents: Tuple[str, ...]
    ) -> EnumInfo:
        lineage = parents + (enum.name,)
        return EnumInfo(
            name="_".join(lineage),
            fully_qualified_name=".".join(filter(None, (schema_file.package,) + lineage)),
            package_name=schema_file.package,
            schema_file=schema_file.path,
            values=tuple(
                EnumValueInfo(value.name, value.number, value.comment.strip())
                for value in enum.values
            ),
            is_nested=bool(parents),
            comment=enum.comment.strip(),
        )

    def has_any_enums(self, files: Iterable[SchemaFile], criteria: FilterCriteria) -> bool:
        return bool(self.collect_enums(list(files), criteria).items)

    def collect_enums_by_package(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> Dict[str, CollectionResult[EnumInfo]]:
        by_package: Dict[str, List[SchemaFile]] = defaultdict(list)
        for schema_file in files:
            by_package[schema_file.package].append(schema_file)
        return {
            package: self.collect_enums(by_package[package], criteria)
            for package in sorted(by_package)
        }


def enum_names(result: CollectionResult[EnumInfo]) -> List[str]:
    return [info.name for info in result.items]


__all__ = ["EnumCollector", "EnumInfo", "EnumValueInfo", "enum_names"]

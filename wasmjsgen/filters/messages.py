"""Message collection across schema files."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.analyzer import SchemaAnalyzer
from ..models import MessageDef, SchemaFile
from .criteria import FilterCriteria
from .results import CollectionResult


@dataclass(frozen=True)
class MessageInfo:
    """A collected message. Nested messages are flattened as ``Parent_Child``."""

    name: str
    fully_qualified_name: str
    package_name: str
    schema_file: str
    definition: MessageDef
    is_nested: bool = False
    is_map_entry: bool = False
    comment: str = ""


class MessageCollector:
    def __init__(self, analyzer: SchemaAnalyzer | None = None) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()

    def collect_messages(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> CollectionResult[MessageInfo]:
        """Collect top-level messages and, unless disabled, their nested messages."""
        items: List[MessageInfo] = []
        total = 0
        for schema_file in files:
            for message in schema_file.messages:
                total += self._collect(
                    message, schema_file, criteria, items, (), recurse=True
                )
        return CollectionResult(items=items, total_found=total, files_scanned=len(files))

    def collect_top_level_messages(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> CollectionResult[MessageInfo]:
        items: List[MessageInfo] = []
        total = 0
        for schema_file in files:
            for message in schema_file.messages:
                total += self._collect(
                    message, schema_file, criteria, items, (), recurse=False
                )
        return CollectionResult(items=items, total_found=total, files_scanned=len(files))

    def _collect(
        self,
        message: MessageDef,
        schema_file: SchemaFile,
        criteria: FilterCriteria,
        items: List[MessageInfo],
        parents: Tuple[str, ...],
        *,
        recurse: bool,
    ) -> int:
        found = 1
        is_map_entry = self.analyzer.is_map_entry(message)
        if criteria.exclude_map_entries and is_map_entry:
            return found

        lineage = parents + (message.name,)
        qualified = ".".join(filter(None, (schema_file.package,) + lineage))
        items.append(
            MessageInfo(
                name="_".join(lineage),
                fully_qualified_name=qualified,
                package_name=schema_file.package,
                schema_file=schema_file.path,
                definition=message,
                is_nested=bool(parents),
                is_map_entry=is_map_entry,
                comment=message.comment.strip(),
            )
        )
        if recurse and not criteria.exclude_nested_messages:
            for nested in message.messages:
                found += self._collect(
                    nested, schema_file, criteria, items, lineage, recurse=True
                )
        return found

    def has_any_messages(self, files: Iterable[SchemaFile], criteria: FilterCriteria) -> bool:
        for schema_file in files:
            for message in schema_file.messages:
                if criteria.exclude_map_entries and self.analyzer.is_map_entry(message):
                    continue
                return True
        return False

    def collect_messages_by_package(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> Dict[str, CollectionResult[MessageInfo]]:
        by_package: Dict[str, List[SchemaFile]] = defaultdict(list)
        for schema_file in files:
            by_package[schema_file.package].append(schema_file)
        return {
            package: self.collect_messages(by_package[package], criteria)
            for package in sorted(by_package)
        }


def message_names(result: CollectionResult[MessageInfo]) -> List[str]:
    return [info.name for info in result.items]


def messages_by_file(result: CollectionResult[MessageInfo]) -> Dict[str, List[MessageInfo]]:
    grouped: Dict[str, List[MessageInfo]] = defaultdict(list)
    for info in result.items:
        grouped[info.schema_file].append(info)
    return dict(grouped)


__all__ = ["MessageCollector", "MessageInfo", "message_names", "messages_by_file"]

"""Package-level filtering."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ..models import SchemaFile
from .criteria import ANNOTATION_PACKAGES, FilterCriteria
from .enums import EnumCollector
from .messages import MessageCollector
from .results import FilterStats, PackageFilterResult


class PackageFilter:
    """Skips annotation-only packages and packages with nothing to generate."""

    def __init__(
        self,
        message_collector: MessageCollector | None = None,
        enum_collector: EnumCollector | None = None,
    ) -> None:
        self.message_collector = message_collector or MessageCollector()
        self.enum_collector = enum_collector or EnumCollector()

    def is_annotation_package(self, package_name: str) -> bool:
        return package_name in ANNOTATION_PACKAGES

    def should_include_package(
        self, package_name: str, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> PackageFilterResult:
        if criteria.exclude_annotation_packages and self.is_annotation_package(package_name):
            return PackageFilterResult.excluded(
                "package is an annotation package (wasmjs.v1, etc.)"
            )

        content = {
            "has_services": any(schema_file.services for schema_file in files),
            "has_messages": self.message_collector.has_any_messages(files, criteria),
            "has_enums": self.enum_collector.has_any_enums(files, criteria),
        }
        if criteria.exclude_empty_packages and not any(content.values()):
            return PackageFilterResult.excluded(
                "package has no services, messages, or enums", **content
            )

        kinds = [
            label
            for label, present in (
                ("services", content["has_services"]),
                ("messages", content["has_messages"]),
                ("enums", content["has_enums"]),
            )
            if present
        ]
        if kinds:
            reason = "package has content: " + ", ".join(kinds)
        else:
            reason = "package included despite no content (empty package exclusion disabled)"
        return PackageFilterResult.included(reason, **content)

    def filter_packages(
        self, files: Sequence[SchemaFile], criteria: FilterCriteria
    ) -> Tuple[Dict[str, List[SchemaFile]], FilterStats]:
        """Group emit-flagged files by package and keep the packages worth generating."""
        stats = FilterStats()
        grouped: Dict[str, List[SchemaFile]] = defaultdict(list)
        for schema_file in files:
            if schema_file.generate:
                grouped[schema_file.package].append(schema_file)

        kept: Dict[str, List[SchemaFile]] = {}
        for package_name in sorted(grouped):
            package_files = grouped[package_name]
            stats.packages_total += 1
            if self.should_include_package(package_name, package_files, criteria).include:
                kept[package_name] = package_files
        return kept, stats


__all__ = ["PackageFilter"]

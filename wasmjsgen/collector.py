"""Artifact collection: builds the invocation-wide catalog of generatable entities."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .config import GenerationConfig
from .core.analyzer import SchemaAnalyzer, extract_package_name
from .core.paths import PathCalculator
from .core.wellknown import WellKnownTypes
from .filters import (
    EnumCollector,
    EnumInfo,
    FilterCriteria,
    FilterStats,
    MessageCollector,
    MessageInfo,
    MethodFilter,
    PackageFilter,
    ServiceFilter,
)
from .logging import get_logger
from .models import PackageInfo, SchemaFile, ServiceDef


class CollectionError(RuntimeError):
    """Raised when the schema set handed to the collector is inconsistent."""


@dataclass
class ServiceArtifact:
    service: ServiceDef
    package: PackageInfo
    schema_file: SchemaFile
    is_browser: bool = False

    @property
    def directory(self) -> str:
        return self.schema_file.directory


@dataclass
class MessageArtifact:
    """Messages declared in one directory of one package."""

    messages: List[MessageInfo]
    package: PackageInfo
    directory: str


@dataclass
class EnumArtifact:
    enums: List[EnumInfo]
    package: PackageInfo
    directory: str


@dataclass
class ArtifactCatalog:
    services: List[ServiceArtifact] = field(default_factory=list)
    browser_services: List[ServiceArtifact] = field(default_factory=list)
    messages: List[MessageArtifact] = field(default_factory=list)
    enums: List[EnumArtifact] = field(default_factory=list)
    packages: Dict[str, PackageInfo] = field(default_factory=dict)
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    stats: FilterStats = field(default_factory=FilterStats)

    def get_package_info(self, package_name: str) -> Optional[PackageInfo]:
        return self.packages.get(package_name)

    def get_services_for_package(
        self, package_name: str
    ) -> Tuple[List[ServiceArtifact], List[ServiceArtifact]]:
        """Return ``(regular, browser)`` services declared in ``package_name``."""
        regular = [svc for svc in self.services if svc.package.name == package_name]
        browser = [svc for svc in self.browser_services if svc.package.name == package_name]
        return regular, browser

    def has_services_for_module(self) -> bool:
        return bool(self.services or self.browser_services)

    def is_empty(self) -> bool:
        return not (self.services or self.browser_services or self.messages or self.enums)

    def all_messages(self) -> List[MessageInfo]:
        return [info for group in self.messages for info in group.messages]

    def find_message(self, fully_qualified_name: str) -> Optional[MessageInfo]:
        target = fully_qualified_name.lstrip(".")
        for info in self.all_messages():
            if info.fully_qualified_name == target:
                return info
        return None


class ArtifactCollector:
    """Discovers every service, message and enum across all visible schema files.

    The package registry is built from every file the front-end supplies;
    services and types are only collected from files flagged for emission.
    """

    def __init__(
        self,
        analyzer: SchemaAnalyzer | None = None,
        paths: PathCalculator | None = None,
        service_filter: ServiceFilter | None = None,
        method_filter: MethodFilter | None = None,
        message_collector: MessageCollector | None = None,
        enum_collector: EnumCollector | None = None,
        package_filter: PackageFilter | None = None,
        well_known: WellKnownTypes | None = None,
    ) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()
        self.paths = paths or PathCalculator()
        self.service_filter = service_filter or ServiceFilter(self.analyzer)
        self.method_filter = method_filter or MethodFilter(self.analyzer)
        self.message_collector = message_collector or MessageCollector(self.analyzer)
        self.enum_collector = enum_collector or EnumCollector(self.analyzer)
        self.package_filter = package_filter or PackageFilter(
            self.message_collector, self.enum_collector
        )
        self.well_known = well_known or WellKnownTypes()
        self.logger = get_logger("collector")

    def collect_all_artifacts(
        self,
        files: Sequence[SchemaFile],
        config: GenerationConfig,
        criteria: FilterCriteria,
    ) -> ArtifactCatalog:
        self.logger.debug("Collecting artifacts from %d schema files", len(files))
        catalog = ArtifactCatalog(packages=self._build_registry(files), criteria=criteria)

        for package_name in sorted(catalog.packages):
            package = catalog.packages[package_name]
            emitted = [schema_file for schema_file in package.files if schema_file.generate]
            if not emitted:
                self.logger.debug("Package %s has no files to emit", package_name)
                continue
            if criteria.exclude_annotation_packages and self.package_filter.is_annotation_package(
                package_name
            ):
                self.logger.debug("Skipping annotation package %s", package_name)
                continue

            catalog.stats.packages_total += 1
            self._collect_services(catalog, package, emitted, criteria)
            if config.generate_types:
                self._collect_types(catalog, package, emitted, criteria)

        self.logger.info(
            "Collected %d services, %d browser services, %d message groups, "
            "%d enum groups across %d packages",
            len(catalog.services),
            len(catalog.browser_services),
            len(catalog.messages),
            len(catalog.enums),
            len(catalog.packages),
        )
        self.logger.info(catalog.stats.summary())
        return catalog

    def _build_registry(self, files: Sequence[SchemaFile]) -> Dict[str, PackageInfo]:
        seen: Set[str] = set()
        grouped: Dict[str, List[SchemaFile]] = defaultdict(list)
        for schema_file in files:
            if not schema_file.path:
                raise CollectionError(
                    f"schema file in package {schema_file.package or '<none>'} has no path"
                )
            if schema_file.path in seen:
                raise CollectionError(
                    f"schema file {schema_file.path} (package {schema_file.package}) "
                    "was supplied more than once"
                )
            seen.add(schema_file.path)
            grouped[schema_file.package].append(schema_file)

        return {
            name: PackageInfo(
                name=name,
                path=self.paths.package_path(name),
                files=sorted(grouped[name], key=lambda schema_file: schema_file.path),
            )
            for name in sorted(grouped)
        }

    def _collect_services(
        self,
        catalog: ArtifactCatalog,
        package: PackageInfo,
        emitted: Sequence[SchemaFile],
        criteria: FilterCriteria,
    ) -> None:
        found: List[ServiceArtifact] = []
        for schema_file in emitted:
            for service in schema_file.services:
                result = self.service_filter.should_include_service(
                    service, criteria, catalog.stats
                )
                if not result.include:
                    self.logger.debug("Skipping service %s: %s", service.name, result.reason)
                    continue
                self._check_method_types(catalog, schema_file, service, criteria)
                found.append(
                    ServiceArtifact(
                        service=service,
                        package=package,
                        schema_file=schema_file,
                        is_browser=result.is_browser_provided,
                    )
                )

        for artifact in sorted(found, key=lambda item: item.service.name):
            kind = "browser" if artifact.is_browser else "regular"
            self.logger.debug("Found %s service %s.%s", kind, package.name, artifact.service.name)
            if artifact.is_browser:
                catalog.browser_services.append(artifact)
            else:
                catalog.services.append(artifact)

    def _check_method_types(
        self,
        catalog: ArtifactCatalog,
        schema_file: SchemaFile,
        service: ServiceDef,
        criteria: FilterCriteria,
    ) -> None:
        for method in service.methods:
            result = self.method_filter.should_include_method(method, criteria, catalog.stats)
            if not result.include:
                self.logger.debug(
                    "Skipping method %s.%s: %s", service.name, method.name, result.reason
                )
                continue
            for type_name in (method.input_type, method.output_type):
                if self.well_known.is_well_known(type_name):
                    continue
                if extract_package_name(type_name) not in catalog.packages:
                    raise CollectionError(
                        f"method {service.name}.{method.name} in {schema_file.path} "
                        f"(package {schema_file.package}) references unknown type {type_name}"
                    )

    def _collect_types(
        self,
        catalog: ArtifactCatalog,
        package: PackageInfo,
        emitted: Sequence[SchemaFile],
        criteria: FilterCriteria,
    ) -> None:
        by_directory: Dict[str, List[SchemaFile]] = defaultdict(list)
        for schema_file in emitted:
            by_directory[schema_file.directory].append(schema_file)

        for directory in sorted(by_directory):
            group_files = by_directory[directory]
            scoped = PackageInfo(name=package.name, path=package.path, files=group_files)

            messages = self.message_collector.collect_messages(group_files, criteria)
            enums = self.enum_collector.collect_enums(group_files, criteria)
            catalog.stats.add_collection_stats(len(messages.items), len(enums.items), 0)

            if messages.items:
                catalog.messages.append(
                    MessageArtifact(messages=messages.items, package=scoped, directory=directory)
                )
                self.logger.debug(
                    "Found %d messages in %s (directory: %s)",
                    len(messages.items),
                    package.name,
                    directory or ".",
                )
            if enums.items:
                catalog.enums.append(
                    EnumArtifact(enums=enums.items, package=scoped, directory=directory)
                )
                self.logger.debug(
                    "Found %d enums in %s (directory: %s)",
                    len(enums.items),
                    package.name,
                    directory or ".",
                )


__all__ = [
    "ArtifactCatalog",
    "ArtifactCollector",
    "CollectionError",
    "EnumArtifact",
    "MessageArtifact",
    "ServiceArtifact",
]

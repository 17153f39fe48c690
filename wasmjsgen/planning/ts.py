"""TypeScript file planning.

Output layout, relative to ``ts_export_path``:

* ``<schema dir>/<camelService>Client.ts``   one per service
* ``<schema dir>/interfaces.ts`` etc.        one set per directory group
* ``<marked file dir>/factory.ts``           per ``ts_factory`` marker
* ``<package dir>/schemas.ts``               package-level schema aggregate
* ``index.ts``                               module bundle, planned once
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from ..collector import ArtifactCatalog, EnumArtifact, MessageArtifact, ServiceArtifact
from ..config import GenerationConfig
from ..core.analyzer import SchemaAnalyzer
from ..core.names import NameConverter
from ..core.paths import PathCalculator
from ..filters import MessageCollector, MessageInfo
from ..logging import get_logger
from ..models import SchemaFile
from .base import ContentHints, FilePlan, FilePlanner, FileSpec, TS_FILE_TYPES

GroupKey = Tuple[str, str]


class TSFilePlanner(FilePlanner):
    """Plans the browser-side TypeScript module."""

    target = "typescript"
    file_types = TS_FILE_TYPES

    def __init__(
        self,
        analyzer: SchemaAnalyzer | None = None,
        names: NameConverter | None = None,
        paths: PathCalculator | None = None,
        message_collector: MessageCollector | None = None,
    ) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()
        self.names = names or NameConverter()
        self.paths = paths or PathCalculator()
        self.message_collector = message_collector or MessageCollector(self.analyzer)
        self.logger = get_logger("planning.ts")

    def plan_files(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FilePlan:
        plan = FilePlan(config=config)
        if config.generate_clients:
            for artifact in self._sorted_services(catalog):
                plan.add(self._client_spec(artifact, config))

        if config.generate_types:
            groups = self._type_groups(catalog)
            for key in sorted(groups):
                message_group, enum_group = groups[key]
                for spec in self._type_specs(message_group, enum_group, config):
                    plan.add(spec)
            for spec in self._package_schema_specs(catalog, groups, config):
                plan.add(spec)
            if config.generate_factories:
                for spec in self._factory_specs(catalog, config):
                    plan.add(spec)

        if config.generate_clients and catalog.has_services_for_module():
            plan.add(self._bundle_spec(catalog, config))

        self.logger.debug("Planned %d TypeScript files", len(plan))
        return plan.validate()

    # -- naming ------------------------------------------------------------

    def module_name(self, catalog: ArtifactCatalog, config: GenerationConfig) -> str:
        if config.module_name:
            return config.module_name
        return self.names.to_module_name(self._primary_package(catalog))

    def js_namespace(self, catalog: ArtifactCatalog, config: GenerationConfig) -> str:
        if config.js_namespace:
            return config.js_namespace
        return self.names.to_js_namespace(self._primary_package(catalog))

    def _primary_package(self, catalog: ArtifactCatalog) -> str:
        services = self._sorted_services(catalog)
        if services:
            return services[0].package.name
        names = sorted(group.package.name for group in catalog.messages)
        return names[0] if names else ""

    def _out(self, config: GenerationConfig, *parts: str) -> str:
        return self.paths.join(config.ts_export_path, *parts)

    # -- services ----------------------------------------------------------

    def _sorted_services(self, catalog: ArtifactCatalog) -> List[ServiceArtifact]:
        return sorted(
            list(catalog.services) + list(catalog.browser_services),
            key=lambda artifact: (artifact.package.name, artifact.service.name),
        )

    def _client_spec(self, artifact: ServiceArtifact, config: GenerationConfig) -> FileSpec:
        service = artifact.service
        filename = self.names.to_client_file_stem(service.name) + ".ts"
        return FileSpec(
            name=f"client_{artifact.package.name}.{service.name}",
            path=self._out(config, artifact.directory, filename),
            type="service_client",
            required=True,
            hints=ContentHints(
                has_services=True, has_browser_services=artifact.is_browser
            ),
            metadata={"service": artifact},
        )

    def _bundle_spec(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FileSpec:
        # Module-level settings only; never per-service data.
        return FileSpec(
            name="bundle",
            path=self._out(config, "index.ts"),
            type="bundle",
            required=True,
            hints=ContentHints(has_services=True),
            metadata={
                "module_name": self.module_name(catalog, config),
                "js_namespace": self.js_namespace(catalog, config),
                "api_structure": config.js_structure,
            },
        )

    # -- types -------------------------------------------------------------

    def _type_groups(
        self, catalog: ArtifactCatalog
    ) -> Dict[GroupKey, Tuple[Optional[MessageArtifact], Optional[EnumArtifact]]]:
        groups: Dict[GroupKey, Tuple[Optional[MessageArtifact], Optional[EnumArtifact]]] = {}
        for message_group in catalog.messages:
            key = (message_group.package.name, message_group.directory)
            groups[key] = (message_group, groups.get(key, (None, None))[1])
        for enum_group in catalog.enums:
            key = (enum_group.package.name, enum_group.directory)
            groups[key] = (groups.get(key, (None, None))[0], enum_group)
        return groups

    def _type_specs(
        self,
        message_group: Optional[MessageArtifact],
        enum_group: Optional[EnumArtifact],
        config: GenerationConfig,
    ) -> List[FileSpec]:
        anchor = message_group if message_group is not None else enum_group
        if anchor is None:
            return []
        directory = anchor.directory
        package_name = anchor.package.name
        metadata = {
            "package": anchor.package,
            "directory": directory,
            "messages": message_group,
            "enums": enum_group,
        }
        specs = [
            FileSpec(
                name=f"interfaces:{package_name}:{directory}",
                path=self._out(config, directory, "interfaces.ts"),
                type="interfaces",
                required=True,
                hints=ContentHints(
                    has_messages=message_group is not None, has_enums=enum_group is not None
                ),
                metadata=dict(metadata),
            )
        ]
        if message_group is None:
            return specs
        for file_type in ("models", "schemas", "deserializer"):
            specs.append(
                FileSpec(
                    name=f"{file_type}:{package_name}:{directory}",
                    path=self._out(config, directory, f"{file_type}.ts"),
                    type=file_type,
                    hints=ContentHints(has_messages=True, has_enums=enum_group is not None),
                    metadata=dict(metadata),
                )
            )
        return specs

    def _package_schema_specs(
        self,
        catalog: ArtifactCatalog,
        groups: Dict[GroupKey, Tuple[Optional[MessageArtifact], Optional[EnumArtifact]]],
        config: GenerationConfig,
    ) -> List[FileSpec]:
        """Aggregate ``schemas.ts`` at the package root for packages split across directories."""
        directories: Dict[str, List[str]] = {}
        for (package_name, directory), (message_group, _) in groups.items():
            if message_group is not None:
                directories.setdefault(package_name, []).append(directory)

        specs: List[FileSpec] = []
        for package_name in sorted(directories):
            package_dir = self.paths.package_path(package_name)
            dirs = sorted(directories[package_name])
            if package_dir in dirs or len(dirs) < 2:
                continue
            specs.append(
                FileSpec(
                    name=f"package_schemas:{package_name}",
                    path=self._out(config, package_dir, "schemas.ts"),
                    type="package_schemas",
                    hints=ContentHints(has_messages=True),
                    metadata={
                        "package": catalog.packages[package_name],
                        "directory": package_dir,
                        "directories": dirs,
                    },
                )
            )
        return specs

    def _factory_specs(self, catalog: ArtifactCatalog, config: GenerationConfig) -> List[FileSpec]:
        """One factory per directory group, extended by ``ts_factory`` markers.

        A marker adds every message reachable through the marked file's
        same-package imports; a marker in a directory without its own group
        gets a factory of its own.
        """
        by_directory: Dict[GroupKey, Dict[str, MessageInfo]] = {}
        markers: Dict[GroupKey, List[str]] = {}
        for group in catalog.messages:
            key = (group.package.name, group.directory)
            by_directory[key] = {info.fully_qualified_name: info for info in group.messages}

        for schema_file in self._marked_files(catalog):
            key = (schema_file.package, schema_file.directory)
            reachable = self.factory_messages(catalog, schema_file)
            bucket = by_directory.setdefault(key, {})
            for info in reachable:
                bucket.setdefault(info.fully_qualified_name, info)
            markers.setdefault(key, []).append(schema_file.path)

        specs: List[FileSpec] = []
        for key in sorted(by_directory):
            package_name, directory = key
            messages = [by_directory[key][name] for name in sorted(by_directory[key])]
            if not messages:
                continue
            specs.append(
                FileSpec(
                    name=f"factory:{package_name}:{directory}",
                    path=self._out(config, directory, "factory.ts"),
                    type="factory",
                    hints=ContentHints(has_messages=True),
                    metadata={
                        "package": catalog.packages[package_name],
                        "directory": directory,
                        "messages": messages,
                        "marker_files": sorted(markers.get(key, [])),
                    },
                )
            )
        return specs

    def _marked_files(self, catalog: ArtifactCatalog) -> List[SchemaFile]:
        marked: List[SchemaFile] = []
        for package_name in sorted(catalog.packages):
            for schema_file in catalog.packages[package_name].files:
                if schema_file.generate and self.analyzer.has_factory_marker(schema_file):
                    marked.append(schema_file)
        return marked

    def factory_messages(
        self, catalog: ArtifactCatalog, marked: SchemaFile
    ) -> List[MessageInfo]:
        """Messages of ``marked`` and of every same-package file it imports, transitively."""
        package = catalog.packages.get(marked.package)
        if package is None:
            return []
        files_by_path = {schema_file.path: schema_file for schema_file in package.files}

        reachable: List[SchemaFile] = []
        seen: Set[str] = set()
        queue = deque([marked])
        while queue:
            current = queue.popleft()
            if current.path in seen:
                continue
            seen.add(current.path)
            reachable.append(current)
            for imported in sorted(current.imports):
                # Imports outside the package resolve to None and are skipped.
                target = files_by_path.get(imported)
                if target is not None and target.path not in seen:
                    queue.append(target)

        result = self.message_collector.collect_messages(
            sorted(reachable, key=lambda schema_file: schema_file.path), catalog.criteria
        )
        return sorted(result.items, key=lambda info: info.fully_qualified_name)


__all__ = ["TSFilePlanner"]

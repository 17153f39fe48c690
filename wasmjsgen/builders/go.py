"""Template data for the Go/WASM wrapper, example ``main`` and build script."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..collector import ArtifactCatalog, ServiceArtifact
from ..config import GenerationConfig
from ..core.analyzer import SchemaAnalyzer, extract_message_name, extract_package_name
from ..core.names import NameConverter
from ..core.paths import PathCalculator
from ..core.wellknown import WellKnownTypes
from ..filters import MethodFilter
from ..models import MethodDef, PackageInfo, SchemaFile
from .index import TypeIndex


@dataclass
class GoImport:
    path: str
    alias: str


@dataclass
class GoMethodData:
    name: str
    js_name: str
    go_func_name: str
    request_type: str
    response_type: str
    request_ts_type: str
    response_ts_type: str
    is_async: bool = False
    is_server_streaming: bool = False
    comment: str = ""


@dataclass
class GoServiceData:
    name: str
    js_name: str
    go_type: str
    package_alias: str
    is_browser_provided: bool = False
    comment: str = ""
    methods: List[GoMethodData] = field(default_factory=list)


@dataclass
class GoTemplateData:
    package_name: str
    source_path: str
    go_package: str
    go_package_name: str
    module_name: str
    js_namespace: str
    api_structure: str
    services: List[GoServiceData] = field(default_factory=list)
    browser_clients: List[GoServiceData] = field(default_factory=list)
    imports: List[GoImport] = field(default_factory=list)

    @property
    def has_services(self) -> bool:
        return bool(self.services)

    @property
    def has_browser_clients(self) -> bool:
        return bool(self.browser_clients)

    @property
    def has_streaming(self) -> bool:
        return any(
            method.is_server_streaming for service in self.services for method in service.methods
        )


@dataclass
class BuildTarget:
    package_name: str
    directory: str
    module_name: str


@dataclass
class BuildScriptData:
    wasm_export_path: str
    targets: List[BuildTarget] = field(default_factory=list)


def go_import_path(schema_file: SchemaFile) -> str:
    """Go import path from the ``go_package`` option, falling back to the package path."""
    option = schema_file.options.get("go_package")
    if isinstance(option, str) and option.strip():
        return option.split(";", 1)[0].strip()
    return schema_file.package.replace(".", "/")


class GoDataBuilder:
    """Builds template data for one package's WASM wrapper."""

    def __init__(
        self,
        catalog: ArtifactCatalog,
        analyzer: SchemaAnalyzer | None = None,
        names: NameConverter | None = None,
        paths: PathCalculator | None = None,
        method_filter: MethodFilter | None = None,
        well_known: WellKnownTypes | None = None,
    ) -> None:
        self.catalog = catalog
        self.analyzer = analyzer or SchemaAnalyzer()
        self.names = names or NameConverter()
        self.paths = paths or PathCalculator()
        self.method_filter = method_filter or MethodFilter(self.analyzer, self.names)
        self.well_known = well_known or WellKnownTypes()
        self.index = TypeIndex(catalog.packages)
        self._files: Dict[str, SchemaFile] = {
            schema_file.path: schema_file
            for package in catalog.packages.values()
            for schema_file in package.files
        }

    def module_name(self, package_name: str, config: GenerationConfig) -> str:
        return config.module_name or self.names.to_module_name(package_name)

    def js_namespace(self, package_name: str, config: GenerationConfig) -> str:
        return config.js_namespace or self.names.to_js_namespace(package_name)

    def build_template_data(
        self, package: PackageInfo, config: GenerationConfig
    ) -> GoTemplateData:
        regular, browser = self.catalog.get_services_for_package(package.name)
        imports: Dict[str, str] = {}
        services = [
            data
            for data in (self.build_service_data(artifact, imports) for artifact in regular)
            if data is not None
        ]
        clients = [
            data
            for data in (self.build_service_data(artifact, imports) for artifact in browser)
            if data is not None
        ]
        primary = (regular or browser)[0].schema_file if (regular or browser) else None
        suffix = config.wasm_package_suffix or "wasm"
        return GoTemplateData(
            package_name=package.name,
            source_path=primary.path if primary is not None else "",
            go_package=go_import_path(primary) if primary is not None else "",
            go_package_name=self.names.sanitize_identifier(
                package.name.split(".")[-1] + "_" + suffix if package.name else suffix
            ),
            module_name=self.module_name(package.name, config),
            js_namespace=self.js_namespace(package.name, config),
            api_structure=config.js_structure,
            services=services,
            browser_clients=clients,
            imports=[GoImport(path, imports[path]) for path in sorted(imports)],
        )

    def build_service_data(
        self, artifact: ServiceArtifact, imports: Dict[str, str]
    ) -> Optional[GoServiceData]:
        """Service data, or ``None`` when every method was filtered out."""
        service = artifact.service
        criteria = self.catalog.criteria
        methods = [
            self.build_method_data(service.name, method, imports)
            for method in self.method_filter.filter_methods(service.methods, criteria)
        ]
        if not methods:
            return None

        package_path = go_import_path(artifact.schema_file)
        alias = self.paths.go_package_alias(package_path)
        imports.setdefault(package_path, alias)
        suffix = "Client" if artifact.is_browser else "Server"
        return GoServiceData(
            name=service.name,
            js_name=self.analyzer.custom_service_name(service)
            or self.names.to_camel_case(service.name),
            go_type=f"{alias}.{service.name}{suffix}",
            package_alias=alias,
            is_browser_provided=artifact.is_browser,
            comment=service.comment.strip(),
            methods=methods,
        )

    def build_method_data(
        self, service_name: str, method: MethodDef, imports: Dict[str, str]
    ) -> GoMethodData:
        criteria = self.catalog.criteria
        return GoMethodData(
            name=method.name,
            js_name=self.method_filter.method_js_name(method, criteria),
            go_func_name=self.names.to_go_func_name(service_name, method.name),
            request_type=self._go_type(method.input_type, imports),
            response_type=self._go_type(method.output_type, imports),
            request_ts_type=self._local_name(method.input_type),
            response_ts_type=self._local_name(method.output_type),
            is_async=self.analyzer.is_async(method),
            is_server_streaming=method.server_streaming,
            comment=method.comment.strip(),
        )

    def _local_name(self, full_name: str) -> str:
        location = self.index.locate(full_name)
        if location is not None:
            return location.local_name
        return extract_message_name(full_name)

    def _go_type(self, full_name: str, imports: Dict[str, str]) -> str:
        known = self.well_known.get(full_name)
        if known is not None and known.go_import_path:
            imports.setdefault(known.go_import_path, known.go_import_path.rsplit("/", 1)[-1])
            return known.go_type
        location = self.index.locate(full_name)
        schema_file = self._files.get(location.schema_file) if location else None
        if schema_file is not None:
            path = go_import_path(schema_file)
        else:
            path = extract_package_name(full_name).replace(".", "/")
        local = self._local_name(full_name)
        if not path:
            return local
        alias = self.paths.go_package_alias(path)
        imports.setdefault(path, alias)
        return f"{alias}.{local}"

    def build_script_data(self, metadata: Dict[str, Any], config: GenerationConfig) -> BuildScriptData:
        targets = [
            BuildTarget(
                package_name=name,
                directory=self.paths.join(config.wasm_export_path, self.paths.package_path(name)),
                module_name=self.module_name(name, config),
            )
            for name in metadata.get("packages", [])
        ]
        return BuildScriptData(wasm_export_path=config.wasm_export_path, targets=targets)


__all__ = [
    "BuildScriptData",
    "BuildTarget",
    "GoDataBuilder",
    "GoImport",
    "GoMethodData",
    "GoServiceData",
    "GoTemplateData",
    "go_import_path",
]

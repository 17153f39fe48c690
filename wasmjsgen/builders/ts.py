"""Template data for the TypeScript target.

Every builder returns plain dataclasses; imports and members are sorted so
that identical catalogs always produce identical data.
"""

from __future__ import annotations

import posixpath
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from ..collector import ArtifactCatalog, EnumArtifact, MessageArtifact, ServiceArtifact
from ..config import GenerationConfig
from ..core.analyzer import SchemaAnalyzer, extract_message_name, extract_package_name
from ..core.names import NameConverter
from ..core.paths import PathCalculator
from ..core.wellknown import WellKnownTypes
from ..filters import EnumInfo, MessageInfo, MethodFilter
from ..models import FieldDef, MessageDef
from .index import TypeIndex

_NUMERIC = {
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
    "double",
    "float",
}
_SCALARS = {
    "string": ("string", '""'),
    "bool": ("boolean", "false"),
    "bytes": ("Uint8Array", "new Uint8Array()"),
}


@dataclass
class ImportGroup:
    import_path: str
    types: List[str] = field(default_factory=list)


@dataclass
class SchemaImport:
    registry_name: str
    alias: str
    import_path: str


@dataclass
class FactoryDependency:
    package_name: str
    factory_name: str
    import_path: str
    instance_name: str


@dataclass
class MethodData:
    name: str
    js_name: str
    request_type: str
    response_type: str
    is_async: bool = False
    is_server_streaming: bool = False
    comment: str = ""


@dataclass
class ServiceClientData:
    package_name: str
    service_name: str
    js_name: str
    client_name: str
    module_name: str
    api_structure: str
    source_path: str
    is_browser: bool
    methods: List[MethodData] = field(default_factory=list)
    import_groups: List[ImportGroup] = field(default_factory=list)


@dataclass
class FieldData:
    name: str
    ts_name: str
    ts_type: str
    number: int
    kind: str = "message"
    default_value: str = "undefined"
    is_optional: bool = False
    is_repeated: bool = False
    is_map: bool = False
    is_oneof: bool = False
    oneof_group: str = ""
    message_type: str = ""
    message_package: str = ""
    enum_type: str = ""
    comment: str = ""


@dataclass
class MessageData:
    name: str
    ts_name: str
    fully_qualified_name: str
    package_name: str
    schema_file: str
    method_name: str
    fields: List[FieldData] = field(default_factory=list)
    oneof_groups: List[str] = field(default_factory=list)
    is_nested: bool = False
    comment: str = ""


@dataclass
class EnumValueData:
    name: str
    number: int
    comment: str = ""


@dataclass
class EnumData:
    name: str
    fully_qualified_name: str
    values: List[EnumValueData] = field(default_factory=list)
    comment: str = ""


@dataclass
class TypeData:
    package_name: str
    directory: str
    source_path: str
    base_name: str
    factory_name: str
    deserializer_name: str
    schema_registry_name: str
    messages: List[MessageData] = field(default_factory=list)
    enums: List[EnumData] = field(default_factory=list)
    external_imports: List[ImportGroup] = field(default_factory=list)

    @property
    def has_messages(self) -> bool:
        return bool(self.messages)

    @property
    def has_enums(self) -> bool:
        return bool(self.enums)


@dataclass
class FactoryData:
    package_name: str
    directory: str
    factory_name: str
    schema_registry_name: str
    messages: List[MessageData] = field(default_factory=list)
    import_groups: List[ImportGroup] = field(default_factory=list)
    schema_imports: List[SchemaImport] = field(default_factory=list)
    dependencies: List[FactoryDependency] = field(default_factory=list)


@dataclass
class PackageSchemaData:
    package_name: str
    schema_registry_name: str
    schema_imports: List[SchemaImport] = field(default_factory=list)


@dataclass
class BundleData:
    module_name: str
    js_namespace: str
    api_structure: str
    bundle_class: str


def _groups(mapping: Dict[str, Set[str]]) -> List[ImportGroup]:
    return [ImportGroup(path, sorted(mapping[path])) for path in sorted(mapping)]


class TSDataBuilder:
    """Builds template data for each TypeScript file type."""

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

    # -- shared naming -----------------------------------------------------

    def base_name(self, package_name: str) -> str:
        return package_name.replace(".", "_")

    def factory_name(self, package_name: str) -> str:
        return self.names.to_pascal_case(self.base_name(package_name)) + "Factory"

    def deserializer_name(self, package_name: str) -> str:
        return self.names.to_pascal_case(self.base_name(package_name)) + "Deserializer"

    def schema_registry_name(self, package_name: str) -> str:
        return self.names.to_camel_case(self.base_name(package_name)) + "SchemaRegistry"

    def module_name(self, package_name: str, config: GenerationConfig) -> str:
        return config.module_name or self.names.to_module_name(package_name)

    def type_name(self, full_name: str) -> str:
        """TypeScript name for a message or enum reference."""
        mapping = self.well_known.get(full_name)
        if mapping is not None:
            return mapping.ts_type
        location = self.index.locate(full_name)
        if location is not None:
            return location.local_name
        return extract_message_name(full_name)

    def _import_for(
        self, full_name: str, from_dir: str, from_package: str, module: str
    ) -> Optional[str]:
        """Import specifier for ``full_name``.

        ``None`` means the type is declared beside the importer; an empty string
        means a native type that needs no import.
        """
        mapping = self.well_known.get(full_name)
        if mapping is not None:
            return mapping.import_source
        location = self.index.locate(full_name)
        if location is not None:
            if location.directory == from_dir:
                return None
            return self.paths.directory_import(from_dir, location.directory, module)
        target_package = extract_package_name(full_name)
        if target_package == from_package:
            return None
        return self.paths.cross_package_import_path(from_package, target_package) + f"/{module}"

    # -- service clients ---------------------------------------------------

    def build_service_client_data(
        self, artifact: ServiceArtifact, config: GenerationConfig
    ) -> ServiceClientData:
        service = artifact.service
        criteria = self.catalog.criteria
        directory = artifact.directory
        imports: Dict[str, Set[str]] = defaultdict(set)
        methods: List[MethodData] = []

        for method in self.method_filter.filter_methods(service.methods, criteria):
            request = self.type_name(method.input_type)
            response = self.type_name(method.output_type)
            methods.append(
                MethodData(
                    name=method.name,
                    js_name=self.method_filter.method_js_name(method, criteria),
                    request_type=request,
                    response_type=response,
                    is_async=self.analyzer.is_async(method),
                    is_server_streaming=method.server_streaming,
                    comment=method.comment.strip(),
                )
            )
            for full_name, ts_name in ((method.input_type, request), (method.output_type, response)):
                path = self._import_for(full_name, directory, artifact.package.name, "interfaces")
                if path == "":
                    continue
                imports[path or "./interfaces"].add(ts_name)

        return ServiceClientData(
            package_name=artifact.package.name,
            service_name=service.name,
            js_name=self.analyzer.custom_service_name(service) or service.name,
            client_name=service.name + "Client",
            module_name=self.module_name(artifact.package.name, config),
            api_structure=config.js_structure,
            source_path=artifact.schema_file.path,
            is_browser=artifact.is_browser,
            methods=methods,
            import_groups=_groups(imports),
        )

    # -- types ---------------------------------------------------------------

    def build_type_data(
        self,
        message_group: Optional[MessageArtifact],
        enum_group: Optional[EnumArtifact],
    ) -> TypeData:
        anchor = message_group if message_group is not None else enum_group
        if anchor is None:
            raise ValueError("type data needs a message or enum group")
        package_name = anchor.package.name
        directory = anchor.directory
        message_infos = message_group.messages if message_group is not None else []
        enum_infos = enum_group.enums if enum_group is not None else []
        messages = [self.message_data(info) for info in message_infos]
        enums = [self.enum_data(info) for info in enum_infos]

        external: Dict[str, Set[str]] = defaultdict(set)
        for message in messages:
            for field_data in message.fields:
                reference = field_data.message_type or field_data.enum_type
                if not reference:
                    continue
                path = self._import_for(reference, directory, package_name, "interfaces")
                if path:
                    external[path].add(self.type_name(reference))

        files = anchor.package.files
        return TypeData(
            package_name=package_name,
            directory=directory,
            source_path=files[0].path if files else "",
            base_name=self.base_name(package_name),
            factory_name=self.factory_name(package_name),
            deserializer_name=self.deserializer_name(package_name),
            schema_registry_name=self.schema_registry_name(package_name),
            messages=messages,
            enums=enums,
            external_imports=_groups(external),
        )

    def message_data(self, info: MessageInfo) -> MessageData:
        return MessageData(
            name=info.name,
            ts_name=info.name,
            fully_qualified_name=info.fully_qualified_name,
            package_name=info.package_name,
            schema_file=info.schema_file,
            method_name="new" + info.name,
            fields=[self.field_data(f, info.definition) for f in info.definition.fields],
            oneof_groups=self.analyzer.oneof_groups(info.definition),
            is_nested=info.is_nested,
            comment=info.comment,
        )

    def enum_data(self, info: EnumInfo) -> EnumData:
        return EnumData(
            name=info.name,
            fully_qualified_name=info.fully_qualified_name,
            values=[EnumValueData(v.name, v.number, v.comment) for v in info.values],
            comment=info.comment,
        )

    def field_data(self, field_def: FieldDef, parent: MessageDef) -> FieldData:
        data = FieldData(
            name=field_def.name,
            ts_name=self.names.to_ts_property_name(
                field_def.json_name or self.names.to_json_name(field_def.name)
            ),
            ts_type="any",
            number=field_def.number,
            is_optional=field_def.optional,
            is_repeated=field_def.repeated,
            is_oneof=field_def.oneof is not None,
            oneof_group=field_def.oneof or "",
            comment=field_def.comment.strip(),
        )
        kind = field_def.type
        if kind in _SCALARS:
            data.ts_type, data.default_value = _SCALARS[kind]
            data.kind = "boolean" if kind == "bool" else "string"
        elif kind in _NUMERIC:
            data.ts_type, data.default_value = "number", "0"
            data.kind = "number"
        elif kind == "message" and field_def.type_name:
            if self.analyzer.is_map_field(field_def, parent):
                key_type, value_type = self.analyzer.map_key_value_types(field_def, parent)
                data.is_map = True
                data.kind = "map"
                data.is_repeated = False
                data.ts_type = f"Record<{self._scalar_ts(key_type)}, {self._scalar_ts(value_type)}>"
                data.default_value = "{}"
                return data
            data.message_type = field_def.type_name.lstrip(".")
            location = self.index.locate(data.message_type)
            data.message_package = (
                location.package if location else extract_package_name(data.message_type)
            )
            data.ts_type = self.type_name(data.message_type)
        elif kind == "enum" and field_def.type_name:
            data.kind = "number"
            data.enum_type = field_def.type_name.lstrip(".")
            data.ts_type = self.type_name(field_def.type_name)
            found = self.index.enum(field_def.type_name)
            if found is not None and found[1].values:
                data.default_value = f"{data.ts_type}.{found[1].values[0].name}"
            else:
                data.default_value = "0"

        if data.is_repeated:
            data.ts_type += "[]"
            data.default_value = "[]"
        if data.is_optional:
            data.ts_type += " | undefined"
        return data

    def _scalar_ts(self, schema_type: str) -> str:
        if schema_type in _SCALARS:
            return _SCALARS[schema_type][0]
        if schema_type in _NUMERIC:
            return "number"
        if schema_type == "any":
            return "any"
        return schema_type

    # -- factories and aggregates -------------------------------------------

    def build_factory_data(self, metadata: Dict[str, Any]) -> FactoryData:
        package = metadata["package"]
        directory = str(metadata["directory"])
        infos: List[MessageInfo] = list(metadata["messages"])
        package_name = package.name
        messages = [self.message_data(info) for info in infos]

        imports: Dict[str, Set[str]] = defaultdict(set)
        schema_dirs: Set[str] = set()
        dependencies: Dict[str, FactoryDependency] = {}
        for message in messages:
            message_dir = posixpath.dirname(message.schema_file)
            schema_dirs.add(message_dir)
            imports[self.paths.directory_import(directory, message_dir, "interfaces")].add(
                message.ts_name
            )
            for field_data in message.fields:
                dep_package = field_data.message_package
                if not dep_package or dep_package == package_name:
                    continue
                if self.well_known.is_well_known(field_data.message_type):
                    continue
                dependencies.setdefault(
                    dep_package,
                    FactoryDependency(
                        package_name=dep_package,
                        factory_name=self.factory_name(dep_package),
                        import_path=self._factory_path(
                            field_data.message_type, directory, package_name
                        ),
                        instance_name=self.names.to_camel_case(self.base_name(dep_package))
                        + "Factory",
                    ),
                )

        registry = self.schema_registry_name(package_name)
        schema_imports = [
            SchemaImport(
                registry_name=registry,
                alias=self._schema_alias(message_dir),
                import_path=self.paths.directory_import(directory, message_dir, "schemas"),
            )
            for message_dir in schema_dirs
        ]
        schema_imports.sort(key=lambda item: item.import_path)

        return FactoryData(
            package_name=package_name,
            directory=directory,
            factory_name=self.factory_name(package_name),
            schema_registry_name=registry,
            messages=messages,
            import_groups=_groups(imports),
            schema_imports=schema_imports,
            dependencies=[dependencies[name] for name in sorted(dependencies)],
        )

    def _schema_alias(self, directory: str) -> str:
        stem = self.names.sanitize_identifier(directory.replace("/", "_") or "root")
        return self.names.to_camel_case(stem) + "Schemas"

    def _factory_path(self, full_name: str, from_dir: str, from_package: str) -> str:
        location = self.index.locate(full_name)
        if location is None:
            return self.paths.factory_import_path(extract_package_name(full_name), from_package)
        return self.paths.directory_import(from_dir, location.directory, "factory")

    def build_package_schema_data(self, metadata: Dict[str, Any]) -> PackageSchemaData:
        package = metadata["package"]
        package_name = package.name
        package_dir = str(metadata["directory"])
        directories: Iterable[str] = metadata["directories"]
        registry = self.schema_registry_name(package_name)
        imports = [
            SchemaImport(
                registry_name=registry,
                alias=self._schema_alias(directory),
                import_path=self.paths.directory_import(package_dir, directory, "schemas"),
            )
            for directory in directories
            if directory != package_dir
        ]
        imports.sort(key=lambda item: item.import_path)
        return PackageSchemaData(
            package_name=package_name, schema_registry_name=registry, schema_imports=imports
        )

    def build_bundle_data(self, metadata: Dict[str, Any]) -> BundleData:
        module_name = str(metadata["module_name"])
        return BundleData(
            module_name=module_name,
            js_namespace=str(metadata["js_namespace"]),
            api_structure=str(metadata["api_structure"]),
            bundle_class=self.names.to_pascal_case(module_name) + "Bundle",
        )


__all__ = [
    "BundleData",
    "EnumData",
    "FactoryData",
    "FactoryDependency",
    "FieldData",
    "ImportGroup",
    "MessageData",
    "MethodData",
    "PackageSchemaData",
    "SchemaImport",
    "ServiceClientData",
    "TSDataBuilder",
    "TypeData",
]

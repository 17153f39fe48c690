"""Pipeline orchestration: collect, plan, materialize, render, commit."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .builders import GoDataBuilder, TSDataBuilder, TypeData
from .collector import ArtifactCatalog, ArtifactCollector, CollectionError
from .config import ConfigError, GenerationConfig
from .fileset import DirectoryHost, FileSetError, GeneratedFileSet, HostCompiler, MemoryHost
from .filters import FilterCriteria, criteria_from_config
from .logging import get_logger
from .models import SchemaFile
from .planning import FilePlan, FilePlanner, FileSpec, PlanningError, create_planner
from .rendering import RenderError, Renderer


class GenerationError(RuntimeError):
    """Raised when any stage of a generation run fails."""


@dataclass
class GenerationResult:
    """Outcome of one run. ``files`` maps output path to rendered text."""

    plan: FilePlan
    files: Dict[str, str] = field(default_factory=dict)
    written: List[Path] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.plan.specs


class Generator:
    """Runs the full generation pipeline for one invocation."""

    def __init__(
        self,
        collector: ArtifactCollector | None = None,
        planners: Optional[Dict[str, FilePlanner]] = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.collector = collector or ArtifactCollector()
        self._planner_overrides = dict(planners) if planners is not None else None
        self.renderer = renderer or Renderer()
        self.logger = get_logger("generator")

    # -- public API ----------------------------------------------------------

    def plan(
        self, files: Sequence[SchemaFile], config: GenerationConfig
    ) -> Tuple[ArtifactCatalog, FilePlan]:
        """Collect and plan without creating any output."""
        try:
            config.validate()
            criteria = criteria_from_config(config)
            catalog = self._collect(files, config, criteria)
            return catalog, self._plan(catalog, config)
        except (ConfigError, CollectionError, PlanningError) as exc:
            raise GenerationError(str(exc)) from exc

    def generate(
        self,
        files: Sequence[SchemaFile],
        config: GenerationConfig,
        host: HostCompiler | None = None,
    ) -> GenerationResult:
        """Render every planned file into ``host``; a :class:`DirectoryHost` is committed."""
        catalog, plan = self.plan(files, config)
        if catalog.is_empty():
            self.logger.info("Nothing to generate")
            return GenerationResult(plan=plan)

        host = host if host is not None else MemoryHost()
        try:
            file_set = GeneratedFileSet(plan)
            file_set.create_files(host)
            file_set.validate_file_set(self.renderer.known_types())
            self._render_all(catalog, plan, file_set, config)
        except (FileSetError, RenderError) as exc:
            raise GenerationError(str(exc)) from exc

        result = GenerationResult(
            plan=plan,
            files={
                spec.path: file_set.files[spec.name].content
                for spec in plan.specs
                if spec.name in file_set.files
            },
        )
        if isinstance(host, DirectoryHost):
            try:
                result.written = host.commit()
            except FileSetError as exc:
                raise GenerationError(str(exc)) from exc
        self.logger.info("Generated %d files", len(result.files))
        return result

    # -- stages ----------------------------------------------------------------

    def _collect(
        self, files: Sequence[SchemaFile], config: GenerationConfig, criteria: FilterCriteria
    ) -> ArtifactCatalog:
        self.logger.debug("Collecting from %d schema files", len(files))
        return self.collector.collect_all_artifacts(files, config, criteria)

    def _select_planners(self, config: GenerationConfig) -> List[FilePlanner]:
        targets: List[str] = []
        if config.generate_typescript:
            targets.append("typescript")
        if config.generate_wasm:
            targets.append("go")
        if self._planner_overrides is not None:
            return [self._planner_overrides[t] for t in targets if t in self._planner_overrides]
        return [create_planner(target) for target in targets]

    def _plan(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FilePlan:
        if catalog.is_empty():
            return FilePlan(config=config)
        plans = []
        for planner in self._select_planners(config):
            plan = planner.plan_files(catalog, config)
            self.logger.info("Planned %d %s files", len(plan), planner.target)
            plans.append(plan)
        merged = FilePlan.merge(plans)
        merged.config = config
        return merged.validate()

    def _render_all(
        self,
        catalog: ArtifactCatalog,
        plan: FilePlan,
        file_set: GeneratedFileSet,
        config: GenerationConfig,
    ) -> None:
        ts_builder = TSDataBuilder(catalog)
        go_builder = GoDataBuilder(catalog)
        type_cache: Dict[Tuple[str, str], TypeData] = {}

        def type_data(spec: FileSpec) -> TypeData:
            key = (spec.metadata["package"].name, spec.metadata["directory"])
            if key not in type_cache:
                type_cache[key] = ts_builder.build_type_data(
                    spec.metadata["messages"], spec.metadata["enums"]
                )
            return type_cache[key]

        dispatch: Dict[str, Callable[[FileSpec], Any]] = {
            "service_client": lambda spec: ts_builder.build_service_client_data(
                spec.metadata["service"], config
            ),
            "interfaces": type_data,
            "models": type_data,
            "schemas": type_data,
            "deserializer": type_data,
            "factory": lambda spec: ts_builder.build_factory_data(spec.metadata),
            "package_schemas": lambda spec: ts_builder.build_package_schema_data(spec.metadata),
            "bundle": lambda spec: ts_builder.build_bundle_data(spec.metadata),
            "wasm": lambda spec: go_builder.build_template_data(spec.metadata["package"], config),
            "example": lambda spec: go_builder.build_template_data(
                spec.metadata["package"], config
            ),
            "script": lambda spec: go_builder.build_script_data(spec.metadata, config),
        }

        for spec in plan.specs:
            handle = file_set.get_file(spec.name)
            if handle is None:
                continue
            builder = dispatch.get(spec.type)
            if builder is None:
                raise RenderError(f"no data builder for file type '{spec.type}' ({spec.path})")
            extra: Dict[str, Any] = {}
            if spec.type == "deserializer":
                package_name = spec.metadata["package"].name
                extra["factory_available"] = (
                    plan.get(f"factory:{package_name}:{spec.metadata['directory']}") is not None
                )
            try:
                data = builder(spec)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise RenderError(f"failed to build data for {spec.path}: {exc}") from exc
            self.renderer.render_into(handle, spec, data, **extra)


__all__ = ["GenerationError", "GenerationResult", "Generator"]

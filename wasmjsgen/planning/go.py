"""Go/WASM wrapper file planning."""

from __future__ import annotations

from typing import List

from ..collector import ArtifactCatalog
from ..config import GenerationConfig
from ..core.paths import PathCalculator
from ..logging import get_logger
from .base import ContentHints, FilePlan, FilePlanner, FileSpec, GO_FILE_TYPES


class GoFilePlanner(FilePlanner):
    """One WASM wrapper and example ``main`` per package that exposes services."""

    target = "go"
    file_types = GO_FILE_TYPES

    def __init__(self, paths: PathCalculator | None = None) -> None:
        self.paths = paths or PathCalculator()
        self.logger = get_logger("planning.go")

    def plan_files(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FilePlan:
        plan = FilePlan(config=config)
        for package_name in self._service_packages(catalog):
            regular, browser = catalog.get_services_for_package(package_name)
            package_path = self.paths.package_path(package_name)
            wasm_name = package_name.replace(".", "_") + ".wasm.go"
            package = catalog.get_package_info(package_name)
            plan.add(
                FileSpec(
                    name=f"wasm:{package_name}",
                    path=self.paths.join(config.wasm_export_path, package_path, wasm_name),
                    type="wasm",
                    required=True,
                    hints=ContentHints(
                        has_services=bool(regular),
                        has_browser_services=bool(browser),
                    ),
                    metadata={"package": package},
                )
            )
            plan.add(
                FileSpec(
                    name=f"main:{package_name}",
                    path=self.paths.join(config.wasm_export_path, package_path, "main.go.example"),
                    type="example",
                    required=True,
                    hints=ContentHints(is_example=True),
                    metadata={"package": package},
                )
            )

        if config.generate_build_script and len(plan):
            plan.add(
                FileSpec(
                    name="build",
                    path=self.paths.join(config.wasm_export_path, "build.sh"),
                    type="script",
                    required=False,
                    hints=ContentHints(is_build_script=True),
                    metadata={"packages": self._service_packages(catalog)},
                )
            )

        self.logger.debug("Planned %d Go files", len(plan))
        return plan.validate()

    def _service_packages(self, catalog: ArtifactCatalog) -> List[str]:
        names = {artifact.package.name for artifact in catalog.services}
        names.update(artifact.package.name for artifact in catalog.browser_services)
        return sorted(names)


__all__ = ["GoFilePlanner"]

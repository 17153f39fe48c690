"""File plan records and the planner interface shared by every output target."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..collector import ArtifactCatalog
from ..config import GenerationConfig

TS_FILE_TYPES = (
    "service_client",
    "interfaces",
    "models",
    "schemas",
    "deserializer",
    "factory",
    "bundle",
    "package_schemas",
)
GO_FILE_TYPES = ("wasm", "example", "script")


class PlanningError(RuntimeError):
    """Raised when a plan would produce conflicting outputs."""


@dataclass
class ContentHints:
    """What a planned file will contain, checked before rendering."""

    has_services: bool = False
    has_messages: bool = False
    has_enums: bool = False
    has_browser_services: bool = False
    is_example: bool = False
    is_build_script: bool = False


@dataclass
class FileSpec:
    name: str
    path: str
    type: str
    required: bool = False
    hints: ContentHints = field(default_factory=ContentHints)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FilePlan:
    """Ordered file specs for one or more targets plus the config that produced them."""

    specs: List[FileSpec] = field(default_factory=list)
    config: Optional[GenerationConfig] = None

    def __iter__(self) -> Iterator[FileSpec]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)

    def add(self, spec: FileSpec) -> None:
        self.specs.append(spec)

    def paths(self) -> List[str]:
        return [spec.path for spec in self.specs]

    def get(self, name: str) -> Optional[FileSpec]:
        for spec in self.specs:
            if spec.name == name:
                return spec
        return None

    def by_type(self, file_type: str) -> List[FileSpec]:
        return [spec for spec in self.specs if spec.type == file_type]

    def validate(self) -> "FilePlan":
        """Reject duplicate output paths and duplicate logical names."""
        problems: List[str] = []
        for label, key in (("output path", "path"), ("file name", "name")):
            owners: Dict[str, List[str]] = defaultdict(list)
            for spec in self.specs:
                owners[getattr(spec, key)].append(spec.name if key == "path" else spec.path)
            for value in sorted(owners):
                if len(owners[value]) > 1:
                    problems.append(
                        f"duplicate {label} {value!r} ({', '.join(sorted(owners[value]))})"
                    )
        if problems:
            raise PlanningError("invalid file plan: " + "; ".join(problems))
        return self

    @classmethod
    def merge(cls, plans: Iterable["FilePlan"]) -> "FilePlan":
        """Concatenate plans in order. The first plan's config is kept."""
        merged = cls()
        for plan in plans:
            if merged.config is None:
                merged.config = plan.config
            merged.specs.extend(plan.specs)
        return merged


class FilePlanner(ABC):
    """Maps an artifact catalog to the files one target produces."""

    target: str = ""
    file_types: tuple = ()

    @abstractmethod
    def plan_files(self, catalog: ArtifactCatalog, config: GenerationConfig) -> FilePlan:
        """Return a validated plan; must not depend on dict iteration order."""


__all__ = [
    "ContentHints",
    "FilePlan",
    "FilePlanner",
    "FileSpec",
    "GO_FILE_TYPES",
    "PlanningError",
    "TS_FILE_TYPES",
]

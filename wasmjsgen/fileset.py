"""Materialization of a file plan into output handles.

Handles are only created once every planner has finished, and nothing is
written to disk until :meth:`DirectoryHost.commit` runs after rendering.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .logging import get_logger
from .planning import GO_FILE_TYPES, TS_FILE_TYPES, FilePlan, FileSpec


class FileSetError(RuntimeError):
    """Raised when a file set cannot be created or fails validation."""


class GeneratedFile:
    """In-memory output buffer for one planned file."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._chunks: List[str] = []

    def write(self, text: str) -> None:
        self._chunks.append(text)

    @property
    def content(self) -> str:
        return "".join(self._chunks)


class HostCompiler(Protocol):
    def new_generated_file(self, path: str) -> GeneratedFile: ...


class MemoryHost:
    """Keeps generated files in memory; used for dry runs and tests."""

    def __init__(self) -> None:
        self.files: Dict[str, GeneratedFile] = {}

    def new_generated_file(self, path: str) -> GeneratedFile:
        if path in self.files:
            raise FileSetError(f"output file {path} was already created")
        handle = GeneratedFile(path)
        self.files[path] = handle
        return handle

    def contents(self) -> Dict[str, str]:
        return {path: self.files[path].content for path in sorted(self.files)}


class DirectoryHost(MemoryHost):
    """Buffers output and writes every file under ``root`` in one batch."""

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = Path(root)
        self.logger = get_logger("fileset")

    def new_generated_file(self, path: str) -> GeneratedFile:
        if Path(path).is_absolute() or ".." in Path(path).parts:
            raise FileSetError(f"output path {path} escapes the output directory")
        return super().new_generated_file(path)

    def commit(self) -> List[Path]:
        written: List[Path] = []
        for path, content in self.contents().items():
            target = self.root / path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")
            except OSError as exc:
                raise FileSetError(f"failed to write {target}: {exc}") from exc
            written.append(target)
        self.logger.info("Wrote %d files to %s", len(written), self.root)
        return written


class GeneratedFileSet:
    """Maps file spec names to output handles created from a validated plan."""

    def __init__(self, plan: FilePlan) -> None:
        self.plan = plan
        self.files: Dict[str, GeneratedFile] = {}
        self._specs: Dict[str, FileSpec] = {spec.name: spec for spec in plan.specs}

    def create_files(self, host: HostCompiler) -> None:
        """Create every handle, or none: a failure leaves the set empty."""
        created: Dict[str, GeneratedFile] = {}
        for spec in self.plan.specs:
            try:
                created[spec.name] = host.new_generated_file(spec.path)
            except FileSetError:
                raise
            except Exception as exc:
                raise FileSetError(
                    f"failed to create '{spec.name}' ({spec.path}): {exc}"
                ) from exc
        self.files = created

    def validate_file_set(self, known_types: Optional[Iterable[str]] = None) -> None:
        recognised = set(known_types) if known_types is not None else set(
            TS_FILE_TYPES + GO_FILE_TYPES
        )
        problems: List[str] = []
        for spec in self.plan.specs:
            if spec.required and spec.name not in self.files:
                problems.append(f"required file '{spec.name}' ({spec.path}) was not created")
        counts = Counter(spec.path for spec in self.plan.specs)
        for path in sorted(path for path, count in counts.items() if count > 1):
            problems.append(f"output path {path} is planned {counts[path]} times")
        for spec in self.plan.specs:
            if spec.type not in recognised:
                problems.append(f"file '{spec.name}' has unrecognized type '{spec.type}'")
        if problems:
            raise FileSetError("; ".join(problems))

    def get_file(self, name: str) -> Optional[GeneratedFile]:
        return self.files.get(name)

    def has_file(self, name: str) -> bool:
        return name in self.files

    def get_file_spec(self, name: str) -> Optional[FileSpec]:
        return self._specs.get(name)

    def get_files_by_type(self, file_type: str) -> Dict[str, GeneratedFile]:
        return {
            spec.name: self.files[spec.name]
            for spec in self.plan.specs
            if spec.type == file_type and spec.name in self.files
        }

    def get_required_files(self) -> Dict[str, GeneratedFile]:
        return {
            spec.name: self.files[spec.name]
            for spec in self.plan.specs
            if spec.required and spec.name in self.files
        }

    def all_paths(self) -> Sequence[str]:
        return [spec.path for spec in self.plan.specs]


__all__ = [
    "DirectoryHost",
    "FileSetError",
    "GeneratedFile",
    "GeneratedFileSet",
    "HostCompiler",
    "MemoryHost",
]

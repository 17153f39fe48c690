"""Renders template data into generated file handles with Jinja2."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, List, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
)

from ..fileset import GeneratedFile
from ..logging import get_logger
from ..planning import FileSpec

TEMPLATE_SUFFIX = ".j2"


class RenderError(RuntimeError):
    """Raised when a file cannot be rendered."""


class Renderer:
    """One template per file type, looked up as ``<type>.j2``."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.logger = get_logger("rendering")
        self.env = self._create_env(templates_dir)

    def _create_env(self, templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["doc_comment"] = _doc_comment
        env.filters["go_comment"] = _go_comment
        env.filters["pascal"] = _pascal
        return env

    def known_types(self) -> List[str]:
        """File types that have a template."""
        return sorted(
            name[: -len(TEMPLATE_SUFFIX)]
            for name in self.env.list_templates()
            if name.endswith(TEMPLATE_SUFFIX)
        )

    def render(self, spec: FileSpec, data: Any, **extra: Any) -> str:
        try:
            template = self.env.get_template(spec.type + TEMPLATE_SUFFIX)
        except TemplateNotFound as exc:
            raise RenderError(f"no template for file type '{spec.type}' ({spec.path})") from exc
        try:
            return template.render(data=data, spec=spec, **extra)
        except TemplateError as exc:
            raise RenderError(f"failed to render {spec.path}: {exc}") from exc

    def render_into(
        self, handle: GeneratedFile, spec: FileSpec, data: Any, **extra: Any
    ) -> None:
        handle.write(self.render(spec, data, **extra))
        self.logger.debug("Rendered %s (%s)", spec.path, spec.type)


_WORD_BREAKS = re.compile(r"[._\-]+")


def _pascal(value: str) -> str:
    """``library_v1_services`` -> ``LibraryV1Services``."""
    return "".join(part[:1].upper() + part[1:] for part in _WORD_BREAKS.split(value) if part)


def _comment_lines(text: Optional[str]) -> Iterable[str]:
    return [line.rstrip() for line in (text or "").strip().splitlines()]


def _doc_comment(text: Optional[str], indent: str = "") -> str:
    lines = list(_comment_lines(text))
    if not lines:
        return ""
    if len(lines) == 1:
        return f"{indent}/** {lines[0]} */\n"
    body = "".join(f"{indent} * {line}".rstrip() + "\n" for line in lines)
    return f"{indent}/**\n{body}{indent} */\n"


def _go_comment(text: Optional[str], indent: str = "") -> str:
    return "".join(f"{indent}// {line}".rstrip() + "\n" for line in _comment_lines(text))


__all__ = ["RenderError", "Renderer", "TEMPLATE_SUFFIX"]

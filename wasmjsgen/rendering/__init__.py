"""Jinja2 rendering of planned files."""

from .renderer import RenderError, Renderer

__all__ = ["RenderError", "Renderer"]

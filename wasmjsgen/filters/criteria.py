"""Declarative filter criteria and their eager validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Union

from ..config import ConfigError, GenerationConfig

ANNOTATION_PACKAGES = ("wasmjs.v1", "google.protobuf")

OptionValue = Union[str, Iterable[str], None]


@dataclass
class FilterCriteria:
    """Service allow-list, method globs and rename table, plus collection switches."""

    services: Set[str] = field(default_factory=set)
    method_includes: List[str] = field(default_factory=list)
    method_excludes: List[str] = field(default_factory=list)
    method_renames: Dict[str, str] = field(default_factory=dict)
    exclude_annotation_packages: bool = True
    exclude_empty_packages: bool = True
    exclude_map_entries: bool = True
    exclude_nested_messages: bool = False
    exclude_nested_enums: bool = False

    def has_service_filter(self) -> bool:
        return bool(self.services)

    def has_method_filters(self) -> bool:
        return bool(self.method_includes or self.method_excludes)

    def has_renames(self) -> bool:
        return bool(self.method_renames)

    def rename_for(self, method_name: str) -> Optional[str]:
        return self.method_renames.get(method_name)


def _split(value: OptionValue) -> List[str]:
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip() for item in items if item and item.strip()]


def parse_renames(value: OptionValue) -> Dict[str, str]:
    """Parse ``Old:New`` entries, rejecting anything malformed."""
    renames: Dict[str, str] = {}
    for entry in _split(value):
        if ":" not in entry:
            raise ConfigError(
                f"invalid method rename format: {entry} (expected OldName:NewName)"
            )
        old, new = (part.strip() for part in entry.split(":", 1))
        if not old or not new:
            raise ConfigError(f"invalid method rename: empty old or new name in {entry}")
        renames[old] = new
    return renames


def validate_patterns(patterns: Iterable[str]) -> None:
    """Reject glob patterns with an unterminated character class."""
    for pattern in patterns:
        i = 0
        while i < len(pattern):
            if pattern[i] != "[":
                i += 1
                continue
            # A leading "!" or "]" belongs to the class.
            j = i + 1
            if j < len(pattern) and pattern[j] == "!":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end < 0:
                raise ConfigError(f"invalid method pattern: {pattern} (unterminated '[')")
            i = end + 1


def parse_criteria(
    services: OptionValue = None,
    include: OptionValue = None,
    exclude: OptionValue = None,
    rename: OptionValue = None,
) -> FilterCriteria:
    """Build criteria from comma-separated strings or lists.

    Raises :class:`ConfigError` before any collection work can start.
    """
    criteria = FilterCriteria(
        services=set(_split(services)),
        method_includes=_split(include),
        method_excludes=_split(exclude),
        method_renames=parse_renames(rename),
    )
    validate_patterns(criteria.method_includes)
    validate_patterns(criteria.method_excludes)
    return criteria


def criteria_from_config(config: GenerationConfig) -> FilterCriteria:
    return parse_criteria(
        config.services,
        config.method_include,
        config.method_exclude,
        config.method_rename,
    )


__all__ = [
    "ANNOTATION_PACKAGES",
    "FilterCriteria",
    "criteria_from_config",
    "parse_criteria",
    "parse_renames",
    "validate_patterns",
]

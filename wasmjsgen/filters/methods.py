"""Method-level filtering and exposed-name resolution."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable, List, Optional, Sequence

from ..core.analyzer import SchemaAnalyzer
from ..core.names import NameConverter
from ..models import MethodDef
from .criteria import FilterCriteria
from .results import FilterStats, MethodFilterResult


def _first_match(name: str, patterns: Sequence[str]) -> Optional[str]:
    for pattern in patterns:
        if fnmatchcase(name, pattern):
            return pattern
    return None


class MethodFilter:
    """Applies annotation exclusion, streaming rules and include/exclude globs.

    Exclude patterns are checked before include patterns, so a name matching
    both is excluded.
    """

    def __init__(
        self,
        analyzer: SchemaAnalyzer | None = None,
        names: NameConverter | None = None,
    ) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()
        self.names = names or NameConverter()

    def should_include_method(
        self,
        method: MethodDef,
        criteria: FilterCriteria,
        stats: Optional[FilterStats] = None,
    ) -> MethodFilterResult:
        result = self._decide(method, criteria)
        if stats is not None:
            stats.add_method_result(result)
        return result

    def _decide(self, method: MethodDef, criteria: FilterCriteria) -> MethodFilterResult:
        if self.analyzer.is_method_excluded(method):
            return MethodFilterResult.excluded("method marked with wasm_method_exclude annotation")
        if method.client_streaming:
            return MethodFilterResult.excluded("client streaming methods not supported")

        pattern = _first_match(method.name, criteria.method_excludes)
        if pattern is not None:
            return MethodFilterResult.excluded(f"method matches exclude pattern: {pattern}")

        details = {
            "custom_js_name": self.analyzer.custom_method_name(method),
            "is_async": self.analyzer.is_async(method),
            "is_server_streaming": method.server_streaming,
        }
        if criteria.method_includes:
            pattern = _first_match(method.name, criteria.method_includes)
            if pattern is None:
                return MethodFilterResult.excluded("method doesn't match any include patterns")
            return MethodFilterResult.included(
                f"method matches include pattern: {pattern}", **details
            )
        return MethodFilterResult.included(
            "method included by default (no exclusion rules matched)", **details
        )

    def filter_methods(
        self,
        methods: Iterable[MethodDef],
        criteria: FilterCriteria,
        stats: Optional[FilterStats] = None,
    ) -> List[MethodDef]:
        return [
            method
            for method in methods
            if self.should_include_method(method, criteria, stats).include
        ]

    def rename_target(self, method: MethodDef, criteria: FilterCriteria) -> str:
        """Configured rename for ``method``, or its original name."""
        return criteria.rename_for(method.name) or method.name

    def method_js_name(self, method: MethodDef, criteria: FilterCriteria) -> str:
        """Exposed call name: annotation, then rename table, then camelCase."""
        custom = self.analyzer.custom_method_name(method)
        if custom:
            return custom
        renamed = criteria.rename_for(method.name)
        if renamed:
            return renamed
        return self.names.to_camel_case(method.name)


__all__ = ["MethodFilter"]

"""Service-level filtering."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.analyzer import SchemaAnalyzer
from ..models import ServiceDef
from .criteria import FilterCriteria
from .results import FilterStats, ServiceFilterResult


class ServiceFilter:
    """Decides which services take part in generation."""

    def __init__(self, analyzer: SchemaAnalyzer | None = None) -> None:
        self.analyzer = analyzer or SchemaAnalyzer()

    def should_include_service(
        self,
        service: ServiceDef,
        criteria: FilterCriteria,
        stats: Optional[FilterStats] = None,
    ) -> ServiceFilterResult:
        result = self._decide(service, criteria)
        if stats is not None:
            stats.add_service_result(result)
        return result

    def _decide(self, service: ServiceDef, criteria: FilterCriteria) -> ServiceFilterResult:
        if self.analyzer.is_service_excluded(service):
            return ServiceFilterResult.excluded(
                "service marked with wasm_service_exclude annotation"
            )

        details = {
            "is_browser_provided": self.analyzer.is_browser_provided(service),
            "custom_name": self.analyzer.custom_service_name(service),
        }
        if criteria.has_service_filter():
            if service.name in criteria.services:
                return ServiceFilterResult.included(
                    "service explicitly included in services list", **details
                )
            return ServiceFilterResult.excluded("service not in configured services list")
        return ServiceFilterResult.included(
            "service included by default (no exclusion rules matched)", **details
        )

    def filter_services(
        self,
        services: Iterable[ServiceDef],
        criteria: FilterCriteria,
        stats: Optional[FilterStats] = None,
    ) -> List[ServiceDef]:
        return [
            service
            for service in services
            if self.should_include_service(service, criteria, stats).include
        ]

    def has_any_services(self, services: Iterable[ServiceDef], criteria: FilterCriteria) -> bool:
        return any(self._decide(service, criteria).include for service in services)

    def browser_services(
        self, services: Iterable[ServiceDef], criteria: FilterCriteria
    ) -> List[ServiceDef]:
        return [
            service
            for service in self.filter_services(services, criteria)
            if self.analyzer.is_browser_provided(service)
        ]

    def regular_services(
        self, services: Iterable[ServiceDef], criteria: FilterCriteria
    ) -> List[ServiceDef]:
        return [
            service
            for service in self.filter_services(services, criteria)
            if not self.analyzer.is_browser_provided(service)
        ]


__all__ = ["ServiceFilter"]

"""Filter decisions, collection results and statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FilterResult:
    """Include/exclude decision with the reason it was made."""

    include: bool
    reason: str

    def __bool__(self) -> bool:
        return self.include

    @classmethod
    def included(cls, reason: str, **extra: object) -> "FilterResult":
        return cls(include=True, reason=reason, **extra)  # type: ignore[arg-type]

    @classmethod
    def excluded(cls, reason: str, **extra: object) -> "FilterResult":
        return cls(include=False, reason=reason, **extra)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ServiceFilterResult(FilterResult):
    is_browser_provided: bool = False
    custom_name: Optional[str] = None


@dataclass(frozen=True)
class MethodFilterResult(FilterResult):
    custom_js_name: Optional[str] = None
    is_async: bool = False
    is_server_streaming: bool = False


@dataclass(frozen=True)
class PackageFilterResult(FilterResult):
    has_services: bool = False
    has_messages: bool = False
    has_enums: bool = False


@dataclass
class CollectionResult(Generic[T]):
    """Items that survived filtering plus scan counters."""

    items: List[T] = field(default_factory=list)
    total_found: int = 0
    files_scanned: int = 0

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class FilterStats:
    services_total: int = 0
    services_included: int = 0
    methods_total: int = 0
    methods_included: int = 0
    messages_total: int = 0
    enums_total: int = 0
    packages_total: int = 0

    @property
    def services_excluded(self) -> int:
        return self.services_total - self.services_included

    @property
    def methods_excluded(self) -> int:
        return self.methods_total - self.methods_included

    def add_service_result(self, result: FilterResult) -> None:
        self.services_total += 1
        if result.include:
            self.services_included += 1

    def add_method_result(self, result: FilterResult) -> None:
        self.methods_total += 1
        if result.include:
            self.methods_included += 1

    def add_collection_stats(self, messages: int, enums: int, packages: int) -> None:
        self.messages_total += messages
        self.enums_total += enums
        self.packages_total += packages

    def summary(self) -> str:
        return (
            f"Filtering Summary: {self.services_included}/{self.services_total} services, "
            f"{self.methods_included}/{self.methods_total} methods, "
            f"{self.messages_total} messages, {self.enums_total} enums "
            f"from {self.packages_total} packages"
        )


__all__ = [
    "CollectionResult",
    "FilterResult",
    "FilterStats",
    "MethodFilterResult",
    "PackageFilterResult",
    "ServiceFilterResult",
]

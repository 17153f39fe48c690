"""Declarative filtering of services, methods, messages, enums and packages."""

from .criteria import FilterCriteria, criteria_from_config, parse_criteria
from .enums import EnumCollector, EnumInfo, EnumValueInfo
from .messages import MessageCollector, MessageInfo
from .methods import MethodFilter
from .packages import PackageFilter
from .results import (
    CollectionResult,
    FilterResult,
    FilterStats,
    MethodFilterResult,
    PackageFilterResult,
    ServiceFilterResult,
)
from .services import ServiceFilter

__all__ = [
    "CollectionResult",
    "EnumCollector",
    "EnumInfo",
    "EnumValueInfo",
    "FilterCriteria",
    "FilterResult",
    "FilterStats",
    "MessageCollector",
    "MessageInfo",
    "MethodFilter",
    "MethodFilterResult",
    "PackageFilter",
    "PackageFilterResult",
    "ServiceFilter",
    "ServiceFilterResult",
    "criteria_from_config",
    "parse_criteria",
]

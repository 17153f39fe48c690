"""File planners that turn an artifact catalog into output file specs."""

from typing import Dict, List, Type

from .base import (
    GO_FILE_TYPES,
    TS_FILE_TYPES,
    ContentHints,
    FilePlan,
    FilePlanner,
    FileSpec,
    PlanningError,
)
from .go import GoFilePlanner
from .ts import TSFilePlanner

_BUILTIN_PLANNERS: Dict[str, Type[FilePlanner]] = {
    GoFilePlanner.target: GoFilePlanner,
    TSFilePlanner.target: TSFilePlanner,
}


def available_planners() -> List[str]:
    return sorted(_BUILTIN_PLANNERS)


def create_planner(target: str) -> FilePlanner:
    """Instantiate the planner registered for ``target``."""
    try:
        return _BUILTIN_PLANNERS[target]()
    except KeyError:
        raise PlanningError(
            f"unknown output target: {target} (supported: {', '.join(available_planners())})"
        ) from None


__all__ = [
    "ContentHints",
    "FilePlan",
    "FilePlanner",
    "FileSpec",
    "GO_FILE_TYPES",
    "GoFilePlanner",
    "PlanningError",
    "TS_FILE_TYPES",
    "TSFilePlanner",
    "available_planners",
    "create_planner",
]

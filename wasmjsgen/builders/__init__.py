"""Template data builders for each output target."""

from .go import BuildScriptData, GoDataBuilder, GoTemplateData
from .index import TypeIndex, TypeLocation
from .ts import (
    BundleData,
    FactoryData,
    PackageSchemaData,
    ServiceClientData,
    TSDataBuilder,
    TypeData,
)

__all__ = [
    "BuildScriptData",
    "BundleData",
    "FactoryData",
    "GoDataBuilder",
    "GoTemplateData",
    "PackageSchemaData",
    "ServiceClientData",
    "TSDataBuilder",
    "TypeData",
    "TypeIndex",
    "TypeLocation",
]

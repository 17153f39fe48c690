"""Schema data model shared across wasmjsgen components.

These records are produced once per invocation by the descriptor front-end
(:mod:`wasmjsgen.descriptors`) and are treated as read-only afterwards.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class FieldDef:
    """Single message field."""

    name: str
    number: int
    type: str
    type_name: Optional[str] = None
    repeated: bool = False
    optional: bool = False
    oneof: Optional[str] = None
    json_name: Optional[str] = None
    comment: str = ""


@dataclass
class EnumValueDef:
    name: str
    number: int
    comment: str = ""


@dataclass
class EnumDef:
    name: str
    values: List[EnumValueDef] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    comment: str = ""


@dataclass
class MessageDef:
    """Message definition, including nested messages and enums."""

    name: str
    fields: List[FieldDef] = field(default_factory=list)
    messages: List["MessageDef"] = field(default_factory=list)
    enums: List[EnumDef] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    map_entry: bool = False
    comment: str = ""


@dataclass
class MethodDef:
    """RPC method. Input and output are fully qualified message names."""

    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    options: Dict[str, Any] = field(default_factory=dict)
    comment: str = ""


@dataclass
class ServiceDef:
    name: str
    methods: List[MethodDef] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    comment: str = ""


@dataclass
class SchemaFile:
    """One parsed schema file as seen by the current invocation."""

    path: str
    package: str
    generate: bool = True
    services: List[ServiceDef] = field(default_factory=list)
    messages: List[MessageDef] = field(default_factory=list)
    enums: List[EnumDef] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def directory(self) -> str:
        """Directory of the schema file, used as the type grouping key."""
        return posixpath.dirname(self.path)


@dataclass
class PackageInfo:
    """Package registry entry owned by the artifact collector."""

    name: str
    path: str
    files: List[SchemaFile] = field(default_factory=list)


__all__ = [
    "EnumDef",
    "EnumValueDef",
    "FieldDef",
    "MessageDef",
    "MethodDef",
    "PackageInfo",
    "SchemaFile",
    "ServiceDef",
]

"""Mapping of ``google.protobuf`` well-known types to TypeScript and Go imports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

_BUFBUILD = "@bufbuild/protobuf"
_BUFBUILD_WKT = "@bufbuild/protobuf/wkt"
_GO_KNOWN = "google.golang.org/protobuf/types/known/"

# name -> (TypeScript import source, Go package under types/known)
_DEFAULTS: Dict[str, Tuple[str, str]] = {
    "DoubleValue": (_BUFBUILD, "wrapperspb"),
    "FloatValue": (_BUFBUILD, "wrapperspb"),
    "Int64Value": (_BUFBUILD, "wrapperspb"),
    "UInt64Value": (_BUFBUILD, "wrapperspb"),
    "Int32Value": (_BUFBUILD, "wrapperspb"),
    "UInt32Value": (_BUFBUILD, "wrapperspb"),
    "BoolValue": (_BUFBUILD, "wrapperspb"),
    "StringValue": (_BUFBUILD, "wrapperspb"),
    "BytesValue": (_BUFBUILD, "wrapperspb"),
    "Timestamp": (_BUFBUILD_WKT, "timestamppb"),
    "Duration": (_BUFBUILD, "durationpb"),
    "Any": (_BUFBUILD, "anypb"),
    "Empty": (_BUFBUILD, "emptypb"),
    "Struct": (_BUFBUILD, "structpb"),
    "Value": (_BUFBUILD, "structpb"),
    "ListValue": (_BUFBUILD, "structpb"),
    "NullValue": (_BUFBUILD, "structpb"),
    "FieldMask": (_BUFBUILD_WKT, "fieldmaskpb"),
    "Type": (_BUFBUILD, "typepb"),
    "Field": (_BUFBUILD, "typepb"),
    "Enum": (_BUFBUILD, "typepb"),
    "EnumValue": (_BUFBUILD, "typepb"),
    "Option": (_BUFBUILD, "typepb"),
    "SourceContext": (_BUFBUILD, "sourcecontextpb"),
}


@dataclass(frozen=True)
class WellKnownType:
    schema_type: str
    ts_type: str
    import_source: str
    is_native: bool = False
    go_import_path: str = ""
    go_type: str = ""


class WellKnownTypes:
    """Lookup table with per-invocation overrides."""

    def __init__(self) -> None:
        self._mappings: Dict[str, WellKnownType] = {}
        for name, (source, go_package) in _DEFAULTS.items():
            self.add(
                f"google.protobuf.{name}",
                name,
                source,
                go_import_path=_GO_KNOWN + go_package,
                go_type=f"{go_package}.{name}",
            )

    def add(
        self,
        schema_type: str,
        ts_type: str,
        import_source: str,
        *,
        go_import_path: str = "",
        go_type: str = "",
    ) -> None:
        self._mappings[schema_type] = WellKnownType(
            schema_type, ts_type, import_source, go_import_path=go_import_path, go_type=go_type
        )

    def add_native(self, schema_type: str, ts_type: str) -> None:
        """Map a type to a built-in TypeScript type (e.g. ``Date``); no import needed.

        The Go mapping of an existing entry is kept.
        """
        previous = self._mappings.get(schema_type)
        self._mappings[schema_type] = WellKnownType(
            schema_type,
            ts_type,
            "",
            is_native=True,
            go_import_path=previous.go_import_path if previous else "",
            go_type=previous.go_type if previous else "",
        )

    def get(self, schema_type: str) -> Optional[WellKnownType]:
        return self._mappings.get(schema_type.lstrip("."))

    def is_well_known(self, schema_type: str) -> bool:
        return schema_type.lstrip(".") in self._mappings


__all__ = ["WellKnownType", "WellKnownTypes"]

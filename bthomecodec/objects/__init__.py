"""
BTHome v2 object definitions and lookups.

The object table itself is versioned reference data shipped as
``definitions.json`` next to this module. It is loaded once, turned into
frozen ``ObjectDefinition`` records and exposed through a read-only
``ObjectRegistry``; the module-level helpers delegate to a shared instance
so lookups are safe from any thread.

Binary-sensor classification is derived, not stored: a type is boolean when
it is unitless, one byte wide, has factor 1 and is not in
``NON_BINARY_SINGLE_BYTE_TYPES``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from importlib import resources
from typing import Any, Iterator, Optional, Union

VARIABLE = "variable"

# Unitless, one-byte, factor-1 types that carry numbers or codes, not booleans.
NON_BINARY_SINGLE_BYTE_TYPES: frozenset[str] = frozenset({
    "packet_id",
    "count",
    "count_uint16",
    "count_uint32",
    "count_sint8",
    "uv_index",
    "channel",
    "device_type_id",
    "firmware_version_uint32",
    "firmware_version_uint24",
    "button",
    "dimmer",
})


@dataclass(frozen=True)
class ObjectDefinition:
    """
    Metadata for one BTHome object id.

    Attributes:
        id: The one-byte object id used on the wire.
        name: Semantic type tag (several ids may share a name).
        unit: Unit string, empty for dimensionless and binary types.
        factor: Scale factor from transmitted integer to physical value.
        signed: Whether the integer is two's-complement.
        width: Byte width (1-4) or ``"variable"`` for length-prefixed data.
    """
    id: int
    name: str
    unit: str
    factor: float
    signed: bool
    width: Union[int, str]

    @property
    def is_variable(self) -> bool:
        return self.width == VARIABLE

    @property
    def decimals(self) -> int:
        """Decimal places implied by the factor (0.01 -> 2, 0.35 -> 2, 1 -> 0)."""
        exponent = Decimal(repr(self.factor)).normalize().as_tuple().exponent
        return max(0, -int(exponent))

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "factor": self.factor,
            "signed": self.signed,
            "width": self.width,
        }


def _parse_entry(entry: dict[str, Any]) -> ObjectDefinition:
    raw_id = entry["id"]
    object_id = int(raw_id, 16) if isinstance(raw_id, str) else int(raw_id)
    width = entry["width"]
    if width != VARIABLE and width not in (1, 2, 3, 4):
        raise ValueError(f"object 0x{object_id:02X} has unsupported width {width!r}")
    factor = entry.get("factor", 1)
    if factor <= 0:
        raise ValueError(f"object 0x{object_id:02X} has non-positive factor {factor!r}")
    return ObjectDefinition(
        id=object_id,
        name=entry["name"],
        unit=entry.get("unit", ""),
        factor=factor,
        signed=bool(entry.get("signed", False)),
        width=width,
    )


@lru_cache
def load_definitions() -> tuple[ObjectDefinition, ...]:
    resource = resources.files("bthomecodec.objects").joinpath("definitions.json")
    with resource.open("r", encoding="utf-8") as f:
        data = json.load(f)
    definitions = tuple(_parse_entry(entry) for entry in data["objects"])
    seen: set[int] = set()
    for definition in definitions:
        if definition.id in seen:
            raise ValueError(f"duplicate object id 0x{definition.id:02X} in definitions.json")
        seen.add(definition.id)
    return definitions


class ObjectRegistry:
    """
    Read-only table of BTHome object definitions.

    Provides lookup by object id and by type name, plus binary-sensor
    classification. When a name is shared by several ids, the lowest id is
    the canonical one used for encoding.
    """

    def __init__(self, definitions: Optional[tuple[ObjectDefinition, ...]] = None) -> None:
        definitions = load_definitions() if definitions is None else definitions
        self._by_id: dict[int, ObjectDefinition] = {d.id: d for d in definitions}
        self._by_name: dict[str, ObjectDefinition] = {}
        for definition in sorted(definitions, key=lambda d: d.id):
            self._by_name.setdefault(definition.name, definition)
        self._binary: frozenset[str] = frozenset(
            d.name
            for d in definitions
            if d.unit == "" and d.width == 1 and d.factor == 1 and d.name not in NON_BINARY_SINGLE_BYTE_TYPES
        )

    def get_definition(self, object_id: int) -> Optional[ObjectDefinition]:
        return self._by_id.get(object_id)

    def find_by_type(self, name: str) -> Optional[tuple[int, ObjectDefinition]]:
        definition = self._by_name.get(name)
        if definition is None:
            return None
        return definition.id, definition

    def is_binary_sensor(self, name: str) -> bool:
        return name in self._binary

    def supported_types(self) -> list[str]:
        return sorted(self._by_name)

    def all(self) -> list[ObjectDefinition]:
        """Return all definitions sorted by object id."""
        return sorted(self._by_id.values(), key=lambda d: d.id)

    def __iter__(self) -> Iterator[ObjectDefinition]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, item: int | str) -> bool:
        if isinstance(item, int):
            return item in self._by_id
        return item in self._by_name


@lru_cache
def get_registry() -> ObjectRegistry:
    return ObjectRegistry()


def get_definition(object_id: int) -> Optional[ObjectDefinition]:
    return get_registry().get_definition(object_id)


def find_by_type(name: str) -> Optional[tuple[int, ObjectDefinition]]:
    return get_registry().find_by_type(name)


def is_binary_sensor(name: str) -> bool:
    return get_registry().is_binary_sensor(name)


def supported_types() -> list[str]:
    return get_registry().supported_types()


def get_all_definitions() -> dict[int, ObjectDefinition]:
    return {d.id: d for d in get_registry().all()}


__all__ = [
    "NON_BINARY_SINGLE_BYTE_TYPES",
    "ObjectDefinition",
    "ObjectRegistry",
    "VARIABLE",
    "find_by_type",
    "get_all_definitions",
    "get_definition",
    "get_registry",
    "is_binary_sensor",
    "load_definitions",
    "supported_types",
]

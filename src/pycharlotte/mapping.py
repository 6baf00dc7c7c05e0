"""Static path mapping table.

Maps sensor-bus measurement paths to the short field names used on the wire.
A scalar path becomes one wire field; a composite path (position, attitude)
fans out into one wire field per member.

Raw entries use the compact ``{"name": ..., "type": ...}`` shape, where
``name`` is either a wire field name or a ``{member: wire_name}`` mapping and
``type`` is an optional unit kind. They are parsed once, into tagged
descriptors, when the table is built.
"""

from __future__ import annotations

import functools
import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Literal

from pydantic import Field

from pycharlotte._constants import TIME_FIELD
from pycharlotte.exceptions import MappingConfigError
from pycharlotte.models._base import RelayBaseModel
from pycharlotte.units import UnitKind, parse_unit


class ScalarField(RelayBaseModel):
    kind: Literal["scalar"] = "scalar"
    wire_name: str
    unit: UnitKind | None = None

    @property
    def wire_names(self) -> tuple[str, ...]:
        return (self.wire_name,)


class CompositeField(RelayBaseModel):
    kind: Literal["composite"] = "composite"
    subfields: dict[str, str]
    unit: UnitKind | None = None

    @property
    def wire_names(self) -> tuple[str, ...]:
        return tuple(self.subfields.values())


FieldDescriptor = Annotated[ScalarField | CompositeField, Field(discriminator="kind")]


DEFAULT_MAPPING: dict[str, dict[str, Any]] = {
    "navigation.courseOverGroundTrue": {"name": "cog", "type": "rad"},
    "navigation.courseOverGroundMagnetic": {"name": "cogm", "type": "rad"},
    "navigation.attitude": {"name": {"pitch": "p", "roll": "r"}, "type": "rad"},
    "navigation.speedOverGround": {"name": "sog"},
    "navigation.position": {"name": {"latitude": "lat", "longitude": "lng"}},
    "navigation.speedThroughWater": {"name": "spd"},
    "navigation.headingTrue": {"name": "headingt", "type": "rad"},
    "navigation.headingMagnetic": {"name": "heading", "type": "rad"},
    "navigation.magneticVariation": {"name": "variation", "type": "rad"},
    "steering.rudderAngle": {"name": "rudder", "type": "rad"},
    "environment.water.temperature": {"name": "seatemp"},
    "environment.wind.speedApparent": {"name": "aws"},
    "environment.wind.angleApparent": {"name": "awa", "type": "rad"},
    "environment.depth.belowTransducer": {"name": "depth"},
}


def parse_descriptor(path: str, entry: Mapping[str, Any]) -> FieldDescriptor:
    """Parse one raw ``{"name", "type"}`` entry into a tagged descriptor."""
    if not isinstance(entry, Mapping):
        raise MappingConfigError(f"{path}: entry must be an object", path=path)

    unit = parse_unit(entry.get("type"), path=path)
    name = entry.get("name")

    if isinstance(name, str):
        if not name:
            raise MappingConfigError(f"{path}: wire name is empty", path=path)
        return ScalarField(wire_name=name, unit=unit)

    if isinstance(name, Mapping):
        if not name:
            raise MappingConfigError(f"{path}: composite entry has no members", path=path)
        for member, wire_name in name.items():
            if not isinstance(member, str) or not member or not isinstance(wire_name, str) or not wire_name:
                raise MappingConfigError(f"{path}: invalid member mapping {member!r} -> {wire_name!r}", path=path)
        return CompositeField(subfields=dict(name), unit=unit)

    raise MappingConfigError(f"{path}: name must be a string or a mapping of members", path=path)


class PathMappingTable:
    """Read-only lookup from measurement path to field descriptor."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, FieldDescriptor]) -> None:
        seen: dict[str, str] = {}
        for path, descriptor in entries.items():
            for wire_name in descriptor.wire_names:
                if wire_name == TIME_FIELD:
                    raise MappingConfigError(f"{path}: wire name {TIME_FIELD!r} is reserved", path=path)
                other = seen.get(wire_name)
                if other is not None:
                    raise MappingConfigError(
                        f"{path}: wire name {wire_name!r} already used by {other}",
                        path=path,
                    )
                seen[wire_name] = path
        self._entries: Mapping[str, FieldDescriptor] = MappingProxyType(dict(entries))

    @classmethod
    def from_raw(cls, raw: Mapping[str, Mapping[str, Any]]) -> PathMappingTable:
        """Build a table from raw ``{path: {"name": ..., "type": ...}}`` entries."""
        return cls({path: parse_descriptor(path, entry) for path, entry in raw.items()})

    @classmethod
    def from_json_file(cls, path: str | Path) -> PathMappingTable:
        """Load a table of raw entries from a JSON file."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise MappingConfigError(f"Cannot load mapping table from {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise MappingConfigError(f"Mapping table in {path} must be a JSON object")
        return cls.from_raw(raw)

    def lookup(self, path: str) -> FieldDescriptor | None:
        return self._entries.get(path)

    @property
    def wire_names(self) -> frozenset[str]:
        return frozenset(name for descriptor in self._entries.values() for name in descriptor.wire_names)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@functools.cache
def default_table() -> PathMappingTable:
    """The built-in table, parsed once per process."""
    return PathMappingTable.from_raw(DEFAULT_MAPPING)

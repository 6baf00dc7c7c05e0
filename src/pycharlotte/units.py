"""Unit conversion from sensor-bus units to wire units.

The sensor bus reports angles in radians; the collector expects degrees.
Every other mapped quantity is forwarded unchanged.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import assert_never

from pycharlotte.exceptions import MappingConfigError

_RAD_TO_DEG = 180.0 / math.pi


class UnitKind(StrEnum):
    """Unit kinds a mapping table entry may declare."""

    RADIANS = "rad"


def parse_unit(raw: str | UnitKind | None, *, path: str = "") -> UnitKind | None:
    """Resolve a declared unit string to a :class:`UnitKind`.

    Raises :class:`MappingConfigError` for unit kinds that have no converter.
    """
    if raw is None:
        return None
    try:
        return UnitKind(raw)
    except ValueError:
        known = ", ".join(unit.value for unit in UnitKind)
        raise MappingConfigError(f"{path or 'entry'}: unknown unit kind {raw!r} (known: {known})", path=path) from None


def convert(value: float, unit: UnitKind | None) -> float:
    """Convert a raw value to its wire representation."""
    if unit is None:
        return value
    if unit is UnitKind.RADIANS:
        return value * _RAD_TO_DEG
    assert_never(unit)


def convert_back(value: float, unit: UnitKind | None) -> float:
    """Inverse of :func:`convert`."""
    if unit is None:
        return value
    if unit is UnitKind.RADIANS:
        return value / _RAD_TO_DEG
    assert_never(unit)

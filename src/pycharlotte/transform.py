"""Delta-to-wire transformation.

Pure functions: the output depends only on the delta, the self context and
the mapping table.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, assert_never

from pycharlotte.mapping import CompositeField, PathMappingTable, ScalarField, default_table
from pycharlotte.models.delta import Delta, DeltaUpdate
from pycharlotte.models.wire import WireObject
from pycharlotte.units import convert


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def transform(
    delta: DeltaUpdate,
    self_context: str,
    *,
    table: PathMappingTable | None = None,
    include_timestamp: bool = True,
) -> WireObject | None:
    """Build the wire object for one update, or ``None`` if nothing maps.

    Updates about any context other than *self_context* are rejected.
    Values that are not finite numbers, and composite values that are not
    objects, are skipped without affecting the rest of the update.
    """
    if delta.context != self_context:
        return None

    table = table if table is not None else default_table()
    source_id = delta.source_id
    fields: dict[str, dict[str, float]] = {}

    for item in delta.values:
        descriptor = table.lookup(item.path)
        if descriptor is None:
            continue
        if isinstance(descriptor, ScalarField):
            if _is_number(item.value):
                fields[descriptor.wire_name] = {source_id: convert(item.value, descriptor.unit)}
        elif isinstance(descriptor, CompositeField):
            if not isinstance(item.value, Mapping):
                continue
            for member, member_value in item.value.items():
                wire_name = descriptor.subfields.get(member)
                if wire_name is not None and _is_number(member_value):
                    fields[wire_name] = {source_id: convert(member_value, descriptor.unit)}
        else:
            assert_never(descriptor)

    if not fields:
        return None

    timestamp = delta.timestamp if include_timestamp else None
    return WireObject(fields=fields, time=timestamp)


def transform_delta(
    delta: Delta,
    self_context: str,
    *,
    table: PathMappingTable | None = None,
    include_timestamp: bool = True,
) -> list[WireObject]:
    """Transform every update of a bus envelope; one wire object per productive update."""
    if delta.context != self_context:
        return []
    wires: list[WireObject] = []
    for update in delta.iter_updates():
        wire = transform(update, self_context, table=table, include_timestamp=include_timestamp)
        if wire is not None:
            wires.append(wire)
    return wires

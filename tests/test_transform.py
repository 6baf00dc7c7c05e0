from __future__ import annotations

import json
from typing import Any

import pytest

from pycharlotte.mapping import PathMappingTable, ScalarField, default_table
from pycharlotte.models.delta import Delta, DeltaUpdate, PathValue
from pycharlotte.transform import transform, transform_delta
from pycharlotte.units import convert

SELF = "vessels.urn:mrn:signalk:uuid:c0d79334-4e25-4245-8892-54e8ccc8021d"
OTHER = "vessels.urn:mrn:imo:mmsi:230099999"


def _update(values: dict[str, Any], *, context: str = SELF, source_id: str = "A", timestamp: str | None = None) -> DeltaUpdate:
    return DeltaUpdate(
        context=context,
        source_id=source_id,
        timestamp=timestamp,
        values=tuple(PathValue(path=path, value=value) for path, value in values.items()),
    )


def test_speed_over_ground_scenario() -> None:
    delta = Delta.model_validate(
        {
            "context": SELF,
            "updates": [{"source": {"src": "A"}, "values": [{"path": "navigation.speedOverGround", "value": 5.1}]}],
        }
    )

    wires = transform_delta(delta, SELF, include_timestamp=False)

    assert len(wires) == 1
    assert wires[0].to_payload() == {"sog": {"A": 5.1}}


def test_attitude_scenario_converts_radians() -> None:
    wire = transform(_update({"navigation.attitude": {"pitch": 0.1, "roll": -0.2}}), SELF)

    assert wire is not None
    payload = wire.to_payload()
    assert set(payload) == {"p", "r"}
    assert payload["p"]["A"] == pytest.approx(5.729577951)
    assert payload["r"]["A"] == pytest.approx(-11.459155903)


@pytest.mark.parametrize("path", sorted(p for p in default_table() if isinstance(default_table().lookup(p), ScalarField)))
def test_every_scalar_path_is_converted_with_its_unit(path: str) -> None:
    descriptor = default_table().lookup(path)
    assert isinstance(descriptor, ScalarField)

    wire = transform(_update({path: 1.25}), SELF)

    assert wire is not None
    assert wire.fields[descriptor.wire_name]["A"] == convert(1.25, descriptor.unit)


def test_foreign_context_is_rejected() -> None:
    assert transform(_update({"navigation.speedOverGround": 5.1}, context=OTHER), SELF) is None
    assert transform(_update({"navigation.speedOverGround": 5.1}, context=None), SELF) is None


def test_unmapped_delta_returns_none() -> None:
    assert transform(_update({"electrical.batteries.house.voltage": 12.8}), SELF) is None
    assert transform(_update({}), SELF) is None


def test_unmapped_paths_are_skipped_alongside_mapped_ones() -> None:
    wire = transform(
        _update({"electrical.batteries.house.voltage": 12.8, "environment.depth.belowTransducer": 7.4}),
        SELF,
    )
    assert wire is not None
    assert wire.to_payload() == {"depth": {"A": 7.4}}


def test_composite_missing_member_is_skipped() -> None:
    wire = transform(_update({"navigation.position": {"latitude": 60.1, "altitude": 3.0}}), SELF)
    assert wire is not None
    assert wire.to_payload() == {"lat": {"A": 60.1}}


def test_malformed_values_are_skipped() -> None:
    assert transform(_update({"navigation.position": 60.1}), SELF) is None
    assert transform(_update({"navigation.speedOverGround": None}), SELF) is None
    assert transform(_update({"navigation.speedOverGround": "fast"}), SELF) is None
    assert transform(_update({"navigation.speedOverGround": True}), SELF) is None
    assert transform(_update({"navigation.speedOverGround": float("nan")}), SELF) is None

    wire = transform(_update({"navigation.speedOverGround": None, "navigation.speedThroughWater": 4.9}), SELF)
    assert wire is not None
    assert wire.to_payload() == {"spd": {"A": 4.9}}


def test_timestamp_passed_through() -> None:
    wire = transform(_update({"navigation.speedOverGround": 5.1}, timestamp="2024-06-01T10:15:30.123Z"), SELF)
    assert wire is not None
    assert wire.time == "2024-06-01T10:15:30.123Z"
    assert json.loads(wire.to_json())["time"] == "2024-06-01T10:15:30.123Z"


def test_include_timestamp_false_omits_time() -> None:
    wire = transform(
        _update({"navigation.speedOverGround": 5.1}, timestamp="2024-06-01T10:15:30.123Z"),
        SELF,
        include_timestamp=False,
    )
    assert wire is not None
    assert "time" not in wire.to_payload()


def test_missing_timestamp_omits_time() -> None:
    wire = transform(_update({"navigation.speedOverGround": 5.1}), SELF)
    assert wire is not None
    assert "time" not in wire.to_payload()


def test_custom_table() -> None:
    table = PathMappingTable.from_raw({"environment.outside.pressure": {"name": "baro"}})
    wire = transform(_update({"environment.outside.pressure": 101325, "navigation.speedOverGround": 5.1}), SELF, table=table)
    assert wire is not None
    assert wire.to_payload() == {"baro": {"A": 101325}}


def test_transform_delta_one_wire_per_update() -> None:
    delta = Delta.model_validate(
        {
            "context": SELF,
            "updates": [
                {
                    "source": {"label": "n2k", "src": 115},
                    "timestamp": "2024-06-01T10:15:30.000Z",
                    "values": [{"path": "navigation.speedOverGround", "value": 5.1}],
                },
                {
                    "$source": "gps.GP",
                    "timestamp": "2024-06-01T10:15:30.100Z",
                    "values": [{"path": "navigation.position", "value": {"latitude": 60.1, "longitude": 24.9}}],
                },
                {
                    "source": {"label": "n2k", "src": "36"},
                    "values": [{"path": "electrical.batteries.house.voltage", "value": 12.8}],
                },
                {
                    "values": [{"path": "navigation.speedThroughWater", "value": 4.9}],
                },
            ],
        }
    )

    wires = transform_delta(delta, SELF)

    assert [wire.to_payload() for wire in wires] == [
        {"sog": {"115": 5.1}, "time": "2024-06-01T10:15:30.000Z"},
        {"lat": {"gps.GP": 60.1}, "lng": {"gps.GP": 24.9}, "time": "2024-06-01T10:15:30.100Z"},
    ]


def test_transform_delta_foreign_context() -> None:
    delta = Delta.model_validate(
        {
            "context": OTHER,
            "updates": [{"source": {"src": "A"}, "values": [{"path": "navigation.speedOverGround", "value": 5.1}]}],
        }
    )
    assert transform_delta(delta, SELF) == []

"""Sensor-bus delta models.

The bus pushes delta envelopes shaped like::

    {
        "context": "vessels.urn:mrn:imo:mmsi:230099999",
        "updates": [
            {
                "source": {"label": "n2k", "type": "NMEA2000", "src": "115"},
                "$source": "n2k.115",
                "timestamp": "2024-06-01T10:15:30.123Z",
                "values": [{"path": "navigation.speedOverGround", "value": 5.1}],
            }
        ],
    }

Each entry of ``updates`` comes from a single source and is relayed as its
own :class:`DeltaUpdate`.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import ConfigDict, Field

from pycharlotte.models._base import RelayBaseModel


class Source(RelayBaseModel):
    """Provenance block of an update. ``src`` may arrive as a number."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    label: str | None = None
    type: str | None = None
    src: str | None = None


class PathValue(RelayBaseModel):
    path: str
    value: Any = None


class Update(RelayBaseModel):
    source: Source | None = None
    source_ref: str | None = Field(default=None, alias="$source")
    timestamp: str | None = None
    values: list[PathValue] = Field(default_factory=list)

    @property
    def source_id(self) -> str | None:
        """Identifier used to key values on the wire.

        Prefers ``source.src``; falls back to the ``$source`` reference.
        """
        if self.source is not None and self.source.src:
            return self.source.src
        return self.source_ref or None


class DeltaUpdate(RelayBaseModel):
    """One timestamped batch of values from a single source."""

    context: str | None = None
    source_id: str
    timestamp: str | None = None
    values: tuple[PathValue, ...] = ()


class Delta(RelayBaseModel):
    """A delta envelope as pushed by the sensor bus."""

    context: str | None = None
    updates: list[Update] = Field(default_factory=list)

    def iter_updates(self) -> Iterator[DeltaUpdate]:
        """Split the envelope into per-source updates.

        Updates without a resolvable source id are skipped.
        """
        for update in self.updates:
            source_id = update.source_id
            if not source_id:
                continue
            yield DeltaUpdate(
                context=self.context,
                source_id=source_id,
                timestamp=update.timestamp,
                values=tuple(update.values),
            )

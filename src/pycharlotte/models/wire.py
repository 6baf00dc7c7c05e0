"""Outbound wire object."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pycharlotte._constants import TIME_FIELD


@dataclass(frozen=True)
class WireObject:
    """One frame for the collector.

    ``fields`` maps a wire field name to ``{source_id: value}``. ``time`` is
    the update timestamp, passed through verbatim when requested.
    """

    fields: Mapping[str, Mapping[str, float]]
    time: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {name: dict(by_source) for name, by_source in self.fields.items()}
        if self.time is not None:
            payload[TIME_FIELD] = self.time
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))

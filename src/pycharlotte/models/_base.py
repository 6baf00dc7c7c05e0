"""Base model shared by the host-facing pydantic models.

Host option sets and sensor-bus deltas use camelCase keys. Models inheriting
from :class:`RelayBaseModel` accept either the camelCase alias or the
snake_case field name and are immutable once validated.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RelayBaseModel(BaseModel):
    """Frozen model with camelCase aliases; unknown keys are ignored."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

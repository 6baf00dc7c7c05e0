"""Pydantic and dataclass models exchanged with the host and the collector."""

from pycharlotte.models.delta import Delta, DeltaUpdate, PathValue, Source, Update
from pycharlotte.models.options import RelayOptions, options_schema
from pycharlotte.models.wire import WireObject

__all__ = [
    "Delta",
    "DeltaUpdate",
    "PathValue",
    "RelayOptions",
    "Source",
    "Update",
    "WireObject",
    "options_schema",
]

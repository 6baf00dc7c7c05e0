"""pycharlotte - relay own-vessel sensor data to the Charlotte cloud."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycharlotte")
except PackageNotFoundError:
    __version__ = "0+local"
from pycharlotte._constants import PLUGIN_DESCRIPTION, PLUGIN_ID, PLUGIN_NAME
from pycharlotte.config import RelayConfig
from pycharlotte.connection import ConnectionPhase, ConnectionSupervisor, WireSocket
from pycharlotte.coordinator import RelayCoordinator
from pycharlotte.exceptions import MappingConfigError, RelayConfigError, RelayError
from pycharlotte.host import SelfIdentity, SensorBus, build_subscription
from pycharlotte.mapping import (
    CompositeField,
    FieldDescriptor,
    PathMappingTable,
    ScalarField,
    default_table,
)
from pycharlotte.models import (
    Delta,
    DeltaUpdate,
    PathValue,
    RelayOptions,
    WireObject,
    options_schema,
)
from pycharlotte.transform import transform, transform_delta
from pycharlotte.units import UnitKind, convert, convert_back

__all__ = [
    "__version__",
    "CompositeField",
    "ConnectionPhase",
    "ConnectionSupervisor",
    "Delta",
    "DeltaUpdate",
    "FieldDescriptor",
    "MappingConfigError",
    "PLUGIN_DESCRIPTION",
    "PLUGIN_ID",
    "PLUGIN_NAME",
    "PathMappingTable",
    "PathValue",
    "RelayConfig",
    "RelayConfigError",
    "RelayCoordinator",
    "RelayError",
    "RelayOptions",
    "ScalarField",
    "SelfIdentity",
    "SensorBus",
    "UnitKind",
    "WireObject",
    "WireSocket",
    "build_subscription",
    "convert",
    "convert_back",
    "default_table",
    "options_schema",
    "transform",
    "transform_delta",
]

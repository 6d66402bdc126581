"""pysofar - Async SofarCloud station poller with state-tree projection and MQTT republishing."""

from importlib.metadata import PackageNotFoundError, version

from pysofar.client import SofarClient
from pysofar.config import AppProfile, SofarConfig
from pysofar.exceptions import (
    SofarApiError,
    SofarAuthenticationError,
    SofarConfigError,
    SofarError,
    SofarFetchError,
    SofarPublishError,
    SofarSnapshotError,
    SofarStoreWriteError,
    SofarTransportError,
)
from pysofar.ingestion.infer import describe_field, infer_role
from pysofar.ingestion.normalize import name_to_id
from pysofar.ingestion.projector import ProjectionReport, StationProjector
from pysofar.models import AuthToken, FieldDescriptor, Role, StationSummary, ValueKind, ValueType
from pysofar.publisher import BusMessage, MqttPublisher, iter_bus_messages
from pysofar.runner import RunOrchestrator, RunOutcome, RunState
from pysofar.snapshot import save_snapshot
from pysofar.state import ContainerEntry, LeafEntry, MemoryStateTree, StateTree, StateValue

try:
    __version__ = version("pysofar")
except PackageNotFoundError:
    __version__ = "0+local"

__all__ = [
    "__version__",
    "AppProfile",
    "AuthToken",
    "BusMessage",
    "ContainerEntry",
    "FieldDescriptor",
    "LeafEntry",
    "MemoryStateTree",
    "MqttPublisher",
    "ProjectionReport",
    "Role",
    "RunOrchestrator",
    "RunOutcome",
    "RunState",
    "SofarApiError",
    "SofarAuthenticationError",
    "SofarClient",
    "SofarConfig",
    "SofarConfigError",
    "SofarError",
    "SofarFetchError",
    "SofarPublishError",
    "SofarSnapshotError",
    "SofarStoreWriteError",
    "SofarTransportError",
    "StateTree",
    "StateValue",
    "StationProjector",
    "StationSummary",
    "ValueKind",
    "ValueType",
    "describe_field",
    "infer_role",
    "iter_bus_messages",
    "name_to_id",
    "save_snapshot",
]

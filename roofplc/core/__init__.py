from roofplc.core.errors import (
    RoofDriverError, LinkError, NotConnectedError, UnsupportedCapabilityError,
)
from roofplc.core.shutter_state import ShutterState, SensorSnapshot, ShutterStateResolver
from roofplc.core.lifecycle import ConnectionManager, LinkState

__all__ = [
    "RoofDriverError",
    "LinkError",
    "NotConnectedError",
    "UnsupportedCapabilityError",
    "ShutterState",
    "SensorSnapshot",
    "ShutterStateResolver",
    "ConnectionManager",
    "LinkState",
]

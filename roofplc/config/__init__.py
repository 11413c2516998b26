from roofplc.config.io_map import IOMap, IOPoint, IOSignal, SignalDirection
from roofplc.config.settings import DriverSettings

__all__ = ["IOMap", "IOPoint", "IOSignal", "SignalDirection", "DriverSettings"]

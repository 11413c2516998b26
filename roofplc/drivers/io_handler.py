"""
I/O Handler — Abstraction Layer
=================================
Translates between semantic roof signals and the physical PLC
link. Handles:

  - Resolving a signal to its data block address via the IO map
  - Single-bit reads and writes over the link
  - Serializing every transfer (the controller does not accept
    concurrent requests)
  - Reading the sensor snapshot consumed by the state resolver

This layer keeps the control logic independent of addresses and
of the transport in use.
"""

import logging
import threading

from roofplc.config.io_map import IOMap, IOSignal, SignalDirection
from roofplc.core.shutter_state import SensorSnapshot
from roofplc.drivers.link import PLCLink

logger = logging.getLogger(__name__)


class IOHandler:
    """
    Bridges semantic signals to physical I/O via a pluggable link.

    `lock` is re-entrant: callers that need several transfers to run
    without interleaving (a pulse sequence, a snapshot) hold it
    around the whole group.
    """

    def __init__(self, link: PLCLink, io_map: IOMap = None):
        self.link = link
        self.io_map = io_map or IOMap()
        self.lock = threading.RLock()

    def read(self, signal: IOSignal) -> bool:
        """Read one signal from the controller."""
        point = self.io_map.get_point(signal)
        with self.lock:
            value = self.link.read_bit(point.block, point.offset)
        logger.debug("read %s (DB%d.%d) = %s", signal.value, point.block, point.offset, value)
        return value

    def write(self, signal: IOSignal, value: bool):
        """Write one output signal to the controller."""
        point = self.io_map.get_point(signal)
        if point.direction != SignalDirection.DIGITAL_OUT:
            raise ValueError(f"{signal.value} is an input and cannot be written")
        with self.lock:
            self.link.write_bit(point.block, point.offset, value)
        logger.debug("write %s (DB%d.%d) = %s", signal.value, point.block, point.offset, value)

    def read_snapshot(self) -> SensorSnapshot:
        """Read the four roof sensors, then the slewing flag."""
        with self.lock:
            roof_open = self.read(IOSignal.ROOF_OPEN)
            roof_closed = self.read(IOSignal.ROOF_CLOSED)
            roof_opening = self.read(IOSignal.ROOF_OPENING)
            roof_closing = self.read(IOSignal.ROOF_CLOSING)
            slewing = self.read(IOSignal.SLEWING)
        return SensorSnapshot(
            roof_open=roof_open,
            roof_closed=roof_closed,
            roof_opening=roof_opening,
            roof_closing=roof_closing,
            slewing=slewing,
        )

    def read_all(self) -> dict:
        """Read every mapped signal, inputs and outputs (diagnostics)."""
        with self.lock:
            return {
                signal: self.read(signal)
                for signal in self.io_map.points
            }

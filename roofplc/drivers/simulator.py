"""
Roof Controller Simulator
==========================
Simulates the roof PLC for development and testing without real
hardware. Models the controller's own ladder logic:

  - A rising edge on an open/close output starts roof travel
  - A rising edge on the stop output halts all motion
  - Travel takes a fixed time between the two end stops
  - End-stop switches and motion flags follow the roof position

Implements the PLCLink protocol so it can stand in for S7Link.
Every transfer is appended to `transfer_log` for inspection.
"""

import time
import logging
from typing import Optional

from roofplc.config.io_map import IOMap, IOSignal
from roofplc.core.errors import LinkError

logger = logging.getLogger(__name__)

CLOSED_POS = 0.0
OPEN_POS = 1.0


class RoofSimulator:
    """
    Simulates the data block and motion of the two-leaf roof.

    The roof starts closed. Feedback bits are recomputed from the
    simulated position before every read; forced bits override
    the computed value until released.
    """

    def __init__(
        self,
        io_map: Optional[IOMap] = None,
        travel_sec: float = 20.0,
        realtime: bool = True,
        block_size: int = 16,
    ):
        self.io_map = io_map or IOMap()
        self.travel_sec = travel_sec
        self.realtime = realtime

        self._db = bytearray(block_size)
        self._live = False
        self._refuse_connect = False
        self._fail_offsets: set = set()
        self._forced: dict = {}

        # Internal process state
        self._position = CLOSED_POS    # 0.0 = closed, 1.0 = open
        self._motion = 0               # +1 opening, -1 closing, 0 stopped
        self._flap = "CLOSED"
        self._last_update = time.monotonic()

        self.transfer_log: list = []
        self.connect_count = 0
        self._refresh_inputs()

    # ── PLCLink Protocol Implementation ──────────────────────

    def connect(self, address: str, local_tsap: int, remote_tsap: int) -> None:
        if self._live:
            logger.error("Simulator connect requested while already connected")
            return
        if self._refuse_connect:
            raise LinkError(f"Simulated controller at {address} refused connection")
        self._live = True
        self.connect_count += 1
        self._last_update = time.monotonic()
        logger.info("Simulator connected (%s, TSAP %04X/%04X)", address, local_tsap, remote_tsap)

    def disconnect(self) -> None:
        self._live = False
        logger.info("Simulator disconnected")

    def is_live(self) -> bool:
        return self._live

    def read_bit(self, block: int, offset: int) -> bool:
        self._check_transfer(block, offset)
        self._update_simulation()
        value = self._db[offset] != 0
        self.transfer_log.append(("read", block, offset, value))
        return value

    def write_bit(self, block: int, offset: int, value: bool) -> None:
        self._check_transfer(block, offset)
        if offset in self._fail_offsets:
            raise LinkError(f"Simulated write failure at DB{block}.{offset}")
        self._update_simulation()
        previous = self._db[offset] != 0
        self._db[offset] = 1 if value else 0
        self.transfer_log.append(("write", block, offset, bool(value)))
        if value and not previous:
            self._process_edge(offset)

    # ── Simulation Controls ──────────────────────────────────

    def advance(self, seconds: float):
        """Move the simulated roof forward in time."""
        if self._motion:
            step = seconds / self.travel_sec if self.travel_sec > 0 else OPEN_POS
            self._position += self._motion * step
            if self._position >= OPEN_POS:
                self._position = OPEN_POS
                self._motion = 0
                self._flap = "OPEN"
                logger.info("Simulated roof reached open end stop")
            elif self._position <= CLOSED_POS:
                self._position = CLOSED_POS
                self._motion = 0
                self._flap = "CLOSED"
                logger.info("Simulated roof reached closed end stop")
        self._refresh_inputs()

    def set_position(self, position: float, motion: int = 0):
        """Place the roof at a position (0.0 closed .. 1.0 open)."""
        self._position = max(CLOSED_POS, min(OPEN_POS, position))
        self._motion = motion
        self._refresh_inputs()

    def force_signal(self, signal: IOSignal, value: bool):
        """Override a feedback bit until released."""
        self._forced[self.io_map.get_point(signal).offset] = bool(value)
        self._refresh_inputs()

    def release_signal(self, signal: IOSignal):
        self._forced.pop(self.io_map.get_point(signal).offset, None)
        self._refresh_inputs()

    def release_all(self):
        self._forced.clear()
        self._refresh_inputs()

    def rewire(self, io_map: IOMap):
        """Serve the data block described by a new IO map."""
        if self._live:
            raise LinkError("Simulator cannot be rewired while connected")
        self.io_map = io_map
        self._fail_offsets.clear()
        self._forced.clear()
        self._refresh_inputs()
        logger.info("Simulator now serving DB%d", io_map.block)

    def refuse_connections(self, refuse: bool = True):
        """Make subsequent connect attempts fail."""
        self._refuse_connect = refuse

    def drop_link(self):
        """Simulate the network going away under an open session."""
        self._live = False
        logger.warning("Simulated link dropped")

    def fail_writes(self, signal: IOSignal, fail: bool = True):
        """Make writes to one output fail."""
        offset = self.io_map.get_point(signal).offset
        if fail:
            self._fail_offsets.add(offset)
        else:
            self._fail_offsets.discard(offset)

    def peek(self, signal: IOSignal) -> bool:
        """Read a bit without a transfer (no log entry)."""
        return self._db[self.io_map.get_point(signal).offset] != 0

    @property
    def position(self) -> float:
        return self._position

    @property
    def motion(self) -> int:
        return self._motion

    @property
    def flap(self) -> str:
        return self._flap

    # ── Internal Simulation ──────────────────────────────────

    def _check_transfer(self, block: int, offset: int):
        if not self._live:
            raise LinkError(f"Simulated link down (DB{block}.{offset})")
        if block != self.io_map.block or not 0 <= offset < len(self._db):
            raise LinkError(f"Address DB{block}.{offset} out of range")

    def _update_simulation(self):
        """Advance the simulation by the wall-clock time since the last call."""
        now = time.monotonic()
        dt = now - self._last_update
        self._last_update = now
        if self.realtime:
            self.advance(dt)

    def _process_edge(self, offset: int):
        """React to a rising edge on an output."""
        point = self.io_map.find_by_address(self.io_map.block, offset)
        if point is None:
            return
        signal = point.signal
        if signal == IOSignal.STOP:
            if self._motion:
                logger.info("Simulated roof stopped at %.0f%%", self._position * 100)
            self._motion = 0
        elif signal == IOSignal.OPEN_ROOF:
            if self._position < OPEN_POS:
                self._motion = 1
        elif signal == IOSignal.CLOSE_ROOF:
            if self._position > CLOSED_POS:
                self._motion = -1
        elif signal == IOSignal.OPEN_FLAP:
            self._flap = "OPEN"
        elif signal == IOSignal.CLOSE_FLAP:
            self._flap = "CLOSED"
        self._refresh_inputs()

    def _refresh_inputs(self):
        """Recompute the feedback bits from the simulated position."""
        computed = {
            IOSignal.ROOF_OPEN: self._position >= OPEN_POS,
            IOSignal.ROOF_CLOSED: self._position <= CLOSED_POS,
            IOSignal.SLEWING: self._motion != 0,
            IOSignal.ROOF_OPENING: self._motion > 0,
            IOSignal.ROOF_CLOSING: self._motion < 0,
        }
        for signal, value in computed.items():
            offset = self.io_map.get_point(signal).offset
            value = self._forced.get(offset, value)
            self._db[offset] = 1 if value else 0

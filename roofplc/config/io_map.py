"""
I/O Point Mapping for the Two-Leaf Roll-Off Roof
=================================================
Maps semantic roof signals to their byte addresses in the
controller's data block.

Hardware Reference:
  - Two-leaf roof: a hinged flap plus a sliding roof section
  - Motion sequencing runs in the PLC's own ladder logic
  - Outputs are pulse-triggered relays, inputs are end-stop
    switches and motion feedback flags

Addressing:
  - One data block (DB1 in the reference wiring)
  - One byte per signal, non-zero byte = true
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SignalDirection(Enum):
    DIGITAL_IN = "DI"
    DIGITAL_OUT = "DO"


class IOSignal(Enum):
    STOP = "STOP"
    OPEN_ROOF = "OPEN_ROOF"
    CLOSE_ROOF = "CLOSE_ROOF"
    OPEN_FLAP = "OPEN_FLAP"
    CLOSE_FLAP = "CLOSE_FLAP"
    ROOF_OPEN = "ROOF_OPEN"
    ROOF_CLOSED = "ROOF_CLOSED"
    SLEWING = "SLEWING"
    ROOF_OPENING = "ROOF_OPENING"
    ROOF_CLOSING = "ROOF_CLOSING"


@dataclass(frozen=True)
class IOPoint:
    """Single I/O point definition."""
    signal: IOSignal
    direction: SignalDirection
    block: int
    offset: int
    description: str
    length: int = 1


def _reference_points(block: int) -> dict:
    return {
        # ── Commands (pulsed relays) ─────────────────────────
        IOSignal.STOP: IOPoint(
            signal=IOSignal.STOP,
            direction=SignalDirection.DIGITAL_OUT,
            block=block,
            offset=2,
            description="Stop all roof and flap motion",
        ),
        IOSignal.OPEN_ROOF: IOPoint(
            signal=IOSignal.OPEN_ROOF,
            direction=SignalDirection.DIGITAL_OUT,
            block=block,
            offset=3,
            description="Start roof opening sequence",
        ),
        IOSignal.CLOSE_ROOF: IOPoint(
            signal=IOSignal.CLOSE_ROOF,
            direction=SignalDirection.DIGITAL_OUT,
            block=block,
            offset=4,
            description="Start roof closing sequence",
        ),
        IOSignal.OPEN_FLAP: IOPoint(
            signal=IOSignal.OPEN_FLAP,
            direction=SignalDirection.DIGITAL_OUT,
            block=block,
            offset=9,
            description="Start flap opening sequence",
        ),
        IOSignal.CLOSE_FLAP: IOPoint(
            signal=IOSignal.CLOSE_FLAP,
            direction=SignalDirection.DIGITAL_OUT,
            block=block,
            offset=10,
            description="Start flap closing sequence",
        ),

        # ── Feedback ─────────────────────────────────────────
        IOSignal.ROOF_CLOSED: IOPoint(
            signal=IOSignal.ROOF_CLOSED,
            direction=SignalDirection.DIGITAL_IN,
            block=block,
            offset=5,
            description="Roof closed end-stop switch",
        ),
        IOSignal.ROOF_OPEN: IOPoint(
            signal=IOSignal.ROOF_OPEN,
            direction=SignalDirection.DIGITAL_IN,
            block=block,
            offset=6,
            description="Roof open end-stop switch",
        ),
        IOSignal.SLEWING: IOPoint(
            signal=IOSignal.SLEWING,
            direction=SignalDirection.DIGITAL_IN,
            block=block,
            offset=11,
            description="Roof or flap drive running (either direction)",
        ),
        IOSignal.ROOF_OPENING: IOPoint(
            signal=IOSignal.ROOF_OPENING,
            direction=SignalDirection.DIGITAL_IN,
            block=block,
            offset=12,
            description="Roof drive running in open direction",
        ),
        IOSignal.ROOF_CLOSING: IOPoint(
            signal=IOSignal.ROOF_CLOSING,
            direction=SignalDirection.DIGITAL_IN,
            block=block,
            offset=13,
            description="Roof drive running in close direction",
        ),
    }


@dataclass
class IOMap:
    """
    Complete I/O map for the roll-off roof controller.

    Every component addresses the controller through this map,
    never through inline offsets. Changing an entry here changes
    the wiring, not the behavior.
    """

    block: int = 1
    points: Optional[dict] = None

    def __post_init__(self):
        if self.points is None:
            self.points = _reference_points(self.block)
        self._validate()

    def _validate(self):
        missing = [s.value for s in IOSignal if s not in self.points]
        if missing:
            raise ValueError(f"IO map missing signals: {', '.join(missing)}")

        seen = {}
        for signal, point in self.points.items():
            if point.signal is not signal:
                raise ValueError(f"IO map entry {signal.value} describes {point.signal.value}")
            if point.length != 1:
                raise ValueError(f"{signal.value}: only single-byte points are supported")
            key = (point.block, point.offset)
            if key in seen:
                raise ValueError(
                    f"{signal.value} shares DB{point.block}.{point.offset} with {seen[key].value}"
                )
            seen[key] = signal

    def get_point(self, signal: IOSignal) -> IOPoint:
        """Look up the I/O point for a signal."""
        return self.points[signal]

    def find_by_address(self, block: int, offset: int) -> Optional[IOPoint]:
        """Reverse lookup used by diagnostics and the simulator."""
        for point in self.points.values():
            if point.block == block and point.offset == offset:
                return point
        return None

    def get_points_by_direction(self, direction: SignalDirection) -> dict:
        """Return all points of a given direction, keyed by signal."""
        return {
            signal: point for signal, point in self.points.items()
            if point.direction == direction
        }

    @property
    def inputs(self) -> dict:
        return self.get_points_by_direction(SignalDirection.DIGITAL_IN)

    @property
    def outputs(self) -> dict:
        return self.get_points_by_direction(SignalDirection.DIGITAL_OUT)

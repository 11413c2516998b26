"""
Roof Motion Commands
=====================
Starts and stops roof travel by pulsing the controller's command
outputs.

The outputs drive edge-triggered relays: a short high pulse
starts a sequence in the PLC's ladder logic, and an output left
high could re-trigger it or fight the limit-switch logic. Each
command therefore writes:

    set A, set B  ->  hold pulse width  ->  clear A, clear B

The hold is a blocking sleep on the calling thread, taken while
the I/O lock is held, so the clear writes always follow their own
set writes with nothing interleaved.

Commands return once the pulse is written. Whether the roof
actually arrives is observed through later status reads.
"""

import time
import logging

from roofplc.config.io_map import IOSignal
from roofplc.drivers.io_handler import IOHandler

logger = logging.getLogger(__name__)

DEFAULT_PULSE_SEC = 0.1

OPEN_OUTPUTS = (IOSignal.OPEN_FLAP, IOSignal.OPEN_ROOF)
CLOSE_OUTPUTS = (IOSignal.CLOSE_FLAP, IOSignal.CLOSE_ROOF)
STOP_OUTPUTS = (IOSignal.STOP,)


class MotionCommander:
    """
    Issues pulsed output sequences for open, close and abort.

    A failed write stops the sequence where it is and raises the
    LinkError; outputs already set are not cleared. A half-issued
    pulse needs an operator to look at the roof.
    """

    def __init__(self, io_handler: IOHandler, pulse_sec: float = DEFAULT_PULSE_SEC):
        self.io = io_handler
        self.pulse_sec = pulse_sec

    def open(self):
        """Pulse the flap and roof open outputs."""
        self._pulse(OPEN_OUTPUTS)
        logger.info("Open pulse issued")

    def close(self):
        """Pulse the flap and roof close outputs."""
        self._pulse(CLOSE_OUTPUTS)
        logger.info("Close pulse issued")

    def abort(self):
        """Pulse the stop output. Does not wait for motion to end."""
        self._pulse(STOP_OUTPUTS)
        logger.info("Stop pulse issued")

    def _pulse(self, signals: tuple):
        if self.pulse_sec <= 0:
            raise ValueError(f"Pulse width must be positive, got {self.pulse_sec}s")
        with self.io.lock:
            for signal in signals:
                self.io.write(signal, True)
            time.sleep(self.pulse_sec)
            for signal in signals:
                self.io.write(signal, False)

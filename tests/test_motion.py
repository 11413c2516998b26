"""
Tests for the Motion Commander pulse sequences.
"""

import pytest

from roofplc.config.io_map import IOSignal
from roofplc.core.errors import LinkError
from roofplc.modules.motion import MotionCommander


def offset(io_map, signal):
    return io_map.get_point(signal).offset


class TestPulseSequences:
    """Exact write ordering on the link."""

    def test_open_pulse(self, commander, sleeps, io_map):
        commander.open()
        flap = offset(io_map, IOSignal.OPEN_FLAP)
        roof = offset(io_map, IOSignal.OPEN_ROOF)
        assert sleeps == [
            ("write", 1, flap, True),
            ("write", 1, roof, True),
            ("sleep", 0.1),
            ("write", 1, flap, False),
            ("write", 1, roof, False),
        ]

    def test_close_pulse(self, commander, sleeps, io_map):
        commander.close()
        flap = offset(io_map, IOSignal.CLOSE_FLAP)
        roof = offset(io_map, IOSignal.CLOSE_ROOF)
        assert sleeps == [
            ("write", 1, flap, True),
            ("write", 1, roof, True),
            ("sleep", 0.1),
            ("write", 1, flap, False),
            ("write", 1, roof, False),
        ]

    def test_abort_pulse(self, commander, sleeps, io_map):
        commander.abort()
        stop = offset(io_map, IOSignal.STOP)
        assert sleeps == [
            ("write", 1, stop, True),
            ("sleep", 0.1),
            ("write", 1, stop, False),
        ]

    def test_outputs_left_low(self, commander, live_simulator):
        commander.open()
        for signal in (IOSignal.OPEN_FLAP, IOSignal.OPEN_ROOF):
            assert live_simulator.peek(signal) is False

    def test_pulse_width_configurable(self, io_handler, sleeps):
        MotionCommander(io_handler, pulse_sec=0.25).abort()
        assert ("sleep", 0.25) in sleeps

    def test_commands_repeat_without_guard(self, commander, sleeps):
        commander.open()
        commander.open()
        writes = [entry for entry in sleeps if entry[0] == "write"]
        assert len(writes) == 8


class TestPulseFailures:
    """A failed write stops the sequence where it is."""

    def test_failure_on_second_set_stops_sequence(self, commander, live_simulator, sleeps, io_map):
        live_simulator.fail_writes(IOSignal.OPEN_ROOF)
        with pytest.raises(LinkError):
            commander.open()
        # flap set stays set, nothing else written, no hold
        assert sleeps == [("write", 1, offset(io_map, IOSignal.OPEN_FLAP), True)]
        assert live_simulator.peek(IOSignal.OPEN_FLAP) is True

    def test_failure_on_first_set(self, commander, live_simulator, sleeps):
        live_simulator.fail_writes(IOSignal.STOP)
        with pytest.raises(LinkError):
            commander.abort()
        assert sleeps == []

    def test_link_down(self, commander, live_simulator, sleeps):
        live_simulator.drop_link()
        with pytest.raises(LinkError):
            commander.close()
        assert sleeps == []

    @pytest.mark.parametrize("width", [0, -0.005])
    def test_non_positive_width_writes_nothing(self, io_handler, live_simulator, sleeps, width):
        with pytest.raises(ValueError):
            MotionCommander(io_handler, pulse_sec=width).open()
        assert sleeps == []
        assert live_simulator.peek(IOSignal.OPEN_FLAP) is False
        assert live_simulator.peek(IOSignal.OPEN_ROOF) is False


class TestMotionOnSimulator:
    """The simulated ladder logic reacts to the pulses."""

    def test_open_starts_travel(self, commander, live_simulator):
        commander.open()
        assert live_simulator.motion == 1
        assert live_simulator.flap == "OPEN"
        live_simulator.advance(live_simulator.travel_sec)
        assert live_simulator.peek(IOSignal.ROOF_OPEN) is True
        assert live_simulator.motion == 0

    def test_abort_halts_travel(self, commander, live_simulator):
        commander.open()
        live_simulator.advance(live_simulator.travel_sec / 2)
        commander.abort()
        assert live_simulator.motion == 0
        assert live_simulator.peek(IOSignal.ROOF_OPEN) is False
        assert live_simulator.peek(IOSignal.ROOF_CLOSED) is False

    def test_close_when_closed_does_not_move(self, commander, live_simulator):
        commander.close()
        assert live_simulator.motion == 0

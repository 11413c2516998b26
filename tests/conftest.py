"""
Shared test fixtures for the roof driver test suite.
"""

import pytest

from roofplc.config.io_map import IOMap
from roofplc.config.settings import DriverSettings
from roofplc.core.driver import RoofDriver
from roofplc.core.shutter_state import ShutterStateResolver
from roofplc.drivers.io_handler import IOHandler
from roofplc.drivers.simulator import RoofSimulator
from roofplc.modules.motion import MotionCommander


@pytest.fixture
def settings():
    return DriverSettings(transport="sim")


@pytest.fixture
def io_map():
    return IOMap()


@pytest.fixture
def simulator(io_map):
    """Simulator that only moves when advanced explicitly."""
    return RoofSimulator(io_map=io_map, realtime=False)


@pytest.fixture
def live_simulator(simulator):
    simulator.connect("127.0.0.1", 20, 20)
    simulator.transfer_log.clear()
    return simulator


@pytest.fixture
def io_handler(live_simulator, io_map):
    return IOHandler(live_simulator, io_map)


@pytest.fixture
def resolver():
    return ShutterStateResolver()


@pytest.fixture
def sleeps(monkeypatch, simulator):
    """Record pulse holds in the simulator's transfer log instead of sleeping."""
    def fake_sleep(seconds):
        simulator.transfer_log.append(("sleep", seconds))
    monkeypatch.setattr("roofplc.modules.motion.time.sleep", fake_sleep)
    return simulator.transfer_log


@pytest.fixture
def commander(io_handler, sleeps):
    return MotionCommander(io_handler)


@pytest.fixture
def driver(simulator, settings, sleeps):
    """Driver with simulator backend (not connected)."""
    return RoofDriver(simulator, settings)


@pytest.fixture
def connected_driver(driver, simulator):
    driver.connected = True
    simulator.transfer_log.clear()
    return driver

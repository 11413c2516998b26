"""
Roof Driver — Host Control Surface
===================================
The object a host framework or operator console talks to. Each
call:

    1. Checks the connection (fails fast when not connected)
    2. Takes the I/O lock for the whole operation
    3. Reads the sensor snapshot or issues a pulsed command
    4. Resolves and reports the shutter state

The roof is a two-leaf roll-off roof: it opens, closes and stops.
Dome features (azimuth, altitude, homing, parking, slaving) answer
False to capability queries and raise UnsupportedCapabilityError
when used.
"""

import logging
from typing import Optional

from roofplc import __version__
from roofplc.config.io_map import IOMap, IOSignal
from roofplc.config.settings import DriverSettings
from roofplc.core.errors import LinkError, UnsupportedCapabilityError
from roofplc.core.lifecycle import ConnectionManager
from roofplc.core.shutter_state import ShutterState, ShutterStateResolver
from roofplc.drivers.io_handler import IOHandler
from roofplc.drivers.link import PLCLink
from roofplc.modules.motion import MotionCommander

logger = logging.getLogger(__name__)

DRIVER_NAME = "RoofPLC"
DRIVER_DESCRIPTION = "Roll-off roof driver for an S7 PLC controlled two-leaf roof"
INTERFACE_VERSION = 2

CAPABILITIES = {
    "can_find_home": False,
    "can_park": False,
    "can_set_altitude": False,
    "can_set_azimuth": False,
    "can_set_park": False,
    "can_set_shutter": True,
    "can_slave": False,
    "can_sync_azimuth": False,
}


class RoofDriver:
    """
    Roll-off roof driver.

    Owns one PLC link, the cached shutter state and the motion
    commander. Not meant to share its link with another instance.
    """

    def __init__(
        self,
        link: PLCLink,
        settings: Optional[DriverSettings] = None,
        io_map: Optional[IOMap] = None,
    ):
        self.settings = settings or DriverSettings()
        self._custom_map = io_map is not None
        self.io_map = io_map or IOMap(block=self.settings.data_block)

        self.io = IOHandler(link, self.io_map)
        self.connection = ConnectionManager(link, self.settings)
        self.resolver = ShutterStateResolver(strict_end_stops=self.settings.strict_end_stops)
        self.motion = MotionCommander(self.io, pulse_sec=self.settings.pulse_sec)

        self.set_trace(self.settings.trace_enabled)
        logger.debug("Driver initialised for %s", self.settings.ip_address)

    @property
    def link(self) -> PLCLink:
        return self.io.link

    def set_trace(self, enabled: bool):
        """Toggle the per-call DEBUG trace for the whole package."""
        self.settings.trace_enabled = enabled
        logging.getLogger("roofplc").setLevel(logging.DEBUG if enabled else logging.NOTSET)

    # ── Connection ───────────────────────────────────────────

    @property
    def connected(self) -> bool:
        with self.io.lock:
            value = self.connection.connected
        logger.debug("Connected Get %s", value)
        return value

    @connected.setter
    def connected(self, value: bool):
        logger.debug("Connected Set %s", value)
        with self.io.lock:
            if value and not self.connection.connected:
                self._apply_settings()
            self.connection.set_connected(bool(value))

    def _apply_settings(self):
        """Pick up settings edited since construction or the last connect."""
        sp = self.settings
        if not self._custom_map and self.io_map.block != sp.data_block:
            self.io_map = IOMap(block=sp.data_block)
            self.io.io_map = self.io_map
            rewire = getattr(self.link, "rewire", None)
            if rewire is not None:
                rewire(self.io_map)
        self.motion.pulse_sec = sp.pulse_sec
        self.resolver.set_strict(sp.strict_end_stops)

    def dispose(self):
        """Release the link at shutdown."""
        try:
            self.connected = False
        except LinkError:
            logger.exception("Failed to close link during dispose")

    # ── Identity ─────────────────────────────────────────────

    @property
    def name(self) -> str:
        return DRIVER_NAME

    @property
    def description(self) -> str:
        return DRIVER_DESCRIPTION

    @property
    def driver_version(self) -> str:
        return ".".join(__version__.split(".")[:2])

    @property
    def driver_info(self) -> str:
        return f"Version: {self.driver_version}"

    @property
    def interface_version(self) -> int:
        return INTERFACE_VERSION

    @property
    def supported_actions(self) -> list:
        return []

    # ── Capabilities ─────────────────────────────────────────

    def capabilities(self) -> dict:
        return dict(CAPABILITIES)

    def _capability(self, name: str) -> bool:
        logger.debug("%s Get %s", name, CAPABILITIES[name])
        return CAPABILITIES[name]

    @property
    def can_find_home(self) -> bool:
        return self._capability("can_find_home")

    @property
    def can_park(self) -> bool:
        return self._capability("can_park")

    @property
    def can_set_altitude(self) -> bool:
        return self._capability("can_set_altitude")

    @property
    def can_set_azimuth(self) -> bool:
        return self._capability("can_set_azimuth")

    @property
    def can_set_park(self) -> bool:
        return self._capability("can_set_park")

    @property
    def can_set_shutter(self) -> bool:
        return self._capability("can_set_shutter")

    @property
    def can_slave(self) -> bool:
        return self._capability("can_slave")

    @property
    def can_sync_azimuth(self) -> bool:
        return self._capability("can_sync_azimuth")

    # ── Shutter Commands ─────────────────────────────────────

    def open_shutter(self):
        """Start opening flap and roof."""
        with self.io.lock:
            self.connection.require_connected("open_shutter")
            self.motion.open()

    def close_shutter(self):
        """Start closing flap and roof."""
        with self.io.lock:
            self.connection.require_connected("close_shutter")
            self.motion.close()

    def abort_slew(self):
        """Stop all motion. Poll shutter_status to see where the roof stopped."""
        with self.io.lock:
            self.connection.require_connected("abort_slew")
            self.motion.abort()

    # ── Status ───────────────────────────────────────────────

    @property
    def shutter_status(self) -> ShutterState:
        """Read the sensors and resolve the shutter state."""
        with self.io.lock:
            self.connection.require_connected("shutter_status")
            snapshot = self.io.read_snapshot()
            state = self.resolver.resolve(snapshot)
        logger.debug("ShutterStatus Get %s", state.name)
        return state

    @property
    def slewing(self) -> bool:
        with self.io.lock:
            self.connection.require_connected("slewing")
            value = self.io.read(IOSignal.SLEWING)
        logger.debug("Slewing Get %s", value)
        return value

    @property
    def slaved(self) -> bool:
        return False

    @slaved.setter
    def slaved(self, value: bool):
        raise UnsupportedCapabilityError("slaved")

    def get_status(self) -> dict:
        """Return a status snapshot for consoles."""
        with self.io.lock:
            connected = self.connection.connected
            status = {
                "connected": connected,
                "link_state": self.connection.state.value,
                "address": self.settings.ip_address,
                "transport": self.settings.transport,
                "shutter": None,
                "rule": None,
                "slewing": None,
            }
            if connected:
                snapshot = self.io.read_snapshot()
                status["shutter"] = self.resolver.resolve(snapshot).name
                status["rule"] = self.resolver.last_rule
                status["slewing"] = snapshot.slewing
                status["sensors"] = {
                    "roof_open": snapshot.roof_open,
                    "roof_closed": snapshot.roof_closed,
                    "roof_opening": snapshot.roof_opening,
                    "roof_closing": snapshot.roof_closing,
                }
            else:
                status["last_shutter"] = self.resolver.state.name
        return status

    # ── Not Implemented by This Hardware ─────────────────────

    @property
    def altitude(self) -> float:
        raise UnsupportedCapabilityError("altitude")

    @property
    def azimuth(self) -> float:
        raise UnsupportedCapabilityError("azimuth")

    @property
    def at_home(self) -> bool:
        raise UnsupportedCapabilityError("at_home")

    @property
    def at_park(self) -> bool:
        raise UnsupportedCapabilityError("at_park")

    def find_home(self):
        raise UnsupportedCapabilityError("find_home")

    def park(self):
        raise UnsupportedCapabilityError("park")

    def set_park(self):
        raise UnsupportedCapabilityError("set_park")

    def slew_to_altitude(self, altitude: float):
        raise UnsupportedCapabilityError("slew_to_altitude")

    def slew_to_azimuth(self, azimuth: float):
        raise UnsupportedCapabilityError("slew_to_azimuth")

    def sync_to_azimuth(self, azimuth: float):
        raise UnsupportedCapabilityError("sync_to_azimuth")

    def action(self, action_name: str, action_parameters: str = ""):
        logger.debug("Action %s, parameters %s not implemented", action_name, action_parameters)
        raise UnsupportedCapabilityError(f"action {action_name}")

    def command_blind(self, command: str, raw: bool = False):
        self.connection.require_connected("command_blind")
        raise UnsupportedCapabilityError("command_blind")

    def command_bool(self, command: str, raw: bool = False) -> bool:
        self.connection.require_connected("command_bool")
        raise UnsupportedCapabilityError("command_bool")

    def command_string(self, command: str, raw: bool = False) -> str:
        self.connection.require_connected("command_string")
        raise UnsupportedCapabilityError("command_string")

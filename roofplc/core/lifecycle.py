"""
Connection Lifecycle
=====================
Owns the PLC session on behalf of the driver.

State Diagram:

    DISCONNECTED ──► CONNECTING ──► CONNECTED ──► DISCONNECTING ──► DISCONNECTED
                         │                             │
                         └──► DISCONNECTED (failure)   └──► CONNECTED (failure)

    CONNECTED ──► DISCONNECTED (link found dead)

A failed disconnect leaves the manager CONNECTED: if the link
could not be closed, its state is unknown and the worst case is
assumed. Nothing is retried automatically.
"""

from enum import Enum
import logging

from roofplc.config.settings import DriverSettings
from roofplc.core.errors import LinkError, NotConnectedError
from roofplc.drivers.link import PLCLink

logger = logging.getLogger(__name__)


class LinkState(Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    DISCONNECTING = "DISCONNECTING"


# Permitted transitions
_TRANSITIONS = {
    LinkState.DISCONNECTED:  [LinkState.CONNECTING],
    LinkState.CONNECTING:    [LinkState.CONNECTED, LinkState.DISCONNECTED],
    LinkState.CONNECTED:     [LinkState.DISCONNECTING, LinkState.DISCONNECTED],
    LinkState.DISCONNECTING: [LinkState.DISCONNECTED, LinkState.CONNECTED],
}


class ConnectionManager:
    """
    Idempotent connect/disconnect over a PLC link.

    `connected` never trusts a cached flag alone: while CONNECTED it
    asks the link whether the session is still live.
    """

    def __init__(self, link: PLCLink, settings: DriverSettings):
        self.link = link
        self.settings = settings
        self.state = LinkState.DISCONNECTED

    def _transition(self, target: LinkState):
        if target not in _TRANSITIONS.get(self.state, []):
            raise RuntimeError(f"Illegal link transition {self.state.value} -> {target.value}")
        logger.debug("Link state: %s -> %s", self.state.value, target.value)
        self.state = target

    @property
    def connected(self) -> bool:
        """True while CONNECTED and the link reports a live session."""
        if self.state != LinkState.CONNECTED:
            return False
        if not self.link.is_live():
            logger.warning("Link to %s lost", self.settings.ip_address)
            self._transition(LinkState.DISCONNECTED)
            return False
        return True

    def set_connected(self, value: bool):
        """Connect or disconnect; a request matching the current state is a no-op."""
        if value == self.connected:
            return
        if value:
            self._connect()
        else:
            self._disconnect()

    def _connect(self):
        sp = self.settings
        self._transition(LinkState.CONNECTING)
        logger.info("Connecting to %s", sp.ip_address)
        try:
            self.link.connect(sp.ip_address, sp.local_tsap, sp.remote_tsap)
        except BaseException:
            self._transition(LinkState.DISCONNECTED)
            logger.error("Connection to %s failed", sp.ip_address)
            raise
        self._transition(LinkState.CONNECTED)

    def _disconnect(self):
        self._transition(LinkState.DISCONNECTING)
        logger.info("Disconnecting from %s", self.settings.ip_address)
        try:
            self.link.disconnect()
        except LinkError:
            self._transition(LinkState.CONNECTED)
            logger.error("Disconnect from %s failed, assuming still connected",
                         self.settings.ip_address)
            raise
        self._transition(LinkState.DISCONNECTED)

    def require_connected(self, operation: str):
        """Raise NotConnectedError unless the session is up."""
        if not self.connected:
            raise NotConnectedError(operation)

"""
Siemens S7 Communication Link
==============================
Talks to the roof controller over ISO-on-TCP (S7 protocol) using
the snap7 client. The session is addressed by a local/remote TSAP
pair rather than a rack/slot pair, as required by small logic
modules configured for "server" connections.

snap7 derives the remote TSAP from (connection type, rack, slot)
when connecting, so the configured remote TSAP is split back into
those parts:

    remote TSAP = (connection type << 8) | (rack << 5) | slot
"""

import logging
from typing import Optional

import snap7

from roofplc.core.errors import LinkError
from roofplc.drivers.link import decode_bit, encode_bit

logger = logging.getLogger(__name__)

S7_PORT = 102


def split_remote_tsap(remote_tsap: int) -> tuple:
    """Return (connection_type, rack, slot) encoded by a remote TSAP."""
    connection_type = (remote_tsap >> 8) & 0xFF
    rack = (remote_tsap & 0xFF) >> 5
    slot = remote_tsap & 0x1F
    return connection_type, rack, slot


class S7Link:
    """
    PLC link over the S7 protocol.

    Wraps snap7's client for single-byte data block transfers.
    Every snap7 failure is re-raised as LinkError.
    """

    def __init__(self, client: Optional[object] = None, tcp_port: int = S7_PORT):
        self._client = client if client is not None else snap7.client.Client()
        self.tcp_port = tcp_port
        self.address: Optional[str] = None

    def connect(self, address: str, local_tsap: int, remote_tsap: int) -> None:
        """Establish the S7 session."""
        if self.is_live():
            logger.error(
                "S7 connect to %s requested while already connected to %s",
                address, self.address,
            )
            return

        connection_type, rack, slot = split_remote_tsap(remote_tsap)
        try:
            self._client.set_connection_params(address, local_tsap, remote_tsap)
            self._client.set_connection_type(connection_type)
            self._client.connect(address, rack, slot, self.tcp_port)
        except Exception as exc:
            raise LinkError(f"S7 connect to {address} failed: {exc}") from exc

        if not self.is_live():
            raise LinkError(f"S7 connect to {address} failed: session not established")
        self.address = address
        logger.info(
            "S7 connected to %s (local TSAP %04X, remote TSAP %04X)",
            address, local_tsap, remote_tsap,
        )

    def disconnect(self) -> None:
        """Close the S7 session."""
        try:
            self._client.disconnect()
        except Exception as exc:
            raise LinkError(f"S7 disconnect from {self.address} failed: {exc}") from exc
        logger.info("S7 disconnected from %s", self.address)

    def is_live(self) -> bool:
        """Ask the client whether the session is up."""
        try:
            return bool(self._client.get_connected())
        except Exception:
            logger.warning("S7 connection state query failed", exc_info=True)
            return False

    def read_bit(self, block: int, offset: int) -> bool:
        """Read one byte from a data block."""
        try:
            data = self._client.db_read(block, offset, 1)
        except Exception as exc:
            raise LinkError(f"S7 read DB{block}.{offset} failed: {exc}") from exc
        return decode_bit(data)

    def write_bit(self, block: int, offset: int, value: bool) -> None:
        """Write one byte to a data block."""
        try:
            self._client.db_write(block, offset, encode_bit(value))
        except Exception as exc:
            raise LinkError(f"S7 write DB{block}.{offset} failed: {exc}") from exc

"""
Modbus TCP Communication Link
==============================
Alternative transport for roof controllers that publish the same
data block over Modbus TCP (many small logic modules serve both
S7 and Modbus clients).

Addressing:
  - data block number -> Modbus unit id
  - byte offset       -> coil address (coil_base + offset)

TSAP identifiers have no meaning on Modbus and are ignored.
"""

import logging
from typing import Optional

from pymodbus.client import ModbusTcpClient
from pymodbus.exceptions import ModbusException

from roofplc.core.errors import LinkError

logger = logging.getLogger(__name__)


def split_address(address: str, default_port: int = 502) -> tuple:
    """Split "host[:port]" into (host, port)."""
    host, _, port = address.partition(":")
    if not port:
        return host, default_port
    try:
        number = int(port)
    except ValueError:
        raise LinkError(f"Invalid Modbus port in address {address!r}") from None
    if not 1 <= number <= 0xFFFF:
        raise LinkError(f"Modbus port out of range in address {address!r}")
    return host, number


class ModbusLink:
    """
    PLC link over Modbus TCP.

    Wraps pymodbus for single-coil reads and writes. Protocol
    errors and exception responses are raised as LinkError.
    """

    def __init__(
        self,
        port: int = 502,
        timeout: float = 1.0,
        coil_base: int = 0,
        client_factory=ModbusTcpClient,
    ):
        self.port = port
        self.timeout = timeout
        self.coil_base = coil_base
        self._client_factory = client_factory
        self._client = None
        self.address: Optional[str] = None

    def connect(self, address: str, local_tsap: int, remote_tsap: int) -> None:
        """Establish the Modbus TCP session."""
        if self.is_live():
            logger.error(
                "Modbus connect to %s requested while already connected to %s",
                address, self.address,
            )
            return

        if self._client is not None:
            logger.warning("Closing stale Modbus session to %s", self.address)
            self._client.close()
            self._client = None

        host, port = split_address(address, self.port)
        client = self._client_factory(host=host, port=port, timeout=self.timeout)
        try:
            ok = client.connect()
        except ModbusException as exc:
            raise LinkError(f"Modbus connect to {host}:{port} failed: {exc}") from exc
        if not ok:
            client.close()
            raise LinkError(f"Modbus connect to {host}:{port} failed")

        self._client = client
        self.address = f"{host}:{port}"
        logger.debug("Modbus ignores TSAPs (%04X/%04X)", local_tsap, remote_tsap)
        logger.info("Modbus TCP connected to %s", self.address)

    def disconnect(self) -> None:
        """Close the Modbus connection."""
        if self._client is None:
            return
        try:
            self._client.close()
        except ModbusException as exc:
            raise LinkError(f"Modbus disconnect from {self.address} failed: {exc}") from exc
        self._client = None
        logger.info("Modbus disconnected from %s", self.address)

    def is_live(self) -> bool:
        """Ask the client whether the socket is open."""
        return self._client is not None and bool(self._client.connected)

    def read_bit(self, block: int, offset: int) -> bool:
        """Read a single coil."""
        client = self._require_client("read", block, offset)
        try:
            result = client.read_coils(self.coil_base + offset, count=1, slave=block)
        except ModbusException as exc:
            raise LinkError(f"Modbus read {block}/{offset} failed: {exc}") from exc
        if result.isError():
            raise LinkError(f"Modbus read {block}/{offset} failed: {result}")
        return bool(result.bits[0])

    def write_bit(self, block: int, offset: int, value: bool) -> None:
        """Write a single coil."""
        client = self._require_client("write", block, offset)
        try:
            result = client.write_coil(self.coil_base + offset, bool(value), slave=block)
        except ModbusException as exc:
            raise LinkError(f"Modbus write {block}/{offset} failed: {exc}") from exc
        if result.isError():
            raise LinkError(f"Modbus write {block}/{offset} failed: {result}")

    def _require_client(self, op: str, block: int, offset: int):
        if self._client is None:
            raise LinkError(f"Modbus {op} {block}/{offset} failed: no session")
        return self._client

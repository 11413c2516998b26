"""
PLC Link Protocol
==================
The transport seam between the roof driver and the controller.

A link owns exactly one stateful session. Every call is a
blocking network round trip with no internal retry; failures are
raised as LinkError. Bits travel as single bytes: a non-zero byte
reads as True, and True is written as 1.
"""

from typing import Protocol


class PLCLink(Protocol):
    """Protocol for PLC transport implementations."""

    def connect(self, address: str, local_tsap: int, remote_tsap: int) -> None: ...
    def disconnect(self) -> None: ...
    def is_live(self) -> bool: ...
    def read_bit(self, block: int, offset: int) -> bool: ...
    def write_bit(self, block: int, offset: int, value: bool) -> None: ...


def encode_bit(value: bool) -> bytearray:
    """One-byte transfer buffer for a bit value."""
    return bytearray([1 if value else 0])


def decode_bit(data) -> bool:
    """Interpret a one-byte transfer buffer."""
    return len(data) > 0 and data[0] != 0

"""
Driver Exceptions
==================
Three failure categories reach the caller:

  - LinkError:                  the transport failed (connect/read/write)
  - NotConnectedError:          the driver is not connected
  - UnsupportedCapabilityError: the roof hardware has no such feature

Ambiguous sensor readings are never an error; the shutter state
resolver falls back to the last known state instead.
"""

from typing import Optional


class RoofDriverError(Exception):
    """Base class for all roof driver exceptions."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        msg = f"<{self.__class__.__name__}>"
        if self.message is not None:
            msg += f" {self.message}"
        return msg


class LinkError(RoofDriverError):
    pass


class NotConnectedError(RoofDriverError):
    def __init__(self, operation: str):
        super().__init__(f"{operation}: not connected to the roof controller")
        self.operation = operation


class UnsupportedCapabilityError(RoofDriverError, NotImplementedError):
    def __init__(self, feature: str):
        super().__init__(f"{feature} is not implemented by this driver")
        self.feature = feature

"""
Driver Settings for the Roll-Off Roof PLC
==========================================
Connection parameters and tunables for the roof driver. These are
edited from the console's setup commands and persisted to disk;
the driver receives them at construction.

Changes made while connected take effect on the next connect.
"""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Union

TRANSPORTS = ("s7", "modbus", "sim")

# Inclusive (min, max); None is unbounded
LIMITS = {
    "pulse_ms": (1, None),
    "data_block": (0, None),
    "modbus_port": (1, 0xFFFF),
}


def parse_tsap(value: Union[int, str]) -> int:
    """
    Parse a TSAP identifier.

    Accepts a plain integer, a decimal string ("20"), a hex string
    ("0x2000") or the dotted notation used by controller
    configuration tools ("20.00" = 0x2000).
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid TSAP: {value!r}")
    if isinstance(value, int):
        tsap = value
    else:
        text = str(value).strip()
        try:
            if "." in text:
                high, low = text.split(".", 1)
                tsap = (int(high, 16) << 8) | int(low, 16)
            else:
                tsap = int(text, 0)
        except ValueError:
            raise ValueError(f"Invalid TSAP: {value!r}") from None
    if not 0 <= tsap <= 0xFFFF:
        raise ValueError(f"TSAP out of range: {value!r}")
    return tsap


def format_tsap(tsap: int) -> str:
    """Render a TSAP in dotted notation (0x2000 -> "20.00")."""
    return f"{tsap >> 8:02X}.{tsap & 0xFF:02X}"


@dataclass
class DriverSettings:
    """Persisted configuration for the roof driver."""

    # ── PLC Connection ───────────────────────────────────────
    ip_address: str = "10.140.1.145"
    local_tsap: int = 20
    remote_tsap: int = 20
    transport: str = "s7"               # s7 | modbus | sim
    modbus_port: int = 502              # Modbus TCP only

    # ── Wiring / Behavior ────────────────────────────────────
    data_block: int = 1                 # Data block holding all roof signals
    pulse_ms: int = 100                 # Output pulse width
    strict_end_stops: bool = False      # No end-stop while stationary -> UNKNOWN

    # ── Diagnostics ──────────────────────────────────────────
    trace_enabled: bool = False         # Per-call DEBUG trace of the driver

    # ── Persistence ──────────────────────────────────────────
    _config_path: str = field(
        default="config/roof.json", repr=False
    )

    def __post_init__(self):
        self.local_tsap = parse_tsap(self.local_tsap)
        self.remote_tsap = parse_tsap(self.remote_tsap)
        if self.transport not in TRANSPORTS:
            raise ValueError(f"Unknown transport: {self.transport}")
        for key in LIMITS:
            _check_range(key, getattr(self, key))

    @property
    def pulse_sec(self) -> float:
        return self.pulse_ms / 1000.0

    def save(self, path: str = None):
        """Persist current settings to JSON."""
        filepath = Path(path or self._config_path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(self.as_dict(), indent=2))

    @classmethod
    def load(cls, path: str = None) -> "DriverSettings":
        """Load settings from JSON, falling back to defaults."""
        filepath = Path(path or "config/roof.json")
        settings = cls()
        if path:
            settings._config_path = str(filepath)
        if filepath.exists():
            data = json.loads(filepath.read_text())
            for key, value in data.items():
                if not settings.update(key, value):
                    raise ValueError(f"Invalid setting in {filepath}: {key}={value!r}")
        return settings

    def update(self, key: str, value) -> bool:
        """Update a single setting, returning True on success."""
        if not hasattr(self, key) or key.startswith("_"):
            return False
        try:
            if key in ("local_tsap", "remote_tsap"):
                coerced = parse_tsap(value)
            elif key == "transport":
                coerced = str(value).lower()
                if coerced not in TRANSPORTS:
                    return False
            elif isinstance(getattr(self, key), bool):
                coerced = _to_bool(value)
            else:
                coerced = type(getattr(self, key))(value)
                _check_range(key, coerced)
        except (ValueError, TypeError):
            return False
        setattr(self, key, coerced)
        return True

    def as_dict(self) -> dict:
        """Return all settings as a flat dictionary."""
        return {
            k: v for k, v in self.__dict__.items()
            if not k.startswith("_")
        }


def _check_range(key: str, value):
    if key not in LIMITS:
        return
    low, high = LIMITS[key]
    if value < low or (high is not None and value > high):
        raise ValueError(f"{key} out of range: {value!r}")


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Not a boolean: {value!r}")

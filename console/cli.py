"""
Roof Driver CLI Console
========================
Command-line interface for operator interaction with the roof.
Supports:

  - Connection control (connect, disconnect)
  - Roof commands (open, close, abort)
  - Status display (resolved shutter state, raw I/O)
  - Capability and identity queries
  - Settings viewing, modification and persistence
  - Simulator controls (dev mode)

Usage:
  python -m console.cli              # Interactive mode (simulator)
"""

import cmd
import logging

from roofplc.config.io_map import IOSignal
from roofplc.config.settings import DriverSettings, format_tsap
from roofplc.core.driver import RoofDriver
from roofplc.core.errors import RoofDriverError

logger = logging.getLogger(__name__)


class RoofConsole(cmd.Cmd):
    """Interactive CLI for the roof driver."""

    intro = (
        "\n"
        "╔══════════════════════════════════════════════════════╗\n"
        "║  Roll-Off Roof — Control Console                     ║\n"
        "║  Type 'help' for commands, 'quit' to exit            ║\n"
        "╚══════════════════════════════════════════════════════╝\n"
    )
    prompt = "ROOF> "

    def __init__(self, driver: RoofDriver, settings_path: str = None):
        super().__init__()
        self.drv = driver
        self.settings_path = settings_path

    def onecmd(self, line):
        try:
            return super().onecmd(line)
        except RoofDriverError as exc:
            print(f"Error: {exc}")
            return False

    # ── Connection Commands ──────────────────────────────────

    def do_connect(self, arg):
        """Connect to the roof controller: connect"""
        self.drv.connected = True
        print(f"Connected to {self.drv.settings.ip_address}")

    def do_disconnect(self, arg):
        """Disconnect from the roof controller: disconnect"""
        self.drv.connected = False
        print("Disconnected")

    # ── Roof Commands ────────────────────────────────────────

    def do_open(self, arg):
        """Open flap and roof: open"""
        self.drv.open_shutter()
        print("Open command issued")

    def do_close(self, arg):
        """Close flap and roof: close"""
        self.drv.close_shutter()
        print("Close command issued")

    def do_abort(self, arg):
        """Stop all roof motion: abort"""
        self.drv.abort_slew()
        print("Stop command issued")

    do_stop = do_abort

    # ── Status Commands ──────────────────────────────────────

    def do_status(self, arg):
        """Show roof status: status"""
        s = self.drv.get_status()
        print("\n── Roof Status ───────────────────────────────────")
        print(f"  Controller:     {s['address']} ({s['transport']})")
        print(f"  Link:           {s['link_state']}")
        if not s["connected"]:
            print(f"  Last Shutter:   {s['last_shutter']}")
            print()
            return
        print(f"  Shutter:        {s['shutter']}  (rule: {s['rule']})")
        print(f"  Slewing:        {'YES' if s['slewing'] else 'NO'}")
        print()
        print("── Sensors ──────────────────────────────────────")
        for name, value in s["sensors"].items():
            print(f"  {name:<15s} {'ON' if value else 'OFF'}")
        print()

    def do_io(self, arg):
        """Show all roof I/O signals: io [filter]"""
        self.drv.connection.require_connected("io")
        values = self.drv.io.read_all()
        filter_str = arg.strip().upper() if arg else ""

        print("\n── I/O Signals ──────────────────────────────────")
        for signal, value in values.items():
            if filter_str and filter_str not in signal.value:
                continue
            point = self.drv.io_map.get_point(signal)
            address = f"DB{point.block}.{point.offset}"
            print(f"  {signal.value:<15s} {point.direction.value} {address:<8s} "
                  f"{'ON' if value else 'OFF':>4s}")
        print()

    def do_caps(self, arg):
        """Show driver capabilities: caps"""
        print("\n── Capabilities ─────────────────────────────────")
        for key, value in self.drv.capabilities().items():
            print(f"  {key:<20s} {value}")
        print()

    def do_info(self, arg):
        """Show driver identity: info"""
        print(f"  {self.drv.name}: {self.drv.description}")
        print(f"  {self.drv.driver_info}, interface {self.drv.interface_version}")

    # ── Settings Commands ────────────────────────────────────

    def do_settings(self, arg):
        """Show all settings: settings [filter]"""
        sp_dict = self.drv.settings.as_dict()
        filter_str = arg.strip().lower() if arg else ""

        print("\n── Driver Settings ──────────────────────────────")
        for key in sorted(sp_dict.keys()):
            if filter_str and filter_str not in key.lower():
                continue
            val = sp_dict[key]
            if key.endswith("_tsap"):
                val = f"{val} ({format_tsap(val)})"
            print(f"  {key:<20s} = {val}")
        print()

    def do_set(self, arg):
        """Update a setting (applies on next connect): set <key> <value>"""
        parts = arg.strip().split(None, 1)
        if len(parts) != 2:
            print("Usage: set <key> <value>")
            return

        key, value = parts
        if not self.drv.settings.update(key, value):
            print(f"Invalid setting: {key}")
            return
        print(f"Setting {key} updated to {getattr(self.drv.settings, key)}")
        if key == "trace_enabled":
            self.drv.set_trace(self.drv.settings.trace_enabled)
        elif self.drv.connected:
            print("  (takes effect on next connect)")

    def do_trace(self, arg):
        """Toggle the diagnostic trace: trace [on|off]"""
        val = arg.strip().lower()
        if val not in ("on", "off"):
            print("Usage: trace [on|off]")
            return
        self.drv.set_trace(val == "on")
        print(f"Trace {val}")

    def do_save(self, arg):
        """Save settings to disk: save [path]"""
        path = arg.strip() or self.settings_path
        self.drv.settings.save(path)
        print("Settings saved")

    def do_load(self, arg):
        """Load settings from disk (applies on next connect): load [path]"""
        path = arg.strip() or self.settings_path
        loaded = DriverSettings.load(path)
        for key, value in loaded.as_dict().items():
            self.drv.settings.update(key, value)
        self.drv.set_trace(self.drv.settings.trace_enabled)
        print("Settings loaded")

    # ── Simulator Commands (dev mode) ────────────────────────

    def _simulator(self):
        if not hasattr(self.drv.link, "advance"):
            print("Not in simulation mode")
            return None
        return self.drv.link

    def do_sim_advance(self, arg):
        """[Sim] Advance roof travel: sim_advance <seconds>"""
        sim = self._simulator()
        if sim is None:
            return
        try:
            seconds = float(arg)
        except ValueError:
            print("Usage: sim_advance <seconds>")
            return
        sim.advance(seconds)
        print(f"Roof at {sim.position * 100:.0f}% open")

    def do_sim_force(self, arg):
        """[Sim] Force a feedback bit: sim_force <SIGNAL> [on|off]"""
        sim = self._simulator()
        if sim is None:
            return
        parts = arg.strip().upper().split()
        try:
            signal = IOSignal(parts[0])
        except (IndexError, ValueError):
            print("Usage: sim_force <SIGNAL> [on|off]")
            return
        value = len(parts) < 2 or parts[1] == "ON"
        sim.force_signal(signal, value)
        print(f"{signal.value} forced {'ON' if value else 'OFF'}")

    def do_sim_release(self, arg):
        """[Sim] Release forced bits: sim_release [SIGNAL]"""
        sim = self._simulator()
        if sim is None:
            return
        name = arg.strip().upper()
        if not name:
            sim.release_all()
            print("All signals released")
            return
        try:
            sim.release_signal(IOSignal(name))
        except ValueError:
            print(f"Unknown signal: {name}")
            return
        print(f"{name} released")

    def do_sim_drop(self, arg):
        """[Sim] Drop the link under the open session: sim_drop"""
        sim = self._simulator()
        if sim is None:
            return
        sim.drop_link()
        print("Link dropped")

    # ── Utility ──────────────────────────────────────────────

    def do_quit(self, arg):
        """Exit the console: quit"""
        print("Shutting down...")
        return True

    def do_exit(self, arg):
        """Exit the console: exit"""
        return self.do_quit(arg)

    do_EOF = do_quit

    def emptyline(self):
        pass

    def default(self, line):
        print(f"Unknown command: {line}. Type 'help' for available commands.")


def run_cli(driver: RoofDriver, settings_path: str = None):
    """Launch the interactive CLI console."""
    console = RoofConsole(driver, settings_path)
    try:
        console.cmdloop()
    except KeyboardInterrupt:
        print("\nInterrupted.")


def main():
    """Entry point for standalone CLI usage."""
    from roofplc.drivers.simulator import RoofSimulator

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Create driver with simulator backend
    settings = DriverSettings(transport="sim")
    driver = RoofDriver(RoofSimulator(), settings)

    try:
        run_cli(driver)
    finally:
        driver.dispose()


if __name__ == "__main__":
    main()

"""
Roof PLC Driver — Entry Point
==============================
Run the roof driver with an interactive console, or issue a
single command and exit.

Usage:
  python main.py                          # Console, settings from config/roof.json
  python main.py --transport sim          # Console against the simulator
  python main.py --ip 10.0.0.5 status     # One-shot status query
  python main.py open | close | abort     # One-shot roof command
  python main.py --transport modbus --ip HOST:PORT status
"""

import argparse
import logging
import sys

from roofplc.config.settings import DriverSettings, TRANSPORTS
from roofplc.core.driver import RoofDriver
from roofplc.core.errors import RoofDriverError

ONE_SHOT = ("status", "open", "close", "abort")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Roll-off roof PLC driver"
    )
    parser.add_argument(
        "command", nargs="?", choices=ONE_SHOT,
        help="Run one command and exit (default: interactive console)"
    )
    parser.add_argument(
        "--transport", choices=TRANSPORTS,
        help="PLC transport (overrides settings)"
    )
    parser.add_argument(
        "--ip",
        help="PLC address (overrides settings)"
    )
    parser.add_argument(
        "--local-tsap",
        help="Local TSAP, e.g. 20 or 20.00 (overrides settings)"
    )
    parser.add_argument(
        "--remote-tsap",
        help="Remote TSAP, e.g. 20 or 20.00 (overrides settings)"
    )
    parser.add_argument(
        "--settings",
        help="Path to settings JSON file"
    )
    parser.add_argument(
        "--connect", action="store_true",
        help="Connect before starting the console"
    )
    parser.add_argument(
        "--trace", action="store_true",
        help="Enable the diagnostic trace"
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--log-file",
        help="Log to file instead of stderr"
    )
    return parser.parse_args(argv)


def load_settings(args) -> DriverSettings:
    """Settings file plus command-line overrides."""
    settings = DriverSettings.load(args.settings)
    overrides = {
        "transport": args.transport,
        "ip_address": args.ip,
        "local_tsap": args.local_tsap,
        "remote_tsap": args.remote_tsap,
    }
    for key, value in overrides.items():
        if value is not None and not settings.update(key, value):
            raise ValueError(f"Invalid value for {key}: {value!r}")
    if args.trace:
        settings.trace_enabled = True
    return settings


def create_link(settings: DriverSettings):
    """Create the PLC link for the configured transport."""
    if settings.transport == "s7":
        from roofplc.drivers.s7_link import S7Link
        return S7Link()

    if settings.transport == "modbus":
        from roofplc.drivers.modbus_link import ModbusLink
        return ModbusLink(port=settings.modbus_port)

    from roofplc.config.io_map import IOMap
    from roofplc.drivers.simulator import RoofSimulator
    return RoofSimulator(io_map=IOMap(block=settings.data_block))


def run_command(driver: RoofDriver, command: str) -> int:
    """Connect, run one command, disconnect."""
    driver.connected = True
    try:
        if command == "status":
            status = driver.shutter_status
            print(f"{status.name} (slewing: {driver.slewing})")
        elif command == "open":
            driver.open_shutter()
            print("Open command issued")
        elif command == "close":
            driver.close_shutter()
            print("Close command issued")
        elif command == "abort":
            driver.abort_slew()
            print("Stop command issued")
    finally:
        driver.connected = False
    return 0


def main(argv=None):
    args = parse_args(argv)

    # Configure logging
    log_kwargs = {
        "level": getattr(logging, args.log_level),
        "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    }
    if args.log_file:
        log_kwargs["filename"] = args.log_file
    logging.basicConfig(**log_kwargs)

    try:
        settings = load_settings(args)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 2

    driver = RoofDriver(create_link(settings), settings)

    if args.command:
        try:
            return run_command(driver, args.command)
        except RoofDriverError as exc:
            print(f"Error: {exc}")
            return 1

    try:
        if args.connect:
            driver.connected = True
        from console.cli import run_cli
        run_cli(driver, args.settings)
    except RoofDriverError as exc:
        print(f"Error: {exc}")
        return 1
    finally:
        driver.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Tests for the operator console and the command-line entry point.
"""

import json

import pytest

import main
from console.cli import RoofConsole
from roofplc.config.io_map import IOSignal
from roofplc.drivers.modbus_link import ModbusLink
from roofplc.drivers.s7_link import S7Link
from roofplc.drivers.simulator import RoofSimulator


@pytest.fixture
def console(driver, tmp_path):
    return RoofConsole(driver, str(tmp_path / "roof.json"))


class TestConsole:

    def test_not_connected_error_is_printed(self, console, capsys):
        console.onecmd("open")
        assert "not connected" in capsys.readouterr().out

    def test_connect_and_status(self, console, capsys):
        console.onecmd("connect")
        console.onecmd("status")
        out = capsys.readouterr().out
        assert "Connected to 10.140.1.145" in out
        assert "CLOSED" in out
        assert "roof_closed" in out

    def test_status_when_disconnected(self, console, capsys):
        console.onecmd("status")
        assert "Last Shutter:   CLOSED" in capsys.readouterr().out

    def test_open_then_advance(self, console, driver, capsys):
        console.onecmd("connect")
        console.onecmd("open")
        console.onecmd("sim_advance 20")
        out = capsys.readouterr().out
        assert "Open command issued" in out
        assert "Roof at 100% open" in out

    def test_stop_alias(self, console, capsys):
        console.onecmd("connect")
        console.onecmd("stop")
        assert "Stop command issued" in capsys.readouterr().out

    def test_io_listing(self, console, capsys):
        console.onecmd("connect")
        console.onecmd("io roof_c")
        out = capsys.readouterr().out
        assert "ROOF_CLOSED" in out
        assert "DB1.5" in out
        assert "SLEWING" not in out

    def test_set_and_save(self, console, tmp_path, capsys):
        console.onecmd("set remote_tsap 03.01")
        console.onecmd("save")
        data = json.loads((tmp_path / "roof.json").read_text())
        assert data["remote_tsap"] == 0x0301
        assert "Setting remote_tsap updated" in capsys.readouterr().out

    def test_set_invalid(self, console, capsys):
        console.onecmd("set transport carrier")
        assert "Invalid setting: transport" in capsys.readouterr().out

    def test_load(self, console, driver, tmp_path, capsys):
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"pulse_ms": 200, "transport": "sim"}))
        console.onecmd(f"load {path}")
        assert driver.settings.pulse_ms == 200

    def test_sim_force_and_release(self, console, driver, capsys):
        console.onecmd("connect")
        console.onecmd("sim_force slewing on")
        assert driver.link.peek(IOSignal.SLEWING) is True
        assert driver.slewing is True
        console.onecmd("sim_release")
        assert "All signals released" in capsys.readouterr().out

    def test_sim_drop(self, console, driver, capsys):
        console.onecmd("connect")
        console.onecmd("sim_drop")
        console.onecmd("status")
        out = capsys.readouterr().out
        assert "Link dropped" in out
        assert "DISCONNECTED" in out

    def test_caps_and_info(self, console, capsys):
        console.onecmd("caps")
        console.onecmd("info")
        out = capsys.readouterr().out
        assert "can_set_shutter" in out
        assert "RoofPLC" in out

    def test_unknown_command(self, console, capsys):
        console.onecmd("fly")
        assert "Unknown command" in capsys.readouterr().out

    def test_quit(self, console):
        assert console.onecmd("quit") is True


class TestEntryPoint:

    def test_create_link(self):
        assert isinstance(main.create_link(main.DriverSettings(transport="sim")), RoofSimulator)
        assert isinstance(main.create_link(main.DriverSettings(transport="modbus")), ModbusLink)
        assert isinstance(main.create_link(main.DriverSettings(transport="s7")), S7Link)

    def test_overrides(self, tmp_path):
        args = main.parse_args([
            "--settings", str(tmp_path / "roof.json"),
            "--transport", "sim", "--ip", "10.0.0.9", "--remote-tsap", "03.01", "--trace",
        ])
        settings = main.load_settings(args)
        assert settings.transport == "sim"
        assert settings.ip_address == "10.0.0.9"
        assert settings.remote_tsap == 0x0301
        assert settings.trace_enabled is True

    def test_one_shot_status(self, tmp_path, capsys):
        code = main.main(["--settings", str(tmp_path / "roof.json"), "--transport", "sim", "status"])
        assert code == 0
        assert "CLOSED (slewing: False)" in capsys.readouterr().out

    def test_bad_tsap_is_configuration_error(self, tmp_path, capsys):
        code = main.main(["--settings", str(tmp_path / "roof.json"), "--local-tsap", "zz", "status"])
        assert code == 2
        assert "Configuration error" in capsys.readouterr().out

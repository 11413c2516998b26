"""
Tests for the Connection Lifecycle Manager.
"""

import pytest

from roofplc.core.errors import LinkError, NotConnectedError
from roofplc.core.lifecycle import ConnectionManager, LinkState


class FlakyLink:
    """Link whose connect/disconnect outcome is scripted."""

    def __init__(self):
        self.live = False
        self.fail_connect = False
        self.fail_disconnect = False
        self.connect_error = None
        self.calls = []

    def connect(self, address, local_tsap, remote_tsap):
        self.calls.append(("connect", address, local_tsap, remote_tsap))
        if self.fail_connect:
            raise LinkError("refused")
        if self.connect_error is not None:
            raise self.connect_error
        self.live = True

    def disconnect(self):
        self.calls.append(("disconnect",))
        if self.fail_disconnect:
            raise LinkError("stuck")
        self.live = False

    def is_live(self):
        self.calls.append(("is_live",))
        return self.live

    def read_bit(self, block, offset):
        raise AssertionError("no transfers expected")

    def write_bit(self, block, offset, value):
        raise AssertionError("no transfers expected")


@pytest.fixture
def link():
    return FlakyLink()


@pytest.fixture
def manager(link, settings):
    return ConnectionManager(link, settings)


class TestConnectionManager:

    def test_starts_disconnected(self, manager, link):
        assert manager.state == LinkState.DISCONNECTED
        assert manager.connected is False
        assert link.calls == []

    def test_connect_uses_settings(self, manager, link, settings):
        manager.set_connected(True)
        assert manager.state == LinkState.CONNECTED
        assert ("connect", settings.ip_address, settings.local_tsap, settings.remote_tsap) in link.calls

    def test_connect_when_connected_is_noop(self, manager, link):
        manager.set_connected(True)
        manager.set_connected(True)
        assert [c for c in link.calls if c[0] == "connect"] == [
            ("connect", "10.140.1.145", 20, 20)
        ]

    def test_connect_failure_stays_disconnected(self, manager, link):
        link.fail_connect = True
        with pytest.raises(LinkError):
            manager.set_connected(True)
        assert manager.state == LinkState.DISCONNECTED
        assert manager.connected is False

    def test_unexpected_connect_error_returns_to_disconnected(self, manager, link):
        link.connect_error = ValueError("bad port")
        with pytest.raises(ValueError):
            manager.set_connected(True)
        assert manager.state == LinkState.DISCONNECTED

        link.connect_error = None
        manager.set_connected(True)
        assert manager.state == LinkState.CONNECTED

    def test_no_automatic_retry(self, manager, link):
        link.fail_connect = True
        with pytest.raises(LinkError):
            manager.set_connected(True)
        assert len([c for c in link.calls if c[0] == "connect"]) == 1

    def test_disconnect(self, manager, link):
        manager.set_connected(True)
        manager.set_connected(False)
        assert manager.state == LinkState.DISCONNECTED
        assert link.live is False

    def test_disconnect_when_disconnected_is_noop(self, manager, link):
        manager.set_connected(False)
        assert link.calls == []

    def test_disconnect_failure_reports_connected(self, manager, link):
        manager.set_connected(True)
        link.fail_disconnect = True
        with pytest.raises(LinkError):
            manager.set_connected(False)
        assert manager.state == LinkState.CONNECTED
        assert manager.connected is True

    def test_liveness_is_requeried(self, manager, link):
        manager.set_connected(True)
        link.live = False
        assert manager.connected is False
        assert manager.state == LinkState.DISCONNECTED

    def test_reconnect_after_link_loss(self, manager, link):
        manager.set_connected(True)
        link.live = False
        manager.set_connected(True)
        assert manager.state == LinkState.CONNECTED
        assert len([c for c in link.calls if c[0] == "connect"]) == 2

    def test_require_connected(self, manager):
        with pytest.raises(NotConnectedError) as excinfo:
            manager.require_connected("open_shutter")
        assert excinfo.value.operation == "open_shutter"
        manager.set_connected(True)
        manager.require_connected("open_shutter")

    def test_require_connected_no_transport_calls_when_disconnected(self, manager, link):
        with pytest.raises(NotConnectedError):
            manager.require_connected("shutter_status")
        assert link.calls == []

    def test_illegal_transition(self, manager):
        with pytest.raises(RuntimeError):
            manager._transition(LinkState.DISCONNECTING)

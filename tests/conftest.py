"""Pytest fixtures shared by the network service tests."""

import pytest
from gi.repository import GLib

from config.config import config
from services.network import availability
from services.network.availability import AvailabilityMonitor
from services.network.event_router import EventRouter
from services.network.events import NetworkEvents
from services.network.state_cache import StateCache

from tests.fakes import (
    NM_DEVICE_TYPE_ETHERNET,
    NM_DEVICE_TYPE_WIFI,
    EventRecorder,
    FakeClient,
    FakeConnection,
    FakeDevice,
    FakeTimers,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    # the shared manager must not see the user's own config file
    monkeypatch.setattr(config, "path", str(tmp_path / "config.json"))
    config.load()
    return config


@pytest.fixture(autouse=True)
def timers(monkeypatch: pytest.MonkeyPatch) -> FakeTimers:
    fake = FakeTimers()
    monkeypatch.setattr(availability, "GLib", fake)
    return fake


@pytest.fixture
def wifi_device() -> FakeDevice:
    return FakeDevice("/org/freedesktop/NetworkManager/Devices/3", "wlan0", NM_DEVICE_TYPE_WIFI)


@pytest.fixture
def eth_device() -> FakeDevice:
    return FakeDevice("/org/freedesktop/NetworkManager/Devices/2", "eth0", NM_DEVICE_TYPE_ETHERNET)


@pytest.fixture
def home_wifi() -> FakeConnection:
    return FakeConnection("u1", "Home", "802-11-wireless")


@pytest.fixture
def wired() -> FakeConnection:
    return FakeConnection("u2", "Wired", "802-3-ethernet")


@pytest.fixture
def client(wifi_device, eth_device, home_wifi, wired) -> FakeClient:
    fake = FakeClient()
    fake.devices = [eth_device, wifi_device]
    fake.connections = [home_wifi, wired]
    return fake


@pytest.fixture
def client_factory(client):
    def factory(callback):
        callback(client, None)

    return factory


@pytest.fixture
def events() -> NetworkEvents:
    return NetworkEvents()


@pytest.fixture
def recorder(events) -> EventRecorder:
    return EventRecorder(events)


@pytest.fixture
def cache() -> StateCache:
    return StateCache()


@pytest.fixture
def router(cache, events) -> EventRouter:
    return EventRouter(cache, events)


@pytest.fixture
def monitor(cache, router, events, client_factory) -> AvailabilityMonitor:
    return AvailabilityMonitor(cache, router, events, client_factory=client_factory)


@pytest.fixture
def glib_error():
    def make(message: str = "operation failed") -> GLib.Error:
        return GLib.Error(message)

    return make

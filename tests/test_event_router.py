import pytest

from services.network.enums import (
    ActiveConnectionState,
    Connectivity,
    DeviceState,
    PropertyChange,
)
from services.network.models import BasicNetworkConnection, WiFiNetwork

from tests.fakes import (
    NM_DEVICE_TYPE_WIFI,
    FakeActiveConnection,
    FakeClient,
    FakeConnection,
    FakeDevice,
)


@pytest.fixture
def attached(router, client, recorder):
    router.attach(client)
    router.refresh()
    recorder.clear()
    return router


def paths(devices):
    return [dev.path for dev in devices]


class TestRefresh:
    def test_mirrors_remote_lists(self, router, client, cache, recorder):
        router.attach(client)
        router.refresh()

        assert paths(cache.devices()) == [dev.path for dev in client.devices]
        assert [c.uuid for c in cache.connections()] == ["u1", "u2"]
        assert recorder.count("state-changed") == 1

    def test_refresh_discards_stale_entries(self, attached, client, cache, wifi_device):
        client.devices.remove(wifi_device)
        attached.refresh()

        assert paths(cache.devices()) == [client.devices[0].path]
        assert wifi_device.handler_count("state-changed") == 0

    def test_repeated_refresh_does_not_duplicate_subscriptions(self, attached, client):
        active = FakeActiveConnection("/ac/1", client.connections[0])
        client.active_connections = [active]

        attached.refresh()
        attached.refresh()

        for device in client.devices:
            assert device.handler_count("state-changed") == 1
        assert active.handler_count("state-changed") == 1

    def test_refresh_without_client_is_a_no_op(self, router, cache, recorder):
        router.refresh()

        assert cache.devices() == []
        assert recorder.events == []


class TestDevices:
    def test_added_device_is_cached_and_watched(self, attached, client, cache, recorder):
        new = FakeDevice("/d/9", "wlan1", NM_DEVICE_TYPE_WIFI)
        client.add_device(new)

        assert cache.devices()[-1].path == "/d/9"
        assert recorder.names() == ["device-added"]
        assert recorder.of("device-added")[0][0].interface == "wlan1"
        assert new.handler_count("state-changed") == 1

    def test_duplicate_add_is_ignored(self, attached, client, cache, recorder, wifi_device):
        client.emit("device-added", wifi_device)

        assert paths(cache.devices()).count(wifi_device.path) == 1
        assert recorder.count("device-added") == 0

    def test_removed_device_is_dropped_without_reads(
        self, attached, client, cache, recorder, wifi_device
    ):
        client.remove_device(wifi_device)

        assert wifi_device.path not in paths(cache.devices())
        assert recorder.names() == ["device-removed"]
        assert recorder.of("device-removed")[0][0].interface == "wlan0"
        assert wifi_device.reads_after_removal == 0
        assert wifi_device.handler_count("state-changed") == 0

    def test_removing_unknown_device_emits_nothing(self, attached, client, recorder):
        ghost = FakeDevice("/d/77", "ghost0", NM_DEVICE_TYPE_WIFI)
        client.emit("device-removed", ghost)

        assert recorder.events == []

    def test_add_remove_sequence_matches_remote_set(self, attached, client, cache):
        extra = [FakeDevice(f"/d/{n}", f"usb{n}", 1) for n in range(10, 14)]
        for dev in extra:
            client.add_device(dev)
        client.remove_device(extra[1])
        client.remove_device(client.devices[0])
        client.add_device(FakeDevice("/d/20", "wwan0", 8))
        client.remove_device(extra[3])

        assert paths(cache.devices()) == [dev.path for dev in client.devices]

    def test_device_state_change(self, attached, client, cache, recorder, wifi_device):
        wifi_device.change_state(100, reason=0)

        assert recorder.names() == ["device-state-changed", "state-changed"]
        device, new, old, reason = recorder.of("device-state-changed")[0]
        assert device.interface == "wlan0"
        assert new is DeviceState.ACTIVATED
        assert old is DeviceState.DISCONNECTED
        assert reason == 0
        assert cache.find_device(wifi_device.path).state is DeviceState.ACTIVATED

    def test_state_change_of_removed_device_is_ignored(
        self, attached, client, recorder, wifi_device
    ):
        client.remove_device(wifi_device)
        recorder.clear()

        wifi_device.change_state(20)

        assert recorder.events == []


class TestConnections:
    def test_added_connection(self, attached, client, cache, recorder):
        vpn = FakeConnection("u9", "Office VPN", "vpn")
        client.add_connection(vpn)

        assert [c.uuid for c in cache.connections()] == ["u1", "u2", "u9"]
        assert recorder.names() == ["connection-added"]

    def test_removed_connection(self, attached, client, cache, recorder, wired):
        client.remove_connection(wired)

        assert [c.uuid for c in cache.connections()] == ["u1"]
        assert recorder.names() == ["connection-removed"]
        assert recorder.of("connection-removed")[0][0].id == "Wired"


class TestGlobalProperties:
    @pytest.mark.parametrize("kind", list(PropertyChange))
    def test_every_notification_emits_state_once(self, attached, client, recorder, kind):
        client.notify(kind.value)

        assert recorder.names() == ["state-changed"]

    def test_identical_state_is_not_suppressed(self, attached, client, recorder):
        client.notify("wireless-enabled")
        client.notify("wireless-enabled")

        first, second = recorder.of("state-changed")
        assert first[0] == second[0]

    def test_state_is_read_fresh(self, attached, client, cache, recorder):
        client.connectivity = 4
        client.wireless_enabled = False
        client.primary_connection = FakeActiveConnection("/ac/1", client.connections[1], state=2)
        client.notify("connectivity")

        state = recorder.of("state-changed")[0][0]
        assert state.connectivity is Connectivity.FULL
        assert not state.wireless_enabled
        assert state.primary_connection_id == "Wired"
        assert state.primary_connection_type == "802-3-ethernet"
        assert cache.current_state() is state

    def test_dispatch_function_handles_kinds_directly(self, attached, recorder):
        attached.handle_property_change(PropertyChange.WWAN_ENABLED)

        assert recorder.count("state-changed") == 1


class TestActiveConnections:
    def test_new_active_connections_are_watched_once(self, attached, client, recorder, home_wifi):
        active = FakeActiveConnection("/ac/1", home_wifi)

        client.set_active_connections([active])
        client.set_active_connections([active])

        assert active.handler_count("state-changed") == 1
        assert attached.is_watching_active("/ac/1")
        assert recorder.count("state-changed") == 2

    def test_activated_wifi_emits_activation(self, attached, client, recorder, home_wifi):
        active = FakeActiveConnection("/ac/1", home_wifi)
        client.set_active_connections([active])
        recorder.clear()

        active.change_state(2, reason=0)

        assert recorder.names() == [
            "connection-state-changed",
            "connection-activated",
            "state-changed",
        ]
        _, state, reason = recorder.of("connection-state-changed")[0]
        assert state is ActiveConnectionState.ACTIVATED
        assert recorder.of("connection-activated")[0][0] == WiFiNetwork(id="u1", name="Home")

    def test_deactivated_ethernet_emits_deactivation(self, attached, client, recorder, wired):
        active = FakeActiveConnection("/ac/2", wired, state=2)
        client.set_active_connections([active])
        recorder.clear()

        active.change_state(4, reason=2)

        assert recorder.of("connection-deactivated")[0][0] == BasicNetworkConnection(
            id="u2", name="Wired"
        )
        assert recorder.count("connection-activated") == 0
        # final state: the subscription is released
        assert not attached.is_watching_active("/ac/2")
        assert active.handler_count("state-changed") == 0

    @pytest.mark.parametrize("state", [0, 1, 3])
    def test_intermediate_states_only_emit_generic_event(
        self, attached, client, recorder, home_wifi, state
    ):
        active = FakeActiveConnection("/ac/1", home_wifi, state=0)
        client.set_active_connections([active])
        recorder.clear()

        active.change_state(state)

        assert recorder.names() == ["connection-state-changed", "state-changed"]

    @pytest.mark.parametrize("state", [2, 4])
    def test_unclassified_connections_only_emit_generic_event(
        self, attached, client, recorder, state
    ):
        vpn = FakeActiveConnection("/ac/5", FakeConnection("u5", "Office", "vpn"))
        client.set_active_connections([vpn])
        recorder.clear()

        vpn.change_state(state)

        assert recorder.names() == ["connection-state-changed", "state-changed"]

    def test_active_connection_without_profile(self, attached, client, recorder):
        orphan = FakeActiveConnection("/ac/6", None)
        client.set_active_connections([orphan])
        recorder.clear()

        orphan.change_state(2)

        assert recorder.names() == ["connection-state-changed", "state-changed"]

    def test_watch_is_deduplicated(self, attached, home_wifi):
        active = FakeActiveConnection("/ac/1", home_wifi)

        assert attached.watch_active_connection(active)
        assert not attached.watch_active_connection(active)
        assert active.handler_count("state-changed") == 1


class TestDetach:
    def test_detach_disconnects_everything(self, attached, client, recorder, home_wifi, wifi_device):
        active = FakeActiveConnection("/ac/1", home_wifi)
        client.set_active_connections([active])
        recorder.clear()

        attached.detach()

        assert client._handlers == {}
        assert wifi_device.handler_count("state-changed") == 0
        assert active.handler_count("state-changed") == 0
        assert attached.client is None

        client.notify("connectivity")
        client.add_device(FakeDevice("/d/50", "eth5", 1))
        assert recorder.events == []
        assert attached.recompute_state() is None

    def test_attach_to_a_new_client_detaches_the_old_one(self, attached, client):
        other = FakeClient()
        attached.attach(other)

        assert client._handlers == {}
        assert attached.client is other

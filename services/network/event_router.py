from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from services.network.classifier import classify_active
from services.network.enums import (
    ActiveConnectionState,
    DeviceState,
    PropertyChange,
)
from services.network.events import NetworkEvents
from services.network.models import ActiveConnection, Connection, Device, NetworkState
from services.network.state_cache import StateCache

HandlerRef = Tuple[Any, int]


class EventRouter:
    """
    Turns NM.Client notifications into cache updates and domain events.

    Every remote notification type has exactly one handler here. Global
    property notifications all funnel into handle_property_change().
    """

    def __init__(self, cache: StateCache, events: NetworkEvents):
        self.cache = cache
        self.events = events

        self._client = None
        self._client_handlers: List[HandlerRef] = []
        self._device_handlers: Dict[str, HandlerRef] = {}
        self._active_handlers: Dict[str, HandlerRef] = {}

    @property
    def client(self):
        return self._client

    def attach(self, client) -> None:
        if self._client is client:
            return
        if self._client is not None:
            self.detach()

        self._client = client
        self._client_handlers = [
            (client, client.connect("device-added", self._on_device_added)),
            (client, client.connect("device-removed", self._on_device_removed)),
            (client, client.connect("connection-added", self._on_connection_added)),
            (
                client,
                client.connect("connection-removed", self._on_connection_removed),
            ),
        ]
        for kind in PropertyChange:
            handler_id = client.connect(kind.signal_name, self._on_property_notify, kind)
            self._client_handlers.append((client, handler_id))

        logger.debug("Signal handlers setup complete")

    def detach(self) -> None:
        handlers = (
            self._client_handlers
            + list(self._device_handlers.values())
            + list(self._active_handlers.values())
        )
        for ref in handlers:
            self._disconnect(ref)

        self._client_handlers = []
        self._device_handlers = {}
        self._active_handlers = {}
        self._client = None

    def refresh(self) -> None:
        """Discard and repopulate devices and connections, then recompute"""
        if self._client is None:
            return

        devices = [Device.from_remote(dev) for dev in self._client.get_devices()]
        current = {device.path for device in devices}
        for path in [p for p in self._device_handlers if p not in current]:
            self._forget_device(path)
        for device in devices:
            self._watch_device(device)
        self.cache.replace_devices(devices)

        self.cache.replace_connections(
            Connection.from_remote(conn) for conn in self._client.get_connections()
        )
        self._sync_active_connections()

        logger.debug(
            f"Refreshed {len(self.cache.devices())} devices, "
            f"{len(self.cache.connections())} connections"
        )
        self.recompute_state()

    def recompute_state(self) -> Optional[NetworkState]:
        if self._client is None:
            return None

        old_connectivity = self.cache.current_state().connectivity
        state = NetworkState.from_client(self._client)
        self.cache.set_state(state)

        if state.connectivity != old_connectivity:
            logger.debug(
                f"Connectivity changed: {old_connectivity.name} -> {state.connectivity.name}"
            )

        self.events.state_changed(state)
        return state

    def handle_property_change(self, kind: PropertyChange) -> None:
        if kind is PropertyChange.ACTIVE_CONNECTIONS:
            self._sync_active_connections()
        else:
            logger.debug(f"Property changed: {kind.value}")
        self.recompute_state()

    def watch_active_connection(self, active) -> bool:
        """Subscribe to an active connection's state, once per object path"""
        path = active.get_path()
        if self.is_watching_active(path):
            return False

        handler_id = active.connect("state-changed", self._on_active_state_changed)
        self._active_handlers[path] = (active, handler_id)
        return True

    def is_watching_active(self, path: str) -> bool:
        return path in self._active_handlers

    def _watch_device(self, device: Device) -> bool:
        if device.path in self._device_handlers:
            return False

        handler_id = device.handle.connect(
            "state-changed", self._on_device_state_changed
        )
        self._device_handlers[device.path] = (device.handle, handler_id)
        return True

    def _sync_active_connections(self) -> None:
        # entries are dropped on DEACTIVATED, not when the set shrinks: the
        # final state-change can arrive after the object left the set
        for active in self._client.get_active_connections():
            self.watch_active_connection(active)

    def _forget_device(self, path: str) -> None:
        self._disconnect(self._device_handlers.pop(path, None))

    def _forget_active_connection(self, path: str) -> None:
        self._disconnect(self._active_handlers.pop(path, None))

    @staticmethod
    def _disconnect(ref: Optional[HandlerRef]) -> None:
        if ref is None:
            return
        obj, handler_id = ref
        if obj.handler_is_connected(handler_id):
            obj.disconnect(handler_id)

    # handlers

    def _on_property_notify(self, client, pspec, kind: PropertyChange) -> None:
        self.handle_property_change(kind)

    def _on_device_added(self, client, remote_device) -> None:
        if remote_device is None:
            return

        device = Device.from_remote(remote_device)
        logger.debug(f"Device added: {device.interface} ({device.kind.name})")

        if not self.cache.add_device(device):
            return
        self._watch_device(device)
        self.events.device_added(device)

    def _on_device_removed(self, client, remote_device) -> None:
        # the object is gone on the bus, match by identity and read nothing
        device = self.cache.find_device_by_handle(remote_device)
        if device is None:
            logger.debug("Ignoring removal of an uncached device")
            return

        logger.debug(f"Device removed: {device.interface}")
        self.cache.remove_device(device.path)
        self._forget_device(device.path)
        self.events.device_removed(device)

    def _on_connection_added(self, client, remote_connection) -> None:
        if remote_connection is None:
            return

        connection = Connection.from_remote(remote_connection)
        logger.debug(f"Connection added: {connection.id}")
        if self.cache.add_connection(connection):
            self.events.connection_added(connection)

    def _on_connection_removed(self, client, remote_connection) -> None:
        connection = self.cache.find_connection_by_handle(remote_connection)
        if connection is None:
            logger.debug("Ignoring removal of an uncached connection")
            return

        logger.debug(f"Connection removed: {connection.id}")
        self.cache.remove_connection(connection)
        self.events.connection_removed(connection)

    def _on_device_state_changed(
        self, remote_device, new_state: int, old_state: int, reason: int
    ) -> None:
        device = self.cache.find_device_by_handle(remote_device)
        if device is None:
            logger.debug("State change for an uncached device, ignoring")
            return

        new = DeviceState.from_value(new_state)
        old = DeviceState.from_value(old_state)
        logger.debug(
            f"Device {device.interface} state changed: {old.name} -> {new.name} "
            f"(reason: {reason})"
        )

        device = self.cache.update_device_state(device.path, new)
        self.events.device_state_changed(device, new, old, int(reason))
        self.recompute_state()

    def _on_active_state_changed(self, remote_active, state: int, reason: int) -> None:
        if self._client is None:
            return

        active = ActiveConnection.from_remote(remote_active, state)
        logger.debug(
            f"Active connection {active.id or 'unknown'} state changed: "
            f"{active.state.name} (reason: {reason})"
        )

        self.events.connection_state_changed(active, active.state, int(reason))

        if active.state is ActiveConnectionState.ACTIVATED:
            if variant := classify_active(active):
                self.events.connection_activated(variant)
        elif active.state is ActiveConnectionState.DEACTIVATED:
            if variant := classify_active(active):
                self.events.connection_deactivated(variant)
            self._forget_active_connection(active.path)

        self.recompute_state()

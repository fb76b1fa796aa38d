from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from services.network.enums import DeviceKind, DeviceState
from services.network.models import Connection, Device, NetworkState


class StateCache:
    """
    Last known view of NetworkManager.

    Lists are stored as tuples and swapped wholesale on every write, so
    any reader holds a consistent snapshot. Only the event router and the
    availability monitor write here.
    """

    def __init__(self):
        self._state = NetworkState()
        self._devices: Tuple[Device, ...] = ()
        self._connections: Tuple[Connection, ...] = ()

    # reads

    def current_state(self) -> NetworkState:
        return self._state

    def devices(self) -> List[Device]:
        return list(self._devices)

    def connections(self) -> List[Connection]:
        return list(self._connections)

    def devices_by_type(self, kind: DeviceKind) -> List[Device]:
        return [dev for dev in self._devices if dev.kind == kind]

    def connections_by_type(self, connection_type: str) -> List[Connection]:
        return [
            conn
            for conn in self._connections
            if conn.connection_type == connection_type
        ]

    def first_wifi_device(self) -> Optional[Device]:
        return next(iter(self.devices_by_type(DeviceKind.WIFI)), None)

    def first_ethernet_device(self) -> Optional[Device]:
        return next(iter(self.devices_by_type(DeviceKind.ETHERNET)), None)

    def find_device(self, path: str) -> Optional[Device]:
        for dev in self._devices:
            if dev.path == path:
                return dev
        return None

    def find_device_by_handle(self, handle) -> Optional[Device]:
        for dev in self._devices:
            if dev.handle is handle:
                return dev
        return None

    def find_connection_by_handle(self, handle) -> Optional[Connection]:
        for conn in self._connections:
            if conn.handle is handle:
                return conn
        return None

    # writes

    def set_state(self, state: NetworkState) -> None:
        self._state = state

    def replace_devices(self, devices: Iterable[Device]) -> None:
        self._devices = tuple(self._unique(devices, key=lambda d: d.path))

    def replace_connections(self, connections: Iterable[Connection]) -> None:
        self._connections = tuple(
            self._unique(connections, key=self._connection_key)
        )

    def add_device(self, device: Device) -> bool:
        if self.find_device(device.path) is not None:
            logger.debug(f"Device {device.path} already cached")
            return False
        self._devices = self._devices + (device,)
        return True

    def remove_device(self, path: str) -> Optional[Device]:
        removed = self.find_device(path)
        if removed is not None:
            self._devices = tuple(dev for dev in self._devices if dev.path != path)
        return removed

    def update_device_state(self, path: str, state: DeviceState) -> Optional[Device]:
        updated = None
        devices = []
        for dev in self._devices:
            if dev.path == path:
                dev = updated = replace(dev, state=state)
            devices.append(dev)
        self._devices = tuple(devices)
        return updated

    def add_connection(self, connection: Connection) -> bool:
        key = self._connection_key(connection)
        if any(self._connection_key(c) == key for c in self._connections):
            logger.debug(f"Connection {connection.id} already cached")
            return False
        self._connections = self._connections + (connection,)
        return True

    def remove_connection(self, connection: Connection) -> Optional[Connection]:
        key = self._connection_key(connection)
        removed = None
        kept = []
        for conn in self._connections:
            if self._connection_key(conn) == key:
                removed = conn
            else:
                kept.append(conn)
        self._connections = tuple(kept)
        return removed

    def reset(self) -> None:
        self._devices = ()
        self._connections = ()
        self._state = NetworkState()

    @staticmethod
    def _connection_key(connection: Connection) -> str:
        return connection.path or connection.uuid

    @staticmethod
    def _unique(items, key):
        seen = set()
        for item in items:
            k = key(item)
            if k in seen:
                continue
            seen.add(k)
            yield item

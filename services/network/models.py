from dataclasses import dataclass, field
from typing import Any, Optional

from services.network.enums import (
    ActiveConnectionState,
    Connectivity,
    ConnectionType,
    DeviceKind,
    DeviceState,
)


CONNECTIVITY_DESCRIPTIONS = {
    Connectivity.FULL: "Full connectivity",
    Connectivity.LIMITED: "Limited connectivity",
    Connectivity.PORTAL: "Captive portal detected",
    Connectivity.NONE: "No connectivity",
}


def describe_connectivity(connectivity) -> str:
    """Human readable text for a connectivity value (raw ints accepted)"""
    try:
        key = Connectivity(int(connectivity))
    except (TypeError, ValueError):
        key = Connectivity.UNKNOWN
    return CONNECTIVITY_DESCRIPTIONS.get(key, "Connectivity unknown")


@dataclass(frozen=True)
class NetworkState:
    """
    Snapshot of the global NetworkManager state.

    Instances are immutable; the cache swaps in a new one on every
    recompute so a reader never sees a half-updated state. The hardware
    flags only mean something when the matching radio exists.
    """

    connectivity: Connectivity = Connectivity.UNKNOWN
    networking_enabled: bool = False
    wireless_enabled: bool = False
    wireless_hardware_enabled: bool = False
    wwan_enabled: bool = False
    wwan_hardware_enabled: bool = False
    primary_connection_id: Optional[str] = None
    primary_connection_type: Optional[str] = None

    def __post_init__(self):
        if (self.primary_connection_id is None) != (
            self.primary_connection_type is None
        ):
            raise ValueError(
                "primary_connection_id and primary_connection_type must be set together"
            )

    @property
    def has_primary_connection(self) -> bool:
        return self.primary_connection_id is not None

    @classmethod
    def from_client(cls, client) -> "NetworkState":
        """Read every global property fresh from an NM.Client"""
        primary = client.get_primary_connection()
        primary_id = primary_type = None
        if primary is not None:
            primary_id = primary.get_id() or ""
            primary_type = primary.get_connection_type() or ""

        return cls(
            connectivity=Connectivity.from_value(client.get_connectivity()),
            networking_enabled=bool(client.networking_get_enabled()),
            wireless_enabled=bool(client.wireless_get_enabled()),
            wireless_hardware_enabled=bool(client.wireless_hardware_get_enabled()),
            wwan_enabled=bool(client.wwan_get_enabled()),
            wwan_hardware_enabled=bool(client.wwan_hardware_get_enabled()),
            primary_connection_id=primary_id,
            primary_connection_type=primary_type,
        )


@dataclass(frozen=True)
class Device:
    path: str
    interface: str
    device_type: int
    kind: DeviceKind
    state: DeviceState = DeviceState.UNKNOWN
    # non-owning reference to the NM.Device
    handle: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_remote(cls, device) -> "Device":
        device_type = int(device.get_device_type())
        return cls(
            path=device.get_path(),
            interface=device.get_iface() or "",
            device_type=device_type,
            kind=DeviceKind.from_device_type(device_type),
            state=DeviceState.from_value(device.get_state()),
            handle=device,
        )


@dataclass(frozen=True)
class Connection:
    """A stored connection profile, active or not"""

    uuid: str
    id: str
    connection_type: str
    path: Optional[str] = None
    handle: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_remote(cls, connection) -> "Connection":
        return cls(
            uuid=connection.get_uuid() or "",
            id=connection.get_id() or "",
            connection_type=connection.get_connection_type() or "",
            path=connection.get_path(),
            handle=connection,
        )


@dataclass(frozen=True)
class ActiveConnection:
    path: str
    id: str
    uuid: str
    connection_type: str
    state: ActiveConnectionState = ActiveConnectionState.UNKNOWN
    connection: Optional[Connection] = None
    handle: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_remote(cls, active, state=None) -> "ActiveConnection":
        if state is None:
            state = active.get_state()
        remote = active.get_connection()
        return cls(
            path=active.get_path(),
            id=active.get_id() or "",
            uuid=active.get_uuid() or "",
            connection_type=active.get_connection_type() or "",
            state=ActiveConnectionState.from_value(state),
            connection=Connection.from_remote(remote) if remote is not None else None,
            handle=active,
        )


@dataclass(frozen=True)
class ConnectionVariant:
    id: str
    name: str
    connection_type: ConnectionType


@dataclass(frozen=True)
class WiFiNetwork(ConnectionVariant):
    connection_type: ConnectionType = ConnectionType.WIFI


@dataclass(frozen=True)
class BasicNetworkConnection(ConnectionVariant):
    connection_type: ConnectionType = ConnectionType.ETHERNET

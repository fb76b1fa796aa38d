from enum import Enum, IntEnum, auto


class _LenientIntEnum(IntEnum):
    """IntEnum that maps raw values it does not know onto UNKNOWN"""

    @classmethod
    def from_value(cls, value) -> "_LenientIntEnum":
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            # UNKNOWN sits at 0 in every subclass
            return cls(0)


# values below mirror libnm so raw ints coming off D-Bus convert directly


class Connectivity(_LenientIntEnum):
    UNKNOWN = 0
    NONE = 1
    PORTAL = 2
    LIMITED = 3
    FULL = 4


class DeviceState(_LenientIntEnum):
    UNKNOWN = 0
    UNMANAGED = 10
    UNAVAILABLE = 20
    DISCONNECTED = 30
    PREPARE = 40
    CONFIG = 50
    NEED_AUTH = 60
    IP_CONFIG = 70
    IP_CHECK = 80
    SECONDARIES = 90
    ACTIVATED = 100
    DEACTIVATING = 110
    FAILED = 120


class ActiveConnectionState(_LenientIntEnum):
    UNKNOWN = 0
    ACTIVATING = 1
    ACTIVATED = 2
    DEACTIVATING = 3
    DEACTIVATED = 4
    # libnm never reports this one
    FAILED = 5


class DeviceKind(Enum):
    WIFI = auto()
    ETHERNET = auto()
    OTHER = auto()

    @classmethod
    def from_device_type(cls, device_type) -> "DeviceKind":
        # NM.DeviceType.ETHERNET == 1, NM.DeviceType.WIFI == 2
        try:
            raw = int(device_type)
        except (TypeError, ValueError):
            return cls.OTHER
        return {1: cls.ETHERNET, 2: cls.WIFI}.get(raw, cls.OTHER)


class ConnectionType(Enum):
    WIFI = auto()
    ETHERNET = auto()


class PropertyChange(Enum):
    """Global client properties that trigger a state recompute"""

    CONNECTIVITY = "connectivity"
    NETWORKING_ENABLED = "networking-enabled"
    WIRELESS_ENABLED = "wireless-enabled"
    WIRELESS_HARDWARE_ENABLED = "wireless-hardware-enabled"
    WWAN_ENABLED = "wwan-enabled"
    WWAN_HARDWARE_ENABLED = "wwan-hardware-enabled"
    PRIMARY_CONNECTION = "primary-connection"
    ACTIVE_CONNECTIONS = "active-connections"

    @property
    def signal_name(self) -> str:
        return f"notify::{self.value}"


class Availability(Enum):
    AVAILABLE = auto()
    UNAVAILABLE = auto()

from fabric.core.service import Service, Signal


class NetworkEvents(Service):
    """Event stream emitted by the network client"""

    @Signal
    def availability_changed(self, available: bool) -> None:
        """Emitted when NetworkManager appears or vanishes"""
        ...

    @Signal
    def state_changed(self, state: object) -> None:
        """Emitted with a fresh NetworkState after every recompute"""
        ...

    @Signal
    def device_added(self, device: object) -> None: ...

    @Signal
    def device_removed(self, device: object) -> None: ...

    @Signal
    def connection_added(self, connection: object) -> None: ...

    @Signal
    def connection_removed(self, connection: object) -> None: ...

    @Signal
    def device_state_changed(
        self, device: object, new_state: object, old_state: object, reason: int
    ) -> None: ...

    @Signal
    def connection_state_changed(
        self, active_connection: object, state: object, reason: int
    ) -> None: ...

    @Signal
    def connection_activated(self, variant: object) -> None:
        """Emitted when a Wi-Fi or Ethernet connection reaches ACTIVATED"""
        ...

    @Signal
    def connection_deactivated(self, variant: object) -> None:
        """Emitted when a Wi-Fi or Ethernet connection reaches DEACTIVATED"""
        ...

from typing import Callable, List, Optional

from fabric.core.service import Property
from loguru import logger

from config.config import config
from services.network.activator import ConnectionActivator, PendingOperation
from services.network.availability import AvailabilityMonitor
from services.network.enums import DeviceKind
from services.network.event_router import EventRouter
from services.network.events import NetworkEvents
from services.network.models import (
    ActiveConnection,
    Connection,
    Device,
    NetworkState,
    describe_connectivity,
)
from services.network.state_cache import StateCache


class NetworkService(NetworkEvents):
    """
    Mirror of NetworkManager's state with async control operations.

    Connect to the signals declared on NetworkEvents, then call
    initialize(). Everything runs on the GLib main loop.
    """

    @Property(bool, default_value=False, flags="readable")
    def available(self) -> bool:
        return self.monitor.is_available

    def __init__(self, client_factory: Optional[Callable] = None, **kwargs):
        super().__init__(**kwargs)

        availability = config.network.availability

        self.cache = StateCache()
        self.router = EventRouter(self.cache, self)
        self.monitor = AvailabilityMonitor(
            self.cache,
            self.router,
            self,
            client_factory=client_factory,
            auto_reconnect=availability.auto_reconnect,
            reconnect_interval=availability.reconnect_interval,
            max_reconnect_attempts=availability.max_reconnect_attempts,
        )
        self.activator = ConnectionActivator(self.monitor, self.router)

        self.connect("availability-changed", lambda *_: self.notify("available"))

    # lifecycle

    def initialize(self, callback: Optional[Callable[[bool], None]] = None) -> None:
        def _on_ready(success: bool) -> None:
            if success and config.network.connectivity.check_on_startup:
                self.check_connectivity(callback=self._log_connectivity_result)
            if callback is not None:
                callback(success)

        self.monitor.initialize(_on_ready)

    def reconnect(self, callback: Optional[Callable[[bool], None]] = None) -> None:
        self.monitor.reconnect(callback)

    def handle_unavailable(self) -> None:
        self.monitor.handle_unavailable()

    @property
    def is_available(self) -> bool:
        return self.monitor.is_available

    # reads

    @property
    def current_state(self) -> NetworkState:
        return self.cache.current_state()

    def devices(self) -> List[Device]:
        return self.cache.devices()

    def connections(self) -> List[Connection]:
        return self.cache.connections()

    def devices_by_type(self, kind: DeviceKind) -> List[Device]:
        return self.cache.devices_by_type(kind)

    def connections_by_type(self, connection_type: str) -> List[Connection]:
        return self.cache.connections_by_type(connection_type)

    def get_wifi_device(self) -> Optional[Device]:
        return self.cache.first_wifi_device()

    def get_ethernet_device(self) -> Optional[Device]:
        return self.cache.first_ethernet_device()

    def get_active_connections(self) -> List[ActiveConnection]:
        client = self.monitor.client
        if client is None:
            return []
        return [ActiveConnection.from_remote(ac) for ac in client.get_active_connections()]

    def get_connectivity_description(self) -> str:
        return describe_connectivity(self.current_state.connectivity)

    # operations

    def activate_connection(
        self,
        connection: Connection,
        device: Optional[Device] = None,
        callback: Optional[Callable[[PendingOperation], None]] = None,
    ) -> PendingOperation:
        return self.activator.activate(connection, device, callback)

    def deactivate_connection(
        self,
        active_connection: ActiveConnection,
        callback: Optional[Callable[[PendingOperation], None]] = None,
    ) -> PendingOperation:
        return self.activator.deactivate(active_connection, callback)

    def check_connectivity(
        self, callback: Optional[Callable[[PendingOperation], None]] = None
    ) -> PendingOperation:
        return self.activator.check_connectivity(callback)

    def set_wireless_enabled(self, enabled: bool) -> bool:
        return self.activator.set_wireless_enabled(enabled)

    def set_wwan_enabled(self, enabled: bool) -> bool:
        return self.activator.set_wwan_enabled(enabled)

    def _log_connectivity_result(self, operation: PendingOperation) -> None:
        if operation.error is not None:
            # already logged by the activator
            return
        logger.info(f"Startup connectivity: {describe_connectivity(operation.finish())}")

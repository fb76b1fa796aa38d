from typing import Callable, List, Optional

from gi.repository import GLib
from loguru import logger

from services.network.enums import Availability
from services.network.errors import InitializationFailed
from services.network.event_router import EventRouter
from services.network.events import NetworkEvents
from services.network.nm_client import new_client_async
from services.network.state_cache import StateCache

ReadyCallback = Callable[[bool], None]


class AvailabilityMonitor:
    """
    Owns the NM.Client and tracks whether NetworkManager is reachable.

    UNAVAILABLE until initialize() succeeds. Losing the service drops the
    client, clears the cache and, with auto_reconnect, retries every
    reconnect_interval seconds.
    """

    def __init__(
        self,
        cache: StateCache,
        router: EventRouter,
        events: NetworkEvents,
        client_factory: Optional[Callable] = None,
        auto_reconnect: bool = False,
        reconnect_interval: int = 5,
        max_reconnect_attempts: int = 0,
    ):
        self.cache = cache
        self.router = router
        self.events = events
        self.auto_reconnect = auto_reconnect
        self.reconnect_interval = reconnect_interval
        self.max_reconnect_attempts = max_reconnect_attempts
        self.last_error: Optional[InitializationFailed] = None

        self._client_factory = client_factory or new_client_async
        self._client = None
        self._state = Availability.UNAVAILABLE
        self._pending: Optional[List[ReadyCallback]] = None
        self._nm_running_handler: Optional[int] = None
        self._reconnect_source_id: Optional[int] = None
        self._reconnect_attempts = 0

    @property
    def client(self):
        return self._client

    @property
    def state(self) -> Availability:
        return self._state

    @property
    def is_available(self) -> bool:
        return self._state is Availability.AVAILABLE

    @property
    def initializing(self) -> bool:
        return self._pending is not None

    def initialize(self, callback: Optional[ReadyCallback] = None) -> None:
        if self.is_available:
            # already attached, a fresh refresh is all there is to do
            self.router.refresh()
            if callback is not None:
                callback(True)
            return

        if self.initializing:
            if callback is not None:
                self._pending.append(callback)
            return

        logger.debug("Initializing NetworkManager client...")
        self._pending = [callback] if callback is not None else []
        try:
            self._client_factory(self._on_client_ready)
        except Exception as e:
            logger.error(f"NetworkManager client factory raised: {e}")
            self._on_client_ready(None, InitializationFailed(cause=e))

    def reconnect(self, callback: Optional[ReadyCallback] = None) -> None:
        logger.debug("Attempting to reconnect to NetworkManager...")
        self.initialize(callback)

    def handle_unavailable(self) -> None:
        logger.warning("NetworkManager became unavailable")

        self._release_client()
        self.cache.reset()

        self.events.availability_changed(False)
        self.events.state_changed(self.cache.current_state())
        self._schedule_reconnect()

    def _on_client_ready(self, client, error: Optional[InitializationFailed]) -> None:
        callbacks, self._pending = self._pending or [], None

        if error is None and client is None:
            error = InitializationFailed("Failed to create NM.Client")
        if error is None and not client.get_nm_running():
            error = InitializationFailed("NetworkManager is not running")

        if error is not None:
            self.last_error = error
            logger.warning(f"{error}")
            self.events.availability_changed(False)
            self._schedule_reconnect()
        else:
            self._attach(client)

        for callback in callbacks:
            callback(error is None)

    def _attach(self, client) -> None:
        self._cancel_reconnect()
        self._reconnect_attempts = 0
        self.last_error = None

        self._client = client
        self._state = Availability.AVAILABLE

        self.router.attach(client)
        self.router.refresh()
        self._nm_running_handler = client.connect(
            "notify::nm-running", self._on_nm_running_changed
        )

        logger.info("NetworkManager client initialized successfully")
        self.events.availability_changed(True)

    def _release_client(self) -> None:
        client, self._client = self._client, None
        self._state = Availability.UNAVAILABLE

        if client is not None and self._nm_running_handler is not None:
            if client.handler_is_connected(self._nm_running_handler):
                client.disconnect(self._nm_running_handler)
        self._nm_running_handler = None
        self.router.detach()

    def _on_nm_running_changed(self, client, pspec) -> None:
        if client is not self._client:
            return
        if not client.get_nm_running():
            self.handle_unavailable()

    def _schedule_reconnect(self) -> None:
        if not self.auto_reconnect or self._reconnect_source_id is not None:
            return

        if (
            self.max_reconnect_attempts
            and self._reconnect_attempts >= self.max_reconnect_attempts
        ):
            logger.warning(
                f"Giving up on NetworkManager after {self._reconnect_attempts} attempts"
            )
            return

        logger.debug(f"Reconnecting in {self.reconnect_interval}s")
        self._reconnect_source_id = GLib.timeout_add_seconds(
            self.reconnect_interval, self._on_reconnect_timeout
        )

    def _on_reconnect_timeout(self) -> bool:
        self._reconnect_source_id = None
        self._reconnect_attempts += 1
        self.reconnect()
        return False

    def _cancel_reconnect(self) -> None:
        if self._reconnect_source_id is not None:
            GLib.source_remove(self._reconnect_source_id)
            self._reconnect_source_id = None

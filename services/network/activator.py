from typing import Any, Callable, Dict, List, Optional

from gi.repository import GLib
from loguru import logger

from services.network.enums import Connectivity
from services.network.errors import (
    ActivationFailed,
    ConnectivityCheckFailed,
    DeactivationFailed,
    NetworkError,
    ServiceUnavailable,
)
from services.network.models import ActiveConnection, Connection, Device


class PendingOperation:
    """
    Handle for an asynchronous NetworkManager call.

    The callback (if any) receives the operation once it completes;
    finish() then returns the result or raises the recorded error, the
    same way a GIO *_finish() call would.
    """

    def __init__(self, kind: str, target: str = "", callback: Optional[Callable] = None):
        self.kind = kind
        self.target = target
        self.done = False
        self._callback = callback
        self._result: Any = None
        self._error: Optional[NetworkError] = None

    def finish(self) -> Any:
        if not self.done:
            raise RuntimeError(f"{self.kind} operation still in flight")
        if self._error is not None:
            raise self._error
        return self._result

    @property
    def error(self) -> Optional[NetworkError]:
        return self._error

    def _complete(self, result: Any = None, error: Optional[NetworkError] = None) -> None:
        self.done = True
        self._result = result
        self._error = error
        if self._callback is not None:
            self._callback(self)

    def __repr__(self) -> str:
        status = "done" if self.done else "pending"
        return f"<PendingOperation {self.kind} {self.target!r} {status}>"


class ConnectionActivator:
    def __init__(self, monitor, router):
        self.monitor = monitor
        self.router = router
        self.last_error: Optional[NetworkError] = None
        self._in_flight: Dict[int, PendingOperation] = {}

    def in_flight(self) -> List[PendingOperation]:
        return list(self._in_flight.values())

    def activate(
        self,
        connection: Connection,
        device: Optional[Device] = None,
        callback: Optional[Callable[[PendingOperation], None]] = None,
    ) -> PendingOperation:
        client = self._require_client("activate connection")

        logger.debug(
            f"Activating connection {connection.id} on device "
            f"{device.interface if device else 'auto'}"
        )
        operation = self._track(PendingOperation("activate", connection.id, callback))
        try:
            client.activate_connection_async(
                connection.handle,
                device.handle if device else None,
                None,
                None,
                self._on_activate_finish,
                (operation, client),
            )
        except Exception as e:
            self._reject(operation, ActivationFailed(cause=e))
        return operation

    def deactivate(
        self,
        active_connection: ActiveConnection,
        callback: Optional[Callable[[PendingOperation], None]] = None,
    ) -> PendingOperation:
        client = self._require_client("deactivate connection")

        logger.debug(f"Deactivating connection {active_connection.id or 'unknown'}")
        operation = self._track(
            PendingOperation("deactivate", active_connection.id, callback)
        )
        try:
            client.deactivate_connection_async(
                active_connection.handle, None, self._on_deactivate_finish, operation
            )
        except Exception as e:
            self._reject(operation, DeactivationFailed(cause=e))
        return operation

    def check_connectivity(
        self, callback: Optional[Callable[[PendingOperation], None]] = None
    ) -> PendingOperation:
        client = self._require_client("check connectivity")

        logger.debug("Checking connectivity...")
        operation = self._track(PendingOperation("check-connectivity", "", callback))
        try:
            client.check_connectivity_async(None, self._on_check_finish, operation)
        except Exception as e:
            self._reject(operation, ConnectivityCheckFailed(cause=e))
        return operation

    def set_wireless_enabled(self, enabled: bool) -> bool:
        client = self.monitor.client
        if client is None:
            logger.debug("Ignoring wireless toggle: NetworkManager not available")
            return False

        try:
            logger.info(f"Setting wireless enabled: {enabled}")
            client.wireless_set_enabled(enabled)
            return True
        except Exception as e:
            logger.error(f"Failed to set wireless enabled: {e}")
            return False

    def set_wwan_enabled(self, enabled: bool) -> bool:
        client = self.monitor.client
        if client is None:
            logger.debug("Ignoring WWAN toggle: NetworkManager not available")
            return False

        try:
            logger.info(f"Setting WWAN enabled: {enabled}")
            client.wwan_set_enabled(enabled)
            return True
        except Exception as e:
            logger.error(f"Failed to set WWAN enabled: {e}")
            return False

    def _require_client(self, action: str):
        client = self.monitor.client
        if client is None:
            logger.warning(f"Cannot {action}: NetworkManager not available")
            raise ServiceUnavailable()
        return client

    def _track(self, operation: PendingOperation) -> PendingOperation:
        self._in_flight[id(operation)] = operation
        return operation

    def _resolve(self, operation: PendingOperation, result: Any = None) -> None:
        self._in_flight.pop(id(operation), None)
        operation._complete(result=result)

    def _reject(self, operation: PendingOperation, error: NetworkError) -> None:
        self._in_flight.pop(id(operation), None)
        self.last_error = error
        logger.warning(f"{error} ({operation.target or operation.kind})")
        operation._complete(error=error)

    # completion callbacks

    def _on_activate_finish(self, client, result, user_data) -> None:
        operation, origin = user_data
        try:
            active = client.activate_connection_finish(result)
        except GLib.Error as e:
            self._reject(operation, ActivationFailed(cause=e))
            return
        except Exception as e:
            logger.error(f"Unexpected error activating {operation.target}: {e}")
            self._reject(operation, ActivationFailed(cause=e))
            return

        if active is None:
            self._reject(
                operation,
                ActivationFailed("Failed to activate connection - no active connection returned"),
            )
            return

        # a handle dropped in the meantime must not be subscribed to
        if self.monitor.client is origin:
            self.router.watch_active_connection(active)
        else:
            logger.debug("NetworkManager went away during activation, not subscribing")

        logger.debug("Connection activated successfully")
        self._resolve(operation, ActiveConnection.from_remote(active))

    def _on_deactivate_finish(self, client, result, operation: PendingOperation) -> None:
        try:
            client.deactivate_connection_finish(result)
        except GLib.Error as e:
            self._reject(operation, DeactivationFailed(cause=e))
            return
        except Exception as e:
            logger.error(f"Unexpected error deactivating {operation.target}: {e}")
            self._reject(operation, DeactivationFailed(cause=e))
            return

        logger.debug("Connection deactivated successfully")
        self._resolve(operation)

    def _on_check_finish(self, client, result, operation: PendingOperation) -> None:
        try:
            connectivity = client.check_connectivity_finish(result)
        except GLib.Error as e:
            self._reject(operation, ConnectivityCheckFailed(cause=e))
            return
        except Exception as e:
            logger.error(f"Unexpected error checking connectivity: {e}")
            self._reject(operation, ConnectivityCheckFailed(cause=e))
            return

        connectivity = Connectivity.from_value(connectivity)
        logger.debug(f"Connectivity check result: {connectivity.name}")
        self._resolve(operation, connectivity)

from typing import Callable, Optional

import gi
from gi.repository import GLib
from loguru import logger

from services.network.errors import InitializationFailed

# a missing typelib is reported through new_client_async as an
# initialization failure instead of failing the import
try:
    gi.require_version("NM", "1.0")
    from gi.repository import NM
except (ImportError, ValueError) as e:
    logger.error(f"Failed to load NetworkManager bindings: {e}")
    NM = None

ClientCallback = Callable[[Optional[object], Optional[InitializationFailed]], None]


def new_client_async(callback: ClientCallback) -> None:
    """Create an NM.Client without blocking the main loop"""
    if NM is None:
        callback(None, InitializationFailed("NetworkManager bindings unavailable"))
        return

    def _on_ready(source, task, user_data):
        try:
            client = NM.Client.new_finish(task)
        except GLib.Error as e:
            callback(None, InitializationFailed(cause=e))
            return
        callback(client, None)

    NM.Client.new_async(None, _on_ready, None)

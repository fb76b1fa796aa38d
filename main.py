from gi.repository import GLib
from loguru import logger

import setproctitle

from config.config import config
from config.info import APP_NAME
from services.network.network_service import NetworkService
from utils.log import setup_logging


def log_state(service: NetworkService, state) -> None:
    primary = (
        f"{state.primary_connection_id} ({state.primary_connection_type})"
        if state.has_primary_connection
        else "-"
    )
    logger.info(
        f"{service.get_connectivity_description()} | primary: {primary} "
        f"wifi: {state.wireless_enabled} wwan: {state.wwan_enabled}"
    )


def log_events(service: NetworkService) -> None:
    service.connect(
        "availability-changed",
        lambda _, available: logger.info(f"NetworkManager available: {available}"),
    )
    service.connect("state-changed", log_state)
    service.connect(
        "device-added", lambda _, dev: logger.info(f"Device added: {dev.interface}")
    )
    service.connect(
        "device-removed", lambda _, dev: logger.info(f"Device removed: {dev.interface}")
    )
    service.connect(
        "device-state-changed",
        lambda _, dev, new, old, reason: logger.info(
            f"{dev.interface}: {old.name} -> {new.name} ({reason})"
        ),
    )
    service.connect(
        "connection-activated",
        lambda _, variant: logger.info(f"Activated: {variant.name}"),
    )
    service.connect(
        "connection-deactivated",
        lambda _, variant: logger.info(f"Deactivated: {variant.name}"),
    )


if __name__ == "__main__":
    setproctitle.setproctitle(APP_NAME)
    GLib.set_prgname(APP_NAME)
    setup_logging(config.logging.level, config.logging.file)

    service = NetworkService()
    log_events(service)
    service.initialize()

    loop = GLib.MainLoop()
    try:
        loop.run()
    except KeyboardInterrupt:
        loop.quit()

"""
Mapping of connection profiles onto the variants the rest of the shell
understands.

Only Wi-Fi and wired Ethernet profiles are modeled. VPN, bridge, bond,
mobile broadband and every other connection type classify to None, so
they never produce activation/deactivation events.
"""

from typing import Optional

from services.network.models import (
    ActiveConnection,
    BasicNetworkConnection,
    Connection,
    ConnectionVariant,
    WiFiNetwork,
)

WIRELESS_TYPE = "802-11-wireless"
ETHERNET_TYPE = "802-3-ethernet"

_VARIANTS = {
    WIRELESS_TYPE: WiFiNetwork,
    ETHERNET_TYPE: BasicNetworkConnection,
}


def classify(connection: Optional[Connection]) -> Optional[ConnectionVariant]:
    if connection is None:
        return None

    variant_cls = _VARIANTS.get(connection.connection_type)
    if variant_cls is None:
        return None

    return variant_cls(id=connection.uuid, name=connection.id)


def classify_active(active: ActiveConnection) -> Optional[ConnectionVariant]:
    return classify(active.connection)

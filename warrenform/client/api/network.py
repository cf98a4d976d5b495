import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from warrenform.client.transport import WarrenClient
from warrenform.util import timeit

logger = logging.getLogger(__name__)


# ============================================================================
# Networks
# ============================================================================


@timeit
def get_network(client: WarrenClient, network_uuid: str) -> Dict[str, Any]:
    return client.call("GET", f"/network/network/{network_uuid}/")


@timeit
def list_networks(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", "/network/networks")


@timeit
def create_network(client: WarrenClient, name: str) -> Dict[str, Any]:
    return client.call("POST", "/network/network", query_params={"name": name})


@timeit
def delete_network(client: WarrenClient, network_uuid: str) -> None:
    """
    Delete a network. The platform refuses to delete the default network and
    networks that still hold resources.
    """
    client.call("DELETE", f"/network/network/{network_uuid}/", decode=False)


@timeit
def set_default_network(client: WarrenClient, network_uuid: str) -> Dict[str, Any]:
    return client.call("PUT", f"/network/network/{network_uuid}/default")


@timeit
def rename_network(client: WarrenClient, network_uuid: str, name: str) -> Dict[str, Any]:
    return client.call("PATCH", f"/network/network/{network_uuid}", json_body={"name": name})


# ============================================================================
# Floating IPs
# ============================================================================


@timeit
def list_floating_ips(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", "/network/ip_addresses")


@timeit
def create_floating_ip(
    client: WarrenClient,
    name: Optional[str] = None,
    billing_account_id: Optional[int] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    if name is not None:
        body["name"] = name
    if billing_account_id is not None:
        body["billing_account_id"] = billing_account_id
    return client.call("POST", "/network/ip_addresses", json_body=body)


@timeit
def assign_floating_ip(client: WarrenClient, address: str, vm_uuid: str) -> Dict[str, Any]:
    return client.call(
        "POST",
        f"/network/ip_addresses/{address}/assign",
        json_body={"vm_uuid": vm_uuid},
    )


@timeit
def unassign_floating_ip(client: WarrenClient, address: str) -> Dict[str, Any]:
    return client.call("POST", f"/network/ip_addresses/{address}/unassign", json_body={})


@timeit
def delete_floating_ip(client: WarrenClient, address: str) -> None:
    client.call("DELETE", f"/network/ip_addresses/{address}/", decode=False)

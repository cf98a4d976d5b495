"""
Cross-resource lookups. The platform keeps no foreign keys between disks,
servers, networks and floating IPs, so these derive the relations by scanning
list endpoints.
"""
import ipaddress
import logging
from typing import Any
from typing import Dict

from warrenform.client import errors
from warrenform.client.api.network import list_floating_ips
from warrenform.client.api.network import list_networks
from warrenform.client.api.virtual_machine import get_virtual_machine
from warrenform.client.api.virtual_machine import list_virtual_machines
from warrenform.client.errors import FloatingIPNotFoundError
from warrenform.client.errors import NetworkNotFoundError
from warrenform.client.errors import ServerNotFoundError
from warrenform.client.transport import WarrenClient
from warrenform.resources.base import classified_errors

logger = logging.getLogger(__name__)


def get_network_from_server_uuid(client: WarrenClient, server_uuid: str) -> Dict[str, Any]:
    """
    Find the network a server is attached to.

    A network matches only when it lists the server UUID as a member and its
    IPv4 subnet contains the server's private address.

    :raises ServerNotFoundError: The server does not exist.
    :raises NetworkNotFoundError: No network matches.
    :raises ValueError: A candidate network carries an unparsable subnet.
    """
    with classified_errors(errors.VIRTUAL_MACHINE):
        server = get_virtual_machine(client, server_uuid)

    private_ipv4 = None
    if server.get("private_ipv4"):
        private_ipv4 = ipaddress.ip_address(server["private_ipv4"])

    with classified_errors(errors.NETWORK):
        networks = list_networks(client)

    for network in networks:
        if server_uuid not in (network.get("vm_uuids") or []):
            continue
        # Parse the subnet only once the network is a candidate.
        subnet = ipaddress.ip_network(network.get("subnet") or "", strict=False)
        if private_ipv4 is not None and private_ipv4 in subnet:
            return network

    raise NetworkNotFoundError(f"Network not found: Server UUID {server_uuid}")


def get_server_from_volume_uuid(client: WarrenClient, disk_uuid: str) -> Dict[str, Any]:
    """Find the server whose storage list holds the disk."""
    with classified_errors(errors.VIRTUAL_MACHINE):
        servers = list_virtual_machines(client)

    for server in servers:
        for storage in server.get("storage") or []:
            if storage.get("uuid") == disk_uuid:
                return server

    raise ServerNotFoundError(f"Server not found: No match found for UUID {disk_uuid}")


def get_floating_ip_by_id(client: WarrenClient, floating_ip_id: int) -> Dict[str, Any]:
    with classified_errors(errors.FLOATING_IP):
        floating_ips = list_floating_ips(client)

    for floating_ip in floating_ips:
        if floating_ip.get("enabled") and floating_ip.get("id") == floating_ip_id:
            return floating_ip

    raise FloatingIPNotFoundError(f"Floating IP not found: {floating_ip_id}")


def get_floating_ip_from_assigned_uuid(client: WarrenClient, assigned_uuid: str) -> Dict[str, Any]:
    with classified_errors(errors.FLOATING_IP):
        floating_ips = list_floating_ips(client)

    for floating_ip in floating_ips:
        if floating_ip.get("enabled") and floating_ip.get("assigned_to") == assigned_uuid:
            return floating_ip

    raise FloatingIPNotFoundError(f"Floating IP not found: No match for UUID {assigned_uuid}")

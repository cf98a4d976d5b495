import logging
from typing import Any
from typing import Dict

from warrenform.client import errors
from warrenform.client.api.network import create_network
from warrenform.client.api.network import delete_network
from warrenform.client.api.network import get_network
from warrenform.client.api.network import rename_network
from warrenform.client.api.network import set_default_network
from warrenform.client.errors import UnsupportedOperationError
from warrenform.client.transport import WarrenClient
from warrenform.diff import ResourceDiff
from warrenform.models.warren.network import NetworkSchema
from warrenform.resources.base import classified_errors
from warrenform.resources.base import CreateTransaction
from warrenform.resources.base import Reconciler

logger = logging.getLogger(__name__)


def transform_network(network: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": network.get("uuid"),
        "created_at": network.get("created_at"),
        "is_default": network.get("is_default"),
        "name": network.get("name"),
        "resources_count": network.get("resources_count"),
        "server_uuids": list(network.get("vm_uuids") or []),
        "subnet_ipv4": network.get("subnet"),
        "subnet_ipv6": network.get("subnet_ipv6"),
        "type": network.get("type"),
        "updated_at": network.get("updated_at"),
        "vlan_id": network.get("vlan_id"),
    }


class NetworkReconciler(Reconciler):
    """
    Private VPC networks. Membership of servers is reported by the platform and
    never configured here.
    """

    resource_type = errors.NETWORK
    schema = NetworkSchema()

    def _get(self, client: WarrenClient, resource_id: str) -> Dict[str, Any]:
        return get_network(client, resource_id)

    def _to_state(
        self,
        client: WarrenClient,
        remote: Dict[str, Any],
        prior: Dict[str, Any],
    ) -> Dict[str, Any]:
        return self._carry_inputs(transform_network(remote), prior)

    def _create(
        self,
        client: WarrenClient,
        desired: Dict[str, Any],
        transaction: CreateTransaction,
    ) -> Dict[str, Any]:
        with classified_errors(errors.NETWORK):
            network = create_network(client, desired.get("name") or "")
            transaction.record(network["uuid"])
            if desired.get("is_default") and not network.get("is_default"):
                network = set_default_network(client, network["uuid"])
        return self._to_state(client, network, desired)

    def _cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        delete_network(client, transaction.created_id)

    def _update(
        self,
        client: WarrenClient,
        prior: Dict[str, Any],
        desired: Dict[str, Any],
        diff: ResourceDiff,
    ) -> Dict[str, Any]:
        network_uuid = prior["id"]
        state = self._merged(prior, desired)
        if "is_default" in diff.update_fields and not desired.get("is_default"):
            raise UnsupportedOperationError(
                f"Network {network_uuid} stops being the default only when another network is made default",
            )
        with classified_errors(errors.NETWORK):
            if "name" in diff.update_fields:
                network = rename_network(client, network_uuid, desired["name"])
                state = self._to_state(client, network, prior)
            if "is_default" in diff.update_fields:
                network = set_default_network(client, network_uuid)
                state = self._to_state(client, network, prior)
        return state

    def _delete(self, client: WarrenClient, remote: Dict[str, Any]) -> None:
        delete_network(client, remote["uuid"])

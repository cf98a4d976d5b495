import logging
from typing import Any
from typing import Dict
from typing import Optional

import requests

from warrenform.client import errors
from warrenform.client.api.network import assign_floating_ip
from warrenform.client.api.network import create_floating_ip
from warrenform.client.api.network import delete_floating_ip
from warrenform.client.api.network import unassign_floating_ip
from warrenform.client.errors import ConfigurationMismatchError
from warrenform.client.errors import FloatingIPNotFoundError
from warrenform.client.errors import NotFoundError
from warrenform.client.errors import WarrenError
from warrenform.client.transport import WarrenClient
from warrenform.diff import ResourceDiff
from warrenform.models.warren.floating_ip import FloatingIPSchema
from warrenform.resources.base import classified_errors
from warrenform.resources.base import CreateTransaction
from warrenform.resources.base import Reconciler
from warrenform.resources.lookups import get_floating_ip_by_id
from warrenform.resources.lookups import get_floating_ip_from_assigned_uuid
from warrenform.resources.lookups import get_network_from_server_uuid
from warrenform.util import to_int

logger = logging.getLogger(__name__)

ASSIGNED_TO_VIRTUAL_MACHINE = "virtual_machine"


def parse_floating_ip_id(resource_id: Any) -> int:
    try:
        return int(resource_id)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Floating IP ID must be an integer, got {resource_id!r}") from e


def transform_floating_ip(floating_ip: Dict[str, Any], network_uuid: Optional[str] = None) -> Dict[str, Any]:
    """
    Transform a platform floating IP into canonical state. The integer platform
    ID becomes the string `id` of the resource.
    """
    floating_ip_id = floating_ip.get("id")
    return {
        "id": str(floating_ip_id) if floating_ip_id is not None else None,
        "address": floating_ip.get("address"),
        "assigned_to": floating_ip.get("assigned_to"),
        "assigned_to_private_ip": floating_ip.get("assigned_to_private_ip"),
        "assigned_to_resource_type": floating_ip.get("assigned_to_resource_type"),
        "billing_account": floating_ip.get("billing_account_id"),
        "created_at": floating_ip.get("created_at"),
        "enabled": floating_ip.get("enabled"),
        "is_ipv6": floating_ip.get("is_ipv6"),
        "name": floating_ip.get("name"),
        "network_uuid": network_uuid,
        "type": floating_ip.get("type"),
        "updated_at": floating_ip.get("updated_at"),
        "user_id": floating_ip.get("user_id"),
        "uuid": floating_ip.get("uuid"),
    }


def check_floating_ip_matches(
    floating_ip: Dict[str, Any],
    name: Optional[str],
    assigned_to: str,
) -> None:
    """
    Verify an existing floating IP agrees with the desired name and assignment.

    :raises ConfigurationMismatchError: on the first disagreement.
    """
    existing_name = floating_ip.get("name") or ""
    name = name or ""
    if existing_name and existing_name != name:
        raise ConfigurationMismatchError(
            "Floating IP configuration mismatch between existing instance name and given one: "
            f"{existing_name} - {name}",
        )

    existing_assigned_to = floating_ip.get("assigned_to") or ""
    if existing_assigned_to and existing_assigned_to != assigned_to:
        resource_type = floating_ip.get("assigned_to_resource_type")
        if resource_type != ASSIGNED_TO_VIRTUAL_MACHINE:
            raise ConfigurationMismatchError(
                "Floating IP configuration mismatch between existing instance attached resource type: "
                f"{existing_assigned_to} = {resource_type}",
            )
        raise ConfigurationMismatchError(
            "Floating IP configuration mismatch between existing instance attached server UUID and given one: "
            f"{existing_assigned_to} - {assigned_to}",
        )


class FloatingIPReconciler(Reconciler):
    resource_type = errors.FLOATING_IP
    schema = FloatingIPSchema()

    def _get(self, client: WarrenClient, resource_id: str) -> Dict[str, Any]:
        return get_floating_ip_by_id(client, parse_floating_ip_id(resource_id))

    def _to_state(
        self,
        client: WarrenClient,
        remote: Dict[str, Any],
        prior: Dict[str, Any],
    ) -> Dict[str, Any]:
        network_uuid = None
        assigned_to = remote.get("assigned_to")
        if assigned_to:
            try:
                network_uuid = get_network_from_server_uuid(client, assigned_to).get("uuid")
            except NotFoundError as e:
                logger.debug("No network found for floating IP target %s: %s", assigned_to, e)
            except (WarrenError, requests.RequestException, ValueError) as e:
                logger.warning("Could not look up the network of server %s: %s", assigned_to, e)
        return self._carry_inputs(transform_floating_ip(remote, network_uuid), prior)

    def _create(
        self,
        client: WarrenClient,
        desired: Dict[str, Any],
        transaction: CreateTransaction,
    ) -> Dict[str, Any]:
        assigned_to = desired.get("assigned_to") or ""
        name = desired.get("name")

        floating_ip = None
        if assigned_to:
            try:
                floating_ip = get_floating_ip_from_assigned_uuid(client, assigned_to)
                logger.info(
                    "Reusing floating IP %s already assigned to %s.",
                    floating_ip.get("address"),
                    assigned_to,
                )
            except FloatingIPNotFoundError:
                floating_ip = None

        if floating_ip is None:
            with classified_errors(errors.FLOATING_IP):
                floating_ip = create_floating_ip(
                    client,
                    name=name,
                    billing_account_id=to_int(desired.get("billing_account")),
                )
            transaction.record(floating_ip["id"])

        check_floating_ip_matches(floating_ip, name, assigned_to)

        if assigned_to and not floating_ip.get("assigned_to"):
            with classified_errors(errors.FLOATING_IP):
                floating_ip = assign_floating_ip(client, floating_ip["address"], assigned_to)

        return self._to_state(client, floating_ip, desired)

    def _cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        floating_ip = get_floating_ip_by_id(client, parse_floating_ip_id(transaction.created_id))
        delete_floating_ip(client, floating_ip["address"])

    def _update(
        self,
        client: WarrenClient,
        prior: Dict[str, Any],
        desired: Dict[str, Any],
        diff: ResourceDiff,
    ) -> Dict[str, Any]:
        if "assigned_to" not in diff.update_fields:
            return self._merged(prior, desired)

        floating_ip = get_floating_ip_by_id(client, parse_floating_ip_id(prior["id"]))
        address = floating_ip["address"]
        old_assigned_to = prior.get("assigned_to")
        new_assigned_to = desired.get("assigned_to")
        with classified_errors(errors.FLOATING_IP):
            if old_assigned_to:
                logger.debug("Floating IP %s will be detached from %s.", address, old_assigned_to)
                floating_ip = unassign_floating_ip(client, address)
            if new_assigned_to:
                logger.debug("Floating IP %s will be attached to server %s.", address, new_assigned_to)
                floating_ip = assign_floating_ip(client, address, new_assigned_to)
        return self._to_state(client, floating_ip, prior)

    def _delete(self, client: WarrenClient, remote: Dict[str, Any]) -> None:
        delete_floating_ip(client, remote["address"])

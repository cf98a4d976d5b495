import json
import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import requests

from warrenform.client import errors
from warrenform.client.api.virtual_machine import create_virtual_machine
from warrenform.client.api.virtual_machine import delete_virtual_machine
from warrenform.client.api.virtual_machine import get_virtual_machine
from warrenform.client.api.virtual_machine import start_virtual_machine
from warrenform.client.api.virtual_machine import stop_virtual_machine
from warrenform.client.errors import NotFoundError
from warrenform.client.errors import UnsupportedOperationError
from warrenform.client.errors import WarrenError
from warrenform.client.transport import WarrenClient
from warrenform.diff import plan_changes
from warrenform.models.warren.virtual_machine import VirtualMachineSchema
from warrenform.resources.base import classified_errors
from warrenform.resources.base import CreateTransaction
from warrenform.resources.base import Reconciler
from warrenform.resources.lookups import get_network_from_server_uuid
from warrenform.util import generate_password
from warrenform.util import to_int

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "user"
CLOUD_CONFIG_HEADER = "#cloud-config\n"


# ============================================================================
# Transform
# ============================================================================


def transform_replicas(replicas: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "created_at": replica.get("created_at"),
            "master_uuid": replica.get("master_uuid"),
            "size_in_gb": replica.get("size"),
            "type": replica.get("type"),
            "uuid": replica.get("uuid"),
        }
        for replica in replicas or []
    ]


def transform_storage(storage: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "created_at": entry.get("created_at"),
            "name": entry.get("name"),
            "primary": entry.get("primary"),
            "replica": transform_replicas(entry.get("replica")),
            "size_in_gb": entry.get("size"),
            "user_id": entry.get("user_id"),
            "uuid": entry.get("uuid"),
        }
        for entry in storage or []
    ]


def transform_virtual_machine(
    vm: Dict[str, Any],
    network_uuid: Optional[str] = None,
    disk_size_in_gb: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Transform a platform virtual machine into canonical state.

    :param vm: Virtual machine object as returned by the platform.
    :param network_uuid: UUID of the network the machine is attached to, derived separately.
    :param disk_size_in_gb: Known primary disk size. When None, the size of the
        primary storage entry is used.
    """
    storage = transform_storage(vm.get("storage"))
    if disk_size_in_gb is None:
        for entry in storage:
            if entry["primary"]:
                disk_size_in_gb = entry["size_in_gb"]
                break
    return {
        "id": vm.get("uuid"),
        "backup": vm.get("backup"),
        "billing_account": vm.get("billing_account"),
        "created_at": vm.get("created_at"),
        "description": vm.get("description"),
        "disk_size_in_gb": disk_size_in_gb,
        "hostname": vm.get("hostname"),
        "mac": vm.get("mac"),
        "memory": vm.get("memory"),
        "name": vm.get("name"),
        "network_uuid": network_uuid,
        "os_name": vm.get("os_name"),
        "os_version": vm.get("os_version"),
        "private_ipv4": vm.get("private_ipv4"),
        "public_ipv6": vm.get("public_ipv6"),
        "status": vm.get("status"),
        "storage": storage,
        "updated_at": vm.get("updated_at"),
        "user_id": vm.get("user_id"),
        "username": vm.get("username"),
        "vcpu": vm.get("vcpu"),
    }


# ============================================================================
# Create request
# ============================================================================


def normalize_cloud_init(cloud_init: str) -> str:
    """
    Normalize line endings to LF. Anything that is not a cloud-config document
    becomes a JSON `runcmd` list, one command per blank-line separated block.
    """
    cloud_init = cloud_init.replace("\r\n", "\n").replace("\r", "\n")
    if cloud_init.startswith(CLOUD_CONFIG_HEADER):
        return cloud_init
    return json.dumps({"runcmd": cloud_init.split("\n\n")})


def build_create_request(desired: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the create request of a virtual machine from its desired configuration.
    A password is generated when none is given.
    """
    request: Dict[str, Any] = {
        "name": desired["name"],
        "os_name": desired["os_name"],
        "os_version": desired["os_version"],
        "disks": to_int(desired["disk_size_in_gb"]),
        "vcpu": to_int(desired["vcpu"]),
        "ram": to_int(desired["memory"]),
        "reserve_public_ip": bool(desired.get("reserve_public_ip")),
        "backup": bool(desired.get("backup")),
        "username": desired.get("username") or DEFAULT_USERNAME,
        "password": desired.get("password") or generate_password(),
        "billing_account_id": to_int(desired.get("billing_account")),
    }
    if desired.get("cloud_init") is not None:
        request["cloud_init"] = normalize_cloud_init(desired["cloud_init"])
    if desired.get("public_key") is not None:
        request["public_key"] = desired["public_key"]
    if desired.get("network_uuid"):
        request["network_uuid"] = desired["network_uuid"]
    if desired.get("source_uuid") is not None:
        request["source_uuid"] = desired["source_uuid"]
        if desired.get("source_replica") is not None:
            request["source_replica"] = desired["source_replica"]
    return request


# ============================================================================
# Reconciler
# ============================================================================


class VirtualMachineReconciler(Reconciler):
    resource_type = errors.VIRTUAL_MACHINE
    schema = VirtualMachineSchema()

    def _get(self, client: WarrenClient, resource_id: str) -> Dict[str, Any]:
        return get_virtual_machine(client, resource_id)

    def _to_state(
        self,
        client: WarrenClient,
        remote: Dict[str, Any],
        prior: Dict[str, Any],
    ) -> Dict[str, Any]:
        network_uuid = self._network_uuid(client, remote.get("uuid"))
        state = transform_virtual_machine(
            remote,
            network_uuid=network_uuid,
            disk_size_in_gb=to_int(prior.get("disk_size_in_gb")),
        )
        return self._carry_inputs(state, prior)

    @staticmethod
    def _network_uuid(client: WarrenClient, vm_uuid: Optional[str]) -> Optional[str]:
        if not vm_uuid:
            return None
        try:
            return get_network_from_server_uuid(client, vm_uuid).get("uuid")
        except NotFoundError as e:
            logger.debug("No network found for virtual machine %s: %s", vm_uuid, e)
            return None
        except (WarrenError, requests.RequestException, ValueError) as e:
            logger.warning("Could not look up the network of virtual machine %s: %s", vm_uuid, e)
            return None

    def _create(
        self,
        client: WarrenClient,
        desired: Dict[str, Any],
        transaction: CreateTransaction,
    ) -> Dict[str, Any]:
        request = build_create_request(desired)
        with classified_errors(errors.VIRTUAL_MACHINE):
            vm = create_virtual_machine(client, request)
        transaction.record(vm["uuid"])
        return self._to_state(client, vm, dict(desired, password=request["password"]))

    def _cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        delete_virtual_machine(client, transaction.created_id)

    def update(self, prior: Dict[str, Any], desired: Dict[str, Any]) -> Dict[str, Any]:
        diff = plan_changes(self.schema, prior, desired)
        if not diff.has_changes:
            return dict(prior)
        err = UnsupportedOperationError("Updating an existing machine is currently not implemented")
        raise self._failure("update", prior.get("id"), err)

    def _delete(self, client: WarrenClient, remote: Dict[str, Any]) -> None:
        delete_virtual_machine(client, remote["uuid"])

    def start(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Power on the machine and return the state with the status the platform reports."""
        return self._power("start", state)

    def stop(self, state: Dict[str, Any], force: bool = False) -> Dict[str, Any]:
        return self._power("stop", state, force=force)

    def _power(self, operation: str, state: Dict[str, Any], force: bool = False) -> Dict[str, Any]:
        vm_uuid = state["id"]
        client = self._client_for(state)
        logger.info("Running %s on virtual machine %s.", operation, vm_uuid)
        try:
            with classified_errors(errors.VIRTUAL_MACHINE):
                if operation == "start":
                    vm = start_virtual_machine(client, vm_uuid)
                else:
                    vm = stop_virtual_machine(client, vm_uuid, force=force)
        except Exception as e:
            raise self._failure(operation, vm_uuid, e)
        return self._to_state(client, vm, state)

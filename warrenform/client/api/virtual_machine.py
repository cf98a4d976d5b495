import logging
from typing import Any
from typing import Dict
from typing import List

from warrenform.client.transport import WarrenClient
from warrenform.util import timeit

logger = logging.getLogger(__name__)

VM_PATH = "/user-resource/vm"

CREATE_VM_FIELDS = (
    "name",
    "os_name",
    "os_version",
    "disks",
    "vcpu",
    "ram",
    "username",
    "password",
    "billing_account_id",
    "backup",
    "public_key",
    "network_uuid",
    "source_replica",
    "source_uuid",
    "reserve_public_ip",
    "cloud_init",
)


@timeit
def get_virtual_machine(client: WarrenClient, vm_uuid: str) -> Dict[str, Any]:
    return client.call("GET", VM_PATH, query_params={"uuid": vm_uuid})


@timeit
def list_virtual_machines(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", f"{VM_PATH}/list")


@timeit
def create_virtual_machine(client: WarrenClient, request: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a virtual machine.

    :param request: Create request keyed by the wire field names. Fields left at
        None are omitted from the JSON body.
    """
    unknown = set(request) - set(CREATE_VM_FIELDS)
    if unknown:
        raise ValueError(f"Unknown virtual machine create fields: {', '.join(sorted(unknown))}")
    body = {key: value for key, value in request.items() if value is not None}
    return client.call("POST", VM_PATH, json_body=body)


@timeit
def start_virtual_machine(client: WarrenClient, vm_uuid: str) -> Dict[str, Any]:
    return client.call("POST", f"{VM_PATH}/start", form_params={"uuid": vm_uuid})


@timeit
def stop_virtual_machine(client: WarrenClient, vm_uuid: str, force: bool = False) -> Dict[str, Any]:
    return client.call(
        "POST",
        f"{VM_PATH}/stop",
        form_params={"uuid": vm_uuid, "force": force},
    )


@timeit
def delete_virtual_machine(client: WarrenClient, vm_uuid: str) -> None:
    client.call("DELETE", VM_PATH, form_params={"uuid": vm_uuid}, decode=False)


@timeit
def attach_disk(client: WarrenClient, vm_uuid: str, disk_uuid: str) -> Dict[str, Any]:
    """Attach a disk to a virtual machine and return the resulting VM storage entry."""
    return client.call(
        "POST",
        f"{VM_PATH}/storage/attach",
        form_params={"uuid": vm_uuid, "storage_uuid": disk_uuid},
    )


@timeit
def detach_disk(client: WarrenClient, vm_uuid: str, disk_uuid: str) -> None:
    client.call(
        "POST",
        f"{VM_PATH}/storage/detach",
        form_params={"uuid": vm_uuid, "storage_uuid": disk_uuid},
        decode=False,
    )


@timeit
def list_base_images(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", "/config/vm_images")

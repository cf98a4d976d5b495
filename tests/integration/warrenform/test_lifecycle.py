import pytest

from warrenform.client.errors import ErrorKind
from warrenform.client.errors import ReconcileError
from warrenform.data_sources.location import LocationDataSource
from warrenform.data_sources.network import NetworkDataSource
from warrenform.data_sources.os_base_image import OSBaseImageDataSource
from warrenform.resources.disk import DiskReconciler
from warrenform.resources.floating_ip import FloatingIPReconciler
from warrenform.resources.network import NetworkReconciler
from warrenform.resources.virtual_machine import VirtualMachineReconciler

VM_CONFIG = {
    "name": "web-1",
    "os_name": "ubuntu",
    "os_version": "22.04",
    "disk_size_in_gb": 20,
    "vcpu": 1,
    "memory": 2048,
}


def _create_vm(client, **overrides):
    return VirtualMachineReconciler(client).create(dict(VM_CONFIG, **overrides))


def test_virtual_machine_lifecycle(platform, client):
    reconciler = VirtualMachineReconciler(client)

    state = _create_vm(client)

    assert state["status"] == "stopped"
    assert state["username"] == "user"
    assert state["password"]
    assert state["private_ipv4"] == "10.42.0.1"
    assert state["network_uuid"] == platform.default_network["uuid"]

    started = reconciler.start(state)
    assert started["status"] == "started"
    assert started["password"] == state["password"]

    refreshed = reconciler.read(started)
    assert refreshed["status"] == "started"
    assert refreshed["disk_size_in_gb"] == 20

    reconciler.delete(refreshed)
    assert reconciler.read(refreshed) is None
    # Deleting again succeeds without a DELETE call.
    calls_before = len(platform.calls)
    reconciler.delete(refreshed)
    assert ("DELETE", "/user-resource/vm") not in platform.calls[calls_before:]


def test_virtual_machine_in_private_network(platform, client):
    network = NetworkReconciler(client).create({"name": "backend"})

    state = _create_vm(client, network_uuid=network["id"])

    assert state["network_uuid"] == network["id"]
    assert state["private_ipv4"].startswith("10.43.0.")
    assert NetworkReconciler(client).read(network)["server_uuids"] == [state["id"]]


def test_disk_attach_and_move(platform, client):
    first = _create_vm(client)
    second = _create_vm(client, name="web-2")
    reconciler = DiskReconciler(client)

    disk = reconciler.create({"size_in_gb": 50, "server_uuid": first["id"]})
    assert disk["server_uuid"] == first["id"]

    moved = reconciler.update(disk, {"size_in_gb": 50, "server_uuid": second["id"]})
    assert moved["server_uuid"] == second["id"]
    assert reconciler.read(moved)["server_uuid"] == second["id"]

    detached = reconciler.update(moved, {"size_in_gb": 50})
    assert reconciler.read(detached)["server_uuid"] is None

    reconciler.delete(detached)
    assert disk["id"] not in platform.disks


def test_failed_attach_removes_created_disk(platform, client):
    vm = _create_vm(client)
    platform.fail_next("POST", "/user-resource/vm/storage/attach", 409, "Server is locked")

    with pytest.raises(ReconcileError) as excinfo:
        DiskReconciler(client).create({"size_in_gb": 50, "server_uuid": vm["id"]})

    assert excinfo.value.kind is ErrorKind.LOCKED
    assert platform.disks == {}


def test_floating_ip_find_or_create(platform, client):
    vm = _create_vm(client)
    reconciler = FloatingIPReconciler(client)

    created = reconciler.create({"name": "public", "assigned_to": vm["id"]})
    assert created["assigned_to"] == vm["id"]
    assert created["assigned_to_private_ip"] == vm["private_ipv4"]
    assert created["network_uuid"] == platform.default_network["uuid"]

    # A second create for the same machine adopts the existing address.
    adopted = reconciler.create({"name": "public", "assigned_to": vm["id"]})
    assert adopted["id"] == created["id"]
    assert len(platform.floating_ips) == 1

    with pytest.raises(ReconcileError) as excinfo:
        reconciler.create({"name": "other", "assigned_to": vm["id"]})
    assert excinfo.value.kind is ErrorKind.CONFIGURATION_MISMATCH

    other_vm = _create_vm(client, name="web-2")
    moved = reconciler.update(created, {"name": "public", "assigned_to": other_vm["id"]})
    assert moved["assigned_to"] == other_vm["id"]
    assert platform.floating_ips[created["address"]]["assigned_to"] == other_vm["id"]

    reconciler.delete(moved)
    assert platform.floating_ips == {}


def test_failed_assign_removes_created_floating_ip(platform, client):
    vm = _create_vm(client)
    platform.fail_next("POST", r"/network/ip_addresses/.+/assign", 500, "Internal error")

    with pytest.raises(ReconcileError) as excinfo:
        FloatingIPReconciler(client).create({"assigned_to": vm["id"]})

    assert excinfo.value.kind is ErrorKind.INTERNAL_UNKNOWN
    assert platform.floating_ips == {}


def test_network_default_promotion(platform, client):
    reconciler = NetworkReconciler(client)
    network = reconciler.create({"name": "backend"})
    assert network["is_default"] is False

    promoted = reconciler.update(network, {"name": "backend", "is_default": True})

    assert promoted["is_default"] is True
    assert platform.default_network["is_default"] is False
    assert NetworkDataSource(client).read(is_default=True)["id"] == network["id"]


def test_network_in_use_cannot_be_deleted(platform, client):
    reconciler = NetworkReconciler(client)
    default_network = reconciler.import_state(platform.default_network["uuid"])
    _create_vm(client)

    with pytest.raises(ReconcileError) as excinfo:
        reconciler.delete(default_network)

    assert "Network is in use" in str(excinfo.value)


def test_data_sources(client):
    assert LocationDataSource(client).read(is_preferred=True)["slug"] == "cyc01"
    image = OSBaseImageDataSource(client).read(os_name="debian", os_version="12")
    assert image["display_name"] == "Debian"


def test_unknown_location_is_reported(client):
    with pytest.raises(ReconcileError):
        NetworkReconciler(client).import_state("any", location="ams01")

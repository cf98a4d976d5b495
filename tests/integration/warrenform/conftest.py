"""
In-memory stand-in for the Warren REST API, plugged into WarrenClient as its
requests session.
"""
import copy
import ipaddress
import itertools
import json
import re
import uuid
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from unittest.mock import Mock
from urllib.parse import urlsplit

import pytest

from tests.data.warren.location import LOCATIONS
from tests.data.warren.virtual_machine import BASE_IMAGES
from warrenform.client.transport import WarrenClient

TEST_LOCATION = "cyc01"
TEST_API_URL = "https://api.example.com/v1"


def _response(status_code: int, body: Any = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.headers = {"X-Warren-Correlation-Id": str(uuid.uuid4())}
    response.text = json.dumps(body) if body is not None else ""
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


def _error(status_code: int, message: str) -> Mock:
    return _response(status_code, {"message": message, "errors": {}})


class FakeWarrenPlatform:
    """Keeps disks, machines, networks and floating IPs of one location in memory."""

    def __init__(self, location: str = TEST_LOCATION) -> None:
        self.location = location
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str]] = []
        self.disks: Dict[str, Dict[str, Any]] = {}
        self.vms: Dict[str, Dict[str, Any]] = {}
        self.networks: Dict[str, Dict[str, Any]] = {}
        self.floating_ips: Dict[str, Dict[str, Any]] = {}
        self._failures: List[Tuple[str, str, Mock]] = []
        self._subnets = itertools.count(42)
        self._floating_ip_ids = itertools.count(17)
        self._hosts = itertools.count(1)
        self.default_network = self._new_network("default-network", is_default=True)

    # Test helpers

    def fail_next(self, method: str, path_pattern: str, status_code: int, message: str) -> None:
        self._failures.append((method, path_pattern, _error(status_code, message)))

    def _pop_failure(self, method: str, path: str) -> Optional[Mock]:
        for i, (fail_method, pattern, response) in enumerate(self._failures):
            if fail_method == method and re.fullmatch(pattern, path):
                del self._failures[i]
                return response
        return None

    # Session interface

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        parts = urlsplit(url)
        prefix = f"/v1/{self.location}"
        if not parts.path.startswith(prefix):
            return _error(404, f"Unknown location in {parts.path}")
        path = parts.path[len(prefix):]
        self.calls.append((method, path))

        failure = self._pop_failure(method, path)
        if failure is not None:
            return failure

        params = params or {}
        form = data if isinstance(data, dict) else {}
        body = json.loads(data) if isinstance(data, str) else {}
        return self._route(method, path, params, form, body)

    def _route(self, method, path, params, form, body) -> Mock:
        if path == "/config/locations" and method == "GET":
            return _response(200, copy.deepcopy(LOCATIONS))
        if path == "/config/vm_images" and method == "GET":
            return _response(200, copy.deepcopy(BASE_IMAGES))

        if path == "/user-resource/vm":
            if method == "GET":
                return self._get(self.vms, params.get("uuid"), 400, "No such virtual machine exists")
            if method == "POST":
                return self._create_vm(body)
            if method == "DELETE":
                return self._delete_vm(form.get("uuid"))
        if path == "/user-resource/vm/list" and method == "GET":
            return _response(200, copy.deepcopy(list(self.vms.values())))
        if path in ("/user-resource/vm/start", "/user-resource/vm/stop") and method == "POST":
            vm = self.vms.get(form.get("uuid"))
            if vm is None:
                return _error(400, "No such virtual machine exists")
            vm["status"] = "started" if path.endswith("start") else "stopped"
            return _response(200, copy.deepcopy(vm))
        if path == "/user-resource/vm/storage/attach" and method == "POST":
            return self._attach(form.get("uuid"), form.get("storage_uuid"))
        if path == "/user-resource/vm/storage/detach" and method == "POST":
            return self._detach(form.get("uuid"), form.get("storage_uuid"))

        if path == "/storage/disks":
            if method == "GET":
                return _response(200, copy.deepcopy(list(self.disks.values())))
            if method == "POST":
                return self._create_disk(form)
        match = re.fullmatch(r"/storage/disk/([^/]+)", path)
        if match:
            if method == "GET":
                return self._get(self.disks, match.group(1), 404, "Disk not found")
            if method == "DELETE":
                return self._delete_disk(match.group(1))

        if path == "/network/networks" and method == "GET":
            return _response(200, copy.deepcopy(list(self.networks.values())))
        if path == "/network/network" and method == "POST":
            return _response(200, copy.deepcopy(self._new_network(params.get("name") or "")))
        match = re.fullmatch(r"/network/network/([^/]+)(/default|/)?", path)
        if match:
            return self._network(method, match.group(1), match.group(2), body)

        if path == "/network/ip_addresses":
            if method == "GET":
                return _response(200, copy.deepcopy(list(self.floating_ips.values())))
            if method == "POST":
                return self._create_floating_ip(body)
        match = re.fullmatch(r"/network/ip_addresses/([^/]+)/(assign|unassign)?", path)
        if match:
            return self._floating_ip(method, match.group(1), match.group(2), body)

        return _error(404, f"No route for {method} {path}")

    # Handlers

    @staticmethod
    def _get(store, key, status_code, message) -> Mock:
        if key not in store:
            return _error(status_code, message)
        return _response(200, copy.deepcopy(store[key]))

    def _new_network(self, name: str, is_default: bool = False) -> Dict[str, Any]:
        octet = next(self._subnets)
        network_uuid = str(uuid.uuid4())
        network = {
            "uuid": network_uuid,
            "name": name or f"network-{octet}",
            "subnet": f"10.{octet}.0.0/24",
            "subnet_ipv6": f"fd00:{octet}::/64",
            "vlan_id": 1000 + octet,
            "type": "private",
            "is_default": is_default,
            "vm_uuids": [],
            "resources_count": 0,
            "created_at": "2024-03-01 09:00:00",
            "updated_at": "2024-03-01 09:00:00",
        }
        self.networks[network_uuid] = network
        return network

    def _network(self, method, network_uuid, suffix, body) -> Mock:
        network = self.networks.get(network_uuid)
        if network is None:
            return _error(404, "Network not found")
        if method == "GET" and suffix == "/":
            return _response(200, copy.deepcopy(network))
        if method == "PUT" and suffix == "/default":
            for other in self.networks.values():
                other["is_default"] = False
            network["is_default"] = True
            return _response(200, copy.deepcopy(network))
        if method == "PATCH" and suffix is None:
            network["name"] = body["name"]
            return _response(200, copy.deepcopy(network))
        if method == "DELETE" and suffix == "/":
            if network["is_default"] or network["vm_uuids"]:
                return _error(409, "Network is in use")
            del self.networks[network_uuid]
            return _response(200)
        return _error(405, "Method not allowed")

    def _create_vm(self, body) -> Mock:
        missing = [f for f in ("name", "os_name", "os_version", "disks", "vcpu", "ram", "password") if f not in body]
        if missing:
            return _error(400, f"Missing fields: {', '.join(missing)}")
        network = self.networks.get(body.get("network_uuid") or self.default_network["uuid"])
        if network is None:
            return _error(400, "Invalid network_uuid")
        vm_uuid = str(uuid.uuid4())
        subnet = ipaddress.ip_network(network["subnet"])
        primary_uuid = str(uuid.uuid4())
        vm = {
            "uuid": vm_uuid,
            "name": body["name"],
            "hostname": body["name"],
            "description": "",
            "os_name": body["os_name"],
            "os_version": body["os_version"],
            "vcpu": body["vcpu"],
            "memory": body["ram"],
            "username": body.get("username"),
            "backup": body.get("backup", False),
            "billing_account": body.get("billing_account_id", 42),
            "private_ipv4": str(subnet.network_address + next(self._hosts)),
            "public_ipv6": "",
            "mac": "52:54:00:00:00:01",
            "status": "stopped",
            "storage": [
                {
                    "uuid": primary_uuid,
                    "name": "sda",
                    "primary": True,
                    "size": body["disks"],
                    "replica": [],
                    "user_id": 1001,
                    "created_at": "2024-03-01 10:00:00",
                },
            ],
            "user_id": 1001,
            "created_at": "2024-03-01 10:00:00",
            "updated_at": "2024-03-01 10:00:00",
        }
        self.vms[vm_uuid] = vm
        network["vm_uuids"].append(vm_uuid)
        network["resources_count"] += 1
        return _response(201, copy.deepcopy(vm))

    def _delete_vm(self, vm_uuid) -> Mock:
        if vm_uuid not in self.vms:
            return _error(400, "No such virtual machine exists")
        del self.vms[vm_uuid]
        for network in self.networks.values():
            if vm_uuid in network["vm_uuids"]:
                network["vm_uuids"].remove(vm_uuid)
                network["resources_count"] -= 1
        for floating_ip in self.floating_ips.values():
            if floating_ip["assigned_to"] == vm_uuid:
                floating_ip.update(assigned_to="", assigned_to_resource_type="", assigned_to_private_ip="")
        return _response(200)

    def _create_disk(self, form) -> Mock:
        disk_uuid = str(uuid.uuid4())
        disk = {
            "uuid": disk_uuid,
            "status": "Active",
            "user_id": 1001,
            "billing_account_id": int(form.get("billing_account_id", 42)),
            "size_gb": int(form["size_gb"]),
            "source_image_type": form.get("source_image_type", "EMPTY"),
            "source_image": form.get("source_image", ""),
            "snapshots": [],
            "status_comment": "",
            "created_at": "2024-03-01 10:00:00",
            "updated_at": "2024-03-01 10:00:00",
        }
        self.disks[disk_uuid] = disk
        return _response(200, copy.deepcopy(disk))

    def _delete_disk(self, disk_uuid) -> Mock:
        if disk_uuid not in self.disks:
            return _error(404, "Disk not found")
        for vm in self.vms.values():
            if any(entry["uuid"] == disk_uuid for entry in vm["storage"]):
                return _error(400, "Disk is attached to a virtual machine")
        del self.disks[disk_uuid]
        return _response(200)

    def _attach(self, vm_uuid, disk_uuid) -> Mock:
        vm = self.vms.get(vm_uuid)
        if vm is None:
            return _error(400, "No such virtual machine exists")
        disk = self.disks.get(disk_uuid)
        if disk is None:
            return _error(404, "Disk not found")
        entry = {
            "uuid": disk_uuid,
            "name": f"sd{chr(ord('a') + len(vm['storage']))}",
            "primary": False,
            "size": disk["size_gb"],
            "replica": [],
            "user_id": 1001,
            "created_at": "2024-03-01 10:05:00",
        }
        vm["storage"].append(entry)
        return _response(200, copy.deepcopy(entry))

    def _detach(self, vm_uuid, disk_uuid) -> Mock:
        vm = self.vms.get(vm_uuid)
        if vm is None:
            return _error(400, "No such virtual machine exists")
        vm["storage"] = [entry for entry in vm["storage"] if entry["uuid"] != disk_uuid]
        return _response(200)

    def _create_floating_ip(self, body) -> Mock:
        floating_ip_id = next(self._floating_ip_ids)
        address = f"203.0.113.{floating_ip_id}"
        floating_ip = {
            "id": floating_ip_id,
            "address": address,
            "name": body.get("name") or "",
            "enabled": True,
            "is_ipv6": False,
            "type": "public",
            "user_id": 1001,
            "billing_account_id": body.get("billing_account_id", 42),
            "uuid": str(uuid.uuid4()),
            "assigned_to": "",
            "assigned_to_resource_type": "",
            "assigned_to_private_ip": "",
            "created_at": "2024-03-01 10:00:00",
            "updated_at": "2024-03-01 10:00:00",
        }
        self.floating_ips[address] = floating_ip
        return _response(200, copy.deepcopy(floating_ip))

    def _floating_ip(self, method, address, action, body) -> Mock:
        floating_ip = self.floating_ips.get(address)
        if floating_ip is None:
            return _error(404, "IP address not found")
        if method == "POST" and action == "assign":
            vm = self.vms.get(body.get("vm_uuid"))
            if vm is None:
                return _error(400, "No such virtual machine exists")
            floating_ip.update(
                assigned_to=vm["uuid"],
                assigned_to_resource_type="virtual_machine",
                assigned_to_private_ip=vm["private_ipv4"],
            )
            return _response(200, copy.deepcopy(floating_ip))
        if method == "POST" and action == "unassign":
            floating_ip.update(assigned_to="", assigned_to_resource_type="", assigned_to_private_ip="")
            return _response(200, copy.deepcopy(floating_ip))
        if method == "DELETE" and action is None:
            del self.floating_ips[address]
            return _response(200)
        return _error(405, "Method not allowed")


@pytest.fixture
def platform():
    return FakeWarrenPlatform()


@pytest.fixture
def client(platform):
    return WarrenClient(
        TEST_API_URL,
        "integration-token",
        location_slug=TEST_LOCATION,
        request_timeout=5,
        rate_limit_max_tries=1,
        session=platform,
    )

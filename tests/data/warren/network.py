"""
Sample network and floating IP payloads of the Warren API.
"""
from tests.data.warren.virtual_machine import OTHER_VIRTUAL_MACHINE
from tests.data.warren.virtual_machine import TEST_SERVER_UUID

TEST_NETWORK_UUID = "6f0a7c12-3b4d-4e5f-8a9b-0c1d2e3f4a5b"
TEST_FLOATING_IP_ADDRESS = "203.0.113.10"

NETWORK = {
    "vlan_id": 1234,
    "subnet": "10.42.0.0/24",
    "subnet_ipv6": "fd00:42::/64",
    "name": "test-network",
    "created_at": "2024-03-01 09:00:00",
    "updated_at": "2024-03-01 09:00:00",
    "uuid": TEST_NETWORK_UUID,
    "type": "private",
    "is_default": True,
    "vm_uuids": [TEST_SERVER_UUID],
    "resources_count": 1,
}

# Lists the test server as a member, but its subnet does not hold the server address.
STALE_NETWORK = {
    **NETWORK,
    "vlan_id": 1235,
    "subnet": "10.99.0.0/24",
    "subnet_ipv6": "fd00:99::/64",
    "name": "stale-network",
    "uuid": "7a1b8d23-4c5e-4f60-9b0c-1d2e3f4a5b6c",
    "is_default": False,
}

OTHER_NETWORK = {
    **NETWORK,
    "vlan_id": 1236,
    "subnet": "10.43.0.0/24",
    "subnet_ipv6": "fd00:43::/64",
    "name": "other-network",
    "uuid": "8b2c9e34-5d6f-4071-ac1d-2e3f4a5b6c7d",
    "is_default": False,
    "vm_uuids": [OTHER_VIRTUAL_MACHINE["uuid"]],
}

FLOATING_IP = {
    "id": 17,
    "is_ipv6": False,
    "address": TEST_FLOATING_IP_ADDRESS,
    "user_id": 1001,
    "billing_account_id": 42,
    "type": "public",
    "name": "test-ip",
    "enabled": True,
    "created_at": "2024-03-01 10:00:00",
    "updated_at": "2024-03-01 10:00:00",
    "uuid": "9c3d0f45-6e70-4182-bd2e-3f4a5b6c7d8e",
    "assigned_to": "",
    "assigned_to_resource_type": "",
    "assigned_to_private_ip": "",
}

ASSIGNED_FLOATING_IP = {
    **FLOATING_IP,
    "assigned_to": TEST_SERVER_UUID,
    "assigned_to_resource_type": "virtual_machine",
    "assigned_to_private_ip": "10.42.0.1",
}

DISABLED_FLOATING_IP = {
    **FLOATING_IP,
    "id": 18,
    "address": "203.0.113.11",
    "enabled": False,
}

"""
Attribute schema of a Warren virtual machine.

The platform has no in-place update for virtual machines, so every
configurable attribute except `network_uuid` requires replacement.
"""

from dataclasses import dataclass

from warrenform.models.core.common import AttributeRef
from warrenform.models.core.resources import WarrenResourceProperties
from warrenform.models.core.resources import WarrenResourceSchema


@dataclass(frozen=True)
class VirtualMachineProperties(WarrenResourceProperties):
    backup: AttributeRef = AttributeRef("backup", optional=True, computed=True, requires_replace=True)
    billing_account: AttributeRef = AttributeRef("billing_account", optional=True, computed=True, requires_replace=True)
    cloud_init: AttributeRef = AttributeRef("cloud_init", optional=True, requires_replace=True, input_only=True)
    created_at: AttributeRef = AttributeRef("created_at", computed=True)
    description: AttributeRef = AttributeRef("description", computed=True)
    disk_size_in_gb: AttributeRef = AttributeRef("disk_size_in_gb", required=True, requires_replace=True)
    hostname: AttributeRef = AttributeRef("hostname", computed=True)
    mac: AttributeRef = AttributeRef("mac", computed=True)
    memory: AttributeRef = AttributeRef("memory", required=True, requires_replace=True)
    name: AttributeRef = AttributeRef("name", required=True, requires_replace=True)
    network_uuid: AttributeRef = AttributeRef("network_uuid", optional=True, computed=True)
    os_name: AttributeRef = AttributeRef("os_name", required=True, requires_replace=True)
    os_version: AttributeRef = AttributeRef("os_version", required=True, requires_replace=True)
    # Generated on create when not given.
    password: AttributeRef = AttributeRef(
        "password", optional=True, computed=True, requires_replace=True, sensitive=True, input_only=True,
    )
    private_ipv4: AttributeRef = AttributeRef("private_ipv4", computed=True)
    public_ipv6: AttributeRef = AttributeRef("public_ipv6", computed=True)
    public_key: AttributeRef = AttributeRef("public_key", optional=True, requires_replace=True, input_only=True)
    reserve_public_ip: AttributeRef = AttributeRef(
        "reserve_public_ip", optional=True, requires_replace=True, input_only=True,
    )
    source_replica: AttributeRef = AttributeRef("source_replica", optional=True, requires_replace=True, input_only=True)
    source_uuid: AttributeRef = AttributeRef("source_uuid", optional=True, requires_replace=True, input_only=True)
    status: AttributeRef = AttributeRef("status", computed=True)
    storage: AttributeRef = AttributeRef("storage", computed=True)
    updated_at: AttributeRef = AttributeRef("updated_at", computed=True)
    user_id: AttributeRef = AttributeRef("user_id", computed=True)
    username: AttributeRef = AttributeRef("username", optional=True, computed=True, requires_replace=True)
    vcpu: AttributeRef = AttributeRef("vcpu", required=True, requires_replace=True)


@dataclass(frozen=True)
class VirtualMachineSchema(WarrenResourceSchema):
    type_name: str = "warren_virtual_machine"
    properties: VirtualMachineProperties = VirtualMachineProperties()

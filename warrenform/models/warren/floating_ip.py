from dataclasses import dataclass

from warrenform.models.core.common import AttributeRef
from warrenform.models.core.resources import WarrenResourceProperties
from warrenform.models.core.resources import WarrenResourceSchema


@dataclass(frozen=True)
class FloatingIPProperties(WarrenResourceProperties):
    address: AttributeRef = AttributeRef("address", computed=True)
    assigned_to: AttributeRef = AttributeRef("assigned_to", optional=True, computed=True)
    assigned_to_private_ip: AttributeRef = AttributeRef("assigned_to_private_ip", computed=True)
    assigned_to_resource_type: AttributeRef = AttributeRef("assigned_to_resource_type", computed=True)
    billing_account: AttributeRef = AttributeRef("billing_account", optional=True, computed=True, requires_replace=True)
    created_at: AttributeRef = AttributeRef("created_at", computed=True)
    enabled: AttributeRef = AttributeRef("enabled", computed=True)
    is_ipv6: AttributeRef = AttributeRef("is_ipv6", computed=True)
    name: AttributeRef = AttributeRef("name", optional=True, computed=True, requires_replace=True)
    network_uuid: AttributeRef = AttributeRef("network_uuid", computed=True)
    type: AttributeRef = AttributeRef("type", computed=True)
    updated_at: AttributeRef = AttributeRef("updated_at", computed=True)
    user_id: AttributeRef = AttributeRef("user_id", computed=True)
    uuid: AttributeRef = AttributeRef("uuid", computed=True)


@dataclass(frozen=True)
class FloatingIPSchema(WarrenResourceSchema):
    type_name: str = "warren_floating_ip"
    properties: FloatingIPProperties = FloatingIPProperties()

from dataclasses import dataclass

from warrenform.models.core.common import AttributeRef
from warrenform.models.core.resources import WarrenResourceProperties
from warrenform.models.core.resources import WarrenResourceSchema


@dataclass(frozen=True)
class NetworkProperties(WarrenResourceProperties):
    created_at: AttributeRef = AttributeRef("created_at", computed=True)
    is_default: AttributeRef = AttributeRef("is_default", optional=True, computed=True)
    name: AttributeRef = AttributeRef("name", optional=True, computed=True)
    resources_count: AttributeRef = AttributeRef("resources_count", computed=True)
    server_uuids: AttributeRef = AttributeRef("server_uuids", computed=True)
    subnet_ipv4: AttributeRef = AttributeRef("subnet_ipv4", computed=True)
    subnet_ipv6: AttributeRef = AttributeRef("subnet_ipv6", computed=True)
    type: AttributeRef = AttributeRef("type", computed=True)
    updated_at: AttributeRef = AttributeRef("updated_at", computed=True)
    vlan_id: AttributeRef = AttributeRef("vlan_id", computed=True)


@dataclass(frozen=True)
class NetworkSchema(WarrenResourceSchema):
    type_name: str = "warren_network"
    properties: NetworkProperties = NetworkProperties()

from dataclasses import dataclass

from warrenform.models.core.common import AttributeRef
from warrenform.models.core.resources import WarrenResourceProperties
from warrenform.models.core.resources import WarrenResourceSchema


@dataclass(frozen=True)
class DiskProperties(WarrenResourceProperties):
    billing_account: AttributeRef = AttributeRef("billing_account", optional=True, computed=True, requires_replace=True)
    created_at: AttributeRef = AttributeRef("created_at", computed=True)
    # Re-parenting a disk is an in-place detach/attach.
    server_uuid: AttributeRef = AttributeRef("server_uuid", optional=True)
    size_in_gb: AttributeRef = AttributeRef("size_in_gb", required=True, requires_replace=True)
    snapshots: AttributeRef = AttributeRef("snapshots", computed=True)
    source_image_type: AttributeRef = AttributeRef(
        "source_image_type", optional=True, computed=True, requires_replace=True,
    )
    source_image_uuid: AttributeRef = AttributeRef(
        "source_image_uuid", optional=True, computed=True, requires_replace=True,
    )
    status: AttributeRef = AttributeRef("status", computed=True)
    status_comment: AttributeRef = AttributeRef("status_comment", computed=True)
    updated_at: AttributeRef = AttributeRef("updated_at", computed=True)
    user_id: AttributeRef = AttributeRef("user_id", computed=True)


@dataclass(frozen=True)
class DiskSchema(WarrenResourceSchema):
    type_name: str = "warren_disk"
    properties: DiskProperties = DiskProperties()

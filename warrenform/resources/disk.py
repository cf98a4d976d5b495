import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import requests

from warrenform.client import errors
from warrenform.client.api.block_storage import create_disk
from warrenform.client.api.block_storage import delete_disk
from warrenform.client.api.block_storage import get_disk
from warrenform.client.api.virtual_machine import attach_disk
from warrenform.client.api.virtual_machine import detach_disk
from warrenform.client.errors import ServerNotFoundError
from warrenform.client.errors import WarrenError
from warrenform.client.transport import WarrenClient
from warrenform.diff import ResourceDiff
from warrenform.models.warren.disk import DiskSchema
from warrenform.resources.base import classified_errors
from warrenform.resources.base import CreateTransaction
from warrenform.resources.base import Reconciler
from warrenform.resources.lookups import get_server_from_volume_uuid
from warrenform.util import to_int

logger = logging.getLogger(__name__)


# ============================================================================
# Transform
# ============================================================================


def transform_snapshots(snapshots: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "created_at": snapshot.get("created_at"),
            "disk_uuid": snapshot.get("disk_uuid"),
            "size_in_gb": snapshot.get("sizeGb"),
            "uuid": snapshot.get("uuid"),
        }
        for snapshot in snapshots or []
    ]


def transform_disk(disk: Dict[str, Any], server_uuid: Optional[str] = None) -> Dict[str, Any]:
    """
    Transform a platform disk into canonical state.

    :param disk: Disk object as returned by the block storage API.
    :param server_uuid: UUID of the server the disk is attached to, derived separately.
    """
    return {
        "id": disk.get("uuid"),
        "billing_account": disk.get("billing_account_id"),
        "created_at": disk.get("created_at"),
        "server_uuid": server_uuid,
        "size_in_gb": disk.get("size_gb"),
        "snapshots": transform_snapshots(disk.get("snapshots")),
        "source_image_type": disk.get("source_image_type"),
        "source_image_uuid": disk.get("source_image"),
        "status": disk.get("status"),
        "status_comment": disk.get("status_comment"),
        "updated_at": disk.get("updated_at"),
        "user_id": disk.get("user_id"),
    }


# ============================================================================
# Reconciler
# ============================================================================


class DiskReconciler(Reconciler):
    resource_type = errors.DISK
    schema = DiskSchema()

    def _get(self, client: WarrenClient, resource_id: str) -> Dict[str, Any]:
        return get_disk(client, resource_id)

    def _to_state(
        self,
        client: WarrenClient,
        remote: Dict[str, Any],
        prior: Dict[str, Any],
    ) -> Dict[str, Any]:
        server_uuid = self._owning_server_uuid(client, remote.get("uuid"))
        return self._carry_inputs(transform_disk(remote, server_uuid), prior)

    @staticmethod
    def _owning_server_uuid(
        client: WarrenClient,
        disk_uuid: Optional[str],
    ) -> Optional[str]:
        """
        UUID of the server holding the disk. None when no server does, and also
        when the lookup itself fails.
        """
        if not disk_uuid:
            return None
        try:
            return get_server_from_volume_uuid(client, disk_uuid).get("uuid")
        except ServerNotFoundError:
            return None
        except (WarrenError, requests.RequestException) as e:
            logger.warning("Could not look up the server of disk %s: %s", disk_uuid, e)
            return None

    def _create(
        self,
        client: WarrenClient,
        desired: Dict[str, Any],
        transaction: CreateTransaction,
    ) -> Dict[str, Any]:
        source_image = desired.get("source_image_uuid")
        source_image_type = desired.get("source_image_type") if source_image is not None else None

        with classified_errors(errors.DISK):
            disk = create_disk(
                client,
                size_gb=to_int(desired["size_in_gb"]),
                billing_account_id=to_int(desired.get("billing_account")),
                source_image_type=source_image_type,
                source_image=source_image,
            )
        transaction.record(disk["uuid"])

        server_uuid = desired.get("server_uuid")
        if server_uuid:
            logger.debug("Attaching disk %s to server %s.", disk["uuid"], server_uuid)
            with classified_errors(errors.VIRTUAL_MACHINE):
                attach_disk(client, server_uuid, disk["uuid"])

        return self._to_state(client, disk, desired)

    def _cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        delete_disk(client, transaction.created_id)

    def _update(
        self,
        client: WarrenClient,
        prior: Dict[str, Any],
        desired: Dict[str, Any],
        diff: ResourceDiff,
    ) -> Dict[str, Any]:
        if "server_uuid" in diff.update_fields:
            disk_uuid = prior["id"]
            old_server_uuid = prior.get("server_uuid")
            new_server_uuid = desired.get("server_uuid")
            with classified_errors(errors.VIRTUAL_MACHINE):
                if old_server_uuid:
                    logger.debug("Disk %s will be detached from server %s.", disk_uuid, old_server_uuid)
                    detach_disk(client, old_server_uuid, disk_uuid)
                if new_server_uuid:
                    logger.debug("Disk %s will be attached to server %s.", disk_uuid, new_server_uuid)
                    attach_disk(client, new_server_uuid, disk_uuid)
        return self._merged(prior, desired)

    def _delete(self, client: WarrenClient, remote: Dict[str, Any]) -> None:
        delete_disk(client, remote["uuid"])

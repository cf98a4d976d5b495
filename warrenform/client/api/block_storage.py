import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from warrenform.client.transport import WarrenClient
from warrenform.util import timeit

logger = logging.getLogger(__name__)

SOURCE_IMAGE_TYPES = ("OS_BASE", "DISK", "SNAPSHOT", "EXTERNAL", "EMPTY")


@timeit
def create_disk(
    client: WarrenClient,
    size_gb: Optional[int] = None,
    billing_account_id: Optional[int] = None,
    source_image_type: Optional[str] = None,
    source_image: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a disk, empty or cloned from a source image.

    Only the fields that are given are sent, form encoded.
    """
    params: Dict[str, Any] = {}
    if size_gb is not None:
        params["size_gb"] = size_gb
    if billing_account_id is not None:
        params["billing_account_id"] = billing_account_id
    if source_image_type is not None:
        if source_image_type not in SOURCE_IMAGE_TYPES:
            raise ValueError(
                f"Unknown source image type {source_image_type!r}, expected one of {', '.join(SOURCE_IMAGE_TYPES)}.",
            )
        params["source_image_type"] = source_image_type
    if source_image is not None:
        params["source_image"] = source_image
    return client.call("POST", "/storage/disks", form_params=params)


@timeit
def get_disk(client: WarrenClient, disk_uuid: str) -> Dict[str, Any]:
    return client.call("GET", f"/storage/disk/{disk_uuid}")


@timeit
def list_disks(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", "/storage/disks")


@timeit
def delete_disk(client: WarrenClient, disk_uuid: str) -> None:
    client.call("DELETE", f"/storage/disk/{disk_uuid}", decode=False)

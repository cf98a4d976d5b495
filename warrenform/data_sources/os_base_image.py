import uuid
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from warrenform.client import errors
from warrenform.client.api.virtual_machine import list_base_images
from warrenform.client.errors import ImageNotFoundError
from warrenform.client.transport import WarrenClient
from warrenform.resources.base import classified_errors


def transform_os_base_image(image: Dict[str, Any]) -> Dict[str, Any]:
    """
    Transform a platform OS base image. The platform has no identifier for an
    image, so a random UUID is generated for `id`.
    """
    return {
        "id": str(uuid.uuid4()),
        "display_name": image.get("display_name"),
        "icon": image.get("icon"),
        "is_app_catalog": image.get("is_app_catalog"),
        "is_default": image.get("is_default"),
        "os_name": image.get("os_name"),
        "ui_position": image.get("ui_position"),
        "versions": transform_image_versions(image.get("versions")),
    }


def transform_image_versions(versions: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "display_name": version.get("display_name"),
            "os_version": version.get("os_version"),
            "published": version.get("published"),
        }
        for version in versions or []
    ]


class OSBaseImageDataSource:
    def __init__(self, client: WarrenClient) -> None:
        self.client = client

    def read(
        self,
        display_name: Optional[str] = None,
        os_name: Optional[str] = None,
        os_version: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        if display_name is not None and os_name is not None:
            raise ValueError("OS base image lookup accepts either display_name or os_name, not both.")
        if display_name is None and os_name is None:
            raise ValueError("OS base image lookup needs display_name or os_name.")

        with classified_errors(errors.OS_BASE_IMAGE):
            images = list_base_images(self.client.for_location(location))

        for image in images:
            if display_name is not None and image.get("display_name") != display_name:
                continue
            if os_name is not None and image.get("os_name") != os_name:
                continue
            if os_version is not None and not any(
                version.get("os_version") == os_version for version in image.get("versions") or []
            ):
                continue
            result = transform_os_base_image(image)
            result["os_version"] = os_version
            return result

        version_constraint = f" (Version {os_version})" if os_version is not None else ""
        if display_name is not None:
            raise ImageNotFoundError(f"No match found for display name: {display_name}{version_constraint}")
        raise ImageNotFoundError(f"No match found for OS name: {os_name}{version_constraint}")

import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from warrenform.client import errors
from warrenform.client.api.location import list_locations
from warrenform.client.errors import LocationNotFoundError
from warrenform.client.transport import WarrenClient
from warrenform.resources.base import classified_errors

logger = logging.getLogger(__name__)


def transform_location(location: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": location.get("slug"),
        "country_code": location.get("country_code"),
        "description": location.get("description"),
        "display_name": location.get("display_name"),
        "is_default": location.get("is_default"),
        "is_preferred": location.get("is_preferred"),
        "order_nr": location.get("order_nr"),
        "slug": location.get("slug"),
    }


def format_flag(value: bool) -> str:
    return "true" if value else "false"


def describe_flags(flags: List[str]) -> str:
    return f" ({', '.join(flags)})" if flags else ""


class LocationDataSource:
    """
    Looks up one datacenter location by display name or slug, optionally
    constrained by the default and preferred flags.
    """

    def __init__(self, client: WarrenClient) -> None:
        self.client = client

    def read(
        self,
        display_name: Optional[str] = None,
        slug: Optional[str] = None,
        is_default: Optional[bool] = None,
        is_preferred: Optional[bool] = None,
    ) -> Dict[str, Any]:
        if display_name is not None and slug is not None:
            raise ValueError("Location lookup accepts either display_name or slug, not both.")
        if display_name is None and slug is None and is_default is None and is_preferred is None:
            raise ValueError("Location lookup needs at least one of display_name, slug, is_default or is_preferred.")

        with classified_errors(errors.LOCATION):
            locations = list_locations(self.client)

        for location in locations:
            if display_name is not None and location.get("display_name") != display_name:
                continue
            if slug is not None and location.get("slug") != slug:
                continue
            if is_default is not None and bool(location.get("is_default")) != is_default:
                continue
            if is_preferred is not None and bool(location.get("is_preferred")) != is_preferred:
                continue
            return transform_location(location)

        flags = []
        if is_default is not None:
            flags.append(f"Default {format_flag(is_default)}")
        if is_preferred is not None:
            flags.append(f"Preferred {format_flag(is_preferred)}")
        if display_name is not None:
            message = f"No match found for display name: {display_name}{describe_flags(flags)}"
        elif slug is not None:
            message = f"No match found for slug: {slug}{describe_flags(flags)}"
        else:
            message = f"No match found for parameter: {', '.join(flags)}"
        raise LocationNotFoundError(message)

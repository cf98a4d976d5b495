from typing import Any
from typing import Dict
from typing import Optional

from warrenform.client import errors
from warrenform.client.api.network import list_networks
from warrenform.client.errors import NetworkNotFoundError
from warrenform.client.transport import WarrenClient
from warrenform.data_sources.location import describe_flags
from warrenform.data_sources.location import format_flag
from warrenform.resources.base import classified_errors
from warrenform.resources.network import transform_network


class NetworkDataSource:
    def __init__(self, client: WarrenClient) -> None:
        self.client = client

    def read(
        self,
        name: Optional[str] = None,
        id: Optional[str] = None,
        is_default: Optional[bool] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Find a network by name or UUID, optionally restricted by the default flag.
        When both name and UUID are given, a network matching either one is
        accepted and the first such network in list order wins.
        """
        if name is None and id is None and is_default is None:
            raise ValueError("Network lookup needs at least one of name, id or is_default.")

        with classified_errors(errors.NETWORK):
            networks = list_networks(self.client.for_location(location))

        for network in networks:
            if name is not None or id is not None:
                name_matches = name is not None and network.get("name") == name
                id_matches = id is not None and network.get("uuid") == id
                if not name_matches and not id_matches:
                    continue
            if is_default is not None and bool(network.get("is_default")) != is_default:
                continue
            return transform_network(network)

        flags = [f"Default {format_flag(is_default)}"] if is_default is not None else []
        if name is not None:
            message = f"No match found for name: {name}{describe_flags(flags)}"
        elif id is not None:
            message = f"No match found for UUID: {id}{describe_flags(flags)}"
        else:
            message = f"No match found for parameter: {', '.join(flags)}"
        raise NetworkNotFoundError(message)

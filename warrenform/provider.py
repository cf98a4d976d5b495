import logging
import os
from typing import Dict
from typing import Optional
from typing import Tuple
from typing import Union

from warrenform.client.registry import ClientRegistry
from warrenform.client.transport import WarrenClient
from warrenform.data_sources.location import LocationDataSource
from warrenform.data_sources.network import NetworkDataSource
from warrenform.data_sources.os_base_image import OSBaseImageDataSource
from warrenform.resources.base import Reconciler
from warrenform.resources.disk import DiskReconciler
from warrenform.resources.floating_ip import FloatingIPReconciler
from warrenform.resources.network import NetworkReconciler
from warrenform.resources.virtual_machine import VirtualMachineReconciler

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.equinix.warren.io/v1"
API_TOKEN_ENV_VAR = "WARREN_API_TOKEN"
API_URL_ENV_VAR = "WARREN_API_URL"
API_LOCATION_ENV_VAR = "WARREN_API_LOCATION"

RESOURCE_TYPES = {
    "warren_disk": DiskReconciler,
    "warren_floating_ip": FloatingIPReconciler,
    "warren_network": NetworkReconciler,
    "warren_virtual_machine": VirtualMachineReconciler,
}

DATA_SOURCE_TYPES = {
    "warren_location": LocationDataSource,
    "warren_network": NetworkDataSource,
    "warren_os_base_image": OSBaseImageDataSource,
}

DataSource = Union[LocationDataSource, NetworkDataSource, OSBaseImageDataSource]


def split_api_url(api_url: str, location: Optional[str] = None) -> Tuple[str, str]:
    """
    Split an API URL into the base URL and the location slug.

    ``https://host/v1`` carries no location: the slug comes from `location`, else
    from WARREN_API_LOCATION. Any longer URL ends with the slug, e.g.
    ``https://host/v1/tll01``.
    """
    if api_url.endswith("/"):
        api_url = api_url[:-1]
    if api_url.count("/") == 3:
        return api_url, location or os.environ.get(API_LOCATION_ENV_VAR, "")
    base_url, _, slug = api_url.rpartition("/")
    return base_url, slug


class WarrenProvider:
    """
    Resolves credentials and endpoint, then hands the configured client to the
    reconcilers and data sources it builds.

    :param registry: Store of clients configured earlier in the process, keyed by token.
    """

    def __init__(self, registry: Optional[ClientRegistry] = None) -> None:
        self.registry = registry if registry is not None else ClientRegistry()
        self.client: Optional[WarrenClient] = None
        self._api_token: Optional[str] = None

    def configure(
        self,
        api_token: Optional[str] = None,
        api_url: Optional[str] = None,
        location: Optional[str] = None,
    ) -> WarrenClient:
        """
        Build or reuse the client.

        The token is the explicit one, else WARREN_API_TOKEN. Without an explicit URL
        a client registered for the token is reused; otherwise the URL comes from
        WARREN_API_URL, else the public default.
        """
        token = api_token or os.environ.get(API_TOKEN_ENV_VAR, "")
        if not token:
            raise ValueError(
                f"No Warren API token configured. Pass one explicitly or set {API_TOKEN_ENV_VAR}.",
            )

        client = None
        if not api_url:
            client = self.registry.get(token)
            if client is None:
                api_url = os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL
            else:
                logger.debug("Reusing the Warren client registered for this token.")
                client = client.for_location(location)

        if client is None:
            base_url, location_slug = split_api_url(api_url, location)
            client = WarrenClient(base_url, token, location_slug=location_slug)
            self.registry.set(token, client)

        self.client = client
        self._api_token = token
        logger.info(
            "Configured Warren API client for %s, location %s.",
            client.base_url,
            client.location_slug or "(none)",
        )
        return client

    def teardown(self) -> None:
        if self._api_token is not None:
            self.registry.remove(self._api_token)
        self.client = None
        self._api_token = None

    def _require_client(self) -> WarrenClient:
        if self.client is None:
            raise RuntimeError("The Warren provider has not been configured.")
        return self.client

    def resources(self) -> Dict[str, Reconciler]:
        client = self._require_client()
        return {type_name: reconciler(client) for type_name, reconciler in RESOURCE_TYPES.items()}

    def data_sources(self) -> Dict[str, DataSource]:
        client = self._require_client()
        return {type_name: data_source(client) for type_name, data_source in DATA_SOURCE_TYPES.items()}

    def resource(self, type_name: str) -> Reconciler:
        if type_name not in RESOURCE_TYPES:
            raise KeyError(f"Unknown Warren resource type: {type_name}")
        return RESOURCE_TYPES[type_name](self._require_client())

    def data_source(self, type_name: str) -> DataSource:
        if type_name not in DATA_SOURCE_TYPES:
            raise KeyError(f"Unknown Warren data source: {type_name}")
        return DATA_SOURCE_TYPES[type_name](self._require_client())

from typing import Any
from typing import Dict
from typing import List

from warrenform.client.transport import WarrenClient
from warrenform.util import timeit


@timeit
def list_locations(client: WarrenClient) -> List[Dict[str, Any]]:
    return client.call("GET", "/config/locations")

import logging
import threading
from typing import Dict
from typing import Optional

from warrenform.client.transport import WarrenClient

logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    Thread-safe store of configured clients, keyed by API token.

    Owned by the provider bootstrap and passed to whatever needs to reuse a
    client configured earlier in the process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clients: Dict[str, WarrenClient] = {}

    def get(self, api_token: str) -> Optional[WarrenClient]:
        with self._lock:
            return self._clients.get(api_token)

    def set(self, api_token: str, client: WarrenClient) -> None:
        with self._lock:
            self._clients[api_token] = client

    def remove(self, api_token: str) -> Optional[WarrenClient]:
        with self._lock:
            return self._clients.pop(api_token, None)

    def clear(self) -> None:
        with self._lock:
            self._clients.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, api_token: object) -> bool:
        with self._lock:
            return api_token in self._clients

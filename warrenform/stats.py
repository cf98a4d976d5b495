from typing import Optional

from statsd import StatsClient


class ScopedStatsClient:
    """
    Wraps a StatsD client so metric names carry a dotted scope prefix.
    Every call is a no-op until a real client is installed with set_stats_client.
    """

    _client: Optional[StatsClient] = None

    def __init__(self, prefix: Optional[str] = None, root: "Optional[ScopedStatsClient]" = None):
        self._scope_prefix = prefix
        self._root = root or self

    def get_stats_client(self, scope: str) -> "ScopedStatsClient":
        if not self._scope_prefix:
            prefix = scope
        else:
            prefix = f"{self._scope_prefix}.{scope}"
        return ScopedStatsClient(prefix, self._root)

    @staticmethod
    def is_enabled() -> bool:
        return ScopedStatsClient._client is not None

    def _scoped(self, stat: str) -> str:
        if self._scope_prefix:
            return f"{self._scope_prefix}.{stat}"
        return stat

    def incr(self, stat: str, count: int = 1, rate: float = 1.0) -> None:
        if self.is_enabled():
            self._client.incr(self._scoped(stat), count, rate)

    def timer(self, stat: str, rate: float = 1.0):
        if self.is_enabled():
            return self._client.timer(self._scoped(stat), rate)
        return None

    def gauge(self, stat: str, value: int, rate: float = 1.0, delta: bool = False) -> None:
        if self.is_enabled():
            self._client.gauge(self._scoped(stat), value, rate, delta)

    @staticmethod
    def set_stats_client(stats_client: Optional[StatsClient]) -> None:
        ScopedStatsClient._client = stats_client


_scoped_stats_client = ScopedStatsClient(None)


def set_stats_client(stats_client: Optional[StatsClient]) -> None:
    _scoped_stats_client.set_stats_client(stats_client)


def get_stats_client(prefix: str) -> ScopedStatsClient:
    return _scoped_stats_client.get_stats_client(prefix)

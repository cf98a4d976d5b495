import argparse
import logging
from typing import Union

from dynaconf import Dynaconf

from warrenform.config import Config

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 60
DEFAULT_RATE_LIMIT_MAX_TRIES = 1

settings = Dynaconf(
    includes=["settings.toml"],
    load_dotenv=True,
    merge_enabled=True,
    envvar_prefix="WARRENFORM",
)


def get_http_timeout() -> int:
    return int(settings.get("common", {}).get("http_timeout") or DEFAULT_HTTP_TIMEOUT)


def get_rate_limit_max_tries() -> int:
    """
    Number of attempts a platform call answered with HTTP 429 gets.

    Values below 1 are clamped to 1, which disables retrying.
    """
    raw = settings.get("common", {}).get("rate_limit_max_tries")
    if raw is None:
        return DEFAULT_RATE_LIMIT_MAX_TRIES
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid rate_limit_max_tries setting %r. Falling back to %d.",
            raw,
            DEFAULT_RATE_LIMIT_MAX_TRIES,
        )
        return DEFAULT_RATE_LIMIT_MAX_TRIES
    return max(value, 1)


def populate_settings_from_config(config: Union[Config, argparse.Namespace]):
    """
    Populate settings from a Config object.

    Only values explicitly set on the config override what settings.toml,
    .env or WARRENFORM_* environment variables provided.

    Args:
        config (Config): The Config object containing the settings.
    """
    if getattr(config, "http_timeout", None):
        settings.update({"common": {"http_timeout": config.http_timeout}})
    if getattr(config, "rate_limit_max_tries", None):
        settings.update(
            {"common": {"rate_limit_max_tries": config.rate_limit_max_tries}},
        )

    if getattr(config, "statsd_enabled", False):
        settings.update(
            {
                "statsd": {
                    "enabled": True,
                    "prefix": config.statsd_prefix or "",
                    "host": config.statsd_host or "127.0.0.1",
                    "port": config.statsd_port or 8125,
                },
            }
        )

import argparse
import json
import logging
import os
import sys
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import requests
from statsd import StatsClient

import warrenform.version
from warrenform.client.errors import WarrenError
from warrenform.provider import API_TOKEN_ENV_VAR
from warrenform.provider import WarrenProvider
from warrenform.settings import populate_settings_from_config
from warrenform.settings import settings
from warrenform.stats import set_stats_client
from warrenform.util import STATUS_FAILURE
from warrenform.util import STATUS_KEYBOARD_INTERRUPT
from warrenform.util import STATUS_SUCCESS

logger = logging.getLogger(__name__)

RESOURCE_OPERATIONS = ("create", "read", "update", "delete", "import")
VM_OPERATIONS = ("start", "stop")
DATA_SOURCE_OPERATIONS = ("lookup",)
RESOURCES = ("disk", "floating_ip", "network", "virtual_machine")
DATA_SOURCES = ("location", "network", "os_base_image")
DATA_SOURCE_FILTERS = {
    "location": ("display_name", "slug", "is_default", "is_preferred"),
    "network": ("name", "id", "is_default"),
    "os_base_image": ("display_name", "os_name", "os_version"),
}
SENSITIVE_PLACEHOLDER = "(sensitive value)"


def _load_json(path: str) -> Dict[str, Any]:
    if path == "-":
        return json.load(sys.stdin)
    with open(path) as f:
        return json.load(f)


def _parse_filters(filters: List[str]) -> Dict[str, Any]:
    """
    Parse KEY=VALUE lookup filters. true and false become booleans, anything else
    stays a string so versions like 22.04 keep their text.
    """
    parsed: Dict[str, Any] = {}
    for item in filters:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid filter {item!r}, expected KEY=VALUE.")
        if raw.lower() in ("true", "false"):
            parsed[key] = raw.lower() == "true"
        else:
            parsed[key] = raw
    return parsed


def _redact(state: Optional[Dict[str, Any]], sensitive: List[str]) -> Optional[Dict[str, Any]]:
    if state is None:
        return None
    return {
        key: SENSITIVE_PLACEHOLDER if key in sensitive and value is not None else value
        for key, value in state.items()
    }


def configure_stats_client() -> None:
    if not settings.get("statsd", {}).get("enabled", False):
        return
    statsd_host = settings.get("statsd", {}).get("host", "127.0.0.1")
    statsd_port = settings.get("statsd", {}).get("port", 8125)
    statsd_prefix = settings.get("statsd", {}).get("prefix", "")
    logger.debug(
        f"statsd enabled. Sending metrics to server {statsd_host}:{statsd_port}. "
        f'Metrics have prefix "{statsd_prefix}".',
    )
    set_stats_client(
        StatsClient(
            host=statsd_host,
            port=statsd_port,
            prefix=statsd_prefix,
        ),
    )


class CLI:
    """
    :type provider: warrenform.provider.WarrenProvider
    :param provider: The provider the command line program configures and runs operations with.
    :type prog: string
    :param prog: The name of the command line program. This will be displayed in usage and help output.
    """

    def __init__(self, provider: Optional[WarrenProvider] = None, prog: Optional[str] = None):
        self.provider = provider if provider else WarrenProvider()
        self.prog = prog
        self.parser = self._build_parser()

    def _build_parser(self):
        """
        :rtype: argparse.ArgumentParser
        :return: A warrenform argument parser. Calling parse_args on the argument parser will return an object which
            implements the warrenform.config.Config interface.
        """
        parser = argparse.ArgumentParser(
            prog=self.prog,
            description=(
                "warrenform runs single reconcile operations against the Warren cloud platform. Each invocation "
                "creates, reads, updates, deletes or imports one resource (disk, floating IP, network, virtual "
                "machine), or looks up one data source (location, network, OS base image), and prints the resulting "
                "state as JSON. Desired configuration and prior state are read from JSON files."
            ),
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable verbose logging for warrenform.",
        )
        parser.add_argument(
            "-q",
            "--quiet",
            action="store_true",
            help="Restrict warrenform logging to warnings and errors only.",
        )
        parser.add_argument(
            "--version",
            action="store_true",
            help="Print the warrenform version and exit.",
        )
        parser.add_argument(
            "--api-url",
            type=str,
            default=None,
            help=(
                "The Warren API URL, optionally ending with a location slug, e.g. https://api.example.com/v1/tll01. "
                "Defaults to WARREN_API_URL, then to the public Warren API."
            ),
        )
        parser.add_argument(
            "--api-token-env-var",
            type=str,
            default=API_TOKEN_ENV_VAR,
            help=f"The name of an environment variable containing the Warren API token. Default = {API_TOKEN_ENV_VAR}.",
        )
        parser.add_argument(
            "--location",
            type=str,
            default=None,
            help="The location slug to use when the API URL carries none. Defaults to WARREN_API_LOCATION.",
        )
        parser.add_argument(
            "--http-timeout",
            type=int,
            default=None,
            help="Connect and read timeout in seconds for platform calls. Default = 60.",
        )
        parser.add_argument(
            "--rate-limit-max-tries",
            type=int,
            default=None,
            help=(
                "Number of attempts for a call answered with HTTP 429, with exponential backoff between them. "
                "Default = 1, which reports rate limiting as a failure right away."
            ),
        )
        parser.add_argument(
            "--statsd-enabled",
            action="store_true",
            help="If set, enables sending metrics using statsd to a server of your choice.",
        )
        parser.add_argument(
            "--statsd-prefix",
            type=str,
            default="",
            help="The string to prefix statsd metrics with. Only used if --statsd-enabled is on. Default = empty string.",
        )
        parser.add_argument(
            "--statsd-host",
            type=str,
            default="127.0.0.1",
            help="The IP address of your statsd server. Only used if --statsd-enabled is on. Default = 127.0.0.1.",
        )
        parser.add_argument(
            "--statsd-port",
            type=int,
            default=8125,
            help="The port of your statsd server. Only used if --statsd-enabled is on. Default = UDP 8125.",
        )
        parser.add_argument(
            "--id",
            type=str,
            default=None,
            help="The resource ID. Required for import, and for other operations when --prior is not given.",
        )
        parser.add_argument(
            "--desired",
            type=str,
            default=None,
            help="Path to a JSON file with the desired configuration, or - for stdin. Used by create and update.",
        )
        parser.add_argument(
            "--prior",
            type=str,
            default=None,
            help="Path to a JSON file with the prior state. Used by read, update, delete, start and stop.",
        )
        parser.add_argument(
            "--filter",
            action="append",
            default=[],
            help="A KEY=VALUE data source filter, e.g. slug=tll01 or is_default=true. Can be repeated.",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Force the stop operation of a virtual machine.",
        )
        parser.add_argument(
            "--show-sensitive",
            action="store_true",
            help="Print sensitive attributes such as generated passwords instead of masking them.",
        )
        parser.add_argument(
            "kind",
            nargs="?",
            choices=sorted(set(RESOURCES) | set(DATA_SOURCES)),
            help="The resource or data source to operate on.",
        )
        parser.add_argument(
            "operation",
            nargs="?",
            choices=RESOURCE_OPERATIONS + VM_OPERATIONS + DATA_SOURCE_OPERATIONS,
            help="The operation to run. Data sources support lookup only.",
        )
        return parser

    def _prior_state(self, config: argparse.Namespace) -> Dict[str, Any]:
        if config.prior:
            return _load_json(config.prior)
        if config.id:
            return {"id": config.id, "location": config.location}
        raise ValueError(f"The {config.operation} operation needs --prior or --id.")

    def _desired(self, config: argparse.Namespace) -> Dict[str, Any]:
        if not config.desired:
            raise ValueError(f"The {config.operation} operation needs --desired.")
        return _load_json(config.desired)

    def run_operation(self, config: argparse.Namespace) -> Optional[Dict[str, Any]]:
        """
        Run the requested operation with the configured provider.

        :return: The resulting state, or None when there is none (delete, read of a deleted resource).
        """
        if config.operation in DATA_SOURCE_OPERATIONS:
            if config.kind not in DATA_SOURCES:
                raise ValueError(f"{config.kind} is not a data source.")
            filters = _parse_filters(config.filter)
            unknown = sorted(set(filters) - set(DATA_SOURCE_FILTERS[config.kind]))
            if unknown:
                raise ValueError(
                    f"Unknown {config.kind} filter: {', '.join(unknown)}. "
                    f"Supported filters: {', '.join(DATA_SOURCE_FILTERS[config.kind])}.",
                )
            data_source = self.provider.data_source(f"warren_{config.kind}")
            return data_source.read(**filters)

        if config.kind not in RESOURCES:
            raise ValueError(f"{config.kind} is not a resource.")
        reconciler = self.provider.resource(f"warren_{config.kind}")

        if config.operation == "create":
            return reconciler.create(self._desired(config))
        if config.operation == "read":
            state = reconciler.read(self._prior_state(config))
            if state is None:
                logger.info("The %s no longer exists.", config.kind)
            return state
        if config.operation == "update":
            return reconciler.update(self._prior_state(config), self._desired(config))
        if config.operation == "delete":
            reconciler.delete(self._prior_state(config))
            return None
        if config.operation == "import":
            if not config.id:
                raise ValueError("The import operation needs --id.")
            return reconciler.import_state(config.id, location=config.location)

        if config.kind != "virtual_machine":
            raise ValueError(f"The {config.operation} operation applies to virtual machines only.")
        if config.operation == "start":
            return reconciler.start(self._prior_state(config))
        return reconciler.stop(self._prior_state(config), force=config.force)

    def main(self, argv: List[str]) -> int:
        """
        Entrypoint for the command line interface.

        :type argv: list of strings
        :param argv: The parameters supplied to the command line program.
        """
        config: argparse.Namespace = self.parser.parse_args(argv)
        # Logging config
        if config.verbose:
            logging.getLogger("warrenform").setLevel(logging.DEBUG)
        elif config.quiet:
            logging.getLogger("warrenform").setLevel(logging.WARNING)
        else:
            logging.getLogger("warrenform").setLevel(logging.INFO)

        if config.version:
            print(warrenform.version.get_version_string())
            return STATUS_SUCCESS

        if not config.kind or not config.operation:
            self.parser.print_usage()
            logger.error("Both a resource (or data source) and an operation are required.")
            return STATUS_FAILURE

        logger.debug(
            "Launching warrenform with CLI configuration: %r",
            {key: value for key, value in vars(config).items() if key != "api_token"},
        )

        if config.api_token_env_var:
            logger.debug("Reading the Warren API token from environment variable %s.", config.api_token_env_var)
            config.api_token = os.environ.get(config.api_token_env_var)
        else:
            config.api_token = None

        populate_settings_from_config(config)
        configure_stats_client()

        try:
            self.provider.configure(
                api_token=config.api_token,
                api_url=config.api_url,
                location=config.location,
            )
            state = self.run_operation(config)
        except KeyboardInterrupt:
            return STATUS_KEYBOARD_INTERRUPT
        except (WarrenError, requests.RequestException, ValueError, KeyError, OSError) as e:
            logger.error("warrenform %s %s failed: %s", config.kind, config.operation, e)
            return STATUS_FAILURE

        sensitive: List[str] = []
        if not config.show_sensitive and config.kind in RESOURCES and config.operation != "lookup":
            sensitive = self.provider.resource(f"warren_{config.kind}").schema.sensitive_attributes()
        print(json.dumps(_redact(state, sensitive), indent=2, sort_keys=True))
        return STATUS_SUCCESS


def main(argv=None):
    """
    Entrypoint for the default warrenform command line interface.

    :rtype: int
    :return: The return code.
    """
    logging.basicConfig(level=logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    argv = argv if argv is not None else sys.argv[1:]
    sys.exit(CLI(prog="warrenform").main(argv))

class Config:
    """
    A common interface for warrenform configuration.

    All fields defined on this class must be present on a configuration object. Fields documented as required must
    contain valid values. Fields documented as optional may contain None, in which case warrenform will choose a
    sensible default value for that piece of configuration.

    :type api_url: string
    :param api_url: Warren API base URL, optionally ending with a location slug. Optional.
    :type api_token: string
    :param api_token: Warren API token. Optional, falls back to the WARREN_API_TOKEN environment variable.
    :type location: string
    :param location: Location slug used when the API URL carries none. Optional.
    :type http_timeout: int
    :param http_timeout: Connect and read timeout in seconds for platform calls. Optional.
    :type rate_limit_max_tries: int
    :param rate_limit_max_tries: Number of attempts for a call answered with HTTP 429. Optional, 1 disables retries.
    :type statsd_enabled: bool
    :param statsd_enabled: Whether to collect statsd metrics. Optional.
    :type statsd_prefix: string
    :param statsd_prefix: The prefix for statsd metrics. Optional.
    :type statsd_host: string
    :param statsd_host: The IP address of the statsd server. Optional.
    :type statsd_port: int
    :param statsd_port: The port of the statsd server. Optional.
    """

    def __init__(
        self,
        api_url=None,
        api_token=None,
        location=None,
        http_timeout=None,
        rate_limit_max_tries=None,
        statsd_enabled=False,
        statsd_prefix=None,
        statsd_host=None,
        statsd_port=None,
    ):
        self.api_url = api_url
        self.api_token = api_token
        self.location = location
        self.http_timeout = http_timeout
        self.rate_limit_max_tries = rate_limit_max_tries
        self.statsd_enabled = statsd_enabled
        self.statsd_prefix = statsd_prefix
        self.statsd_host = statsd_host
        self.statsd_port = statsd_port

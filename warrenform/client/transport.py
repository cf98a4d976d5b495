import json
import logging
from typing import Any
from typing import Dict
from typing import Optional
from urllib.parse import urlsplit
from urllib.parse import urlunsplit

import requests

from warrenform.client.errors import MalformedResponseError
from warrenform.client.errors import WarrenAPIError
from warrenform.client.errors import WarrenHTTPError
from warrenform.settings import get_http_timeout
from warrenform.settings import get_rate_limit_max_tries
from warrenform.util import backoff_handler
from warrenform.util import retries_with_backoff
from warrenform.version import get_user_agent
from warrenform.version import WARREN_API_VERSION

logger = logging.getLogger(__name__)

API_VERSION_PATH = f"/{WARREN_API_VERSION}"
CORRELATION_ID_HEADER = "X-Warren-Correlation-Id"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def _encode_form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_rate_limited(err: Exception) -> bool:
    return isinstance(err, WarrenHTTPError) and err.status_code == 429


class WarrenClient:
    """
    Authenticated client for the Warren REST API.

    Every call goes to ``{scheme}://{host}/v1[/{location}]{path}``. The path of
    the base URL is ignored; the location segment comes from the per-call
    override or from the client's location slug.

    :param base_url: URL of the API host, e.g. ``https://api.example.com/v1``.
    :param api_token: Token sent in the ``apikey`` header.
    :param location_slug: Default location of the calls, may be empty.
    :param request_timeout: Connect and read timeout in seconds. Defaults to the
        ``common.http_timeout`` setting.
    :param rate_limit_max_tries: Attempts for a call answered with HTTP 429.
        Defaults to the ``common.rate_limit_max_tries`` setting. 1 disables retries.
    :param session: An existing requests session to share.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        location_slug: Optional[str] = None,
        request_timeout: Optional[int] = None,
        rate_limit_max_tries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        parsed = urlsplit(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid Warren API URL: {base_url!r}")
        self.base_url = base_url
        self.location_slug = location_slug or ""
        self._scheme = parsed.scheme
        self._netloc = parsed.netloc
        self._api_token = api_token
        if request_timeout is None:
            request_timeout = get_http_timeout()
        self._timeout = (request_timeout, request_timeout)
        if rate_limit_max_tries is None:
            rate_limit_max_tries = get_rate_limit_max_tries()
        self._rate_limit_max_tries = max(rate_limit_max_tries, 1)

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "apikey": api_token,
                "User-Agent": get_user_agent(),
            },
        )

    def __repr__(self) -> str:
        return f"WarrenClient(base_url={self.base_url!r}, location_slug={self.location_slug!r})"

    def for_location(self, location_slug: Optional[str]) -> "WarrenClient":
        """
        Client bound to another location. Returns self when the slug is empty or unchanged.
        """
        if not location_slug or location_slug == self.location_slug:
            return self
        logger.debug("Reconfiguring Warren client for location %s.", location_slug)
        return WarrenClient(
            self.base_url,
            self._api_token,
            location_slug=location_slug,
            request_timeout=self._timeout[0],
            rate_limit_max_tries=self._rate_limit_max_tries,
            session=self._session,
        )

    def build_url(self, path: str, location: Optional[str] = None) -> str:
        slug = location or self.location_slug
        full_path = API_VERSION_PATH
        if slug:
            full_path += f"/{slug}"
        full_path += path
        return urlunsplit((self._scheme, self._netloc, full_path, "", ""))

    def call(
        self,
        method: str,
        path: str,
        query_params: Optional[Dict[str, Any]] = None,
        form_params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        location: Optional[str] = None,
        decode: bool = True,
    ) -> Any:
        """
        Execute one API call and return the decoded JSON body.

        Non-empty form parameters win over a JSON body; a request never carries both.

        :param method: HTTP method.
        :param path: Path below the location segment, starting with ``/``.
        :param query_params: Query string parameters.
        :param form_params: Fields sent URL-form encoded.
        :param json_body: Object sent JSON encoded. An empty dict is still sent.
        :param location: Location slug overriding the client's one for this call.
        :param decode: Whether a successful response body is decoded.
        :return: Decoded body, or None when decode is False.
        :raises WarrenAPIError: The platform answered with a status >= 300.
        :raises MalformedResponseError: The body could not be decoded.
        :raises requests.RequestException: The request never got a response.
        """
        url = self.build_url(path, location)
        headers: Dict[str, str] = {}
        data: Optional[Any] = None
        if form_params:
            headers["Content-Type"] = FORM_CONTENT_TYPE
            data = {key: _encode_form_value(value) for key, value in form_params.items()}
        elif json_body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            data = json.dumps(json_body)

        if self._rate_limit_max_tries > 1:
            send = retries_with_backoff(
                func=self._send,
                exception_type=WarrenHTTPError,
                max_tries=self._rate_limit_max_tries,
                on_backoff=backoff_handler,
                giveup=lambda err: not _is_rate_limited(err),
            )
        else:
            send = self._send
        return send(method, url, query_params, data, headers, decode)

    def _send(
        self,
        method: str,
        url: str,
        query_params: Optional[Dict[str, Any]],
        data: Optional[Any],
        headers: Dict[str, str],
        decode: bool,
    ) -> Any:
        logger.debug("Calling Warren API: %s %s", method, url)
        response = self._session.request(
            method,
            url,
            params=query_params,
            data=data,
            headers=headers,
            timeout=self._timeout,
        )
        correlation_id = response.headers.get(CORRELATION_ID_HEADER)
        if response.status_code >= 300:
            raise self._build_error(response, correlation_id)
        if not decode:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                None,
                f"failed to parse response: {e}",
                body=response.text,
                correlation_id=correlation_id,
            ) from e

    @staticmethod
    def _build_error(
        response: requests.Response,
        correlation_id: Optional[str],
    ) -> WarrenHTTPError:
        status_code = response.status_code
        body = response.text
        if not body:
            return MalformedResponseError(
                status_code,
                "empty error response",
                correlation_id=correlation_id,
            )
        try:
            payload = json.loads(body)
        except ValueError as e:
            return MalformedResponseError(
                status_code,
                f"failed to parse error response, body: {body}, err: {e}",
                body=body,
                correlation_id=correlation_id,
            )
        message = payload.get("message") if isinstance(payload, dict) else None
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if not message and not errors:
            return MalformedResponseError(
                status_code,
                f"failed to parse meaningful data from error response, body: {body}",
                body=body,
                correlation_id=correlation_id,
            )
        return WarrenAPIError(status_code, message, errors, correlation_id)

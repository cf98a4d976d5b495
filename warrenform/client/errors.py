"""
Error taxonomy for the Warren platform and the classifier that maps raw
transport failures onto it.

Transport failures rooted in an HTTP response render as ``[NNN] ...`` and
carry the status code as an attribute. The classifier prefers that typed
status and only falls back to parsing the text prefix for errors raised
elsewhere.
"""
import enum
import re
from typing import Any
from typing import Dict
from typing import Optional

# Resource type keys understood by classify_error.
VIRTUAL_MACHINE = "virtual_machine"
DISK = "disk"
NETWORK = "network"
FLOATING_IP = "floating_ip"
LOCATION = "location"
OS_BASE_IMAGE = "os_base_image"

NO_SUCH_VIRTUAL_MACHINE = "No such virtual machine exists"

_STATUS_PREFIX = re.compile(r"^\[(\d{3})\]")


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    LOCKED = "locked"
    RATE_LIMITED = "rate_limited"
    INTERNAL_UNKNOWN = "internal_unknown"
    MALFORMED_RESPONSE = "malformed_response"
    CONFIGURATION_MISMATCH = "configuration_mismatch"
    UNSUPPORTED = "unsupported"
    PASSTHROUGH = "passthrough"


class WarrenError(Exception):
    """Base class for every error raised by warrenform."""

    kind = ErrorKind.PASSTHROUGH


# ============================================================================
# Transport errors
# ============================================================================


class WarrenHTTPError(WarrenError):
    """A failure rooted in an HTTP response of the platform."""

    def __init__(
        self,
        status_code: Optional[int],
        detail: str,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.correlation_id = correlation_id
        super().__init__(str(self))

    def __str__(self) -> str:
        text = self.detail
        if self.correlation_id:
            text = f"{text} {self.correlation_id}"
        if self.status_code is None:
            return text
        return f"[{self.status_code:3d}] {text}"


class WarrenAPIError(WarrenHTTPError):
    """The platform answered with a status >= 300 and a well-formed error body."""

    def __init__(
        self,
        status_code: int,
        message: Optional[str],
        errors: Optional[Dict[str, Any]],
        correlation_id: Optional[str] = None,
    ) -> None:
        self.message = message
        self.errors = errors or {}
        super().__init__(
            status_code,
            f"{message or ''}, {self.errors}",
            correlation_id,
        )


class MalformedResponseError(WarrenHTTPError):
    """
    The response body could not be decoded into the expected shape.

    status_code is set when the response was an error response and None when a
    successful response carried an undecodable body.
    """

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(
        self,
        status_code: Optional[int],
        detail: str,
        body: str = "",
        correlation_id: Optional[str] = None,
    ) -> None:
        self.body = body
        super().__init__(status_code, detail, correlation_id)


# ============================================================================
# Classified errors
# ============================================================================


class NotFoundError(WarrenError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class ServerNotFoundError(NotFoundError):
    default_message = "Server not found"


class VolumeNotFoundError(NotFoundError):
    default_message = "Volume not found"


class NetworkNotFoundError(NotFoundError):
    default_message = "Network not found"


class FloatingIPNotFoundError(NotFoundError):
    default_message = "Floating IP not found"


class LocationNotFoundError(NotFoundError):
    default_message = "Location not found"


class ImageNotFoundError(NotFoundError):
    default_message = "Image not found"


class ServerLockedError(WarrenError):
    kind = ErrorKind.LOCKED

    def __init__(self, message: str = "Server is locked") -> None:
        super().__init__(message)


class RateLimitExceededError(WarrenError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = "API rate limit exceeded error") -> None:
        super().__init__(message)


class InternalAPIError(WarrenError):
    kind = ErrorKind.INTERNAL_UNKNOWN

    def __init__(self, original: BaseException) -> None:
        self.original = original
        super().__init__(f"Internal API error: {original}")


class ConfigurationMismatchError(WarrenError):
    """Existing remote state contradicts the declared configuration. Never retried."""

    kind = ErrorKind.CONFIGURATION_MISMATCH


class UnsupportedOperationError(WarrenError):
    kind = ErrorKind.UNSUPPORTED


class ReconcileError(WarrenError):
    """
    A reconcile operation failed. The classified error is chained as __cause__
    and its kind is exposed on the reconcile error.
    """

    def __init__(
        self,
        resource_type: str,
        operation: str,
        identity: Optional[str],
        cause: BaseException,
    ) -> None:
        self.resource_type = resource_type
        self.operation = operation
        self.identity = identity
        self.kind = error_kind(cause)
        target = f"{resource_type} {identity}" if identity else resource_type
        super().__init__(f"Failed to {operation} {target}: {cause}")


# ============================================================================
# Classifier
# ============================================================================


def get_status_code(err: BaseException) -> Optional[int]:
    """
    Status code of a transport error: the typed attribute when present, else
    the three digits of a leading ``[NNN]`` in the message.
    """
    status_code = getattr(err, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    match = _STATUS_PREFIX.match(str(err))
    if match:
        return int(match.group(1))
    return None


def _classify_virtual_machine(status_code: int, text: str) -> Optional[WarrenError]:
    if status_code == 400 and NO_SUCH_VIRTUAL_MACHINE in text:
        return ServerNotFoundError()
    if status_code == 404:
        return ServerNotFoundError()
    if status_code == 409:
        return ServerLockedError()
    return None


def _not_found_on_404(error_class):
    def classify(status_code: int, text: str) -> Optional[WarrenError]:
        if status_code == 404:
            return error_class()
        return None

    return classify


_RESOURCE_CLASSIFIERS = {
    VIRTUAL_MACHINE: _classify_virtual_machine,
    DISK: _not_found_on_404(VolumeNotFoundError),
    NETWORK: _not_found_on_404(NetworkNotFoundError),
    FLOATING_IP: _not_found_on_404(FloatingIPNotFoundError),
    LOCATION: _not_found_on_404(LocationNotFoundError),
    OS_BASE_IMAGE: _not_found_on_404(ImageNotFoundError),
}


def classify_error(err: BaseException, resource_type: Optional[str] = None) -> BaseException:
    """
    Map a transport error to the domain taxonomy.

    Pure function. Errors that are already classified, or that carry no status
    (network failures, local validation errors), come back unchanged. The
    returned error has the original chained as __cause__.

    :param err: The error raised by the transport or an API binding.
    :param resource_type: One of the resource type keys of this module. Selects
        the per-resource table consulted before the common one.
    :return: The classified error, or err itself.
    """
    if isinstance(err, WarrenError) and not isinstance(err, WarrenHTTPError):
        return err
    status_code = get_status_code(err)
    if status_code is None:
        return err

    classified: Optional[BaseException] = None
    resource_classifier = _RESOURCE_CLASSIFIERS.get(resource_type or "")
    if resource_classifier:
        classified = resource_classifier(status_code, str(err))
    if classified is None:
        if status_code == 429:
            classified = RateLimitExceededError()
        elif status_code >= 500:
            classified = InternalAPIError(err)
    if classified is None:
        return err
    classified.__cause__ = err
    return classified


def error_kind(err: BaseException) -> ErrorKind:
    return getattr(err, "kind", ErrorKind.PASSTHROUGH)


def is_not_found(err: BaseException) -> bool:
    return error_kind(err) is ErrorKind.NOT_FOUND

import logging
import secrets
import string
from functools import wraps
from typing import Any
from typing import Callable
from typing import cast
from typing import Dict
from typing import Optional
from typing import Type
from typing import TypeVar

import backoff

from warrenform.stats import get_stats_client

logger = logging.getLogger(__name__)

STATUS_SUCCESS = 0
STATUS_FAILURE = 1
STATUS_KEYBOARD_INTERRUPT = 130

PASSWORD_LENGTH = 32
PASSWORD_ALPHABET = string.ascii_letters + string.digits

F = TypeVar("F", bound=Callable[..., Any])


def timeit(method: F) -> F:
    """
    Send the run time of the decorated function to statsd, when a stats client is enabled.
    The metric is named after the function and scoped by its module.
    """
    stats_client = get_stats_client(method.__module__)

    @wraps(method)
    def timed(*args, **kwargs):  # type: ignore
        if stats_client.is_enabled():
            timer = stats_client.timer(method.__name__)
            timer.start()
            result = method(*args, **kwargs)
            timer.stop()
            return result
        return method(*args, **kwargs)

    return cast(F, timed)


def backoff_handler(details: Dict) -> None:
    """
    Custom backoff handler for use with the backoff library.
    Details dict documented at https://github.com/litl/backoff#event-handlers
    """
    logger.warning(
        "Backing off {wait:0.1f} seconds after {tries} tries. Calling function {target}".format(
            **details
        ),
    )


def retries_with_backoff(
    func: Callable,
    exception_type: Type[Exception],
    max_tries: int,
    on_backoff: Callable,
    giveup: Optional[Callable[[Exception], bool]] = None,
) -> Callable:
    """
    Adds exponential backoff retries to the function.
    Exceptions for which `giveup` returns True are re-raised at once.
    """

    @wraps(func)
    @backoff.on_exception(
        backoff.expo,
        exception_type,
        max_tries=max_tries,
        on_backoff=on_backoff,
        giveup=giveup or (lambda _: False),
    )
    def inner_function(*args, **kwargs):  # type: ignore
        return func(*args, **kwargs)

    return cast(Callable, inner_function)


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Return a random password drawn from letters and digits with the `secrets` CSPRNG.

    The result always holds at least one lowercase letter, one uppercase letter
    and one digit.
    """
    if length < 3:
        raise ValueError(f"Password length must be at least 3, got {length}.")
    while True:
        password = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
        ):
            return password


def to_int(value: Any) -> Optional[int]:
    """Coerce numeric strings from configuration into int, keeping None as None."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got boolean {value!r}.")
    return int(value)

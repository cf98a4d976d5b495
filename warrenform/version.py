import logging
import os
import subprocess
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version

import requests

logger = logging.getLogger(__name__)

# Version segment of every Warren API path.
WARREN_API_VERSION = "v1"

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def get_version() -> str:
    """
    Installed version of warrenform, or 'dev' when running from a source tree
    that was never installed.
    """
    try:
        return version("warrenform")
    except PackageNotFoundError:
        logger.debug("warrenform package metadata not found, returning 'dev'.")
        return "dev"


def get_commit_hash() -> str | None:
    """
    Short commit hash of the checkout holding the warrenform package.

    git runs inside the package directory, so the caller's working directory
    does not matter. Returns None for installs outside a git checkout.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=_PACKAGE_DIR,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not read the warrenform commit hash: %s", e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def get_version_string() -> str:
    """
    CLI version line, e.g. "warrenform 0.1.0 (commit: abc1234), Warren API v1".
    """
    text = f"warrenform {get_version()}"
    commit = get_commit_hash()
    if commit:
        text += f" (commit: {commit})"
    return f"{text}, Warren API {WARREN_API_VERSION}"


def get_user_agent() -> str:
    return f"warrenform/{get_version()} python-requests/{requests.__version__}"

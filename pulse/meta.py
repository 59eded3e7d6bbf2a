from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict, Optional

from pulse.constants import SDK_NAME, SENTRY_PROTOCOL_VERSION


LOG = logging.getLogger(__name__)


def get_version() -> Optional[str]:
    """
    Get the version of the pulse package.

    Returns:
      Optional[str]: The pulse version if found, otherwise None.
    """
    try:
        return version("pulse-sdk")
    except PackageNotFoundError:
        LOG.debug("Unable to get pulse version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent string in the format: pulse-python/{version} ({os} {arch}; Python/{python_version})
    """
    pulse_version = get_version() or "unknown"
    os_name = platform.system()

    machine = platform.machine()
    if machine in ("x86_64", "AMD64"):
        arch = "x86_64"
    elif machine in ("arm64", "aarch64"):
        arch = "arm_64"
    elif machine == "i386":
        arch = "x86"
    else:
        arch = machine or "unknown"

    python_version = platform.python_version()

    return f"pulse-python/{pulse_version} ({os_name} {arch}; Python/{python_version})"


def get_sdk_info() -> Dict[str, str]:
    return {"name": SDK_NAME, "version": get_version() or "unknown"}


def get_auth_header(public_key: str) -> str:
    """
    Build the X-Sentry-Auth header value carrying the public key.

    Args:
      public_key (str): The project public key.

    Returns:
      str: The header value.
    """
    client = f"pulse-python/{get_version() or 'unknown'}"
    return (
        f"Sentry sentry_version={SENTRY_PROTOCOL_VERSION}, "
        f"sentry_client={client}, "
        f"sentry_key={public_key}"
    )


def get_meta_http_headers() -> Dict[str, str]:
    """
    Get the metadata headers for the client.

    Returns:
      Dict[str, str]: The metadata headers.
    """
    return {
        "Pulse-Client-Version": get_version() or "",
        "User-Agent": get_user_agent(),
    }

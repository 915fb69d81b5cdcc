from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict, Optional


LOG = logging.getLogger(__name__)


def get_version() -> Optional[str]:
    """
    Get the version of the gio package.

    Returns:
      Optional[str]: The gio version if found, otherwise None.
    """
    try:
        return version("gio-sdk")
    except PackageNotFoundError:
        LOG.debug("Unable to get gio-sdk version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent string in the format: gio-python/{version} ({os} {arch}; Python/{python_version})
    """
    gio_version = get_version() or "unknown"
    os_name = platform.system()

    machine = platform.machine()
    # Normalize architecture names
    if machine in ("x86_64", "AMD64"):
        arch = "x86_64"
    elif machine in ("arm64", "aarch64"):
        arch = "arm_64"
    elif machine == "i386":
        arch = "x86"
    else:
        arch = machine or "unknown"

    python_version = platform.python_version()

    return f"gio-python/{gio_version} ({os_name} {arch}; Python/{python_version})"


def get_meta_http_headers() -> Dict[str, str]:
    """
    Get the metadata headers for the client.

    Returns:
      Dict[str, str]: The metadata headers.
    """
    return {
        "Gio-Client-Version": get_version() or "",
        "User-Agent": get_user_agent(),
    }

# -*- coding: utf-8 -*-
import os
from pathlib import Path

DIR_NAME = ".gio"


def get_user_dir() -> Path:
    """
    Get the user directory for the gio configuration.

    Returns:
        Path: The user directory path.
    """
    path = Path("~", DIR_NAME).expanduser()
    return path


USER_CONFIG_DIR = get_user_dir()

CONFIG_FILE_NAME = "config.ini"
CONFIG_FILE_USER = USER_CONFIG_DIR / CONFIG_FILE_NAME

CONFIG = Path(os.environ["GIO_CONFIG_PATH"]) if os.getenv("GIO_CONFIG_PATH") else CONFIG_FILE_USER
CONFIG_SECTION_NAME = "gio"
ENV_PREFIX = "GIO_"

# Collection (s2s) API
CSTM_ENDPOINT = "https://api.growingio.com"
CSTM_VERSION = "v3"
# Management API, only read to resolve event definitions
MANAGEMENT_ENDPOINT = "https://www.growingio.com"
MANAGEMENT_VERSION = "v1"

EVENT_TYPE_CUSTOM = "cstm"

# Fetch the REQUEST_TIMEOUT from the environment variable, defaulting to 30 if not set
REQUEST_TIMEOUT = float(os.getenv("GIO_REQUEST_TIMEOUT", 30))

DEFAULT_BATCH_SIZE = 500
DEFAULT_SEND_MSG_INTERVAL = 0.1  # seconds
DEFAULT_RETRY_COUNT = 0

DEFAULT_MAX_INIT_ATTEMPT = 3
DEFAULT_INIT_INTERVAL = 10.0  # seconds

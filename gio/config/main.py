import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

from gio.constants import (
    CONFIG,
    CONFIG_SECTION_NAME,
    CSTM_ENDPOINT,
    CSTM_VERSION,
    DEFAULT_BATCH_SIZE,
    DEFAULT_INIT_INTERVAL,
    DEFAULT_MAX_INIT_ATTEMPT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_SEND_MSG_INTERVAL,
    ENV_PREFIX,
    MANAGEMENT_ENDPOINT,
    MANAGEMENT_VERSION,
    REQUEST_TIMEOUT,
)
from gio.errors import ConfigurationError

from .log_codes import (
    CONFIG_ENV_INVALID,
    CONFIG_ENV_RESOLVED,
    CONFIG_FILE_LOADED,
    CONFIG_FILE_MISSING_SECTION,
    CONFIG_FILE_UNREADABLE,
)

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


class ApiEndpoint(NamedTuple):
    base_url: str
    version: str

    def as_url(self, path: str = "") -> str:
        return f"{self.base_url.rstrip('/')}/{self.version}{path}"


@dataclass
class ClientConfig:
    """
    Settings of a ``GIO`` client: credentials, endpoints and dispatch tuning.

    Intervals and timeouts are expressed in seconds.
    """

    project_id: str = ""
    token: str = ""
    project_uid: str = ""
    cstm: ApiEndpoint = field(
        default_factory=lambda: ApiEndpoint(CSTM_ENDPOINT, CSTM_VERSION)
    )
    management: ApiEndpoint = field(
        default_factory=lambda: ApiEndpoint(MANAGEMENT_ENDPOINT, MANAGEMENT_VERSION)
    )
    batch_size: int = DEFAULT_BATCH_SIZE
    send_msg_interval: float = DEFAULT_SEND_MSG_INTERVAL
    timeout: float = REQUEST_TIMEOUT
    retry_count: int = DEFAULT_RETRY_COUNT
    verbose: bool = False

    def __post_init__(self):
        if self.batch_size < 1:
            raise ConfigurationError("batch_size", "must be a positive integer")
        if self.send_msg_interval <= 0:
            raise ConfigurationError("send_msg_interval", "must be greater than 0")
        if self.timeout <= 0:
            raise ConfigurationError("timeout", "must be greater than 0")
        if self.retry_count < 0:
            raise ConfigurationError("retry_count", "must not be negative")


@dataclass(frozen=True)
class EventOptions:
    """
    Validation and schema-loading policy of an ``EventPoster``.

    Attributes:
        strict: Reject keys unknown to the event definition and null values.
        transform_before_validate: Coerce values to their declared type before validating.
        required_keys: Keys that must be present (and not None) in every payload.
        max_init_attempt: Bootstrap load attempts before falling back to pass-through mode.
        init_interval: Minimum delay, in seconds, between two bootstrap load attempts.
        big_int: Parse ``Int`` values through ``Decimal`` to keep full precision.
    """

    strict: bool = True
    transform_before_validate: bool = True
    required_keys: Tuple[str, ...] = ()
    max_init_attempt: int = DEFAULT_MAX_INIT_ATTEMPT
    init_interval: float = DEFAULT_INIT_INTERVAL
    big_int: bool = False

    def __post_init__(self):
        # Accept any iterable of keys, store an immutable tuple
        object.__setattr__(self, "required_keys", tuple(self.required_keys))
        if self.max_init_attempt < 1:
            raise ConfigurationError("max_init_attempt", "must be a positive integer")
        if self.init_interval < 0:
            raise ConfigurationError("init_interval", "must not be negative")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


# Flat option names as they appear in config.ini and GIO_* variables
OPTION_TYPES: Dict[str, Callable[[Any], Any]] = {
    "project_id": str,
    "token": str,
    "project_uid": str,
    "cstm_endpoint": str,
    "cstm_version": str,
    "management_endpoint": str,
    "management_version": str,
    "batch_size": int,
    "send_msg_interval": float,
    "timeout": float,
    "retry_count": int,
    "verbose": _to_bool,
}


def _convert(option: str, raw: Any, source: str) -> Any:
    try:
        return OPTION_TYPES[option](raw)
    except (TypeError, ValueError) as e:
        logger.error(CONFIG_ENV_INVALID, extra={"option": option, "source": source})
        raise ConfigurationError(option, f"invalid value {raw!r} from {source}") from e


def _options_from_config_ini(config_path: Path) -> Dict[str, Any]:
    """
    Retrieve client options from the ``[gio]`` section of a config.ini file.

    Args:
        config_path (Path): The path to the config.ini file.

    Returns:
        Dict[str, Any]: The options found, converted to their types.
    """
    config = configparser.ConfigParser()
    try:
        config_files = config.read(filenames=[config_path])
    except configparser.Error:
        logger.warning(
            CONFIG_FILE_UNREADABLE, extra={"config_path": str(config_path)}
        )
        return {}

    if not config_files or not config.has_section(CONFIG_SECTION_NAME):
        if config_files:
            logger.debug(
                CONFIG_FILE_MISSING_SECTION, extra={"config_path": str(config_path)}
            )
        return {}

    section = config[CONFIG_SECTION_NAME]
    options = {
        option: _convert(option, section[option], "config")
        for option in OPTION_TYPES
        if option in section
    }
    logger.info(
        CONFIG_FILE_LOADED,
        extra={"config_path": str(config_path), "options": sorted(options)},
    )
    return options


def _options_from_env() -> Dict[str, Any]:
    """
    Retrieve client options from ``GIO_*`` environment variables.
    """
    options = {}
    for option in OPTION_TYPES:
        raw = os.getenv(f"{ENV_PREFIX}{option.upper()}")
        if raw is not None:
            options[option] = _convert(option, raw, "env")

    if options:
        logger.info(CONFIG_ENV_RESOLVED, extra={"options": sorted(options)})
    return options


def load_client_config(
    config_path: Optional[Path] = None, **overrides: Any
) -> ClientConfig:
    """
    Resolve the effective client configuration.

    Resolution order (later wins):
      1. ClientConfig defaults
      2. ``[gio]`` section of the config.ini file
      3. ``GIO_*`` environment variables
      4. Keyword overrides

    Args:
        config_path (Optional[Path]): The config.ini file, defaults to ``~/.gio/config.ini``.
        **overrides: Flat option values taking precedence over every other source.

    Returns:
        ClientConfig: The resolved configuration.

    Raises:
        ConfigurationError: If an option is unknown or has an invalid value.
    """
    unknown = set(overrides) - set(OPTION_TYPES)
    if unknown:
        raise ConfigurationError(", ".join(sorted(unknown)), "unknown option")

    options: Dict[str, Any] = {}
    options.update(_options_from_config_ini(config_path or CONFIG))
    options.update(_options_from_env())
    options.update(
        {
            option: _convert(option, value, "overrides")
            for option, value in overrides.items()
            if value is not None
        }
    )

    cstm = ApiEndpoint(
        options.pop("cstm_endpoint", CSTM_ENDPOINT),
        options.pop("cstm_version", CSTM_VERSION),
    )
    management = ApiEndpoint(
        options.pop("management_endpoint", MANAGEMENT_ENDPOINT),
        options.pop("management_version", MANAGEMENT_VERSION),
    )

    return ClientConfig(cstm=cstm, management=management, **options)

# -*- coding: utf-8 -*-
"""Server-side GrowingIO client: validated, batched custom events."""

from .client import GIO
from .config import ClientConfig, EventOptions, load_client_config
from .errors import (
    CallerInputError,
    ConfigurationError,
    DispatchError,
    GIOError,
    InvalidEventDataError,
    MissingRequiredParamsError,
    ParamTypeError,
    SchemaUnavailableError,
    UnexpectedParamError,
)
from .events import EventPoster
from .models import EventSchema, ParamType, WireMessage

__author__ = """GrowingIO"""

__all__ = [
    "GIO",
    "CallerInputError",
    "ClientConfig",
    "ConfigurationError",
    "DispatchError",
    "EventOptions",
    "EventPoster",
    "EventSchema",
    "GIOError",
    "InvalidEventDataError",
    "MissingRequiredParamsError",
    "ParamType",
    "ParamTypeError",
    "SchemaUnavailableError",
    "UnexpectedParamError",
    "WireMessage",
    "load_client_config",
]

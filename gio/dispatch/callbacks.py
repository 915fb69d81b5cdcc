"""Observers notified of dispatch outcomes."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, TypeVar

from gio.models import WireMessage

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str, List[WireMessage]], Any]
ErrorCallback = Callable[[Exception, str, List[WireMessage]], Any]

C = TypeVar("C", bound=Callable[..., Any])


class CallbackRegistry:
    """
    Success and error observers, called in registration order once per
    event key of each dispatched slice.
    """

    def __init__(self) -> None:
        self._success: list[SuccessCallback] = []
        self._error: list[ErrorCallback] = []

    @property
    def success_callbacks(self) -> tuple[SuccessCallback, ...]:
        return tuple(self._success)

    @property
    def error_callbacks(self) -> tuple[ErrorCallback, ...]:
        return tuple(self._error)

    def on_success(self, callback: C) -> C:
        self._success.append(callback)
        return callback

    def on_error(self, callback: C) -> C:
        self._error.append(callback)
        return callback

    def notify_success(self, groups: Dict[str, List[WireMessage]]) -> None:
        for event_key, messages in groups.items():
            for callback in list(self._success):
                self._invoke(callback, event_key, messages)

    def notify_error(
        self, error: Exception, groups: Dict[str, List[WireMessage]]
    ) -> None:
        for event_key, messages in groups.items():
            for callback in list(self._error):
                self._invoke(callback, error, event_key, messages)

    def _invoke(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            # Never let observer errors reach the queue
            logger.exception(
                "Dispatch callback %s failed",
                getattr(callback, "__name__", repr(callback)),
            )

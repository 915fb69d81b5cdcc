import time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from gio.constants import EVENT_TYPE_CUSTOM


class ParamType(str, Enum):
    """
    Parameter types an event definition can declare.
    """

    STRING = "String"
    INT = "Int"
    DOUBLE = "Double"


class EventAttr(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    type: ParamType


class EventSchema(BaseModel):
    """
    Server-declared definition of an event: its key and typed attributes.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str]
    key: str
    attrs: Tuple[EventAttr, ...] = ()


def now_ms() -> int:
    return int(time.time() * 1000)


class WireMessage(BaseModel):
    """
    A single message as sent to the collection service.

    Field names are part of the wire contract: ``cs1`` user id, ``tm`` epoch
    milliseconds, ``n`` event key, ``var`` params and ``t`` event type.
    """

    model_config = ConfigDict(frozen=True)

    cs1: Union[int, str]
    tm: int = Field(default_factory=now_ms)
    n: str
    var: Dict[str, Any] = Field(default_factory=dict)
    t: str = EVENT_TYPE_CUSTOM

    @property
    def event_key(self) -> str:
        return self.n

    @classmethod
    def build(
        cls,
        event_key: str,
        uid: Union[int, str],
        payload: Dict[str, Any],
        time: Optional[int] = None,
        event_type: Optional[str] = None,
    ) -> "WireMessage":
        return cls(
            cs1=uid,
            tm=time if time is not None else now_ms(),
            n=event_key,
            var=payload,
            t=event_type or EVENT_TYPE_CUSTOM,
        )


def group_by_event_key(messages: List[WireMessage]) -> Dict[str, List[WireMessage]]:
    """
    Group messages by event key, keeping first-seen key order and message order.
    """
    groups: Dict[str, List[WireMessage]] = {}
    for message in messages:
        groups.setdefault(message.event_key, []).append(message)
    return groups

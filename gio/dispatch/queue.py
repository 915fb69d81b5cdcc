from __future__ import annotations

from typing import Iterator

from gio.models import WireMessage


class MessageQueue:
    """
    Unbounded FIFO of messages waiting to be sent.

    Messages in, slices out. Both operations are synchronous so two drains
    never see the same message.
    """

    def __init__(self) -> None:
        self._messages: list[WireMessage] = []

    def put(self, message: WireMessage) -> int:
        """
        Append a message, returning the new queue length.
        """
        self._messages.append(message)
        return len(self._messages)

    def take(self, limit: int) -> list[WireMessage]:
        """
        Remove and return up to ``limit`` oldest messages.
        """
        batch = self._messages[:limit]
        del self._messages[:limit]
        return batch

    def is_empty(self) -> bool:
        return not self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[WireMessage]:
        return iter(list(self._messages))

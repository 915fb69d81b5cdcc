from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Optional, Protocol

from gio.errors import DispatchError
from gio.models import WireMessage, group_by_event_key

from .callbacks import CallbackRegistry
from .queue import MessageQueue

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, messages: list[WireMessage]) -> Any: ...


class BatchDispatcher:
    """
    Drains a ``MessageQueue`` in slices of at most ``batch_size`` messages.

    Each slice is sent once; the outcome goes to the callback registry and a
    failed slice is not queued again. Draining is triggered by the caller
    (size threshold, ``flush``) or by a recurring timer.
    """

    def __init__(
        self,
        queue: MessageQueue,
        transport: Transport,
        callbacks: CallbackRegistry,
        batch_size: int,
        send_msg_interval: float,
    ):
        self.queue = queue
        self.transport = transport
        self.callbacks = callbacks
        self.batch_size = batch_size
        self.send_msg_interval = send_msg_interval

        self._timer: Optional[asyncio.Task[None]] = None
        self._pending: set[asyncio.Task[Optional[list[WireMessage]]]] = set()

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def send_batch(self) -> Optional[list[WireMessage]]:
        """
        Take the oldest slice and send it.

        Returns:
            The slice when it was delivered, None when the queue was empty or
            the send failed.
        """
        batch = self.queue.take(self.batch_size)
        if not batch:
            return None
        try:
            return await self._send(batch)
        except asyncio.CancelledError:
            self._report_cancelled(batch)
            raise

    def send_batch_soon(self) -> Optional[asyncio.Task[Optional[list[WireMessage]]]]:
        """
        Take the oldest slice now and send it in a background task.

        Without a running event loop nothing is taken, the messages wait for
        the next ``flush``.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "No running event loop, %s messages stay queued", len(self.queue)
            )
            return None

        batch = self.queue.take(self.batch_size)
        if not batch:
            return None

        task = loop.create_task(self._send(batch))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(functools.partial(self._on_background_send_done, batch))
        return task

    def _on_background_send_done(
        self, batch: list[WireMessage], task: asyncio.Task[Optional[list[WireMessage]]]
    ) -> None:
        # Also covers tasks cancelled before their first step
        if task.cancelled():
            self._report_cancelled(batch)

    def _report_cancelled(self, batch: list[WireMessage]) -> None:
        logger.warning("Dispatch of %s messages cancelled before completion", len(batch))
        self.callbacks.notify_error(
            DispatchError("Dispatch cancelled before completion."),
            group_by_event_key(batch),
        )

    async def _send(self, batch: list[WireMessage]) -> Optional[list[WireMessage]]:
        groups = group_by_event_key(batch)
        logger.debug(
            "Sending %s messages (%s event keys), %s left in queue",
            len(batch),
            len(groups),
            len(self.queue),
        )

        try:
            await self.transport.send(batch)
        except Exception as e:
            error = e if isinstance(e, DispatchError) else DispatchError(reason=repr(e))
            if error is not e:
                error.__cause__ = e
            logger.error(
                "Failed to send %s messages: %s", len(batch), error, exc_info=e
            )
            self.callbacks.notify_error(error, groups)
            return None

        logger.debug("Sent %s messages", len(batch))
        self.callbacks.notify_success(groups)
        return batch

    async def flush(self) -> None:
        """
        Send slices until the queue is empty, then wait for background sends.
        """
        while not self.queue.is_empty():
            await self.send_batch()
        await self.join()

    async def join(self) -> None:
        """
        Wait for the background sends started so far.
        """
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def start_timer(self) -> None:
        if self.timer_running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run_timer())

    def stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def stop(self, flush: bool = False) -> None:
        self.stop_timer()
        if flush:
            await self.flush()

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.send_msg_interval)
            self.send_batch_soon()

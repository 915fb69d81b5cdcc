import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable, NamedTuple, Optional

from gio.models import EventSchema

if TYPE_CHECKING:
    from gio.client import GIO
    from gio.config import EventOptions

logger = logging.getLogger(__name__)


class LoadResult(NamedTuple):
    done: bool
    definition: Optional[EventSchema] = None


NOT_DONE = LoadResult(done=False)
DONE_WITHOUT_DEFINITION = LoadResult(done=True)


def _finished(task: "asyncio.Future[LoadResult]") -> bool:
    return (
        not task.cancelled()
        and task.exception() is None
        and task.result().done
    )


class DefinitionLoader:
    """
    Resolves the definition of one event key through the client.

    Bootstrap loading is capped at ``max_init_attempt`` attempts, spaced at
    least ``init_interval`` seconds apart. Concurrent callers share the
    in-flight attempt; a finished load is kept for good.
    """

    def __init__(
        self,
        client: "GIO",
        event_key: str,
        options: "EventOptions",
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._event_key = event_key
        self._max_init_attempt = options.max_init_attempt
        self._init_interval = options.init_interval
        self._clock = clock

        self.load_attempt_count = 0
        self.last_load_attempt_at: Optional[float] = None
        self._pending: Optional["asyncio.Task[LoadResult]"] = None

    @property
    def event_key(self) -> str:
        return self._event_key

    @property
    def done(self) -> bool:
        pending = self._pending
        return pending is not None and pending.done() and _finished(pending)

    def load(self) -> "asyncio.Future[LoadResult]":
        """
        Start a load attempt, or join the one in flight.

        Must be called with a running event loop.
        """
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
            self._pending.add_done_callback(self._on_loaded)
        return asyncio.shield(self._pending)

    def _on_loaded(self, task: "asyncio.Task[LoadResult]") -> None:
        if not _finished(task):
            # Let the next caller retry through the same entry point
            self._pending = None

    async def _load(self) -> LoadResult:
        if self._client.initialized:
            return LoadResult(done=True, definition=await self._fetch())

        if self.load_attempt_count >= self._max_init_attempt:
            return DONE_WITHOUT_DEFINITION

        now = self._clock()
        if (
            self.last_load_attempt_at is not None
            and now - self.last_load_attempt_at < self._init_interval
        ):
            return NOT_DONE

        self.last_load_attempt_at = now
        self.load_attempt_count += 1
        logger.debug(
            "Loading definition of %s (attempt %s/%s)",
            self._event_key,
            self.load_attempt_count,
            self._max_init_attempt,
        )

        definition = await self._fetch()
        if definition is not None:
            return LoadResult(done=True, definition=definition)

        if self.load_attempt_count >= self._max_init_attempt:
            logger.warning(
                "Giving up loading definition of %s after %s attempts, "
                "params will be sent without validation",
                self._event_key,
                self.load_attempt_count,
            )
            return DONE_WITHOUT_DEFINITION

        return NOT_DONE

    async def _fetch(self) -> Optional[EventSchema]:
        try:
            return await self._client.get_event(self._event_key)
        except Exception as e:
            logger.warning(
                "Unable to load definition of %s: %s", self._event_key, e
            )
            return None

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Union

from gio.config import ClientConfig, EventOptions, load_client_config
from gio.constants import EVENT_TYPE_CUSTOM
from gio.dispatch import BatchDispatcher, CallbackRegistry, MessageQueue, Transport
from gio.dispatch.callbacks import C
from gio.errors import SchemaUnavailableError
from gio.events import EventPoster
from gio.logs_helpers import configure_logging
from gio.models import EventSchema, WireMessage
from gio.platform import GIOPlatformClient

logger = logging.getLogger(__name__)


class SchemaSource(Protocol):
    async def fetch_schemas(self) -> List[EventSchema]: ...


class GIO:
    """
    Entry point of the library.

    Owns the message queue, its dispatcher, the dispatch callbacks and the
    cache of event definitions. Usable as an async context manager, which
    runs the flush timer and flushes on exit::

        async with GIO(load_client_config()) as gio:
            login = gio.event("login", required_keys=["uid"])
            login.batch(42, {"uid": "u1", "retryCount": "3"})
    """

    CSTM = EVENT_TYPE_CUSTOM

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        schema_source: Optional[SchemaSource] = None,
    ):
        self.config = config or load_client_config()
        if self.config.verbose:
            configure_logging(debug=True)

        self._platform: Optional[GIOPlatformClient] = None
        if transport is None or schema_source is None:
            self._platform = GIOPlatformClient(self.config)
        self.transport: Transport = transport or self._platform
        self.schema_source: SchemaSource = schema_source or self._platform

        # Definitions by key and by id, both pointing to the same instance
        self._events: Dict[Union[int, str], EventSchema] = {}
        self._initialized = False
        self._init_task: Optional["asyncio.Task[None]"] = None

        self.queue = MessageQueue()
        self.callbacks = CallbackRegistry()
        self.dispatcher = BatchDispatcher(
            self.queue,
            self.transport,
            self.callbacks,
            batch_size=self.config.batch_size,
            send_msg_interval=self.config.send_msg_interval,
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def __aenter__(self) -> "GIO":
        self.start_timer()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop(flush=True)
        await self.aclose()

    # Event definitions

    async def init(self) -> None:
        """
        Load every event definition into the cache.

        Concurrent callers wait for the same request.
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load_events())
        task = self._init_task
        try:
            await asyncio.shield(task)
        finally:
            if task.done() and self._init_task is task:
                self._init_task = None

    async def _load_events(self) -> None:
        schemas = await self.schema_source.fetch_schemas()
        events: Dict[Union[int, str], EventSchema] = {}
        for schema in schemas:
            events[schema.key] = schema
            events[schema.id] = schema
        self._events = events
        self._initialized = True
        logger.info("Cached %s event definitions", len(schemas))

    async def get_event(self, key: Union[int, str]) -> EventSchema:
        """
        Resolve an event definition by key or id.

        Raises:
            SchemaUnavailableError: If the project does not define it.
        """
        if not self._initialized:
            await self.init()
        event = self._events.get(key)
        if event is None:
            raise SchemaUnavailableError(str(key))
        return event

    def event(
        self, event_key: str, options: Optional[EventOptions] = None, **kwargs: Any
    ) -> EventPoster:
        """
        Create a poster for ``event_key``.

        Options are given either as an ``EventOptions`` or as its fields.
        """
        if options is None:
            options = EventOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either `options` or option keywords, not both")
        return EventPoster(self, event_key, options)

    # Queue

    def enqueue(
        self,
        event_key: str,
        uid: Union[int, str],
        payload: Dict[str, Any],
        time: Optional[int] = None,
        event_type: Optional[str] = None,
    ) -> WireMessage:
        message = WireMessage.build(event_key, uid, payload, time=time, event_type=event_type)
        if self.queue.put(message) >= self.config.batch_size:
            self.dispatcher.send_batch_soon()
        return message

    async def send_batch(self) -> Optional[List[WireMessage]]:
        return await self.dispatcher.send_batch()

    async def flush(self) -> None:
        await self.dispatcher.flush()

    def start_timer(self) -> None:
        self.dispatcher.start_timer()

    def stop_timer(self) -> None:
        self.dispatcher.stop_timer()

    async def stop(self, flush: bool = False) -> None:
        await self.dispatcher.stop(flush=flush)

    async def aclose(self) -> None:
        """
        Stop the timer, wait for background sends and release the HTTP client.

        Queued messages are left in place; call ``flush`` first to send them.
        """
        self.stop_timer()
        await self.dispatcher.join()
        if self._platform is not None:
            await self._platform.aclose()

    # Callbacks

    def on_success(self, callback: C) -> C:
        return self.callbacks.on_success(callback)

    def on_error(self, callback: C) -> C:
        return self.callbacks.on_error(callback)

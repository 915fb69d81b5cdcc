import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from gio.config import EventOptions
from gio.errors import (
    InvalidEventDataError,
    MissingRequiredParamsError,
    UnexpectedParamError,
)
from gio.models import EventSchema

from .loader import DefinitionLoader, LoadResult
from .params import ParamDefinition, build_params_tree

if TYPE_CHECKING:
    from gio.client import GIO

logger = logging.getLogger(__name__)


class EventPoster:
    """
    Records one kind of event: validates params against the event
    definition and hands the result to the client queue.

    The definition is loaded lazily. Until it is available, and for good if
    it never becomes available, params are forwarded as given.
    """

    def __init__(
        self,
        client: "GIO",
        event_key: str,
        options: Optional[EventOptions] = None,
    ):
        self._client = client
        self._event_key = event_key
        self._options = options or EventOptions()
        self._loader = DefinitionLoader(client, event_key, self._options)

        self._initialized = False
        self._definition: Optional[EventSchema] = None
        self._params_tree: Dict[str, ParamDefinition] = {}
        self._init_task: Optional["asyncio.Task[LoadResult]"] = None

    @property
    def event_key(self) -> str:
        return self._event_key

    @property
    def options(self) -> EventOptions:
        return self._options

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def definition(self) -> Optional[EventSchema]:
        return self._definition

    @property
    def params_tree(self) -> Mapping[str, ParamDefinition]:
        return self._params_tree

    @property
    def degraded(self) -> bool:
        """
        True once loading gave up without a definition.
        """
        return self._initialized and self._definition is None

    @property
    def load_attempt_count(self) -> int:
        return self._loader.load_attempt_count

    @property
    def last_load_attempt_at(self) -> Optional[float]:
        return self._loader.last_load_attempt_at

    async def init(self) -> LoadResult:
        """
        Run (or join) one load attempt of the event definition.
        """
        result = await self._loader.load()
        if result.done and not self._initialized:
            self._apply(result.definition)
        return result

    async def wait_ready(self) -> LoadResult:
        """
        Keep loading the definition until it is resolved for good, waiting
        ``init_interval`` between attempts.
        """
        retrying = AsyncRetrying(
            retry=retry_if_result(lambda result: not result.done),
            wait=wait_fixed(self._options.init_interval),
            # One extra try in case the first one lands inside the throttle window
            stop=stop_after_attempt(self._options.max_init_attempt + 1),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        return await retrying(self.init)

    def _apply(self, definition: Optional[EventSchema]) -> None:
        self._definition = definition
        if definition is not None:
            self._params_tree = build_params_tree(
                definition.attrs,
                required_keys=self._options.required_keys,
                strict=self._options.strict,
                big_int=self._options.big_int,
            )
            logger.debug(
                "Definition of %s loaded with %s params",
                self._event_key,
                len(self._params_tree),
            )
        self._initialized = True

    def batch(
        self,
        uid: Union[int, str],
        data: Mapping[str, Any],
        time: Optional[int] = None,
    ) -> None:
        """
        Validate ``data`` and enqueue it as one message of this event.

        Args:
            uid: Identifier of the user the event belongs to.
            data: Event params.
            time: Event time in epoch milliseconds, defaults to now.

        Raises:
            CallerInputError: If the params are rejected. Nothing is enqueued.
        """
        if not data or not isinstance(data, Mapping):
            raise InvalidEventDataError()

        missing = [key for key in self._options.required_keys if data.get(key) is None]
        if missing:
            raise MissingRequiredParamsError(missing)

        if self._definition is not None:
            payload = self._build_payload(data)
        else:
            payload = dict(data)

        self._schedule_init()
        self._client.enqueue(self._event_key, uid, payload, time=time)

    def _build_payload(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        if self._options.strict:
            for key in data:
                if key not in self._params_tree:
                    raise UnexpectedParamError(key)

        payload = {}
        for key, definition in self._params_tree.items():
            value = data.get(key)
            if self._options.transform_before_validate and value is not None:
                value = definition.transform(value)
            definition.validate(value)
            payload[key] = definition.to_wire(value)
        return payload

    def _schedule_init(self) -> None:
        if self._initialized:
            return
        if self._init_task is not None and not self._init_task.done():
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "No running event loop, definition of %s not loaded", self._event_key
            )
            return

        self._init_task = loop.create_task(self.init())
        self._init_task.add_done_callback(self._on_init_done)

    def _on_init_done(self, task: "asyncio.Task[LoadResult]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Loading definition of %s failed: %s",
                self._event_key,
                exc,
                exc_info=exc,
            )

"""
GrowingIO API client.

Implements the two collaborators the event pipeline depends on: reading
event definitions from the management API and posting message batches to
the collection (s2s) API.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from gio.config import ClientConfig
from gio.constants import EVENT_TYPE_CUSTOM
from gio.errors import NetworkConnectionError, RequestTimeoutError
from gio.meta import get_meta_http_headers
from gio.models import EventSchema, WireMessage, now_ms

from .http_utils import build_retrying, parse_response

logger = logging.getLogger(__name__)


class GIOPlatformClient:
    """
    Async client for the GrowingIO APIs.

    Owns its ``httpx.AsyncClient`` unless one is injected, in which case the
    caller manages its lifecycle.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or self._create_http_client()

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        headers.update(get_meta_http_headers())
        if self.config.token:
            headers["Authorization"] = self.config.token

        return headers

    def _create_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))

    def _project_path(self) -> str:
        return f"/api/projects/{self.config.project_uid}"

    def _events_path(self) -> str:
        return f"{self._project_path()}/dim/events"

    def _s2s_path(self) -> str:
        return f"/{self.config.project_id}/s2s/{EVENT_TYPE_CUSTOM}"

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send one API call, retried up to ``retry_count`` times on transient
        failures.

        Raises:
            DispatchError: If the call ultimately fails.
        """
        async for attempt in build_retrying(self.config.retry_count):
            with attempt:
                return await self._request_once(method, url, json=json, params=params)

    async def _request_once(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            response = await self._http_client.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._get_headers(),
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.TransportError as e:
            logger.debug("%s %s failed: %s", method.upper(), url, e)
            raise NetworkConnectionError() from e

        return parse_response(response)

    async def fetch_schemas(self) -> List[EventSchema]:
        """
        Get every event definition of the project.
        """
        url = self.config.management.as_url(self._events_path())
        data = await self.request("GET", url)

        schemas = []
        for item in data or []:
            try:
                schemas.append(EventSchema.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed event definition %r: %s", item, e)

        logger.info("Fetched %s event definitions", len(schemas))
        return schemas

    async def send(self, messages: List[WireMessage]) -> Any:
        """
        Post a batch of messages to the collection API.
        """
        url = self.config.cstm.as_url(self._s2s_path())
        body = [message.model_dump(mode="json") for message in messages]
        return await self.request(
            "POST", url, json=body, params={"stm": str(now_ms())}
        )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
            logger.debug("HTTP client closed")

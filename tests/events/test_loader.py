import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from gio.config import EventOptions
from gio.errors import SchemaUnavailableError
from gio.events.loader import DefinitionLoader


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
class TestDefinitionLoader:
    """
    Test retry-bounded loading of one event definition.
    """

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def options(self) -> EventOptions:
        return EventOptions(max_init_attempt=3, init_interval=10.0)

    def _client(self, initialized: bool, result=None, error=None) -> Mock:
        client = Mock()
        client.initialized = initialized
        client.get_event = AsyncMock(return_value=result, side_effect=error)
        return client

    def test_initialized_client_fetches_once(self, login_schema, options, clock) -> None:
        """
        With the client cache populated a single fetch settles the load.
        """
        client = self._client(initialized=True, result=login_schema)
        loader = DefinitionLoader(client, "login", options, clock=clock)

        async def scenario():
            return await loader.load(), await loader.load()

        first, second = asyncio.run(scenario())

        assert first.done and first.definition is login_schema
        assert second == first
        assert loader.done
        client.get_event.assert_awaited_once_with("login")
        assert loader.load_attempt_count == 0

    def test_initialized_client_missing_definition_is_done(self, options, clock) -> None:
        client = self._client(initialized=True, error=SchemaUnavailableError("login"))
        loader = DefinitionLoader(client, "login", options, clock=clock)

        result = asyncio.run(loader.load())

        assert result.done
        assert result.definition is None

    def test_bootstrap_success(self, login_schema, options, clock) -> None:
        client = self._client(initialized=False, result=login_schema)
        loader = DefinitionLoader(client, "login", options, clock=clock)

        result = asyncio.run(loader.load())

        assert result.done and result.definition is login_schema
        assert loader.load_attempt_count == 1
        assert loader.last_load_attempt_at == 100.0

    def test_throttles_attempts_within_interval(self, options, clock) -> None:
        """
        Calls less than init_interval apart share a single attempt.
        """
        client = self._client(initialized=False, error=RuntimeError("boom"))
        loader = DefinitionLoader(client, "login", options, clock=clock)

        async def scenario():
            first = await loader.load()
            clock.now = 105.0
            second = await loader.load()
            clock.now = 111.0
            third = await loader.load()
            return first, second, third

        first, second, third = asyncio.run(scenario())

        assert not first.done and not second.done and not third.done
        assert client.get_event.await_count == 2
        assert loader.load_attempt_count == 2
        assert loader.last_load_attempt_at == 111.0

    def test_gives_up_after_max_attempts(self, clock) -> None:
        client = self._client(initialized=False, error=RuntimeError("boom"))
        options = EventOptions(max_init_attempt=3, init_interval=0)
        loader = DefinitionLoader(client, "login", options, clock=clock)

        async def scenario():
            return [await loader.load() for _ in range(5)]

        results = asyncio.run(scenario())

        assert [r.done for r in results] == [False, False, True, True, True]
        assert all(r.definition is None for r in results)
        assert client.get_event.await_count == 3
        assert loader.load_attempt_count == 3

    def test_concurrent_calls_share_inflight_attempt(self, login_schema, options, clock) -> None:
        client = self._client(initialized=False)

        async def scenario():
            release = asyncio.Event()

            async def get_event(key):
                await release.wait()
                return login_schema

            client.get_event = AsyncMock(side_effect=get_event)
            loader = DefinitionLoader(client, "login", options, clock=clock)

            first = loader.load()
            second = loader.load()
            release.set()
            return loader, await asyncio.gather(first, second)

        loader, (first, second) = asyncio.run(scenario())

        assert first == second
        assert first.definition is login_schema
        client.get_event.assert_awaited_once()
        assert loader.load_attempt_count == 1

    def test_not_done_attempt_can_be_retried(self, login_schema, options, clock) -> None:
        client = self._client(initialized=False, error=RuntimeError("boom"))
        loader = DefinitionLoader(client, "login", options, clock=clock)

        async def scenario():
            first = await loader.load()
            client.get_event.side_effect = None
            client.get_event.return_value = login_schema
            clock.now += options.init_interval
            second = await loader.load()
            return first, second

        first, second = asyncio.run(scenario())

        assert not first.done
        assert second.done and second.definition is login_schema

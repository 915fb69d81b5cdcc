from typing import List, Optional

import pytest

from gio import GIO, ClientConfig, EventSchema, WireMessage


class FakeTransport:
    """
    Records every slice it is asked to send; raises ``error`` when set.
    """

    def __init__(self) -> None:
        self.sent: List[List[WireMessage]] = []
        self.error: Optional[Exception] = None

    async def send(self, messages: List[WireMessage]) -> None:
        self.sent.append(list(messages))
        if self.error is not None:
            raise self.error


class FakeSchemaSource:
    """
    Serves a fixed list of event definitions; raises ``error`` when set.
    """

    def __init__(self, schemas: List[EventSchema]) -> None:
        self.schemas = schemas
        self.error: Optional[Exception] = None
        self.calls = 0

    async def fetch_schemas(self) -> List[EventSchema]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.schemas)


@pytest.fixture
def login_schema() -> EventSchema:
    """
    Definition of the `login` event.
    """
    return EventSchema.model_validate(
        {
            "id": 7,
            "key": "login",
            "attrs": [
                {"key": "uid", "type": "String"},
                {"key": "retryCount", "type": "Int"},
            ],
        }
    )


@pytest.fixture
def purchase_schema() -> EventSchema:
    """
    Definition of the `purchase` event.
    """
    return EventSchema.model_validate(
        {
            "id": 8,
            "key": "purchase",
            "attrs": [
                {"key": "sku", "type": "String"},
                {"key": "amount", "type": "Double"},
                {"key": "quantity", "type": "Int"},
            ],
        }
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def schema_source(
    login_schema: EventSchema, purchase_schema: EventSchema
) -> FakeSchemaSource:
    return FakeSchemaSource([login_schema, purchase_schema])


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        project_id="proj-id",
        token="secret-token",
        project_uid="proj-uid",
        batch_size=3,
        send_msg_interval=0.01,
    )


@pytest.fixture
def client(
    config: ClientConfig,
    transport: FakeTransport,
    schema_source: FakeSchemaSource,
) -> GIO:
    """
    Client wired to in-memory collaborators.
    """
    return GIO(config, transport=transport, schema_source=schema_source)

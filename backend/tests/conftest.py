# tests/conftest.py
import asyncio
from contextlib import contextmanager
from typing import Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from modelchat.core.config import Settings
from modelchat.db.init_db import init_db
from modelchat.db.session import build_engine, build_sessionmaker
from modelchat.main import create_app
from modelchat.services.llm.base import CompletionProvider, LLMConfig, LLMResponse
from modelchat.services.storage import ChatStorage


class StubProvider(CompletionProvider):
    """Completion provider that answers from a script instead of the network."""

    def __init__(self, reply: Optional[str] = "Hello!", error: Optional[Exception] = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: list[tuple[list[dict[str, str]], LLMConfig]] = []
        self.closed = False

    async def complete(self, messages, config):
        self.calls.append((messages, config))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model=config.model)

    async def close(self):
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = {
        "COMPLETION_API_KEY": "test-key",
        "DATABASE_URL": "sqlite+aiosqlite://",
        "LOG_LEVEL": "DEBUG",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest_asyncio.fixture
async def engine(settings):
    engine = build_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def storage(session) -> ChatStorage:
    return ChatStorage(session)


@pytest.fixture
def make_client(provider):
    @contextmanager
    def _make_client(completion_provider: Optional[CompletionProvider] = None, **overrides):
        app = create_app(make_settings(**overrides), completion_provider=completion_provider or provider)
        with TestClient(app) as client:
            yield client

    return _make_client


@pytest.fixture
def client(make_client):
    with make_client() as client:
        yield client

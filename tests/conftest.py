"""Shared pytest fixtures and configuration for all tests."""

import asyncio
from typing import Callable, Optional, Sequence

import pytest
import pytest_asyncio

from app.core.config import LLMProvider, Settings
from app.database import create_engine, create_session_maker, init_db
from app.schemas import MenuItem
from app.services.llm.base import BaseChatService, ChatMessage, LLMServiceError
from app.services.llm.mock import MockEmbeddingService
from app.services.menu.catalog import STATIC_MENU


class FakeChatService(BaseChatService):
    """Chat provider double that records every call."""

    def __init__(
        self,
        reply: str = "Fake answer",
        configured: bool = True,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.reply = reply
        self.configured = configured
        self.delay = delay
        self.error = error
        self.calls: list[list[ChatMessage]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        self.calls.append(list(messages))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeEmbeddingService(MockEmbeddingService):
    """Feature-hashing embeddings that can be switched to failing mid-test."""

    def __init__(self, fail: bool = False, configured: bool = True):
        super().__init__()
        self.fail = fail
        self.configured = configured
        self.document_calls: list[list[str]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        if self.fail:
            raise LLMServiceError("embedding provider down")
        return await super().embed_documents(texts)


class ConstantEmbeddingService(FakeEmbeddingService):
    """Every text maps to the same vector, so all similarities tie."""

    def _embed(self, text: str) -> list[float]:
        return [1.0, 0.0, 0.0]


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at an in-memory database and the mock LLM provider."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        llm_provider=LLMProvider.MOCK,
        openai_api_key=None,
        llm_timeout_seconds=5.0,
    )


@pytest.fixture
def static_menu() -> list[MenuItem]:
    """Fixture providing the eight-item static catalog."""
    return list(STATIC_MENU)


@pytest.fixture
def sample_menu_items() -> list[MenuItem]:
    """Fixture providing a small menu for retrieval tests."""
    return [
        MenuItem(
            id=1,
            name="Garden Salad",
            description="Mixed greens with cucumber and tomato",
            price=8.5,
            category="Salads",
            dietary=["vegetarian", "vegan"],
        ),
        MenuItem(
            id=2,
            name="Spicy Beef Curry",
            description="Slow-cooked beef in a hot red curry",
            price=15.0,
            category="Entrees",
            spiceLevel=3,
        ),
        MenuItem(
            id=3,
            name="Grilled Salmon",
            description="Atlantic salmon with lemon butter",
            price=19.25,
            category="Entrees",
            dietary=["pescatarian"],
        ),
    ]


@pytest.fixture
def make_chat() -> Callable[..., FakeChatService]:
    """Factory for chat provider doubles."""
    return FakeChatService


@pytest.fixture
def make_embeddings() -> Callable[..., FakeEmbeddingService]:
    """Factory for embedding provider doubles."""
    return FakeEmbeddingService


@pytest.fixture
def constant_embeddings() -> ConstantEmbeddingService:
    return ConstantEmbeddingService()


@pytest_asyncio.fixture
async def db_session(test_settings: Settings):
    """A session on a fresh in-memory database with all tables created."""
    engine = create_engine(test_settings)
    await init_db(engine)
    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        yield session
    await engine.dispose()

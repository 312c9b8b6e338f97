"""
Application Context

Owns every process-wide resource: database engine and session factory, LLM
and embedding providers, the menu vector store, the RAG service and the
assistant facade. Built once by the FastAPI lifespan, stored on
``app.state.context`` and handed to request handlers through ``get_context``.

Lifecycle:
    context = AppContext.from_settings(settings)
    await context.startup()     # tables, assistant readiness, menu index
    ...
    await context.shutdown()    # drop index, dispose engine
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.config import Settings
from app.database import create_engine, create_session_maker, init_db
from app.services.assistant import MenuAssistant
from app.services.llm import (
    BaseChatService,
    BaseEmbeddingService,
    build_chat_service,
    build_embedding_service,
)
from app.services.menu import MenuProvider
from app.services.rag import RAGService
from app.services.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]
    chat: BaseChatService
    embeddings: BaseEmbeddingService
    vector_store: VectorStore
    menu_provider: MenuProvider
    rag: RAGService
    assistant: MenuAssistant

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        chat: Optional[BaseChatService] = None,
        embeddings: Optional[BaseEmbeddingService] = None,
    ) -> "AppContext":
        """
        Wire all services from settings.

        Args:
            settings: Application settings
            chat: Override the configured chat provider
            embeddings: Override the configured embedding provider
        """
        engine = create_engine(settings)
        chat = chat or build_chat_service(settings)
        embeddings = embeddings or build_embedding_service(settings)
        perf = settings.enable_performance_logging

        vector_store = VectorStore(embeddings, enable_performance_logging=perf)
        menu_provider = MenuProvider(
            chat,
            timeout_seconds=settings.llm_timeout_seconds,
            max_tokens=settings.menu_max_tokens,
            temperature=settings.llm_temperature,
            strict_json=settings.menu_json_strict,
            enable_performance_logging=perf,
        )
        rag = RAGService(
            chat,
            vector_store,
            top_k=settings.rag_top_k,
            timeout_seconds=settings.llm_timeout_seconds,
            max_tokens=settings.answer_max_tokens,
            temperature=settings.llm_temperature,
            history_limit=settings.chat_history_limit,
            enable_performance_logging=perf,
        )

        return cls(
            settings=settings,
            engine=engine,
            session_maker=create_session_maker(engine),
            chat=chat,
            embeddings=embeddings,
            vector_store=vector_store,
            menu_provider=menu_provider,
            rag=rag,
            assistant=MenuAssistant(rag, vector_store, menu_provider),
        )

    async def startup(self) -> None:
        await init_db(self.engine)
        logger.info("✅ Database initialized")

        self.rag.initialize()
        await self.vector_store.initialize(self.menu_provider.get_static_menu())

        logger.info(f"✅ Chat provider: {self.chat.provider_name} (configured={self.chat.is_configured})")
        logger.info(f"✅ Assistant status: {self.assistant.status().model_dump(by_alias=True)}")

    async def shutdown(self) -> None:
        self.vector_store.clear()
        await self.engine.dispose()
        logger.info("✅ Cleanup complete")


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.context

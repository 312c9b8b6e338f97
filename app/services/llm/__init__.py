"""
LLM Service Factory

Provides a single entry point for building chat and embedding services.
The factory pattern keeps the rest of the application agnostic about which
implementation is active.

Usage:
    from app.services.llm import build_chat_service

    chat = build_chat_service(settings)
    text = await chat.complete([ChatMessage("user", "Hello")])

Provider Switching:
    - LLM_PROVIDER=mock → MockChatService / MockEmbeddingService
    - LLM_PROVIDER=openai → OpenAIChatService / OpenAIEmbeddingService

Instances are owned by the application context rather than cached here.
"""

import logging

from app.core.config import LLMProvider, Settings
from app.services.llm.base import (
    BaseChatService,
    BaseEmbeddingService,
    ChatMessage,
    LLMNotConfiguredError,
    LLMServiceError,
)
from app.services.llm.mock import MockChatService, MockEmbeddingService
from app.services.llm.openai import OpenAIChatService, OpenAIEmbeddingService

logger = logging.getLogger(__name__)


def build_chat_service(settings: Settings) -> BaseChatService:
    """
    Build the configured chat-completion service.

    Returns:
        BaseChatService: Mock or OpenAI implementation
    """
    if settings.llm_provider == LLMProvider.MOCK:
        logger.info("Chat Service: Using MockChatService")
        return MockChatService(
            min_latency=settings.mock_llm_latency / 2,
            max_latency=settings.mock_llm_latency,
        )

    logger.info(f"Chat Service: Using OpenAIChatService ({settings.llm_model})")
    return OpenAIChatService(
        api_key=settings.openai_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
    )


def build_embedding_service(settings: Settings) -> BaseEmbeddingService:
    """
    Build the configured embedding service.

    Returns:
        BaseEmbeddingService: Mock or OpenAI implementation
    """
    if settings.llm_provider == LLMProvider.MOCK:
        logger.info("Embedding Service: Using MockEmbeddingService")
        return MockEmbeddingService()

    logger.info(f"Embedding Service: Using OpenAIEmbeddingService ({settings.embedding_model})")
    return OpenAIEmbeddingService(
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
    )


__all__ = [
    "build_chat_service",
    "build_embedding_service",
    "BaseChatService",
    "BaseEmbeddingService",
    "ChatMessage",
    "LLMNotConfiguredError",
    "LLMServiceError",
    "MockChatService",
    "MockEmbeddingService",
    "OpenAIChatService",
    "OpenAIEmbeddingService",
]

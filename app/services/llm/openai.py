"""
OpenAI LLM Service Implementation

Production chat-completion and embedding services built on LangChain's
OpenAI integration. Used when LLM_PROVIDER=openai.

Requirements:
    - OPENAI_API_KEY must be set; without it the services report
      ``is_configured == False`` and every call raises LLMNotConfiguredError
      instead of failing at construction.

Clients are created with ``max_retries=0``: callers make exactly one attempt
and bound it with their own timeout.
"""

import logging
from typing import Optional, Sequence

import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from app.core.config import OPENAI_KEY_PLACEHOLDER
from app.services.llm.base import (
    BaseChatService,
    BaseEmbeddingService,
    ChatMessage,
    LLMNotConfiguredError,
    LLMServiceError,
)

logger = logging.getLogger(__name__)


def _usable_key(api_key: Optional[str]) -> Optional[str]:
    key = (api_key or "").strip()
    if not key or key == OPENAI_KEY_PLACEHOLDER:
        return None
    return key


def _to_langchain(message: ChatMessage) -> BaseMessage:
    if message.role == "system":
        return SystemMessage(content=message.content)
    if message.role == "assistant":
        return AIMessage(content=message.content)
    return HumanMessage(content=message.content)


class OpenAIChatService(BaseChatService):
    """
    Chat completions through ``langchain_openai.ChatOpenAI``.

    Example:
        >>> service = OpenAIChatService(api_key="sk-...", model="gpt-4")
        >>> text = await service.complete([ChatMessage("user", "Hi")])
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4",
        temperature: float = 0.7,
    ):
        self._model = model
        self._temperature = temperature
        self._llm: Optional[ChatOpenAI] = None

        key = _usable_key(api_key)
        if key is None:
            logger.warning("OpenAIChatService: OPENAI_API_KEY not configured")
            return

        self._llm = ChatOpenAI(
            model=model,
            temperature=temperature,
            api_key=key,
            max_retries=0,
        )
        logger.info(f"OpenAIChatService initialized (model={model})")

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def is_configured(self) -> bool:
        return self._llm is not None

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        if self._llm is None:
            raise LLMNotConfiguredError("OpenAI API key not configured")

        runnable = self._llm.bind(max_tokens=max_tokens, temperature=temperature)
        try:
            response = await runnable.ainvoke([_to_langchain(m) for m in messages])
        except openai.OpenAIError as e:
            status = getattr(e, "status_code", None)
            logger.error(f"OpenAI completion failed ({type(e).__name__}, status={status}): {e}")
            raise LLMServiceError(f"OpenAI completion failed: {e}") from e

        content = getattr(response, "content", None)
        if not isinstance(content, str):
            raise LLMServiceError("OpenAI response has no text content")
        return content


class OpenAIEmbeddingService(BaseEmbeddingService):
    """Embeddings through ``langchain_openai.OpenAIEmbeddings``."""

    def __init__(self, api_key: Optional[str], model: str = "text-embedding-3-small"):
        self._model = model
        self._embeddings: Optional[OpenAIEmbeddings] = None

        key = _usable_key(api_key)
        if key is None:
            logger.warning("OpenAIEmbeddingService: OPENAI_API_KEY not configured")
            return

        self._embeddings = OpenAIEmbeddings(model=model, api_key=key, max_retries=0)
        logger.info(f"OpenAIEmbeddingService initialized (model={model})")

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def is_configured(self) -> bool:
        return self._embeddings is not None

    async def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        if self._embeddings is None:
            raise LLMNotConfiguredError("OpenAI API key not configured")
        try:
            return await self._embeddings.aembed_documents(list(texts))
        except openai.OpenAIError as e:
            raise LLMServiceError(f"OpenAI embedding failed: {e}") from e

    async def embed_query(self, text: str) -> list[float]:
        if self._embeddings is None:
            raise LLMNotConfiguredError("OpenAI API key not configured")
        try:
            return await self._embeddings.aembed_query(text)
        except openai.OpenAIError as e:
            raise LLMServiceError(f"OpenAI embedding failed: {e}") from e

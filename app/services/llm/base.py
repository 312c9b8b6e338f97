"""
LLM Service Abstract Base Classes

Defines the interface contract for chat-completion and embedding providers.
Mock and OpenAI implementations both honour these contracts, so the menu
provider, vector store and assistant never know which backend is active.

Design Pattern: Strategy Pattern
    - Backend chosen from LLM_PROVIDER at context construction
    - Mock implementations keep tests and local demos offline
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Sequence


class LLMServiceError(Exception):
    """A provider call failed (network, quota, malformed response...)."""


class LLMNotConfiguredError(LLMServiceError):
    """The provider has no usable credential."""


@dataclass(frozen=True)
class ChatMessage:
    """
    Provider-neutral chat message.

    Attributes:
        role: "system", "user" or "assistant"
        content: Message text
    """
    role: Literal["system", "user", "assistant"]
    content: str


class BaseChatService(ABC):
    """
    Abstract base class for chat-completion providers.

    Implementations must be safe to call concurrently from the event loop and
    must not retry on their own; callers bound each call with a timeout.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "openai")."""
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider holds a usable credential."""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[ChatMessage],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        """
        Run one completion and return the assistant text.

        Args:
            messages: Conversation, system message first
            max_tokens: Completion token cap
            temperature: Sampling temperature

        Returns:
            str: The model's reply

        Raises:
            LLMNotConfiguredError: No credential is available
            LLMServiceError: The provider call failed
        """
        pass


class BaseEmbeddingService(ABC):
    """Abstract base class for text-embedding providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed several documents; one vector per input, same order."""
        pass

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a search query with the same model used for documents."""
        pass

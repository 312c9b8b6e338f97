"""
Mock LLM Service Implementation

Offline stand-ins for the chat-completion and embedding providers.
Used when LLM_PROVIDER=mock to:
    - Run the whole app without an API key
    - Keep tests deterministic
    - Demo the assistant without incurring costs

Behavior:
    - Chat: a request for a JSON menu gets a canned 8-item sushi menu in a
      fenced code block; any other request is answered from the "Menu Items"
      block of the system prompt
    - Embeddings: feature-hashed bag of words, L2-normalized, so texts that
      share words have positive cosine similarity
    - Optional simulated latency like the real network calls
"""

import asyncio
import hashlib
import json
import logging
import random
import re
from typing import Sequence

import numpy as np

from app.services.llm.base import BaseChatService, BaseEmbeddingService, ChatMessage

logger = logging.getLogger(__name__)


MOCK_GENERATED_MENU = [
    {
        "id": 101,
        "name": "Dragon Roll",
        "description": "Shrimp tempura and cucumber topped with eel and avocado",
        "price": 15.99,
        "image": "https://images.unsplash.com/photo-1579871494447-9811cf80d66c?w=400&h=300&fit=crop",
    },
    {
        "id": 102,
        "name": "Spicy Tuna Roll",
        "description": "Fresh tuna, spicy mayo, scallions and sesame",
        "price": 9.99,
        "image": "https://images.unsplash.com/photo-1617196034796-73dfa7b1fd56?w=400&h=300&fit=crop",
    },
    {
        "id": 103,
        "name": "Salmon Nigiri",
        "description": "Two pieces of hand-pressed rice topped with Atlantic salmon",
        "price": 6.50,
        "image": "https://images.unsplash.com/photo-1583623025817-d180a2221d0a?w=400&h=300&fit=crop",
    },
    {
        "id": 104,
        "name": "Avocado Cucumber Roll",
        "description": "Creamy avocado and crisp cucumber wrapped in nori",
        "price": 7.25,
        "image": "https://images.unsplash.com/photo-1611143669185-af224c5e3252?w=400&h=300&fit=crop",
    },
    {
        "id": 105,
        "name": "Edamame",
        "description": "Steamed soybeans finished with sea salt",
        "price": 4.50,
        "image": "https://images.unsplash.com/photo-1564093497595-593b96d80180?w=400&h=300&fit=crop",
    },
    {
        "id": 106,
        "name": "Miso Soup",
        "description": "Dashi broth with tofu, wakame and green onion",
        "price": 3.50,
        "image": "https://images.unsplash.com/photo-1607301405390-d831c242f59b?w=400&h=300&fit=crop",
    },
    {
        "id": 107,
        "name": "Chicken Teriyaki",
        "description": "Grilled chicken glazed with teriyaki sauce, served with rice",
        "price": 16.99,
        "image": "https://images.unsplash.com/photo-1598514982205-f36b96d1e8d4?w=400&h=300&fit=crop",
    },
    {
        "id": 108,
        "name": "Rainbow Roll",
        "description": "California roll topped with tuna, salmon, yellowtail and avocado",
        "price": 17.50,
        "image": "https://images.unsplash.com/photo-1553621042-f6e147245754?w=400&h=300&fit=crop",
    },
]

# Words too common to carry meaning in menu questions
_STOPWORDS = frozenset({
    "a", "an", "and", "any", "are", "do", "for", "have", "i", "in", "is",
    "me", "of", "on", "or", "s", "show", "the", "to", "what", "with", "you",
})

_ITEM_LINE = re.compile(r"^\d+\.\s+(.+?)\s+-\s+\$(\S+)$", re.MULTILINE)


def tokenize(text: str) -> list[str]:
    return [t for t in re.findall(r"[a-z0-9]+", text.lower()) if t not in _STOPWORDS]


class MockChatService(BaseChatService):
    """
    Deterministic chat-completion service.

    Attributes:
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
    """

    def __init__(self, min_latency: float = 0.0, max_latency: float = 0.0):
        self.min_latency = min_latency
        self.max_latency = max(max_latency, min_latency)

        logger.info(
            f"MockChatService initialized (latency={self.min_latency}-{self.max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def is_configured(self) -> bool:
        return True

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        await self._simulate_latency()

        if any("JSON array" in m.content for m in messages):
            logger.debug("Mock: returning canned menu JSON")
            return "```json\n" + json.dumps(MOCK_GENERATED_MENU, indent=2) + "\n```"

        system = next((m.content for m in messages if m.role == "system"), "")
        matches = _ITEM_LINE.findall(system)
        if not matches:
            return "I'm sorry, I don't have information about that on our menu."

        listed = ", ".join(f"{name} (${price})" for name, price in matches)
        return f"Here's what I found on our menu: {listed}."


class MockEmbeddingService(BaseEmbeddingService):
    """
    Feature-hashing embedding service.

    Each token is hashed into one of ``dimensions`` buckets; the bucket counts
    are L2-normalized. Texts with no meaningful tokens map to the zero vector.
    """

    def __init__(self, dimensions: int = 256):
        if dimensions < 1:
            raise ValueError("dimensions must be positive")
        self.dimensions = dimensions

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def is_configured(self) -> bool:
        return True

    def _bucket(self, token: str) -> int:
        digest = hashlib.md5(token.encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "big") % self.dimensions

    def _embed(self, text: str) -> list[float]:
        vector = np.zeros(self.dimensions, dtype=float)
        for token in tokenize(text):
            vector[self._bucket(token)] += 1.0
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    async def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        return [self._embed(t) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._embed(text)

"""
RAG Answering Service

Answers free-text questions about the menu:
    1. retrieve the most similar menu items from the vector store
    2. build a system prompt holding only those items
    3. run one completion bounded by a timeout

The service is stateless across calls apart from its readiness flag.
``ask`` never raises; every failure maps to a fixed answer with no sources.

Prompt policy: the assistant is restricted to menu information and must not
claim any access to the user's cart or order.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional, Sequence

from app.schemas import ChatTurn, RagAnswer, SourceRef
from app.services.llm.base import BaseChatService, ChatMessage
from app.services.vector_store import RetrievalResult, VectorStore

logger = logging.getLogger(__name__)


UNAVAILABLE_ANSWER = "Sorry, the AI assistant is not available at the moment."
MENU_UNAVAILABLE_ANSWER = "Sorry, the menu database is not available. Please try again later."
NO_MATCH_ANSWER = (
    "I couldn't find any menu items matching your question. "
    "Could you try rephrasing or ask about something else?"
)
ERROR_ANSWER = "Sorry, I encountered an error while processing your question. Please try again."

CART_ADD_REDIRECT = (
    "I cannot add items to your cart. Please browse the menu and add items "
    "directly to your cart using the '+ Add to Cart' buttons."
)
CART_VIEW_REDIRECT = (
    "I don't have access to your cart. You can view your cart and see the total "
    "by clicking the cart icon in the navigation."
)

SYSTEM_PROMPT_TEMPLATE = f"""You are a helpful assistant for a restaurant. Answer questions about the menu using ONLY the provided menu items. Be friendly and concise.

CRITICAL RESTRICTIONS - YOU CANNOT ACCESS ORDER DATA:
- You CANNOT add, remove, or modify items in user orders
- You CANNOT calculate order totals or prices
- You CANNOT access user cart data
- You CANNOT see what items are in the user's cart
- NEVER claim to have added items to the cart
- NEVER claim to know what's in the user's order unless they explicitly tell you

You can ONLY:
- Provide information about menu items from the menu
- Answer questions about ingredients, descriptions, categories, dietary info
- Make recommendations based on menu data

If a user asks you to add items to their cart, explain: "{CART_ADD_REDIRECT}"

If a user asks about their order total or what's in their cart, explain: "{CART_VIEW_REDIRECT}"

If the user asks about items not in the context, politely say you don't have that information.

Menu Items:
{{context}}"""


class AssistantState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def format_context(results: Sequence[RetrievalResult]) -> str:
    """Render retrieved items in rank order for the system prompt."""
    blocks = []
    for result in results:
        item = result.item
        lines = [
            f"{result.rank}. {item.name} - ${item.price:.2f}",
            f"Description: {item.description}",
        ]
        if item.ingredients:
            lines.append(f"Ingredients: {item.ingredients}")
        if item.category:
            lines.append(f"Category: {item.category}")
        if item.dietary:
            lines.append(f"Dietary: {', '.join(item.dietary)}")
        if item.spice_level is not None:
            lines.append(f"Spice Level: {item.spice_level}/3")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_system_prompt(results: Sequence[RetrievalResult]) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(context=format_context(results))


class RAGService:
    """
    Retrieval-augmented menu assistant.

    State machine: UNINITIALIZED → READY on ``initialize()`` when the chat
    provider holds a usable credential. There is no way back to
    UNINITIALIZED short of a restart.
    """

    def __init__(
        self,
        chat: BaseChatService,
        vector_store: VectorStore,
        top_k: int = 5,
        timeout_seconds: float = 30.0,
        max_tokens: int = 500,
        temperature: float = 0.7,
        history_limit: int = 10,
        enable_performance_logging: bool = False,
    ):
        self._chat = chat
        self._vector_store = vector_store
        self.top_k = top_k
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.history_limit = history_limit
        self._perf = enable_performance_logging
        self._state = AssistantState.UNINITIALIZED

    @property
    def state(self) -> AssistantState:
        return self._state

    def is_initialized(self) -> bool:
        return self._state == AssistantState.READY

    def initialize(self) -> bool:
        """Idempotent readiness check; a missing credential is permanent."""
        if self._state == AssistantState.READY:
            return True

        if not self._chat.is_configured:
            logger.warning(
                f"⚠️  {self._chat.provider_name} credential not configured - RAG disabled"
            )
            return False

        self._state = AssistantState.READY
        logger.info("✅ RAG service initialized")
        return True

    def _build_messages(
        self,
        system_prompt: str,
        question: str,
        history: Optional[Sequence[ChatTurn]],
    ) -> list[ChatMessage]:
        messages = [ChatMessage("system", system_prompt)]
        if history and self.history_limit > 0:
            for turn in history[-self.history_limit:]:
                messages.append(ChatMessage(turn.role, turn.content))
        messages.append(ChatMessage("user", question))
        return messages

    async def ask(
        self,
        question: str,
        history: Optional[Sequence[ChatTurn]] = None,
    ) -> RagAnswer:
        """
        Answer ``question`` from retrieved menu items.

        Args:
            question: Raw user text (may be empty)
            history: Earlier turns to replay, oldest first

        Returns:
            RagAnswer: Answer text and the cited menu items
        """
        if not self.is_initialized():
            return RagAnswer(answer=UNAVAILABLE_ANSWER, sources=[])

        if not self._vector_store.is_initialized():
            return RagAnswer(answer=MENU_UNAVAILABLE_ANSWER, sources=[])

        try:
            start = time.perf_counter()
            logger.info(f"🤖 RAG question: {question!r}")

            results = await self._vector_store.semantic_search(question, self.top_k)
            if self._perf:
                logger.info(f"⏱️  RAG context retrieval: {(time.perf_counter() - start) * 1000:.0f}ms")

            if not results:
                return RagAnswer(answer=NO_MATCH_ANSWER, sources=[])

            messages = self._build_messages(build_system_prompt(results), question, history)

            generation_start = time.perf_counter()
            answer = await asyncio.wait_for(
                self._chat.complete(
                    messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
            if self._perf:
                now = time.perf_counter()
                logger.info(f"⏱️  RAG LLM generation: {(now - generation_start) * 1000:.0f}ms")
                logger.info(f"⏱️  RAG total time: {(now - start) * 1000:.0f}ms")

            logger.info(f"✅ RAG answer generated ({len(results)} sources)")

            return RagAnswer(
                answer=answer,
                sources=[
                    SourceRef(
                        id=r.item.id,
                        name=r.item.name,
                        price=r.item.price,
                        similarity=round(r.similarity, 2),
                    )
                    for r in results
                ],
            )

        except asyncio.TimeoutError:
            logger.error(f"❌ RAG completion timed out after {self.timeout_seconds}s")
        except Exception as e:
            logger.error(f"❌ RAG error: {type(e).__name__}: {e}")

        return RagAnswer(answer=ERROR_ANSWER, sources=[])

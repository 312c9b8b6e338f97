"""
Menu Assistant

Chat-facing wrapper around the RAG service used by the web client's
assistant widget: readiness status, chat turns with replayed history, and
rebuilding the search index from the current menu.
"""

import logging
from typing import Sequence

from app.schemas import AssistantStatus, ChatResponse, ChatTurn, MenuType, ReindexResponse, ToolUsage
from app.services.menu.provider import MenuProvider
from app.services.rag import RAGService
from app.services.vector_store import VectorStore

logger = logging.getLogger(__name__)


MENU_SEARCH_TOOL = "menu_search"


class MenuAssistant:
    """Stateless chat facade; conversation history is supplied by the caller."""

    def __init__(self, rag: RAGService, vector_store: VectorStore, menu_provider: MenuProvider):
        self._rag = rag
        self._vector_store = vector_store
        self._menu_provider = menu_provider

    def status(self) -> AssistantStatus:
        rag_ready = self._rag.is_initialized()
        store_ready = self._vector_store.is_initialized()
        return AssistantStatus(
            agent=rag_ready and store_ready,
            rag=rag_ready,
            vector_store=store_ready,
        )

    async def chat(self, message: str, history: Sequence[ChatTurn] = ()) -> ChatResponse:
        result = await self._rag.ask(message, history=list(history))

        tools_used = []
        if result.sources:
            tools_used.append(ToolUsage(tool=MENU_SEARCH_TOOL, sources=result.sources))

        return ChatResponse(response=result.answer, tools_used=tools_used)

    async def reindex(self, menu_type: MenuType = MenuType.STATIC) -> ReindexResponse:
        """
        Rebuild the vector store from the static or live menu.

        ``menu_type`` in the response is the menu actually indexed; a live
        request that fell back reports ``static``. When embedding fails the
        previous index stays in place and ``reindexed`` is False.
        """
        if menu_type == MenuType.LIVE:
            items, source = await self._menu_provider.load_live_menu()
        else:
            items, source = self._menu_provider.get_static_menu(), MenuType.STATIC

        reindexed = await self._vector_store.reload(items)
        if reindexed:
            logger.info(f"Assistant index rebuilt from {source.value} menu ({len(items)} items)")
        else:
            logger.warning(f"Assistant index rebuild from {source.value} menu failed; previous index kept")

        return ReindexResponse(
            menu_type=source,
            reindexed=reindexed,
            indexed=len(items) if reindexed else 0,
            vector_store=self._vector_store.is_initialized(),
        )

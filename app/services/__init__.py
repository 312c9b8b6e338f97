"""
                        Services Module

Contains the business logic behind the API routes. Language-model backends
follow the hybrid pattern: each has a Mock (development, tests) and a Real
(production) implementation selected from settings.

Services:
    - llm: chat completion and embedding providers (mock / OpenAI)
    - menu: static catalog and LLM-generated menu with fallback
    - vector_store: in-memory menu embeddings and similarity search
    - rag: retrieval-augmented menu question answering
    - assistant: chat facade used by the web client
    - orders: atomic order persistence
"""

from app.services.assistant import MenuAssistant
from app.services.menu import MenuProvider
from app.services.orders import OrderPersistenceError, OrderRepository
from app.services.rag import RAGService
from app.services.vector_store import VectorStore

__all__ = [
    "MenuAssistant",
    "MenuProvider",
    "OrderPersistenceError",
    "OrderRepository",
    "RAGService",
    "VectorStore",
]

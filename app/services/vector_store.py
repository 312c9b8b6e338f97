"""
Menu Vector Store

Holds one embedding per menu item and answers nearest-neighbour queries by
cosine similarity. The working set lives in process memory and is rebuilt on
startup or on an explicit reload.

Failure policy:
    - Embedding provider unavailable during the first load → the store stays
      uninitialized and every search returns an empty list
    - Failure during a reload → the previous working set is kept
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from app.schemas import MenuItem
from app.services.llm.base import BaseEmbeddingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EmbeddingRecord:
    """A menu item together with the text that was embedded and its vector."""
    item: MenuItem
    document: str
    fingerprint: str
    vector: np.ndarray


@dataclass(frozen=True)
class RetrievalResult:
    """A menu item ranked against a query. ``rank`` starts at 1."""
    item: MenuItem
    similarity: float
    rank: int


def menu_item_document(item: MenuItem) -> str:
    """Text representation of a menu item used for embedding."""
    parts = [f"{item.name}. {item.description}"]
    if item.ingredients:
        parts.append(f"Ingredients: {item.ingredients}")
    if item.category:
        parts.append(f"Category: {item.category}")
    if item.dietary:
        parts.append(f"Dietary: {', '.join(item.dietary)}")
    if item.spice_level is not None:
        parts.append(f"Spice level: {item.spice_level}/3")
    return "\n".join(parts)


def _fingerprint(document: str) -> str:
    return hashlib.sha256(document.encode("utf-8")).hexdigest()


class VectorStore:
    """
    In-memory embedding table for the current menu.

    Example:
        >>> store = VectorStore(embeddings)
        >>> await store.initialize(items)
        >>> results = await store.semantic_search("vegetarian rolls", k=5)
    """

    def __init__(self, embeddings: BaseEmbeddingService, enable_performance_logging: bool = False):
        self._embeddings = embeddings
        self._records: list[EmbeddingRecord] = []
        self._matrix: Optional[np.ndarray] = None
        self._initialized = False
        self._perf = enable_performance_logging

    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[EmbeddingRecord, ...]:
        return tuple(self._records)

    async def initialize(self, items: Sequence[MenuItem]) -> bool:
        """
        Embed ``items`` and make them searchable.

        Vectors of items whose document text did not change since the last
        load are reused; only new or edited items are sent to the provider.

        Returns:
            bool: Whether ``items`` are now the searchable working set. False
                when nothing was loaded; a previously loaded set stays searchable
                (see ``is_initialized``).
        """
        if not items:
            logger.warning("Vector store: no menu items to index")
            return False

        if not self._embeddings.is_configured:
            logger.warning(
                f"Vector store: embedding provider '{self._embeddings.provider_name}' "
                "not configured - semantic search disabled"
            )
            return False

        start = time.perf_counter()
        cached = {(str(r.item.id), r.fingerprint): r.vector for r in self._records}

        documents = [menu_item_document(item) for item in items]
        fingerprints = [_fingerprint(doc) for doc in documents]
        missing = [
            i for i, item in enumerate(items)
            if (str(item.id), fingerprints[i]) not in cached
        ]

        try:
            fresh = []
            if missing:
                fresh = await self._embeddings.embed_documents([documents[i] for i in missing])
            if len(fresh) != len(missing):
                raise ValueError(
                    f"expected {len(missing)} embeddings, provider returned {len(fresh)}"
                )
            computed = dict(zip(missing, (np.asarray(v, dtype=float) for v in fresh)))

            records = []
            for i, item in enumerate(items):
                vector = computed.get(i)
                if vector is None:
                    vector = cached[(str(item.id), fingerprints[i])]
                records.append(EmbeddingRecord(item, documents[i], fingerprints[i], vector))

            matrix = np.vstack([r.vector for r in records])
        except Exception as e:
            logger.warning(f"Vector store: failed to embed menu items ({type(e).__name__}: {e})")
            return False

        self._records = records
        self._matrix = matrix
        self._initialized = True

        logger.info(
            f"✅ Vector store ready: {len(records)} items "
            f"({len(missing)} embedded, {len(records) - len(missing)} reused)"
        )
        if self._perf:
            logger.info(f"⏱️  Vector store build: {(time.perf_counter() - start) * 1000:.0f}ms")
        return True

    async def reload(self, items: Sequence[MenuItem]) -> bool:
        """Rebuild the working set; keeps the previous one and returns False if embedding fails."""
        logger.info(f"Vector store: reloading {len(items)} items")
        return await self.initialize(items)

    def clear(self) -> None:
        self._records = []
        self._matrix = None
        self._initialized = False

    async def semantic_search(self, query: str, k: int) -> list[RetrievalResult]:
        """
        Return the ``k`` items most similar to ``query``.

        Results are ordered by descending cosine similarity; equal scores keep
        menu order. Returns an empty list when the store is not initialized.

        Raises:
            ValueError: If ``k`` is not a positive integer
        """
        if not self._initialized:
            return []
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise ValueError(f"k must be a positive integer, got {k!r}")

        records, matrix = self._records, self._matrix

        start = time.perf_counter()
        query_vector = np.asarray(await self._embeddings.embed_query(query), dtype=float)
        if self._perf:
            logger.info(f"⏱️  Query embedding: {(time.perf_counter() - start) * 1000:.0f}ms")

        scores = np.clip(cosine_similarity(query_vector.reshape(1, -1), matrix)[0], -1.0, 1.0)
        order = np.argsort(-scores, kind="stable")[:k]

        return [
            RetrievalResult(item=records[i].item, similarity=float(scores[i]), rank=rank)
            for rank, i in enumerate(order, start=1)
        ]

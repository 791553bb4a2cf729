"""Similarity-search store for uploaded document passages.

The store is an explicitly constructed service owned by the application
lifespan and injected into the turn orchestrator. Reads may run concurrently;
writes are serialized.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

import faiss
import numpy as np
from openai import AsyncOpenAI

from ..core.config import settings
from ..schemas.document import Document

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    async def embed(self, texts: list[str]) -> list[list[float]]: ...


class DocumentStore(Protocol):
    async def init(self) -> None: ...

    async def add_documents(self, documents: Sequence[Document]) -> int: ...

    async def search(self, query: str, k: int = 4) -> list[Document]: ...

    async def teardown(self) -> None: ...


class OpenAIEmbedder:
    """Embeds text with the OpenAI embeddings API."""

    def __init__(self, model_id: str | None = None, api_key: str | None = None):
        self.model_id = model_id or settings.EMBEDDING_MODEL_ID
        if api_key is None and settings.OPENAI_API_KEY:
            api_key = settings.OPENAI_API_KEY.get_secret_value()
        self._api_key = api_key
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def embed(self, texts: list[str]) -> list[list[float]]:
        response = await self._get_client().embeddings.create(model=self.model_id, input=texts)
        return [item.embedding for item in response.data]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


def _as_unit_matrix(embeddings: list[list[float]]) -> np.ndarray:
    matrix = np.array(embeddings, dtype=np.float32)
    if matrix.ndim != 2:
        raise ValueError(f"Unexpected embedding shape: {matrix.shape}")
    faiss.normalize_L2(matrix)
    return matrix


class InMemoryVectorStore:
    """Cosine-similarity search over embedded passages in a flat faiss index.

    Vectors are L2-normalized, so inner product on ``IndexFlatIP`` is cosine
    similarity. Index positions line up with ``_documents``.
    """

    def __init__(self, embedder: Embedder):
        self.embedder = embedder
        self._documents: list[Document] = []
        self._index: faiss.IndexFlatIP | None = None
        self._write_lock = asyncio.Lock()
        self._ready = False

    @property
    def size(self) -> int:
        return len(self._documents)

    async def init(self) -> None:
        self._ready = True
        logger.info("Document store initialized")

    async def add_documents(self, documents: Sequence[Document]) -> int:
        """Embed and append documents. Returns the number added."""
        self._ensure_ready()
        if not documents:
            return 0
        matrix = _as_unit_matrix(await self.embedder.embed([doc.page_content for doc in documents]))

        async with self._write_lock:
            if self._index is None:
                self._index = faiss.IndexFlatIP(int(matrix.shape[1]))
            # No await between these two, so searches never see them out of step.
            self._index.add(matrix)
            self._documents = self._documents + list(documents)

        logger.info("Added %s documents (store size %s)", len(documents), self.size)
        return len(documents)

    async def search(self, query: str, k: int = 4) -> list[Document]:
        """Return up to ``k`` documents most similar to ``query``."""
        self._ensure_ready()
        if self._index is None or k <= 0:
            return []

        query_vector = _as_unit_matrix(await self.embedder.embed([query]))
        documents, index = self._documents, self._index
        if index is None or not documents:
            return []
        _, positions = index.search(query_vector, min(k, len(documents)))
        return [documents[int(position)] for position in positions[0] if position >= 0]

    async def teardown(self) -> None:
        async with self._write_lock:
            self._documents, self._index = [], None
        close = getattr(self.embedder, "close", None)
        if close is not None:
            await close()
        self._ready = False
        logger.info("Document store torn down")

    def _ensure_ready(self) -> None:
        if not self._ready:
            raise RuntimeError("Document store is not initialized")

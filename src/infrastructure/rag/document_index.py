"""
infrastructure.rag.document_index - FAISS-backed DocumentIndex.

One index holds every ingested chunk. Each chunk carries its owner in the
metadata (None for the shared corpus); search() filters on that field
before ranking so another user's chunks can never occupy a top-k slot.

The FAISS calls are synchronous and run in the default executor. Writes
are serialized with a lock and swap in a new store when done, so readers
never see a half-merged index.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.faiss import DistanceStrategy
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from domain.exceptions import RetrievalError
from domain.models import RetrievalChunk

logger = logging.getLogger(__name__)


class FAISSDocumentIndex:
    """DocumentIndex implementation over a LangChain FAISS vectorstore.

    The index is created lazily: until the first chunk is added there is
    nothing to search and search() returns an empty list.
    """

    def __init__(self, vectorstore_path: str | Path, embeddings: Embeddings):
        self.vectorstore_path = Path(vectorstore_path)
        self._embeddings = embeddings
        self._store: Optional[FAISS] = None
        self._write_lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return self._store.index.ntotal if self._store is not None else 0

    # ================================================================
    # Lifecycle
    # ================================================================

    def load(self) -> None:
        """Load a previously saved index from disk, if there is one."""
        if not (self.vectorstore_path / "index.faiss").exists():
            logger.info("No saved index at %s, starting empty", self.vectorstore_path)
            return
        try:
            self._store = FAISS.load_local(
                folder_path=str(self.vectorstore_path),
                embeddings=self._embeddings,
                allow_dangerous_deserialization=True,
                distance_strategy=DistanceStrategy.COSINE,
            )
        except Exception as exc:
            raise RetrievalError(
                f"Could not load document index from {self.vectorstore_path}."
            ) from exc
        logger.info("Document index loaded (%d vectors)", self.size)

    # ================================================================
    # DocumentIndex port
    # ================================================================

    async def search(
        self, query: str, owner_ids: set[Optional[int]], k: int,
    ) -> list[RetrievalChunk]:
        store = self._store
        if store is None or k <= 0:
            return []

        def _visible(metadata: dict) -> bool:
            return metadata.get("owner_id") in owner_ids

        loop = asyncio.get_running_loop()
        try:
            results = await loop.run_in_executor(
                None,
                lambda: store.similarity_search_with_score(
                    query, k=k, filter=_visible, fetch_k=max(store.index.ntotal, k),
                ),
            )
        except Exception as exc:
            raise RetrievalError("Document search failed.") from exc

        return [self._to_chunk(doc, score) for doc, score in results]

    async def add_chunks(self, chunks: list[RetrievalChunk]) -> int:
        if not chunks:
            return 0
        documents = [
            Document(
                page_content=chunk.text,
                metadata={
                    "owner_id": chunk.owner_id,
                    "file_name": chunk.file_name,
                    "chunk_index": chunk.chunk_index,
                },
            )
            for chunk in chunks
        ]

        async with self._write_lock:
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self._merge, documents)
            except Exception as exc:
                raise RetrievalError("Failed to add chunks to the document index.") from exc

        logger.info("Indexed %d chunks, total vectors: %d", len(documents), self.size)
        return len(documents)

    # ================================================================
    # Private helpers
    # ================================================================

    def _merge(self, documents: list[Document]) -> None:
        new_store = FAISS.from_documents(
            documents=documents,
            embedding=self._embeddings,
            distance_strategy=DistanceStrategy.COSINE,
        )
        if self._store is None:
            merged = new_store
        else:
            # Merge into a copy; search() keeps reading the old snapshot.
            merged = FAISS.deserialize_from_bytes(
                self._store.serialize_to_bytes(),
                self._embeddings,
                allow_dangerous_deserialization=True,
                distance_strategy=DistanceStrategy.COSINE,
            )
            merged.merge_from(new_store)

        self.vectorstore_path.mkdir(parents=True, exist_ok=True)
        merged.save_local(str(self.vectorstore_path))
        self._store = merged

    @staticmethod
    def _to_chunk(doc: Document, score: float) -> RetrievalChunk:
        metadata = doc.metadata or {}
        return RetrievalChunk(
            text=doc.page_content,
            owner_id=metadata.get("owner_id"),
            file_name=metadata.get("file_name", ""),
            chunk_index=metadata.get("chunk_index", 0),
            score=float(score),
        )

"""
application.services.retrieval - Caller-scoped search over the document index.

A UserScopedRetriever is a projection of one caller onto the shared
index: it only ever asks for the caller's own chunks plus the shared
corpus, and re-checks ownership on whatever comes back.
"""

from __future__ import annotations

import logging

from domain.models import RetrievalChunk
from domain.ports import DocumentIndex

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 10


class UserScopedRetriever:

    def __init__(self, index: DocumentIndex, owner_id: int, k: int = DEFAULT_TOP_K):
        self._index = index
        self._owner_id = owner_id
        self._k = k

    @property
    def owner_id(self) -> int:
        return self._owner_id

    async def retrieve(self, query: str) -> list[RetrievalChunk]:
        """Top-k passages for *query*; empty when nothing matches.

        Index failures propagate as RetrievalError.
        """
        if not query.strip():
            return []

        chunks = await self._index.search(query, {self._owner_id, None}, self._k)
        visible = [c for c in chunks if c.visible_to(self._owner_id)]
        if len(visible) != len(chunks):
            logger.error(
                "Index returned %d chunk(s) outside the scope of user %d, dropped",
                len(chunks) - len(visible), self._owner_id,
            )
        return visible[: self._k]

"""
infrastructure.rag.pdf_loader - Split a PDF into retrieval chunks.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from langchain_community.document_loaders import PyPDFLoader
from langchain_text_splitters import RecursiveCharacterTextSplitter
from pypdf.errors import PyPdfError

from domain.models import RetrievalChunk

logger = logging.getLogger(__name__)


class PDFChunker:
    """Load a PDF with PyPDFLoader and split it into owner-tagged chunks."""

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
        )

    def split(
        self,
        file_path: str | Path,
        owner_id: Optional[int],
        file_name: str,
    ) -> list[RetrievalChunk]:
        """Chunks with blank text dropped. Raises ValueError for unparsable files."""
        loader = PyPDFLoader(file_path=str(file_path))
        try:
            pages = loader.load()
        except PyPdfError as exc:
            raise ValueError("not a readable PDF") from exc
        pieces = self._splitter.split_documents(pages)
        logger.info("Split %s into %d chunks (%d pages)", file_name, len(pieces), len(pages))
        return [
            RetrievalChunk(
                text=piece.page_content,
                owner_id=owner_id,
                file_name=file_name,
                chunk_index=i,
            )
            for i, piece in enumerate(pieces)
            if piece.page_content.strip()
        ]

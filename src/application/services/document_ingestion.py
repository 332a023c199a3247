"""
application.services.document_ingestion - PDF upload → chunks → document index.

Uploaded files are written to the upload directory only for as long as
the loader needs them.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from domain.exceptions import InvalidArgumentError
from domain.ports import DocumentChunker, DocumentIndex
from application.dto import IngestionResult

logger = logging.getLogger(__name__)


class DocumentIngestionService:
    """Splits uploaded PDFs and stores their chunks under the uploader's id.

    owner_id=None puts the chunks in the shared corpus every user can search.
    """

    def __init__(
        self,
        index: DocumentIndex,
        chunker: DocumentChunker,
        upload_dir: str | Path,
    ):
        self._index = index
        self._chunker = chunker
        self._upload_dir = Path(upload_dir)

    async def ingest_pdf(
        self,
        owner_id: Optional[int],
        file_name: str,
        content: bytes,
    ) -> IngestionResult:
        if Path(file_name).suffix.lower() != ".pdf":
            raise InvalidArgumentError("Only PDF files are allowed.")
        if not content:
            raise InvalidArgumentError("The uploaded file is empty.")

        self._upload_dir.mkdir(parents=True, exist_ok=True)
        temp_path = self._upload_dir / f"{uuid4().hex}.pdf"
        temp_path.write_bytes(content)
        try:
            return await self.ingest_file(owner_id, temp_path, display_name=file_name)
        finally:
            temp_path.unlink(missing_ok=True)

    async def ingest_file(
        self,
        owner_id: Optional[int],
        file_path: str | Path,
        display_name: Optional[str] = None,
    ) -> IngestionResult:
        """Index a PDF that is already on disk (used by the CLI)."""
        path = Path(file_path)
        name = display_name or path.name
        if path.suffix.lower() != ".pdf":
            raise InvalidArgumentError("Only PDF files are allowed.")

        loop = asyncio.get_running_loop()
        try:
            chunks = await loop.run_in_executor(
                None, self._chunker.split, str(path), owner_id, name,
            )
        except (OSError, ValueError) as exc:
            raise InvalidArgumentError(f"Could not read PDF '{name}': {exc}") from exc

        if not chunks:
            raise InvalidArgumentError("No content extracted from PDF.")

        stored = await self._index.add_chunks(chunks)
        logger.info(
            "Ingested %s for %s: %d chunks",
            name, "shared corpus" if owner_id is None else f"user {owner_id}", stored,
        )
        return IngestionResult(file_name=name, chunks_stored=stored)

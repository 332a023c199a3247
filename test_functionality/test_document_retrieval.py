"""Document index, per-user retrieval scope and PDF ingestion."""

import asyncio

import pytest

from agent.tools.knowledge import NO_RELEVANT_DATA, KnowledgeSearchTool
from application.context import SessionContext
from application.services.document_ingestion import DocumentIngestionService
from application.services.retrieval import UserScopedRetriever
from domain.exceptions import InvalidArgumentError
from domain.models import RetrievalChunk
from infrastructure.rag.document_index import FAISSDocumentIndex
from infrastructure.rag.pdf_loader import PDFChunker


def _chunks(owner_id, file_name, texts):
    return [
        RetrievalChunk(text=t, owner_id=owner_id, file_name=file_name, chunk_index=i)
        for i, t in enumerate(texts)
    ]


@pytest.fixture
def index(tmp_path, embeddings):
    return FAISSDocumentIndex(tmp_path / "faiss", embeddings)


@pytest.fixture
async def populated(index):
    await index.add_chunks(_chunks(1, "alice.pdf", ["Alice policy deductible is 500.", "Alice rider list."]))
    await index.add_chunks(_chunks(2, "bob.pdf", [f"Bob private note {i}." for i in range(5)]))
    await index.add_chunks(_chunks(None, "handbook.pdf", ["Health insurance pays hospital bills."]))
    return index


async def test_empty_index_returns_nothing(index):
    assert await index.search("anything", {1, None}, 5) == []


async def test_retriever_sees_own_and_shared_chunks_only(populated):
    retriever = UserScopedRetriever(populated, owner_id=1, k=10)
    chunks = await retriever.retrieve("deductible")

    assert len(chunks) == 3
    assert {c.owner_id for c in chunks} == {1, None}
    assert all(c.score is not None for c in chunks)


async def test_exact_match_of_foreign_text_is_not_returned(populated):
    retriever = UserScopedRetriever(populated, owner_id=1, k=10)
    chunks = await retriever.retrieve("Bob private note 0.")
    assert "bob.pdf" not in {c.file_name for c in chunks}


async def test_top_k_is_respected(populated):
    retriever = UserScopedRetriever(populated, owner_id=2, k=3)
    chunks = await retriever.retrieve("note")
    assert len(chunks) == 3
    assert {c.owner_id for c in chunks} <= {2, None}


async def test_blank_query(populated):
    assert await UserScopedRetriever(populated, owner_id=1).retrieve("  ") == []


async def test_index_persists_and_reloads(populated, tmp_path, embeddings):
    reloaded = FAISSDocumentIndex(tmp_path / "faiss", embeddings)
    reloaded.load()
    assert reloaded.size == populated.size == 8


async def test_search_during_ingestion_sees_a_consistent_index(index):
    await index.add_chunks(_chunks(1, "seed.pdf", [f"seed passage {i}" for i in range(50)]))
    failures = []

    async def ingest():
        for batch in range(30):
            await index.add_chunks(
                _chunks(2, f"upload-{batch}.pdf", [f"upload {batch} chunk {i}" for i in range(100)])
            )

    async def read():
        for _ in range(150):
            try:
                chunks = await index.search("seed", {1, None}, 10)
            except Exception as exc:
                failures.append(repr(exc))
                continue
            assert len(chunks) == 10
            assert {c.owner_id for c in chunks} == {1}

    await asyncio.gather(ingest(), *(read() for _ in range(4)))

    assert failures == []
    assert index.size == 50 + 30 * 100


async def test_knowledge_tool_formats_passages(populated):
    tool = KnowledgeSearchTool(populated, k=10)
    result = await tool.execute(SessionContext(user_id=1), query="hospital")

    assert "[alice.pdf]\nAlice policy deductible is 500." in result.output
    assert "[handbook.pdf]\nHealth insurance pays hospital bills." in result.output
    assert "bob.pdf" not in result.output


async def test_knowledge_tool_sentinel_on_empty_index(index):
    result = await KnowledgeSearchTool(index).execute(SessionContext(user_id=1), query="hospital")
    assert result.output == NO_RELEVANT_DATA


class _StubChunker:
    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    def split(self, file_path, owner_id, file_name):
        self.calls.append((file_path, owner_id, file_name))
        return _chunks(owner_id, file_name, self.texts)


class TestIngestion:
    async def test_rejects_non_pdf(self, index, tmp_path):
        service = DocumentIngestionService(index, _StubChunker(["x"]), tmp_path / "up")
        with pytest.raises(InvalidArgumentError, match="Only PDF files are allowed."):
            await service.ingest_pdf(1, "notes.txt", b"hello")

    async def test_rejects_empty_upload(self, index, tmp_path):
        service = DocumentIngestionService(index, _StubChunker(["x"]), tmp_path / "up")
        with pytest.raises(InvalidArgumentError):
            await service.ingest_pdf(1, "empty.pdf", b"")

    async def test_no_text_extracted(self, index, tmp_path):
        service = DocumentIngestionService(index, _StubChunker([]), tmp_path / "up")
        with pytest.raises(InvalidArgumentError, match="No content extracted from PDF."):
            await service.ingest_pdf(1, "scan.pdf", b"%PDF-1.4")
        assert index.size == 0

    async def test_upload_indexes_under_owner_and_cleans_up(self, index, tmp_path):
        chunker = _StubChunker(["Coverage starts on day one.", "Claims within 30 days."])
        upload_dir = tmp_path / "up"
        service = DocumentIngestionService(index, chunker, upload_dir)

        result = await service.ingest_pdf(7, "policy.pdf", b"%PDF-1.4 fake")

        assert result.file_name == "policy.pdf"
        assert result.chunks_stored == 2
        assert chunker.calls[0][1:] == (7, "policy.pdf")
        assert list(upload_dir.iterdir()) == []

        mine = await UserScopedRetriever(index, owner_id=7).retrieve("claims")
        assert {c.file_name for c in mine} == {"policy.pdf"}
        assert await UserScopedRetriever(index, owner_id=8).retrieve("claims") == []


class TestPDFChunker:
    def _blank_pdf(self, path):
        from pypdf import PdfWriter

        writer = PdfWriter()
        writer.add_blank_page(width=200, height=200)
        with open(path, "wb") as fh:
            writer.write(fh)
        return path

    def test_blank_pdf_yields_no_chunks(self, tmp_path):
        chunker = PDFChunker(chunk_size=200, chunk_overlap=20)
        assert chunker.split(self._blank_pdf(tmp_path / "blank.pdf"), 1, "blank.pdf") == []

    async def test_garbage_upload_is_invalid_argument(self, index, tmp_path):
        service = DocumentIngestionService(index, PDFChunker(), tmp_path / "up")
        with pytest.raises(InvalidArgumentError, match="Could not read PDF 'broken.pdf'"):
            await service.ingest_pdf(1, "broken.pdf", b"this is not a pdf at all")

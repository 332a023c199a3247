"""
agent.tools.knowledge - Document-grounded answers from the knowledge base.

Searches the shared insurance corpus plus the caller's own uploaded PDFs.
When nothing relevant comes back the tool answers with a fixed sentinel
so the model has nothing to embellish.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from application.context import SessionContext
from application.services.retrieval import DEFAULT_TOP_K, UserScopedRetriever
from domain.ports import DocumentIndex
from agent.tools.base import BaseTool, ToolInput, ToolResult

logger = logging.getLogger(__name__)

NO_RELEVANT_DATA = "There is no relevant data for what you asked."


class KnowledgeSearchInput(ToolInput):
    """Input schema for the general_assistant_knowledge tool."""

    query: str = Field(
        min_length=1,
        description="The user's question, phrased as a search query.",
    )


class KnowledgeSearchTool(BaseTool):
    """Retrieve passages from the knowledge base and the caller's PDFs."""

    name = "general_assistant_knowledge"
    description = (
        "General assistant tool with access to the insurance knowledge base and "
        "to the PDF documents the user has uploaded. ALWAYS use this tool for general "
        "questions, insurance concepts, or when the user asks about the contents of "
        "their uploaded PDFs. Examples: 'What is health insurance?', "
        "'Extract coverage details from my PDF', 'What does my policy document say "
        "about exclusions?'. Do NOT use it for the user's own policy records or the "
        "plan catalog; there are dedicated tools for those. If this tool returns "
        f"'{NO_RELEVANT_DATA}', reply with exactly that sentence."
    )

    def __init__(self, index: DocumentIndex, k: int = DEFAULT_TOP_K):
        self._index = index
        self._k = k

    def get_schema(self) -> type[BaseModel]:
        return KnowledgeSearchInput

    async def execute(self, ctx: SessionContext, query: str = "", **kwargs) -> ToolResult:
        retriever = UserScopedRetriever(self._index, ctx.user_id, k=self._k)
        chunks = await retriever.retrieve(query)
        if not chunks:
            logger.info("No relevant passages for user %d", ctx.user_id)
            return ToolResult(output=NO_RELEVANT_DATA, data=[])

        passages = []
        for chunk in chunks:
            source = chunk.file_name or "knowledge base"
            passages.append(f"[{source}]\n{chunk.text}")
        return ToolResult(output="\n\n".join(passages), data=chunks)

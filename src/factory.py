"""
factory - Composition root for the insurance AI assistant.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get fully
configured services.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    service = factory.create_conversation_service()
    result = await service.run_turn(ctx, TurnRequest(input="Which plans do you offer?"))

The chat model and the embeddings can be injected (tests pass fakes);
otherwise they are built from Settings during initialize().
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from infrastructure.config import Settings
from infrastructure.llm.llm_builder import build_chat_model
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.seed import seed_reference_data
from infrastructure.persistence.user_repo import SQLiteUserRepository
from infrastructure.persistence.plan_repo import SQLitePlanRepository
from infrastructure.persistence.agent_repo import SQLiteAgentRepository
from infrastructure.persistence.customer_repo import SQLiteCustomerRepository
from infrastructure.persistence.policy_repo import SQLitePolicyRepository
from infrastructure.persistence.payment_repo import SQLitePaymentRepository
from infrastructure.persistence.renewal_repo import SQLiteRenewalRepository
from infrastructure.persistence.cancellation_repo import SQLiteCancellationRepository
from infrastructure.persistence.conversation_repo import SQLiteConversationRepository
from infrastructure.persistence.chat_message_repo import SQLiteChatMessageRepository
from infrastructure.rag.document_index import FAISSDocumentIndex
from infrastructure.rag.pdf_loader import PDFChunker
from application.services.authentication import AuthenticationService
from application.services.chat_history import ChatService
from application.services.conversation import ConversationService
from application.services.document_ingestion import DocumentIngestionService
from application.services.plan import PlanService
from application.services.policy import PolicyService
from agent.tools.registry import ToolRegistry
from agent.tools.policies import (
    CancelInsuranceTool,
    GetInsuranceByPolicyNumberTool,
    GetInsuranceTool,
    PurchaseInsuranceTool,
    RenewInsuranceTool,
)
from agent.tools.plans import GetAllPlansTool, GetPlanByIdTool, GetPlansByCategoryTool
from agent.tools.knowledge import KnowledgeSearchTool
from agent.prompt import build_system_prompt
from agent.executor import AgentExecutor

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root. Wires all dependencies together.

    Call initialize() once at startup, then create services as needed.
    The agent executor, tool registry and document index are built once
    and shared by every request.
    """

    def __init__(
        self,
        config: Settings,
        llm: Optional[BaseChatModel] = None,
        embeddings: Optional[Embeddings] = None,
    ):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)
        self._llm = llm
        self._embeddings = embeddings

        self._index: Optional[FAISSDocumentIndex] = None
        self._agent: Optional[AgentExecutor] = None
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    async def initialize(self) -> None:
        """One-time startup: migrations, seed data, document index, agent.

        Must be called before creating services.
        """
        if self._initialized:
            return
        logger.info("Initializing ServiceFactory...")

        await self.prepare_database()

        loop = asyncio.get_running_loop()
        if self._embeddings is None:
            self._embeddings = await loop.run_in_executor(None, self._build_embeddings)
        self._index = FAISSDocumentIndex(self._config.vectorstore_path, self._embeddings)
        await loop.run_in_executor(None, self._index.load)

        if self._llm is None:
            self._llm = build_chat_model(
                provider=self._config.llm_provider,
                model=self._config.active_llm_model,
                ollama_base_url=self._config.ollama_base_url,
                openai_api_key=self._config.openai_api_key,
                groq_api_key=self._config.groq_api_key,
            )

        registry = self.create_tool_registry()
        self._agent = AgentExecutor(
            llm=self._llm,
            tools=registry,
            system_prompt=build_system_prompt(registry),
            max_iterations=self._config.agent_max_iterations,
        )

        self._initialized = True
        logger.info(
            "ServiceFactory ready (provider=%s, model=%s, tools=%d)",
            self._config.llm_provider, self._config.active_llm_model,
            len(registry.names()),
        )

    async def prepare_database(self) -> None:
        """Schema and reference data only. Enough for auth and catalog commands."""
        await run_migrations(self._connection)
        await seed_reference_data(
            SQLitePlanRepository(self._connection),
            SQLiteAgentRepository(self._connection),
        )
        logger.info("Database ready")

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_authentication_service(self) -> AuthenticationService:
        return AuthenticationService(
            user_repo=SQLiteUserRepository(self._connection),
            jwt_secret=self._config.jwt_secret,
            jwt_expiry_hours=self._config.jwt_expiry_hours,
        )

    def create_plan_service(self) -> PlanService:
        return PlanService(SQLitePlanRepository(self._connection))

    def create_policy_service(self) -> PolicyService:
        return PolicyService(
            user_repo=SQLiteUserRepository(self._connection),
            customer_repo=SQLiteCustomerRepository(self._connection),
            policy_repo=SQLitePolicyRepository(self._connection),
            plan_repo=SQLitePlanRepository(self._connection),
            payment_repo=SQLitePaymentRepository(self._connection),
            renewal_repo=SQLiteRenewalRepository(self._connection),
            cancellation_repo=SQLiteCancellationRepository(self._connection),
            agent_repo=SQLiteAgentRepository(self._connection),
        )

    def create_chat_service(self) -> ChatService:
        return ChatService(
            conversation_repo=SQLiteConversationRepository(self._connection),
            message_repo=SQLiteChatMessageRepository(self._connection),
        )

    def create_conversation_service(self) -> ConversationService:
        """The turn endpoint: session lifecycle around the shared agent."""
        self._ensure_initialized()
        return ConversationService(
            agent=self._agent,
            chat_service=self.create_chat_service(),
        )

    def create_document_ingestion_service(self) -> DocumentIngestionService:
        self._ensure_initialized()
        return DocumentIngestionService(
            index=self._index,
            chunker=PDFChunker(
                chunk_size=self._config.chunk_size,
                chunk_overlap=self._config.chunk_overlap,
            ),
            upload_dir=self._config.upload_dir,
        )

    def create_tool_registry(self) -> ToolRegistry:
        """Register the closed tool catalog."""
        if self._index is None:
            raise RuntimeError("Document index not loaded. Call initialize() first.")
        policy_service = self.create_policy_service()
        plan_service = self.create_plan_service()

        registry = ToolRegistry()
        registry.register(PurchaseInsuranceTool(policy_service))
        registry.register(RenewInsuranceTool(policy_service))
        registry.register(CancelInsuranceTool(policy_service))
        registry.register(GetInsuranceTool(policy_service))
        registry.register(GetInsuranceByPolicyNumberTool(policy_service))
        registry.register(GetAllPlansTool(plan_service))
        registry.register(GetPlanByIdTool(plan_service))
        registry.register(GetPlansByCategoryTool(plan_service))
        registry.register(KnowledgeSearchTool(self._index, k=self._config.retrieval_top_k))
        return registry

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_embeddings(self) -> Embeddings:
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info("Loading embedding model %s", self._config.embedding_model)
        return HuggingFaceEmbeddings(
            model_name=self._config.embedding_model,
            encode_kwargs={"normalize_embeddings": True},
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )

"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the insurance assistant.

    No module-level globals: construct via from_env() or pass explicitly
    in tests.
    """
    project_root: Path

    # ── Centralized LLM Provider ────────────────────────────────
    # One setting controls the agent model. Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"

    # Model names: only the one matching llm_provider is used.
    llm_model_openai: str = "gpt-4o"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    llm_model_ollama: str = "llama3.2"

    # Connection details
    openai_api_key: str = ""
    groq_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434/"

    # Retrieval (embeddings are always local HuggingFace)
    embedding_model: str = "sentence-transformers/all-mpnet-base-v2"
    vectorstore_path: str = "./vector_databases/insurance_docs"
    retrieval_top_k: int = 10
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Agent
    agent_max_iterations: int = 8

    # Database
    db_path: str = "insurance.db"

    # Temporary location for uploaded PDFs before ingestion
    upload_dir: str = "./uploads"

    # JWT
    jwt_secret: str = "change-me-in-production"
    jwt_expiry_hours: int = 24

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        return self.llm_model_ollama

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from the environment (and a .env file if present)."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent

        return cls(
            project_root=root,
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4o"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            embedding_model=os.getenv("EMBEDDING_MODEL", "sentence-transformers/all-mpnet-base-v2"),
            vectorstore_path=os.getenv(
                "VECTORSTORE_PATH",
                str(root / "vector_databases" / "insurance_docs"),
            ),
            retrieval_top_k=int(os.getenv("RETRIEVAL_TOP_K", "10")),
            chunk_size=int(os.getenv("CHUNK_SIZE", "1000")),
            chunk_overlap=int(os.getenv("CHUNK_OVERLAP", "200")),
            agent_max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", "8")),
            db_path=os.getenv("DB_PATH", "insurance.db"),
            upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
            jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
            jwt_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")),
        )

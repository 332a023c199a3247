"""
Run the Insurance AI Assistant REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    JWT_SECRET          Secret key for signing JWT tokens (change in production!)
    JWT_EXPIRY_HOURS    Token lifetime in hours (default: 24)
    LLM_PROVIDER        "openai", "groq", or "ollama" (default: openai)
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    DB_PATH             SQLite database file path (default: insurance.db)
    VECTORSTORE_PATH    FAISS index directory (default: vector_databases/insurance_docs)
    UPLOAD_DIR          Scratch directory for uploaded PDFs (default: ./uploads)
"""

import logging
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

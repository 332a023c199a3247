"""
Run the Insurance AI Assistant CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    register   Create a new account
    login      Sign in and save credentials locally (~/.insurance-assistant/session.json)
    logout     Clear stored credentials
    whoami     Show the currently logged-in user
    plans      List the plan catalog (--category health|life|motor|home)
    policies   List your policies
    chats      List your chat sessions
    ask        One-shot question to the agent   (requires login, loads full pipeline)
    chat       Interactive chat session          (requires login, loads full pipeline)
    ingest     Index a PDF (--shared for the corpus every user can search)
    init       Prepare database and document index (first-time setup)

Examples:
    python run_cli.py login
    python run_cli.py ask "What does Premium Health Insurance cover?"
    python run_cli.py chat

Environment variables (all optional):
    LLM_PROVIDER        "openai", "groq", or "ollama" (default: openai)
    LLM_MODEL_OPENAI    Model name when LLM_PROVIDER=openai (default: gpt-4o)
    LLM_MODEL_GROQ      Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA    Model name when LLM_PROVIDER=ollama (default: llama3.2)
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    DB_PATH             SQLite database file path (default: insurance.db)
    OLLAMA_BASE_URL     Ollama server URL (default: http://localhost:11434/)
"""

import logging
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    app()

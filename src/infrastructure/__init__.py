"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: LangChain chat models, FAISS, PDF
loading, SQLite. Depends on domain/ only (implements ports).
"""

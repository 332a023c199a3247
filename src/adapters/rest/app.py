"""
FastAPI application: REST adapter for the Insurance AI Assistant.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings
from factory import ServiceFactory
from domain.exceptions import (
    AuthenticationError,
    DomainError,
    DuplicateAccountError,
    ForbiddenError,
    InfrastructureError,
    InvalidArgumentError,
    NotFoundError,
)
from adapters.rest.dependencies import get_factory, set_factory
from adapters.rest.routers import agent, auth, chats, documents, plans, policies

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize ServiceFactory on startup unless one was installed already."""
    try:
        get_factory()
    except RuntimeError:
        project_root = _src_dir.parent
        config = Settings.from_env(project_root=project_root)
        factory = ServiceFactory(config)
        await factory.initialize()
        set_factory(factory)
    yield
    # No teardown needed, aiosqlite connections are per-operation


app = FastAPI(
    title="Insurance AI Assistant",
    version=VERSION,
    description="Conversational insurance agent with tool calling and document retrieval.",
    lifespan=lifespan,
)

# CORS: permissive for development; tighten allowed_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(agent.router)
app.include_router(chats.router)
app.include_router(plans.router)
app.include_router(policies.router)
app.include_router(documents.router)


# --- Error mapping ---

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (InvalidArgumentError, 400),
    (AuthenticationError, 401),
    (DuplicateAccountError, 409),
]


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    if isinstance(exc, InfrastructureError):
        logger.error("Infrastructure failure on %s: %r", request.url.path, exc)
    else:
        logger.exception("Unhandled domain error: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Hide internal error details from clients."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "version": VERSION}

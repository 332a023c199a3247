"""
adapters.cli.main - CLI adapter for the Insurance AI Assistant.

Mirrors src/adapters/rest/ but for terminal use.  Uses the same
ServiceFactory, AuthenticationService, and ConversationService as the
REST API so all behaviour (auth, tools, chat sessions) is identical.

Commands
--------
  register   Create a new account
  login      Sign in and save credentials locally (~/.insurance-assistant/session.json)
  logout     Clear stored credentials
  whoami     Show the currently logged-in user
  plans      List the plan catalog
  policies   List your policies
  chats      List your chat sessions
  ask        One-shot question to the agent   (requires login, loads full pipeline)
  chat       Interactive chat session          (requires login, loads full pipeline)
  ingest     Index a PDF for yourself, or for everyone with --shared
  init       Prepare the database and document index

Usage
-----
  python src/adapters/cli/main.py login
  python src/adapters/cli/main.py ask "Which health plans do you offer?"
  python src/adapters/cli/main.py chat
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from adapters.cli.session import Session, clear_session, load_session, save_session
from application.context import SessionContext
from application.dto import LoginRequest, RegisterRequest, TurnRequest
from domain.exceptions import (
    AuthenticationError,
    BusinessError,
    DuplicateAccountError,
    InfrastructureError,
)
from factory import ServiceFactory
from infrastructure.config import Settings

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Insurance AI Assistant CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _require_session() -> Session:
    """Return the stored session or exit with a user-friendly error."""
    session = load_session()
    if session is None:
        console.print(
            "[bold red]Not logged in.[/bold red] "
            "Run [bold]login[/bold] (or [bold]register[/bold]) first."
        )
        raise typer.Exit(code=1)
    return session


async def _make_factory(*, full_init: bool) -> ServiceFactory:
    """Create a ServiceFactory at the required initialisation level.

    full_init=False: database schema and reference data only (fast).
                     Sufficient for auth and catalog commands.
    full_init=True:  also loads the embedding model, the document index
                     and the chat model.  Required for ask, chat, ingest.
    """
    config = Settings.from_env()
    factory = ServiceFactory(config)
    if full_init:
        with console.status(
            "[bold cyan]Loading AI pipeline (first run may take a minute)…",
            spinner="dots",
        ):
            await factory.initialize()
        console.print("  [green]Pipeline ready.[/green]")
    else:
        await factory.prepare_database()
    return factory


def _build_ctx(session: Session, factory: ServiceFactory) -> SessionContext:
    """Verify the stored token and derive the caller identity from it."""
    auth_svc = factory.create_authentication_service()
    try:
        payload = auth_svc.verify_token(session.access_token)
    except AuthenticationError:
        console.print(
            "[bold red]Session expired.[/bold red] Run [bold]login[/bold] again."
        )
        raise typer.Exit(code=1)
    return SessionContext(
        user_id=payload["user_id"],
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
    )


def _fail(exc: Exception) -> None:
    """Print a service error and exit non-zero."""
    if isinstance(exc, BusinessError):
        console.print(f"[bold red]{exc}[/bold red]")
    else:
        console.print(
            "[bold red]Something went wrong on our side.[/bold red] "
            "Please try again."
        )
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"insurance-assistant v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Auth
# ---------------------------------------------------------------------------

@app.command()
def register() -> None:
    """Create a new account."""
    console.print(Panel("[bold]Create Account[/bold]", border_style="blue"))

    email    = Prompt.ask("[bold]Email[/bold]")
    password = Prompt.ask("[bold]Password[/bold]  (min 6 chars)", password=True)
    username = Prompt.ask("[bold]Username[/bold]", default="")

    if len(password) < 6:
        console.print("[bold red]Password must be at least 6 characters.[/bold red]")
        raise typer.Exit(code=1)

    async def _run() -> None:
        factory  = await _make_factory(full_init=False)
        auth_svc = factory.create_authentication_service()
        try:
            token = await auth_svc.register(RegisterRequest(
                email=email,
                password=password,
                username=username,
            ))
        except DuplicateAccountError:
            console.print(
                f"[bold red]An account for '{email}' already exists.[/bold red]"
            )
            raise typer.Exit(code=1)

        save_session(Session(
            user_id=token.user_id,
            access_token=token.access_token,
            email=token.email,
        ))
        console.print(Panel(
            f"[bold green]Account created and logged in![/bold green]\n"
            f"Welcome, [bold]{token.email}[/bold] (user_id={token.user_id}).\n"
            "Run [bold]chat[/bold] or [bold]ask[/bold] to get started.",
            border_style="green",
        ))

    asyncio.run(_run())


@app.command()
def login() -> None:
    """Sign in to your account."""
    email    = Prompt.ask("[bold]Email[/bold]")
    password = Prompt.ask("[bold]Password[/bold]", password=True)

    async def _run() -> None:
        factory  = await _make_factory(full_init=False)
        auth_svc = factory.create_authentication_service()
        try:
            token = await auth_svc.login(LoginRequest(email=email, password=password))
        except AuthenticationError:
            console.print(
                "[bold red]Login failed.[/bold red] "
                "Check your email and password."
            )
            raise typer.Exit(code=1)

        save_session(Session(
            user_id=token.user_id,
            access_token=token.access_token,
            email=token.email,
        ))
        console.print(Panel(
            f"[bold green]Logged in![/bold green] "
            f"Welcome back, [bold]{token.email}[/bold].\n"
            "Run [bold]chat[/bold] or [bold]ask[/bold] to continue.",
            border_style="green",
        ))

    asyncio.run(_run())


@app.command()
def logout() -> None:
    """Sign out and clear stored credentials."""
    session = load_session()
    if session is None:
        console.print("[dim]Not currently logged in.[/dim]")
        return
    label = session.email or f"user #{session.user_id}"
    if Confirm.ask(f"Sign out [bold]{label}[/bold]?"):
        clear_session()
        console.print("[green]Logged out.[/green]")


@app.command()
def whoami() -> None:
    """Show the currently logged-in user."""
    session = load_session()
    if session is None:
        console.print("[dim]Not logged in.[/dim]")
        return
    console.print(
        f"Logged in as [bold]{session.email or '?'}[/bold] "
        f"(user_id={session.user_id})"
    )


# ---------------------------------------------------------------------------
# Commands: Catalog and policies (DB only)
# ---------------------------------------------------------------------------

@app.command()
def plans(
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="health, life, motor or home.",
    ),
) -> None:
    """List the plan catalog."""
    async def _run() -> None:
        factory  = await _make_factory(full_init=False)
        plan_svc = factory.create_plan_service()
        try:
            if category:
                items = await plan_svc.list_plans_by_category(category)
            else:
                items = await plan_svc.list_plans()
        except BusinessError as exc:
            _fail(exc)

        t = Table(box=box.SIMPLE, title="Insurance Plans")
        t.add_column("ID", justify="right")
        t.add_column("Name", style="bold")
        t.add_column("Category")
        t.add_column("Premium", justify="right")
        t.add_column("Sum insured", justify="right")
        t.add_column("Riders")
        for plan in items:
            t.add_row(
                str(plan.id), plan.name, plan.category,
                f"{plan.base_premium:,.2f}", f"{plan.sum_insured:,.0f}",
                ", ".join(plan.riders) or "[dim]none[/dim]",
            )
        console.print(t)

    asyncio.run(_run())


@app.command()
def policies() -> None:
    """List your policies."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(full_init=False)
        ctx     = _build_ctx(session, factory)
        try:
            overviews = await factory.create_policy_service().list_policies(ctx)
        except (BusinessError, InfrastructureError) as exc:
            _fail(exc)

        if not overviews:
            console.print("[dim]You have no policies yet.[/dim]")
            return
        t = Table(box=box.SIMPLE, title="Your Policies")
        t.add_column("Policy number", style="bold")
        t.add_column("Plan")
        t.add_column("Status")
        t.add_column("Ends")
        for item in overviews:
            end = item.policy.end_date.date().isoformat() if item.policy.end_date else "-"
            t.add_row(
                item.policy.policy_number,
                item.plan.name if item.plan else "[dim]unknown[/dim]",
                item.policy.status,
                end,
            )
        console.print(t)

    asyncio.run(_run())


@app.command()
def chats() -> None:
    """List your chat sessions, most recent first."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(full_init=False)
        ctx     = _build_ctx(session, factory)
        items   = await factory.create_chat_service().list_chats(ctx.user_id)
        if not items:
            console.print("[dim]No chats yet.[/dim]")
            return
        t = Table(box=box.SIMPLE, title="Your Chats")
        t.add_column("Chat ID", style="dim")
        t.add_column("Title", style="bold")
        t.add_column("Last message")
        for conv in items:
            t.add_row(conv.conversation_id, conv.title, conv.last_message_at)
        console.print(t)

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Agent (requires login + full pipeline)
# ---------------------------------------------------------------------------

@app.command()
def ask(
    query: str = typer.Argument(..., help="Your insurance question or request."),
    new: bool = typer.Option(False, "--new", help="Start a new chat instead of continuing."),
) -> None:
    """Ask a one-shot question (requires login). Continues your last chat."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(full_init=True)
        ctx     = _build_ctx(session, factory)
        service = factory.create_conversation_service()

        chat_id = None if new else session.chat_id
        try:
            with console.status("[bold cyan]Thinking…", spinner="dots"):
                result = await service.run_turn(ctx, TurnRequest(input=query, chat_id=chat_id))
        except (BusinessError, InfrastructureError) as exc:
            _fail(exc)

        session.chat_id = result.chat_id
        save_session(session)
        console.print(Panel(Markdown(result.output), title="Assistant", border_style="green"))

    asyncio.run(_run())


@app.command()
def chat(
    chat_id: Optional[str] = typer.Option(
        None, "--chat", help="Resume an existing chat by id.",
    ),
) -> None:
    """Start an interactive AI chat session (requires login)."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(full_init=True)
        ctx     = _build_ctx(session, factory)
        service = factory.create_conversation_service()

        current = chat_id
        label = session.email or f"user #{session.user_id}"
        console.print(Panel(
            f"[bold]Insurance AI Chat[/bold]\n"
            f"Logged in as [bold]{label}[/bold]\n"
            "Type your question, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[dim]Goodbye![/dim]")
                break

            if user_input.strip().lower() in ("exit", "quit", "q", "bye"):
                console.print("[dim]Goodbye![/dim]")
                break

            if not user_input.strip():
                continue

            try:
                with console.status("[bold cyan]Thinking…", spinner="dots"):
                    result = await service.run_turn(
                        ctx, TurnRequest(input=user_input, chat_id=current),
                    )
            except BusinessError as exc:
                console.print(f"[bold red]{exc}[/bold red]")
                continue
            except InfrastructureError:
                console.print(
                    "[bold red]Something went wrong on our side.[/bold red] "
                    "Please try again."
                )
                continue

            current = result.chat_id
            console.print()
            console.print(Panel(Markdown(result.output), title="Assistant", border_style="green"))

        if current:
            session.chat_id = current
            save_session(session)

    asyncio.run(_run())


@app.command()
def ingest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF file to index."),
    shared: bool = typer.Option(
        False, "--shared", help="Index into the shared corpus visible to every user.",
    ),
) -> None:
    """Chunk, embed and index a PDF document."""
    owner_id: Optional[int] = None
    if not shared:
        owner_id = _require_session().user_id

    async def _run() -> None:
        factory = await _make_factory(full_init=True)
        service = factory.create_document_ingestion_service()
        try:
            with console.status(f"[bold cyan]Indexing {path.name}…", spinner="dots"):
                result = await service.ingest_file(owner_id, str(path), path.name)
        except (BusinessError, InfrastructureError) as exc:
            _fail(exc)

        scope = "shared corpus" if owner_id is None else f"user #{owner_id}"
        console.print(Panel(
            f"[bold green]{result.message}[/bold green]\n"
            f"{result.chunks_stored} chunks from [bold]{result.file_name}[/bold] "
            f"indexed for the {scope}.",
            border_style="green",
        ))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Init (admin / first-time setup, no login required)
# ---------------------------------------------------------------------------

@app.command()
def init() -> None:
    """Prepare the database, seed the catalog and load the document index.

    Does not require login.  Run this once before using ask or chat.
    """
    async def _run() -> None:
        config  = Settings.from_env()
        factory = ServiceFactory(config)
        with console.status(
            "[bold cyan]Initialising pipeline, this may take several minutes…",
            spinner="dots",
        ):
            await factory.initialize()
        console.print(Panel(
            "[bold green]Pipeline initialised![/bold green]\n"
            f"Database: {config.db_path}\n"
            f"Document index: {config.vectorstore_path}\n"
            "Run [bold]login[/bold] and then [bold]chat[/bold] or [bold]ask[/bold] to start.",
            border_style="green",
        ))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Insurance AI Assistant CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()

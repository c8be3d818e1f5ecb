"""deepwork CLI - track deep work sessions."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from deepwork import __version__
from deepwork.config import TIME_FMT
from deepwork.session.codec import ParseError
from deepwork.session.models import Session, now_local, split_duration
from deepwork.session.store import SessionStore

app = typer.Typer(
    name="deepwork",
    help="A simple deep work time management tool.",
    no_args_is_help=True,
)
mcp_app = typer.Typer(help="MCP server management.")

app.add_typer(mcp_app, name="mcp")

console = Console()

NO_ACTIVE_SESSION = "No active session"


def setup_logging(verbose: bool) -> None:
    """Configure logging on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def version_callback(value: bool) -> None:
    if value:
        console.print(f"deepwork {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """deepwork - track deep work sessions."""
    setup_logging(verbose)


@contextmanager
def _fail_on_error():
    """Report invalid input, store and parse failures and exit with status 1."""
    try:
        yield
    except (ParseError, ValidationError, OSError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


# ── Output helpers ───────────────────────────────────────────────


def _highlight(value) -> str:
    return f"[magenta]{escape(str(value))}[/magenta]"


def _print_time(label: str, value: datetime) -> None:
    console.print(f"{label}: {_highlight(value.strftime(TIME_FMT))}")


def _print_elapsed(seconds: int) -> None:
    hours, minutes, secs = split_duration(seconds)
    console.print(
        f"Time Elapsed: {_highlight(hours)} hour(s), "
        f"{_highlight(minutes)} minute(s), {_highlight(secs)} second(s)"
    )


def _print_details(session: Session, tags: bool = True) -> None:
    if session.description:
        console.print(f"Description: {escape(session.description)}")
    if tags and session.tags:
        console.print(f"Tags: {escape(' '.join(session.tags))}")


# ── Session commands ─────────────────────────────────────────────


@app.command("start")
def start(
    description: Annotated[
        str, typer.Option("--desc", "-d", help="Description attached to this deep work session")
    ] = "",
    tags: Annotated[
        Optional[list[str]],
        typer.Option("--tag", "--tags", "-t", help="Tag(s) attached to this deep work session"),
    ] = None,
) -> None:
    """Start tracking a deep work session."""
    with _fail_on_error():
        session = SessionStore().start_session(description=description, tags=tags)

    if session is None:
        console.print("[yellow]Deep work session already active[/yellow]")
        return

    console.print("[green]Begin deep work![/green]")
    _print_time("Start", session.start)
    _print_details(session, tags=False)


@app.command("stop")
def stop() -> None:
    """Stop tracking the current deep work session."""
    with _fail_on_error():
        session = SessionStore().stop_session()

    if session is None:
        console.print(NO_ACTIVE_SESSION)
        return

    console.print("[green]Deep work complete![/green]")
    _print_time("Start", session.start)
    _print_time("Stop", session.stop)
    _print_elapsed(session.duration_seconds)
    _print_details(session)


@app.command("status")
def status() -> None:
    """Get the status of the current deep work session."""
    with _fail_on_error():
        session = SessionStore().active_session()

    if session is None:
        console.print(NO_ACTIVE_SESSION)
        return

    _print_time("Start", session.start)
    _print_elapsed(session.elapsed(now_local()))
    _print_details(session)


@app.command("summary")
def summary() -> None:
    """Summarize today's deep work."""
    today = now_local().date()
    with _fail_on_error():
        total = SessionStore().total_for_day(today)

    hours, minutes, secs = split_duration(total)
    console.print(f"Deep work summary for {today:%A, %B} {today.day}, {today.year}:")
    console.print(
        f"{_highlight(hours)} hour(s) {_highlight(minutes)} minute(s) {_highlight(secs)} second(s)"
    )


# ── MCP commands ─────────────────────────────────────────────────


@mcp_app.command("serve")
def mcp_serve() -> None:
    """Start the MCP server (stdio transport)."""
    from deepwork.mcp.server import mcp

    mcp.run()

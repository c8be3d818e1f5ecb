"""MCP server exposing deep work session tools."""

from mcp.server.fastmcp import FastMCP

from deepwork.session.models import Session, now_local, split_duration
from deepwork.session.store import SessionStore

mcp = FastMCP("deepwork")
store = SessionStore()

NO_ACTIVE_SESSION = "No active session"


def _session_dict(session: Session) -> dict:
    return {
        "start": session.start.isoformat(),
        "stop": session.stop.isoformat() if session.stop else None,
        "duration_seconds": session.duration_seconds,
        "description": session.description,
        "tags": session.tags,
    }


@mcp.tool()
def start_session(description: str = "", tags: list[str] | None = None) -> dict:
    """Start tracking a deep work session.

    Only one session can be active at a time. If one is already running it is
    left untouched and returned with status "already_active".

    Args:
        description: What the session is about (e.g. "write design doc")
        tags: Optional tags for categorization (e.g. ["design", "review"])
    """
    session = store.start_session(description=description, tags=tags)
    if session is None:
        return {"status": "already_active", "session": _session_dict(store.active_session())}
    return {"status": "started", "session": _session_dict(session)}


@mcp.tool()
def stop_session() -> dict | str:
    """Stop the active deep work session and record it in the log."""
    session = store.stop_session()
    if session is None:
        return NO_ACTIVE_SESSION
    return _session_dict(session)


@mcp.tool()
def session_status() -> dict | str:
    """Get the active deep work session and how long it has been running."""
    session = store.active_session()
    if session is None:
        return NO_ACTIVE_SESSION
    result = _session_dict(session)
    result["elapsed_seconds"] = session.elapsed(now_local())
    return result


@mcp.tool()
def today_summary() -> dict:
    """Total deep work recorded today, in local time."""
    today = now_local().date()
    total = store.total_for_day(today)
    hours, minutes, seconds = split_duration(total)
    return {
        "date": today.isoformat(),
        "total_seconds": total,
        "hours": hours,
        "minutes": minutes,
        "seconds": seconds,
    }

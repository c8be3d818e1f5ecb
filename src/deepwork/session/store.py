"""File-backed session storage: an active-session file and an append-only log."""

import logging
from datetime import date, datetime
from pathlib import Path

from deepwork import config
from deepwork.session.codec import (
    ACTIVE_FIELDS,
    COMPLETED_FIELDS,
    ParseError,
    encode_fields,
    read_records,
    record_writer,
)
from deepwork.session.models import Session, now_local

logger = logging.getLogger(__name__)


class SessionStore:
    """Reads and writes deep work sessions.

    The active-session file exists only while a session is running. Stopping
    the session appends the completed record to the log and removes the file.
    """

    def __init__(self, log_path: Path | None = None, active_path: Path | None = None):
        self.log_path = log_path or config.LOG_PATH
        self.active_path = active_path or config.ACTIVE_PATH

    def active_session(self) -> Session | None:
        """The running session, or None when no session is active."""
        if not self.active_path.is_file():
            return None
        sessions = read_records(self.active_path, ACTIVE_FIELDS)
        if not sessions:
            raise ParseError("active session file has no record", path=self.active_path)
        return sessions[-1]

    def start_session(
        self,
        description: str = "",
        tags: list[str] | None = None,
        now: datetime | None = None,
    ) -> Session | None:
        """Begin a session. Returns None if one is already active."""
        session = Session(start=now or now_local(), description=description, tags=tags or [])
        try:
            handle = open(self.active_path, "x", newline="", encoding="utf-8")
        except FileExistsError:
            logger.debug("Active session file %s already exists", self.active_path)
            return None
        with handle:
            record_writer(handle).writerow(encode_fields(session))
        logger.debug("Started session at %s in %s", session.start.isoformat(), self.active_path)
        return session

    def stop_session(self, now: datetime | None = None) -> Session | None:
        """Complete the active session and append it to the log.

        Returns the completed session, or None when no session is active.
        """
        active = self.active_session()
        if active is None:
            return None

        completed = active.complete(now or now_local())
        with open(self.log_path, "a", newline="", encoding="utf-8") as handle:
            record_writer(handle).writerow(encode_fields(completed))
        logger.debug("Appended session (%ss) to %s", completed.duration_seconds, self.log_path)

        self.active_path.unlink()
        logger.debug("Removed %s", self.active_path)
        return completed

    def read_log(self) -> list[Session]:
        """All completed sessions in file order. A missing log is empty."""
        if not self.log_path.exists():
            return []
        return read_records(self.log_path, COMPLETED_FIELDS)

    def sessions_on(self, day: date) -> list[Session]:
        """Completed sessions whose start falls on ``day`` in local time."""
        return [s for s in self.read_log() if s.start.astimezone().date() == day]

    def total_for_day(self, day: date) -> int:
        """Total seconds of deep work started on ``day``."""
        return sum(s.duration_seconds for s in self.sessions_on(day))

"""CSV record codec for the session log and the active-session file.

Active records hold ``start, description, tags``; completed records hold
``start, stop, duration_seconds, description, tags``. Tags are space-joined.
Fields containing commas, quotes or newlines are quoted as usual for CSV.
Timestamps read from disk are written back with their original text.
"""

import csv
import io
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from deepwork.session.models import Session

ACTIVE_FIELDS = 3
COMPLETED_FIELDS = 5


class ParseError(ValueError):
    """A session record could not be decoded."""

    def __init__(self, message: str, path: Path | None = None, line: int | None = None):
        self.path = path
        self.line = line
        if path is not None and line is not None:
            message = f"{path}:{line}: {message}"
        elif path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


def _parse_timestamp(name: str, raw: str) -> datetime:
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ParseError(f"malformed {name} timestamp {raw!r}") from exc
    if value.utcoffset() is None:
        raise ParseError(f"{name} timestamp {raw!r} has no UTC offset")
    return value


def _parse_duration(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ParseError(f"malformed duration {raw!r}") from exc
    if value < 0:
        raise ParseError(f"negative duration {raw!r}")
    return value


def encode_fields(session: Session) -> list[str]:
    """Serialize a session into its list of CSV fields."""
    tags = " ".join(session.tags)
    if session.is_active:
        return [session.start_text, session.description, tags]
    return [
        session.start_text,
        session.stop_text,
        str(session.duration_seconds),
        session.description,
        tags,
    ]


def decode_fields(fields: list[str]) -> Session:
    """Build a session from CSV fields, raising ParseError when malformed."""
    if len(fields) == ACTIVE_FIELDS:
        start, description, tags = fields
        stop_raw = stop = duration = None
    elif len(fields) == COMPLETED_FIELDS:
        start, stop_raw, duration_raw, description, tags = fields
        stop = _parse_timestamp("stop", stop_raw)
        duration = _parse_duration(duration_raw)
    else:
        raise ParseError(
            f"expected {ACTIVE_FIELDS} or {COMPLETED_FIELDS} fields, got {len(fields)}"
        )

    try:
        session = Session(
            start=_parse_timestamp("start", start),
            stop=stop,
            duration_seconds=duration,
            description=description,
            tags=tags.split(),
        )
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc
    session._start_text = start
    session._stop_text = stop_raw
    return session


def record_writer(handle):
    """CSV writer configured for session records."""
    return csv.writer(handle, lineterminator="\n")


def encode(session: Session) -> str:
    """Serialize a session into a single CSV line without terminator."""
    buf = io.StringIO()
    record_writer(buf).writerow(encode_fields(session))
    return buf.getvalue().removesuffix("\n")


def decode(line: str) -> Session:
    """Parse one CSV line into a session."""
    try:
        rows = [row for row in csv.reader(io.StringIO(line)) if row]
    except csv.Error as exc:
        raise ParseError(str(exc)) from exc
    if len(rows) != 1:
        raise ParseError(f"expected one record, got {len(rows)}")
    return decode_fields(rows[0])


def read_records(path: Path, field_count: int | None = None) -> list[Session]:
    """Decode every record of a CSV file. Blank lines are ignored.

    When ``field_count`` is given, records of any other shape are rejected.
    """
    sessions = []
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        try:
            for row in reader:
                if not row:
                    continue
                if field_count is not None and len(row) != field_count:
                    raise ParseError(f"expected {field_count} fields, got {len(row)}")
                sessions.append(decode_fields(row))
        except (ParseError, csv.Error) as exc:
            raise ParseError(str(exc), path=path, line=reader.line_num) from exc
    return sessions

"""Deep work session data model."""

import logging
from datetime import datetime

from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator

logger = logging.getLogger(__name__)

# Well under the CSV reader's per-field limit
MAX_FIELD_LENGTH = 10_000

# Stored durations may differ from stop - start by truncated sub-second parts
DURATION_TOLERANCE = 1


def now_local() -> datetime:
    """Current local time, offset-aware, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def split_duration(seconds: int) -> tuple[int, int, int]:
    """Split a number of seconds into (hours, minutes, seconds)."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return hours, minutes, secs


class Session(BaseModel):
    """A deep work session, active until it has a stop time."""

    start: datetime = Field(description="When the session started")
    stop: datetime | None = Field(default=None, description="When the session stopped, unset while active")
    duration_seconds: int | None = Field(default=None, description="Whole seconds between start and stop")
    description: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    tags: list[str] = Field(default_factory=list)

    # Timestamp text as read from disk, written back unchanged
    _start_text: str | None = PrivateAttr(default=None)
    _stop_text: str | None = PrivateAttr(default=None)

    @field_validator("start", "stop")
    @classmethod
    def _require_offset(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.utcoffset() is None:
            raise ValueError("timestamp has no UTC offset")
        return value

    @field_validator("description")
    @classmethod
    def _normalize_newlines(cls, value: str) -> str:
        return value.replace("\r\n", "\n").replace("\r", "\n")

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value):
        # "a b" on the command line is two tags, the log stores them space-joined
        if isinstance(value, str):
            value = [value]
        if value is None:
            return []
        tags = [tag for item in value for tag in str(item).split()]
        if len(" ".join(tags)) > MAX_FIELD_LENGTH:
            raise ValueError(f"tags longer than {MAX_FIELD_LENGTH} characters")
        return tags

    @model_validator(mode="after")
    def _check_interval(self) -> "Session":
        if (self.stop is None) != (self.duration_seconds is None):
            raise ValueError("stop and duration_seconds must be set together")
        if self.stop is None:
            return self
        if self.stop < self.start:
            raise ValueError("stop is earlier than start")
        if self.duration_seconds < 0:
            raise ValueError("duration_seconds is negative")
        expected = (self.stop - self.start).total_seconds()
        if abs(self.duration_seconds - expected) > DURATION_TOLERANCE:
            raise ValueError(
                f"duration_seconds {self.duration_seconds} does not match stop - start ({int(expected)})"
            )
        return self

    @property
    def is_active(self) -> bool:
        return self.stop is None

    @property
    def start_text(self) -> str:
        return self._start_text or self.start.isoformat()

    @property
    def stop_text(self) -> str | None:
        if self.stop is None:
            return None
        return self._stop_text or self.stop.isoformat()

    def elapsed(self, now: datetime) -> int:
        """Whole seconds from start to ``now``, never negative."""
        return max(0, int((now - self.start).total_seconds()))

    def complete(self, stop: datetime) -> "Session":
        """Return a completed copy of this session stopped at ``stop``."""
        if stop < self.start:
            logger.warning(
                "Stop time %s is earlier than start %s, clamping to start",
                stop.isoformat(),
                self.start.isoformat(),
            )
            stop = self.start
        completed = Session(
            start=self.start,
            stop=stop,
            duration_seconds=self.elapsed(stop),
            description=self.description,
            tags=list(self.tags),
        )
        completed._start_text = self._start_text
        return completed

"""Tests for the file-backed session store."""

from datetime import datetime, timedelta, timezone

import pytest

from deepwork.session.codec import ParseError, decode, encode
from deepwork.session.models import Session, now_local
from deepwork.session.store import SessionStore

UTC = timezone.utc


@pytest.fixture
def store(tmp_path):
    """Create a SessionStore with temp files."""
    return SessionStore(log_path=tmp_path / ".dw.csv", active_path=tmp_path / ".dw.tmp")


def _log_lines(store):
    return store.log_path.read_text().splitlines()


class TestStartSession:
    def test_writes_active_record(self, store):
        start = datetime(2026, 10, 18, 9, 0, 0, tzinfo=UTC)
        session = store.start_session("write spec", ["design", "review"], now=start)

        assert session.start == start
        assert store.active_path.read_text() == "2026-10-18T09:00:00+00:00,write spec,design review\n"
        assert not store.log_path.exists()

    def test_second_start_is_refused(self, store):
        first = store.start_session("first")
        assert store.start_session("second") is None

        lines = store.active_path.read_text().splitlines()
        assert len(lines) == 1
        assert decode(lines[0]).description == "first"
        assert store.active_session().model_dump() == first.model_dump()

    def test_defaults(self, store):
        session = store.start_session()
        assert session.description == ""
        assert session.tags == []
        assert session.start.utcoffset() is not None
        assert session.start.microsecond == 0


class TestStopSession:
    def test_no_active_session(self, store):
        assert store.stop_session() is None
        assert not store.log_path.exists()

    def test_no_active_session_leaves_log(self, store):
        store.log_path.write_text("existing\n")
        assert store.stop_session() is None
        assert store.log_path.read_text() == "existing\n"

    def test_promotes_to_log(self, store):
        start = datetime(2026, 10, 18, 9, 0, 0, tzinfo=UTC)
        store.start_session("write spec", ["design", "review"], now=start)
        session = store.stop_session(now=start + timedelta(minutes=25))

        assert session.duration_seconds == 1500
        assert not store.active_path.exists()
        assert _log_lines(store) == [
            "2026-10-18T09:00:00+00:00,2026-10-18T09:25:00+00:00,1500,write spec,design review"
        ]

    def test_appends(self, store):
        start = datetime(2026, 10, 18, 9, 0, 0, tzinfo=UTC)
        for i in range(3):
            store.start_session(f"session {i}", now=start + timedelta(hours=i))
            store.stop_session(now=start + timedelta(hours=i, minutes=30))

        sessions = store.read_log()
        assert [s.description for s in sessions] == ["session 0", "session 1", "session 2"]
        assert all(s.duration_seconds == 1800 for s in sessions)

    def test_uses_last_active_record(self, store):
        store.active_path.write_text(
            "2026-10-18T08:00:00+00:00,old,\n2026-10-18T09:00:00+00:00,new,\n"
        )
        session = store.stop_session(now=datetime(2026, 10, 18, 9, 0, 10, tzinfo=UTC))
        assert session.description == "new"
        assert session.duration_seconds == 10

    def test_malformed_active_file_is_kept(self, store):
        store.active_path.write_text("garbage,,\n")
        with pytest.raises(ParseError):
            store.stop_session()
        assert store.active_path.exists()
        assert not store.log_path.exists()

    def test_carriage_return_in_description(self, store):
        store.start_session("a\rb", ["focus"])
        assert store.active_session().description == "a\nb"

        session = store.stop_session()

        assert session.description == "a\nb"
        assert not store.active_path.exists()
        assert [s.description for s in store.read_log()] == ["a\nb"]
        assert store.start_session("next") is not None

    def test_oversized_description_rejected(self, store):
        with pytest.raises(ValueError):
            store.start_session("x" * 200_000)
        assert not store.active_path.exists()

    def test_oversized_field_on_disk(self, store):
        store.active_path.write_text(f"2026-10-18T09:00:00+00:00,{'x' * 200_000},\n")
        with pytest.raises(ParseError):
            store.stop_session()
        assert store.active_path.exists()
        assert not store.log_path.exists()


class TestActiveSession:
    def test_none_without_file(self, store):
        assert store.active_session() is None

    def test_read_only(self, store):
        store.start_session("focus")
        before = store.active_path.read_text()
        assert store.active_session().description == "focus"
        assert store.active_path.read_text() == before

    def test_empty_file_is_an_error(self, store):
        store.active_path.write_text("")
        with pytest.raises(ParseError):
            store.active_session()


class TestSummary:
    def _completed(self, start, seconds):
        return Session(start=start).complete(start + timedelta(seconds=seconds))

    def test_missing_log_is_empty(self, store):
        assert store.read_log() == []
        assert store.total_for_day(now_local().date()) == 0

    def test_counts_only_today(self, store):
        now = now_local()
        yesterday = self._completed(now - timedelta(days=1), 600)
        today = self._completed(now, 300)
        store.log_path.write_text(f"{encode(yesterday)}\n{encode(today)}\n")

        assert store.total_for_day(now.date()) == 300
        assert [s.model_dump() for s in store.sessions_on(now.date())] == [today.model_dump()]

    def test_sums_durations(self, store):
        now = now_local()
        lines = [encode(self._completed(now, seconds)) for seconds in (60, 120, 3600)]
        store.log_path.write_text("\n".join(lines) + "\n")
        assert store.total_for_day(now.date()) == 3780

    def test_malformed_record_aborts(self, store):
        now = now_local()
        store.log_path.write_text(f"{encode(self._completed(now, 60))}\nbad,row\n")
        with pytest.raises(ParseError):
            store.total_for_day(now.date())

    def test_active_record_in_log_rejected(self, store):
        store.log_path.write_text("2026-10-18T09:00:00+00:00,,\n")
        with pytest.raises(ParseError):
            store.read_log()

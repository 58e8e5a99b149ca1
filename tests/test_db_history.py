"""Tests for the SQL history store."""

from datetime import date, datetime

import pytest

from adaptive_periodization.analysis.safety import AlertType, SafetyAlert, Severity
from adaptive_periodization.config import config
from adaptive_periodization.db import CheckInRow, Database, SqlHistoryProvider, get_db
from adaptive_periodization.db.database import close_db
from adaptive_periodization.errors import InvalidRangeError
from adaptive_periodization.history import CheckIn, SessionRecord, SessionStatus, SetLog, load_safety_window


@pytest.fixture
def history():
    db = Database("sqlite:///:memory:")
    db.create_tables()
    yield SqlHistoryProvider(db)
    db.close()


def checkin(day, energy=7, soreness=2, mood=4, sleep=8):
    return CheckIn(date=date(2024, 4, day), mood=mood, energy_level=energy, sleep_hours=sleep, muscle_soreness=soreness)


class TestCheckIns:

    def test_round_trip_ordered_by_date(self, history):
        history.add_checkin("u1", checkin(3, energy=3))
        history.add_checkin("u1", checkin(1, energy=8))
        history.add_checkin("u1", checkin(2, energy=6))
        history.add_checkin("u2", checkin(2, energy=1))

        records = history.checkins("u1", date(2024, 4, 1), date(2024, 4, 3))
        assert [c.energy_level for c in records] == [8, 6, 3]
        assert records[0].date == date(2024, 4, 1)

    def test_date_range_inclusive(self, history):
        for day in (1, 5, 10):
            history.add_checkin("u1", checkin(day))
        records = history.checkins("u1", date(2024, 4, 5), date(2024, 4, 10))
        assert [c.date.day for c in records] == [5, 10]

    def test_duplicate_date_rejected(self, history):
        history.add_checkin("u1", checkin(1))
        with pytest.raises(ValueError):
            history.add_checkin("u1", checkin(1, energy=2))

    def test_out_of_scale_rejected(self, history):
        with pytest.raises(InvalidRangeError):
            history.add_checkin("u1", checkin(1, mood=8))


class TestSessionsAndSets:

    def test_sessions_and_completed_count(self, history):
        history.add_session("u1", SessionRecord(date=date(2024, 4, 1), week=1, day=1, average_rpe=6.5))
        history.add_session("u1", SessionRecord(date=date(2024, 4, 2), week=1, day=2, status=SessionStatus.SKIPPED))
        history.add_session("u1", SessionRecord(date=date(2024, 4, 3), week=1, day=3, slot="pm", average_rpe=8))

        records = history.sessions("u1", date(2024, 4, 1), date(2024, 4, 7))
        assert [s.day for s in records] == [1, 2, 3]
        assert records[1].status == SessionStatus.SKIPPED
        assert records[2].slot == "pm"
        assert records[0].average_rpe == pytest.approx(6.5)

        assert history.completed_sessions("u1", date(2024, 4, 1), date(2024, 4, 7)) == 2
        assert history.completed_sessions("u1", date(2024, 4, 3), date(2024, 4, 3)) == 1

    def test_set_logs_by_day(self, history):
        session_id = history.add_session("u1", SessionRecord(date=date(2024, 4, 2), week=1, day=2))
        history.add_set_log("u1", SetLog("squat", 6, 60, logged_at=datetime(2024, 4, 2, 18, 0)), session_id)
        history.add_set_log("u1", SetLog("squat", 7, 62.5, logged_at=datetime(2024, 4, 2, 18, 5)), session_id)
        history.add_set_log("u1", SetLog("squat", 8, 65, logged_at=datetime(2024, 4, 4, 9, 0)))

        records = history.set_logs("u1", date(2024, 4, 1), date(2024, 4, 2))
        assert [s.weight_used for s in records] == [60, 62.5]

        last = history.last_set_for("u1", "squat")
        assert last.weight_used == 65
        assert last.rpe == 8
        assert history.last_set_for("u1", "deadlift") is None

    def test_invalid_set_rejected(self, history):
        with pytest.raises(InvalidRangeError):
            history.add_set_log("u1", SetLog("squat", 11, 60))
        with pytest.raises(InvalidRangeError):
            history.add_set_log("u1", SetLog("squat", 6, -5))

    def test_feeds_safety_window(self, history):
        for day, energy in zip((1, 2, 3), (8, 6, 3)):
            history.add_checkin("u1", checkin(day, energy=energy))
        window = load_safety_window(history, "u1", date(2024, 4, 3))
        assert [c.energy_level for c in window.checkins] == [8, 6, 3]


class TestAlerts:

    def test_save_list_and_resolve(self, history):
        alerts = [
            SafetyAlert(AlertType.FATIGUE, Severity.HIGH, "Elevated fatigue"),
            SafetyAlert(AlertType.LOAD, Severity.CRITICAL, "Too rapid"),
        ]
        assert history.save_alerts("u1", alerts) == 2

        stored = history.alerts("u1")
        assert len(stored) == 2
        assert all(not row.is_resolved for row in stored)
        assert {row.alert_type for row in stored} == {"fatigue", "load"}

        resolved = history.resolve_alerts("u1", [stored[0].id])
        assert resolved == 1
        assert len(history.alerts("u1")) == 1
        assert len(history.alerts("u1", include_resolved=True)) == 2

    def test_resolve_other_users_alert_ignored(self, history):
        history.save_alerts("u1", [SafetyAlert(AlertType.FORM, Severity.HIGH, "Form")])
        alert_id = history.alerts("u1")[0].id
        assert history.resolve_alerts("u2", [alert_id]) == 0

    def test_resolve_requires_ids(self, history):
        with pytest.raises(ValueError):
            history.resolve_alerts("u1", [])


class TestDatabase:

    def test_file_database_persists_between_instances(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'history.db'}"
        first = Database(url)
        first.create_tables()
        SqlHistoryProvider(first).add_checkin("u1", checkin(1))
        first.close()

        second = Database(url)
        assert len(SqlHistoryProvider(second).checkins("u1", date(2024, 4, 1), date(2024, 4, 1))) == 1
        second.close()

    def test_failed_unit_of_work_rolls_back(self, history):
        with pytest.raises(RuntimeError):
            with history.db.get_session() as session:
                session.add(CheckInRow(user_id="u1", date=date(2024, 4, 9), mood=3, energy_level=5,
                                       sleep_hours=7, muscle_soreness=2))
                raise RuntimeError("abort")
        assert history.checkins("u1", date(2024, 4, 9), date(2024, 4, 9)) == []

    def test_shared_instance(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "DATABASE_URL", f"sqlite:///{tmp_path / 'shared.db'}")
        close_db()
        try:
            assert get_db() is get_db()
        finally:
            close_db()

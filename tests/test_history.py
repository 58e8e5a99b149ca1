"""Tests for the history window loader."""

from datetime import date, datetime, timedelta

import pytest

from adaptive_periodization.analysis.safety import SafetyMonitor
from adaptive_periodization.history import (
    CheckIn,
    SessionRecord,
    SessionStatus,
    SetLog,
    load_safety_window,
)

TODAY = date(2024, 5, 20)


class FakeHistory:
    """In-memory history store recording the queried ranges."""

    def __init__(self):
        self.calls = []
        self._checkins = [
            CheckIn(date=TODAY - timedelta(days=9 - i), mood=4, energy_level=i + 1, sleep_hours=8, muscle_soreness=2)
            for i in range(10)
        ]
        self._sessions = [
            SessionRecord(date=TODAY - timedelta(days=2 * (7 - i)), week=2, day=1, average_rpe=6)
            for i in range(8)
        ]
        self._set_logs = [
            SetLog(exercise_id="squat", rpe=6, weight_used=50 + i, logged_at=datetime(2024, 5, 19, 10, i))
            for i in range(30)
        ]

    def checkins(self, user_id, start, end):
        self.calls.append(("checkins", user_id, start, end))
        return self._checkins

    def sessions(self, user_id, start, end):
        self.calls.append(("sessions", user_id, start, end))
        return self._sessions

    def set_logs(self, user_id, start, end):
        self.calls.append(("set_logs", user_id, start, end))
        return self._set_logs


class TestLoadSafetyWindow:

    def setup_method(self):
        self.history = FakeHistory()

    def test_window_limits(self):
        window = load_safety_window(self.history, "athlete-1", TODAY)
        assert len(window.checkins) == 7
        assert len(window.sessions) == 5
        assert len(window.set_logs) == 20
        assert window.as_of == TODAY

    def test_keeps_most_recent_records(self):
        window = load_safety_window(self.history, "athlete-1", TODAY)
        assert window.checkins[-1].date == TODAY
        assert window.checkins[0].energy_level == 4
        assert window.set_logs[0].weight_used == 60
        assert window.set_logs[-1].weight_used == 79

    def test_reads_each_record_type_once(self):
        load_safety_window(self.history, "athlete-1", TODAY, lookback_days=10)
        assert [call[0] for call in self.history.calls] == ["checkins", "sessions", "set_logs"]
        assert all(call[1] == "athlete-1" for call in self.history.calls)
        assert all(call[2] == TODAY - timedelta(days=10) and call[3] == TODAY for call in self.history.calls)

    def test_keeps_every_session_of_the_last_seven_days(self):
        self.history._sessions = [
            SessionRecord(date=TODAY - timedelta(days=d), week=2, day=1, average_rpe=5)
            for d in (12, 10, 6, 6, 5, 4, 3, 2, 1, 0)
        ]
        window = load_safety_window(self.history, "athlete-1", TODAY)
        assert len(window.sessions) == 8
        assert window.sessions[0].date == TODAY - timedelta(days=6)

    def test_session_frequency_reaches_overtraining_score(self):
        self.history._sessions = [
            SessionRecord(date=TODAY - timedelta(days=d), week=2, day=1, average_rpe=5)
            for d in range(7, -1, -1)
        ]
        window = load_safety_window(self.history, "athlete-1", TODAY)
        monitor = SafetyMonitor(max_weekly_sessions=6)
        direct = monitor.overtraining_score(self.history._sessions, [], as_of=TODAY)

        assert direct == pytest.approx(0.3)
        assert monitor.overtraining_score(window.sessions, [], as_of=TODAY) == pytest.approx(direct)


class TestRecords:

    def test_session_completed(self):
        assert SessionRecord(date=TODAY, week=1, day=1).completed
        assert not SessionRecord(date=TODAY, week=1, day=1, status=SessionStatus.SKIPPED).completed

"""Tests for the command-line interface."""

from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from adaptive_periodization.cli import cli
from adaptive_periodization.config import config
from adaptive_periodization.db import Database, SqlHistoryProvider
from adaptive_periodization.history import CheckIn, SessionRecord


@pytest.fixture
def db(monkeypatch):
    database = Database("sqlite:///:memory:")
    database.create_tables()
    monkeypatch.setattr("adaptive_periodization.cli.get_db", lambda: database)
    monkeypatch.setattr(config, "USER_ID", "tester")
    yield database
    database.close()


@pytest.fixture
def runner():
    return CliRunner()


class StubCoach:
    def motivational_message(self, context):
        return "Nice work"

    def form_cues(self, exercise_id, common_mistakes):
        return ["Chest up", "Knees out"]


def seed_overtraining(database):
    history = SqlHistoryProvider(database)
    first = date(2024, 3, 1)
    for i, (energy, soreness) in enumerate(zip([8, 6, 3], [2, 3, 4])):
        history.add_checkin("tester", CheckIn(date=first + timedelta(days=i + 1), mood=4,
                                              energy_level=energy, sleep_hours=8, muscle_soreness=soreness))
    for i, rpe in enumerate([8, 8, 9, 8]):
        history.add_session("tester", SessionRecord(date=first + timedelta(days=i), week=1, day=i + 1,
                                                    average_rpe=rpe))


class TestProgramCommands:

    def test_phase_single_week(self, runner):
        result = runner.invoke(cli, ["phase", "--week", "5"])
        assert result.exit_code == 0
        assert "DELOAD" in result.output

    def test_phase_invalid_week(self, runner):
        result = runner.invoke(cli, ["phase", "--week", "12"])
        assert result.exit_code == 1

    def test_schedule(self, runner):
        result = runner.invoke(cli, ["schedule", "--week", "9"])
        assert result.exit_code == 0
        assert "Week 9 Schedule" in result.output

    def test_week(self, runner, db):
        result = runner.invoke(cli, ["week", "--start", "2024-01-01", "--date", "2024-01-29"])
        assert result.exit_code == 0
        assert "Week 5, Day 1" in result.output
        assert "Deload week: yes" in result.output

    def test_week_requires_start(self, runner, db, monkeypatch):
        monkeypatch.setattr(config, "PROGRAM_START_DATE", "")
        result = runner.invoke(cli, ["week", "--date", "2024-01-29"])
        assert result.exit_code == 2

    def test_week_before_start(self, runner, db):
        result = runner.invoke(cli, ["week", "--start", "2024-01-10", "--date", "2024-01-01"])
        assert result.exit_code == 1


class TestToday:

    def test_training_day(self, runner, db):
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-01-01"])
        assert result.exit_code == 0
        assert "Week 1, Day 1" in result.output
        assert "Today's Sessions" in result.output

    def test_rest_day(self, runner, db):
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-01-06"])
        assert result.exit_code == 0
        assert "Rest day" in result.output

    def test_uses_checkin(self, runner, db):
        runner.invoke(cli, ["checkin", "--mood", "4", "--energy", "2", "--sleep", "8",
                            "--soreness", "2", "--date", "2024-01-01"])
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-01-01"])
        assert result.exit_code == 0
        assert "36min" in result.output
        assert "adapted" in result.output

    def test_micro_deload_after_hard_sessions(self, runner, db):
        history = SqlHistoryProvider(db)
        for day in (1, 2, 3):
            history.add_session("tester", SessionRecord(date=date(2024, 1, day), week=1, day=day, average_rpe=9))
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-01-04"])
        assert result.exit_code == 0
        assert "Micro-deload suggested" in result.output

    def test_coach_form_cues(self, runner, db, monkeypatch):
        monkeypatch.setattr("adaptive_periodization.cli.AICoach", StubCoach)
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-01-01", "--coach"])
        assert result.exit_code == 0
        assert "Nice work" in result.output
        assert "Chest up" in result.output

    def test_program_complete(self, runner, db):
        result = runner.invoke(cli, ["today", "--start", "2024-01-01", "--date", "2024-06-01"])
        assert result.exit_code == 0
        assert "Program complete" in result.output


class TestLogging:

    def test_checkin_duplicate(self, runner, db):
        args = ["checkin", "--mood", "4", "--energy", "7", "--sleep", "8", "--soreness", "2", "--date", "2024-01-02"]
        assert runner.invoke(cli, args).exit_code == 0
        assert runner.invoke(cli, args).exit_code == 1

    def test_checkin_out_of_scale(self, runner, db):
        result = runner.invoke(cli, ["checkin", "--mood", "8", "--energy", "7", "--sleep", "8", "--soreness", "2"])
        assert result.exit_code == 1

    def test_log_session(self, runner, db):
        result = runner.invoke(cli, ["log-session", "--week", "1", "--day", "1", "--date", "2024-01-01",
                                     "--rpe", "6.5"])
        assert result.exit_code == 0
        assert SqlHistoryProvider(db).completed_sessions("tester", date(2024, 1, 1), date(2024, 1, 7)) == 1

    def test_log_set_feeds_progress(self, runner, db):
        result = runner.invoke(cli, ["log-set", "--exercise", "squat", "--rpe", "5", "--weight", "100", "--reps", "5"])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["progress", "--exercise", "squat", "--week", "9"])
        assert result.exit_code == 0
        assert "106" in result.output


class TestProgress:

    def test_explicit_values(self, runner):
        result = runner.invoke(cli, ["progress", "--exercise", "squat", "--week", "9", "--weight", "100", "--rpe", "5"])
        assert result.exit_code == 0
        assert "106" in result.output

    def test_shows_rest_time(self, runner):
        result = runner.invoke(cli, ["progress", "--exercise", "squat", "--week", "9", "--weight", "100", "--rpe", "5"])
        assert result.exit_code == 0
        assert "Rest between sets: 115s" in result.output

    def test_holds_on_high_rpe(self, runner):
        result = runner.invoke(cli, ["progress", "--exercise", "squat", "--week", "3", "--weight", "100", "--rpe", "9"])
        assert result.exit_code == 0
        assert "holding" in result.output

    def test_no_history(self, runner, db):
        result = runner.invoke(cli, ["progress", "--exercise", "deadlift", "--week", "3"])
        assert result.exit_code == 2

    def test_invalid_rpe(self, runner):
        result = runner.invoke(cli, ["progress", "--exercise", "squat", "--week", "3", "--weight", "100", "--rpe", "12"])
        assert result.exit_code == 1


class TestSafety:

    def test_quiet_history(self, runner, db):
        result = runner.invoke(cli, ["safety", "--date", "2024-03-04", "--age", "17"])
        assert result.exit_code == 0
        assert "Safety Metrics" in result.output
        assert "No safety alerts" in result.output

    def test_overtraining_saves_alerts(self, runner, db):
        seed_overtraining(db)
        result = runner.invoke(cli, ["safety", "--date", "2024-03-04", "--age", "16"])
        assert result.exit_code == 0
        assert "CRITICAL" in result.output
        assert "Stored" in result.output

        stored = SqlHistoryProvider(db).alerts("tester")
        assert {row.alert_type for row in stored} >= {"injury_risk", "overtraining"}

        result = runner.invoke(cli, ["alerts"])
        assert result.exit_code == 0
        assert "Safety Alerts" in result.output

        result = runner.invoke(cli, ["alerts", "--resolve", str(stored[0].id)])
        assert result.exit_code == 0
        assert "Resolved 1" in result.output
        assert len(SqlHistoryProvider(db).alerts("tester")) == len(stored) - 1

    def test_session_frequency_counts_on_history_path(self, runner, db):
        history = SqlHistoryProvider(db)
        for offset in range(7):
            history.add_session("tester", SessionRecord(date=date(2024, 3, 4) - timedelta(days=offset),
                                                        week=1, day=1, average_rpe=5))
        result = runner.invoke(cli, ["safety", "--date", "2024-03-04", "--no-save"])
        assert result.exit_code == 0
        assert "0.30" in result.output

    def test_no_save(self, runner, db):
        seed_overtraining(db)
        result = runner.invoke(cli, ["safety", "--date", "2024-03-04", "--no-save"])
        assert result.exit_code == 0
        assert SqlHistoryProvider(db).alerts("tester") == []

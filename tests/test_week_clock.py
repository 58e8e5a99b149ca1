"""Tests for program calendar arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from adaptive_periodization.analysis.week_clock import WeekClock, resolve, to_date
from adaptive_periodization.errors import InvalidWeekError

# Monday
START = date(2024, 1, 1)


class TestWeekAndDay:
    """Test week/day resolution."""

    def setup_method(self):
        self.clock = WeekClock(rest_days=[5, 6], session_frequency=3)

    def test_start_date_is_week_1_day_1(self):
        status = self.clock.resolve(START, START)
        assert (status.week, status.day) == (1, 1)
        assert not status.is_deload
        assert not status.is_complete

    def test_day_boundaries(self):
        assert self.clock.week_and_day(START, START + timedelta(days=6)) == (1, 7)
        assert self.clock.week_and_day(START, START + timedelta(days=7)) == (2, 1)
        assert self.clock.week_and_day(START, START + timedelta(days=76)) == (11, 7)

    def test_deload_flag(self):
        assert self.clock.resolve(START, START + timedelta(weeks=4)).is_deload
        assert self.clock.resolve(START, START + timedelta(weeks=7, days=3)).is_deload
        assert not self.clock.resolve(START, START + timedelta(weeks=8)).is_deload

    def test_before_start_rejected(self):
        with pytest.raises(InvalidWeekError):
            self.clock.resolve(START, START - timedelta(days=1))

    def test_past_program_end_is_complete(self):
        status = self.clock.resolve(START, START + timedelta(weeks=11))
        assert status.week == 12
        assert status.is_complete
        assert not status.is_deload
        assert status.progress_pct == 100.0

    def test_accepts_strings_and_datetimes(self):
        status = resolve("2024-01-01", datetime(2024, 1, 15, 18, 30))
        assert (status.week, status.day) == (3, 1)

    def test_week_dates(self):
        assert self.clock.week_dates(2, START) == (date(2024, 1, 8), date(2024, 1, 14))

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            self.clock.resolve(START, START, completed_this_week=-1)


class TestRestDaysAndNextSession:
    """Test rest-day detection and next-session scheduling."""

    def setup_method(self):
        self.clock = WeekClock(rest_days=[5, 6], session_frequency=3)

    def test_weekend_is_rest(self):
        assert self.clock.is_rest_day(date(2024, 1, 6))
        assert self.clock.is_rest_day(date(2024, 1, 7))
        assert not self.clock.is_rest_day(date(2024, 1, 8))

    def test_next_session_tomorrow(self):
        status = self.clock.resolve(START, START, completed_this_week=0)
        assert status.next_session_date == date(2024, 1, 2)

    def test_next_session_skips_weekend(self):
        status = self.clock.resolve(START, date(2024, 1, 5), completed_this_week=1)
        assert status.next_session_date == date(2024, 1, 8)

    def test_quota_met_moves_to_next_week(self):
        status = self.clock.resolve(START, date(2024, 1, 3), completed_this_week=3)
        assert status.next_session_date == date(2024, 1, 8)

    def test_next_week_start_on_rest_day(self):
        # Program weeks start on Saturday
        clock = WeekClock(rest_days=[5, 6], session_frequency=2)
        saturday = date(2024, 1, 6)
        status = clock.resolve(saturday, date(2024, 1, 9), completed_this_week=2)
        assert status.next_session_date == date(2024, 1, 15)

    def test_every_day_rest_gives_none(self):
        clock = WeekClock(rest_days=range(7), session_frequency=3)
        assert clock.resolve(START, START).next_session_date is None

    def test_invalid_rest_day(self):
        with pytest.raises(ValueError):
            WeekClock(rest_days=[7])


class TestMissedAndProgress:
    """Test missed-session counting and completion percentage."""

    def setup_method(self):
        self.clock = WeekClock(rest_days=[5, 6], session_frequency=3)

    def test_missed_sessions(self):
        assert self.clock.missed_sessions(1, 0) == 0
        assert self.clock.missed_sessions(3, 4) == 2
        assert self.clock.missed_sessions(3, 10) == 0

    def test_missed_sessions_in_status(self):
        status = self.clock.resolve(START, START + timedelta(weeks=2), completed_this_week=0, completed_total=4)
        assert status.missed_sessions == 2

    def test_progress_pct(self):
        assert self.clock.progress_pct(1) == pytest.approx(100 / 11)
        assert self.clock.progress_pct(11) == 100.0
        assert self.clock.progress_pct(15) == 100.0

    def test_to_dict(self):
        data = self.clock.resolve(START, START).to_dict()
        assert data['week_start'] == "2024-01-01"
        assert data['next_session_date'] == "2024-01-02"


def test_to_date():
    assert to_date("2024-02-29") == date(2024, 2, 29)
    assert to_date(datetime(2024, 2, 29, 12)) == date(2024, 2, 29)
    assert to_date(date(2024, 2, 29)) == date(2024, 2, 29)

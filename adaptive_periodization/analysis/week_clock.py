"""Program calendar arithmetic: which week and day a date falls on."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from .phases import phase_for_week
from ..config import PROGRAM_TOTAL_WEEKS, config
from ..errors import InvalidWeekError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]

SCAN_DAYS = 7


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO 'YYYY-MM-DD' string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()


@dataclass(frozen=True)
class WeekStatus:
    """Resolved position of a date within the program."""

    week: int
    day: int  # 1-7 within the program week
    is_deload: bool
    is_rest_day: bool
    next_session_date: Optional[date]
    missed_sessions: int
    progress_pct: float
    week_start: date
    week_end: date
    is_complete: bool = False

    def to_dict(self) -> dict:
        return {
            'week': self.week,
            'day': self.day,
            'is_deload': self.is_deload,
            'is_rest_day': self.is_rest_day,
            'next_session_date': self.next_session_date.isoformat() if self.next_session_date else None,
            'missed_sessions': self.missed_sessions,
            'progress_pct': self.progress_pct,
            'week_start': self.week_start.isoformat(),
            'week_end': self.week_end.isoformat(),
            'is_complete': self.is_complete,
        }


class WeekClock:
    """Maps calendar dates onto the program's weeks and days.

    Rest days use Python weekday numbers (0=Monday, 6=Sunday).
    """

    def __init__(self,
                 rest_days: Optional[Iterable[int]] = None,
                 session_frequency: Optional[int] = None):
        if rest_days is None:
            rest_days = config.get_training_rest_days()
        self.rest_days = frozenset(rest_days)
        for day in self.rest_days:
            if not 0 <= day <= 6:
                raise ValueError(f"Rest day must be a weekday number 0-6, got {day}")

        self.session_frequency = config.SESSION_FREQUENCY if session_frequency is None else session_frequency
        if self.session_frequency < 0:
            raise ValueError("session_frequency must be >= 0")
        self.total_weeks = PROGRAM_TOTAL_WEEKS

    def week_and_day(self, program_start_date: DateLike, today: DateLike):
        """Return (week, day) of today within the program.

        Raises:
            InvalidWeekError: today is before the program start
        """
        start = to_date(program_start_date)
        current = to_date(today)
        days_since_start = (current - start).days
        if days_since_start < 0:
            raise InvalidWeekError(
                0, f"{current.isoformat()} is before program start {start.isoformat()}"
            )
        return days_since_start // 7 + 1, days_since_start % 7 + 1

    def is_rest_day(self, day: DateLike) -> bool:
        return to_date(day).weekday() in self.rest_days

    def week_dates(self, week: int, program_start_date: DateLike):
        """First and last calendar date of a program week."""
        start = to_date(program_start_date)
        week_start = start + timedelta(days=(week - 1) * 7)
        return week_start, week_start + timedelta(days=6)

    def next_session_date(self,
                          today: DateLike,
                          completed_this_week: int,
                          next_week_start: date) -> Optional[date]:
        """Next calendar date that is not a rest day.

        While this week's quota is open the scan starts tomorrow; once it is
        met the scan starts at the next program week. None if every scanned
        day is a rest day.
        """
        current = to_date(today)

        if completed_this_week < self.session_frequency:
            for offset in range(1, SCAN_DAYS + 1):
                candidate = current + timedelta(days=offset)
                if not self.is_rest_day(candidate):
                    return candidate
        else:
            for offset in range(SCAN_DAYS):
                candidate = next_week_start + timedelta(days=offset)
                if not self.is_rest_day(candidate):
                    return candidate

        logger.warning(f"No training day found within {SCAN_DAYS} days (rest days: {sorted(self.rest_days)})")
        return None

    def missed_sessions(self, week: int, completed_total: int) -> int:
        expected = (week - 1) * self.session_frequency
        return max(0, expected - completed_total)

    def progress_pct(self, week: int) -> float:
        return min(100.0, week / self.total_weeks * 100)

    def resolve(self,
                program_start_date: DateLike,
                today: DateLike,
                completed_this_week: int = 0,
                completed_total: int = 0) -> WeekStatus:
        """Resolve today's position in the program.

        Args:
            program_start_date: First day of week 1
            today: Date being evaluated
            completed_this_week: Completed sessions in the current program week
            completed_total: Completed sessions since the program started

        Raises:
            InvalidWeekError: today is before the program start
        """
        if completed_this_week < 0 or completed_total < 0:
            raise ValueError("Completed session counts must be >= 0")

        week, day = self.week_and_day(program_start_date, today)
        week_start, week_end = self.week_dates(week, program_start_date)
        is_complete = week > self.total_weeks

        is_deload = False if is_complete else phase_for_week(week).is_deload

        return WeekStatus(
            week=week,
            day=day,
            is_deload=is_deload,
            is_rest_day=self.is_rest_day(today),
            next_session_date=self.next_session_date(
                today, completed_this_week, week_end + timedelta(days=1)
            ),
            missed_sessions=self.missed_sessions(week, completed_total),
            progress_pct=self.progress_pct(week),
            week_start=week_start,
            week_end=week_end,
            is_complete=is_complete,
        )


def resolve(program_start_date: DateLike,
            today: DateLike,
            completed_this_week: int = 0,
            completed_total: int = 0) -> WeekStatus:
    return WeekClock().resolve(program_start_date, today, completed_this_week, completed_total)

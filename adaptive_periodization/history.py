"""Training history records and the read-only history query interface."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Protocol

from .config import SESSION_WINDOW_DAYS, config


class SessionStatus(Enum):
    """Lifecycle of a logged session."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CheckIn:
    """Daily wellness check-in (mood 1-5, energy 1-10, soreness 1-5)."""

    date: date
    mood: int
    energy_level: int
    sleep_hours: float
    muscle_soreness: int
    notes: str = ""


@dataclass(frozen=True)
class SessionRecord:
    """A logged training session."""

    date: date
    week: int
    day: int
    slot: str = "am"
    status: SessionStatus = SessionStatus.COMPLETED
    average_rpe: Optional[float] = None
    duration_minutes: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED


@dataclass(frozen=True)
class SetLog:
    """One logged working set."""

    exercise_id: str
    rpe: float
    weight_used: Optional[float] = None
    set_number: int = 1
    reps_completed: int = 0
    logged_at: Optional[datetime] = None


class HistoryProvider(Protocol):
    """Read-only history store. Every method returns records oldest first."""

    def checkins(self, user_id: str, start: date, end: date) -> List[CheckIn]:
        ...

    def sessions(self, user_id: str, start: date, end: date) -> List[SessionRecord]:
        ...

    def set_logs(self, user_id: str, start: date, end: date) -> List[SetLog]:
        ...


@dataclass
class SafetyWindow:
    """Bounded recent history for one safety evaluation."""

    checkins: List[CheckIn]
    sessions: List[SessionRecord]
    set_logs: List[SetLog]
    as_of: date


def load_safety_window(provider: HistoryProvider,
                       user_id: str,
                       today: date,
                       lookback_days: Optional[int] = None) -> SafetyWindow:
    """Fetch the most recent check-ins, sessions and set logs for scoring.

    The store is read once per record type; the result is a stable snapshot
    for a single evaluation. Sessions keep at least every session of the
    frequency window ending today, even beyond SAFETY_SESSION_WINDOW.
    """
    lookback_days = lookback_days or config.SAFETY_LOOKBACK_DAYS
    start = today - timedelta(days=lookback_days)

    checkins = list(provider.checkins(user_id, start, today))[-config.SAFETY_CHECKIN_WINDOW:]
    all_sessions = list(provider.sessions(user_id, start, today))
    window_start = today - timedelta(days=SESSION_WINDOW_DAYS)
    this_week = sum(1 for s in all_sessions if window_start < s.date <= today)
    keep = max(config.SAFETY_SESSION_WINDOW, this_week)
    sessions = all_sessions[-keep:]
    set_logs = list(provider.set_logs(user_id, start, today))[-config.SAFETY_SET_LOG_WINDOW:]

    return SafetyWindow(checkins=checkins, sessions=sessions, set_logs=set_logs, as_of=today)

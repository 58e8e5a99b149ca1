"""SQL-backed training history store."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from .database import Database, get_db
from .models import CheckInRow, SafetyAlertRow, SetLogRow, TrainingSessionRow
from ..analysis.data_validation import DataValidator
from ..analysis.safety import SafetyAlert
from ..history import CheckIn, SessionRecord, SessionStatus, SetLog

logger = logging.getLogger(__name__)


class SqlHistoryProvider:
    """Reads and writes trainee history through SQLAlchemy.

    Read methods return plain records ordered oldest first.
    """

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    # Queries

    def checkins(self, user_id: str, start: date, end: date) -> List[CheckIn]:
        with self.db.get_session() as session:
            rows = session.query(CheckInRow).filter(
                CheckInRow.user_id == user_id,
                CheckInRow.date >= start,
                CheckInRow.date <= end,
            ).order_by(CheckInRow.date).all()

            return [
                CheckIn(
                    date=row.date,
                    mood=row.mood,
                    energy_level=row.energy_level,
                    sleep_hours=row.sleep_hours,
                    muscle_soreness=row.muscle_soreness,
                    notes=row.notes or "",
                )
                for row in rows
            ]

    def sessions(self, user_id: str, start: date, end: date) -> List[SessionRecord]:
        with self.db.get_session() as session:
            rows = session.query(TrainingSessionRow).filter(
                TrainingSessionRow.user_id == user_id,
                TrainingSessionRow.date >= start,
                TrainingSessionRow.date <= end,
            ).order_by(TrainingSessionRow.date, TrainingSessionRow.id).all()

            return [self._to_session_record(row) for row in rows]

    def set_logs(self, user_id: str, start: date, end: date) -> List[SetLog]:
        window_start = datetime.combine(start, time.min)
        window_end = datetime.combine(end + timedelta(days=1), time.min)

        with self.db.get_session() as session:
            rows = session.query(SetLogRow).filter(
                SetLogRow.user_id == user_id,
                SetLogRow.logged_at >= window_start,
                SetLogRow.logged_at < window_end,
            ).order_by(SetLogRow.logged_at, SetLogRow.id).all()

            return [
                SetLog(
                    exercise_id=row.exercise_id,
                    rpe=row.rpe,
                    weight_used=row.weight_used,
                    set_number=row.set_number,
                    reps_completed=row.reps_completed,
                    logged_at=row.logged_at,
                )
                for row in rows
            ]

    def completed_sessions(self, user_id: str, start: date, end: date) -> int:
        """Number of completed sessions between two dates, inclusive."""
        with self.db.get_session() as session:
            return session.query(TrainingSessionRow).filter(
                TrainingSessionRow.user_id == user_id,
                TrainingSessionRow.status == SessionStatus.COMPLETED.value,
                TrainingSessionRow.date >= start,
                TrainingSessionRow.date <= end,
            ).count()

    def last_set_for(self, user_id: str, exercise_id: str) -> Optional[SetLog]:
        """Most recent logged set of an exercise."""
        with self.db.get_session() as session:
            row = session.query(SetLogRow).filter(
                SetLogRow.user_id == user_id,
                SetLogRow.exercise_id == exercise_id,
            ).order_by(SetLogRow.logged_at.desc(), SetLogRow.id.desc()).first()

            if row is None:
                return None
            return SetLog(
                exercise_id=row.exercise_id,
                rpe=row.rpe,
                weight_used=row.weight_used,
                set_number=row.set_number,
                reps_completed=row.reps_completed,
                logged_at=row.logged_at,
            )

    # Writes

    def add_checkin(self, user_id: str, checkin: CheckIn) -> int:
        """Store a check-in. One check-in per user and date.

        Raises:
            InvalidRangeError: a score is outside its scale
            ValueError: a check-in already exists for the date
        """
        DataValidator.check("mood", checkin.mood)
        DataValidator.check("energy_level", checkin.energy_level)
        DataValidator.check("sleep_hours", checkin.sleep_hours)
        DataValidator.check("muscle_soreness", checkin.muscle_soreness)

        with self.db.get_session() as session:
            existing = session.query(CheckInRow).filter_by(user_id=user_id, date=checkin.date).first()
            if existing:
                raise ValueError(f"Check-in already exists for {checkin.date.isoformat()}")

            row = CheckInRow(
                user_id=user_id,
                date=checkin.date,
                mood=checkin.mood,
                energy_level=checkin.energy_level,
                sleep_hours=checkin.sleep_hours,
                muscle_soreness=checkin.muscle_soreness,
                notes=checkin.notes or None,
            )
            session.add(row)
            session.flush()
            logger.info(f"Stored check-in for {user_id} on {checkin.date}")
            return row.id

    def add_session(self, user_id: str, record: SessionRecord, notes: Optional[str] = None) -> int:
        if record.average_rpe is not None:
            DataValidator.check("average_rpe", record.average_rpe, "rpe")

        with self.db.get_session() as session:
            row = TrainingSessionRow(
                user_id=user_id,
                date=record.date,
                session_type=record.slot,
                week_number=record.week,
                day_number=record.day,
                status=record.status.value,
                duration_minutes=record.duration_minutes,
                average_rpe=record.average_rpe,
                notes=notes,
            )
            session.add(row)
            session.flush()
            logger.info(f"Stored {record.status.value} session for {user_id} on {record.date} (week {record.week})")
            return row.id

    def add_set_log(self, user_id: str, log: SetLog, session_id: Optional[int] = None) -> int:
        DataValidator.check("rpe", log.rpe)
        if log.weight_used is not None:
            DataValidator.check("weight_used", log.weight_used, "weight")

        with self.db.get_session() as session:
            row = SetLogRow(
                user_id=user_id,
                session_id=session_id,
                exercise_id=log.exercise_id,
                set_number=log.set_number,
                reps_completed=log.reps_completed,
                weight_used=log.weight_used,
                rpe=log.rpe,
                logged_at=log.logged_at or datetime.utcnow(),
            )
            session.add(row)
            session.flush()
            return row.id

    # Alerts

    def save_alerts(self, user_id: str, alerts: Iterable[SafetyAlert]) -> int:
        """Store generated alerts as unresolved. Returns the number stored."""
        count = 0
        with self.db.get_session() as session:
            for alert in alerts:
                session.add(SafetyAlertRow(
                    user_id=user_id,
                    alert_type=alert.alert_type.value,
                    severity=alert.severity.value,
                    message=alert.message,
                    is_resolved=False,
                ))
                count += 1

        if count:
            logger.info(f"Stored {count} safety alert(s) for {user_id}")
        return count

    def alerts(self, user_id: str, include_resolved: bool = False) -> List[SafetyAlertRow]:
        """Stored alerts, newest first."""
        with self.db.get_session() as session:
            query = session.query(SafetyAlertRow).filter(SafetyAlertRow.user_id == user_id)
            if not include_resolved:
                query = query.filter(SafetyAlertRow.is_resolved.is_(False))
            return query.order_by(SafetyAlertRow.created_at.desc(), SafetyAlertRow.id.desc()).all()

    def resolve_alerts(self, user_id: str, alert_ids: Iterable[int]) -> int:
        """Mark alerts resolved. Returns the number updated."""
        alert_ids = list(alert_ids)
        if not alert_ids:
            raise ValueError("alert_ids must not be empty")

        with self.db.get_session() as session:
            rows = session.query(SafetyAlertRow).filter(
                SafetyAlertRow.user_id == user_id,
                SafetyAlertRow.id.in_(alert_ids),
            ).all()
            now = datetime.utcnow()
            for row in rows:
                row.is_resolved = True
                row.resolved_at = now
            return len(rows)

    @staticmethod
    def _to_session_record(row: TrainingSessionRow) -> SessionRecord:
        return SessionRecord(
            date=row.date,
            week=row.week_number,
            day=row.day_number,
            slot=row.session_type or "am",
            status=SessionStatus(row.status or SessionStatus.PLANNED.value),
            average_rpe=row.average_rpe,
            duration_minutes=row.duration_minutes,
        )

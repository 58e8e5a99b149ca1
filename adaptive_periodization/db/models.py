"""Database models for check-ins, training sessions, set logs and safety alerts."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CheckInRow(Base):
    """Daily wellness check-in."""

    __tablename__ = "daily_check_ins"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_check_in_user_date"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), nullable=False, index=True)
    date = Column(Date, nullable=False)
    mood = Column(Integer, nullable=False)  # 1-5
    energy_level = Column(Integer, nullable=False)  # 1-10
    sleep_hours = Column(Float, nullable=False)
    muscle_soreness = Column(Integer, nullable=False)  # 1-5
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<CheckInRow(user_id={self.user_id}, date={self.date}, energy={self.energy_level})>"


class TrainingSessionRow(Base):
    """A planned or logged training session."""

    __tablename__ = "training_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), nullable=False, index=True)
    date = Column(Date, nullable=False)
    session_type = Column(String(10), default="am")  # am, pm
    week_number = Column(Integer, nullable=False)
    day_number = Column(Integer, nullable=False)
    status = Column(String(20), default="planned")  # planned, in_progress, completed, skipped
    duration_minutes = Column(Integer)
    average_rpe = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<TrainingSessionRow(user_id={self.user_id}, date={self.date}, week={self.week_number}, status={self.status})>"


class SetLogRow(Base):
    """One logged working set."""

    __tablename__ = "set_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("training_sessions.id"))
    exercise_id = Column(String(100), nullable=False)
    set_number = Column(Integer, default=1)
    reps_completed = Column(Integer, default=0)
    weight_used = Column(Float)  # kg, null for bodyweight
    rpe = Column(Float, nullable=False)  # 1-10
    rest_taken_seconds = Column(Integer)
    logged_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SetLogRow(exercise_id={self.exercise_id}, weight={self.weight_used}, rpe={self.rpe})>"


class SafetyAlertRow(Base):
    """Stored safety alert."""

    __tablename__ = "safety_alerts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), nullable=False, index=True)
    alert_type = Column(String(20), nullable=False)  # fatigue, form, load, injury_risk, overtraining
    severity = Column(String(10), nullable=False)  # low, medium, high, critical
    message = Column(Text, nullable=False)
    is_resolved = Column(Boolean, default=False)
    resolved_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<SafetyAlertRow(user_id={self.user_id}, type={self.alert_type}, severity={self.severity})>"

"""Configuration management for the adaptive periodization engine."""

import os
from datetime import date, datetime
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


# Fixed program length; deload weeks are part of the phase table, not configuration.
PROGRAM_TOTAL_WEEKS = 11

# Overtraining frequency window, in days ending at the evaluation date.
SESSION_WINDOW_DAYS = 7


class Config:
    """Application configuration."""

    # Database (reference history store)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./adaptive_periodization.db")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Trainee (CLI defaults)
    USER_ID: str = os.getenv("USER_ID", "default")
    PROGRAM_START_DATE: str = os.getenv("PROGRAM_START_DATE", "")  # YYYY-MM-DD
    TRAINEE_AGE: int = int(os.getenv("TRAINEE_AGE", "16"))

    # Week clock
    TRAINING_REST_DAYS: str = os.getenv("TRAINING_REST_DAYS", "5,6")  # Comma-separated days (0=Mon, 6=Sun)
    SESSION_FREQUENCY: int = int(os.getenv("SESSION_FREQUENCY", "3"))  # Completed sessions expected per week

    # Safety thresholds
    MAX_WEEKLY_SESSIONS: int = int(os.getenv("MAX_WEEKLY_SESSIONS", "6"))
    MAX_CONSECUTIVE_HIGH_INTENSITY: int = int(os.getenv("MAX_CONSECUTIVE_HIGH_INTENSITY", "3"))
    HIGH_INTENSITY_RPE: float = float(os.getenv("HIGH_INTENSITY_RPE", "7"))
    YOUTH_AGE_LIMIT: int = int(os.getenv("YOUTH_AGE_LIMIT", "16"))

    # Safety history windows (most recent records kept per evaluation)
    SAFETY_CHECKIN_WINDOW: int = int(os.getenv("SAFETY_CHECKIN_WINDOW", "7"))
    SAFETY_SESSION_WINDOW: int = int(os.getenv("SAFETY_SESSION_WINDOW", "5"))
    SAFETY_SET_LOG_WINDOW: int = int(os.getenv("SAFETY_SET_LOG_WINDOW", "20"))
    SAFETY_LOOKBACK_DAYS: int = int(os.getenv("SAFETY_LOOKBACK_DAYS", "14"))

    # Forced modification factors (all <= 1.0, they only ever reduce)
    SAFETY_INTENSITY_FACTOR: float = float(os.getenv("SAFETY_INTENSITY_FACTOR", "0.7"))
    SAFETY_VOLUME_FACTOR: float = float(os.getenv("SAFETY_VOLUME_FACTOR", "0.75"))
    REST_SESSION_MAX_MINUTES: int = int(os.getenv("REST_SESSION_MAX_MINUTES", "20"))
    REST_SESSION_MAX_INTENSITY: float = float(os.getenv("REST_SESSION_MAX_INTENSITY", "0.3"))

    # Coaching copy (optional text generation)
    COACH_BACKEND: str = os.getenv("COACH_BACKEND", "none")  # ollama, claude or none
    OLLAMA_URL: str = os.getenv("OLLAMA_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.1:8b")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
    COACH_TIMEOUT_SECONDS: float = float(os.getenv("COACH_TIMEOUT_SECONDS", "30"))

    @classmethod
    def get_training_rest_days(cls) -> List[int]:
        """Parse and return list of rest days for the week clock.

        Returns:
            List of integers representing rest days (0=Monday, 6=Sunday)
        """
        if not cls.TRAINING_REST_DAYS:
            return []

        rest_days = []
        for day_str in cls.TRAINING_REST_DAYS.split(','):
            try:
                day = int(day_str.strip())
            except ValueError:
                continue
            if 0 <= day <= 6 and day not in rest_days:
                rest_days.append(day)

        return sorted(rest_days)

    @classmethod
    def get_program_start_date(cls) -> Optional[date]:
        """Parse PROGRAM_START_DATE; None if unset or malformed."""
        if not cls.PROGRAM_START_DATE:
            return None
        try:
            return datetime.strptime(cls.PROGRAM_START_DATE.strip(), '%Y-%m-%d').date()
        except ValueError:
            return None

    @classmethod
    def validate(cls) -> bool:
        """Validate numeric configuration."""
        if cls.SESSION_FREQUENCY < 0:
            raise ValueError("SESSION_FREQUENCY must be >= 0")
        if cls.MAX_WEEKLY_SESSIONS < 1:
            raise ValueError("MAX_WEEKLY_SESSIONS must be >= 1")
        for name in ("SAFETY_INTENSITY_FACTOR", "SAFETY_VOLUME_FACTOR", "REST_SESSION_MAX_INTENSITY"):
            value = getattr(cls, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if cls.COACH_BACKEND not in ("ollama", "claude", "none"):
            raise ValueError(f"COACH_BACKEND must be one of ollama, claude, none (got {cls.COACH_BACKEND})")
        return True


config = Config()

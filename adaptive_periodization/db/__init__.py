"""Database module for the training history store."""

from .database import Database, get_db
from .history import SqlHistoryProvider
from .models import CheckInRow, SafetyAlertRow, SetLogRow, TrainingSessionRow

__all__ = [
    "Database",
    "get_db",
    "SqlHistoryProvider",
    "CheckInRow",
    "TrainingSessionRow",
    "SetLogRow",
    "SafetyAlertRow",
]

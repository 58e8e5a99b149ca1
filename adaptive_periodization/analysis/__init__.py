"""Analysis module for periodization, progression and safety calculations."""

from .phases import PhaseName, ProgramPhase, phase_for_week
from .progression import ExerciseProgressionRule, ProgressionCalculator
from .safety import ForcedModifications, InjuryRisk, SafetyAlert, SafetyMetrics, SafetyMonitor
from .schedule import ScheduleGenerator, SessionSlot, SessionTemplate
from .wellness import WellnessAdapter, WellnessSnapshot
from .week_clock import WeekClock, WeekStatus

__all__ = [
    "PhaseName",
    "ProgramPhase",
    "phase_for_week",
    "ExerciseProgressionRule",
    "ProgressionCalculator",
    "ForcedModifications",
    "InjuryRisk",
    "SafetyAlert",
    "SafetyMetrics",
    "SafetyMonitor",
    "ScheduleGenerator",
    "SessionSlot",
    "SessionTemplate",
    "WellnessAdapter",
    "WellnessSnapshot",
    "WeekClock",
    "WeekStatus",
]

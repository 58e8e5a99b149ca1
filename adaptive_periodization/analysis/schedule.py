"""Weekly session template generation."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Tuple

from .phases import phase_for_week, validate_week


class SessionSlot(Enum):
    """Time-of-day slot for a session."""

    AM = "am"
    PM = "pm"


@dataclass(frozen=True)
class SessionTemplate:
    """A planned session. Immutable: adaptation returns a new template."""

    week: int
    day: int  # 1-7, program day within the week
    slot: SessionSlot
    focus: str
    exercises: Tuple[str, ...]
    duration_minutes: int
    intensity_modifier: float

    def with_changes(self, **changes) -> "SessionTemplate":
        """Return a copy with the given fields replaced."""
        if 'exercises' in changes:
            changes['exercises'] = tuple(changes['exercises'])
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'week': self.week,
            'day': self.day,
            'slot': self.slot.value,
            'focus': self.focus,
            'exercises': list(self.exercises),
            'duration_minutes': self.duration_minutes,
            'intensity_modifier': self.intensity_modifier,
        }


@dataclass(frozen=True)
class AmSessionSpec:
    day: int
    focus: str
    exercises: Tuple[str, ...]
    duration_minutes: int
    deload_duration_minutes: int


@dataclass(frozen=True)
class PmSessionSpec:
    day: int
    focus: str
    exercises: Tuple[str, ...]
    duration_minutes: int
    intensity_modifier: float


# Six AM sessions, one per training day
AM_ROTATION: Tuple[AmSessionSpec, ...] = (
    AmSessionSpec(1, "Lower body strength",
                  ("squat", "deadlift", "lunges", "calf_raises"), 45, 30),
    AmSessionSpec(2, "Upper body strength",
                  ("push_ups", "pull_ups", "shoulder_press", "rows"), 45, 30),
    AmSessionSpec(3, "Full body endurance",
                  ("burpees", "mountain_climbers", "jumping_jacks", "plank_variations"), 40, 25),
    AmSessionSpec(4, "Lower body power",
                  ("jump_squats", "box_jumps", "lateral_bounds", "single_leg_work"), 45, 30),
    AmSessionSpec(5, "Upper body power",
                  ("explosive_push_ups", "medicine_ball_throws", "battle_ropes", "core_work"), 45, 30),
    AmSessionSpec(6, "Sport-specific skills",
                  ("agility_drills", "sprint_work", "sport_specific_movements", "mobility"), 40, 25),
)

# Skill and recovery work; fixed modifiers that do not follow phase intensity
PM_SESSIONS: Tuple[PmSessionSpec, ...] = (
    PmSessionSpec(1, "Plyometric training",
                  ("depth_jumps", "reactive_jumps", "lateral_plyos", "landing_mechanics"), 30, 0.8),
    PmSessionSpec(3, "Speed and agility",
                  ("sprint_intervals", "change_of_direction", "reaction_drills", "coordination"), 30, 0.8),
    PmSessionSpec(5, "Recovery and mobility",
                  ("foam_rolling", "dynamic_stretching", "yoga_flows", "breathing_exercises"), 25, 0.3),
)

PM_SESSIONS_FROM_WEEK = 9


class ScheduleGenerator:
    """Builds the ordered session templates for a program week."""

    def __init__(self,
                 am_rotation: Tuple[AmSessionSpec, ...] = AM_ROTATION,
                 pm_sessions: Tuple[PmSessionSpec, ...] = PM_SESSIONS,
                 pm_from_week: int = PM_SESSIONS_FROM_WEEK):
        self.am_rotation = am_rotation
        self.pm_sessions = pm_sessions
        self.pm_from_week = pm_from_week

    def generate_week(self, week: int) -> List[SessionTemplate]:
        """Generate the week's sessions: AM sessions for days 1-6, then PM sessions.

        Raises:
            InvalidWeekError: if week is outside the program
        """
        phase = phase_for_week(week)
        intensity_modifier = phase.intensity / 10

        sessions = [
            SessionTemplate(
                week=week,
                day=spec.day,
                slot=SessionSlot.AM,
                focus=spec.focus,
                exercises=spec.exercises,
                duration_minutes=spec.deload_duration_minutes if phase.is_deload else spec.duration_minutes,
                intensity_modifier=intensity_modifier,
            )
            for spec in self.am_rotation
        ]

        if week >= self.pm_from_week:
            sessions.extend(
                SessionTemplate(
                    week=week,
                    day=spec.day,
                    slot=SessionSlot.PM,
                    focus=spec.focus,
                    exercises=spec.exercises,
                    duration_minutes=spec.duration_minutes,
                    intensity_modifier=spec.intensity_modifier,
                )
                for spec in self.pm_sessions
            )

        return sessions

    def sessions_for_day(self, week: int, day: int) -> List[SessionTemplate]:
        """Sessions scheduled on one program day, AM before PM."""
        validate_week(week)
        if not 1 <= day <= 7:
            raise ValueError(f"Day must be between 1 and 7, got {day}")

        day_sessions = [s for s in self.generate_week(week) if s.day == day]
        return sorted(day_sessions, key=lambda s: 0 if s.slot == SessionSlot.AM else 1)


_default_generator = ScheduleGenerator()


def generate_week(week: int) -> List[SessionTemplate]:
    return _default_generator.generate_week(week)


def sessions_for_day(week: int, day: int) -> List[SessionTemplate]:
    return _default_generator.sessions_for_day(week, day)

"""Session adaptation from daily wellness check-ins.

Rules only ever shorten a session or lower its intensity. The input template
is never modified; a new template is returned.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from .data_validation import DataValidator
from .progression import round_half_up
from .schedule import SessionTemplate

logger = logging.getLogger(__name__)

LOW_ENERGY_BELOW = 4
SHORT_SLEEP_BELOW = 6
HIGH_SORENESS_ABOVE = 3
LOW_MOOD_BELOW = 3

DURATION_FACTOR = 0.8
SORENESS_INTENSITY_FACTOR = 0.7
MOOD_INTENSITY_FACTOR = 0.8

# Low-stakes additions for engagement, not training load
ENGAGEMENT_EXERCISES: Tuple[str, ...] = ("fun_movement", "dance_break")


@dataclass(frozen=True)
class WellnessSnapshot:
    """Daily self-report.

    Scales: mood 1-5, energy_level 1-10, sleep_hours 0-24, muscle_soreness 1-5.
    """

    mood: int
    energy_level: int
    sleep_hours: float
    muscle_soreness: int

    def validate(self) -> "WellnessSnapshot":
        """Raise InvalidRangeError for any value outside its scale."""
        DataValidator.check("mood", self.mood)
        DataValidator.check("energy_level", self.energy_level)
        DataValidator.check("sleep_hours", self.sleep_hours)
        DataValidator.check("muscle_soreness", self.muscle_soreness)
        return self


class WellnessAdapter:
    """Applies soft, wellness-driven reductions to a session template."""

    def adapt(self, session: SessionTemplate, wellness: WellnessSnapshot) -> SessionTemplate:
        """Return an adapted copy of the session.

        Rules fire independently; intensity factors multiply.
        """
        wellness.validate()

        duration = session.duration_minutes
        intensity = session.intensity_modifier
        exercises: List[str] = list(session.exercises)
        applied = []

        if wellness.energy_level < LOW_ENERGY_BELOW or wellness.sleep_hours < SHORT_SLEEP_BELOW:
            duration = round_half_up(duration * DURATION_FACTOR)
            applied.append("shortened")

        if wellness.muscle_soreness > HIGH_SORENESS_ABOVE:
            intensity *= SORENESS_INTENSITY_FACTOR
            applied.append("soreness")

        if wellness.mood < LOW_MOOD_BELOW:
            intensity *= MOOD_INTENSITY_FACTOR
            exercises.extend(ENGAGEMENT_EXERCISES)
            applied.append("mood")

        if applied:
            logger.debug(f"Wellness adjustments for week {session.week} day {session.day}: {', '.join(applied)}")

        return session.with_changes(
            duration_minutes=duration,
            intensity_modifier=intensity,
            exercises=exercises,
        )


_adapter = WellnessAdapter()


def adapt(session: SessionTemplate, wellness: WellnessSnapshot) -> SessionTemplate:
    return _adapter.adapt(session, wellness)

"""
Exercise Load Progression Module

Recommends the next working weight for an exercise from the last working
weight, the last RPE and the program phase. Percentages always re-base on the
current working weight.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .data_validation import validate_percentage, validate_rpe, validate_weight
from .phases import PhaseName, ProgramPhase, phase_for_week
from ..errors import InsufficientHistoryError

logger = logging.getLogger(__name__)

DELOAD_LOAD_FACTOR = 0.8

# Phase multipliers on the base progression rate
PHASE_RATE_MULTIPLIERS = {
    PhaseName.FOUNDATION: 0.5,  # Slower while learning the movement
    PhaseName.POWER: 1.5,
    PhaseName.PEAK: 1.5,
}

# Base rest between sets, seconds
BASE_REST_SECONDS = {
    'squat': 120,
    'deadlift': 180,
    'push_ups': 60,
    'pull_ups': 90,
    'jump_squats': 90,
    'box_jumps': 120,
    'sprint': 180,
    'plank': 30,
    'mobility': 0,
}
DEFAULT_REST_SECONDS = 60

# Weeks in which micro-deloads are never suggested
PLANNED_DELOAD_WEEKS = (5, 8)


@dataclass(frozen=True)
class ExerciseProgressionRule:
    """Static progression configuration for one exercise."""

    exercise_id: str
    base_weight: float
    progression_rate_pct: float  # Base percentage increase per progression step
    max_increase_pct: float      # Cap on a single step, relative to current weight
    rpe_threshold: float         # Above this RPE the load is held


def round_load(value: float) -> float:
    """Round to 2 decimal places, halves away from zero for positive loads."""
    return math.floor(value * 100 + 0.5) / 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ProgressionCalculator:
    """Computes RPE-constrained load progression across program phases."""

    def next_weight(self,
                    current_weight: float,
                    last_rpe: float,
                    week: int,
                    rule: ExerciseProgressionRule) -> float:
        """
        Calculate the next recommended working weight.

        Args:
            current_weight: Last working weight (0 for bodyweight)
            last_rpe: RPE reported for the last working set, 1-10
            week: Program week, 1-11
            rule: Progression rule for the exercise

        Returns:
            Next recommended weight

        Raises:
            InvalidWeekError: week outside the program
            InvalidRangeError: RPE, weight or rule percentages out of range
        """
        phase = phase_for_week(week)
        validate_weight(current_weight, "current_weight")
        validate_rpe(last_rpe, "last_rpe")
        validate_percentage(rule.progression_rate_pct, f"{rule.exercise_id}.progression_rate_pct")
        validate_percentage(rule.max_increase_pct, f"{rule.exercise_id}.max_increase_pct")
        validate_rpe(rule.rpe_threshold, f"{rule.exercise_id}.rpe_threshold")

        # Effort too high: hold the load. Takes priority over deload.
        if last_rpe > rule.rpe_threshold:
            logger.debug(f"{rule.exercise_id}: RPE {last_rpe} > {rule.rpe_threshold}, holding {current_weight}")
            return current_weight

        if phase.is_deload:
            return current_weight * DELOAD_LOAD_FACTOR

        rate = self.effective_rate_pct(rule.progression_rate_pct, phase)

        increase = current_weight * rate / 100
        new_weight = current_weight + increase

        cap = current_weight + current_weight * rule.max_increase_pct / 100
        final_weight = min(new_weight, cap)

        rounded = round_load(final_weight)
        if rounded > cap:
            # Rounding must not push the load over the cap
            rounded = math.floor(cap * 100) / 100

        return rounded

    def effective_rate_pct(self, base_rate_pct: float, phase: ProgramPhase) -> float:
        """Phase-adjusted progression rate in percent."""
        rate = base_rate_pct
        rate *= PHASE_RATE_MULTIPLIERS.get(phase.phase, 1.0)
        rate *= phase.intensity / 10
        return rate

    def rest_seconds_for(self, exercise_id: str, intensity: float, phase: ProgramPhase) -> int:
        """Rest time between sets for an exercise at a given intensity (1-10)."""
        rest_time = BASE_REST_SECONDS.get(exercise_id, DEFAULT_REST_SECONDS)
        rest_time *= intensity / 10

        if phase.phase == PhaseName.DELOAD:
            rest_time *= 1.5
        elif phase.phase in (PhaseName.POWER, PhaseName.PEAK):
            rest_time *= 1.2

        return round_half_up(rest_time)

    def should_take_micro_deload(self,
                                 recent_rpes: Sequence[float],
                                 recent_session_count: int,
                                 week: int) -> bool:
        """Check whether an unplanned light session is warranted.

        Never suggested during the planned deload weeks.
        """
        if week in PLANNED_DELOAD_WEEKS:
            return False

        if len(recent_rpes) >= 3:
            avg_rpe = sum(recent_rpes) / len(recent_rpes)
            if avg_rpe > 8:
                return True

        if recent_session_count >= 5 and any(rpe > 7 for rpe in recent_rpes):
            return True

        return False


def weight_progression_pct(weights: Sequence[Optional[float]]) -> float:
    """Percentage change from the first to the last weight of a series.

    Raises:
        InsufficientHistoryError: fewer than two weights, or no usable
            (positive) first weight to use as baseline
    """
    if len(weights) < 2:
        raise InsufficientHistoryError("weight progression", len(weights))

    first, last = weights[0], weights[-1]
    if not first or last is None:
        raise InsufficientHistoryError("weight progression baseline", 0)

    return (last - first) / first * 100


def progression_by_exercise(weights_by_exercise: Dict[str, List[float]]) -> Dict[str, float]:
    """Progression percentage for each exercise that has a usable series."""
    progressions = {}
    for exercise_id, weights in weights_by_exercise.items():
        try:
            progressions[exercise_id] = weight_progression_pct(weights)
        except InsufficientHistoryError:
            continue
    return progressions


_calculator = ProgressionCalculator()


def next_weight(current_weight: float, last_rpe: float, week: int, rule: ExerciseProgressionRule) -> float:
    return _calculator.next_weight(current_weight, last_rpe, week, rule)

"""
Safety Monitoring Module

Scores fatigue, form, load progression and overtraining trends from rolling
windows of check-ins, sessions and set logs, and turns the scores into alerts
and forced session modifications.

Missing history degrades to neutral values; records that are present are
validated and out-of-scale scores raise InvalidRangeError.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .data_validation import DataValidator
from .progression import progression_by_exercise, round_half_up
from .rolling import (
    fraction_where,
    is_monotonic_decreasing,
    is_monotonic_non_decreasing,
    last_n,
    longest_run,
    rolling_average,
)
from .schedule import SessionTemplate
from ..config import SESSION_WINDOW_DAYS, config
from ..history import CheckIn, SessionRecord, SetLog

logger = logging.getLogger(__name__)

NEUTRAL_FATIGUE = 5
NEUTRAL_FORM = 7

TREND_WINDOW = 3
HIGH_RPE_SET = 8

OVERTRAINING_CRITICAL_ABOVE = 0.7
OVERTRAINING_WARNING_FROM = 0.4

RECOVERY_EXERCISES = ("breathing", "light_stretching", "foam_rolling")
TECHNIQUE_DRILL = "technique_drills"


class InjuryRisk(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertType(Enum):
    FATIGUE = "fatigue"
    FORM = "form"
    LOAD = "load"
    INJURY_RISK = "injury_risk"
    OVERTRAINING = "overtraining"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class SafetyMetrics:
    """Result of one safety evaluation."""

    fatigue_level: int
    form_quality: int
    load_progression_pct: float
    injury_risk: InjuryRisk
    recommendations: List[str] = field(default_factory=list)
    overtraining_score: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'fatigue_level': self.fatigue_level,
            'form_quality': self.form_quality,
            'load_progression_pct': self.load_progression_pct,
            'injury_risk': self.injury_risk.value,
            'recommendations': list(self.recommendations),
            'overtraining_score': self.overtraining_score,
        }


@dataclass(frozen=True)
class SafetyAlert:
    alert_type: AlertType
    severity: Severity
    message: str
    resolved: bool = False

    def to_dict(self) -> Dict:
        return {
            'alert_type': self.alert_type.value,
            'severity': self.severity.value,
            'message': self.message,
            'resolved': self.resolved,
        }


@dataclass(frozen=True)
class ForcedModifications:
    reduce_intensity: bool = False
    reduce_volume: bool = False
    add_rest: bool = False
    focus_on_form: bool = False

    @property
    def should_modify(self) -> bool:
        return self.reduce_intensity or self.reduce_volume or self.add_rest or self.focus_on_form

    def to_dict(self) -> Dict:
        return {
            'should_modify': self.should_modify,
            'reduce_intensity': self.reduce_intensity,
            'reduce_volume': self.reduce_volume,
            'add_rest': self.add_rest,
            'focus_on_form': self.focus_on_form,
        }


class SafetyMonitor:
    """Composite fatigue and injury-risk scoring for one trainee."""

    def __init__(self,
                 max_weekly_sessions: Optional[int] = None,
                 max_consecutive_high_intensity: Optional[int] = None,
                 high_intensity_rpe: Optional[float] = None,
                 youth_age_limit: Optional[int] = None):
        self.max_weekly_sessions = (
            config.MAX_WEEKLY_SESSIONS if max_weekly_sessions is None else max_weekly_sessions
        )
        self.max_consecutive_high_intensity = (
            config.MAX_CONSECUTIVE_HIGH_INTENSITY if max_consecutive_high_intensity is None
            else max_consecutive_high_intensity
        )
        self.high_intensity_rpe = config.HIGH_INTENSITY_RPE if high_intensity_rpe is None else high_intensity_rpe
        self.youth_age_limit = config.YOUTH_AGE_LIMIT if youth_age_limit is None else youth_age_limit

    def evaluate(self,
                 recent_checkins: Sequence[CheckIn],
                 recent_sessions: Sequence[SessionRecord],
                 recent_set_logs: Sequence[SetLog],
                 trainee_age: int,
                 as_of: Optional[date] = None) -> SafetyMetrics:
        """
        Score the recent history.

        Args:
            recent_checkins: Daily check-ins, any order
            recent_sessions: Logged sessions, any order
            recent_set_logs: Logged sets; sorted by logged_at when every set
                carries one, otherwise taken oldest first
            trainee_age: Age in years
            as_of: End of the 7-day session window; defaults to the latest
                session date

        Returns:
            SafetyMetrics with risk level and recommendations

        Raises:
            InvalidRangeError: a supplied record holds an out-of-scale score
        """
        self._validate(recent_checkins, recent_sessions, recent_set_logs, trainee_age)

        checkins = sorted(recent_checkins, key=lambda c: c.date)
        sessions = sorted(recent_sessions, key=lambda s: s.date)
        set_logs = self._chronological(recent_set_logs)
        recommendations: List[str] = []

        fatigue = self.fatigue_level(checkins)
        form = self.form_quality(set_logs)
        progression = self.load_progression_pct(set_logs)
        overtraining = self.overtraining_score(sessions, checkins, as_of)

        if fatigue > 7:
            recommendations.append('Consider taking a rest day or reducing intensity')
        elif fatigue > 5:
            recommendations.append('Monitor fatigue levels closely')

        if form < 4:
            recommendations.append('Focus on technique over intensity')
        elif form < 6:
            recommendations.append('Consider reducing weight to maintain form')

        if progression > 10:
            recommendations.append('Weight progression too rapid - reduce increases')

        risk = self.baseline_risk(fatigue, form, progression)
        if overtraining > OVERTRAINING_CRITICAL_ABOVE:
            recommendations.append('Signs of overtraining detected - take additional rest')
            risk = InjuryRisk.CRITICAL
            logger.warning(f"Overtraining composite {overtraining:.2f} - injury risk escalated to critical")

        if trainee_age < self.youth_age_limit:
            recommendations.append('Focus on movement quality and technique')
            if progression > 5:
                recommendations.append('Reduce weight progression for younger athletes')

        return SafetyMetrics(
            fatigue_level=fatigue,
            form_quality=form,
            load_progression_pct=progression,
            injury_risk=risk,
            recommendations=recommendations,
            overtraining_score=overtraining,
        )

    @staticmethod
    def _chronological(set_logs: Sequence[SetLog]) -> List[SetLog]:
        if set_logs and all(log.logged_at is not None for log in set_logs):
            return sorted(set_logs, key=lambda log: log.logged_at)
        return list(set_logs)

    def _validate(self, checkins, sessions, set_logs, trainee_age) -> None:
        DataValidator.check("trainee_age", trainee_age, "age")
        for checkin in checkins:
            DataValidator.check("checkin.mood", checkin.mood, "mood")
            DataValidator.check("checkin.energy_level", checkin.energy_level, "energy_level")
            DataValidator.check("checkin.sleep_hours", checkin.sleep_hours, "sleep_hours")
            DataValidator.check("checkin.muscle_soreness", checkin.muscle_soreness, "muscle_soreness")
        for session in sessions:
            if session.average_rpe is not None:
                DataValidator.check("session.average_rpe", session.average_rpe, "rpe")
        for log in set_logs:
            DataValidator.check(f"{log.exercise_id}.rpe", log.rpe, "rpe")
            if log.weight_used is not None:
                DataValidator.check(f"{log.exercise_id}.weight_used", log.weight_used, "weight")

    def fatigue_level(self, checkins: Sequence[CheckIn]) -> int:
        """Fatigue 1-10 from energy, soreness and sleep deficit."""
        if not checkins:
            return NEUTRAL_FATIGUE

        avg_energy = rolling_average([c.energy_level for c in checkins])
        avg_soreness = rolling_average([c.muscle_soreness for c in checkins])
        avg_sleep = rolling_average([c.sleep_hours for c in checkins])

        score = round_half_up(
            (10 - avg_energy) * 0.4
            + avg_soreness * 0.3
            + max(0, 8 - avg_sleep) * 0.3
        )
        return min(10, max(1, score))

    def form_quality(self, set_logs: Sequence[SetLog]) -> int:
        """Form estimate 1-10; high and frequent RPE lowers it."""
        if not set_logs:
            return NEUTRAL_FORM

        rpes = [log.rpe for log in set_logs]
        avg_rpe = rolling_average(rpes)
        high_rpe_fraction = fraction_where(rpes, lambda rpe: rpe > HIGH_RPE_SET)

        score = max(1, 10 - (avg_rpe - 5) * 2 - high_rpe_fraction * 5)
        return min(10, max(1, round_half_up(score)))

    def load_progression_pct(self, set_logs: Sequence[SetLog]) -> float:
        """Average first-to-last weight change across exercises, in percent."""
        weights_by_exercise: Dict[str, List[float]] = {}
        for log in set_logs:
            if log.weight_used:
                weights_by_exercise.setdefault(log.exercise_id, []).append(log.weight_used)

        progressions = progression_by_exercise(weights_by_exercise)
        if not progressions:
            return 0.0
        return rolling_average(list(progressions.values()))

    def overtraining_score(self,
                           sessions: Sequence[SessionRecord],
                           checkins: Sequence[CheckIn],
                           as_of: Optional[date] = None) -> float:
        """Overtraining trend composite in [0, 1].

        Check-ins must be sorted oldest first.
        """
        score = 0.0

        week_sessions = self._sessions_in_window(sessions, as_of)
        if len(week_sessions) > self.max_weekly_sessions:
            score += 0.3

        consecutive = longest_run(
            week_sessions,
            lambda s: s.average_rpe is not None and s.average_rpe > self.high_intensity_rpe,
        )
        if consecutive > self.max_consecutive_high_intensity:
            score += 0.4

        if len(checkins) >= TREND_WINDOW:
            trend = last_n(list(checkins), TREND_WINDOW)
            if is_monotonic_decreasing([c.energy_level for c in trend]):
                score += 0.2
            if is_monotonic_non_decreasing([c.muscle_soreness for c in trend]):
                score += 0.1

        return min(score, 1.0)

    def _sessions_in_window(self,
                            sessions: Sequence[SessionRecord],
                            as_of: Optional[date]) -> List[SessionRecord]:
        if not sessions:
            return []
        end = as_of or max(s.date for s in sessions)
        start = end - timedelta(days=SESSION_WINDOW_DAYS)
        return [s for s in sessions if start < s.date <= end]

    @staticmethod
    def baseline_risk(fatigue: int, form: int, progression: float) -> InjuryRisk:
        if fatigue > 7 or form < 4 or progression > 15:
            return InjuryRisk.HIGH
        if fatigue > 5 or form < 6 or progression > 10:
            return InjuryRisk.MEDIUM
        return InjuryRisk.LOW

    def alerts_for(self, metrics: SafetyMetrics) -> List[SafetyAlert]:
        """Map each metric threshold to an alert, independently."""
        alerts = []

        if metrics.fatigue_level > 8:
            alerts.append(SafetyAlert(
                AlertType.FATIGUE, Severity.CRITICAL,
                'High fatigue levels detected. Consider taking a rest day.'))
        elif metrics.fatigue_level > 6:
            alerts.append(SafetyAlert(
                AlertType.FATIGUE, Severity.HIGH,
                'Elevated fatigue levels. Monitor closely and reduce intensity if needed.'))

        if metrics.form_quality < 3:
            alerts.append(SafetyAlert(
                AlertType.FORM, Severity.CRITICAL,
                'Poor form quality detected. Stop current exercise and focus on technique.'))
        elif metrics.form_quality < 5:
            alerts.append(SafetyAlert(
                AlertType.FORM, Severity.HIGH,
                'Form quality declining. Reduce weight and focus on proper technique.'))

        if metrics.load_progression_pct > 15:
            alerts.append(SafetyAlert(
                AlertType.LOAD, Severity.CRITICAL,
                'Weight progression too rapid. Risk of injury is high.'))
        elif metrics.load_progression_pct > 10:
            alerts.append(SafetyAlert(
                AlertType.LOAD, Severity.HIGH,
                'Weight progression is high. Monitor for signs of overuse.'))

        if metrics.injury_risk == InjuryRisk.CRITICAL:
            alerts.append(SafetyAlert(
                AlertType.INJURY_RISK, Severity.CRITICAL,
                'High injury risk detected. Consider consulting a healthcare professional.'))
        elif metrics.injury_risk == InjuryRisk.HIGH:
            alerts.append(SafetyAlert(
                AlertType.INJURY_RISK, Severity.HIGH,
                'Elevated injury risk. Take additional precautions and rest if needed.'))

        if metrics.overtraining_score > OVERTRAINING_CRITICAL_ABOVE:
            alerts.append(SafetyAlert(
                AlertType.OVERTRAINING, Severity.CRITICAL,
                'Overtraining pattern detected. Take additional rest days.'))
        elif metrics.overtraining_score >= OVERTRAINING_WARNING_FROM:
            alerts.append(SafetyAlert(
                AlertType.OVERTRAINING, Severity.MEDIUM,
                'Training load is building up. Watch energy and soreness trends.'))

        return alerts

    def modifications_for(self, metrics: SafetyMetrics) -> ForcedModifications:
        """Forced session changes. Poor form and high risk also cut intensity."""
        high_risk = metrics.injury_risk in (InjuryRisk.HIGH, InjuryRisk.CRITICAL)
        fatigued = metrics.fatigue_level > 6
        poor_form = metrics.form_quality < 5
        return ForcedModifications(
            reduce_intensity=fatigued or poor_form or high_risk,
            reduce_volume=fatigued or high_risk,
            add_rest=high_risk,
            focus_on_form=poor_form,
        )

    def apply_modifications(self,
                            session: SessionTemplate,
                            modifications: ForcedModifications) -> SessionTemplate:
        """Return a copy of the session with forced reductions applied.

        Only ever lowers duration and intensity.
        """
        if not modifications.should_modify:
            return session

        duration = session.duration_minutes
        intensity = session.intensity_modifier
        exercises = list(session.exercises)

        if modifications.reduce_intensity:
            intensity *= config.SAFETY_INTENSITY_FACTOR
        if modifications.reduce_volume:
            duration = round_half_up(duration * config.SAFETY_VOLUME_FACTOR)
        if modifications.focus_on_form and TECHNIQUE_DRILL not in exercises:
            exercises.insert(0, TECHNIQUE_DRILL)
        if modifications.add_rest:
            duration = min(duration, config.REST_SESSION_MAX_MINUTES)
            intensity = min(intensity, config.REST_SESSION_MAX_INTENSITY)
            exercises = list(RECOVERY_EXERCISES)

        duration = min(duration, session.duration_minutes)
        intensity = min(intensity, session.intensity_modifier)

        logger.info(
            f"Forced modifications on week {session.week} day {session.day} {session.slot.value}: "
            f"{session.duration_minutes}->{duration} min, "
            f"intensity {session.intensity_modifier:.2f}->{intensity:.2f}"
        )

        return session.with_changes(
            duration_minutes=duration,
            intensity_modifier=intensity,
            exercises=exercises,
        )


_monitor = SafetyMonitor()


def evaluate(recent_checkins: Sequence[CheckIn],
             recent_sessions: Sequence[SessionRecord],
             recent_set_logs: Sequence[SetLog],
             trainee_age: int,
             as_of: Optional[date] = None) -> SafetyMetrics:
    return _monitor.evaluate(recent_checkins, recent_sessions, recent_set_logs, trainee_age, as_of)

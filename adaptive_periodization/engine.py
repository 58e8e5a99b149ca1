"""
Periodization engine facade.

Composes the week clock, phase table, schedule, wellness adaptation and safety
monitor into the four entry points callers use. Nothing here reads a clock or
a store; all history is passed in.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Protocol, Sequence

from .analysis.phases import ProgramPhase, phase_for_week
from .analysis.progression import ExerciseProgressionRule, ProgressionCalculator
from .analysis.safety import ForcedModifications, SafetyAlert, SafetyMetrics, SafetyMonitor
from .analysis.schedule import ScheduleGenerator, SessionTemplate
from .analysis.wellness import WellnessAdapter, WellnessSnapshot
from .analysis.week_clock import DateLike, WeekClock, WeekStatus
from .history import CheckIn, SessionRecord, SetLog

logger = logging.getLogger(__name__)


class CopyGenerator(Protocol):
    """Optional producer of human-readable coaching copy."""

    def motivational_message(self, context: Dict) -> str:
        ...

    def form_cues(self, exercise_id: str, common_mistakes: Sequence[str]) -> List[str]:
        ...


@dataclass(frozen=True)
class SafetyAssessment:
    """Metrics plus the alerts and forced modifications derived from them."""

    metrics: SafetyMetrics
    alerts: List[SafetyAlert]
    modifications: ForcedModifications

    def to_dict(self) -> Dict:
        return {
            'metrics': self.metrics.to_dict(),
            'alerts': [alert.to_dict() for alert in self.alerts],
            'session_modification': self.modifications.to_dict(),
        }


@dataclass(frozen=True)
class SessionRecommendation:
    """Today's sessions after wellness and safety adaptation."""

    status: WeekStatus
    phase: Optional[ProgramPhase]
    nominal_sessions: List[SessionTemplate]
    sessions: List[SessionTemplate]
    modifications: Optional[ForcedModifications] = None
    alerts: List[SafetyAlert] = field(default_factory=list)
    message: Optional[str] = None
    micro_deload: bool = False
    form_cues: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_training_day(self) -> bool:
        return bool(self.sessions)

    def to_dict(self) -> Dict:
        return {
            'status': self.status.to_dict(),
            'phase': self.phase.to_dict() if self.phase else None,
            'nominal_sessions': [s.to_dict() for s in self.nominal_sessions],
            'sessions': [s.to_dict() for s in self.sessions],
            'modifications': self.modifications.to_dict() if self.modifications else None,
            'alerts': [alert.to_dict() for alert in self.alerts],
            'message': self.message,
            'micro_deload': self.micro_deload,
            'form_cues': {k: list(v) for k, v in self.form_cues.items()},
        }


_schedule = ScheduleGenerator()
_wellness = WellnessAdapter()
_progression = ProgressionCalculator()
_monitor = SafetyMonitor()


def resolve_week(program_start_date: DateLike,
                 today: DateLike,
                 completed_this_week: int = 0,
                 completed_total: int = 0,
                 clock: Optional[WeekClock] = None) -> WeekStatus:
    """Resolve where today falls in the program."""
    clock = clock or WeekClock()
    return clock.resolve(program_start_date, today, completed_this_week, completed_total)


def generate_session_recommendation(program_start_date: DateLike,
                                    today: DateLike,
                                    wellness: Optional[WellnessSnapshot] = None,
                                    safety: Optional[SafetyAssessment] = None,
                                    completed_this_week: int = 0,
                                    completed_total: int = 0,
                                    copy_generator: Optional[CopyGenerator] = None,
                                    clock: Optional[WeekClock] = None,
                                    recent_sessions: Sequence[SessionRecord] = ()) -> SessionRecommendation:
    """
    Build today's session recommendation.

    Wellness adjustments are applied first, then any forced safety
    modifications. Neither ever raises duration or intensity.

    Args:
        program_start_date: First day of week 1
        today: Date to plan for
        wellness: Today's check-in, if any
        safety: Result of evaluate_safety, if any
        completed_this_week: Completed sessions this program week
        completed_total: Completed sessions since the program started
        copy_generator: Optional producer of a motivational message and
            form cues for the first exercise of each session
        clock: Week clock; defaults to one built from configuration
        recent_sessions: Recently logged sessions; completed ones flag a
            micro-deload

    Returns:
        SessionRecommendation

    Raises:
        InvalidWeekError: today is before the program start
        InvalidRangeError: wellness values out of scale
    """
    status = resolve_week(program_start_date, today, completed_this_week, completed_total, clock)
    alerts = list(safety.alerts) if safety else []
    modifications = safety.modifications if safety else None

    if status.is_complete:
        logger.info(f"Program complete (week {status.week}), no sessions scheduled")
        return SessionRecommendation(status=status, phase=None, nominal_sessions=[], sessions=[],
                                     modifications=modifications, alerts=alerts)

    phase = phase_for_week(status.week)

    if status.is_rest_day:
        nominal: List[SessionTemplate] = []
    else:
        nominal = _schedule.sessions_for_day(status.week, status.day)

    sessions = list(nominal)
    if wellness is not None:
        wellness.validate()
        sessions = [_wellness.adapt(session, wellness) for session in sessions]
    if modifications is not None and modifications.should_modify:
        sessions = [_monitor.apply_modifications(session, modifications) for session in sessions]

    micro_deload = _micro_deload(status.week, recent_sessions)

    message = None
    form_cues: Dict[str, List[str]] = {}
    if copy_generator is not None:
        message = _motivational_message(copy_generator, status, phase, sessions, safety)
        form_cues = _form_cues(copy_generator, sessions)

    return SessionRecommendation(
        status=status,
        phase=phase,
        nominal_sessions=nominal,
        sessions=sessions,
        modifications=modifications,
        alerts=alerts,
        message=message,
        micro_deload=micro_deload,
        form_cues=form_cues,
    )


def _motivational_message(copy_generator: CopyGenerator,
                          status: WeekStatus,
                          phase: ProgramPhase,
                          sessions: List[SessionTemplate],
                          safety: Optional[SafetyAssessment]) -> Optional[str]:
    context = {
        'week': status.week,
        'day': status.day,
        'phase': phase.phase.value,
        'focus': phase.focus,
        'sessions': [s.focus for s in sessions],
        'progress_pct': status.progress_pct,
        'missed_sessions': status.missed_sessions,
        'current_challenges': list(safety.metrics.recommendations) if safety else [],
    }
    try:
        return copy_generator.motivational_message(context)
    except Exception as e:
        # Copy is optional; the numeric recommendation stands without it
        logger.warning(f"Motivational message unavailable: {e}")
        return None


def _micro_deload(week: int, recent_sessions: Sequence[SessionRecord]) -> bool:
    completed = [s for s in recent_sessions if s.completed]
    rpes = [s.average_rpe for s in completed if s.average_rpe is not None]
    suggested = _progression.should_take_micro_deload(rpes, len(completed), week)
    if suggested:
        logger.info(f"Micro-deload suggested in week {week} ({len(rpes)} rated sessions)")
    return suggested


def _form_cues(copy_generator: CopyGenerator, sessions: List[SessionTemplate]) -> Dict[str, List[str]]:
    cues: Dict[str, List[str]] = {}
    for session in sessions:
        if not session.exercises or session.exercises[0] in cues:
            continue
        exercise_id = session.exercises[0]
        try:
            cues[exercise_id] = list(copy_generator.form_cues(exercise_id, ()))
        except Exception as e:
            logger.warning(f"Form cues unavailable for {exercise_id}: {e}")
    return cues


def next_exercise_weight(current_weight: float,
                         last_rpe: float,
                         week: int,
                         rule: ExerciseProgressionRule) -> float:
    """Next recommended working weight for one exercise."""
    return _progression.next_weight(current_weight, last_rpe, week, rule)


def evaluate_safety(recent_checkins: Sequence[CheckIn],
                    recent_sessions: Sequence[SessionRecord],
                    recent_set_logs: Sequence[SetLog],
                    trainee_age: int,
                    as_of: Optional[date] = None) -> SafetyAssessment:
    """Score recent history and derive alerts and forced modifications."""
    metrics = _monitor.evaluate(recent_checkins, recent_sessions, recent_set_logs, trainee_age, as_of)
    alerts = _monitor.alerts_for(metrics)
    modifications = _monitor.modifications_for(metrics)

    if modifications.should_modify:
        logger.info(f"Safety forcing session modifications (risk: {metrics.injury_risk.value})")

    return SafetyAssessment(metrics=metrics, alerts=alerts, modifications=modifications)

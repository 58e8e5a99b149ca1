"""Fixed 11-week periodization curve."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

from ..config import PROGRAM_TOTAL_WEEKS
from ..errors import InvalidWeekError


class PhaseName(Enum):
    """Training phases of the program."""

    FOUNDATION = "foundation"  # Movement competency
    STRENGTH = "strength"      # Progressive loading
    POWER = "power"            # High intensity, lower volume
    PEAK = "peak"              # Testing week
    DELOAD = "deload"          # Planned recovery


@dataclass(frozen=True)
class ProgramPhase:
    """Phase descriptor for one program week."""

    week: int
    phase: PhaseName
    intensity: int  # 1-10 scale
    volume: int     # 1-10 scale
    focus: str
    notes: str

    @property
    def is_deload(self) -> bool:
        return self.phase == PhaseName.DELOAD

    def to_dict(self) -> dict:
        return {
            'week': self.week,
            'phase': self.phase.value,
            'intensity': self.intensity,
            'volume': self.volume,
            'focus': self.focus,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class PhaseBlock:
    """Inclusive week range sharing one phase prescription."""

    first_week: int
    last_week: int
    phase: PhaseName
    intensity: int
    volume: int
    focus: str
    notes: str

    def contains(self, week: int) -> bool:
        return self.first_week <= week <= self.last_week


PHASE_TABLE: Tuple[PhaseBlock, ...] = (
    PhaseBlock(1, 2, PhaseName.FOUNDATION, 4, 6,
               "Movement patterns and technique",
               "Focus on learning proper form and building movement competency"),
    PhaseBlock(3, 4, PhaseName.STRENGTH, 6, 7,
               "Building strength base",
               "Increase load while maintaining good form"),
    PhaseBlock(5, 5, PhaseName.DELOAD, 3, 4,
               "Recovery and technique refinement",
               "Reduced intensity to allow for recovery and prevent overtraining"),
    PhaseBlock(6, 7, PhaseName.STRENGTH, 7, 8,
               "Progressive strength development",
               "Continue building strength with increased intensity"),
    PhaseBlock(8, 8, PhaseName.DELOAD, 3, 4,
               "Recovery and preparation for power phase",
               "Second deload week to prepare for power development"),
    PhaseBlock(9, 10, PhaseName.POWER, 8, 6,
               "Power development and sport-specific training",
               "High intensity, lower volume power training"),
    PhaseBlock(11, 11, PhaseName.PEAK, 9, 5,
               "Peak performance and testing",
               "Highest intensity week with performance testing"),
)


def validate_week(week) -> int:
    """Return week if it is an integer program week, else raise InvalidWeekError."""
    if isinstance(week, bool) or not isinstance(week, int):
        raise InvalidWeekError(week, f"Week must be an integer, got {week!r}")
    if not 1 <= week <= PROGRAM_TOTAL_WEEKS:
        raise InvalidWeekError(week)
    return week


def phase_for_week(week: int) -> ProgramPhase:
    """Get the program phase for a specific week.

    Args:
        week: Program week, 1-11

    Returns:
        ProgramPhase for that week

    Raises:
        InvalidWeekError: if week is outside [1, 11]
    """
    validate_week(week)

    for block in PHASE_TABLE:
        if block.contains(week):
            return ProgramPhase(
                week=week,
                phase=block.phase,
                intensity=block.intensity,
                volume=block.volume,
                focus=block.focus,
                notes=block.notes,
            )

    # Table covers every valid week
    raise InvalidWeekError(week)


def is_deload_week(week: int) -> bool:
    return phase_for_week(week).is_deload


def iter_phases() -> Iterator[ProgramPhase]:
    """Yield the phase of every program week in order."""
    for week in range(1, PROGRAM_TOTAL_WEEKS + 1):
        yield phase_for_week(week)

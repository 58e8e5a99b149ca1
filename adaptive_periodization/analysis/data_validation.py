"""Input validation for wellness, effort and load values.

Every caller-supplied score has exactly one scale. Values outside the scale
are rejected with InvalidRangeError; nothing here clamps or guesses a value.
"""

import logging
import math
from typing import Iterable, Optional, Tuple

from ..errors import InvalidRangeError

logger = logging.getLogger(__name__)


class DataValidator:
    """Range checks for engine inputs."""

    # (min, max) per field; None for an open upper bound
    SCALES = {
        # Wellness check-in
        'mood': (1, 5),
        'energy_level': (1, 10),
        'muscle_soreness': (1, 5),
        'sleep_hours': (0, 24),

        # Effort and load
        'rpe': (1, 10),
        'weight': (0, None),
        'percentage': (0, None),

        # Derived program scores
        'intensity': (1, 10),
        'volume': (1, 10),
        'fatigue_level': (1, 10),
        'form_quality': (1, 10),

        # Trainee
        'age': (5, 100),
    }

    @classmethod
    def bounds(cls, scale: str) -> Tuple[float, Optional[float]]:
        """Return (min, max) for a named scale."""
        return cls.SCALES[scale]

    @classmethod
    def check(cls, field: str, value, scale: Optional[str] = None) -> float:
        """Validate a single value against its scale and return it unchanged.

        Args:
            field: Name reported in the error (e.g. "wellness.mood")
            value: Value to validate
            scale: Scale name from SCALES; defaults to the field name

        Raises:
            InvalidRangeError: if the value is missing, non-numeric, NaN/inf
                or outside the scale
        """
        scale = scale or field
        low, high = cls.SCALES[scale]

        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidRangeError(field, value, (low, high))
        if math.isnan(value) or math.isinf(value):
            raise InvalidRangeError(field, value, (low, high))
        if value < low or (high is not None and value > high):
            raise InvalidRangeError(field, value, (low, high))

        return value

    @classmethod
    def check_all(cls, field: str, values: Iterable, scale: Optional[str] = None) -> None:
        """Validate every value of a series."""
        for i, value in enumerate(values):
            cls.check(f"{field}[{i}]", value, scale or field)


def validate_rpe(value, field: str = "rpe") -> float:
    return DataValidator.check(field, value, "rpe")


def validate_weight(value, field: str = "weight") -> float:
    return DataValidator.check(field, value, "weight")


def validate_percentage(value, field: str = "percentage") -> float:
    return DataValidator.check(field, value, "percentage")

"""Exceptions raised by the periodization and safety engine."""

from typing import Optional, Tuple


class PeriodizationError(Exception):
    """Base class for engine errors."""
    pass


class InvalidWeekError(PeriodizationError, ValueError):
    """Week number outside the program, or a date before the program starts."""

    def __init__(self, week, message: Optional[str] = None):
        self.week = week
        super().__init__(message or f"Invalid week number: {week}. Program is 11 weeks long.")


class InvalidRangeError(PeriodizationError, ValueError):
    """A caller-supplied score lies outside its defined scale."""

    def __init__(self, field: str, value, bounds: Tuple[float, Optional[float]]):
        self.field = field
        self.value = value
        self.bounds = bounds
        low, high = bounds
        if high is None:
            expected = f">= {low}"
        else:
            expected = f"in [{low}, {high}]"
        super().__init__(f"{field}={value!r} is out of range (expected {expected})")


class InsufficientHistoryError(PeriodizationError):
    """A computation needing at least two data points received fewer."""

    def __init__(self, what: str, available: int, required: int = 2):
        self.what = what
        self.available = available
        self.required = required
        super().__init__(f"{what}: {available} data point(s) available, {required} required")


class CoachUnavailableError(PeriodizationError):
    """Text-generation backend could not be reached or configured."""
    pass

"""Adaptive periodization and training safety engine."""

__version__ = "0.1.0"

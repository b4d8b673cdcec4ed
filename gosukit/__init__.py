"""Timing, judgment, scoring and chart logic for a drum rhythm game mode."""

__version__ = "0.1.0"
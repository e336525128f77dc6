"""Lesson booking API for the music lesson marketplace."""

__version__ = "1.0.0"

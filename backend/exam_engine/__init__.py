"""Timed multi-section exam session engine."""

__version__ = "0.1.0"

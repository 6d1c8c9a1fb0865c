"""Shared helpers."""

from .time_utils import format_time

__all__ = ["format_time"]

"""Exam session engine services."""

from .clock import AsyncioClock, Clock, SimulatedClock
from .content_provider import CatalogContentProvider, ContentProvider
from .countdown import CountdownTimer
from .exam_runner import ExamRunner
from .ledger import AnswerLedger, transition
from .scoring import score
from .session_controller import SessionController
from .session_store import InMemorySessionStore, SessionStore, SqlSessionStore

__all__ = [
    "AsyncioClock",
    "Clock",
    "SimulatedClock",
    "CatalogContentProvider",
    "ContentProvider",
    "CountdownTimer",
    "ExamRunner",
    "AnswerLedger",
    "transition",
    "score",
    "SessionController",
    "InMemorySessionStore",
    "SessionStore",
    "SqlSessionStore",
]

"""Database layer for the exam session engine."""

from .database import init_db, async_session
from .models import Base, ExamSessionDB

__all__ = [
    "init_db",
    "async_session",
    "Base",
    "ExamSessionDB",
]

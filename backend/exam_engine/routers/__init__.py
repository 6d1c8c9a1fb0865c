"""API routers for the exam session engine."""

from .exams import router as exams_router
from .sessions import router as sessions_router

__all__ = [
    "exams_router",
    "sessions_router",
]

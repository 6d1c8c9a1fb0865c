"""Pydantic models for the exam session engine."""

from .exam import (
    Difficulty,
    ExamConfig,
    ExamSummary,
    MarkingScheme,
    PassingCriteria,
    Question,
    Section,
)
from .session import AnswerRecord, AnswerStatus, ExamSession
from .result import (
    DifficultyAnalysis,
    DifficultyBucket,
    Efficiency,
    ExamResult,
    PerformanceAnalysis,
    SectionalResult,
    TimeAnalysis,
    TopicAnalysis,
)

__all__ = [
    "Difficulty",
    "ExamConfig",
    "ExamSummary",
    "MarkingScheme",
    "PassingCriteria",
    "Question",
    "Section",
    "AnswerRecord",
    "AnswerStatus",
    "ExamSession",
    "DifficultyAnalysis",
    "DifficultyBucket",
    "Efficiency",
    "ExamResult",
    "PerformanceAnalysis",
    "SectionalResult",
    "TimeAnalysis",
    "TopicAnalysis",
]

"""Result and performance analysis models."""

from enum import Enum

from pydantic import BaseModel, Field


class Efficiency(str, Enum):
    # Only GOOD and NEEDS_IMPROVEMENT are produced by the scorer.
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_IMPROVEMENT = "needs-improvement"


class SectionalResult(BaseModel):
    """Score breakdown for one section."""
    section_id: str
    section_name: str
    score: float
    max_score: float
    attempted: int
    correct: int
    incorrect: int
    unattempted: int
    accuracy: float  # percent of attempted
    time_taken: int  # seconds spent on the section's questions
    cutoff_met: bool


class TopicAnalysis(BaseModel):
    topic: str
    attempted: int
    correct: int
    accuracy: float
    average_time: float
    recommendation: str


class DifficultyBucket(BaseModel):
    attempted: int = 0
    correct: int = 0
    accuracy: float = 0.0


class DifficultyAnalysis(BaseModel):
    easy: DifficultyBucket = Field(default_factory=DifficultyBucket)
    medium: DifficultyBucket = Field(default_factory=DifficultyBucket)
    hard: DifficultyBucket = Field(default_factory=DifficultyBucket)


class TimeAnalysis(BaseModel):
    total_time: int
    average_time_per_question: float
    fastest_question: int
    slowest_question: int
    time_distribution: list[int]
    efficiency: Efficiency


class PerformanceAnalysis(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    topic_wise_analysis: list[TopicAnalysis] = Field(default_factory=list)
    difficulty_analysis: DifficultyAnalysis = Field(default_factory=DifficultyAnalysis)
    time_management: TimeAnalysis


class ExamResult(BaseModel):
    """Scored outcome of a submitted session."""

    session_id: str
    exam_id: str
    total_score: float
    max_score: float
    percentage: float
    accuracy: float
    total_attempted: int
    total_correct: int
    total_incorrect: int
    total_unattempted: int
    time_taken: int
    sectional_results: list[SectionalResult]
    analysis: PerformanceAnalysis

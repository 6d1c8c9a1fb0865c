"""Exam session and per-question answer state models."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class AnswerStatus(str, Enum):
    """Palette status of a single question."""

    NOT_VISITED = "not-visited"
    NOT_ANSWERED = "not-answered"
    ANSWERED = "answered"
    MARKED = "marked"
    MARKED_ANSWERED = "marked-answered"

    @property
    def is_marked(self) -> bool:
        return self in (AnswerStatus.MARKED, AnswerStatus.MARKED_ANSWERED)


class AnswerRecord(BaseModel):
    """Answer state for one question, index-aligned with the flattened question list."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    selected_answer: str | None = None
    status: AnswerStatus = AnswerStatus.NOT_VISITED
    time_spent: int = Field(default=0, ge=0)  # seconds
    visit_count: int = Field(default=0, ge=0)
    last_visited: datetime | None = None


class ExamSession(BaseModel):
    """Snapshot of one exam attempt.

    The controller replaces the whole snapshot on every command, so a
    reference held by a caller never changes underneath it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    exam_id: str
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: datetime | None = None
    current_question_index: int = 0
    current_section_index: int = 0
    answers: tuple[AnswerRecord, ...]
    time_remaining: int
    section_time_remaining: int | None = None
    is_submitted: bool = False
    is_paused: bool = False

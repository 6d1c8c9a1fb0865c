"""Exam content models: questions, sections and exam configuration.

These are produced once by a content provider and never mutated afterwards.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(BaseModel):
    """A single multiple-choice question."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    options: tuple[str, ...]
    correct_answer: str = Field(description="The option value that scores as correct")
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    topic: str = "General"
    time_to_solve: int = Field(default=90, ge=0, description="Expected solve time in seconds")
    previous_year_frequency: int = Field(default=0, ge=0)


class Section(BaseModel):
    """A timed block of questions within an exam."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    questions: tuple[Question, ...]
    duration: int = Field(description="Allotted time in seconds")
    cutoff_marks: float | None = None
    max_questions: int | None = None
    is_optional: bool = False


class MarkingScheme(BaseModel):
    """Per-question score deltas."""

    model_config = ConfigDict(frozen=True)

    correct: float = 1.0
    incorrect: float = 0.0
    unattempted: float = 0.0


class PassingCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: float | None = None
    sectional: dict[str, float] = Field(default_factory=dict)  # section_id -> score


class ExamConfig(BaseModel):
    """Complete configuration of one exam."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    sections: tuple[Section, ...]
    total_duration: int = Field(description="Overall time limit in seconds")
    marking: MarkingScheme = Field(default_factory=MarkingScheme)
    is_sectional_timed: bool = False
    allow_section_switch: bool = True
    show_calculator: bool = False
    instructions: tuple[str, ...] = ()
    passing_criteria: PassingCriteria | None = None

    @property
    def questions(self) -> list[Question]:
        """All questions flattened in section order."""
        return [q for section in self.sections for q in section.questions]

    @property
    def total_questions(self) -> int:
        return sum(len(s.questions) for s in self.sections)

    def section_offset(self, section_index: int) -> int:
        """Global index of the first question in a section."""
        return sum(len(s.questions) for s in self.sections[:section_index])

    def section_index_of(self, global_index: int) -> int:
        """Index of the section holding the question at a global index."""
        offset = 0
        for i, section in enumerate(self.sections):
            offset += len(section.questions)
            if global_index < offset:
                return i
        raise IndexError(global_index)


class ExamSummary(BaseModel):
    """Short description of an exam for listings."""

    id: str
    title: str
    description: str
    total_duration: int
    total_questions: int
    section_names: list[str]
    is_sectional_timed: bool
    allow_section_switch: bool

    @classmethod
    def from_config(cls, config: ExamConfig) -> "ExamSummary":
        return cls(
            id=config.id,
            title=config.title,
            description=config.description,
            total_duration=config.total_duration,
            total_questions=config.total_questions,
            section_names=[s.name for s in config.sections],
            is_sectional_timed=config.is_sectional_timed,
            allow_section_switch=config.allow_section_switch,
        )

"""Content provider: resolves exam ids to full exam configurations."""

import json
import logging
import math
import random
import re
from abc import ABC, abstractmethod
from pathlib import Path

from exam_engine.errors import ExamNotFound, InvalidConfigError
from exam_engine.models.catalog import (
    DEFAULT_TOPIC,
    EXAM_BLUEPRINTS,
    QUESTION_TEMPLATES,
    SOLVE_TIMES,
    ExamBlueprint,
)
from exam_engine.models.exam import ExamConfig, ExamSummary, Question, Section

logger = logging.getLogger(__name__)


class ContentProvider(ABC):
    """Source of exam configurations."""

    @abstractmethod
    async def get_exam_config(self, exam_id: str) -> ExamConfig:
        """Return the configuration for ``exam_id`` or raise ExamNotFound."""

    @abstractmethod
    async def list_exams(self) -> list[ExamSummary]:
        ...


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def generate_question(topic: str, index: int, rng: random.Random, prefix: str = "") -> Question:
    """Build a question for ``topic`` from its template pool."""
    templates = QUESTION_TEMPLATES.get(topic) or QUESTION_TEMPLATES[DEFAULT_TOPIC]
    template = templates[index % len(templates)]

    return Question(
        id=f"{prefix}q_{_slug(topic)}_{index}",
        text=template.text,
        options=tuple(template.options),
        correct_answer=template.options[template.correct_index],
        explanation=template.explanation,
        difficulty=template.difficulty,
        topic=topic,
        time_to_solve=SOLVE_TIMES[template.difficulty],
        previous_year_frequency=rng.randint(1, 10),
    )


def generate_exam(blueprint: ExamBlueprint) -> ExamConfig:
    """Expand a blueprint into a full exam. Deterministic for a given exam id."""
    rng = random.Random(blueprint.id)
    sections = []

    for section_index, section in enumerate(blueprint.sections):
        prefix = f"s{section_index}_"
        questions: list[Question] = []
        per_topic = math.ceil(section.question_count / len(section.topics))

        for topic_index, topic in enumerate(section.topics):
            count = min(per_topic, section.question_count - len(questions))
            for i in range(count):
                questions.append(generate_question(topic, topic_index * 100 + i, rng, prefix))

        # Top up with random topics if the split left the section short
        while len(questions) < section.question_count:
            topic = rng.choice(section.topics)
            questions.append(generate_question(topic, 1000 + len(questions), rng, prefix))

        sections.append(Section(
            id=f"section_{section_index}",
            name=section.name,
            questions=tuple(questions[:section.question_count]),
            duration=section.duration,
            cutoff_marks=section.cutoff_marks,
        ))

    return ExamConfig(
        id=blueprint.id,
        title=blueprint.title,
        description=blueprint.description,
        sections=tuple(sections),
        total_duration=blueprint.total_duration,
        marking=blueprint.marking,
        is_sectional_timed=blueprint.is_sectional_timed,
        allow_section_switch=blueprint.allow_section_switch,
        show_calculator=blueprint.show_calculator,
        instructions=tuple(blueprint.instructions),
    )


class CatalogContentProvider(ContentProvider):
    """Serves the built-in blueprints plus any exam JSON files in ``exams_dir``.

    Configurations are cached per exam id, so repeated lookups during one
    attempt always return the same questions.
    """

    def __init__(
        self,
        exams_dir: Path | None = None,
        blueprints: dict[str, ExamBlueprint] | None = None,
    ):
        self.exams_dir = exams_dir
        self.blueprints = EXAM_BLUEPRINTS if blueprints is None else blueprints
        self._cache: dict[str, ExamConfig] = {}
        self._files: dict[str, Path] | None = None

    def _exam_files(self) -> dict[str, Path]:
        if self._files is None:
            self._files = {}
            if self.exams_dir and self.exams_dir.exists():
                for json_file in sorted(self.exams_dir.glob("*.json")):
                    self._files[json_file.stem] = json_file
                logger.info(f"Found {len(self._files)} exam files in {self.exams_dir}")
        return self._files

    def _load_file(self, path: Path) -> ExamConfig:
        try:
            with open(path) as f:
                data = json.load(f)
            return ExamConfig.model_validate(data)
        except ValueError as e:  # JSONDecodeError and ValidationError
            raise InvalidConfigError(f"Invalid exam file {path.name}: {e}") from e

    async def get_exam_config(self, exam_id: str) -> ExamConfig:
        if exam_id in self._cache:
            return self._cache[exam_id]

        if exam_id in self.blueprints:
            config = generate_exam(self.blueprints[exam_id])
        elif exam_id in self._exam_files():
            config = self._load_file(self._exam_files()[exam_id])
        else:
            raise ExamNotFound(exam_id)

        logger.info(f"Loaded exam {exam_id} ({config.total_questions} questions)")
        self._cache[exam_id] = config
        return config

    async def list_exams(self) -> list[ExamSummary]:
        exam_ids = list(self.blueprints) + [e for e in self._exam_files() if e not in self.blueprints]
        return [ExamSummary.from_config(await self.get_exam_config(e)) for e in exam_ids]

"""Answer ledger and the answer-status state machine.

``transition`` is a pure function over a single record. ``AnswerLedger`` is an
immutable, index-aligned collection of records built on top of it: every
operation returns a new ledger and leaves the original untouched.
"""

from dataclasses import dataclass
from datetime import datetime

from exam_engine.errors import IndexOutOfRange, UnknownQuestion
from exam_engine.models.exam import ExamConfig
from exam_engine.models.session import AnswerRecord, AnswerStatus


@dataclass(frozen=True)
class Visit:
    """The candidate opened the question."""
    at: datetime


@dataclass(frozen=True)
class Select:
    """Set (or clear, with ``value=None``) the selected option."""
    value: str | None


@dataclass(frozen=True)
class SetMark:
    """Turn the review mark on or off."""
    marked: bool


@dataclass(frozen=True)
class CreditTime:
    seconds: int


AnswerEvent = Visit | Select | SetMark | CreditTime


def transition(record: AnswerRecord, event: AnswerEvent) -> AnswerRecord:
    """Apply one event to a record and return the new record."""
    status = record.status

    if isinstance(event, Visit):
        if status == AnswerStatus.NOT_VISITED:
            status = AnswerStatus.NOT_ANSWERED
        return record.model_copy(update={
            "status": status,
            "visit_count": record.visit_count + 1,
            "last_visited": event.at,
        })

    if isinstance(event, Select):
        if event.value is not None:
            status = AnswerStatus.MARKED_ANSWERED if status.is_marked else AnswerStatus.ANSWERED
        else:
            status = AnswerStatus.MARKED if status.is_marked else AnswerStatus.NOT_ANSWERED
        return record.model_copy(update={"selected_answer": event.value, "status": status})

    if isinstance(event, SetMark):
        answered = record.selected_answer is not None
        if event.marked:
            status = AnswerStatus.MARKED_ANSWERED if answered else AnswerStatus.MARKED
        else:
            status = AnswerStatus.ANSWERED if answered else AnswerStatus.NOT_ANSWERED
        return record.model_copy(update={"status": status})

    if isinstance(event, CreditTime):
        if event.seconds < 0:
            raise ValueError("Cannot credit negative time")
        return record.model_copy(update={"time_spent": record.time_spent + event.seconds})

    raise TypeError(f"Unsupported answer event: {event!r}")


class AnswerLedger:
    """Ordered answer records for one session, one per question."""

    def __init__(self, records: tuple[AnswerRecord, ...] | list[AnswerRecord]):
        self._records = tuple(records)
        self._index = {r.question_id: i for i, r in enumerate(self._records)}

    @classmethod
    def for_exam(cls, config: ExamConfig) -> "AnswerLedger":
        """Fresh ledger with a not-visited record for every question in flattened order."""
        return cls([AnswerRecord(question_id=q.id) for q in config.questions])

    @property
    def records(self) -> tuple[AnswerRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> AnswerRecord:
        return self._records[index]

    def index_of(self, question_id: str) -> int:
        try:
            return self._index[question_id]
        except KeyError:
            raise UnknownQuestion(question_id) from None

    def get(self, question_id: str) -> AnswerRecord:
        return self._records[self.index_of(question_id)]

    def apply(self, index: int, event: AnswerEvent) -> "AnswerLedger":
        """Return a new ledger with ``event`` applied to the record at ``index``."""
        if not 0 <= index < len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        updated = transition(self._records[index], event)
        records = self._records[:index] + (updated,) + self._records[index + 1:]
        return AnswerLedger(records)

    def visit(self, index: int, at: datetime) -> "AnswerLedger":
        return self.apply(index, Visit(at))

    def select(self, question_id: str, value: str | None) -> "AnswerLedger":
        return self.apply(self.index_of(question_id), Select(value))

    def toggle_mark(self, question_id: str) -> "AnswerLedger":
        index = self.index_of(question_id)
        return self.apply(index, SetMark(not self._records[index].status.is_marked))

    def credit_time(self, index: int, seconds: int = 1) -> "AnswerLedger":
        return self.apply(index, CreditTime(seconds))

    def count(self, status: AnswerStatus) -> int:
        return sum(1 for r in self._records if r.status == status)

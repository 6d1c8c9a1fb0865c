"""Session controller: owns one exam attempt and keeps its timers and answers consistent."""

import logging
from datetime import datetime
from typing import Any, Callable

from exam_engine.errors import (
    IndexOutOfRange,
    InvalidConfigError,
    NoActiveSession,
    SectionSwitchDenied,
    SessionClosed,
)
from exam_engine.models.exam import ExamConfig, Question, Section
from exam_engine.models.result import ExamResult
from exam_engine.models.session import AnswerRecord, ExamSession
from exam_engine.utils.time_utils import format_time

from .clock import Clock
from .countdown import CountdownTimer
from .ledger import AnswerLedger
from .scoring import score

logger = logging.getLogger(__name__)

EVENTS = ("overall_tick", "section_tick", "overall_complete", "section_complete", "submitted")


def validate_config(config: ExamConfig) -> None:
    """Raise InvalidConfigError if an exam cannot be run."""
    if not config.sections:
        raise InvalidConfigError(f"Exam {config.id} has no sections")
    if config.total_duration <= 0:
        raise InvalidConfigError(f"Exam {config.id} has no total duration")

    seen: set[str] = set()
    for section in config.sections:
        if not section.questions:
            raise InvalidConfigError(f"Section {section.id} has no questions")
        if config.is_sectional_timed and section.duration <= 0:
            raise InvalidConfigError(f"Section {section.id} has no duration")
        for question in section.questions:
            if question.id in seen:
                raise InvalidConfigError(f"Duplicate question id {question.id}")
            seen.add(question.id)


class SessionController:
    """Runs a single exam session.

    Commands validate everything before swapping in a new session snapshot,
    so a rejected command leaves the previous state untouched. Timer callbacks
    carry the id of the session they were armed for and are ignored once that
    session is no longer current.
    """

    def __init__(self, clock: Clock, now: Callable[[], datetime] = datetime.utcnow):
        self._clock = clock
        self._now = now
        self._config: ExamConfig | None = None
        self._session: ExamSession | None = None
        self._ledger: AnswerLedger | None = None
        self._result: ExamResult | None = None
        self._overall: CountdownTimer | None = None
        self._sectional: CountdownTimer | None = None
        self._listeners: dict[str, list[Callable[[Any], None]]] = {e: [] for e in EVENTS}

    # --- Read accessors ---

    @property
    def config(self) -> ExamConfig | None:
        return self._config

    @property
    def session(self) -> ExamSession | None:
        return self._session

    @property
    def answers(self) -> tuple[AnswerRecord, ...]:
        return self._ledger.records if self._ledger else ()

    @property
    def result(self) -> ExamResult | None:
        return self._result

    @property
    def current_question(self) -> Question | None:
        if self._session is None:
            return None
        return self._config.questions[self._session.current_question_index]

    @property
    def current_section(self) -> Section | None:
        if self._session is None:
            return None
        return self._config.sections[self._session.current_section_index]

    @property
    def overall_timer(self) -> CountdownTimer | None:
        return self._overall

    @property
    def section_timer(self) -> CountdownTimer | None:
        return self._sectional

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Listen for timer and lifecycle events. Returns an unsubscribe callable."""
        if event not in self._listeners:
            raise ValueError(f"Unknown event {event!r}, expected one of {EVENTS}")
        self._listeners[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._listeners[event]:
                self._listeners[event].remove(handler)

        return unsubscribe

    # --- Lifecycle ---

    def start_exam(self, config: ExamConfig) -> ExamSession:
        """Create a fresh session for ``config`` and start its countdowns."""
        validate_config(config)
        if self._session is not None:
            self.reset()

        ledger = AnswerLedger.for_exam(config)
        session = ExamSession(
            exam_id=config.id,
            start_time=self._now(),
            answers=ledger.records,
            time_remaining=config.total_duration,
            section_time_remaining=config.sections[0].duration if config.is_sectional_timed else None,
        )
        self._config, self._ledger, self._session, self._result = config, ledger, session, None
        logger.info(
            f"Started session {session.id} for exam {config.id} "
            f"({len(ledger)} questions, {format_time(config.total_duration)})"
        )
        self._arm_timers(session)
        return self._session

    def restore(self, config: ExamConfig, session: ExamSession) -> ExamSession:
        """Adopt a previously persisted session and re-arm its countdowns."""
        validate_config(config)
        if session.exam_id != config.id:
            raise InvalidConfigError(f"Session {session.id} belongs to exam {session.exam_id}")
        expected_ids = [q.id for q in config.questions]
        if [a.question_id for a in session.answers] != expected_ids:
            raise InvalidConfigError(f"Session {session.id} answers do not match exam {config.id}")
        if self._session is not None:
            self.reset()

        self._config, self._ledger, self._session = config, AnswerLedger(session.answers), session
        self._result = None
        logger.info(f"Restored session {session.id} ({format_time(session.time_remaining)} remaining)")
        if session.is_submitted:
            self._result = score(config, session)
        else:
            self._arm_timers(session)
        return self._session

    def reset(self) -> None:
        """Discard the session, its answers and result, and stop both countdowns."""
        if self._session is not None:
            logger.info(f"Reset session {self._session.id}")
        self._disarm_timers()
        self._config = self._session = self._ledger = self._result = None

    def submit(self) -> ExamResult:
        """Close the session and score it. Repeated calls return the first result."""
        if self._session is None:
            raise NoActiveSession("No exam in progress")
        if self._session.is_submitted:
            return self._result

        submitted = self._session.model_copy(update={"is_submitted": True, "end_time": self._now()})
        result = score(self._config, submitted)
        self._disarm_timers()
        self._session, self._result = submitted, result
        logger.info(
            f"Submitted session {submitted.id}: {result.total_score}/{result.max_score} "
            f"in {format_time(result.time_taken)}"
        )
        self._emit("submitted", result)
        return result

    def pause(self) -> ExamSession:
        self._require_open()
        if self._session.is_paused:
            return self._session
        for timer in self._timers():
            timer.pause()
        self._commit(is_paused=True)
        return self._session

    def resume(self) -> ExamSession:
        self._require_open()
        if not self._session.is_paused:
            return self._session
        for timer in self._timers():
            timer.resume()
        self._commit(is_paused=False)
        return self._session

    # --- Navigation and answers ---

    def navigate_to(self, index: int) -> ExamSession:
        """Open the question at a global index.

        Moving into another section goes through the same policy check and
        sectional timer reset as ``switch_section``.
        """
        self._require_open()
        total = len(self._ledger)
        if not 0 <= index < total:
            raise IndexOutOfRange(index, total)

        target_section = self._config.section_index_of(index)
        changes = self._section_change(target_section)
        ledger = self._ledger.visit(index, self._now())
        self._commit(ledger, current_question_index=index, **changes)
        if changes:
            self._restart_section_timer(target_section)
        return self._session

    def switch_section(self, section_index: int) -> ExamSession:
        """Jump to the first question of a section."""
        self._require_open()
        count = len(self._config.sections)
        if not 0 <= section_index < count:
            raise IndexOutOfRange(section_index, count, kind="section")

        changes = self._section_change(section_index)
        self._commit(current_question_index=self._config.section_offset(section_index), **changes)
        if changes:
            logger.info(f"Session {self._session.id} moved to section {section_index}")
            self._restart_section_timer(section_index)
        return self._session

    def set_answer(self, question_id: str, value: str | None) -> ExamSession:
        """Select an option for a question, or clear it with ``None``."""
        self._require_open()
        self._commit(self._ledger.select(question_id, value))
        return self._session

    def toggle_mark(self, question_id: str) -> ExamSession:
        self._require_open()
        self._commit(self._ledger.toggle_mark(question_id))
        return self._session

    # --- Timer callbacks ---

    def tick_overall(self, remaining: int) -> None:
        """Record the overall remaining time. Submits when it reaches zero."""
        if self._session is None:
            raise NoActiveSession("No exam in progress")
        if self._session.is_submitted:
            return
        self._record_overall(remaining)
        if remaining <= 0:
            self.submit()

    def tick_section(self, remaining: int) -> None:
        if self._session is None:
            raise NoActiveSession("No exam in progress")
        if self._session.is_submitted:
            return
        self._commit(section_time_remaining=max(0, remaining))
        self._emit("section_tick", remaining)

    # --- Internals ---

    def _require_open(self) -> None:
        if self._session is None:
            raise NoActiveSession("No exam in progress")
        if self._session.is_submitted:
            raise SessionClosed(f"Session {self._session.id} has been submitted")

    def _commit(self, ledger: AnswerLedger | None = None, **changes: Any) -> None:
        if ledger is not None:
            self._ledger = ledger
            changes["answers"] = ledger.records
        self._session = self._session.model_copy(update=changes)

    def _section_change(self, target: int) -> dict[str, Any]:
        """Session changes for entering ``target``; empty if already there."""
        current = self._session.current_section_index
        if target == current:
            return {}
        if not self._config.allow_section_switch:
            raise SectionSwitchDenied(current, target)
        changes: dict[str, Any] = {"current_section_index": target}
        if self._config.is_sectional_timed:
            changes["section_time_remaining"] = self._config.sections[target].duration
        return changes

    def _record_overall(self, remaining: int) -> None:
        session = self._session
        index = session.current_question_index
        ledger = None
        if self._ledger[index].visit_count > 0:
            ledger = self._ledger.credit_time(index)
        self._commit(ledger, time_remaining=max(0, remaining))
        self._emit("overall_tick", remaining)

    def _timers(self) -> list[CountdownTimer]:
        return [t for t in (self._overall, self._sectional) if t is not None]

    def _arm_timers(self, session: ExamSession) -> None:
        self._disarm_timers()
        session_id = session.id

        self._overall = CountdownTimer(self._clock, name=f"overall:{session_id}")
        self._overall.subscribe(
            on_tick=lambda remaining: self._on_overall_tick(session_id, remaining),
            on_complete=lambda: self._on_overall_complete(session_id),
        )
        if self._config.is_sectional_timed:
            self._sectional = CountdownTimer(self._clock, name=f"section:{session_id}")
            self._sectional.subscribe(
                on_tick=lambda remaining: self._on_section_tick(session_id, remaining),
                on_complete=lambda: self._on_section_complete(session_id),
            )

        if self._sectional is not None:
            self._sectional.start(session.section_time_remaining or 0)
        self._overall.start(session.time_remaining)
        if session.is_paused:
            for timer in self._timers():
                timer.pause()

    def _disarm_timers(self) -> None:
        for timer in self._timers():
            timer.cancel()
        self._overall = self._sectional = None

    def _restart_section_timer(self, section_index: int) -> None:
        if self._sectional is None:
            return
        self._sectional.start(self._config.sections[section_index].duration)
        if self._session.is_paused:
            self._sectional.pause()

    def _is_current(self, session_id: str) -> bool:
        return (
            self._session is not None
            and self._session.id == session_id
            and not self._session.is_submitted
        )

    def _on_overall_tick(self, session_id: str, remaining: int) -> None:
        if self._is_current(session_id):
            self._record_overall(remaining)

    def _on_overall_complete(self, session_id: str) -> None:
        if not self._is_current(session_id):
            return
        logger.info(f"Time is up for session {session_id}")
        self._emit("overall_complete", session_id)
        self.submit()

    def _on_section_tick(self, session_id: str, remaining: int) -> None:
        if self._is_current(session_id):
            self.tick_section(remaining)

    def _on_section_complete(self, session_id: str) -> None:
        if not self._is_current(session_id):
            return
        logger.info(
            f"Section {self._session.current_section_index} time is up for session {session_id}"
        )
        self._emit("section_complete", self._session.current_section_index)

    def _emit(self, event: str, payload: Any) -> None:
        for handler in list(self._listeners[event]):
            handler(payload)

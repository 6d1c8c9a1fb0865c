"""Exam session API endpoints.

Each endpoint forwards one command to the session's controller through the
exam runner and returns the updated session view.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from exam_engine.errors import ExamEngineError
from exam_engine.models.result import ExamResult
from exam_engine.models.session import AnswerStatus, ExamSession
from exam_engine.services.exam_runner import ExamRunner
from exam_engine.utils.time_utils import format_time

from .deps import get_runner, http_error

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class StartSessionRequest(BaseModel):
    exam_id: str


class NavigateRequest(BaseModel):
    index: int


class SwitchSectionRequest(BaseModel):
    section_index: int


class AnswerRequest(BaseModel):
    question_id: str
    value: str | None = None


class MarkRequest(BaseModel):
    question_id: str


class SessionView(BaseModel):
    """Session snapshot plus display helpers for the exam screen."""

    session: ExamSession
    time_remaining_display: str
    section_time_remaining_display: str | None
    section_status_counts: dict[str, int]  # current section, by status


async def _view(runner: ExamRunner, session_id: str) -> SessionView:
    controller = await runner.controller(session_id)
    session = controller.session
    config = controller.config

    start = config.section_offset(session.current_section_index)
    end = start + len(config.sections[session.current_section_index].questions)
    counts = {s.value: 0 for s in AnswerStatus}
    for record in session.answers[start:end]:
        counts[record.status.value] += 1

    return SessionView(
        session=session,
        time_remaining_display=format_time(session.time_remaining),
        section_time_remaining_display=(
            format_time(session.section_time_remaining)
            if session.section_time_remaining is not None
            else None
        ),
        section_status_counts=counts,
    )


@router.post("", response_model=SessionView, status_code=201)
async def start_session(
    request: StartSessionRequest,
    runner: ExamRunner = Depends(get_runner),
):
    """Start a new attempt at an exam."""
    try:
        session = await runner.start(request.exam_id)
        return await _view(runner, session.id)
    except ExamEngineError as e:
        raise http_error(e)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, runner: ExamRunner = Depends(get_runner)):
    try:
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/navigate", response_model=SessionView)
async def navigate(
    session_id: str,
    request: NavigateRequest,
    runner: ExamRunner = Depends(get_runner),
):
    """Open a question by its global index."""
    try:
        await runner.navigate(session_id, request.index)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/section", response_model=SessionView)
async def switch_section(
    session_id: str,
    request: SwitchSectionRequest,
    runner: ExamRunner = Depends(get_runner),
):
    try:
        await runner.switch_section(session_id, request.section_index)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/answer", response_model=SessionView)
async def answer(
    session_id: str,
    request: AnswerRequest,
    runner: ExamRunner = Depends(get_runner),
):
    """Select an option, or clear the selection by sending a null value."""
    try:
        await runner.answer(session_id, request.question_id, request.value)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/mark", response_model=SessionView)
async def toggle_mark(
    session_id: str,
    request: MarkRequest,
    runner: ExamRunner = Depends(get_runner),
):
    """Toggle the review mark on a question."""
    try:
        await runner.toggle_mark(session_id, request.question_id)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/pause", response_model=SessionView)
async def pause(session_id: str, runner: ExamRunner = Depends(get_runner)):
    try:
        await runner.pause(session_id)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/resume", response_model=SessionView)
async def resume(session_id: str, runner: ExamRunner = Depends(get_runner)):
    try:
        await runner.resume(session_id)
        return await _view(runner, session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{session_id}/submit", response_model=ExamResult)
async def submit(session_id: str, runner: ExamRunner = Depends(get_runner)):
    """Submit the session and return its result. Safe to call more than once."""
    try:
        return await runner.submit(session_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.get("/{session_id}/result", response_model=ExamResult)
async def get_result(session_id: str, runner: ExamRunner = Depends(get_runner)):
    try:
        result = await runner.result(session_id)
    except ExamEngineError as e:
        raise http_error(e)
    if result is None:
        raise HTTPException(status_code=404, detail="Session has not been submitted")
    return result


@router.delete("/{session_id}", status_code=204)
async def reset(session_id: str, runner: ExamRunner = Depends(get_runner)):
    """Discard the session and its answers."""
    try:
        await runner.reset(session_id)
    except ExamEngineError as e:
        raise http_error(e)

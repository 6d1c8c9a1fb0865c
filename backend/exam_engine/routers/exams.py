"""Exam catalog API endpoints."""

from fastapi import APIRouter, Depends

from exam_engine.errors import ExamEngineError
from exam_engine.models.exam import ExamConfig, ExamSummary
from exam_engine.services.exam_runner import ExamRunner

from .deps import get_runner, http_error

router = APIRouter(prefix="/api/exams", tags=["exams"])


@router.get("", response_model=list[ExamSummary])
async def list_exams(runner: ExamRunner = Depends(get_runner)):
    """List the available exams."""
    try:
        return await runner.list_exams()
    except ExamEngineError as e:
        raise http_error(e)


@router.get("/{exam_id}", response_model=ExamConfig)
async def get_exam(exam_id: str, runner: ExamRunner = Depends(get_runner)):
    """Full configuration of one exam, including its questions."""
    try:
        return await runner.get_exam(exam_id)
    except ExamEngineError as e:
        raise http_error(e)

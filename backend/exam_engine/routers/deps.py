"""Shared dependencies for API routers."""

import logging

from fastapi import HTTPException, Request

from exam_engine.errors import (
    ExamEngineError,
    ExamNotFound,
    IndexOutOfRange,
    InvalidConfigError,
    NoActiveSession,
    SectionSwitchDenied,
    SessionClosed,
    SessionNotFound,
    UnknownQuestion,
)
from exam_engine.services.exam_runner import ExamRunner

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ExamNotFound: 404,
    SessionNotFound: 404,
    UnknownQuestion: 404,
    InvalidConfigError: 422,
    IndexOutOfRange: 400,
    SectionSwitchDenied: 409,
    SessionClosed: 409,
    NoActiveSession: 409,
}


def get_runner(request: Request) -> ExamRunner:
    """The application's exam runner."""
    return request.app.state.runner


def http_error(error: ExamEngineError) -> HTTPException:
    """Translate an engine error into the matching HTTP error."""
    code = next(
        (c for kind, c in ERROR_STATUS.items() if isinstance(error, kind)),
        400,
    )
    logger.warning(f"Rejected command ({type(error).__name__}): {error}")
    return HTTPException(status_code=code, detail=str(error))

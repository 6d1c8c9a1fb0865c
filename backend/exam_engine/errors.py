"""Exception types raised by the exam session engine."""


class ExamEngineError(Exception):
    """Base class for all engine errors."""


class InvalidConfigError(ExamEngineError, ValueError):
    """The exam configuration is empty or malformed."""


class IndexOutOfRange(ExamEngineError, IndexError):
    """A question or section index is outside the exam."""

    def __init__(self, index: int, size: int, kind: str = "question"):
        super().__init__(f"{kind} index {index} out of range (0..{size - 1})")
        self.index = index
        self.size = size
        self.kind = kind


class SectionSwitchDenied(ExamEngineError):
    """The exam does not allow leaving the current section."""

    def __init__(self, current: int, target: int):
        super().__init__(f"Switching from section {current} to section {target} is not allowed")
        self.current = current
        self.target = target


class UnknownQuestion(ExamEngineError, LookupError):
    """The question id is not part of the active session."""

    def __init__(self, question_id: str):
        super().__init__(f"Unknown question: {question_id}")
        self.question_id = question_id


class ExamNotFound(ExamEngineError, LookupError):
    """The content provider has no exam with this id."""

    def __init__(self, exam_id: str):
        super().__init__(f"Exam configuration not found for {exam_id}")
        self.exam_id = exam_id


class SessionNotFound(ExamEngineError, LookupError):
    """No live or persisted session has this id."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class NoActiveSession(ExamEngineError):
    """A command was issued before start_exam or after reset."""


class SessionClosed(ExamEngineError):
    """The session has been submitted and no longer accepts commands."""

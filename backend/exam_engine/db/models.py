"""SQLAlchemy database models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ExamSessionDB(Base):
    """A persisted exam session snapshot and, once submitted, its result."""

    __tablename__ = "exam_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    exam_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    is_submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)  # JSON ExamSession
    result: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON ExamResult
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

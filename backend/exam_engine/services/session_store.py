"""Persistence adapters for exam sessions and results.

The engine never saves on its own. Callers save explicitly after a command
completes. Both stores serialize with pydantic's JSON encoding, which
round-trips every session and result field losslessly.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exam_engine.db.models import ExamSessionDB
from exam_engine.models.result import ExamResult
from exam_engine.models.session import ExamSession

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Last-write-wins key/value storage for sessions and results."""

    @abstractmethod
    async def save(self, key: str, session: ExamSession) -> None:
        ...

    @abstractmethod
    async def load(self, key: str) -> ExamSession | None:
        ...

    @abstractmethod
    async def save_result(self, key: str, result: ExamResult) -> None:
        ...

    @abstractmethod
    async def load_result(self, key: str) -> ExamResult | None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...


class InMemorySessionStore(SessionStore):
    """Byte store kept in a dict. Useful for tests and single-process demos."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def save(self, key: str, session: ExamSession) -> None:
        self._data[f"session:{key}"] = session.model_dump_json().encode()

    async def load(self, key: str) -> ExamSession | None:
        raw = self._data.get(f"session:{key}")
        return ExamSession.model_validate_json(raw) if raw is not None else None

    async def save_result(self, key: str, result: ExamResult) -> None:
        self._data[f"result:{key}"] = result.model_dump_json().encode()

    async def load_result(self, key: str) -> ExamResult | None:
        raw = self._data.get(f"result:{key}")
        return ExamResult.model_validate_json(raw) if raw is not None else None

    async def delete(self, key: str) -> None:
        self._data.pop(f"session:{key}", None)
        self._data.pop(f"result:{key}", None)


class SqlSessionStore(SessionStore):
    """Stores sessions in the ``exam_sessions`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _get(self, db: AsyncSession, key: str) -> ExamSessionDB | None:
        result = await db.execute(select(ExamSessionDB).where(ExamSessionDB.id == key))
        return result.scalar_one_or_none()

    async def save(self, key: str, session: ExamSession) -> None:
        async with self.session_factory() as db:
            row = await self._get(db, key)
            if row is None:
                row = ExamSessionDB(id=key, exam_id=session.exam_id)
                db.add(row)
            row.data = session.model_dump_json()
            row.is_submitted = session.is_submitted
            await db.commit()

    async def load(self, key: str) -> ExamSession | None:
        async with self.session_factory() as db:
            row = await self._get(db, key)
            if not row:
                return None
            return ExamSession.model_validate_json(row.data)

    async def save_result(self, key: str, result: ExamResult) -> None:
        async with self.session_factory() as db:
            row = await self._get(db, key)
            if row is None:
                raise LookupError(f"Cannot store result for unsaved session {key}")
            row.result = result.model_dump_json()
            await db.commit()

    async def load_result(self, key: str) -> ExamResult | None:
        async with self.session_factory() as db:
            row = await self._get(db, key)
            if not row or not row.result:
                return None
            return ExamResult.model_validate_json(row.result)

    async def delete(self, key: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(ExamSessionDB).where(ExamSessionDB.id == key))
            await db.commit()
        logger.info(f"Deleted stored session {key}")

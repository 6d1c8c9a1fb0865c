"""Exam runner: keeps one session controller per live session and persists it."""

import asyncio
import logging

from exam_engine.errors import SessionNotFound
from exam_engine.models.exam import ExamConfig, ExamSummary
from exam_engine.models.result import ExamResult
from exam_engine.models.session import ExamSession

from .clock import Clock
from .content_provider import ContentProvider
from .session_controller import SessionController
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class ExamRunner:
    """Service for running exam sessions on behalf of the API layer.

    Every command is forwarded to the session's controller and the resulting
    snapshot is saved explicitly afterwards. Sessions that are not live in
    this process are restored from the store on first use.
    """

    def __init__(self, provider: ContentProvider, store: SessionStore, clock: Clock):
        self.provider = provider
        self.store = store
        self.clock = clock
        self._controllers: dict[str, SessionController] = {}
        self._pending: set[asyncio.Task] = set()
        self._restoring: dict[str, asyncio.Lock] = {}

    async def list_exams(self) -> list[ExamSummary]:
        return await self.provider.list_exams()

    async def get_exam(self, exam_id: str) -> ExamConfig:
        return await self.provider.get_exam_config(exam_id)

    def _new_controller(self) -> SessionController:
        controller = SessionController(self.clock)
        controller.subscribe("overall_complete", lambda session_id: self._on_time_up(controller))
        return controller

    async def start(self, exam_id: str) -> ExamSession:
        """Start a new attempt at ``exam_id``."""
        config = await self.provider.get_exam_config(exam_id)
        controller = self._new_controller()
        session = controller.start_exam(config)
        self._controllers[session.id] = controller
        await self._save(controller)
        return session

    async def controller(self, session_id: str) -> SessionController:
        """Live controller for a session, restoring it from the store if needed.

        Concurrent first lookups of the same session share one restore.
        Submitted sessions are restored for reading but are not kept live.
        """
        if session_id in self._controllers:
            return self._controllers[session_id]

        lock = self._restoring.setdefault(session_id, asyncio.Lock())
        try:
            async with lock:
                if session_id in self._controllers:
                    return self._controllers[session_id]
                return await self._restore(session_id)
        finally:
            if not lock.locked():
                self._restoring.pop(session_id, None)

    async def _restore(self, session_id: str) -> SessionController:
        session = await self.store.load(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        config = await self.provider.get_exam_config(session.exam_id)
        if session_id in self._controllers:
            return self._controllers[session_id]

        controller = self._new_controller()
        controller.restore(config, session)
        if not session.is_submitted:
            self._controllers[session_id] = controller
        return controller

    async def get_session(self, session_id: str) -> ExamSession:
        return (await self.controller(session_id)).session

    async def navigate(self, session_id: str, index: int) -> ExamSession:
        controller = await self.controller(session_id)
        controller.navigate_to(index)
        return await self._save(controller)

    async def switch_section(self, session_id: str, section_index: int) -> ExamSession:
        controller = await self.controller(session_id)
        controller.switch_section(section_index)
        return await self._save(controller)

    async def answer(self, session_id: str, question_id: str, value: str | None) -> ExamSession:
        controller = await self.controller(session_id)
        controller.set_answer(question_id, value)
        return await self._save(controller)

    async def toggle_mark(self, session_id: str, question_id: str) -> ExamSession:
        controller = await self.controller(session_id)
        controller.toggle_mark(question_id)
        return await self._save(controller)

    async def pause(self, session_id: str) -> ExamSession:
        controller = await self.controller(session_id)
        controller.pause()
        return await self._save(controller)

    async def resume(self, session_id: str) -> ExamSession:
        controller = await self.controller(session_id)
        controller.resume()
        return await self._save(controller)

    async def submit(self, session_id: str) -> ExamResult:
        controller = await self.controller(session_id)
        result = controller.submit()
        await self._retire(controller)
        return result

    async def result(self, session_id: str) -> ExamResult | None:
        """The session's result, or None while it is still running."""
        if session_id not in self._controllers:
            stored = await self.store.load_result(session_id)
            if stored is not None:
                return stored
        controller = await self.controller(session_id)
        if controller.result is not None:
            await self._retire(controller)
        return controller.result

    async def reset(self, session_id: str) -> None:
        """Discard a session entirely."""
        controller = await self.controller(session_id)
        controller.reset()
        self._controllers.pop(session_id, None)
        await self.store.delete(session_id)

    async def close(self) -> None:
        """Persist every live session and stop its timers."""
        if self._pending:
            await asyncio.gather(*self._pending)
        for controller in self._controllers.values():
            await self._save(controller)
            controller.reset()
        logger.info(f"Closed {len(self._controllers)} live sessions")
        self._controllers.clear()

    async def _save(self, controller: SessionController) -> ExamSession:
        session = controller.session
        await self.store.save(session.id, session)
        if controller.result is not None:
            await self.store.save_result(session.id, controller.result)
        return session

    async def _retire(self, controller: SessionController) -> None:
        """Persist a submitted session and stop keeping it live."""
        session = await self._save(controller)
        if self._controllers.get(session.id) is controller:
            del self._controllers[session.id]
            logger.info(f"Session {session.id} is no longer live")

    async def _save_live(self, controller: SessionController) -> None:
        if controller.session is not None:
            await self._retire(controller)

    def _on_time_up(self, controller: SessionController) -> None:
        # The controller submits right after this event, outside any request.
        # Persist in the background once that submission has completed.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._save_live(controller))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Set

from doceditor.domains.editor.entities import ErrorKind, SessionState, StatusReport
from doceditor.domains.editor.exceptions import ContentCommitError, SerializationError
from doceditor.domains.editor.metrics import compute_metrics
from doceditor.domains.editor.surface import InputSurface

logger = logging.getLogger(__name__)

ContentCommitter = Callable[[str], Awaitable[bool]]


class ContentSyncEngine:
    """Синхронизация дерева содержимого с хранилищем.

    На каждое уведомление поверхности ввода дерево сериализуется, метрики
    пересчитываются, и запускается одна запись полного дерева. Записи не
    ставятся в очередь и не объединяются: каждая уходит отдельной задачей,
    порядок их завершения не гарантирован.
    """

    def __init__(self, state: SessionState, commit_content: ContentCommitter):
        self.state = state
        self.commit_content = commit_content
        self._surface = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending_writes(self) -> int:
        return len(self._tasks)

    def attach(self, surface: InputSurface) -> None:
        self.detach()
        self._surface = surface
        surface.on_update(self.handle_update)

    def detach(self) -> None:
        if self._surface is not None:
            self._surface.remove_listener(self.handle_update)
            self._surface = None

    def refresh_metrics(self, surface: InputSurface) -> None:
        self.state.metrics = compute_metrics(surface.get_plain_text())

    def handle_update(self, surface: InputSurface) -> None:
        """Обработчик уведомления об изменении содержимого"""
        try:
            serialized = surface.get_serialized_tree()
        except SerializationError as e:
            logger.error(f"Content of document {self._document_id()} could not be serialized: {e}")
            self.state.last_error = StatusReport(
                kind=ErrorKind.SERIALIZATION, message=str(e), at=datetime.now(timezone.utc)
            )
            self.refresh_metrics(surface)
            return

        self.refresh_metrics(surface)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            error = ContentCommitError("Content write needs a running event loop")
            logger.error(f"Content of document {self._document_id()} was not saved: {error}")
            self.state.last_error = StatusReport(
                kind=ErrorKind.CONTENT_COMMIT, message=str(error), at=datetime.now(timezone.utc)
            )
            return

        task = loop.create_task(self.commit_content(serialized))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_for_pending_writes(self) -> None:
        """Ожидание всех отправленных записей"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _document_id(self):
        return self.state.record.id if self.state.record else None

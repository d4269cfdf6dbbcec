import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Optional, TypeVar

from doceditor.core.config import settings
from doceditor.domains.editor.commands import FormattingCommand
from doceditor.domains.editor.content import ContentTree, deserialize, placeholder_tree
from doceditor.domains.editor.entities import (
    DocumentRecord, EditorContext, ErrorKind, SessionSnapshot, SessionState,
    SessionStatus, StatusReport, Theme, ViewFlags
)
from doceditor.domains.editor.exceptions import (
    ContentCommitError, EditorStateError, LoadError, SerializationError, TitleCommitError
)
from doceditor.domains.editor.export import ExportedFile, export_html, export_text
from doceditor.domains.editor.metrics import compute_metrics
from doceditor.domains.editor.store import DocumentStore
from doceditor.domains.editor.surface import HeadlessEditor, InputSurface
from doceditor.domains.editor.sync import ContentSyncEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentSessionController:
    """Контроллер сессии редактирования одного документа.

    Владеет состоянием сессии, загружает документ в поверхность ввода и
    сохраняет заголовок и содержимое независимыми записями. Ошибки хранилища
    не пробрасываются наружу: они логируются и попадают в ``state.last_error``.
    """

    def __init__(
        self,
        store: DocumentStore,
        surface: Optional[InputSurface] = None,
        context: Optional[EditorContext] = None,
        placeholder_text: Optional[str] = None,
        persist_timeout: Optional[float] = None,
    ):
        self.store = store
        self.surface = surface or HeadlessEditor()
        self.context = context or EditorContext()
        self.placeholder_text = placeholder_text or settings.placeholder_text
        self.persist_timeout = persist_timeout if persist_timeout is not None else settings.persist_timeout_seconds

        self.state = SessionState(view_flags=ViewFlags(theme=self.context.theme))
        self.sync = ContentSyncEngine(self.state, self.commit_content)
        self._title_in_flight: Optional[str] = None

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def record(self) -> Optional[DocumentRecord]:
        return self.state.record

    async def load(self, document_id: uuid.UUID) -> bool:
        """Загрузка документа и инициализация поверхности ввода"""
        if self.state.loading:
            raise EditorStateError("Document is already loading")

        self.state.loading = True
        try:
            record = await self._call_store(self.store.get(document_id))
            if record is None:
                raise LoadError(f"Document {document_id} not found")
            tree = deserialize(record.content) if record.content else placeholder_tree(self.placeholder_text)
        except Exception as e:
            logger.error(f"Failed to load document {document_id}: {e}")
            self.sync.detach()
            self.state.record = None
            self.state.pending_title = ""
            self.state.metrics = compute_metrics(None)
            self.state.loading = False
            self.state.load_failed = True
            self.state.last_error = StatusReport(
                kind=ErrorKind.LOAD, message="Document unavailable", at=_now()
            )
            return False

        self.surface.initialize(tree)
        self.sync.attach(self.surface)

        self.state.record = record
        self.state.pending_title = record.title
        self.state.metrics = compute_metrics(self.surface.get_plain_text())
        self.state.last_error = None
        self.state.load_failed = False
        self.state.loading = False
        self._title_in_flight = None

        logger.info(f"Document {document_id} loaded for user {self.context.user_id}")
        return True

    def set_pending_title(self, title: str) -> None:
        self._require_record()
        self.state.pending_title = title

    async def commit_title(self) -> bool:
        """Сохранение заголовка; пустой или не изменившийся заголовок не отправляется"""
        record = self._require_record()
        title = self.state.pending_title
        if not title or title == record.title or title == self._title_in_flight:
            return False

        self._title_in_flight = title
        self.state.writes_in_flight += 1
        try:
            updated_at = await self._call_store(self.store.update_title(record.id, title))
            if updated_at is None:
                raise TitleCommitError(f"Document {record.id} no longer exists")
        except Exception as e:
            logger.error(f"Error saving title of document {record.id}: {e}")
            self.state.last_error = StatusReport(
                kind=ErrorKind.TITLE_COMMIT, message=str(e) or type(e).__name__, at=_now()
            )
            return False
        finally:
            self.state.writes_in_flight -= 1
            if self._title_in_flight == title:
                self._title_in_flight = None

        record.title = title
        record.updated_at = updated_at
        self._mark_saved(ErrorKind.TITLE_COMMIT)
        logger.info(f"Title of document {record.id} saved")
        return True

    async def commit_content(self, serialized: str) -> bool:
        """Полная замена содержимого в хранилище"""
        record = self._require_record()

        self.state.writes_in_flight += 1
        try:
            updated_at = await self._call_store(self.store.update_content(record.id, serialized))
            if updated_at is None:
                raise ContentCommitError(f"Document {record.id} no longer exists")
        except Exception as e:
            logger.error(f"Error saving content of document {record.id}: {e}")
            self.state.last_error = StatusReport(
                kind=ErrorKind.CONTENT_COMMIT, message=str(e) or type(e).__name__, at=_now()
            )
            return False
        finally:
            self.state.writes_in_flight -= 1

        record.updated_at = updated_at
        self._mark_saved(ErrorKind.CONTENT_COMMIT)
        logger.debug(f"Content of document {record.id} saved ({len(serialized)} bytes)")
        return True

    def edit_content(self, tree: ContentTree) -> None:
        """Новое дерево от клиента; сохранение запускает движок синхронизации"""
        self._require_record()
        self.surface.replace_content(tree)

    def select(self, start: int, end: Optional[int] = None) -> None:
        self._require_record()
        self.surface.select(start, end)

    def apply_command(self, command: FormattingCommand) -> bool:
        """Команда форматирования; возвращает ее активность для подсветки в интерфейсе"""
        self._require_record()
        return self.surface.apply(command)

    def toggle_fullscreen(self) -> bool:
        flags = self.state.view_flags
        flags.fullscreen = not flags.fullscreen
        return flags.fullscreen

    def toggle_toolbar(self) -> bool:
        flags = self.state.view_flags
        flags.toolbar_visible = not flags.toolbar_visible
        return flags.toolbar_visible

    def set_theme(self, theme: Theme) -> None:
        self.state.view_flags.theme = Theme(theme)

    def export_html(self) -> ExportedFile:
        """Экспорт того, что сейчас в поверхности ввода, а не последней сохраненной версии"""
        record = self._require_record()
        try:
            return export_html(
                self.state.pending_title, record.created_at, record.updated_at, self.surface.get_tree()
            )
        except SerializationError as e:
            logger.error(f"HTML export of document {record.id} failed: {e}")
            raise

    def export_text(self) -> ExportedFile:
        record = self._require_record()
        try:
            return export_text(self.state.pending_title, self.surface.get_tree())
        except SerializationError as e:
            logger.error(f"Text export of document {record.id} failed: {e}")
            raise

    def snapshot(self) -> SessionSnapshot:
        state = self.state
        record = state.record
        flags = state.view_flags
        return SessionSnapshot(
            document_id=record.id if record else None,
            title=record.title if record else "",
            pending_title=state.pending_title,
            status=state.status,
            last_persisted_at=state.last_persisted_at,
            word_count=state.metrics.word_count,
            character_count=state.metrics.character_count,
            fullscreen=flags.fullscreen,
            toolbar_visible=flags.toolbar_visible,
            theme=flags.theme,
            created_at=record.created_at if record else None,
            updated_at=record.updated_at if record else None,
            last_error=state.last_error,
        )

    async def wait_for_pending_writes(self) -> None:
        await self.sync.wait_for_pending_writes()

    def close(self) -> None:
        """Отключение от поверхности ввода; незавершенные записи не отменяются"""
        self.sync.detach()
        if self.sync.pending_writes:
            logger.warning(
                f"Session closed with {self.sync.pending_writes} content writes still in flight"
            )
        logger.info(f"Session for document {self.state.record.id if self.state.record else None} closed")

    def _require_record(self) -> DocumentRecord:
        if self.state.record is None:
            raise EditorStateError("Document is not loaded")
        return self.state.record

    def _mark_saved(self, kind: ErrorKind) -> None:
        self.state.last_persisted_at = _now()
        if self.state.last_error is not None and self.state.last_error.kind == kind:
            self.state.last_error = None

    async def _call_store(self, call: Awaitable[T]) -> T:
        if self.persist_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.persist_timeout)

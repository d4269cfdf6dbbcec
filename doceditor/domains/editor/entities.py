import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    SEPIA = "sepia"


class SessionStatus(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    PERSISTING = "persisting"
    ERROR = "error"


class ErrorKind(str, enum.Enum):
    LOAD = "load"
    TITLE_COMMIT = "title_commit"
    CONTENT_COMMIT = "content_commit"
    SERIALIZATION = "serialization"


@dataclass
class DocumentRecord:
    """Документ в том виде, в каком его хранит удаленное хранилище"""
    id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    project_id: Optional[uuid.UUID] = None
    owner_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class DocumentMetrics:
    word_count: int = 0
    character_count: int = 0


@dataclass
class ViewFlags:
    fullscreen: bool = False
    toolbar_visible: bool = True
    theme: Theme = Theme.LIGHT


@dataclass(frozen=True)
class StatusReport:
    """Сообщение об ошибке, которое видит пользователь вместо диалога"""
    kind: ErrorKind
    message: str
    at: datetime


@dataclass(frozen=True)
class EditorContext:
    """Контекст, передаваемый в контроллер при создании сессии"""
    user_id: Optional[uuid.UUID] = None
    theme: Theme = Theme.LIGHT


@dataclass
class SessionState:
    """Состояние сессии; принадлежит только контроллеру"""
    record: Optional[DocumentRecord] = None
    pending_title: str = ""
    last_persisted_at: Optional[datetime] = None
    metrics: DocumentMetrics = field(default_factory=DocumentMetrics)
    view_flags: ViewFlags = field(default_factory=ViewFlags)
    last_error: Optional[StatusReport] = None
    loading: bool = False
    load_failed: bool = False
    writes_in_flight: int = 0

    @property
    def status(self) -> SessionStatus:
        if self.loading:
            return SessionStatus.LOADING
        if self.load_failed:
            return SessionStatus.ERROR
        if self.record is None:
            return SessionStatus.UNINITIALIZED
        if self.writes_in_flight > 0:
            return SessionStatus.PERSISTING
        return SessionStatus.READY


@dataclass(frozen=True)
class SessionSnapshot:
    """Неизменяемый срез состояния для слоя представления"""
    document_id: Optional[uuid.UUID]
    title: str
    pending_title: str
    status: SessionStatus
    last_persisted_at: Optional[datetime]
    word_count: int
    character_count: int
    fullscreen: bool
    toolbar_visible: bool
    theme: Theme
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_error: Optional[StatusReport] = None

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
import uuid
from datetime import datetime

from doceditor.domains.editor.commands import FormattingCommand
from doceditor.domains.editor.content import ContentTree
from doceditor.domains.editor.entities import ErrorKind, SessionStatus, Theme


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    title: str
    project_id: Optional[uuid.UUID] = None
    owner_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentListResponse(BaseModel):
    """Схема для списка документов проекта"""
    documents: List[DocumentResponse]
    total: int


class StatusReportResponse(BaseModel):
    kind: ErrorKind
    message: str
    at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """Схема для ответа с состоянием сессии редактирования"""
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
    last_error: Optional[StatusReportResponse] = None

    model_config = ConfigDict(from_attributes=True)


class TitleUpdate(BaseModel):
    """Текущее значение поля заголовка"""
    title: str = Field(..., max_length=255)


class ContentUpdate(BaseModel):
    """Новое дерево содержимого от клиента"""
    content: ContentTree


class CommandRequest(BaseModel):
    command: FormattingCommand
    selection_start: Optional[int] = Field(None, ge=0)
    selection_end: Optional[int] = Field(None, ge=0)


class CommandResponse(BaseModel):
    active: bool
    session: SessionResponse


class ViewUpdate(BaseModel):
    fullscreen: Optional[bool] = None
    toolbar_visible: Optional[bool] = None
    theme: Optional[Theme] = None

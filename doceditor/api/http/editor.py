from urllib.parse import quote
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from doceditor.api.http.documents import get_document_store
from doceditor.api.sessions import SessionRegistry, get_registry
from doceditor.core.auth import get_current_user_id
from doceditor.domains.editor.controller import DocumentSessionController
from doceditor.domains.editor.entities import EditorContext, Theme
from doceditor.domains.editor.exceptions import LoadError, SerializationError
from doceditor.domains.editor.schemas import (
    CommandRequest, CommandResponse, ContentUpdate, SessionResponse, TitleUpdate, ViewUpdate
)
from doceditor.domains.editor.store import DocumentStore

router = APIRouter(prefix="/editor", tags=["editor"])


def _session_response(controller: DocumentSessionController) -> SessionResponse:
    return SessionResponse.model_validate(controller.snapshot())


def get_session(
    document_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    registry: SessionRegistry = Depends(get_registry),
) -> DocumentSessionController:
    controller = registry.get(user_id, document_id)
    if controller is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Editing session not found"
        )
    return controller


@router.post("/{document_id}/session", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    document_id: uuid.UUID,
    theme: Theme = Query(Theme.LIGHT),
    user_id: uuid.UUID = Depends(get_current_user_id),
    registry: SessionRegistry = Depends(get_registry),
    store: DocumentStore = Depends(get_document_store),
):
    """Открытие документа на редактирование"""
    try:
        controller = await registry.open(store, document_id, EditorContext(user_id=user_id, theme=theme))
    except LoadError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document unavailable"
        )
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    return _session_response(controller)


@router.get("/{document_id}/session", response_model=SessionResponse)
async def read_session(controller: DocumentSessionController = Depends(get_session)):
    """Текущее состояние сессии: статус сохранения, счетчики, флаги вида"""
    return _session_response(controller)


@router.delete("/{document_id}/session", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    document_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    registry: SessionRegistry = Depends(get_registry),
):
    """Закрытие сессии; незавершенные записи не отменяются"""
    if not registry.close(user_id, document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Editing session not found"
        )


@router.put("/{document_id}/title", response_model=SessionResponse)
async def update_title(
    update_data: TitleUpdate,
    controller: DocumentSessionController = Depends(get_session),
):
    """Изменение поля заголовка без сохранения"""
    controller.set_pending_title(update_data.title)
    return _session_response(controller)


@router.post("/{document_id}/title/commit", response_model=SessionResponse)
async def commit_title(controller: DocumentSessionController = Depends(get_session)):
    """Сохранение заголовка (потеря фокуса полем)"""
    await controller.commit_title()
    return _session_response(controller)


@router.put("/{document_id}/content", response_model=SessionResponse)
async def update_content(
    update_data: ContentUpdate,
    controller: DocumentSessionController = Depends(get_session),
):
    """Правка содержимого; запись в хранилище уходит в фоне"""
    if update_data.content.type != "doc":
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Root node must be 'doc'"
        )
    controller.edit_content(update_data.content)
    return _session_response(controller)


@router.post("/{document_id}/commands", response_model=CommandResponse)
async def apply_command(
    request: CommandRequest,
    controller: DocumentSessionController = Depends(get_session),
):
    """Команда форматирования над выделенными блоками"""
    if request.selection_start is not None:
        try:
            controller.select(request.selection_start, request.selection_end)
        except IndexError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    active = controller.apply_command(request.command)
    return CommandResponse(active=active, session=_session_response(controller))


@router.put("/{document_id}/view", response_model=SessionResponse)
async def update_view(
    update_data: ViewUpdate,
    controller: DocumentSessionController = Depends(get_session),
):
    """Полноэкранный режим, видимость панели инструментов и тема"""
    flags = controller.state.view_flags
    if update_data.fullscreen is not None and update_data.fullscreen != flags.fullscreen:
        controller.toggle_fullscreen()
    if update_data.toolbar_visible is not None and update_data.toolbar_visible != flags.toolbar_visible:
        controller.toggle_toolbar()
    if update_data.theme is not None:
        controller.set_theme(update_data.theme)
    return _session_response(controller)


@router.get("/{document_id}/export")
async def export_document(
    format: str = Query("html", pattern="^(html|txt)$"),
    controller: DocumentSessionController = Depends(get_session),
):
    """Выгрузка текущего содержимого в HTML или текст"""
    try:
        exported = controller.export_html() if format == "html" else controller.export_text()
    except SerializationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(exported.filename)}"
        },
    )

from fastapi import APIRouter, Depends, HTTPException, status
import uuid

from doceditor.core.auth import get_current_user_id
from doceditor.db.repositories.document_repository import DocumentRepository
from doceditor.domains.editor.schemas import DocumentListResponse, DocumentResponse
from doceditor.domains.editor.store import DocumentStore

router = APIRouter(tags=["documents"])


def get_document_store() -> DocumentStore:
    return DocumentRepository()


@router.post(
    "/projects/{project_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    project_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    """Создание нового документа в проекте"""
    try:
        record = await store.create(project_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return DocumentResponse.model_validate(record)


@router.get("/projects/{project_id}/documents", response_model=DocumentListResponse)
async def list_project_documents(
    project_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    """Получение списка документов проекта"""
    records = await store.list_by_project(project_id)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(record) for record in records],
        total=len(records),
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    """Получение документа по UUID"""
    record = await store.get(document_id)

    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return DocumentResponse.model_validate(record)

from datetime import datetime
from typing import Callable, List, Optional
import uuid

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from doceditor.core.db import SessionLocal
from doceditor.db.models.document import Document as DocumentModel
from doceditor.domains.editor.entities import DocumentRecord


class DocumentRepository:
    """Репозиторий документов; каждый вызов работает в своей сессии БД"""

    def __init__(self, session_factory: Callable[[], AsyncSession] = SessionLocal):
        self.session_factory = session_factory

    async def get(self, document_id: uuid.UUID) -> Optional[DocumentRecord]:
        """Получение документа по UUID"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(DocumentModel).where(DocumentModel.uuid == document_id)
            )
            db_document = result.scalar_one_or_none()
            return self._to_domain(db_document) if db_document else None

    async def update_title(self, document_id: uuid.UUID, title: str) -> Optional[datetime]:
        """Обновление только заголовка"""
        return await self._update(document_id, title=title)

    async def update_content(self, document_id: uuid.UUID, content: str) -> Optional[datetime]:
        """Полная замена содержимого"""
        return await self._update(document_id, content=content)

    async def create(self, project_id: uuid.UUID, owner_id: uuid.UUID) -> DocumentRecord:
        """Создание пустого документа в проекте"""
        db_document = DocumentModel(project_id=project_id, owner_id=owner_id)

        async with self.session_factory() as session:
            session.add(db_document)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise ValueError("Invalid project_id or owner_id")
            await session.refresh(db_document)
            return self._to_domain(db_document)

    async def list_by_project(self, project_id: uuid.UUID) -> List[DocumentRecord]:
        """Документы проекта, новые первыми"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(DocumentModel)
                .where(DocumentModel.project_id == project_id)
                .order_by(DocumentModel.created_at.desc())
            )
            return [self._to_domain(doc) for doc in result.scalars().all()]

    async def _update(self, document_id: uuid.UUID, **values) -> Optional[datetime]:
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document_id)
            .values(**values, updated_at=func.now())
            .returning(DocumentModel.updated_at)
            .execution_options(synchronize_session=False)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            updated_at = result.scalar_one_or_none()
            await session.commit()
            return updated_at

    def _to_domain(self, db_document: DocumentModel) -> DocumentRecord:
        """Преобразование модели БД в доменную сущность"""
        return DocumentRecord(
            id=db_document.uuid,
            title=db_document.title,
            content=db_document.content or "",
            created_at=db_document.created_at,
            updated_at=db_document.updated_at,
            project_id=db_document.project_id,
            owner_id=db_document.owner_id,
        )

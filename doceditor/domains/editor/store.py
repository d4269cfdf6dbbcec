import uuid
from datetime import datetime
from typing import List, Optional, Protocol

from doceditor.domains.editor.entities import DocumentRecord


class DocumentStore(Protocol):
    """Удаленное хранилище документов, с которым работает контроллер"""

    async def get(self, document_id: uuid.UUID) -> Optional[DocumentRecord]:
        ...

    async def update_title(self, document_id: uuid.UUID, title: str) -> Optional[datetime]:
        """Возвращает новое updated_at или None, если документа нет"""
        ...

    async def update_content(self, document_id: uuid.UUID, content: str) -> Optional[datetime]:
        """Полная замена содержимого; возвращает новое updated_at или None"""
        ...

    async def create(self, project_id: uuid.UUID, owner_id: uuid.UUID) -> DocumentRecord:
        ...

    async def list_by_project(self, project_id: uuid.UUID) -> List[DocumentRecord]:
        ...

from typing import Dict, Optional, Tuple
import uuid
import logging

from doceditor.domains.editor.controller import DocumentSessionController
from doceditor.domains.editor.entities import EditorContext
from doceditor.domains.editor.exceptions import LoadError
from doceditor.domains.editor.store import DocumentStore

logger = logging.getLogger(__name__)

SessionKey = Tuple[uuid.UUID, uuid.UUID]


class SessionRegistry:
    """Открытые сессии редактирования: {(user_id, document_id): controller}"""

    def __init__(self):
        self.active_sessions: Dict[SessionKey, DocumentSessionController] = {}

    async def open(
        self,
        store: DocumentStore,
        document_id: uuid.UUID,
        context: EditorContext,
    ) -> DocumentSessionController:
        """Открытие документа; уже открытая сессия пользователя заменяется новой"""
        controller = DocumentSessionController(store, context=context)
        if not await controller.load(document_id):
            raise LoadError(f"Document {document_id} unavailable")
        if controller.state.record.owner_id != context.user_id:
            controller.close()
            raise PermissionError(f"User {context.user_id} cannot edit document {document_id}")

        key = (context.user_id, document_id)
        previous = self.active_sessions.pop(key, None)
        if previous is not None:
            previous.close()

        self.active_sessions[key] = controller
        logger.info(f"User {context.user_id} opened document {document_id}")
        return controller

    def get(self, user_id: uuid.UUID, document_id: uuid.UUID) -> Optional[DocumentSessionController]:
        return self.active_sessions.get((user_id, document_id))

    def close(self, user_id: uuid.UUID, document_id: uuid.UUID) -> bool:
        controller = self.active_sessions.pop((user_id, document_id), None)
        if controller is None:
            return False
        controller.close()
        logger.info(f"User {user_id} closed document {document_id}")
        return True

    def close_all(self) -> None:
        for controller in self.active_sessions.values():
            controller.close()
        self.active_sessions.clear()


registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return registry

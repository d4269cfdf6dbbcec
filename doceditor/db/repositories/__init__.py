from doceditor.db.repositories.document_repository import DocumentRepository

__all__ = [
    "DocumentRepository",
]

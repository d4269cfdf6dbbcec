from doceditor.db.models.user import User
from doceditor.db.models.document import Project, Document

__all__ = [
    "User",
    "Project",
    "Document",
]

from doceditor.api.http.health import router as health_router
from doceditor.api.http.documents import router as documents_router
from doceditor.api.http.editor import router as editor_router

__all__ = [
    "health_router",
    "documents_router",
    "editor_router",
]

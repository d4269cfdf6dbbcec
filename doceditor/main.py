from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from doceditor.api.http import documents_router, editor_router, health_router
from doceditor.api.sessions import registry
from doceditor.core.config import settings
from doceditor.core.db import engine, init_models
from doceditor.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_models()
    logger.info("Document editor started")
    yield
    registry.close_all()
    await engine.dispose()


app = FastAPI(
    title="DocEditor",
    description="Редактирование документов с автосохранением и экспортом",
    version="1.0.0",
    lifespan=lifespan,
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(editor_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "DocEditor API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Запуск сервера"""
    uvicorn.run(
        "doceditor.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./doceditor.db"
    database_echo: bool = False

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    log_level: str = "INFO"

    server_host: str = "127.0.0.1"
    server_port: int = 8000

    # Текст, которым заполняется пустой документ при открытии
    placeholder_text: str = "Start writing your masterpiece..."
    # None - без ограничения времени на запросы к хранилищу
    persist_timeout_seconds: Optional[float] = None

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()

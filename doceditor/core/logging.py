import logging

from doceditor.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Настройка корневого логгера по настройкам приложения"""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # SQL-эхо управляется через database_echo, а не общий уровень
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

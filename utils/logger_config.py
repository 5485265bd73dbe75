"""
Настройка логирования для проекта.

Консоль - уровень из LOG_LEVEL, app.log - всё от DEBUG (в т.ч. тексты
выполняемых команд), errors.log - только ошибки с трассировкой.
Настраивать logger в других модулях запрещено: используйте get_logger().
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import AppConfig, config

_configured = False

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {extra[component]} | {message}"


def setup_logging(app_config: Optional[AppConfig] = None, force: bool = False) -> None:
    """
    Подключение обработчиков loguru (повторный вызов ничего не делает)

    :param app_config: Настройки логов; по умолчанию берутся из config.app
    :param force: Перенастроить, даже если настройка уже выполнялась
    """
    global _configured
    if _configured and not force:
        return

    app_config = app_config or config.app
    log_dir = Path(app_config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Удаляем стандартный обработчик loguru (который выводит в консоль)
    logger.remove()
    logger.configure(extra={"component": "-"})

    logger.add(
        sys.stderr,
        level=app_config.log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # Все команды и параметры (уровень DEBUG)
    logger.add(
        log_dir / "app.log",
        level="DEBUG",
        rotation=app_config.log_rotation,
        retention=app_config.log_retention,
        compression="zip",
        format=_FILE_FORMAT,
        enqueue=True,
    )

    logger.add(
        log_dir / "errors.log",
        level="ERROR",
        rotation=app_config.log_rotation,
        compression="zip",
        format=_FILE_FORMAT,
        backtrace=True,
        diagnose=True,
        enqueue=True,
    )

    _configured = True


def get_logger():
    """Возвращает настроенный logger."""
    setup_logging()
    return logger

"""
MODULE: utils.sql_logger
RESPONSIBILITY: Leveled logging capability for DbOperation on top of loguru.
ALLOWED: loguru, config.settings, utils.logger_config.
FORBIDDEN: Business logic, DB operations.
ERRORS: ConfigurationError (unknown level name).

Логгер команд: порог уровня проверяется до форматирования сообщения,
чтобы на горячем пути не собирать строку с параметрами впустую.
"""

from typing import Optional

from config.settings import config
from core.exceptions import ConfigurationError
from utils.logger_config import get_logger


class SqlLogger:
    """
    Реализация ISqlLogger через loguru

    Attributes:
        name: Имя компонента (поле extra["component"] в записях)
        min_level: Минимальный уровень, который считается включённым
    """

    def __init__(self, name: str = "sql", min_level: Optional[str] = None, sink_logger=None):
        """
        Args:
            name: Имя компонента
            min_level: Порог уровня; по умолчанию LOG_LEVEL из конфигурации
            sink_logger: Логгер loguru; по умолчанию настроенный get_logger()
        """
        base = sink_logger if sink_logger is not None else get_logger()
        if min_level is None:
            min_level = config.app.log_level

        self.name = name
        self.min_level = min_level.upper()
        self._base = base
        self._logger = base.bind(component=name)
        self._min_no = self._level_no(self.min_level)

    def _level_no(self, level: str) -> int:
        try:
            return self._base.level(level.upper()).no
        except ValueError as e:
            raise ConfigurationError(f"Неизвестный уровень логирования: {level}") from e

    def is_enabled(self, level: str) -> bool:
        return self._level_no(level) >= self._min_no

    def write_verbose(self, message: str) -> None:
        if self.is_enabled("DEBUG"):
            self._logger.opt(depth=1).debug(message)

    def write_error(self, message: str, exc: Optional[BaseException] = None) -> None:
        self._logger.opt(depth=1, exception=exc).error(message)

"""
MODULE: config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, database connections (only config).
ERRORS: ValueError (validation).
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, Any, Optional

from dotenv import load_dotenv
from loguru import logger


@dataclass(frozen=True)
class DatabaseConfig:
    """Конфигурация базы данных"""
    host: str
    database: str
    user: str
    password: str
    port: int
    dsn: Optional[str] = None

    def get_connection_string(self) -> str:
        """Получить строку подключения для psycopg2 (DB_DSN имеет приоритет)"""
        if self.dsn:
            return self.dsn
        return f"host={self.host} dbname={self.database} user={self.user} password={self.password} port={self.port}"


@dataclass(frozen=True)
class AppConfig:
    """Основная конфигурация приложения"""
    app_name: str
    log_level: str
    log_dir: str
    log_rotation: str
    log_retention: str


@dataclass(frozen=True)
class ExecutorConfig:
    """Конфигурация выполнения команд"""
    async_workers: int
    command_timeout: Optional[float] = None


class Config:
    """
    Главный класс конфигурации, загружающий все настройки из .env файла
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Инициализация конфигурации

        Args:
            env_file: Путь к .env файлу (опционально)
        """
        self._load_environment(env_file)
        self.database = self._load_database_config()
        self.app = self._load_app_config()
        self.executor = self._load_executor_config()

    @property
    def connection_string(self) -> str:
        return self.database.get_connection_string()

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Загрузка переменных окружения"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except Exception as e:
            logger.warning(f"Не удалось загрузить .env файл: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> str:
        """
        Получение переменной окружения с валидацией

        Args:
            key: Ключ переменной
            default: Значение по умолчанию
            required: Обязательная ли переменная

        Returns:
            Значение переменной

        Raises:
            ValueError: Если обязательная переменная не найдена
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ValueError(f"Обязательная переменная окружения {key} не найдена")
            return default

        return value

    def _get_env_float(self, key: str, default: Optional[float] = 0.0) -> Optional[float]:
        """Получение float переменной из окружения"""
        value = self._get_env_var(key, default)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат float для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Получение int переменной из окружения"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат int для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _load_database_config(self) -> DatabaseConfig:
        """Загрузка конфигурации базы данных"""
        return DatabaseConfig(
            host=self._get_env_var("DB_HOST", "localhost"),
            database=self._get_env_var("DB_DATABASE", "postgres"),
            user=self._get_env_var("DB_USER", "postgres"),
            password=self._get_env_var("DB_PASSWORD", ""),
            port=self._get_env_int("DB_PORT", 5432),
            dsn=self._get_env_var("DB_DSN", None),
        )

    def _load_app_config(self) -> AppConfig:
        """Загрузка основной конфигурации приложения"""
        return AppConfig(
            app_name=self._get_env_var("APP_NAME", "sql-command"),
            log_level=self._get_env_var("LOG_LEVEL", "INFO").upper(),
            log_dir=self._get_env_var("LOG_DIR", "logs"),
            log_rotation=self._get_env_var("LOG_ROTATION", "10 MB"),
            log_retention=self._get_env_var("LOG_RETENTION", "30 days")
        )

    def _load_executor_config(self) -> ExecutorConfig:
        """Загрузка конфигурации выполнения команд"""
        return ExecutorConfig(
            async_workers=self._get_env_int("SQL_ASYNC_WORKERS", 4),
            command_timeout=self._get_env_float("SQL_COMMAND_TIMEOUT", None),
        )

    def validate(self) -> bool:
        """
        Валидация конфигурации

        Returns:
            True если конфигурация валидна
        """
        try:
            if not self.connection_string:
                raise ValueError("Строка подключения к БД пуста")

            if self.executor.async_workers <= 0:
                raise ValueError("SQL_ASYNC_WORKERS должен быть положительным")

            if self.executor.command_timeout is not None and self.executor.command_timeout <= 0:
                raise ValueError("SQL_COMMAND_TIMEOUT должен быть положительным")

            logger.info("Конфигурация прошла валидацию")
            return True

        except Exception as e:
            logger.error(f"Ошибка валидации конфигурации: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование конфигурации в словарь (без паролей)"""
        return {
            "database": {
                "host": self.database.host,
                "database": self.database.database,
                "user": self.database.user,
                "port": self.database.port,
                "dsn_override": bool(self.database.dsn),
            },
            "app": {
                "app_name": self.app.app_name,
                "log_level": self.app.log_level,
                "log_dir": self.app.log_dir,
            },
            "executor": {
                "async_workers": self.executor.async_workers,
                "command_timeout": self.executor.command_timeout,
            },
        }


# Создание глобального экземпляра конфигурации
try:
    config = Config()
except Exception as e:
    print(f"CRITICAL ERROR during config initialization: {e}", file=sys.stderr)
    sys.exit(1)

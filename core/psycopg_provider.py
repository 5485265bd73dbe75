"""
MODULE: core.psycopg_provider
RESPONSIBILITY: Default PostgreSQL provider (psycopg2).
ALLOWED: psycopg2, core.providers, config.settings.
FORBIDDEN: Business logic, connection pooling.
ERRORS: psycopg2.Error (propagated unchanged).

Провайдер по умолчанию для DbOperation: PostgreSQL через psycopg2.
"""

import threading
from typing import Optional

import psycopg2

from config.settings import config
from core.providers import DbApiProviderFactory


class PsycopgProviderFactory(DbApiProviderFactory):
    """Фабрика провайдера psycopg2 (paramstyle pyformat: %(name)s)"""

    def __init__(self, async_workers: Optional[int] = None, default_command_timeout: Optional[float] = None):
        super().__init__(
            psycopg2.connect,
            paramstyle="pyformat",
            name="psycopg2",
            async_workers=async_workers or config.executor.async_workers,
            default_command_timeout=(
                default_command_timeout
                if default_command_timeout is not None
                else config.executor.command_timeout
            ),
        )

    def configure_connection(self, raw) -> None:
        raw.autocommit = True

    def apply_timeout(self, cursor, seconds: float) -> None:
        """Таймаут через statement_timeout (в миллисекундах) для текущей сессии"""
        cursor.execute("SET statement_timeout = %s", (int(seconds * 1000),))


_default_factory: Optional[PsycopgProviderFactory] = None
_default_lock = threading.Lock()


def default_provider_factory() -> PsycopgProviderFactory:
    """Общий для процесса экземпляр фабрики psycopg2"""
    global _default_factory
    with _default_lock:
        if _default_factory is None:
            _default_factory = PsycopgProviderFactory()
        return _default_factory

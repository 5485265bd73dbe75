"""
Утилиты: настройка логирования и логгер команд.
"""
from .logger_config import get_logger, setup_logging
from .sql_logger import SqlLogger

__all__ = [
    'get_logger',
    'setup_logging',
    'SqlLogger',
]

"""
MODULE: core.exceptions
RESPONSIBILITY: Define core-specific exception classes.
ALLOWED: Inheriting from SqlCommandError.
FORBIDDEN: Business logic, wrapping driver exceptions.
ERRORS: None.

Пользовательские исключения выполнения SQL-команд.

Ошибки драйвера (подключение, выполнение запроса) и ошибки callback
НЕ оборачиваются этими классами и доходят до вызывающего кода как есть.
"""


class SqlCommandError(Exception):
    """Базовое исключение пакета"""
    pass


class ConfigurationError(SqlCommandError):
    """Ошибка конфигурации (пустая строка подключения, нет логгера и т.п.)"""
    pass


class ProviderError(SqlCommandError):
    """Неверное использование объектов провайдера"""
    pass


class UnsupportedParameterError(ProviderError):
    """Провайдер не умеет связывать параметр такого направления"""

    def __init__(self, message: str, parameter_name: str = None):
        super().__init__(message)
        self.parameter_name = parameter_name

"""
MODULE: core.providers
RESPONSIBILITY: Provider factory over any DB-API 2.0 driver.
ALLOWED: DB-API connect callables, contextlib, ThreadPoolExecutor, loguru.
FORBIDDEN: Business logic, transaction management, retries.
ERRORS: ProviderError, UnsupportedParameterError, ConfigurationError.

Провайдер на основе DB-API 2.0

DbApiProviderFactory оборачивает функцию connect любого DB-API драйвера
(psycopg2, sqlite3 и т.п.) и выдаёт объекты, которые ожидает DbOperation:
соединение, команду, курсор чтения и параметры.

Соединение создаётся закрытым; драйверное подключение появляется только
в open() и переводится в autocommit, так как транзакциями управляет
вызывающий код, а не этот модуль.
"""

import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import closing
from functools import partial
from typing import Any, Callable, List, Optional, Tuple, Union

from loguru import logger

from core.exceptions import ConfigurationError, ProviderError, UnsupportedParameterError
from core.interfaces import CommandType
from core.parameters import ParameterDirection


PARAMSTYLES = ("qmark", "numeric", "named", "format", "pyformat")
MAPPING_PARAMSTYLES = ("named", "pyformat")

_UNBINDABLE = (ParameterDirection.OUTPUT, ParameterDirection.RETURN_VALUE)


class DbApiParameter:
    """Параметр провайдера: изменяемый объект, заполняется при клонировании"""

    def __init__(self):
        self.parameter_name: str = ""
        self.value: Any = None
        self.db_type: Optional[str] = None
        self.direction: ParameterDirection = ParameterDirection.INPUT

    @property
    def bind_name(self) -> str:
        return self.parameter_name.lstrip("@:$%")

    def __repr__(self) -> str:
        return f"DbApiParameter({self.parameter_name!r}, {self.value!r})"


class DbApiParameterCollection:
    """Упорядоченная коллекция параметров команды (порядок добавления = порядок связывания)"""

    def __init__(self):
        self._items: List[DbApiParameter] = []

    def add(self, parameter: DbApiParameter) -> DbApiParameter:
        self._items.append(parameter)
        return parameter

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> DbApiParameter:
        return self._items[index]


class DbApiDataReader:
    """
    Однопроходный курсор по результату

    Строки читаются по одной через fetchone(), результат целиком
    в память не загружается.
    """

    def __init__(self, cursor):
        self._cursor = cursor
        self._row: Optional[Tuple[Any, ...]] = None
        # DML без результата: fetchone() у psycopg2 бросает ProgrammingError
        self._has_result = cursor.description is not None
        description = cursor.description or ()
        self._names: List[str] = [column[0] for column in description]

    @property
    def field_count(self) -> int:
        return len(self._names)

    @property
    def is_closed(self) -> bool:
        return self._cursor is None

    def read(self) -> bool:
        if self._cursor is None or not self._has_result:
            return False
        row = self._cursor.fetchone()
        self._row = row
        return row is not None

    def get_name(self, ordinal: int) -> str:
        return self._names[ordinal]

    def get_ordinal(self, name: str) -> int:
        try:
            return self._names.index(name)
        except ValueError:
            raise KeyError(name) from None

    def get_value(self, ordinal: int) -> Any:
        if self._row is None:
            raise ProviderError("Нет текущей строки: сначала вызовите read()")
        return self._row[ordinal]

    def __getitem__(self, key: Union[int, str]) -> Any:
        if isinstance(key, str):
            key = self.get_ordinal(key)
        return self.get_value(key)

    def close(self) -> None:
        cursor, self._cursor = self._cursor, None
        self._row = None
        if cursor is not None:
            cursor.close()


class DbApiCommand:
    """Команда, выполняемая через курсор DB-API"""

    def __init__(self, connection: "DbApiConnection"):
        self._connection = connection
        self._parameters = DbApiParameterCollection()
        self.command_text: str = ""
        self.command_type: CommandType = CommandType.TEXT
        self.command_timeout: Optional[float] = connection.factory.default_command_timeout

    @property
    def connection(self) -> "DbApiConnection":
        return self._connection

    @property
    def parameters(self) -> DbApiParameterCollection:
        return self._parameters

    def bind_arguments(self) -> Union[None, dict, tuple]:
        """
        Аргументы для cursor.execute() в стиле paramstyle драйвера

        Returns:
            dict для named/pyformat, tuple для позиционных стилей,
            None если параметров нет

        Raises:
            UnsupportedParameterError: Для OUTPUT/RETURN_VALUE параметров
        """
        if not len(self._parameters):
            return None

        for parameter in self._parameters:
            if parameter.direction in _UNBINDABLE:
                raise UnsupportedParameterError(
                    f"Параметр {parameter.parameter_name} с направлением "
                    f"{parameter.direction.value} не поддерживается DB-API",
                    parameter_name=parameter.parameter_name,
                )

        if self._connection.factory.paramstyle in MAPPING_PARAMSTYLES:
            return {parameter.bind_name: parameter.value for parameter in self._parameters}
        return tuple(parameter.value for parameter in self._parameters)

    def _open_cursor(self):
        cursor = self._connection.raw.cursor()
        if self.command_timeout is not None:
            self._connection.factory.apply_timeout(cursor, self.command_timeout)
        return cursor

    def _run(self, cursor) -> None:
        arguments = self.bind_arguments()

        if self.command_type is CommandType.STORED_PROCEDURE:
            callproc = getattr(cursor, "callproc", None)
            if callproc is None:
                raise ProviderError(
                    f"Драйвер {self._connection.factory.name} не поддерживает вызов процедур"
                )
            callproc(self.command_text, arguments or ())
        elif arguments is None:
            cursor.execute(self.command_text)
        else:
            cursor.execute(self.command_text, arguments)

    def execute_scalar(self) -> Any:
        with closing(self._open_cursor()) as cursor:
            self._run(cursor)
            if cursor.description is None:
                return None
            row = cursor.fetchone()
            return row[0] if row else None

    def execute_non_query(self) -> int:
        with closing(self._open_cursor()) as cursor:
            self._run(cursor)
            return cursor.rowcount

    def execute_reader(self) -> DbApiDataReader:
        cursor = self._open_cursor()
        try:
            self._run(cursor)
        except Exception:
            cursor.close()
            raise
        return DbApiDataReader(cursor)

    def execute_non_query_async(self) -> "Future[int]":
        factory = self._connection.factory
        if not factory.thread_safe:
            raise ProviderError(
                f"Подключения драйвера {factory.name} привязаны к потоку: "
                f"асинхронное выполнение недоступно"
            )
        return factory.submit(self.execute_non_query)


class DbApiConnection:
    """Соединение провайдера; драйверное подключение создаётся в open()"""

    def __init__(self, factory: "DbApiProviderFactory"):
        self._factory = factory
        self._raw = None
        self.connection_string: Optional[str] = None

    @property
    def factory(self) -> "DbApiProviderFactory":
        return self._factory

    @property
    def is_open(self) -> bool:
        return self._raw is not None

    @property
    def raw(self):
        """Драйверное подключение (только для открытого соединения)"""
        if self._raw is None:
            raise ProviderError("Соединение не открыто")
        return self._raw

    def create_command(self) -> DbApiCommand:
        return DbApiCommand(self)

    def open(self) -> None:
        if self._raw is not None:
            raise ProviderError("Соединение уже открыто")
        if not self.connection_string:
            raise ProviderError("Строка подключения не задана")

        raw = self._factory.connect(self.connection_string)
        try:
            self._factory.configure_connection(raw)
        except Exception:
            raw.close()
            raise
        self._raw = raw

    def close(self) -> None:
        raw = self._raw
        if raw is None:
            return
        # при ошибке закрытия подключение остаётся, close() можно повторить
        raw.close()
        self._raw = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _detect_thread_safe(connect: Callable[[str], Any]) -> bool:
    """sqlite3 по умолчанию запрещает работу с подключением из чужого потока"""
    if isinstance(connect, partial):
        if connect.func is sqlite3.connect:
            return connect.keywords.get("check_same_thread", True) is False
        return _detect_thread_safe(connect.func)
    return connect is not sqlite3.connect


class DbApiProviderFactory:
    """
    Фабрика провайдера для DB-API 2.0 драйвера

    Attributes:
        connect: Функция драйвера, принимающая строку подключения
        paramstyle: Стиль параметров драйвера (см. PEP 249)
        name: Имя провайдера для логов и имён потоков
        default_command_timeout: Таймаут команды по умолчанию (секунды)
        thread_safe: Можно ли закрывать и использовать подключение из другого
            потока. Без этого execute_non_query_async недоступен. None означает
            автоопределение: sqlite3.connect без check_same_thread=False
            считается привязанным к потоку, остальные драйверы нет
    """

    def __init__(
        self,
        connect: Callable[[str], Any],
        paramstyle: str = "pyformat",
        name: Optional[str] = None,
        async_workers: int = 4,
        default_command_timeout: Optional[float] = None,
        thread_safe: Optional[bool] = None,
    ):
        if paramstyle not in PARAMSTYLES:
            raise ConfigurationError(f"Неизвестный paramstyle: {paramstyle}")
        if async_workers < 1:
            raise ConfigurationError("async_workers должен быть положительным")

        self.connect = connect
        self.paramstyle = paramstyle
        self.name = name or getattr(connect, "__module__", None) or "dbapi"
        self.default_command_timeout = default_command_timeout
        self.thread_safe = _detect_thread_safe(connect) if thread_safe is None else thread_safe
        self._async_workers = async_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def create_connection(self) -> DbApiConnection:
        return DbApiConnection(self)

    def create_parameter(self) -> DbApiParameter:
        return DbApiParameter()

    def configure_connection(self, raw) -> None:
        """Перевод подключения в autocommit"""
        if hasattr(raw, "autocommit"):
            raw.autocommit = True
        elif hasattr(raw, "isolation_level"):
            raw.isolation_level = None

    def apply_timeout(self, cursor, seconds: float) -> None:
        """Таймаут команды; в общем DB-API способа нет, поэтому ничего не делаем"""
        pass

    def submit(self, func: Callable[[], Any]) -> Future:
        """Запуск функции в пуле потоков провайдера"""
        with self._lock:
            if self._executor is None:
                logger.debug(f"Создание пула потоков провайдера {self.name} ({self._async_workers})")
                self._executor = ThreadPoolExecutor(
                    max_workers=self._async_workers,
                    thread_name_prefix=f"{self.name}-async",
                )
            executor = self._executor
        return executor.submit(func)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

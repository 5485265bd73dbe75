"""
Тестовые двойники провайдера и логгера.

FakeProviderFactory записывает все события (open, execute, close) в общий
список events, чтобы тесты могли проверять порядок шагов выполнения.
"""

from concurrent.futures import Future
from typing import Any, List, Optional, Sequence, Tuple

from core.interfaces import CommandType
from core.parameters import ParameterDirection


class FakeParameter:
    def __init__(self):
        self.parameter_name = ""
        self.value = None
        self.db_type = None
        self.direction = ParameterDirection.INPUT


class FakeParameterCollection(list):
    def add(self, parameter):
        self.append(parameter)
        return parameter


class FakeReader:
    def __init__(self, factory: "FakeProviderFactory", rows: Sequence[Tuple[Any, ...]]):
        self._factory = factory
        self._rows = list(rows)
        self._index = -1
        self.closed = False

    @property
    def field_count(self) -> int:
        return len(self._rows[0]) if self._rows else 0

    def read(self) -> bool:
        if self._factory.read_error_at is not None and self._index + 1 == self._factory.read_error_at:
            raise self._factory.read_error
        self._index += 1
        return self._index < len(self._rows)

    def get_name(self, ordinal: int) -> str:
        return f"col{ordinal}"

    def get_value(self, ordinal: int) -> Any:
        return self._rows[self._index][ordinal]

    def __getitem__(self, key):
        return self.get_value(key)

    def close(self) -> None:
        self.closed = True
        self._factory.events.append("reader.close")


class FakeCommand:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self.parameters = FakeParameterCollection()
        self.command_text = ""
        self.command_type = CommandType.TEXT
        self.command_timeout = None
        self.bound: Optional[List[Tuple[str, Any]]] = None

    def _start(self, kind: str) -> None:
        factory = self.connection.factory
        if not self.connection.is_open:
            raise AssertionError("команда выполнена на закрытом соединении")
        self.bound = [(p.parameter_name, p.value) for p in self.parameters]
        factory.events.append(f"execute:{kind}")
        factory.executed.append(self)

    def execute_scalar(self):
        self._start("scalar")
        factory = self.connection.factory
        if factory.execute_error is not None:
            raise factory.execute_error
        return factory.rows[0][0] if factory.rows else None

    def execute_non_query(self) -> int:
        self._start("non_query")
        factory = self.connection.factory
        if factory.execute_error is not None:
            raise factory.execute_error
        return factory.affected_rows

    def execute_reader(self) -> FakeReader:
        self._start("reader")
        factory = self.connection.factory
        if factory.execute_error is not None:
            raise factory.execute_error
        reader = FakeReader(factory, factory.rows)
        factory.readers.append(reader)
        return reader

    def execute_non_query_async(self) -> Future:
        self._start("async")
        factory = self.connection.factory
        if factory.async_launch_error is not None:
            raise factory.async_launch_error
        future = Future()
        factory.pending.append(future)
        return future


class FakeConnection:
    def __init__(self, factory: "FakeProviderFactory"):
        self.factory = factory
        self.connection_string = None
        self.is_open = False
        self.open_count = 0
        self.close_count = 0

    def create_command(self) -> FakeCommand:
        self.factory.events.append("create_command")
        return FakeCommand(self)

    def open(self) -> None:
        self.factory.events.append("open")
        if self.factory.open_error is not None:
            raise self.factory.open_error
        self.open_count += 1
        self.is_open = True

    def close(self) -> None:
        self.factory.events.append("close")
        self.close_count += 1
        self.is_open = False


class FakeProviderFactory:
    """Провайдер, который ничего не выполняет, а только записывает вызовы"""

    def __init__(self, rows=(), affected_rows: int = 0):
        self.rows = list(rows)
        self.affected_rows = affected_rows
        self.open_error: Optional[BaseException] = None
        self.execute_error: Optional[BaseException] = None
        self.async_launch_error: Optional[BaseException] = None
        self.read_error: Optional[BaseException] = None
        self.read_error_at: Optional[int] = None
        self.connections: List[FakeConnection] = []
        self.executed: List[FakeCommand] = []
        self.readers: List[FakeReader] = []
        self.pending: List[Future] = []
        self.created_parameters: List[FakeParameter] = []
        self.events: List[str] = []

    def create_connection(self) -> FakeConnection:
        connection = FakeConnection(self)
        self.connections.append(connection)
        self.events.append("create_connection")
        return connection

    def create_parameter(self) -> FakeParameter:
        parameter = FakeParameter()
        self.created_parameters.append(parameter)
        return parameter


class FakeLogger:
    def __init__(self, enabled: bool = True, fail_on_error: bool = False):
        self.enabled = enabled
        self.fail_on_error = fail_on_error
        self.verbose: List[str] = []
        self.errors: List[Tuple[str, Optional[BaseException]]] = []
        self.level_checks: List[str] = []

    def is_enabled(self, level: str) -> bool:
        self.level_checks.append(level)
        return self.enabled

    def write_verbose(self, message: str) -> None:
        self.verbose.append(message)

    def write_error(self, message: str, exc: Optional[BaseException] = None) -> None:
        self.errors.append((message, exc))
        if self.fail_on_error:
            raise RuntimeError("логгер недоступен")


class ExplodingValue:
    """Значение, которое нельзя превратить в строку"""

    def __str__(self) -> str:
        raise AssertionError("форматирование параметров при выключенном логировании")

    def __repr__(self) -> str:
        return self.__str__()

    def __format__(self, spec: str) -> str:
        return self.__str__()

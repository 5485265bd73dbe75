"""
MODULE: core.interfaces
RESPONSIBILITY: Define Protocols for providers and the logging capability.
ALLOWED: Typing imports, Protocol.
FORBIDDEN: Implementation details, concrete classes (except enums).
ERRORS: None.

Интерфейсы (Protocol) провайдера базы данных и логгера

Определяют контракт, который DbOperation требует от драйвера:
фабрика создаёт соединения и параметры, соединение создаёт команды,
команда выполняется и отдаёт курсор. Конкретный драйвер подставляется
через фабрику, что позволяет использовать тестовые двойники.
"""

from concurrent.futures import Future
from enum import Enum
from typing import Protocol, Any, Optional, Iterator, Union


class CommandType(Enum):
    """Как интерпретировать текст команды"""
    TEXT = "Text"
    STORED_PROCEDURE = "StoredProcedure"


class IDbDataParameter(Protocol):
    """Параметр в представлении конкретного провайдера (изменяемый)"""

    parameter_name: str
    value: Any
    db_type: Optional[str]
    direction: Any


class IDbParameterCollection(Protocol):
    """Упорядоченная коллекция параметров команды"""

    def add(self, parameter: IDbDataParameter) -> IDbDataParameter:
        ...

    def __iter__(self) -> Iterator[IDbDataParameter]:
        ...

    def __len__(self) -> int:
        ...


class IDataReader(Protocol):
    """Однопроходный курсор по результату запроса"""

    @property
    def field_count(self) -> int:
        ...

    def read(self) -> bool:
        """Переход к следующей строке; False, если строк больше нет"""
        ...

    def get_name(self, ordinal: int) -> str:
        ...

    def get_value(self, ordinal: int) -> Any:
        ...

    def __getitem__(self, key: Union[int, str]) -> Any:
        ...

    def close(self) -> None:
        ...


class IDbCommand(Protocol):
    """Команда, привязанная к открытому соединению"""

    command_text: str
    command_type: Any
    command_timeout: Optional[float]

    @property
    def parameters(self) -> IDbParameterCollection:
        ...

    def execute_scalar(self) -> Any:
        ...

    def execute_non_query(self) -> int:
        ...

    def execute_reader(self) -> IDataReader:
        ...

    def execute_non_query_async(self) -> "Future[int]":
        ...


class IDbConnection(Protocol):
    """Соединение с БД (создаётся закрытым)"""

    connection_string: Optional[str]

    def create_command(self) -> IDbCommand:
        ...

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...


class IDbProviderFactory(Protocol):
    """Фабрика провайдера: соединения и параметры конкретного драйвера"""

    def create_connection(self) -> IDbConnection:
        ...

    def create_parameter(self) -> IDbDataParameter:
        ...


class ISqlLogger(Protocol):
    """
    Логгер, принимающий сообщения с уровнем.

    Должен быть безопасен для вызова из чужого потока: write_error
    вызывается из продолжения асинхронной операции.
    """

    def is_enabled(self, level: str) -> bool:
        ...

    def write_verbose(self, message: str) -> None:
        ...

    def write_error(self, message: str, exc: Optional[BaseException] = None) -> None:
        ...

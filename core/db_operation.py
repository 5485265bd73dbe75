"""
MODULE: core.db_operation
RESPONSIBILITY: Run one parameterized SQL command with guaranteed connection release.
ALLOWED: core.interfaces, core.parameters, core providers, concurrent.futures.
FORBIDDEN: Retries, pooling, transactions, schema-specific queries.
ERRORS: ConfigurationError; driver and callback errors propagate unchanged.

Выполнение одной SQL-команды

DbOperation хранит строку подключения, текст команды, список параметров
и логгер. Каждый вызов execute_* проходит один и тот же путь:
создать соединение -> создать команду и связать параметры -> открыть ->
выполнить -> закрыть соединение. Соединение закрывается ровно один раз
на любом пути выхода, включая исключения и асинхронные ошибки.

Объект не хранит состояния конкретного выполнения, поэтому его можно
вызывать повторно и из нескольких потоков одновременно.
"""

from concurrent.futures import Future
from contextlib import closing
from typing import Any, Callable, List, Optional, TypeVar

from config.settings import Config, config
from core.exceptions import ConfigurationError
from core.interfaces import (
    IDataReader,
    IDbCommand,
    IDbConnection,
    IDbProviderFactory,
    ISqlLogger,
)
from core.parameters import DbParameter
from core.psycopg_provider import default_provider_factory


T = TypeVar("T")

VERBOSE_LEVEL = "DEBUG"

RecordCallback = Callable[[IDataReader, "DbOperation"], None]
CommandAction = Callable[[IDbCommand], None]


def _unwrap(exc: BaseException) -> BaseException:
    """Достаём единственное исключение из группы, как его бросил драйвер"""
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return exc


class DbOperation:
    """
    Одна параметризованная SQL-команда

    Attributes:
        logger_prefix: Метка, добавляемая в начало строк лога
        parameters: Упорядоченный список параметров (порядок = порядок связывания)
    """

    def __init__(
        self,
        connection_string: str,
        command_text: str,
        logger: ISqlLogger,
        *parameters: DbParameter,
        provider_factory: Optional[IDbProviderFactory] = None,
    ):
        """
        Args:
            connection_string: Строка подключения (непустая)
            command_text: Текст команды; плейсхолдеры параметров пишет вызывающий код
            logger: Логгер с is_enabled/write_verbose/write_error
            parameters: Начальные параметры (None пропускаются)
            provider_factory: Фабрика провайдера; по умолчанию psycopg2

        Raises:
            ConfigurationError: Пустая строка подключения, текст команды или нет логгера
        """
        if not connection_string:
            raise ConfigurationError("Строка подключения не задана")
        if not command_text:
            raise ConfigurationError("Текст команды не задан")
        if logger is None:
            raise ConfigurationError("Логгер не задан")

        self._connection_string = connection_string
        self._command_text = command_text
        self._logger = logger
        self._provider_factory = provider_factory or default_provider_factory()
        self._parameters: List[DbParameter] = [p for p in parameters if p is not None]
        self.logger_prefix: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        command_text: str,
        logger: ISqlLogger,
        *parameters: DbParameter,
        provider_factory: Optional[IDbProviderFactory] = None,
        settings: Optional[Config] = None,
    ) -> "DbOperation":
        """Создание команды со строкой подключения из конфигурации (.env)"""
        settings = settings or config
        return cls(settings.connection_string, command_text, logger, *parameters, provider_factory=provider_factory)

    @property
    def connection_string(self) -> str:
        return self._connection_string

    @property
    def command_text(self) -> str:
        return self._command_text

    @property
    def logger(self) -> ISqlLogger:
        return self._logger

    @property
    def provider_factory(self) -> IDbProviderFactory:
        return self._provider_factory

    @property
    def parameters(self) -> List[DbParameter]:
        return self._parameters

    def execute_scalar(self) -> Any:
        """Первый столбец первой строки или None"""
        return self._execute(lambda command: command.execute_scalar())

    def execute_non_query(self) -> int:
        """Количество затронутых строк по данным драйвера"""
        return self._execute(lambda command: command.execute_non_query())

    def execute_reader(self, process_record: RecordCallback) -> int:
        """
        Построчная обработка результата

        process_record вызывается для каждой строки в порядке курсора
        с живым курсором и самой командой. Исключение из callback прерывает
        чтение, соединение закрывается, исключение уходит вызывающему коду.

        Returns:
            Количество обработанных строк
        """
        return self._execute_reader(process_record, None)

    def _execute_reader(self, process_record: RecordCallback, command_action: Optional[CommandAction]) -> int:
        """Вариант для наследников: command_action настраивает команду до выполнения"""

        def read_all(command: IDbCommand) -> int:
            count = 0
            with closing(command.execute_reader()) as reader:
                while reader.read():
                    count += 1
                    process_record(reader, self)
            return count

        return self._execute(read_all, command_action)

    def execute_non_query_async(self) -> "Future[int]":
        """
        Неблокирующее выполнение команды без результата

        Ошибки подключения бросаются сразу из этого вызова. Ошибки выполнения
        приходят через возвращённый Future с исходным исключением драйвера.
        Соединение закрывается после завершения команды.
        """
        result: "Future[int]" = Future()
        connection = self._provider_factory.create_connection()
        try:
            pending = self._prepare(connection).execute_non_query_async()
        except BaseException:
            connection.close()
            raise

        pending.add_done_callback(lambda done: self._on_success(done, result))
        pending.add_done_callback(lambda done: self._on_fault(done, result))
        pending.add_done_callback(lambda done: connection.close())
        return result

    def _on_success(self, done: Future, result: Future) -> None:
        if not done.cancelled() and done.exception() is None:
            result.set_result(done.result())

    def _on_fault(self, done: Future, result: Future) -> None:
        if done.cancelled():
            result.cancel()
            return

        exc = done.exception()
        if exc is None:
            return

        exc = _unwrap(exc)
        try:
            self._logger.write_error(f"{self._prefix()}Ошибка выполнения команды: {exc}", exc)
        finally:
            result.set_exception(exc)

    def create_command(self, connection: IDbConnection) -> IDbCommand:
        """Новая команда: текст как есть, параметры клонируются в порядке списка"""
        command = connection.create_command()
        command.command_text = self._command_text

        for parameter in self._parameters:
            command.parameters.add(parameter.clone(self._provider_factory))

        return command

    def _prepare(self, connection: IDbConnection, command_action: Optional[CommandAction] = None) -> IDbCommand:
        connection.connection_string = self._connection_string
        command = self.create_command(connection)
        if command_action is not None:
            command_action(command)
        connection.open()
        self._log_command(command)
        return command

    def _execute(self, command_func: Callable[[IDbCommand], T], command_action: Optional[CommandAction] = None) -> T:
        with closing(self._provider_factory.create_connection()) as connection:
            command = self._prepare(connection, command_action)
            return command_func(command)

    def _prefix(self) -> str:
        return f"{self.logger_prefix} " if self.logger_prefix else ""

    def _log_command(self, command: IDbCommand) -> None:
        if not self._logger.is_enabled(VERBOSE_LEVEL):
            return

        command_type = getattr(command.command_type, "value", command.command_type)
        parameters = "".join(
            f" [Name={p.parameter_name}, Value={p.value}]" for p in command.parameters
        )
        self._logger.write_verbose(
            f"{self._prefix()}Created DbCommand: CommandType={command_type}, "
            f"CommandText={command.command_text}, Parameters={parameters}"
        )

from concurrent.futures import Future

import pytest

from core.db_operation import DbOperation
from tests.conftest import CONNECTION_STRING
from tests.fakes import FakeLogger, FakeProviderFactory


class DeadlockError(Exception):
    """Ошибка драйвера для тестов"""


def make_operation(factory, logger=None) -> DbOperation:
    return DbOperation(
        CONNECTION_STRING,
        "DELETE FROM T WHERE Id = @id",
        logger or FakeLogger(),
        provider_factory=factory,
    )


class TestExecuteNonQueryAsync:
    def test_success_sets_result_and_releases(self) -> None:
        factory = FakeProviderFactory()
        future = make_operation(factory).execute_non_query_async()

        assert isinstance(future, Future)
        assert not future.done()
        assert factory.connections[0].close_count == 0

        factory.pending[0].set_result(4)

        assert future.result(timeout=1) == 4
        assert factory.connections[0].close_count == 1

    def test_connection_stays_open_until_completion(self) -> None:
        factory = FakeProviderFactory()
        make_operation(factory).execute_non_query_async()

        assert factory.connections[0].is_open
        assert factory.events[-1] == "execute:async"

        factory.pending[0].set_result(0)

        assert factory.events[-1] == "close"

    def test_fault_delivers_original_exception(self) -> None:
        """Future получает то же исключение, что бросил драйвер, без обёртки"""
        factory = FakeProviderFactory()
        logger = FakeLogger()
        future = make_operation(factory, logger).execute_non_query_async()
        error = DeadlockError("deadlock detected")

        factory.pending[0].set_exception(error)

        assert future.exception(timeout=1) is error
        with pytest.raises(DeadlockError):
            future.result(timeout=1)
        assert logger.errors[0][1] is error
        assert factory.connections[0].close_count == 1

    def test_single_exception_group_is_unwrapped(self) -> None:
        factory = FakeProviderFactory()
        future = make_operation(factory).execute_non_query_async()
        error = DeadlockError("deadlock detected")

        factory.pending[0].set_exception(ExceptionGroup("driver", [error]))

        assert future.exception(timeout=1) is error

    def test_logger_failure_does_not_change_exception(self) -> None:
        factory = FakeProviderFactory()
        logger = FakeLogger(fail_on_error=True)
        future = make_operation(factory, logger).execute_non_query_async()
        error = DeadlockError("deadlock detected")

        factory.pending[0].set_exception(error)

        assert future.exception(timeout=1) is error
        assert factory.connections[0].close_count == 1

    def test_open_failure_is_raised_synchronously(self) -> None:
        factory = FakeProviderFactory()
        factory.open_error = ConnectionRefusedError("server unreachable")

        with pytest.raises(ConnectionRefusedError):
            make_operation(factory).execute_non_query_async()

        assert factory.connections[0].close_count == 1
        assert factory.pending == []

    def test_launch_failure_is_raised_synchronously(self) -> None:
        factory = FakeProviderFactory()
        factory.async_launch_error = DeadlockError("launch failed")

        with pytest.raises(DeadlockError):
            make_operation(factory).execute_non_query_async()

        assert factory.connections[0].close_count == 1

    def test_cancelled_execution_cancels_result(self) -> None:
        factory = FakeProviderFactory()
        future = make_operation(factory).execute_non_query_async()

        factory.pending[0].cancel()

        assert future.cancelled()
        assert factory.connections[0].close_count == 1

    def test_parallel_calls_use_separate_connections(self) -> None:
        factory = FakeProviderFactory()
        operation = make_operation(factory)

        first = operation.execute_non_query_async()
        second = operation.execute_non_query_async()
        factory.pending[1].set_result(2)
        factory.pending[0].set_result(1)

        assert (first.result(timeout=1), second.result(timeout=1)) == (1, 2)
        assert [c.close_count for c in factory.connections] == [1, 1]

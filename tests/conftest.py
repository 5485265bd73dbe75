import sqlite3
from functools import partial

import pytest

from core.parameters import DbParameter
from core.providers import DbApiProviderFactory
from tests.fakes import FakeLogger, FakeProviderFactory


CONNECTION_STRING = "host=localhost dbname=test user=test password=test port=5432"


@pytest.fixture
def fake_factory() -> FakeProviderFactory:
    """Фабрика провайдера без БД"""
    return FakeProviderFactory()


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Логгер с включённым подробным уровнем"""
    return FakeLogger(enabled=True)


@pytest.fixture
def update_parameters() -> list:
    return [DbParameter("@x", 5), DbParameter("@id", 1)]


@pytest.fixture
def sqlite_factory():
    """Настоящий DB-API провайдер поверх sqlite3"""
    factory = DbApiProviderFactory(
        partial(sqlite3.connect, check_same_thread=False),
        paramstyle="named",
        name="sqlite3",
        async_workers=2,
    )
    yield factory
    factory.shutdown()


@pytest.fixture
def sqlite_db(tmp_path, sqlite_factory) -> str:
    """Файл БД с таблицей T из трёх строк; возвращает строку подключения"""
    path = str(tmp_path / "test.db")
    connection = sqlite3.connect(path)
    try:
        connection.execute("CREATE TABLE T (Id INTEGER PRIMARY KEY, X INTEGER, Name TEXT)")
        connection.executemany(
            "INSERT INTO T (Id, X, Name) VALUES (?, ?, ?)",
            [(1, 10, "first"), (2, 20, "second"), (3, 30, "third")],
        )
        connection.commit()
    finally:
        connection.close()
    return path

"""
MODULE: core.parameters
RESPONSIBILITY: Immutable description of one bound SQL parameter.
ALLOWED: dataclasses, enum, core.interfaces.
FORBIDDEN: Driver imports, connection handling.
ERRORS: None.

Параметр SQL-команды

DbParameter - неизменяемое значение (имя, значение, тип, направление).
Для каждого выполнения параметр клонируется в объект конкретного
провайдера, поэтому один и тот же список параметров можно
переиспользовать сколько угодно раз.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.interfaces import IDbProviderFactory, IDbDataParameter


_NAME_MARKERS = "@:$%"


class ParameterDirection(Enum):
    """Направление параметра"""
    INPUT = "input"
    OUTPUT = "output"
    INPUT_OUTPUT = "input_output"
    RETURN_VALUE = "return_value"


@dataclass(frozen=True)
class DbParameter:
    """
    Описание параметра команды

    Attributes:
        name: Имя параметра в тексте команды (например "@id")
        value: Значение
        db_type: Тег типа конкретного провайдера (опционально)
        direction: Направление параметра
    """
    name: str
    value: Any = None
    db_type: Optional[str] = None
    direction: ParameterDirection = ParameterDirection.INPUT

    @property
    def bind_name(self) -> str:
        """Имя без префикса-маркера (@, :, $, %)"""
        return self.name.lstrip(_NAME_MARKERS)

    def clone(self, provider_factory: IDbProviderFactory) -> IDbDataParameter:
        """
        Создание параметра провайдера с теми же именем, значением и типом

        Args:
            provider_factory: Фабрика провайдера, для которого создаётся параметр

        Returns:
            Новый объект параметра провайдера
        """
        native = provider_factory.create_parameter()
        native.parameter_name = self.name
        native.db_type = self.db_type
        native.value = self.value
        native.direction = self.direction
        return native

    def __str__(self) -> str:
        return f"{self.name}={self.value!r}"

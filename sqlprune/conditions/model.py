"""
Модели данных для системы условий.

Содержит классы для представления узлов AST условий, которыми
размечены ветки <if>/<elsif> в SQL-шаблонах.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union


class ConditionType(Enum):
    """Типы условий в системе."""
    VARIABLE = "variable"
    LITERAL = "literal"
    AND = "and"
    OR = "or"
    NOT = "not"
    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    GROUP = "group"  # для явной группировки в скобках


COMPARISON_TYPES = frozenset({
    ConditionType.EQ,
    ConditionType.NE,
    ConditionType.LT,
    ConditionType.GT,
    ConditionType.LE,
    ConditionType.GE,
})


@dataclass
class Condition(ABC):
    """Базовый абстрактный класс для всех условий."""

    @abstractmethod
    def get_type(self) -> ConditionType:
        """Возвращает тип условия."""
        pass

    def __str__(self) -> str:
        """Строковое представление условия."""
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        """Внутренний метод для создания строкового представления."""
        pass


@dataclass
class VariableCondition(Condition):
    """
    Ссылка на параметр: $name

    Значение берётся из привязок без учёта регистра имени.
    """
    name: str

    def get_type(self) -> ConditionType:
        return ConditionType.VARIABLE

    def _to_string(self) -> str:
        return f"${self.name}"


@dataclass
class LiteralCondition(Condition):
    """
    Литерал: "text" или число.

    Числа хранятся как Decimal, чтобы сравнение не зависело
    от двоичного представления float.
    """
    value: Union[str, Decimal]

    def get_type(self) -> ConditionType:
        return ConditionType.LITERAL

    def _to_string(self) -> str:
        if isinstance(self.value, Decimal):
            return str(self.value)
        return f'"{self.value}"'


@dataclass
class GroupCondition(Condition):
    """
    Группа условий в скобках: (condition)

    Используется для явной группировки и изменения приоритета операторов.
    """
    condition: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.GROUP

    def _to_string(self) -> str:
        return f"({self.condition})"


@dataclass
class NotCondition(Condition):
    """
    Отрицание условия: not(condition)

    Инвертирует логическое значение вложенного условия.
    """
    condition: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.NOT

    def _to_string(self) -> str:
        return f"not({self.condition})"


@dataclass
class BinaryCondition(Condition):
    """
    Логическая операция: left op right

    Поддерживаемые операторы:
    - AND: истинно, если оба операнда истинны
    - OR: истинно, если хотя бы один операнд истинен
    """
    left: Condition
    right: Condition
    operator: ConditionType  # AND или OR

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        return f"{self.left} {self.operator.value} {self.right}"


@dataclass
class ComparisonCondition(Condition):
    """
    Сравнение: left op right, где op: один из =, !=, <, >, <=, >=.

    Операнды приводятся к общему виду функцией compare_values.
    """
    left: Condition
    right: Condition
    operator: ConditionType

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        return f"{self.left} {self.operator.value} {self.right}"


# Объединенный тип для всех условий
AnyCondition = Union[
    VariableCondition,
    LiteralCondition,
    GroupCondition,
    NotCondition,
    BinaryCondition,
    ComparisonCondition,
]

__all__ = [
    "Condition",
    "ConditionType",
    "COMPARISON_TYPES",
    "VariableCondition",
    "LiteralCondition",
    "GroupCondition",
    "NotCondition",
    "BinaryCondition",
    "ComparisonCondition",
]

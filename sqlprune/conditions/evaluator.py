"""
Вычислитель условных выражений.

Проходит по AST условий и вычисляет их значения по привязкам параметров.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union, cast

from .model import (
    COMPARISON_TYPES,
    Condition,
    ConditionType,
    VariableCondition,
    LiteralCondition,
    GroupCondition,
    NotCondition,
    BinaryCondition,
    ComparisonCondition,
)
from .values import compare_values, truthiness
from ..bindings import ParameterBindings


class ConditionEvaluator:
    """
    Вычислитель условных выражений.

    Принимает AST условия и привязки параметров, возвращает булево значение.
    Сам по себе состояния не хранит, поэтому один экземпляр можно
    использовать для всех условий шаблона.
    """

    def __init__(self, bindings: ParameterBindings):
        """
        Инициализирует вычислитель с привязками.

        Args:
            bindings: Значения параметров, на которые ссылаются $name
        """
        self.bindings = bindings

    def evaluate(self, condition: Condition) -> bool:
        """
        Вычисляет значение условия.

        Args:
            condition: Корневой узел AST условия

        Returns:
            Булево значение результата вычисления

        Raises:
            UnboundVariableError: Условие ссылается на непривязанный параметр
            ComparisonError: Операнды сравнения нельзя привести к общему виду
        """
        return truthiness(self._value(condition))

    def _value(self, condition: Condition) -> Any:
        """
        Вычисляет значение узла.

        Переменные и литералы возвращают сами значения, логические
        операции и сравнения возвращают bool.
        """
        condition_type = condition.get_type()

        if condition_type == ConditionType.VARIABLE:
            return self._evaluate_variable(cast(VariableCondition, condition))
        elif condition_type == ConditionType.LITERAL:
            return cast(LiteralCondition, condition).value
        elif condition_type == ConditionType.GROUP:
            return self._value(cast(GroupCondition, condition).condition)
        elif condition_type == ConditionType.NOT:
            return self._evaluate_not(cast(NotCondition, condition))
        elif condition_type == ConditionType.AND:
            return self._evaluate_and(cast(BinaryCondition, condition))
        elif condition_type == ConditionType.OR:
            return self._evaluate_or(cast(BinaryCondition, condition))
        elif condition_type in COMPARISON_TYPES:
            return self._evaluate_comparison(cast(ComparisonCondition, condition))
        else:
            raise ValueError(f"Unknown condition type: {condition_type}")

    def _evaluate_variable(self, condition: VariableCondition) -> Any:
        """Возвращает значение параметра $name."""
        return self.bindings.resolve(condition.name)

    def _evaluate_not(self, condition: NotCondition) -> bool:
        """
        Вычисляет отрицание: not(condition)

        Инвертирует логическое значение вложенного условия.
        """
        return not self.evaluate(condition.condition)

    def _evaluate_and(self, condition: BinaryCondition) -> bool:
        """
        Вычисляет логическое И: left and right

        Использует короткое вычисление: правый операнд не вычисляется,
        если левый ложен, поэтому непривязанный параметр справа
        не приводит к ошибке.
        """
        if not self.evaluate(condition.left):
            return False

        return self.evaluate(condition.right)

    def _evaluate_or(self, condition: BinaryCondition) -> bool:
        """
        Вычисляет логическое ИЛИ: left or right

        Использует короткое вычисление (short-circuit evaluation).
        """
        if self.evaluate(condition.left):
            return True

        return self.evaluate(condition.right)

    def _evaluate_comparison(self, condition: ComparisonCondition) -> bool:
        """Вычисляет сравнение двух операндов с нестрогим приведением типов."""
        left = self._value(condition.left)
        right = self._value(condition.right)
        return compare_values(left, condition.operator.value, right)


def evaluate_condition_string(
    condition_str: str,
    bindings: Optional[Union[ParameterBindings, Mapping[str, Any]]] = None,
) -> bool:
    """
    Удобная функция для вычисления условия из строки.

    Args:
        condition_str: Строка условного выражения
        bindings: Привязки параметров (ParameterBindings или обычный dict)

    Returns:
        Результат вычисления условия

    Raises:
        ConditionSyntaxError: При ошибке парсинга
        UnboundVariableError, ComparisonError: При ошибке вычисления
    """
    from .parser import ConditionParser

    parser = ConditionParser()
    ast = parser.parse(condition_str)

    evaluator = ConditionEvaluator(ParameterBindings.of(bindings))
    return evaluator.evaluate(ast)


__all__ = ["ConditionEvaluator", "evaluate_condition_string"]

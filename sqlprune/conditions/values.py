"""
Приведение значений параметров для условий.

Все операторы сравнения используют одну функцию приведения,
поэтому правила нестрогого равенства описаны и проверяются в одном месте:

- если обе стороны читаются как числа (числовые значения или строки вида
  "12", "-3.5"), они сравниваются как Decimal: "1.0" = 1 истинно;
- две даты сравниваются как даты (date приводится к полуночи, если с другой
  стороны datetime);
- во всех остальных случаях сравниваются канонические строковые формы,
  даты в ISO-8601;
- None равен только None, упорядочивающие сравнения с None ложны;
- списки, словари и прочие составные значения не сравниваются.

Разбор чисел не зависит от локали: разделитель дробной части: точка.
"""

from __future__ import annotations

import math
import operator
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from ..errors import ComparisonError

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_SCALAR_TYPES = (str, int, float, Decimal, date)

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


def is_scalar(value: Any) -> bool:
    """Проверяет, может ли значение участвовать в сравнении."""
    return value is None or isinstance(value, _SCALAR_TYPES)


def to_number(value: Any) -> Optional[Decimal]:
    """
    Пытается прочитать значение как число.

    Returns:
        Decimal или None, если значение не является числом
    """
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(repr(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_PATTERN.fullmatch(text):
            return None
        try:
            return Decimal(text)
        except InvalidOperation:
            return None
    return None


def to_text(value: Any) -> str:
    """Каноническая строковая форма скалярного значения."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, float):
        return repr(value)
    return str(value)


def truthiness(value: Any) -> bool:
    """
    Логическое значение операнда, использованного без сравнения.

    None ложно, bool берется как есть, число истинно, если не ноль.
    Любая строка или дата истинна, список истинен, если не пуст.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, (str, date)):
        return True
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    raise ComparisonError(f"Cannot use value of type {type(value).__name__} as a condition")


def compare_values(left: Any, op: str, right: Any) -> bool:
    """
    Сравнивает два значения оператором op (=, !=, <, >, <=, >=).

    Raises:
        ComparisonError: Если хотя бы одну сторону нельзя привести
            к сравнимому виду
    """
    func = _OPERATORS.get(op)
    if func is None:
        raise ValueError(f"Unknown comparison operator: {op}")

    for side in (left, right):
        if not is_scalar(side):
            raise ComparisonError(
                f"Cannot compare {_describe(left)} {op} {_describe(right)}: "
                f"{type(side).__name__} values are not comparable"
            )

    if left is None or right is None:
        if op == "=":
            return left is None and right is None
        if op == "!=":
            return not (left is None and right is None)
        return False

    if isinstance(left, date) and isinstance(right, date):
        return _compare_dates(left, op, right, func)

    left_num = to_number(left)
    right_num = to_number(right)
    if left_num is not None and right_num is not None:
        return func(left_num, right_num)

    return func(to_text(left), to_text(right))


def _compare_dates(left: date, op: str, right: date, func: Callable[[Any, Any], bool]) -> bool:
    if isinstance(left, datetime) != isinstance(right, datetime):
        left, right = _as_datetime(left), _as_datetime(right)
    try:
        return func(left, right)
    except TypeError as e:
        # naive vs aware datetime
        raise ComparisonError(f"Cannot compare {_describe(left)} {op} {_describe(right)}: {e}") from e


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def _describe(value: Any) -> str:
    text = repr(value)
    return text if len(text) <= 40 else text[:37] + "..."


__all__ = ["is_scalar", "to_number", "to_text", "truthiness", "compare_values"]

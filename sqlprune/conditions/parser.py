"""
Парсер условных выражений с рекурсивным спуском.

Строит абстрактное синтаксическое дерево (AST) из последовательности токенов.
Поддерживает приоритеты операторов и группировку в скобках.

Грамматика:
expression     → or_expression
or_expression  → and_expression ("or" and_expression)*
and_expression → comparison ("and" comparison)*
comparison     → unary (("=" | "!=" | "<" | ">" | "<=" | ">=") unary)?
unary          → "not" "(" expression ")" | primary
primary        → VARIABLE | STRING | NUMBER | "(" expression ")"
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from .lexer import ConditionLexer, Token
from .model import (
    Condition,
    ConditionType,
    VariableCondition,
    LiteralCondition,
    GroupCondition,
    NotCondition,
    BinaryCondition,
    ComparisonCondition,
)
from ..errors import ConditionSyntaxError

_COMPARISON_OPERATORS = {
    "=": ConditionType.EQ,
    "!=": ConditionType.NE,
    "<": ConditionType.LT,
    ">": ConditionType.GT,
    "<=": ConditionType.LE,
    ">=": ConditionType.GE,
}


class ConditionParser:
    """
    Парсер условных выражений с рекурсивным спуском.

    Преобразует список токенов в абстрактное синтаксическое дерево,
    соблюдая приоритеты операторов и правила группировки.
    """

    def __init__(self):
        self.lexer = ConditionLexer()
        self._text = ""
        self._tokens: List[Token] = []
        self._position = 0

    def parse(self, condition_str: str) -> Condition:
        """
        Парсит строку условия в AST.

        Args:
            condition_str: Строка условного выражения

        Returns:
            Корневой узел AST

        Raises:
            ConditionSyntaxError: При синтаксической ошибке
        """
        self._text = condition_str
        self._tokens = self.lexer.tokenize(condition_str)
        self._position = 0

        if len(self._tokens) == 1 and self._tokens[0].type == 'EOF':
            raise self._error("Empty condition", 0)

        result = self._parse_expression()

        # Проверяем, что мы достигли конца входных данных
        if not self._is_at_end():
            current = self._current_token()
            raise self._error(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_expression(self) -> Condition:
        """Парсит полное выражение (начальный символ грамматики)."""
        return self._parse_or_expression()

    def _parse_or_expression(self) -> Condition:
        """Парсит выражение с оператором or (низший приоритет)."""
        left = self._parse_and_expression()

        while self._match_keyword("or"):
            right = self._parse_and_expression()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.OR)

        return left

    def _parse_and_expression(self) -> Condition:
        """Парсит выражение с оператором and."""
        left = self._parse_comparison()

        while self._match_keyword("and"):
            right = self._parse_comparison()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.AND)

        return left

    def _parse_comparison(self) -> Condition:
        """Парсит сравнение; цепочки вида a = b = c не допускаются."""
        left = self._parse_unary()

        current = self._current_token()
        if current.type == 'OPERATOR':
            self._advance()
            right = self._parse_unary()
            return ComparisonCondition(
                left=left,
                right=right,
                operator=_COMPARISON_OPERATORS[current.value],
            )

        return left

    def _parse_unary(self) -> Condition:
        """Парсит not(...) (высокий приоритет)."""
        not_token = self._current_token()
        if self._match_keyword("not"):
            if not self._match_symbol("("):
                raise self._error("Expected '(' after 'not'", self._current_position())
            expr = self._parse_expression()
            if not self._match_symbol(")"):
                raise self._error(
                    f"Expected ')' to close 'not(' opened at position {not_token.position}",
                    self._current_position(),
                )
            return NotCondition(condition=expr)

        return self._parse_primary()

    def _parse_primary(self) -> Condition:
        """Парсит первичное выражение (переменные, литералы и группы в скобках)."""
        # Группировка в скобках
        open_token = self._current_token()
        if self._match_symbol("("):
            expr = self._parse_expression()
            if not self._match_symbol(")"):
                raise self._error(
                    f"Expected ')' to close '(' opened at position {open_token.position}",
                    self._current_position(),
                )
            return GroupCondition(condition=expr)

        current = self._current_token()

        if current.type == 'VARIABLE':
            self._advance()
            return VariableCondition(name=current.value)

        if current.type == 'STRING':
            self._advance()
            return LiteralCondition(value=current.value)

        if current.type == 'NUMBER':
            self._advance()
            return LiteralCondition(value=Decimal(current.value))

        # Если ничего не подошло, это ошибка
        if current.type == 'EOF':
            raise self._error("Unexpected end of expression", current.position)
        if current.type == 'IDENTIFIER':
            raise self._error(
                f"Unexpected token '{current.value}'. Did you forget the '$' prefix?",
                current.position,
            )
        raise self._error(f"Unexpected token '{current.value}'", current.position)

    # Вспомогательные методы для работы с токенами

    def _error(self, message: str, position: int) -> ConditionSyntaxError:
        return ConditionSyntaxError(message, position, self._text)

    def _current_token(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        if self._position >= len(self._tokens):
            return self._tokens[-1]
        return self._tokens[self._position]

    def _current_position(self) -> int:
        """Возвращает текущую позицию в исходной строке."""
        return self._current_token().position

    def _is_at_end(self) -> bool:
        """Проверяет, достигли ли мы конца токенов."""
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        """Продвигает позицию и возвращает предыдущий токен."""
        if not self._is_at_end():
            self._position += 1
        return self._tokens[self._position - 1] if self._position > 0 else self._current_token()

    def _match_keyword(self, keyword: str) -> bool:
        """Проверяет и потребляет ключевое слово."""
        current = self._current_token()
        if current.type == 'KEYWORD' and current.value == keyword:
            self._advance()
            return True
        return False

    def _match_symbol(self, symbol: str) -> bool:
        """Проверяет и потребляет символ."""
        current = self._current_token()
        if current.type == 'SYMBOL' and current.value == symbol:
            self._advance()
            return True
        return False


__all__ = ["ConditionParser"]

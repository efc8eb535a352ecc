"""
Лексер для разбора условных выражений.

Выполняет токенизацию строки условия, разбивая её на значимые элементы:
- Переменные ($name)
- Литералы (строки в кавычках и числа)
- Ключевые слова (and, or, not)
- Операторы сравнения (=, !=, <, >, <=, >=)
- Скобки
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from ..errors import ConditionSyntaxError


@dataclass
class Token:
    """
    Токен для парсинга условий.

    Attributes:
        type: Тип токена (VARIABLE, STRING, NUMBER, KEYWORD, OPERATOR,
              IDENTIFIER, SYMBOL, EOF)
        value: Значение токена
        position: Позиция в исходной строке
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


class ConditionLexer:
    """
    Лексер для разбиения строки условия на токены.

    Для строк значение токена хранится без кавычек, для ключевых
    слов в нижнем регистре, для переменных без знака $.
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        # Пробелы и табуляция (игнорируем)
        (r'\s+', 'WHITESPACE', True),

        # Переменные: $name
        (r'\$\w+', 'VARIABLE', False),

        # Строковые литералы в двойных или одинарных кавычках
        (r'"[^"]*"', 'STRING', False),
        (r"'[^']*'", 'STRING', False),

        # Числа (знак допускается, т.к. арифметики в языке нет)
        (r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)', 'NUMBER', False),

        # Операторы сравнения (двухсимвольные проверяем первыми)
        (r'!=|<=|>=|=|<|>', 'OPERATOR', False),

        # Скобки
        (r'\(', 'SYMBOL', False),
        (r'\)', 'SYMBOL', False),

        # Слова: ключевые слова определяем после захвата
        (r'[A-Za-z_][\w-]*', 'IDENTIFIER', False),

        # Неизвестный символ (ошибка)
        (r'.', 'UNKNOWN', False),
    ]

    # Ключевые слова для постпроцессинга (регистр не важен)
    KEYWORDS = {'and', 'or', 'not'}

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Разбивает строку на токены.

        Args:
            text: Строка условия для разбора

        Returns:
            Список токенов, включая EOF в конце

        Raises:
            ConditionSyntaxError: При обнаружении неизвестного символа
                или незакрытой строки
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)

                if not ignore:
                    if token_type == 'UNKNOWN':
                        if value in ('"', "'"):
                            raise ConditionSyntaxError("Unterminated string literal", position, text)
                        raise ConditionSyntaxError(f"Unexpected character '{value}'", position, text)

                    tokens.append(self._make_token(token_type, value, position))

                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=position))

        return tokens

    def _make_token(self, token_type: str, value: str, position: int) -> Token:
        if token_type == 'VARIABLE':
            return Token(type=token_type, value=value[1:], position=position)
        if token_type == 'STRING':
            return Token(type=token_type, value=value[1:-1], position=position)
        if token_type == 'IDENTIFIER' and value.lower() in self.KEYWORDS:
            return Token(type='KEYWORD', value=value.lower(), position=position)
        return Token(type=token_type, value=value, position=position)


__all__ = ["Token", "ConditionLexer"]

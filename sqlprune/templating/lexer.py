"""
Лексический анализатор разметки SQL-шаблонов.

Находит в тексте теги <if>, <elsif>, <else> и <a> (открывающие,
закрывающие и пустые) и вычисляет их позиции. Всё, что не является
тегом правильной формы, остаётся обычным текстом SQL: одиночный
символ '<' в "rownum < 20" тегом не считается.
"""

from __future__ import annotations

import bisect
import html
import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..errors import TemplateSyntaxError, UnsupportedTagError

SUPPORTED_TAGS = frozenset({"if", "elsif", "else", "a"})

# Допустимые атрибуты для каждого тега
TAG_ATTRIBUTES: Dict[str, frozenset] = {
    "if": frozenset({"c"}),
    "elsif": frozenset({"c"}),
    "else": frozenset(),
    "a": frozenset({"pre", "sep", "post"}),
}


@dataclass(frozen=True)
class TagToken:
    """
    Токен тега разметки.

    Представляет один тег с указанием его вида и атрибутов.
    """
    kind: str  # 'open', 'close' или 'empty' (<tag/>)
    name: str  # Имя тега в нижнем регистре
    attributes: Dict[str, str] = field(hash=False, compare=True)
    start_pos: int = 0  # Позиция начала в исходном тексте
    end_pos: int = 0    # Позиция конца в исходном тексте
    line: int = 1
    column: int = 1


class SqlTemplateLexer:
    """
    Лексер для поиска тегов разметки в SQL-шаблоне.

    Распознает следующие конструкции:
    - <if c="condition">, <if>
    - <elsif c="condition">, <elsif>
    - <else>
    - <a pre="(" sep="," post=")">
    - закрывающие теги </if>, </elsif>, </else>, </a>
    - пустые теги <if/> и т.п.
    """

    # Тег правильной формы: имя и набор атрибутов в кавычках
    TAG_PATTERN = re.compile(
        r'<(?P<close>/)?(?P<name>[A-Za-z_][\w.-]*)'
        r'(?P<attrs>(?:\s+[A-Za-z_][\w.-]*\s*=\s*(?:"[^"]*"|\'[^\']*\'))*)'
        r'\s*(?P<empty>/)?>',
        re.DOTALL,
    )

    ATTRIBUTE_PATTERN = re.compile(
        r'(?P<name>[A-Za-z_][\w.-]*)\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\')',
        re.DOTALL,
    )

    # Начало известного тега, у которого не нашлось правильного окончания
    TAG_START_PATTERN = re.compile(r'</?(?P<name>if|elsif|else|a)(?=[\s/>]|$)', re.IGNORECASE)

    def __init__(self, text: str):
        """
        Инициализирует лексер с исходным текстом.

        Args:
            text: Исходный текст шаблона
        """
        self.text = text
        self.length = len(text)
        self._line_starts = self._compute_line_starts(text)

    def tokenize(self) -> List[TagToken]:
        """
        Извлекает все теги из текста.

        Returns:
            Список токенов тегов в порядке появления в тексте

        Raises:
            TemplateSyntaxError: Неправильно оформленный тег
            UnsupportedTagError: Тег с неизвестным именем
        """
        tokens: List[TagToken] = []
        covered_until = 0

        for match in self.TAG_PATTERN.finditer(self.text):
            self._check_unterminated(covered_until, match.start())
            tokens.append(self._make_token(match))
            covered_until = match.end()

        self._check_unterminated(covered_until, self.length)

        return tokens

    def find_text_segments(self, tokens: List[TagToken]) -> List[Tuple[int, int, str]]:
        """
        Находит текстовые сегменты между тегами.

        Args:
            tokens: Список токенов

        Returns:
            Список кортежей (start_pos, end_pos, text) для непустых сегментов
        """
        segments = []
        current_pos = 0

        for token in tokens:
            if current_pos < token.start_pos:
                segments.append((current_pos, token.start_pos, self.text[current_pos:token.start_pos]))
            current_pos = token.end_pos

        if current_pos < self.length:
            segments.append((current_pos, self.length, self.text[current_pos:]))

        return segments

    def location(self, position: int) -> Tuple[int, int]:
        """Возвращает (строка, колонка) для позиции в тексте, обе с 1."""
        line = bisect.bisect_right(self._line_starts, position)
        return line, position - self._line_starts[line - 1] + 1

    def _make_token(self, match: re.Match) -> TagToken:
        start = match.start()
        line, column = self.location(start)
        name = match.group("name").lower()

        if name not in SUPPORTED_TAGS:
            raise UnsupportedTagError(match.group("name"), line, column)

        is_close = match.group("close") is not None
        is_empty = match.group("empty") is not None
        attrs_text = match.group("attrs") or ""

        if is_close and is_empty:
            raise self._syntax_error(f"Malformed tag '{match.group(0)}'", start)
        if is_close and attrs_text.strip():
            raise self._syntax_error(f"Closing tag </{name}> cannot have attributes", start)

        attributes = self._parse_attributes(name, attrs_text, start)

        if is_close:
            kind = "close"
        elif is_empty:
            kind = "empty"
        else:
            kind = "open"

        return TagToken(
            kind=kind,
            name=name,
            attributes=attributes,
            start_pos=start,
            end_pos=match.end(),
            line=line,
            column=column,
        )

    def _parse_attributes(self, tag: str, attrs_text: str, tag_pos: int) -> Dict[str, str]:
        attributes: Dict[str, str] = {}
        allowed = TAG_ATTRIBUTES[tag]

        for match in self.ATTRIBUTE_PATTERN.finditer(attrs_text):
            attr_name = match.group("name").lower()
            raw_value = match.group("dq") if match.group("dq") is not None else match.group("sq")

            if attr_name not in allowed:
                expected = ", ".join(sorted(allowed)) or "none"
                raise self._syntax_error(
                    f"Unknown attribute '{attr_name}' on <{tag}> (allowed: {expected})", tag_pos
                )
            if attr_name in attributes:
                raise self._syntax_error(f"Duplicate attribute '{attr_name}' on <{tag}>", tag_pos)

            # Ссылки на символы (&lt;, &amp;, &#62;) раскрываем как в XML
            attributes[attr_name] = html.unescape(raw_value)

        return attributes

    def _check_unterminated(self, start: int, end: int) -> None:
        """Проверяет, что в обычном тексте нет начала известного тега без окончания."""
        match = self.TAG_START_PATTERN.search(self.text, start, end)
        if match:
            raise self._syntax_error(
                f"Unterminated or malformed <{match.group('name').lower()}> tag", match.start()
            )

    def _syntax_error(self, message: str, position: int) -> TemplateSyntaxError:
        line, column = self.location(position)
        return TemplateSyntaxError(message, line, column, position)

    @staticmethod
    def _compute_line_starts(text: str) -> List[int]:
        starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                starts.append(index + 1)
        return starts


def tokenize_sql_template(text: str) -> List[TagToken]:
    """
    Удобная функция для токенизации SQL-шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов тегов
    """
    lexer = SqlTemplateLexer(text)
    return lexer.tokenize()


__all__ = [
    "SUPPORTED_TAGS",
    "TagToken",
    "SqlTemplateLexer",
    "tokenize_sql_template",
]

"""
Парсер разметки SQL-шаблонов.

Преобразует токены тегов в AST с поддержкой вложенных условных
веток и блоков повторения. Текст между тегами сохраняется без
изменений, включая пробелы: они участвуют в итоговом SQL.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .lexer import SqlTemplateLexer, TagToken
from .nodes import (
    BranchKind, TemplateAST, TemplateNode, TextNode, ConditionalNode, RepeatNode
)
from ..errors import ConditionInferenceError, TemplateSyntaxError

logger = logging.getLogger(__name__)

_BRANCH_KINDS = {
    "if": BranchKind.IF,
    "elsif": BranchKind.ELSIF,
    "else": BranchKind.ELSE,
}


class SqlTemplateParser:
    """
    Парсер для SQL-шаблонов с разметкой.

    Строит дерево со стеком открытых тегов и проверяет структуру:
    парность тегов, порядок веток if/elsif/else и требования
    к блокам повторения.
    """

    def __init__(self, text: str):
        """
        Инициализирует парсер с исходным текстом.

        Args:
            text: Исходный текст шаблона
        """
        self.text = text
        self.lexer = SqlTemplateLexer(text)

    def parse(self) -> TemplateAST:
        """
        Парсит текст в AST.

        Returns:
            AST шаблона

        Raises:
            TemplateSyntaxError: При ошибке синтаксического анализа
            UnsupportedTagError: При неизвестном теге
            ConditionInferenceError: Ветка с вложенной разметкой без атрибута c
        """
        tokens = self.lexer.tokenize()

        # Если тегов нет, возвращаем простой текстовый узел
        if not tokens:
            return [TextNode(text=self.text)] if self.text else []

        ast = self._parse_with_tokens(tokens)
        logger.debug(f"Parsed template with {len(tokens)} tags into {len(ast)} top-level nodes")
        return ast

    def _parse_with_tokens(self, tokens: List[TagToken]) -> TemplateAST:
        """
        Парсит текст с учетом найденных токенов тегов.

        Args:
            tokens: Список токенов тегов

        Returns:
            Список узлов верхнего уровня
        """
        root: List[TemplateNode] = []
        # Стек открытых тегов вместе с уже собранными детьми
        stack: List[Tuple[TagToken, List[TemplateNode]]] = []
        current_pos = 0

        for token in tokens:
            siblings = stack[-1][1] if stack else root

            # Добавляем текст перед токеном
            if current_pos < token.start_pos:
                siblings.append(TextNode(text=self.text[current_pos:token.start_pos]))

            if token.kind == "open":
                stack.append((token, []))

            elif token.kind == "empty":
                siblings.append(self._build_node(token, [], siblings))

            else:
                if not stack:
                    raise self._error(f"Closing tag </{token.name}> without matching opening tag", token)

                open_token, children = stack.pop()
                if open_token.name != token.name:
                    raise self._error(
                        f"Expected </{open_token.name}> (opened at {open_token.line}:{open_token.column}) "
                        f"but found </{token.name}>",
                        token,
                    )

                parent_siblings = stack[-1][1] if stack else root
                parent_siblings.append(self._build_node(open_token, children, parent_siblings))

            current_pos = token.end_pos

        if stack:
            open_token = stack[-1][0]
            raise self._error(f"Unclosed <{open_token.name}> tag", open_token)

        # Добавляем оставшийся текст
        if current_pos < len(self.text):
            root.append(TextNode(text=self.text[current_pos:]))

        return root

    def _build_node(self, token: TagToken, children: List[TemplateNode],
                    siblings: List[TemplateNode]) -> TemplateNode:
        """
        Создает узел для закрытого тега.

        Args:
            token: Открывающий (или пустой) тег
            children: Дочерние узлы
            siblings: Уже разобранные соседи того же уровня

        Returns:
            Узел AST
        """
        if token.name == "a":
            return self._build_repeat_node(token, children)

        kind = _BRANCH_KINDS[token.name]

        if kind != BranchKind.IF:
            self._check_chain_predecessor(token, siblings)

        node = ConditionalNode(
            kind=kind,
            condition_text=token.attributes.get("c"),
            children=tuple(children),
            line=token.line,
            column=token.column,
        )

        # Условие по умолчанию строится из параметров в тексте,
        # поэтому при вложенной разметке оно обязано быть явным
        if kind != BranchKind.ELSE and node.condition_text is None and node.has_elements:
            raise ConditionInferenceError(
                f"Cannot infer condition for <{token.name}> at {token.line}:{token.column}: "
                f"it contains nested markup, add an explicit c attribute"
            )

        return node

    def _build_repeat_node(self, token: TagToken, children: List[TemplateNode]) -> RepeatNode:
        """Создает блок повторения; внутри допускается только текст."""
        if any(not isinstance(child, TextNode) for child in children):
            raise self._error("<a> may contain only text", token)

        return RepeatNode(
            body="".join(child.text for child in children if isinstance(child, TextNode)),
            prefix=token.attributes.get("pre", ""),
            separator=token.attributes.get("sep", ""),
            suffix=token.attributes.get("post", ""),
            line=token.line,
            column=token.column,
        )

    def _check_chain_predecessor(self, token: TagToken, siblings: List[TemplateNode]) -> None:
        """
        Проверяет, что <elsif>/<else> идет сразу после <if> или <elsif>.

        Текст между ветками допускается, другая разметка нет.
        """
        for sibling in reversed(siblings):
            if isinstance(sibling, TextNode):
                continue
            if isinstance(sibling, ConditionalNode) and sibling.kind in (BranchKind.IF, BranchKind.ELSIF):
                return
            break

        raise self._error(f"<{token.name}> must directly follow <if> or <elsif>", token)

    def _error(self, message: str, token: TagToken) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, token.line, token.column, token.start_pos)


def parse_sql_template(text: str) -> TemplateAST:
    """
    Удобная функция для парсинга SQL-шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        AST шаблона

    Raises:
        TemplateSyntaxError: При ошибке синтаксического анализа
    """
    parser = SqlTemplateParser(text)
    return parser.parse()


__all__ = [
    "SqlTemplateParser",
    "parse_sql_template",
]

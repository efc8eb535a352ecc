"""
AST-узлы для разметки SQL-шаблонов.

Определяет иерархию узлов для представления условных веток
и блоков повторения внутри текста запроса.

Узлы неизменяемы после разбора. Ветки <if>, <elsif> и <else>
хранятся как соседние узлы одного уровня: какой из них выживет,
решается при отсечении по уже вычисленному статусу предыдущих соседей.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Tuple


class BranchKind(enum.Enum):
    """Вид условного узла."""
    IF = "if"
    ELSIF = "elsif"
    ELSE = "else"


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текст SQL.

    Выводится в результат как есть, включая все пробелы и переводы строк.
    """
    text: str


@dataclass(frozen=True)
class ConditionalNode(TemplateNode):
    """
    Условная ветка <if c="...">...</if>, <elsif>...</elsif> или <else>...</else>.

    condition_text: текст атрибута c или None, если условие надо вывести
    из параметров, упомянутых в тексте ветки (только для веток из чистого текста).
    """
    kind: BranchKind
    condition_text: Optional[str]
    children: Tuple[TemplateNode, ...]
    line: int = 1
    column: int = 1

    @property
    def has_elements(self) -> bool:
        """Содержит ли ветка вложенную разметку, а не только текст."""
        return any(not isinstance(child, TextNode) for child in self.children)

    @property
    def text(self) -> str:
        """Весь текст ветки без учёта вложенной разметки."""
        return collect_text_content(list(self.children))


@dataclass(frozen=True)
class RepeatNode(TemplateNode):
    """
    Блок повторения <a pre="(" sep="," post=")">:id</a>.

    Тело содержит ровно один параметр и повторяется по одному разу
    на каждый элемент списка, привязанного к этому параметру.
    """
    body: str
    prefix: str = ""
    separator: str = ""
    suffix: str = ""
    line: int = 1
    column: int = 1


# Тип для коллекции узлов шаблона
TemplateAST = List[TemplateNode]


def collect_text_content(ast: TemplateAST) -> str:
    """
    Собирает весь текстовый контент из AST (для тестирования и отладки).

    Args:
        ast: AST для обработки

    Returns:
        Объединенный текстовый контент
    """
    result_parts = []

    def collect_from_node(node: TemplateNode) -> None:
        if isinstance(node, TextNode):
            result_parts.append(node.text)
        elif isinstance(node, ConditionalNode):
            for child in node.children:
                collect_from_node(child)
        elif isinstance(node, RepeatNode):
            result_parts.append(node.body)

    for node in ast:
        collect_from_node(node)

    return "".join(result_parts)


def format_ast_tree(ast: TemplateAST, indent: int = 0) -> str:
    """Форматирует AST как дерево для отладки."""
    lines = []
    prefix = "  " * indent

    for node in ast:
        if isinstance(node, TextNode):
            # Показываем только начало текста для читабельности
            text_preview = repr(node.text[:50] + "..." if len(node.text) > 50 else node.text)
            lines.append(f"{prefix}TextNode({text_preview})")
        elif isinstance(node, ConditionalNode):
            if node.condition_text is None:
                lines.append(f"{prefix}ConditionalNode({node.kind.value})")
            else:
                lines.append(f"{prefix}ConditionalNode({node.kind.value}, condition='{node.condition_text}')")
            if node.children:
                lines.append(format_ast_tree(list(node.children), indent + 1))
        elif isinstance(node, RepeatNode):
            lines.append(
                f"{prefix}RepeatNode({node.body!r}, pre={node.prefix!r}, "
                f"sep={node.separator!r}, post={node.suffix!r})"
            )
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "BranchKind",
    "TemplateNode",
    "TemplateAST",
    "TextNode",
    "ConditionalNode",
    "RepeatNode",
    "collect_text_content",
    "format_ast_tree",
]

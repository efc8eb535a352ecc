"""
Пакет для обработки разметки в SQL-шаблонах.

Предоставляет AST-based подход: лексер находит теги <if>, <elsif>,
<else> и <a>, парсер строит дерево, процессор отсекает ветки по
значениям параметров.
"""

from .processor import prune_template, PruneResult, PruneStats, TemplatePruner
from .parser import parse_sql_template, SqlTemplateParser
from .lexer import tokenize_sql_template, TagToken

__all__ = [
    # Основные функции
    "parse_sql_template",
    "prune_template",

    # Классы и результаты
    "SqlTemplateParser",
    "TemplatePruner",
    "PruneResult",
    "PruneStats",

    # Низкоуровневые функции (для тестирования и отладки)
    "tokenize_sql_template",
    "TagToken",
]

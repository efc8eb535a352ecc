"""
Язык условий для веток <if>/<elsif>.

Лексер, парсер с рекурсивным спуском и вычислитель выражений вида
$a = "1" and not($b) над привязками параметров.
"""

from .evaluator import ConditionEvaluator, evaluate_condition_string
from .lexer import ConditionLexer, Token
from .model import Condition, ConditionType
from .parser import ConditionParser
from .values import compare_values, truthiness

__all__ = [
    "ConditionEvaluator",
    "ConditionLexer",
    "ConditionParser",
    "Condition",
    "ConditionType",
    "Token",
    "compare_values",
    "evaluate_condition_string",
    "truthiness",
]

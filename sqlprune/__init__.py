"""
Отсечение SQL-шаблонов по значениям параметров.

Шаблон: обычный SQL с разметкой <if>/<elsif>/<else> и <a>. Сервис
удаляет ветки с ложными условиями, раскрывает блоки повторения по
спискам значений и сообщает, какие параметры остались в запросе.
"""

from .binder import bind_parameters
from .bindings import ParameterBindings
from .config import PruneOptions
from .errors import SqlPruneError
from .params import scan_parameters
from .service import PrunedQuery, SqlTemplateService, build_query

__all__ = [
    "build_query",
    "bind_parameters",
    "scan_parameters",
    "SqlTemplateService",
    "PrunedQuery",
    "PruneOptions",
    "ParameterBindings",
    "SqlPruneError",
]

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .bindings import ParameterBindings
from .config import PruneOptions
from .params import scan_parameters
from .templating.parser import parse_sql_template
from .templating.processor import PruneStats, TemplatePruner

logger = logging.getLogger(__name__)

Bindings = Union[ParameterBindings, Mapping[str, Any]]


@dataclass(frozen=True)
class PrunedQuery:
    """
    Final, tag-free query together with the parameters it references.

    Attributes:
        sql: Query text ready to hand to a driver
        parameters: Names referenced in ``sql``, first-seen order and casing
        expansions: Positional names produced by repeat blocks, e.g.
            ``"id0" -> ("id", 0)``
        stats: Counters of the pruning pass
    """
    sql: str
    parameters: Tuple[str, ...]
    expansions: Dict[str, Tuple[str, int]] = field(default_factory=dict)
    stats: PruneStats = field(default_factory=PruneStats)

    def uses(self, name: str) -> bool:
        """Case-insensitive check whether ``name`` is referenced by the query."""
        key = name.lower()
        return any(p.lower() == key for p in self.parameters)


class SqlTemplateService:
    """
    Entry point of the pruning pipeline.

    Parses a template, prunes it against the bindings and scans the
    surviving text for parameter references. Every call is independent:
    the service keeps only its options, so one instance can be shared
    between threads.
    """

    def __init__(self, options: Optional[PruneOptions] = None):
        """
        Initialize template service.

        Args:
            options: Pruning options (defaults when omitted)
        """
        self.options = options or PruneOptions()

    def build(self, template: str, bindings: Optional[Bindings] = None) -> PrunedQuery:
        """
        Turn a template into the final query.

        Args:
            template: Template text, with or without markup
            bindings: Parameter values; list values feed ``<a>`` blocks

        Returns:
            PrunedQuery with the final SQL and the used parameter names

        Raises:
            SqlPruneError: Any parse or evaluation failure. Nothing is
                returned in that case.
        """
        params = self.bindings_for(bindings)

        ast = parse_sql_template(template)
        result = TemplatePruner(params).prune(ast)
        used = tuple(scan_parameters(result.text))

        logger.debug(f"Query text: {result.text.strip()}")
        logger.debug(f"Query parameters: {', '.join(used) if used else '(none)'}")

        return PrunedQuery(
            sql=result.text,
            parameters=used,
            expansions=result.expansions,
            stats=result.stats,
        )

    def bindings_for(self, bindings: Optional[Bindings] = None) -> ParameterBindings:
        """Bindings with the service options applied (tolerate_missing)."""
        return ParameterBindings.of(bindings, tolerate_missing=self.options.tolerate_missing)

    def scan(self, template: str) -> List[str]:
        """Parameter names referenced anywhere in the raw template text."""
        return scan_parameters(template)


def build_query(
    template: str,
    bindings: Optional[Bindings] = None,
    *,
    tolerate_missing: bool = False,
) -> PrunedQuery:
    """
    Convenience wrapper around SqlTemplateService.build().

    Args:
        template: Template text
        bindings: Parameter values
        tolerate_missing: Read unbound parameters as null instead of failing

    Returns:
        PrunedQuery
    """
    service = SqlTemplateService(PruneOptions(tolerate_missing=tolerate_missing))
    return service.build(template, bindings)


__all__ = ["PrunedQuery", "SqlTemplateService", "build_query"]

"""
Hand-off from a pruned query to the execution layer.

Only the parameters that survive pruning may be sent to the driver:
some databases reject bind variables the statement does not use. The
binder resolves a value for every used name and fails loudly when a
used name has no binding.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from .bindings import ParameterBindings
from .errors import MissingBindingError
from .service import PrunedQuery

logger = logging.getLogger(__name__)


def bind_parameters(
    query: PrunedQuery,
    bindings: Optional[Union[ParameterBindings, Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build the driver parameter map for a pruned query.

    Keys are spelled exactly as in ``query.sql``. A positional name made
    by a repeat block (``id0``) takes the matching list element unless
    the caller bound that name explicitly.

    Args:
        query: Result of SqlTemplateService.build()
        bindings: The same bindings the query was built with

    Returns:
        Mapping name -> value, one entry per used parameter

    Raises:
        MissingBindingError: A used parameter has no binding and the
            bindings do not tolerate missing names
    """
    params = ParameterBindings.of(bindings)
    expansions = {name.lower(): origin for name, origin in query.expansions.items()}

    result: Dict[str, Any] = {}
    for name in query.parameters:
        result[name] = _resolve(name, params, expansions)

    for name, value in result.items():
        logger.debug(f"Parameter {name} -> {value!r} ({type(value).__name__})")

    return result


def _resolve(name: str, params: ParameterBindings, expansions: Dict[str, tuple]) -> Any:
    if params.has(name):
        return params.resolve(name)

    origin = expansions.get(name.lower())
    if origin is not None:
        base, index = origin
        values = params.resolve(base)
        if isinstance(values, (list, tuple)) and index < len(values):
            return values[index]

    if params.tolerate_missing:
        return None
    raise MissingBindingError(name)


__all__ = ["bind_parameters"]

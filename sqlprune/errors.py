"""
Base exception for user-facing errors.

Everything that goes wrong while turning a template and its bindings into
a final query is reported through a subclass of SqlPruneError. These errors
describe problems the template author can fix: malformed markup, a condition
referring to a parameter nobody bound, a repeat block with no parameter.

Programming errors and bugs should NOT inherit from SqlPruneError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class SqlPruneError(Exception):
    """
    Base class for all user-facing errors of the pruning pipeline.

    A pruning call either succeeds completely or raises one of these;
    there is never partial output.
    """
    pass


class TemplateSyntaxError(SqlPruneError):
    """Malformed or unbalanced markup in a template."""

    def __init__(self, message: str, line: int, column: int, position: int):
        self.message = message
        self.line = line
        self.column = column
        self.position = position
        super().__init__(f"{message} at {line}:{column}")


class UnsupportedTagError(SqlPruneError):
    """A tag name outside of if/elsif/else/a."""

    def __init__(self, tag: str, line: int, column: int):
        self.tag = tag
        self.line = line
        self.column = column
        super().__init__(
            f"Unsupported tag <{tag}> at {line}:{column}. Expected one of: if, elsif, else, a"
        )


class ConditionInferenceError(SqlPruneError):
    """A conditional node needs an implicit condition that cannot be built."""
    pass


class AmbiguousParameterError(SqlPruneError):
    """A repeat block body references more or less than exactly one parameter."""

    def __init__(self, body: str, found: list[str]):
        self.body = body
        self.found = found
        if found:
            detail = f"found {len(found)}: {', '.join(found)}"
        else:
            detail = "found none"
        super().__init__(
            f"Repeat block must reference exactly one parameter, {detail} (body: {body!r})"
        )


class UnboundVariableError(SqlPruneError):
    """A condition references a parameter absent from the bindings."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Parameter '{name}' is not bound")


class ComparisonError(SqlPruneError):
    """Two operands cannot be brought to a common comparable form."""
    pass


class ConditionSyntaxError(SqlPruneError):
    """Malformed condition text."""

    def __init__(self, message: str, position: int, condition: Optional[str] = None):
        self.message = message
        self.position = position
        self.condition = condition
        text = f"Condition syntax error at position {position}: {message}"
        if condition is not None:
            text += f" (in {condition!r})"
        super().__init__(text)


class RepeatBindingError(SqlPruneError):
    """A repeat block parameter is bound to something other than a list."""

    def __init__(self, name: str, value: object):
        self.name = name
        super().__init__(
            f"Parameter '{name}' used in a repeat block must be bound to a list, "
            f"got {type(value).__name__}"
        )


class DuplicateBindingError(SqlPruneError):
    """Two bindings whose names differ only by case."""

    def __init__(self, name: str, other: str):
        self.name = name
        self.other = other
        super().__init__(f"Parameter '{name}' is bound twice (also as '{other}')")


class MissingBindingError(SqlPruneError):
    """The final query uses a parameter that has no binding."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Parameter '{name}' has not been added to the command")


__all__ = [
    "SqlPruneError",
    "TemplateSyntaxError",
    "UnsupportedTagError",
    "ConditionInferenceError",
    "AmbiguousParameterError",
    "UnboundVariableError",
    "ComparisonError",
    "ConditionSyntaxError",
    "RepeatBindingError",
    "DuplicateBindingError",
    "MissingBindingError",
]

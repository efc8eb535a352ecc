"""
Отсечение веток SQL-шаблона по значениям параметров.

Работает в два прохода. Первый проход обходит дерево в прямом порядке
и помечает удаляемые узлы, ничего не меняя в самом дереве: решение для
<elsif>/<else> зависит от исходного порядка соседей и от уже принятых
решений по предыдущим веткам. Второй проход собирает текст из
уцелевших узлов в порядке документа.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from .nodes import (
    BranchKind, TemplateAST, TemplateNode, TextNode, ConditionalNode, RepeatNode
)
from ..bindings import ParameterBindings
from ..conditions.evaluator import ConditionEvaluator
from ..conditions.parser import ConditionParser
from ..errors import AmbiguousParameterError, ConditionInferenceError, RepeatBindingError
from ..params import rewrite_parameter, scan_parameters

logger = logging.getLogger(__name__)


@dataclass
class PruneStats:
    """Счетчики одного прохода отсечения."""
    conditions_evaluated: int = 0
    branches_kept: int = 0
    branches_removed: int = 0
    repeat_blocks_expanded: int = 0
    repeat_blocks_removed: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "conditions_evaluated": self.conditions_evaluated,
            "branches_kept": self.branches_kept,
            "branches_removed": self.branches_removed,
            "repeat_blocks_expanded": self.repeat_blocks_expanded,
            "repeat_blocks_removed": self.repeat_blocks_removed,
        }


@dataclass(frozen=True)
class PruneResult:
    """
    Результат отсечения.

    Attributes:
        text: Итоговый текст без разметки
        expansions: Позиционные имена, порожденные блоками <a>:
            "id0" -> ("id", 0)
        stats: Счетчики прохода
    """
    text: str
    expansions: Dict[str, Tuple[str, int]]
    stats: PruneStats


@dataclass
class _PruneState:
    # Узлы отмечаются по идентичности: одинаковые по содержимому
    # ветки остаются разными узлами
    removed: Set[int] = field(default_factory=set)
    replacements: Dict[int, str] = field(default_factory=dict)
    expansions: Dict[str, Tuple[str, int]] = field(default_factory=dict)
    stats: PruneStats = field(default_factory=PruneStats)


class TemplatePruner:
    """
    Отсекает ветки AST шаблона по привязкам параметров.

    Экземпляр не хранит состояния между вызовами prune(), дерево
    не изменяется.
    """

    def __init__(self, bindings: ParameterBindings):
        """
        Args:
            bindings: Привязки параметров для условий и блоков повторения
        """
        self.bindings = bindings
        self._evaluator = ConditionEvaluator(bindings)

    def prune(self, ast: TemplateAST) -> PruneResult:
        """
        Вычисляет, какие узлы остаются, и собирает итоговый текст.

        Args:
            ast: AST шаблона

        Returns:
            Итоговый текст, позиционные параметры и статистика

        Raises:
            ConditionInferenceError: Условие по умолчанию или параметр блока <a>
                не из чего построить
            AmbiguousParameterError: Блок <a> ссылается на несколько параметров
            RepeatBindingError: Параметр блока <a> привязан не к списку
            ConditionSyntaxError, UnboundVariableError, ComparisonError:
                Ошибки разбора и вычисления условий
        """
        state = _PruneState()

        self._mark_nodes(ast, parent_removed=False, state=state)
        text = self._render_nodes(ast, state)

        logger.debug(
            f"Pruned template: {state.stats.branches_kept} branches kept, "
            f"{state.stats.branches_removed} removed, "
            f"{state.stats.repeat_blocks_expanded} repeat blocks expanded"
        )
        return PruneResult(text=text, expansions=dict(state.expansions), stats=state.stats)

    # Проход 1: пометка удаляемых узлов

    def _mark_nodes(self, nodes: List[TemplateNode] | Tuple[TemplateNode, ...],
                    parent_removed: bool, state: _PruneState) -> None:
        siblings = list(nodes)

        for index, node in enumerate(siblings):
            if isinstance(node, TextNode):
                continue

            if parent_removed:
                # Родитель уже удален: условие не вычисляем, иначе параметры,
                # известные только в мертвой ветке, дали бы лишние ошибки
                keep = False
            elif isinstance(node, ConditionalNode):
                keep = self._decide_branch(node, siblings, index, state)
                if keep:
                    state.stats.branches_kept += 1
                else:
                    state.stats.branches_removed += 1
            elif isinstance(node, RepeatNode):
                keep = self._expand_repeat(node, state)
            else:
                raise TypeError(f"Unexpected node type: {type(node).__name__}")

            if not keep:
                state.removed.add(id(node))

            if isinstance(node, ConditionalNode):
                self._mark_nodes(node.children, id(node) in state.removed, state)

    def _decide_branch(self, node: ConditionalNode, siblings: List[TemplateNode],
                       index: int, state: _PruneState) -> bool:
        """
        Решает судьбу условной ветки.

        - if: остается, если условие истинно;
        - elsif: удаляется, если выжила любая предыдущая ветка цепочки,
          иначе остается, если истинно собственное условие;
        - else: остается, только если удалены все предыдущие ветки цепочки.
        """
        if node.kind == BranchKind.IF:
            return self._evaluate_branch(node, state)

        if self._chain_has_survivor(siblings, index, state):
            return False

        if node.kind == BranchKind.ELSE:
            return True

        return self._evaluate_branch(node, state)

    def _chain_has_survivor(self, siblings: List[TemplateNode], index: int,
                            state: _PruneState) -> bool:
        """
        Проверяет предыдущие ветки цепочки (elsif... вплоть до ближайшего if).

        Текстовые узлы между ветками пропускаются.
        """
        for sibling in reversed(siblings[:index]):
            if isinstance(sibling, TextNode):
                continue
            if not isinstance(sibling, ConditionalNode):
                break
            if id(sibling) not in state.removed:
                return True
            if sibling.kind == BranchKind.IF:
                break
        return False

    def _evaluate_branch(self, node: ConditionalNode, state: _PruneState) -> bool:
        condition_text = node.condition_text
        if condition_text is None:
            condition_text = self._infer_condition(node)

        state.stats.conditions_evaluated += 1
        # ConditionParser хранит позицию разбора, поэтому он свой на каждое условие
        condition = ConditionParser().parse(condition_text)
        result = self._evaluator.evaluate(condition)

        logger.debug(f"<{node.kind.value}> at {node.line}:{node.column}: '{condition_text}' -> {result}")
        return result

    def _infer_condition(self, node: ConditionalNode) -> str:
        """
        Строит условие по умолчанию: все параметры ветки должны быть
        "истинны" ($a and $b ...).
        """
        if node.has_elements:
            raise ConditionInferenceError(
                f"Cannot infer condition for <{node.kind.value}> at {node.line}:{node.column}: "
                f"it contains nested markup"
            )

        names = scan_parameters(node.text)
        if not names:
            raise ConditionInferenceError(
                f"Cannot infer condition for <{node.kind.value}> at {node.line}:{node.column}: "
                f"no parameter within {node.text!r}"
            )

        return " and ".join(f"${name}" for name in names)

    def _expand_repeat(self, node: RepeatNode, state: _PruneState) -> bool:
        """
        Раскрывает блок <a> по списку значений его параметра.

        Returns:
            False, если список пуст и блок надо удалить
        """
        names = scan_parameters(node.body)
        if not names:
            raise ConditionInferenceError(
                f"Cannot expand <a> at {node.line}:{node.column}: no parameter within {node.body!r}"
            )
        if len(names) > 1:
            raise AmbiguousParameterError(node.body, names)
        name = names[0]

        value = self.bindings.resolve(name)
        if value is None:
            values: Any = ()
        elif isinstance(value, (list, tuple)):
            values = value
        else:
            raise RepeatBindingError(name, value)

        if not values:
            state.stats.repeat_blocks_removed += 1
            return False

        copies = []
        for index in range(len(values)):
            positional = f"{name}{index}"
            copies.append(rewrite_parameter(node.body, name, positional))
            state.expansions[positional] = (name, index)

        state.replacements[id(node)] = node.prefix + node.separator.join(copies) + node.suffix
        state.stats.repeat_blocks_expanded += 1
        return True

    # Проход 2: сборка текста

    def _render_nodes(self, nodes: List[TemplateNode] | Tuple[TemplateNode, ...],
                      state: _PruneState) -> str:
        result_parts = []

        for node in nodes:
            if id(node) in state.removed:
                continue
            if isinstance(node, TextNode):
                result_parts.append(node.text)
            elif isinstance(node, ConditionalNode):
                result_parts.append(self._render_nodes(node.children, state))
            elif isinstance(node, RepeatNode):
                result_parts.append(state.replacements[id(node)])

        return "".join(result_parts)


def prune_template(
    ast: TemplateAST,
    bindings: Optional[Union[ParameterBindings, Mapping[str, Any]]] = None,
) -> PruneResult:
    """
    Удобная функция для отсечения AST шаблона.

    Args:
        ast: AST шаблона
        bindings: Привязки параметров

    Returns:
        Результат отсечения
    """
    pruner = TemplatePruner(ParameterBindings.of(bindings))
    return pruner.prune(ast)


__all__ = [
    "PruneResult",
    "PruneStats",
    "TemplatePruner",
    "prune_template",
]

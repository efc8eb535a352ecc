"""
Tests for branch pruning and repeat block expansion.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from sqlprune.bindings import ParameterBindings
from sqlprune.errors import (
    AmbiguousParameterError,
    ConditionInferenceError,
    ConditionSyntaxError,
    RepeatBindingError,
    UnboundVariableError,
)
from sqlprune.templating.parser import parse_sql_template
from sqlprune.templating.processor import TemplatePruner, prune_template


def prune(text: str, **bindings):
    return prune_template(parse_sql_template(text), bindings)


class TestConditionalBranches:

    def test_implicit_condition_true(self):
        assert prune("A<if> AND x = :x</if>", x=5).text == "A AND x = :x"

    def test_implicit_condition_null(self):
        assert prune("A<if> AND x = :x</if>", x=None).text == "A"

    def test_implicit_condition_requires_all_parameters(self):
        template = "<if>:a-:b</if>"
        assert prune(template, a=1, b=2).text == ":a-:b"
        assert prune(template, a=1, b=None).text == ""

    def test_implicit_condition_without_parameters(self):
        with pytest.raises(ConditionInferenceError, match="no parameter"):
            prune("<if>AND 1=1</if>")

    def test_parameters_in_string_literals_ignored(self):
        with pytest.raises(ConditionInferenceError):
            prune("<if>AND t = '10:30'</if>")

    def test_explicit_condition(self):
        template = '<if c="$mode = \'full\'">FULL</if>'
        assert prune(template, mode="full").text == "FULL"
        assert prune(template, mode="short").text == ""

    @pytest.mark.parametrize("a,expected", [
        (1, "[one]"),
        (2, "[two]"),
        (3, "[other]"),
    ])
    def test_chain_picks_first_true(self, a, expected):
        template = '[<if c="$a = 1">one</if><elsif c="$a = 2">two</elsif><else>other</else>]'
        assert prune(template, a=a).text == expected

    def test_elsif_not_evaluated_after_survivor(self):
        """Later branches are removed without evaluating their conditions"""
        template = '<if c="$a">A</if><elsif c="$unbound">B</elsif><elsif c="(">C</elsif>'
        result = prune(template, a=1)
        assert result.text == "A"
        assert result.stats.conditions_evaluated == 1

    def test_elsif_with_implicit_condition(self):
        template = "<if>x=:x</if><elsif>y=:y</elsif><else>1=1</else>"
        assert prune(template, x=None, y=2).text == "y=:y"
        assert prune(template, x=None, y=None).text == "1=1"

    def test_text_between_chain_branches_kept(self):
        template = "<if>:x</if> | <else>none</else>"
        assert prune(template, x=None).text == " | none"

    def test_independent_chains(self):
        template = "<if>:a</if><if>:b</if><else>no b</else>"
        assert prune(template, a=1, b=None).text == ":ano b"

    def test_nested_branches(self):
        template = '<if c="$outer">(<if>:inner</if><else>-</else>)</if>'
        assert prune(template, outer=1, inner=None).text == "(-)"
        assert prune(template, outer=1, inner=2).text == "(:inner)"

    def test_children_of_removed_branch_not_evaluated(self):
        template = '<if c="$outer">(<if c="$missing = 1">x</if>)</if>rest'
        result = prune(template, outer=None)
        assert result.text == "rest"
        assert result.stats.conditions_evaluated == 1

    def test_condition_error_only_when_evaluated(self):
        template = '<if c="$a">A</if><else><if c="$a ==">B</if></else>'
        assert prune(template, a=1).text == "A"
        with pytest.raises(ConditionSyntaxError):
            prune(template, a=None)

    def test_unbound_parameter(self):
        with pytest.raises(UnboundVariableError):
            prune("<if>x = :x</if>")

    def test_tolerate_missing(self):
        ast = parse_sql_template("A<if> x = :x</if>")
        result = TemplatePruner(ParameterBindings({}, tolerate_missing=True)).prune(ast)
        assert result.text == "A"

    def test_whitespace_preserved(self):
        template = "SELECT *\n  FROM t\n WHERE 1=1\n<if>   AND a = :a\n</if>"
        assert prune(template, a=1).text == "SELECT *\n  FROM t\n WHERE 1=1\n   AND a = :a\n"

    def test_stats(self):
        template = "<if>:a</if><elsif>:b</elsif><else>c</else><a sep=','>:id</a><a>:e</a>"
        result = prune(template, a=None, b=1, id=[1, 2], e=[])
        assert result.stats.as_dict() == {
            "conditions_evaluated": 2,
            "branches_kept": 1,
            "branches_removed": 2,
            "repeat_blocks_expanded": 1,
            "repeat_blocks_removed": 1,
        }


class TestRepeatBlocks:

    def test_expansion_with_separator(self):
        result = prune('<a sep=",">:id</a>', id=["4", "5", "6"])
        assert result.text == ":id0,:id1,:id2"
        assert result.expansions == {"id0": ("id", 0), "id1": ("id", 1), "id2": ("id", 2)}

    def test_empty_list_removes_block(self):
        result = prune('IN (<a sep=",">:id</a>)', id=[])
        assert result.text == "IN ()"
        assert result.expansions == {}

    def test_null_counts_as_empty(self):
        assert prune('<a pre="(" post=")">:id</a>', id=None).text == ""

    def test_prefix_and_suffix(self):
        result = prune('id IN <a pre="(" sep=", " post=")">:id</a>', id=[1, 2])
        assert result.text == "id IN (:id0, :id1)"

    def test_single_element(self):
        assert prune('<a pre="(" sep="," post=")">:id</a>', id=[1]).text == "(:id0)"

    def test_body_repeated_with_surrounding_text(self):
        template = '<a sep=" OR ">name LIKE :pat || \'%\'</a>'
        result = prune(template, pat=["A", "B"])
        assert result.text == "name LIKE :pat0 || '%' OR name LIKE :pat1 || '%'"

    def test_original_casing_kept(self):
        result = prune('<a sep=",">:ID</a>', id=[1, 2])
        assert result.text == ":ID0,:ID1"
        assert result.expansions == {"ID0": ("ID", 0), "ID1": ("ID", 1)}

    def test_repeat_inside_kept_branch(self):
        template = '<if c="$ids"> AND id IN <a pre="(" sep="," post=")">:ids</a></if>'
        assert prune(template, ids=[7]).text == " AND id IN (:ids0)"
        assert prune(template, ids=[]).text == ""

    def test_repeat_inside_removed_branch_not_expanded(self):
        template = '<if c="$flag"><a>:ids</a></if>'
        result = prune(template, flag=None, ids="not a list")
        assert result.text == ""
        assert result.expansions == {}

    def test_two_parameters(self):
        with pytest.raises(AmbiguousParameterError, match="found 2: a, b"):
            prune("<a>:a = :b</a>", a=[1], b=[2])

    def test_no_parameter(self):
        with pytest.raises(ConditionInferenceError, match="no parameter"):
            prune("<a>x</a>")

    def test_scalar_binding(self):
        with pytest.raises(RepeatBindingError, match="must be bound to a list, got int"):
            prune("<a>:id</a>", id=5)


class TestPrunerIsStateless:

    def test_reuse_between_calls(self):
        pruner = TemplatePruner(ParameterBindings({"x": 1}))
        ast = parse_sql_template("<if>:x</if><else>no</else>")
        first = pruner.prune(ast)
        second = pruner.prune(ast)
        assert first.text == second.text == ":x"
        assert first.stats == second.stats

    def test_ast_not_mutated(self):
        ast = parse_sql_template("<if>:x</if><else>no</else>")
        snapshot = list(ast)
        prune_template(ast, {"x": None})
        assert ast == snapshot

    def test_shared_between_threads(self):
        pruner = TemplatePruner(ParameterBindings({"a": 2, "b": "z", "ids": [1, 2, 3]}))
        ast = parse_sql_template(
            '<if c="$a = 1 or ($a > 5 and $b != \'y\')">A</if>'
            '<elsif c="$a = 2 and ($b = \'z\' or not ($a = 1))">B</elsif><else>C</else>'
            ' <if c="$ids">IN <a pre="(" sep="," post=")">:ids</a></if>'
        )
        with ThreadPoolExecutor(max_workers=8) as pool:
            texts = list(pool.map(lambda _: pruner.prune(ast).text, range(200)))
        assert set(texts) == {"B IN (:ids0,:ids1,:ids2)"}

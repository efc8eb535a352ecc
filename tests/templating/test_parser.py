"""
Tests for the SQL template parser.
"""

import pytest

from sqlprune.errors import ConditionInferenceError, TemplateSyntaxError
from sqlprune.templating.nodes import (
    BranchKind,
    ConditionalNode,
    RepeatNode,
    TextNode,
    collect_text_content,
    format_ast_tree,
)
from sqlprune.templating.parser import parse_sql_template


class TestSqlTemplateParser:

    def test_empty_template(self):
        assert parse_sql_template("") == []

    def test_plain_text(self):
        text = "SELECT 1\n  FROM dual  "
        assert parse_sql_template(text) == [TextNode(text=text)]

    def test_if_with_implicit_condition(self):
        ast = parse_sql_template("WHERE 1=1<if> AND x = :x</if>")

        assert len(ast) == 2
        assert ast[0] == TextNode("WHERE 1=1")
        node = ast[1]
        assert isinstance(node, ConditionalNode)
        assert node.kind == BranchKind.IF
        assert node.condition_text is None
        assert node.children == (TextNode(" AND x = :x"),)
        assert node.text == " AND x = :x"

    def test_if_elsif_else_chain(self):
        ast = parse_sql_template(
            '<if c="$a = 1">A</if>\n<elsif c="$a = 2">B</elsif>\n<else>C</else>'
        )

        kinds = [n.kind for n in ast if isinstance(n, ConditionalNode)]
        assert kinds == [BranchKind.IF, BranchKind.ELSIF, BranchKind.ELSE]
        assert ast[2].condition_text == "$a = 2"
        assert ast[4].condition_text is None

    def test_nested_conditionals(self):
        ast = parse_sql_template('<if c="$a">x<if>:b</if>y</if>')

        outer = ast[0]
        assert outer.has_elements
        assert len(outer.children) == 3
        inner = outer.children[1]
        assert isinstance(inner, ConditionalNode)
        assert inner.text == ":b"

    def test_repeat_block(self):
        ast = parse_sql_template('IN <a pre="(" sep="," post=")">:id</a>')

        node = ast[1]
        assert isinstance(node, RepeatNode)
        assert node.body == ":id"
        assert (node.prefix, node.separator, node.suffix) == ("(", ",", ")")

    def test_repeat_defaults(self):
        node = parse_sql_template("<a>:id</a>")[0]
        assert (node.prefix, node.separator, node.suffix) == ("", "", "")

    def test_empty_tags(self):
        ast = parse_sql_template("<if>:x</if><else/>")
        assert ast[1].kind == BranchKind.ELSE
        assert ast[1].children == ()

    def test_node_positions(self):
        ast = parse_sql_template("SELECT\n  <if>:x</if>")
        assert (ast[1].line, ast[1].column) == (2, 3)

    def test_collect_text_content(self):
        ast = parse_sql_template('a<if c="$x">b<a>:c</a></if>d')
        assert collect_text_content(ast) == "ab:cd"

    def test_format_ast_tree(self):
        ast = parse_sql_template('a<if c="$x">b</if>')
        tree = format_ast_tree(ast)
        assert "TextNode('a')" in tree
        assert "ConditionalNode(if, condition='$x')" in tree
        assert "  TextNode('b')" in tree

    def test_closing_without_opening(self):
        with pytest.raises(TemplateSyntaxError, match=r"Closing tag </if> without matching opening tag"):
            parse_sql_template("x</if>")

    def test_mismatched_closing(self):
        with pytest.raises(TemplateSyntaxError, match=r"Expected </a> \(opened at 1:11\) but found </if>"):
            parse_sql_template('<if c="1"><a>:x</if></a>')

    def test_unclosed_tag(self):
        with pytest.raises(TemplateSyntaxError, match=r"Unclosed <if> tag") as exc:
            parse_sql_template("SELECT 1\n<if>:x")
        assert exc.value.line == 2

    def test_markup_inside_repeat(self):
        with pytest.raises(TemplateSyntaxError, match="<a> may contain only text"):
            parse_sql_template('<a><if c="1">:x</if></a>')

    @pytest.mark.parametrize("text", [
        "<else>x</else>",
        "<elsif>:x</elsif>",
        "<if>:x</if><else>y</else><else>z</else>",
        "<if>:x</if><a>:y</a><else>z</else>",
        "<if>:x</if><else>y</else><elsif>:z</elsif>",
    ])
    def test_misplaced_chain_branch(self, text):
        with pytest.raises(TemplateSyntaxError, match=r"must directly follow <if> or <elsif>"):
            parse_sql_template(text)

    def test_text_between_branches_allowed(self):
        ast = parse_sql_template("<if>:x</if>\n   <else>y</else>")
        assert isinstance(ast[2], ConditionalNode)

    def test_nested_markup_requires_condition(self):
        with pytest.raises(ConditionInferenceError, match="nested markup"):
            parse_sql_template("<if>:x<if>:y</if></if>")

    def test_else_with_nested_markup_needs_no_condition(self):
        ast = parse_sql_template('<if>:x</if><else><if c="$y">:y</if></else>')
        assert ast[1].has_elements

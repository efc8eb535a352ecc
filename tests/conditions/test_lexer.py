"""
Tests for the condition lexer.
"""

import pytest

from sqlprune.conditions.lexer import ConditionLexer, Token
from sqlprune.errors import ConditionSyntaxError


class TestConditionLexer:

    def setup_method(self):
        self.lexer = ConditionLexer()

    def test_empty_string(self):
        """Test tokenization of empty string"""
        tokens = self.lexer.tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == 'EOF'

    def test_whitespace_ignored(self):
        """Test whitespace is ignored"""
        tokens = self.lexer.tokenize("   \t  ")
        assert len(tokens) == 1
        assert tokens[0].type == 'EOF'

    def test_variable_without_prefix(self):
        """Test variable value is stored without $"""
        tokens = self.lexer.tokenize("$Salary")
        assert tokens[0] == Token('VARIABLE', 'Salary', 0)
        assert tokens[1].type == 'EOF'

    def test_keywords_case_insensitive(self):
        """Test keywords are recognised in any case and lowered"""
        for keyword in ["and", "AND", "Or", "NOT"]:
            tokens = self.lexer.tokenize(keyword)
            assert len(tokens) == 2
            assert tokens[0].type == 'KEYWORD'
            assert tokens[0].value == keyword.lower()

    def test_identifier_is_not_keyword(self):
        """Test plain word becomes IDENTIFIER"""
        tokens = self.lexer.tokenize("salary")
        assert tokens[0].type == 'IDENTIFIER'
        assert tokens[0].value == 'salary'

    @pytest.mark.parametrize("text,value", [
        ('"abc"', "abc"),
        ("'abc'", "abc"),
        ('""', ""),
        ("'say \"hi\"'", 'say "hi"'),
    ])
    def test_string_literals(self, text, value):
        """Test quoted strings are unquoted"""
        tokens = self.lexer.tokenize(text)
        assert tokens[0].type == 'STRING'
        assert tokens[0].value == value

    @pytest.mark.parametrize("text", ["12", "-3", "1.5", "+7", ".5"])
    def test_numbers(self, text):
        """Test numeric literals"""
        tokens = self.lexer.tokenize(text)
        assert tokens[0].type == 'NUMBER'
        assert tokens[0].value == text

    def test_operators(self):
        """Test two-character operators win over one-character ones"""
        tokens = self.lexer.tokenize("= != < > <= >=")
        values = [t.value for t in tokens if t.type == 'OPERATOR']
        assert values == ["=", "!=", "<", ">", "<=", ">="]

    def test_symbols(self):
        """Test parentheses"""
        tokens = self.lexer.tokenize("()")
        assert [t.type for t in tokens] == ['SYMBOL', 'SYMBOL', 'EOF']

    def test_positions(self):
        """Test token positions"""
        tokens = self.lexer.tokenize('$a = "x"')
        assert [t.position for t in tokens] == [0, 3, 5, 8]

    def test_complex_expression(self):
        """Test tokenization of full condition"""
        tokens = self.lexer.tokenize('not($a) and ($b >= 10 or $c != "x")')
        types = [t.type for t in tokens]
        assert types == [
            'KEYWORD', 'SYMBOL', 'VARIABLE', 'SYMBOL', 'KEYWORD',
            'SYMBOL', 'VARIABLE', 'OPERATOR', 'NUMBER', 'KEYWORD',
            'VARIABLE', 'OPERATOR', 'STRING', 'SYMBOL', 'EOF',
        ]

    def test_unterminated_string(self):
        """Test error on unterminated string"""
        with pytest.raises(ConditionSyntaxError, match="Unterminated string literal") as exc:
            self.lexer.tokenize('$a = "abc')
        assert exc.value.position == 5

    def test_unexpected_character(self):
        """Test error on unknown character"""
        with pytest.raises(ConditionSyntaxError, match="Unexpected character '@'"):
            self.lexer.tokenize("$a = @")

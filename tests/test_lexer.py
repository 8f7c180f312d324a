# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the Stak tokenizer.
#
# Test coverage includes:
#   - Literal forms: strings, characters, integers, floats, booleans
#   - Identifiers, keywords, and the reserved symbol set
#   - Take (...), copy-to {...} and copy @ forms
#   - Comments and position tracking
#   - Error conditions
# =============================================================================

import pytest
from stak.language.lexer import Lexer, TokenType, Token, lex
from stak.errors import LexError


# =============================================================================
# Helper Function
# =============================================================================

def types(source: str) -> list:
    """Token types of a source string, in order."""
    return [t.type for t in lex(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        assert lex("") == []

    def test_whitespace_only(self):
        assert lex("  \t\n  ") == []

    def test_identifier(self):
        tokens = lex("drop")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "drop"

    def test_symbolic_identifiers(self):
        """Operator names are ordinary identifiers."""
        tokens = lex("+ <= != .")
        assert [t.value for t in tokens] == ["+", "<=", "!=", "."]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens)

    def test_negative_number_is_identifier(self):
        """Only runs starting with a digit are numbers."""
        tokens = lex("-5")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "-5"

    def test_keywords(self):
        assert types("if else end repeat macro") == [
            TokenType.IF,
            TokenType.ELSE,
            TokenType.END,
            TokenType.REPEAT,
            TokenType.MACRO,
        ]

    def test_booleans(self):
        tokens = lex("true false")
        assert [t.type for t in tokens] == [TokenType.BOOLEAN, TokenType.BOOLEAN]
        assert [t.value for t in tokens] == [True, False]

    def test_lexer_class_is_lazy(self):
        """Lexer.tokenize yields tokens one at a time."""
        iterator = Lexer("1 2").tokenize()
        assert next(iterator).value == 1
        assert next(iterator).value == 2


# =============================================================================
# Literal Tests
# =============================================================================

class TestLiterals:
    """Test string, character and number literals."""

    def test_string(self):
        tokens = lex('"hello world"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello world"

    def test_empty_string(self):
        assert lex('""')[0].value == ""

    def test_string_spans_lines(self):
        assert lex('"a\nb"')[0].value == "a\nb"

    def test_string_has_no_escapes(self):
        assert lex(r'"a\nb"')[0].value == "a\\nb"

    def test_char(self):
        tokens = lex("'x'")
        assert tokens[0].type == TokenType.CHAR
        assert tokens[0].value == "x"

    def test_space_char(self):
        assert lex("' '")[0].value == " "

    def test_integer(self):
        tokens = lex("42")
        assert tokens[0].type == TokenType.INT
        assert tokens[0].value == 42

    def test_integer_max(self):
        tokens = lex("9223372036854775807")
        assert tokens[0].type == TokenType.INT
        assert tokens[0].value == 2 ** 63 - 1

    def test_oversized_integer_becomes_float(self):
        tokens = lex("9223372036854775808")
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == 9223372036854775808.0

    def test_float(self):
        tokens = lex("2.5")
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == 2.5

    def test_float_with_exponent(self):
        tokens = lex("1e3")
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == 1000.0

    def test_float_trailing_dot(self):
        assert lex("3.")[0].value == 3.0


# =============================================================================
# Binding Form Tests
# =============================================================================

class TestBindingForms:
    """Test (...) take, {...} copy-to, and @ copy forms."""

    def test_take_names_are_reversed(self):
        tokens = lex("(a b c)")
        assert tokens[0].type == TokenType.TAKE
        assert tokens[0].value == ("c", "b", "a")

    def test_copy_to(self):
        tokens = lex("{a b}")
        assert tokens[0].type == TokenType.COPY_TO
        assert tokens[0].value == ("b", "a")

    def test_empty_group(self):
        assert lex("()")[0].value == ()

    def test_whitespace_inside_group(self):
        tokens = lex("(  a\n b  )")
        assert tokens[0].value == ("b", "a")

    def test_group_display_uses_source_order(self):
        assert str(lex("(a b)")[0]) == "(a b)"
        assert str(lex("{a b}")[0]) == "{a b}"

    def test_copy_identifier(self):
        tokens = lex("@x")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.COPY
        inner = tokens[0].value
        assert isinstance(inner, Token)
        assert inner.type == TokenType.IDENTIFIER
        assert inner.value == "x"

    def test_copy_group(self):
        inner = lex("@{a b}")[0].value
        assert inner.type == TokenType.COPY_TO
        assert inner.value == ("b", "a")

    def test_symbols_end_tokens(self):
        tokens = lex('x+"y"')
        assert [t.type for t in tokens] == [TokenType.IDENTIFIER, TokenType.STRING]
        assert tokens[0].value == "x+"


# =============================================================================
# Comment and Position Tests
# =============================================================================

class TestCommentsAndPositions:
    """Test comment skipping and source position tracking."""

    def test_line_comment(self):
        tokens = lex("1 # the rest is ignored\n2")
        assert [t.value for t in tokens] == [1, 2]

    def test_hash_inside_word(self):
        """'#' only starts a comment at the start of a token."""
        tokens = lex("a#b")
        assert tokens[0].value == "a#b"

    def test_first_token_position(self):
        position = lex("drop")[0].position
        assert (position.start, position.end) == (0, 4)
        assert (position.line, position.column) == (1, 1)
        assert position.end_column == 5

    def test_position_on_later_line(self):
        tokens = lex("1\n  foo")
        position = tokens[1].position
        assert position.line == 2
        assert position.column == 3
        assert str(position) == "2:3"

    def test_repr(self):
        assert repr(lex("  3")[0]) == "Token(INT, 3, 1:3)"


# =============================================================================
# Error Tests
# =============================================================================

class TestLexErrors:
    """Test lexical error conditions."""

    def test_unclosed_string(self):
        with pytest.raises(LexError, match="unclosed string"):
            lex('"abc')

    def test_expected_character(self):
        with pytest.raises(LexError, match="expected character"):
            lex("'")

    def test_unclosed_character(self):
        with pytest.raises(LexError, match="unclosed character"):
            lex("'ab'")

    def test_non_identifier_in_group(self):
        with pytest.raises(LexError, match="expected identifier, got int"):
            lex("(a 1)")

    def test_unclosed_take(self):
        with pytest.raises(LexError, match="unclosed identifier take"):
            lex("(a b")

    def test_unclosed_copy(self):
        with pytest.raises(LexError, match="unclosed identifier copy"):
            lex("{a")

    def test_copy_at_end(self):
        with pytest.raises(LexError, match="unexpected end"):
            lex("1 @")

    def test_unmatched_closer(self):
        with pytest.raises(LexError, match="unmatched '\\)'"):
            lex("1 )")

    def test_bad_number(self):
        with pytest.raises(LexError, match="error occurred while parsing the number"):
            lex("12abc")

    def test_error_has_position(self):
        with pytest.raises(LexError) as excinfo:
            lex('1 "abc')
        assert excinfo.value.position.column == 3

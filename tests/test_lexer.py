# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the Kaleidoscope lexer/tokenizer.
#
# Test coverage includes:
#   - Keywords, identifiers, numbers and single-character tokens
#   - Whitespace and '#' comment skipping
#   - Lenient and strict numeric literal conversion
#   - One-character look-ahead and per-instance state
#   - Source locations
# =============================================================================

import io

import pytest
from kscope.lexer import Lexer, Token, TokenKind
from kscope.errors import InvalidNumberError, SourceLocation


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str, **kwargs) -> list:
    """Tokenize source and drop the trailing EOF token."""
    tokens = list(Lexer(source, "<test>", **kwargs).tokenize())
    assert tokens[-1].kind == TokenKind.EOF
    return tokens[:-1]


def kinds(source: str) -> list:
    return [t.kind for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_input(self):
        """Empty input produces only EOF."""
        tokens = list(Lexer("").tokenize())
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF
        assert tokens[0].value is None

    def test_whitespace_only(self):
        assert tokenize("  \t\n\r  \n") == []

    def test_keywords(self):
        assert kinds("def extern") == [TokenKind.DEF, TokenKind.EXTERN]

    def test_keyword_prefix_is_identifier(self):
        """'define' and 'externs' are plain identifiers."""
        tokens = tokenize("define externs")
        assert [t.kind for t in tokens] == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]
        assert [t.value for t in tokens] == ["define", "externs"]

    def test_identifier_with_digits(self):
        tokens = tokenize("b2 C3d")
        assert [t.value for t in tokens] == ["b2", "C3d"]

    def test_digit_then_letters_splits(self):
        """A number cannot continue into letters."""
        tokens = tokenize("2b")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == 2.0
        assert tokens[1].kind == TokenKind.IDENTIFIER
        assert tokens[1].value == "b"

    def test_underscore_is_single_char(self):
        """Identifiers are alphanumeric only."""
        tokens = tokenize("a_b")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER, TokenKind.CHAR, TokenKind.IDENTIFIER,
        ]
        assert tokens[1].value == "_"

    def test_simple_expression(self):
        tokens = tokenize("a+1")
        assert tokens[0] == Token(TokenKind.IDENTIFIER, "a", 1, 1, "<test>")
        assert tokens[1] == Token(TokenKind.CHAR, "+", 1, 2, "<test>")
        assert tokens[2] == Token(TokenKind.NUMBER, 1.0, 1, 3, "<test>")

    def test_punctuation(self):
        tokens = tokenize("(),;<-*")
        assert all(t.kind == TokenKind.CHAR for t in tokens)
        assert [t.value for t in tokens] == ["(", ")", ",", ";", "<", "-", "*"]

    def test_unknown_characters_pass_through(self):
        """The lexer never rejects a character."""
        tokens = tokenize("@ / ! ~")
        assert [t.value for t in tokens] == ["@", "/", "!", "~"]
        assert all(t.kind == TokenKind.CHAR for t in tokens)

    def test_eof_is_sticky(self):
        lexer = Lexer("x")
        assert lexer.next_token().kind == TokenKind.IDENTIFIER
        assert lexer.next_token().kind == TokenKind.EOF
        assert lexer.next_token().kind == TokenKind.EOF

    def test_token_kinds_mixed(self):
        assert kinds("10.1 def der extern foo (") == [
            TokenKind.NUMBER,
            TokenKind.DEF,
            TokenKind.IDENTIFIER,
            TokenKind.EXTERN,
            TokenKind.IDENTIFIER,
            TokenKind.CHAR,
        ]


# =============================================================================
# Number Tests
# =============================================================================

class TestNumbers:
    """Numeric literals are always floats."""

    def test_integer_is_float(self):
        tokens = tokenize("42")
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == 42.0
        assert isinstance(tokens[0].value, float)

    def test_decimal(self):
        assert tokenize("3.25")[0].value == 3.25

    def test_leading_dot(self):
        assert tokenize(".1519")[0].value == pytest.approx(0.1519)

    def test_trailing_dot(self):
        assert tokenize("7.")[0].value == 7.0

    def test_multiple_dots_keep_valid_prefix(self):
        """'1.2.3' is one token holding the strtod reading, 1.2."""
        tokens = tokenize("1.2.3")
        assert len(tokens) == 1
        assert tokens[0].value == 1.2

    def test_lone_dot_is_zero(self):
        tokens = tokenize(".")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.NUMBER
        assert tokens[0].value == 0.0

    def test_strict_rejects_multiple_dots(self):
        lexer = Lexer("1.2.3", "<test>", strict_numbers=True)
        with pytest.raises(InvalidNumberError) as exc_info:
            lexer.next_token()
        assert exc_info.value.text == "1.2.3"
        assert exc_info.value.location == SourceLocation("<test>", 1, 1)

    def test_strict_rejects_lone_dot(self):
        with pytest.raises(InvalidNumberError):
            list(Lexer("x + .", strict_numbers=True).tokenize())

    def test_strict_accepts_valid_numbers(self):
        values = [t.value for t in tokenize("1 2.5 .5 3.", strict_numbers=True)]
        assert values == [1.0, 2.5, 0.5, 3.0]

    def test_strict_lexer_continues_after_error(self):
        """The malformed run is consumed, so scanning resumes after it."""
        lexer = Lexer("1..2 + x", strict_numbers=True)
        with pytest.raises(InvalidNumberError):
            lexer.next_token()
        assert lexer.next_token().is_char("+")
        assert lexer.next_token().value == "x"


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """'#' comments run to the end of the line."""

    def test_comment_then_token(self):
        tokens = tokenize("# a comment\n42")
        assert len(tokens) == 1
        assert tokens[0].value == 42.0

    def test_comment_at_end_of_input(self):
        assert kinds("x # trailing") == [TokenKind.IDENTIFIER]

    def test_consecutive_comments(self):
        source = """
            def foo # this is a comment
            # another comment
            \t\t\t10
            """
        assert kinds(source) == [TokenKind.DEF, TokenKind.IDENTIFIER, TokenKind.NUMBER]

    def test_carriage_return_ends_comment(self):
        assert kinds("# c\r5") == [TokenKind.NUMBER]

    def test_comment_does_not_produce_newline_token(self):
        """Scanning continues past the comment's line ending."""
        tokens = tokenize("1 # one\n+ 2")
        assert [t.value for t in tokens] == [1.0, "+", 2.0]


# =============================================================================
# Lexer State Tests
# =============================================================================

class TestLexerState:
    """Look-ahead, payload slots and independent sessions."""

    def test_single_character_lookahead(self):
        """After 'abc' only the following space has been read."""
        stream = io.StringIO("abc def")
        lexer = Lexer(stream)
        token = lexer.next_token()
        assert token.value == "abc"
        assert stream.tell() == 4
        assert lexer.last_char == " "

    def test_nothing_read_before_first_call(self):
        stream = io.StringIO("abc")
        Lexer(stream)
        assert stream.tell() == 0

    def test_payload_slots(self):
        lexer = Lexer("foo 4.5")
        lexer.next_token()
        assert lexer.identifier_str == "foo"
        lexer.next_token()
        assert lexer.num_val == 4.5
        assert lexer.identifier_str == "foo"

    def test_reset_starts_new_session(self):
        lexer = Lexer("first")
        assert lexer.next_token().value == "first"
        lexer.reset("second", "<other>")
        token = lexer.next_token()
        assert token.value == "second"
        assert token.location == SourceLocation("<other>", 1, 1)

    def test_independent_lexers_do_not_interfere(self):
        a = Lexer("x y")
        b = Lexer("1 2")
        assert a.next_token().value == "x"
        assert b.next_token().value == 1.0
        assert a.next_token().value == "y"
        assert b.next_token().value == 2.0

    def test_relexing_same_input_is_identical(self):
        source = "def f(x) x*2 # doubled\nf(3)"
        assert list(Lexer(source).tokenize()) == list(Lexer(source).tokenize())


# =============================================================================
# Location Tests
# =============================================================================

class TestLocations:
    """Tokens record the position of their first character."""

    def test_columns(self):
        tokens = tokenize("def f(x)")
        assert [(t.line, t.column) for t in tokens] == [
            (1, 1), (1, 5), (1, 6), (1, 7), (1, 8),
        ]

    def test_lines(self):
        tokens = tokenize("def foo\n  x")
        assert tokens[2].location == SourceLocation("<test>", 2, 3)

    def test_eof_location(self):
        lexer = Lexer("ab", "<test>")
        lexer.next_token()
        eof = lexer.next_token()
        assert (eof.line, eof.column) == (1, 3)

    def test_source_line_of_current_line(self):
        lexer = Lexer("first\nsecond")
        lexer.next_token()
        token = lexer.next_token()
        assert lexer.source_line(token.line) == "second"

    def test_repr(self):
        assert repr(Token(TokenKind.IDENTIFIER, "x", 1, 2)) == "Token(IDENTIFIER, 'x', 1:2)"
        assert repr(Token(TokenKind.NUMBER, 2.0, 1, 1)) == "Token(NUMBER, 2.0, 1:1)"
        assert repr(Token(TokenKind.EOF, None, 3, 4)) == "Token(EOF, 3:4)"

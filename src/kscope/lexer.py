"""
kscope Lexer (Tokenizer)
========================

This module implements the lexer for the Kaleidoscope expression
language. It pulls characters one at a time from a string or a text
stream and groups them into tokens on demand: the parser asks for the
next token exactly when it needs it, and only one look-ahead character
is buffered between calls.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: [A-Za-z][A-Za-z0-9]*
- Numbers: runs of digits and '.', all converted to float
- Single characters: everything else, including '(' ')' ',' ';' and
  the binary operators; unknown characters are passed through as-is
- End of input

Comments
--------
- Single-line: # comment (to end of line)

Number Conversion
-----------------
A run such as "1.2.3" is consumed as one token. By default it is
converted the way C's strtod reads it: the longest valid prefix wins
("1.2.3" -> 1.2, "." -> 0.0). With strict_numbers the run must be a
valid float or InvalidNumberError is raised.

Example Usage
-------------
>>> from kscope.lexer import Lexer
>>> for token in Lexer("def f(x) x*2").tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'f', 1:5)
Token(CHAR, '(', 1:6)
Token(IDENTIFIER, 'x', 1:7)
Token(CHAR, ')', 1:8)
Token(IDENTIFIER, 'x', 1:10)
Token(CHAR, '*', 1:11)
Token(NUMBER, 2.0, 1:12)
Token(EOF, 1:13)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, TextIO, Union
import io
import logging
import re
import string

from kscope.errors import InvalidNumberError, SourceLocation


logger = logging.getLogger(__name__)


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """Token kinds of the Kaleidoscope language."""

    EOF = auto()            # End of input
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IDENTIFIER = auto()     # Names
    NUMBER = auto()         # Numeric literals (float)
    CHAR = auto()           # Any other single character


KEYWORDS: dict[str, TokenKind] = {
    "def": TokenKind.DEF,
    "extern": TokenKind.EXTERN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        kind: The TokenKind classification
        value: str for identifiers, keywords and single characters,
               float for numbers, None for EOF
        line: Line of the token's first character (1-indexed)
        column: Column of the token's first character (1-indexed)
        filename: Name of the input
    """
    kind: TokenKind
    value: Union[str, float, None]
    line: int = 0
    column: int = 0
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.kind.name}, {self.line}:{self.column})"
        if isinstance(self.value, float):
            return f"Token({self.kind.name}, {self.value}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_char(self, char: str) -> bool:
        """Return True if this is the single-character token `char`."""
        return self.kind == TokenKind.CHAR and self.value == char

    def describe(self) -> str:
        """Short human-readable form used in diagnostics."""
        if self.kind == TokenKind.EOF:
            return "end of input"
        if self.kind == TokenKind.NUMBER:
            return f"number {self.value}"
        if self.kind == TokenKind.IDENTIFIER:
            return f"identifier '{self.value}'"
        return f"'{self.value}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

# Longest valid float prefix of a digit/dot run, as strtod would read it
_FLOAT_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class Lexer:
    """
    Tokenizes Kaleidoscope input on demand.

    The lexer keeps one character of look-ahead (`last_char`) plus the
    payload slots of the most recent identifier or number token
    (`identifier_str`, `num_val`). All of this state belongs to the
    instance, so independent inputs need independent lexers. Use reset()
    to start a new session on the same instance.

    Usage:
        lexer = Lexer(sys.stdin, "<stdin>")
        token = lexer.next_token()

    Attributes:
        filename: Name of the input (for error reporting)
        strict_numbers: Reject malformed numeric literals
        identifier_str: Name of the most recent identifier/keyword token
        num_val: Value of the most recent number token
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits

    # Characters that can appear in a number
    NUMBER_CHARS = string.digits + "."

    def __init__(
        self,
        source: Union[str, TextIO],
        filename: str = "<input>",
        strict_numbers: bool = False,
    ):
        """
        Initialize the lexer.

        Args:
            source: Input text, or a text stream read one character at a time
            filename: Name of the input (for error messages)
            strict_numbers: Raise InvalidNumberError for runs like "1.2.3"
        """
        self.strict_numbers = strict_numbers
        self.reset(source, filename)

    def reset(self, source: Union[str, TextIO], filename: Optional[str] = None) -> None:
        """Start a new, independent session reading from source."""
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        if filename is not None:
            self.filename = filename

        # Look-ahead character; a space so the first call starts by reading
        self.last_char = " "
        self._char_line = 1
        self._char_column = 0

        # Position of the next character to be read
        self._next_line = 1
        self._next_column = 1

        # Text of the current line read so far, for error context
        self._line_text = ""

        self.identifier_str = ""
        self.num_val = 0.0

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read_char(self) -> str:
        """Read the next character into last_char ("" at end of input)."""
        char = self._stream.read(1)

        if self.last_char == "\n":
            self._line_text = ""

        self._char_line = self._next_line
        self._char_column = self._next_column
        if char == "\n":
            self._next_line += 1
            self._next_column = 1
        elif char:
            self._next_column += 1
            if char != "\r":
                self._line_text += char

        self.last_char = char
        return char

    def _make_token(self, kind: TokenKind, value, line: int, column: int) -> Token:
        return Token(kind, value, line, column, self.filename)

    def source_line(self, line: int) -> Optional[str]:
        """
        Return the text of `line` if it is the line currently being read.

        Earlier lines are not retained; the input is never rewound.
        """
        if line == self._char_line:
            return self._line_text
        return None

    # =========================================================================
    # Tokenization
    # =========================================================================

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Returns:
            The next Token; EOF again on every call after end of input

        Raises:
            InvalidNumberError: Malformed number, only with strict_numbers
        """
        while True:
            while self.last_char and self.last_char in string.whitespace:
                self._read_char()

            line, column = self._char_line, self._char_column

            # Identifier or keyword
            if self.last_char and self.last_char in self.IDENT_START:
                name = self.last_char
                while self._read_char() and self.last_char in self.IDENT_CHARS:
                    name += self.last_char
                self.identifier_str = name
                kind = KEYWORDS.get(name, TokenKind.IDENTIFIER)
                return self._make_token(kind, name, line, column)

            # Number
            if self.last_char and self.last_char in self.NUMBER_CHARS:
                text = self.last_char
                while self._read_char() and self.last_char in self.NUMBER_CHARS:
                    text += self.last_char
                self.num_val = self._convert_number(text, line, column)
                return self._make_token(TokenKind.NUMBER, self.num_val, line, column)

            # Comment: skip to end of line, then keep scanning
            if self.last_char == "#":
                while self._read_char() and self.last_char not in "\r\n":
                    pass
                continue

            if not self.last_char:
                return self._make_token(TokenKind.EOF, None, line, column)

            char = self.last_char
            self._read_char()
            return self._make_token(TokenKind.CHAR, char, line, column)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens until end of input.

        Yields:
            Tokens, ending with (and including) one EOF token
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind == TokenKind.EOF:
                return

    def _convert_number(self, text: str, line: int, column: int) -> float:
        """Convert a digit/dot run to float (see module docstring)."""
        match = _FLOAT_PREFIX.match(text)

        if self.strict_numbers:
            if match is None or match.end() != len(text):
                raise InvalidNumberError(
                    text,
                    SourceLocation(self.filename, line, column),
                    self.source_line(line),
                )
            return float(text)

        if match is None:
            logger.debug(f"Numeric literal {text!r} at {line}:{column} has no digits, using 0.0")
            return 0.0
        if match.end() != len(text):
            logger.debug(
                f"Numeric literal {text!r} at {line}:{column} "
                f"truncated to {match.group()!r}"
            )
        return float(match.group())

"""
kscope Error Hierarchy
======================

This module defines the exception hierarchy for the kscope front-end.
All exceptions inherit from KscopeError, allowing callers to catch every
lexer, parser and driver error with a single except clause.

Exception Hierarchy
-------------------
KscopeError (base)
├── LexicalError - malformed lexeme (only raised in strict-number mode)
│   └── InvalidNumberError - digit/dot run that is not a valid float
├── ParseError - syntax errors found by the parser
│   ├── UnexpectedTokenError - token does not start the expected construct
│   ├── MissingTokenError - required punctuation or name is absent
│   └── NestingTooDeepError - expression nesting beyond the parser limit
└── KscopeCompilationError - aggregate report of several errors

Error Message Format
--------------------
All errors include source location information when it is known:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    <stdin>:1:9: error: expected ')' in prototype
        def foo(a b
                ^
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in the input, used only for diagnostics.

    Attributes:
        filename: Name of the input ("<input>" for strings, "<stdin>" for stdin)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class KscopeError(Exception):
    """
    Base exception for all kscope errors.

    Attributes:
        message: The error description
        location: Where in the input the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The input text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            <input>:1:5: error: unknown token when expecting a primary expression
                1 + )
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class KscopeCompilationError(KscopeError):
    """
    Aggregate error containing several diagnostics.

    The message is an already formatted report from ErrorCollector and is
    passed through unchanged.
    """

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Lexical Errors
# =============================================================================

class LexicalError(KscopeError):
    """
    Error while grouping characters into tokens.

    The default lexer never raises: unknown characters become
    single-character tokens and numeric runs are converted leniently.
    Only the opt-in strict-number mode produces lexical errors.
    """
    pass


class InvalidNumberError(LexicalError):
    """
    Numeric literal that is not a valid float.

    Example:
        1.2.3    # two decimal points
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid numeric literal '{text}'",
            location=location,
            hint="a number may contain at most one '.'",
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors (Parser)
# =============================================================================

class ParseError(KscopeError):
    """
    Syntax error in the input.

    Raised at the point of detection. The first ParseError aborts the
    whole top-level construct being parsed; no partial AST is returned.
    """
    pass


class UnexpectedTokenError(ParseError):
    """
    Token that cannot start the construct the parser expects.

    Example:
        1 + )     # ')' cannot start a primary expression
    """

    def __init__(
        self,
        message: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            message,
            location=location,
            hint=f"found {found}",
            source_line=source_line,
        )


class MissingTokenError(ParseError):
    """
    Required token is missing.

    Raised when a name, '(' or ')' is not found where the grammar
    requires it. `expected` holds the diagnostic text, for example
    "')' in prototype".
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


class NestingTooDeepError(ParseError):
    """
    Parenthesized expressions or call arguments nested beyond the limit.

    The parser recurses once per nesting level, so the depth is capped
    well below the interpreter's recursion limit.
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            "expression nested too deeply",
            location=location,
            hint=f"at most {limit} nested expressions are supported",
            source_line=source_line,
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects errors seen by the driver for a summary report.

    Example:
        collector = ErrorCollector(max_errors=10)
        collector.add(error)
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        self.errors: List[KscopeError] = []
        self.max_errors = max_errors

    def add(self, error: KscopeError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return self.max_errors > 0 and len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def report(self) -> str:
        """Format all errors for display."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")
        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()

    def raise_if_errors(self) -> None:
        """Raise a KscopeCompilationError if any errors were collected."""
        if self.has_errors():
            raise KscopeCompilationError(self.report())

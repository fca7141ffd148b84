"""
kscope Top-Level Driver
=======================

The driver repeatedly looks at the current token and dispatches to the
matching top-level parse:

    end of input  -> stop
    ';'           -> skip (statement separator)
    'def'         -> definition
    'extern'      -> extern declaration
    anything else -> top-level expression (anonymous function)

Each result is wrapped in a ParseOutcome and handed to an optional
handler. This is where a code generator or printer plugs in.

Error Recovery
--------------
After a failed construct the driver discards exactly one token and
resumes (RecoveryPolicy.SKIP_ONE_TOKEN). The discarded token is often
not a construct boundary, so a single mistake can produce a cascade of
further failures:

    def foo(a, b) a+b   # expected ')' in prototype at ','
                        # skip ',': "b" parses as a top-level expr
                        # then ')' fails as a primary expression

This is a known limitation of the policy.

A strict-number LexicalError raised in the middle of a construct leaves
parser.current on the token before the bad run, which the construct had
already consumed. The run itself is gone from the input, so the single
advance of recovery lands on the token after it: only the bad number is
lost.

    1 + 1..2 x          # invalid numeric literal '1..2'
                        # then "x" parses as a top-level expr
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional, TextIO, Union
import logging
import sys

from kscope.ast import Function, Prototype
from kscope.config import ParserOptions, RecoveryPolicy
from kscope.errors import ErrorCollector, KscopeError, LexicalError
from kscope.lexer import TokenKind
from kscope.parser import Parser


logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    """What a single top-level iteration produced."""
    DEFINITION = auto()
    EXTERN = auto()
    TOP_LEVEL_EXPR = auto()
    FAILURE = auto()


@dataclass(frozen=True)
class ParseOutcome:
    """
    Result of parsing one top-level construct.

    Exactly one of node and error is set.

    Attributes:
        kind: Which construct was attempted, or FAILURE
        node: Function for definitions and top-level expressions,
              Prototype for externs
        error: The error that aborted the construct
    """
    kind: OutcomeKind
    node: Union[Function, Prototype, None] = None
    error: Optional[KscopeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


OutcomeHandler = Callable[[ParseOutcome], None]


_SUCCESS_MESSAGES = {
    OutcomeKind.DEFINITION: "Parsed a function definition.",
    OutcomeKind.EXTERN: "Parsed an extern",
    OutcomeKind.TOP_LEVEL_EXPR: "Parsed a top-level expr",
}


class Driver:
    """
    Top-level parse loop with single-token error recovery.

    Usage:
        parser = Parser.from_source(text)
        driver = Driver(parser, handler=print)
        outcomes = driver.run()

    Attributes:
        parser: The parser to drive (primed on first run if needed)
        handler: Called with every ParseOutcome (optional)
        options: Prompt, error limit and recovery settings
        errors: Failures seen so far
    """

    def __init__(
        self,
        parser: Parser,
        handler: Optional[OutcomeHandler] = None,
        options: Optional[ParserOptions] = None,
        prompt_stream: Optional[TextIO] = None,
    ):
        self.parser = parser
        self.handler = handler
        self.options = options or ParserOptions()
        self.prompt_stream = prompt_stream
        self.errors = ErrorCollector(self.options.max_errors)
        self.outcomes: List[ParseOutcome] = []

    def run(self) -> List[ParseOutcome]:
        """
        Parse top-level constructs until end of input.

        Primes the parser first if no token has been read yet.

        Stops early once options.max_errors failures have been seen.

        Returns:
            Every outcome, in input order
        """
        if not self.parser.primed:
            self._show_prompt()
            self._advance()

        while True:
            self._show_prompt()
            token = self.parser.current

            if token.kind == TokenKind.EOF:
                break
            if token.is_char(";"):
                self._advance()
                continue

            if token.kind == TokenKind.DEF:
                self._handle(OutcomeKind.DEFINITION, self.parser.parse_definition)
            elif token.kind == TokenKind.EXTERN:
                self._handle(OutcomeKind.EXTERN, self.parser.parse_extern)
            else:
                self._handle(OutcomeKind.TOP_LEVEL_EXPR, self.parser.parse_top_level_expr)

            if self.errors.should_stop():
                logger.warning(f"Stopping after {self.errors.error_count()} errors")
                break

        return self.outcomes

    def nodes(self) -> List[Union[Function, Prototype]]:
        """The successfully parsed constructs, in input order."""
        return [outcome.node for outcome in self.outcomes if outcome.ok]

    def _handle(self, kind: OutcomeKind, parse: Callable[[], Union[Function, Prototype]]) -> None:
        try:
            node = parse()
        except KscopeError as e:
            self._fail(e)
            self._recover()
            return

        logger.info(_SUCCESS_MESSAGES[kind])
        self._report(ParseOutcome(kind, node=node))

    def _fail(self, error: KscopeError) -> None:
        self.errors.add(error)
        logger.debug(f"Parse failed: {error.message}")
        self._report(ParseOutcome(OutcomeKind.FAILURE, error=error))

    def _report(self, outcome: ParseOutcome) -> None:
        self.outcomes.append(outcome)
        if self.handler is not None:
            self.handler(outcome)

    def _recover(self) -> None:
        if self.options.recovery is not RecoveryPolicy.SKIP_ONE_TOKEN:
            raise ValueError(f"unsupported recovery policy: {self.options.recovery}")
        skipped = self.parser.current
        self._advance()
        logger.debug(f"Recovery skipped {skipped!r}")

    def _advance(self) -> None:
        # A malformed lexeme (strict numbers) is reported and already consumed
        while True:
            try:
                self.parser.advance()
                return
            except LexicalError as e:
                self._fail(e)

    def _show_prompt(self) -> None:
        if not self.options.prompt:
            return
        stream = self.prompt_stream or sys.stderr
        stream.write(self.options.prompt_text)
        stream.flush()

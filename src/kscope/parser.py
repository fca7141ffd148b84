"""
kscope Recursive Descent Parser
===============================

This module implements the parser for the Kaleidoscope expression
language. It pulls tokens from a Lexer one at a time and builds the AST
defined in kscope.ast. Primary expressions and top-level forms use plain
recursive descent; chains of binary operators are resolved by precedence
climbing against a PrecedenceTable, so there is no grammar rule per
precedence level.

Grammar (Informal EBNF)
-----------------------
toplevel   ::= (';' | definition | extern | expression) toplevel | ε
definition ::= 'def' prototype expression
extern     ::= 'extern' prototype
prototype  ::= identifier '(' identifier* ')'
expression ::= primary (binop primary)*
primary    ::= number
             | identifier ('(' (expression (',' expression)*)? ')')?
             | '(' expression ')'

Error Handling
--------------
Each failure raises a ParseError subclass at the point of detection,
which aborts the whole top-level construct. The driver (kscope.driver)
decides how to report it and how to recover.

Example Usage
-------------
>>> from kscope.lexer import Lexer
>>> from kscope.parser import Parser
>>> parser = Parser(Lexer("def add(a b) a+b"))
>>> parser.advance()
>>> parser.parse_definition()
Function(proto=Prototype(name='add', params=('a', 'b')), body=BinaryOp(...))
"""

from typing import List, Optional, Union
import logging

from kscope.config import DEFAULT_MAX_NESTING, ParserOptions, PrecedenceTable
from kscope.lexer import Lexer, Token, TokenKind
from kscope.ast import (
    BinaryOp,
    Call,
    Expression,
    Function,
    NumberLiteral,
    Prototype,
    VariableRef,
)
from kscope.errors import MissingTokenError, NestingTooDeepError, UnexpectedTokenError


logger = logging.getLogger(__name__)


class Parser:
    """
    Recursive descent parser with precedence climbing for binary operators.

    The parser holds exactly one token of state (`current`). Call
    advance() once to prime it before the first parse_* call; the
    Driver does this for you.

    Attributes:
        lexer: Token source
        precedence: Read-only operator precedence table
        current: The token under examination
    """

    def __init__(
        self,
        lexer: Lexer,
        precedence: Optional[PrecedenceTable] = None,
        max_nesting: int = DEFAULT_MAX_NESTING,
    ):
        """
        Initialize the parser.

        Args:
            lexer: Lexer to pull tokens from
            precedence: Operator precedences (defaults to < + - *)
            max_nesting: Deepest expression nesting accepted before
                         NestingTooDeepError is raised
        """
        self.lexer = lexer
        self.precedence = precedence if precedence is not None else PrecedenceTable()
        self.current: Token = Token(TokenKind.EOF, None, 0, 0, lexer.filename)
        self.primed = False
        self.max_nesting = max_nesting
        self._depth = 0

    @classmethod
    def from_source(
        cls,
        source,
        filename: str = "<input>",
        options: Optional[ParserOptions] = None,
        prime: bool = True,
    ) -> "Parser":
        """Build a parser for a string or text stream, primed unless prime is False."""
        options = options or ParserOptions()
        lexer = Lexer(source, filename, strict_numbers=options.strict_numbers)
        parser = cls(lexer, options.precedence_table(), options.max_nesting)
        if prime:
            parser.advance()
        return parser

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def advance(self) -> Token:
        """Read the next token from the lexer and make it current."""
        self.primed = True
        self.current = self.lexer.next_token()
        return self.current

    def at_end(self) -> bool:
        return self.current.kind == TokenKind.EOF

    def get_token_precedence(self) -> int:
        """
        Precedence of the current token as a binary operator.

        Returns -1 for anything that is not a known infix operator, so it
        never satisfies a minimum precedence.
        """
        if self.current.kind != TokenKind.CHAR:
            return -1
        return self.precedence.lookup(self.current.value)

    def _missing(self, expected: str) -> MissingTokenError:
        token = self.current
        return MissingTokenError(
            expected,
            token.location,
            self.lexer.source_line(token.line),
        )

    def _unexpected(self, message: str) -> UnexpectedTokenError:
        token = self.current
        return UnexpectedTokenError(
            message,
            token.describe(),
            token.location,
            self.lexer.source_line(token.line),
        )

    # =========================================================================
    # Primary Expressions
    # =========================================================================

    def parse_primary(self) -> Expression:
        """
        Parse a primary expression.

        primary ::= number | identifier_expr | '(' expression ')'
        """
        token = self.current

        if token.kind == TokenKind.NUMBER:
            return self._parse_number()
        if token.kind == TokenKind.IDENTIFIER:
            return self._parse_identifier()
        if token.is_char("("):
            return self._parse_paren()

        raise self._unexpected("unknown token when expecting a primary expression")

    def _parse_number(self) -> NumberLiteral:
        token = self.current
        self.advance()
        return NumberLiteral(token.value, token.location)

    def _parse_paren(self) -> Expression:
        """paren_expr ::= '(' expression ')' (no node for the parentheses)."""
        self.advance()
        expr = self.parse_expression()
        if not self.current.is_char(")"):
            raise self._missing("')'")
        self.advance()
        return expr

    def _parse_identifier(self) -> Expression:
        """
        identifier_expr ::= identifier
                          | identifier '(' (expression (',' expression)*)? ')'
        """
        token = self.current
        name = token.value
        self.advance()

        if not self.current.is_char("("):
            return VariableRef(name, token.location)

        self.advance()
        args: List[Expression] = []
        if not self.current.is_char(")"):
            while True:
                args.append(self.parse_expression())
                if self.current.is_char(")"):
                    break
                if not self.current.is_char(","):
                    raise self._missing("')' or ','")
                self.advance()

        self.advance()
        return Call(name, tuple(args), token.location)

    # =========================================================================
    # Binary Expressions (Precedence Climbing)
    # =========================================================================

    def parse_expression(self) -> Expression:
        """
        expression ::= primary (binop primary)*

        Parentheses and call arguments re-enter here, so this is where
        nesting depth is counted.

        Raises:
            NestingTooDeepError: More than max_nesting levels deep
        """
        if self._depth >= self.max_nesting:
            raise self._too_deep()

        self._depth += 1
        try:
            lhs = self.parse_primary()
            return self.parse_bin_op_rhs(0, lhs)
        except RecursionError:
            # Unwind to the outermost expression before reporting
            if self._depth > 1:
                raise
            raise self._too_deep() from None
        finally:
            self._depth -= 1

    def _too_deep(self) -> NestingTooDeepError:
        token = self.current
        return NestingTooDeepError(
            self.max_nesting,
            token.location,
            self.lexer.source_line(token.line),
        )

    def parse_bin_op_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Fold binary operators into lhs while they bind at least as
        tightly as min_precedence.

        After each right operand the next operator is peeked: if it binds
        tighter than the one just consumed, the right operand first
        absorbs that suffix through a recursive call. Equal precedence
        folds left, so 1-2-3 is ((1-2)-3) and 1+2*3 is (1+(2*3)).
        """
        while True:
            token_precedence = self.get_token_precedence()
            if token_precedence < min_precedence:
                return lhs

            op_token = self.current
            self.advance()

            rhs = self.parse_primary()

            next_precedence = self.get_token_precedence()
            if token_precedence < next_precedence:
                rhs = self.parse_bin_op_rhs(token_precedence + 1, rhs)

            lhs = BinaryOp(op_token.value, lhs, rhs, op_token.location)

    # =========================================================================
    # Top-Level Forms
    # =========================================================================

    def parse_prototype(self) -> Prototype:
        """prototype ::= identifier '(' identifier* ')'"""
        if self.current.kind != TokenKind.IDENTIFIER:
            raise self._missing("identifier")

        name_token = self.current
        self.advance()

        if not self.current.is_char("("):
            raise self._missing("'(' in prototype")

        params: List[str] = []
        while self.advance().kind == TokenKind.IDENTIFIER:
            params.append(self.current.value)

        if not self.current.is_char(")"):
            raise self._missing("')' in prototype")
        self.advance()

        return Prototype(name_token.value, tuple(params), name_token.location)

    def parse_definition(self) -> Function:
        """definition ::= 'def' prototype expression"""
        self.advance()
        proto = self.parse_prototype()
        body = self.parse_expression()
        logger.debug(f"Parsed definition of '{proto.name}' with {len(proto.params)} parameters")
        return Function(proto, body)

    def parse_extern(self) -> Prototype:
        """extern ::= 'extern' prototype"""
        self.advance()
        proto = self.parse_prototype()
        logger.debug(f"Parsed extern '{proto.name}'")
        return proto

    def parse_top_level_expr(self) -> Function:
        """toplevelexpr ::= expression, wrapped in an anonymous function."""
        location = self.current.location
        body = self.parse_expression()
        return Function(Prototype("", (), location), body)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source,
    filename: str = "<input>",
    options: Optional[ParserOptions] = None,
) -> List[Union[Function, Prototype]]:
    """
    Parse a whole input into its top-level constructs.

    This runs the Driver with the configured recovery policy and raises an
    aggregate error if any construct failed.

    Args:
        source: Input text or text stream
        filename: Name of the input for error messages
        options: Parser options (defaults if None)

    Returns:
        Functions (definitions and wrapped top-level expressions) and
        Prototypes (externs), in input order

    Raises:
        KscopeCompilationError: If any construct failed to parse
    """
    from kscope.driver import Driver

    options = options or ParserOptions()
    driver = Driver(Parser.from_source(source, filename, options, prime=False), options=options)
    driver.run()
    driver.errors.raise_if_errors()
    return driver.nodes()


def parse_expression_source(
    source,
    filename: str = "<input>",
    options: Optional[ParserOptions] = None,
) -> Expression:
    """
    Parse exactly one expression.

    Raises:
        ParseError: If the input is not a single well-formed expression
    """
    parser = Parser.from_source(source, filename, options)
    expr = parser.parse_expression()
    if not parser.at_end():
        token = parser.current
        raise UnexpectedTokenError(
            "unexpected input after expression",
            token.describe(),
            token.location,
            parser.lexer.source_line(token.line),
        )
    return expr

"""
kscope - Kaleidoscope Language Front-End
========================================

This package implements the front-end of the Kaleidoscope expression
language: a lexer that turns a character stream into tokens, and a
recursive descent parser that builds an AST for function definitions,
extern declarations and top-level expressions. Binary operators are
resolved by precedence climbing.

Pipeline
--------
    Input stream → Lexer → Parser → AST → (your code generator / printer)

Main Components
---------------
- **lexer**: Lexer, Token, TokenKind
- **parser**: Parser, parse_source, parse_expression_source
- **ast**: NumberLiteral, VariableRef, BinaryOp, Call, Prototype, Function
- **driver**: Driver, the top-level loop with single-token error recovery
- **config**: ParserOptions, PrecedenceTable

Quick Start
-----------
>>> from kscope import parse_source
>>> parse_source("def add(a b) a+b; add(1, 2)")
[Function(proto=Prototype(name='add', ...), ...), Function(...)]

Or use the command-line tool:
    $ kscope --ast program.ks
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kscope.errors import (
    KscopeError,
    KscopeCompilationError,
    LexicalError,
    InvalidNumberError,
    ParseError,
    UnexpectedTokenError,
    MissingTokenError,
    NestingTooDeepError,
    SourceLocation,
)
from kscope.config import ParserOptions, PrecedenceTable, RecoveryPolicy
from kscope.lexer import Lexer, Token, TokenKind
from kscope.ast import (
    ASTNode,
    Expression,
    NumberLiteral,
    VariableRef,
    BinaryOp,
    Call,
    Prototype,
    Function,
    ASTVisitor,
    ASTPrinter,
)
from kscope.parser import Parser, parse_source, parse_expression_source
from kscope.driver import Driver, ParseOutcome, OutcomeKind

__all__ = [
    # Version
    "__version__",
    # Errors
    "KscopeError",
    "KscopeCompilationError",
    "LexicalError",
    "InvalidNumberError",
    "ParseError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "NestingTooDeepError",
    "SourceLocation",
    # Configuration
    "ParserOptions",
    "PrecedenceTable",
    "RecoveryPolicy",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    # AST
    "ASTNode",
    "Expression",
    "NumberLiteral",
    "VariableRef",
    "BinaryOp",
    "Call",
    "Prototype",
    "Function",
    "ASTVisitor",
    "ASTPrinter",
    # Parser and driver
    "Parser",
    "parse_source",
    "parse_expression_source",
    "Driver",
    "ParseOutcome",
    "OutcomeKind",
]

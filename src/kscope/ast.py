"""
kscope Abstract Syntax Tree (AST) Definitions
=============================================

This module defines the AST produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── NumberLiteral - floating-point constant
│   ├── VariableRef - reference to a name
│   ├── BinaryOp - lhs op rhs
│   └── Call - callee(args...)
├── Prototype - function name and parameter names
└── Function - prototype plus body expression

The node set is closed: `Expression` is the union of the four expression
classes, and consumers dispatch with ASTVisitor or isinstance checks.

Design Notes
------------
- All nodes are frozen dataclasses; children are stored in tuples, so a
  tree cannot be modified after construction
- Each parent owns its children; the parser never shares a node
- Equality is structural; the optional source location is ignored
- Names are opaque text: nothing is resolved or checked here
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Tuple, Union

from kscope.errors import SourceLocation


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberLiteral(ASTNode):
    """
    Numeric literal such as 1.0.

    Attributes:
        value: The literal value (every number is a float)
        location: Where the literal starts (not compared)
    """
    value: float = 0.0
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class VariableRef(ASTNode):
    """
    Reference to a variable by name.

    Attributes:
        name: The variable name
    """
    name: str = ""
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryOp(ASTNode):
    """
    Binary operation (lhs op rhs).

    Attributes:
        op: The operator character, e.g. '+'
        lhs: Left operand
        rhs: Right operand
    """
    op: str = ""
    lhs: "Expression" = None
    rhs: "Expression" = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "lhs", _coerce_expression(self.lhs))
        object.__setattr__(self, "rhs", _coerce_expression(self.rhs))


@dataclass(frozen=True)
class Call(ASTNode):
    """
    Function call.

    Attributes:
        callee: Name of the called function
        args: Argument expressions, in written order
    """
    callee: str = ""
    args: Tuple["Expression", ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(_coerce_expression(a) for a in self.args))


Expression = Union[NumberLiteral, VariableRef, BinaryOp, Call]

EXPRESSION_TYPES = (NumberLiteral, VariableRef, BinaryOp, Call)


def _coerce_expression(value: Any) -> "Expression":
    # Bare numbers are accepted so trees can be written as BinaryOp('+', 1, 2)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return NumberLiteral(float(value))
    return value


# =============================================================================
# Top-Level Nodes
# =============================================================================

@dataclass(frozen=True)
class Prototype(ASTNode):
    """
    Function signature: a name and its parameter names.

    An empty name marks the anonymous function that wraps a top-level
    expression. Duplicate parameter names are not checked.

    Attributes:
        name: Function name ("" for anonymous)
        params: Parameter names, in written order
    """
    name: str = ""
    params: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def is_anonymous(self) -> bool:
        return self.name == ""


@dataclass(frozen=True)
class Function(ASTNode):
    """
    Function definition: prototype plus body.

    Produced for `def` forms and for bare top-level expressions.

    Attributes:
        proto: The function's prototype
        body: The body expression
    """
    proto: Prototype = None
    body: "Expression" = None

    def __post_init__(self):
        object.__setattr__(self, "body", _coerce_expression(self.body))


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; the default visits every child node.

    Usage:
        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_VariableRef(self, node):
                self.names.append(node.name)

        collector = NameCollector()
        collector.visit(function)
    """

    def visit(self, node: ASTNode) -> Any:
        """Visit a node by dispatching to visit_<ClassName>."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes of node."""
        for f in fields(node):
            value = getattr(node, f.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)

    def visit_NumberLiteral(self, node: NumberLiteral): return self.generic_visit(node)
    def visit_VariableRef(self, node: VariableRef): return self.generic_visit(node)
    def visit_BinaryOp(self, node: BinaryOp): return self.generic_visit(node)
    def visit_Call(self, node: Call): return self.generic_visit(node)
    def visit_Prototype(self, node: Prototype): return self.generic_visit(node)
    def visit_Function(self, node: Function): return self.generic_visit(node)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(function))

    Output for `def foo(a b) a+b*2`:
        Function: foo(a, b)
          BinaryOp: +
            Variable: a
            BinaryOp: *
              Variable: b
              Number: 2.0
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _children(self, *nodes: ASTNode) -> None:
        self.indent_level += 1
        for child in nodes:
            self.visit(child)
        self.indent_level -= 1

    def visit_Function(self, node: Function):
        name = node.proto.name or "<anonymous>"
        self._emit(f"Function: {name}({', '.join(node.proto.params)})")
        self._children(node.body)

    def visit_Prototype(self, node: Prototype):
        self._emit(f"Extern: {node.name}({', '.join(node.params)})")

    def visit_BinaryOp(self, node: BinaryOp):
        self._emit(f"BinaryOp: {node.op}")
        self._children(node.lhs, node.rhs)

    def visit_Call(self, node: Call):
        self._emit(f"Call: {node.callee}")
        self._children(*node.args)

    def visit_VariableRef(self, node: VariableRef):
        self._emit(f"Variable: {node.name}")

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"Number: {node.value}")


def format_expression(expr: Expression) -> str:
    """
    Render an expression on one line with every binary operation
    parenthesized, e.g. "(1.0 + (2.0 * 3.0))".
    """
    if isinstance(expr, NumberLiteral):
        return str(expr.value)
    if isinstance(expr, VariableRef):
        return expr.name
    if isinstance(expr, BinaryOp):
        return f"({format_expression(expr.lhs)} {expr.op} {format_expression(expr.rhs)})"
    if isinstance(expr, Call):
        args = ", ".join(format_expression(a) for a in expr.args)
        return f"{expr.callee}({args})"
    return f"<{type(expr).__name__}>"

"""
Zeb Abstract Syntax Tree (AST) Definitions
==========================================

This module defines the AST node types produced by the Zeb parser and
consumed by the code generator.

Node Hierarchy
--------------
ASTNode (base)
├── Program - root node holding the flat statement list
├── Statements
│   ├── Exit - terminate the program with an exit status
│   ├── Assign - bind a name to the value of an expression
│   ├── For - counting loop over range(...)
│   └── EndFor - end of a loop body
└── Expressions
    ├── IntegerLiteral - 64-bit integer constant
    ├── VariableReference - read of a bound name
    ├── InfixOp - binary arithmetic (left op right)
    └── Call - built-in invocation with a single argument

Design Notes
------------
- All nodes are dataclasses
- Source locations are optional and keyword-only, so tests and tools can
  build trees directly: Assign("x", IntegerLiteral(5))
- Locations never take part in equality
- Statements form a flat list; EndFor is a marker, not a block closer
"""

from dataclasses import dataclass, field
from typing import Optional

from zebc.errors import SourceLocation
from zebc.lang.errors import MalformedProgramError


# IntegerLiteral values must fit a signed 64-bit register
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears (if known)
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass
class Expression(ASTNode):
    """Base class for nodes that evaluate to a 64-bit integer."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for top-level statements."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class IntegerLiteral(Expression):
    """
    Integer literal expression.

    Attributes:
        value: The integer value (signed 64-bit range)
    """
    value: int = 0


@dataclass
class VariableReference(Expression):
    """
    Variable reference expression.

    Attributes:
        name: The variable name
    """
    name: str = ""


@dataclass
class InfixOp(Expression):
    """
    Binary arithmetic expression.

    The operator is kept as its source symbol. The parser accepts
    '+', '-', '*', '/' and '%'; the generator decides which it supports.

    Attributes:
        left: Left operand
        operator: Operator symbol
        right: Right operand
    """
    left: Expression = None
    operator: str = "+"
    right: Expression = None


@dataclass
class Call(Expression):
    """
    Built-in invocation such as print(x) or range(10).

    Attributes:
        name: Callable name (without parenthesis)
        argument: The single argument expression
    """
    name: str = ""
    argument: Expression = None


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Exit(Statement):
    """
    exit <expression>

    Attributes:
        expression: Value used as the process exit status
    """
    expression: Expression = None


@dataclass
class Assign(Statement):
    """
    <name> = <expression>

    Attributes:
        name: Variable being bound
        expression: Value of the new binding
    """
    name: str = ""
    expression: Expression = None


@dataclass
class For(Statement):
    """
    for <name> in <expression>

    Attributes:
        name: Induction variable
        expression: Iterable, which must be a range(...) call
    """
    name: str = ""
    expression: Expression = None


@dataclass
class EndFor(Statement):
    """endfor"""
    pass


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class Program(ASTNode):
    """
    Root node of the AST representing a complete Zeb program.

    Attributes:
        statements: Statements in source order
    """
    statements: list[Statement] = field(default_factory=list)


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches visit(node) to visit_<ClassName>(node). Subclasses
    override the methods for the node types they care about. A node
    with no visit method reaches generic_visit, which rejects it as
    malformed unless a subclass overrides it.

    Usage:
        class NameCollector(ASTVisitor):
            def visit_Assign(self, node):
                self.names.append(node.name)
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Fallback for nodes without a visit method."""
        raise MalformedProgramError(node, getattr(node, "location", None))


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
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

    def visit_Program(self, node: Program):
        self._emit("Program")
        self.indent_level += 1
        for stmt in node.statements:
            self.visit(stmt)
        self.indent_level -= 1

    def visit_Exit(self, node: Exit):
        self._emit(f"Exit {self.expr_str(node.expression)}")

    def visit_Assign(self, node: Assign):
        self._emit(f"Assign {node.name} = {self.expr_str(node.expression)}")

    def visit_For(self, node: For):
        self._emit(f"For {node.name} in {self.expr_str(node.expression)}")

    def visit_EndFor(self, node: EndFor):
        self._emit("EndFor")

    def generic_visit(self, node: ASTNode) -> None:
        if isinstance(node, Expression):
            self._emit(f"Expr: {self.expr_str(node)}")
        else:
            self._emit(f"<{type(node).__name__}>")

    @classmethod
    def expr_str(cls, expr: Optional[Expression]) -> str:
        """Convert an expression to its source-like representation."""
        if expr is None:
            return ""
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)
        if isinstance(expr, VariableReference):
            return expr.name
        if isinstance(expr, InfixOp):
            return f"({cls.expr_str(expr.left)} {expr.operator} {cls.expr_str(expr.right)})"
        if isinstance(expr, Call):
            return f"{expr.name}({cls.expr_str(expr.argument)})"
        return f"<{type(expr).__name__}>"

    @classmethod
    def statement_str(cls, stmt: Statement) -> str:
        """Convert a statement to its source-like representation."""
        if isinstance(stmt, Exit):
            return f"exit {cls.expr_str(stmt.expression)}"
        if isinstance(stmt, Assign):
            return f"{stmt.name} = {cls.expr_str(stmt.expression)}"
        if isinstance(stmt, For):
            return f"for {stmt.name} in {cls.expr_str(stmt.expression)}"
        if isinstance(stmt, EndFor):
            return "endfor"
        return f"<{type(stmt).__name__}>"

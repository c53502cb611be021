"""
Expression Tree Definitions
===========================

This module defines the tree built by the parser and consumed by the
code generator.

Node Kinds
----------
Node
├── NUMBER - integer literal (leaf)
├── Arithmetic: ADD, SUB, MUL, DIV
└── Comparison: LT, LE, EQ, NE

There are no GT/GE kinds: the parser rewrites `a > b` as `LT(b, a)` and
`a >= b` as `LE(b, a)`. There is no negation kind either: `-x` becomes
`SUB(NUMBER(0), x)`.

Design Notes
------------
- Every non-NUMBER node has exactly two children, NUMBER nodes have none
- Each node owns its children, so the structure is always a tree
- Each node keeps the source location of the token that produced it
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from exprcc.errors import SourceLocation


# =============================================================================
# Node Kinds
# =============================================================================

class NodeKind(Enum):
    """Expression tree node kinds, valued by their source spelling."""

    NUMBER = "num"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LT = "<"
    LE = "<="
    EQ = "=="
    NE = "!="


# =============================================================================
# Node
# =============================================================================

@dataclass
class Node:
    """
    A node of the expression tree.

    Attributes:
        kind: The NodeKind
        value: Literal value, NUMBER nodes only
        left: Left operand, binary nodes only
        right: Right operand, binary nodes only
        location: Source location of the literal or operator
    """
    kind: NodeKind
    value: Optional[int] = None
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    location: Optional[SourceLocation] = None

    def __repr__(self) -> str:
        if self.kind == NodeKind.NUMBER:
            return f"Node(NUMBER, {self.value})"
        return f"Node({self.kind.name}, {self.left!r}, {self.right!r})"

    @property
    def is_number(self) -> bool:
        return self.kind == NodeKind.NUMBER


def new_number(value: int, location: Optional[SourceLocation] = None) -> Node:
    """Create a NUMBER leaf."""
    return Node(NodeKind.NUMBER, value=value, location=location)


def new_binary(
    kind: NodeKind,
    left: Node,
    right: Node,
    location: Optional[SourceLocation] = None,
) -> Node:
    """Create a binary operator node owning `left` and `right`."""
    return Node(kind, left=left, right=right, location=location)


# =============================================================================
# Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for tree visitors.

    Subclasses implement visit_NUMBER, visit_ADD and so on; kinds
    without a handler fall through to generic_visit, which visits the
    children left to right.

    Example:
        class LeafCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_NUMBER(self, node):
                self.count += 1
    """

    def visit(self, node: Node) -> Any:
        """Dispatch to the visit_<KIND> method for this node."""
        method = getattr(self, f"visit_{node.kind.name}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Node) -> None:
        """Visit the children of a binary node in order."""
        if node.left is not None:
            self.visit(node.left)
        if node.right is not None:
            self.visit(node.right)


class ASTPrinter(ASTVisitor):
    """
    Render a tree as indented text, one node per line.

    Example:
        >>> ASTPrinter().print(parse_expr("1+2*3"))
        ADD
          NUMBER 1
          MUL
            NUMBER 2
            NUMBER 3
    """

    def __init__(self):
        self._lines: list[str] = []
        self._indent = 0
        self._pending: list[tuple[Node, int]] = []

    def print(self, node: Node) -> str:
        self._lines = []
        self._pending = [(node, 0)]
        # Children are queued instead of visited recursively, so a long
        # left-deep chain prints without growing the call stack
        while self._pending:
            current, self._indent = self._pending.pop()
            self.visit(current)
        return "\n".join(self._lines)

    def _emit(self, text: str) -> None:
        self._lines.append("  " * self._indent + text)

    def visit_NUMBER(self, node: Node) -> None:
        self._emit(f"NUMBER {node.value}")

    def generic_visit(self, node: Node) -> None:
        self._emit(node.kind.name)
        # Right first so the left child comes off the queue first
        self._pending.append((node.right, self._indent + 1))
        self._pending.append((node.left, self._indent + 1))

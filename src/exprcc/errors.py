"""
exprcc Error Hierarchy
======================

This module defines the root of the exception hierarchy for exprcc.
All exceptions inherit from ExprCompilerError, allowing callers to catch
every compiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
ExprCompilerError (base)
├── CompileError (exprcc.cc.errors) - lexer and parser failures
│   ├── LexError - character that cannot be tokenized
│   ├── ParseError - expected token not found
│   ├── LiteralOverflowError - literal does not fit the integer type
│   └── DivisionByZeroError - division by a literal zero
└── EmulatorError - fault while executing generated code

Design Philosophy
-----------------
Each compile error carries the exact offset of the offending character in
the source expression. Errors are raised, never printed: only the CLI
driver renders them and chooses the process exit status.

Error messages follow this format:
    1+&2
      ^
    error: cannot be tokenized
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class ExprCompilerError(Exception):
    """
    Base exception for all exprcc errors.

    All exceptions in the package inherit from this class, allowing
    callers to catch all compiler-related errors with a single clause:

        try:
            compile_expr("1+")
        except ExprCompilerError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A span of the source expression, used for error reporting.

    The input is always a single line, so a location is just a 0-based
    character offset and the length of the span starting there.

    Attributes:
        offset: Offset of the first character (0-indexed)
        length: Number of characters in the span
    """
    offset: int
    length: int = 1

    @property
    def column(self) -> int:
        """1-indexed column, as editors show it."""
        return self.offset + 1

    def __str__(self) -> str:
        """Format as 'column N' for error messages."""
        return f"column {self.column}"


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(ExprCompilerError):
    """
    Fault while executing generated assembly in the stack machine.

    Raised when:
    - An instruction is not part of the supported subset
    - A pop is executed on an empty stack
    - A division by zero happens at run time
    - The program never reaches 'ret'
    """
    pass

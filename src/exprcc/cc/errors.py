"""
Expression Compiler Error Hierarchy
===================================

This module defines the exceptions raised by the lexer and parser.
All of them inherit from CompileError, which itself inherits from the
package-wide ExprCompilerError.

Exception Hierarchy
-------------------
CompileError (base for all compile-time errors)
├── LexError - character that cannot be tokenized
│   └── InvalidCharacterError - names the offending character
├── ParseError - expected token class not found
│   ├── ExpectedNumberError - primary expression missing
│   ├── InvalidOperatorError - required operator missing
│   ├── TrailingTokenError - input left over after the expression
│   └── NestingTooDeepError - parentheses or unary operators nested too deep
├── LiteralOverflowError - literal larger than INT_MAX
└── DivisionByZeroError - division by the literal 0

Error Message Format
--------------------
Compilation stops at the first error. The error renders the source line,
a caret under the failing offset, then the message:

    1+*2
      ^
    error: number expected

Tabs before the failing offset are kept in the caret line so the caret
stays aligned with the source.
"""

from typing import Optional

from exprcc.errors import ExprCompilerError, SourceLocation


# =============================================================================
# Base Compile Exception
# =============================================================================

class CompileError(ExprCompilerError):
    """
    Base exception for all compile-time errors.

    This class provides the caret-style rendering shared by every lexer
    and parser failure.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        source: The full source expression (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.source = source
        self.hint = hint
        super().__init__(self._format_message())

    @property
    def offset(self) -> Optional[int]:
        """Offset of the error in the source, if known."""
        return self.location.offset if self.location else None

    def _format_message(self) -> str:
        """
        Format the error with source context, caret pointer and hint.

        Example output:
            1+&2
              ^
            error: cannot be tokenized
        """
        parts = []

        # Source context with caret pointer
        if self.source is not None and self.location is not None:
            parts.append(self.source)
            prefix = self.source[:self.location.offset]
            padding = "".join("\t" if char == "\t" else " " for char in prefix)
            parts.append(f"{padding}^")

        parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Errors
# =============================================================================

class LexError(CompileError):
    """
    The lexer met a character that starts no token.

    Examples:
        - '&' in "1&2"
        - '=' on its own in "1=2"
    """
    pass


class InvalidCharacterError(LexError):
    """
    Invalid character in the source expression.

    Carries the offending character so callers can inspect it.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            "cannot be tokenized",
            location=location,
            source=source,
            hint=f"unexpected character {char!r}",
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class ParseError(CompileError):
    """
    Syntax error: an expected token class was not found at the cursor.

    Raised by the parser, including when the cursor is at end of input.
    """
    pass


class ExpectedNumberError(ParseError):
    """A primary expression (number or parenthesis) was required."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        super().__init__(
            "number expected",
            location=location,
            source=source,
        )


class InvalidOperatorError(ParseError):
    """
    Required operator is missing.

    Raised when a specific operator (such as the closing ')') is not
    found where the grammar demands it.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"invalid operator: expected '{expected}'",
            location=location,
            source=source,
        )


class TrailingTokenError(ParseError):
    """
    Input remains after a complete expression.

    Example:
        1+2)    // the ')' has no matching '('
    """

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"unexpected trailing token '{found}'",
            location=location,
            source=source,
        )


class NestingTooDeepError(ParseError):
    """
    Parentheses and unary operators are nested past the parser's limit.

    Reported at the '(' or unary operator that opens the level one past
    the limit.
    """

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            "expression nested too deeply",
            location=location,
            source=source,
            hint=f"at most {limit} levels of parentheses and unary operators are allowed",
        )


# =============================================================================
# Value Errors
# =============================================================================

class LiteralOverflowError(CompileError):
    """
    Integer literal does not fit the target integer type.

    Literals are pushed as sign-extended 32-bit immediates, so the
    largest accepted literal is 2147483647.
    """

    def __init__(
        self,
        text: str,
        limit: int,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        self.text = text
        self.limit = limit
        super().__init__(
            f"integer literal {text} is out of range",
            location=location,
            source=source,
            hint=f"literals must not exceed {limit}",
        )


class DivisionByZeroError(CompileError):
    """
    Division by the literal 0.

    Only literal divisors are checked; a divisor that evaluates to zero
    at run time traps on the target machine.
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source: Optional[str] = None,
    ):
        super().__init__(
            "division by zero",
            location=location,
            source=source,
        )

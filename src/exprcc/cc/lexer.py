"""
Expression Lexer (Tokenizer)
============================

This module converts an expression string into a flat list of tokens
for the parser.

Token Categories
----------------
- Reserved: operators and punctuation, one or two characters
- Numbers: runs of decimal digits
- EOF: always the last token, exactly once

Operators
---------
Two-character operators are tried before single characters, in this order:

    ==  !=  <=  >=

Single-character punctuation:

    +  -  *  /  (  )  <  >

Example Usage
-------------
>>> from exprcc.cc.lexer import Lexer
>>> for token in Lexer("12 <= 3").tokenize():
...     print(token)
Token(NUMBER, 12, @0)
Token(RESERVED, '<=', @3)
Token(NUMBER, 3, @6)
Token(EOF, @7)
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from exprcc.errors import SourceLocation
from exprcc.cc.errors import InvalidCharacterError, LiteralOverflowError

logger = logging.getLogger(__name__)


# Largest literal a sign-extended imm32 'push' can carry
INT_MAX = 2**31 - 1

# Checked in this order before single characters
MULTI_CHAR_OPERATORS = ("==", "!=", "<=", ">=")

PUNCTUATION = "+-*/()<>"


# =============================================================================
# Token Types
# =============================================================================

class TokenKind(Enum):
    """Token classification."""

    RESERVED = auto()   # Operator or punctuation
    NUMBER = auto()     # Integer literal
    EOF = auto()        # End of input


@dataclass(frozen=True)
class Token:
    """
    A single token of the source expression.

    Attributes:
        kind: The TokenKind classification
        text: The exact source text of the token ('' for EOF)
        offset: Offset of the first character in the source (0-indexed)
        value: Numeric value, NUMBER tokens only
    """
    kind: TokenKind
    text: str
    offset: int
    value: Optional[int] = None

    def __repr__(self) -> str:
        if self.kind == TokenKind.NUMBER:
            return f"Token({self.kind.name}, {self.value}, @{self.offset})"
        if self.kind == TokenKind.EOF:
            return f"Token({self.kind.name}, @{self.offset})"
        return f"Token({self.kind.name}, {self.text!r}, @{self.offset})"

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.offset, max(self.length, 1))

    def is_operator(self, op: str) -> bool:
        """Return True if this is the reserved token `op`."""
        return self.kind == TokenKind.RESERVED and self.text == op


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes an arithmetic expression.

    A single left-to-right scan with no backtracking. Whitespace is
    skipped; anything that is not whitespace, a digit or a known operator
    is an error reported at its exact offset.

    Usage:
        tokens = list(Lexer(source).tokenize())

    Attributes:
        source: The expression being tokenized
    """

    def __init__(self, source: str):
        self.source = source
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source.

        Yields:
            Token objects, ending with exactly one EOF token

        Raises:
            LexError: If a character cannot be tokenized
            LiteralOverflowError: If a literal exceeds INT_MAX
        """
        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._pos += 1
                continue

            token = self._scan_operator()
            if token is None:
                if char in "0123456789":
                    token = self._scan_number()
                else:
                    raise InvalidCharacterError(
                        char,
                        SourceLocation(self._pos),
                        self.source,
                    )
            yield token

        yield Token(TokenKind.EOF, "", self._pos)

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_operator(self) -> Optional[Token]:
        """Scan a reserved token, or return None if none starts here."""
        start = self._pos

        for op in MULTI_CHAR_OPERATORS:
            if self.source.startswith(op, start):
                self._pos += len(op)
                return Token(TokenKind.RESERVED, op, start)

        char = self._peek()
        if char in PUNCTUATION:
            self._pos += 1
            return Token(TokenKind.RESERVED, char, start)

        return None

    def _scan_number(self) -> Token:
        """Scan a maximal run of decimal digits."""
        start = self._pos
        while self._peek() and self._peek() in "0123456789":
            self._pos += 1

        text = self.source[start:self._pos]
        value = int(text)
        if value > INT_MAX:
            raise LiteralOverflowError(
                text,
                INT_MAX,
                SourceLocation(start, len(text)),
                self.source,
            )

        return Token(TokenKind.NUMBER, text, start, value)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str) -> list[Token]:
    """
    Tokenize an expression into a list ending with EOF.

    Raises:
        LexError: If a character cannot be tokenized
        LiteralOverflowError: If a literal exceeds INT_MAX
    """
    tokens = list(Lexer(source).tokenize())
    logger.debug(f"Tokenized {len(tokens)} tokens from {source!r}")
    return tokens

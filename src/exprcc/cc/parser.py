"""
Expression Recursive Descent Parser
===================================

This module implements a recursive descent parser that turns the token
list from the lexer into a single expression tree.

Grammar (EBNF)
--------------
expr        ::= equality
equality    ::= relational ( '==' relational | '!=' relational )*
relational  ::= additive ( '<' additive | '<=' additive
                         | '>' additive | '>=' additive )*
additive    ::= term ( '+' term | '-' term )*
term        ::= unary ( '*' unary | '/' unary )*
unary       ::= '+' unary | '-' unary | primary
primary     ::= NUMBER | '(' expr ')'

Precedence is encoded by the call graph: each level calls the next
tighter level for its operands and loops over its own operators, so all
binary operators are left-associative.

Tree Normalization
------------------
- `a > b` is built as LT(b, a) and `a >= b` as LE(b, a)
- unary `+x` is just x
- unary `-x` is SUB(NUMBER(0), x)

Nesting Limit
-------------
Parentheses and unary operators recurse, so they may be nested at most
MAX_NESTING_DEPTH levels deep. Binary operator chains are parsed by loops
and have no length limit.

Example Usage
-------------
>>> from exprcc.cc.lexer import tokenize
>>> from exprcc.cc.parser import Parser
>>> Parser(tokenize("1-2+3"), "1-2+3").parse()
Node(ADD, Node(SUB, Node(NUMBER, 1), Node(NUMBER, 2)), Node(NUMBER, 3))
"""

import logging
from typing import Optional

from exprcc.cc.ast import Node, NodeKind, new_binary, new_number
from exprcc.cc.errors import (
    DivisionByZeroError,
    ExpectedNumberError,
    InvalidOperatorError,
    NestingTooDeepError,
    TrailingTokenError,
)
from exprcc.cc.lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)


# Levels of '(' and unary operators; each level costs several Python frames
MAX_NESTING_DEPTH = 64


class Parser:
    """
    Recursive descent parser for arithmetic expressions.

    The parser owns a cursor (`_pos`) into the token list and only ever
    moves it forward, one token per successful consume. The token list
    itself is never modified.

    There is no error recovery: the first error is raised immediately.

    Attributes:
        tokens: Token list from the lexer, ending with EOF
        source: Original source expression, for error context
    """

    def __init__(self, tokens: list[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source
        self._pos = 0
        self._depth = 0

    def parse(self) -> Node:
        """
        Parse the whole token list into one tree.

        Returns:
            The root Node

        Raises:
            ParseError: If the tokens do not form exactly one expression
            DivisionByZeroError: If something is divided by the literal 0
            NestingTooDeepError: If nesting exceeds MAX_NESTING_DEPTH
        """
        self._pos = 0
        self._depth = 0
        node = self._parse_expr()

        if not self._at_end():
            token = self._peek()
            raise TrailingTokenError(token.text, token.location, self.source)

        return node

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self) -> Token:
        """Current token; EOF once the cursor runs off the list."""
        if self._pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self._pos]

    def _at_end(self) -> bool:
        return self._peek().kind == TokenKind.EOF

    def _advance(self) -> Token:
        """Consume and return the current token (EOF is never consumed)."""
        token = self._peek()
        if token.kind != TokenKind.EOF:
            self._pos += 1
        return token

    def _consume(self, op: str) -> bool:
        """Consume the current token if it is operator `op`."""
        if self._peek().is_operator(op):
            self._advance()
            return True
        return False

    def _expect(self, op: str) -> Token:
        """
        Consume operator `op`, which must be the current token.

        Raises:
            InvalidOperatorError: If the current token is anything else
        """
        token = self._peek()
        if not token.is_operator(op):
            raise InvalidOperatorError(op, token.location, self.source)
        return self._advance()

    def _expect_number(self) -> Token:
        """
        Consume a NUMBER token.

        Raises:
            ExpectedNumberError: If the current token is not a number
        """
        token = self._peek()
        if token.kind != TokenKind.NUMBER:
            raise ExpectedNumberError(token.location, self.source)
        return self._advance()

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_expr(self) -> Node:
        """expr ::= equality"""
        return self._parse_equality()

    def _parse_equality(self) -> Node:
        """Parse equality expression (== !=)."""
        node = self._parse_relational()

        while True:
            token = self._peek()
            if self._consume("=="):
                node = new_binary(NodeKind.EQ, node, self._parse_relational(), token.location)
            elif self._consume("!="):
                node = new_binary(NodeKind.NE, node, self._parse_relational(), token.location)
            else:
                return node

    def _parse_relational(self) -> Node:
        """Parse relational expression (< <= > >=)."""
        node = self._parse_additive()

        while True:
            token = self._peek()
            if self._consume("<"):
                node = new_binary(NodeKind.LT, node, self._parse_additive(), token.location)
            elif self._consume("<="):
                node = new_binary(NodeKind.LE, node, self._parse_additive(), token.location)
            elif self._consume(">"):
                # Operands swapped: a > b  ==  b < a
                node = new_binary(NodeKind.LT, self._parse_additive(), node, token.location)
            elif self._consume(">="):
                node = new_binary(NodeKind.LE, self._parse_additive(), node, token.location)
            else:
                return node

    def _parse_additive(self) -> Node:
        """Parse additive expression (+ -)."""
        node = self._parse_term()

        while True:
            token = self._peek()
            if self._consume("+"):
                node = new_binary(NodeKind.ADD, node, self._parse_term(), token.location)
            elif self._consume("-"):
                node = new_binary(NodeKind.SUB, node, self._parse_term(), token.location)
            else:
                return node

    def _parse_term(self) -> Node:
        """Parse multiplicative expression (* /)."""
        node = self._parse_unary()

        while True:
            token = self._peek()
            if self._consume("*"):
                node = new_binary(NodeKind.MUL, node, self._parse_unary(), token.location)
            elif self._consume("/"):
                divisor = self._parse_unary()
                if divisor.is_number and divisor.value == 0:
                    raise DivisionByZeroError(token.location, self.source)
                node = new_binary(NodeKind.DIV, node, divisor, token.location)
            else:
                return node

    def _enter_nested(self, token: Token) -> None:
        """
        Open one nesting level for the '(' or unary operator `token`.

        Raises:
            NestingTooDeepError: If this level is past MAX_NESTING_DEPTH
        """
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise NestingTooDeepError(MAX_NESTING_DEPTH, token.location, self.source)

    def _parse_unary(self) -> Node:
        """Parse unary expression (+ -), right-recursive."""
        token = self._peek()

        if self._consume("+"):
            self._enter_nested(token)
            node = self._parse_unary()
            self._depth -= 1
            return node
        if self._consume("-"):
            self._enter_nested(token)
            zero = new_number(0, token.location)
            node = new_binary(NodeKind.SUB, zero, self._parse_unary(), token.location)
            self._depth -= 1
            return node

        return self._parse_primary()

    def _parse_primary(self) -> Node:
        """Parse primary expression (number or parenthesized expr)."""
        token = self._peek()

        if self._consume("("):
            self._enter_nested(token)
            node = self._parse_expr()
            self._expect(")")
            self._depth -= 1
            return node

        token = self._expect_number()
        return new_number(token.value, token.location)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expr(source: str) -> Node:
    """
    Tokenize and parse an expression in one step.

    Raises:
        CompileError: If lexing or parsing fails
    """
    tokens = tokenize(source)
    node = Parser(tokens, source).parse()
    logger.debug(f"Parsed {source!r} into {node.kind.name} tree")
    return node

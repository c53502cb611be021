"""
Expression Compiler Main Module
===============================

This module provides the main compiler interface. It runs the stages in
order:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ exprcc "2+3*4" > tmp.s

Programmatic:
    >>> from exprcc.cc import compile_expr
    >>> asm = compile_expr("2+3*4")

Error Handling
--------------
Compilation stops at the first error. Lexer and parser errors propagate
as CompileError subclasses carrying the failing offset; this module
never prints and never exits.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from exprcc.cc.ast import Node
from exprcc.cc.codegen import (
    DEFAULT_ENTRY_SYMBOL,
    DEFAULT_SYNTAX_DIRECTIVE,
    CodeGenerator,
    render_program,
)
from exprcc.cc.lexer import Lexer, Token
from exprcc.cc.parser import Parser

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        entry_symbol: Name of the exported routine returning the value
        syntax_directive: First line of the output, selecting the
                          assembler's operand order
        emit_comments: Put the source expression in a comment at the
                       top of the output
    """
    entry_symbol: str = DEFAULT_ENTRY_SYMBOL
    syntax_directive: str = DEFAULT_SYNTAX_DIRECTIVE
    emit_comments: bool = False


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        source: The source expression
        tokens: Token list from the lexer
        ast: Root of the expression tree
        instructions: Generated lines, without the prologue and epilogue
        assembly: The complete translation unit
    """
    source: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Node] = None
    instructions: list[str] = field(default_factory=list)
    assembly: str = ""

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class ExprCompiler:
    """
    Expression compiler targeting x86-64.

    Example:
        compiler = ExprCompiler()
        result = compiler.compile_source("1+2")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str) -> CompilerResult:
        """
        Compile an expression to assembly.

        Args:
            source: The expression text

        Returns:
            CompilerResult with every intermediate product

        Raises:
            CompileError: If lexing or parsing fails
        """
        result = CompilerResult(source=source)

        # Stage 1: Lexical analysis
        result.tokens = self._lex(source)

        # Stage 2: Parsing
        result.ast = self._parse(result.tokens, source)

        # Stage 3: Code generation
        result.instructions = CodeGenerator().generate(result.ast)
        result.assembly = render_program(
            result.instructions,
            entry_symbol=self.options.entry_symbol,
            syntax_directive=self.options.syntax_directive,
            comment=f"expr: {source}" if self.options.emit_comments else "",
        )

        logger.debug(
            f"Compiled {source!r}: {result.token_count} tokens, "
            f"{len(result.instructions)} instructions"
        )
        return result

    def _lex(self, source: str) -> list[Token]:
        """Tokenize the source."""
        return list(Lexer(source).tokenize())

    def _parse(self, tokens: list[Token], source: str) -> Node:
        """Parse tokens into a tree."""
        return Parser(tokens, source).parse()


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_expr(source: str, options: Optional[CompilerOptions] = None) -> str:
    """
    Compile an expression to a complete assembly translation unit.

    Raises:
        CompileError: If compilation fails

    Example:
        >>> print(compile_expr("42"))
        .intel_syntax noprefix
        .globl main
        main:
          push 42
          pop rax
          ret
        <BLANKLINE>
    """
    return ExprCompiler(options).compile_source(source).assembly


def compile_to_lines(source: str) -> list[str]:
    """
    Compile an expression to the bare instruction lines.

    The lines leave the value on the stack; no prologue or epilogue.
    """
    return ExprCompiler().compile_source(source).instructions

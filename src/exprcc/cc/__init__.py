"""
Expression Compiler
===================

This package compiles a single arithmetic expression to x86-64 assembly.

- A lexer (tokenizer) for the expression
- A recursive descent parser producing an expression tree
- A code generator emitting stack-machine style assembly

Pipeline
--------
    Source → Lexer → Parser → Tree → Code Generator → Assembly

Usage
-----
>>> from exprcc.cc import compile_expr
>>> print(compile_expr("1+2"))  # x86-64 assembly

Language
--------
- Integer literals (decimal, up to 2147483647)
- Binary: + - * /  == != < <= > >=
- Unary: + -
- Parentheses
"""

from exprcc.cc.compiler import (
    ExprCompiler,
    CompilerOptions,
    CompilerResult,
    compile_expr,
    compile_to_lines,
)
from exprcc.cc.errors import (
    CompileError,
    LexError,
    InvalidCharacterError,
    ParseError,
    ExpectedNumberError,
    InvalidOperatorError,
    TrailingTokenError,
    NestingTooDeepError,
    LiteralOverflowError,
    DivisionByZeroError,
)
from exprcc.cc.lexer import Lexer, Token, TokenKind, tokenize
from exprcc.cc.parser import Parser, parse_expr
from exprcc.cc.codegen import CodeGenerator, render_program, stack_depth
from exprcc.cc.ast import Node, NodeKind, ASTVisitor, ASTPrinter

__all__ = [
    # Main API
    "ExprCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expr",
    "compile_to_lines",
    # Errors
    "CompileError",
    "LexError",
    "InvalidCharacterError",
    "ParseError",
    "ExpectedNumberError",
    "InvalidOperatorError",
    "TrailingTokenError",
    "NestingTooDeepError",
    "LiteralOverflowError",
    "DivisionByZeroError",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    # Parser
    "Parser",
    "parse_expr",
    # Code Generator
    "CodeGenerator",
    "render_program",
    "stack_depth",
    # Tree
    "Node",
    "NodeKind",
    "ASTVisitor",
    "ASTPrinter",
]

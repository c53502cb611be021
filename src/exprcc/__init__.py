"""
exprcc - Arithmetic Expression Compiler for x86-64
==================================================

This package compiles a single arithmetic expression into x86-64
assembly (GNU as, Intel syntax). The output is one translation unit
whose `main` routine evaluates the expression and returns its value.

Main Components
---------------
- **cc**: the compiler proper
    Lexer → recursive descent parser → stack-machine code generator

- **emulator**: stack machine
    Executes the generated assembly in Python, for testing and `--run`

- **cli**: the `exprcc` command

Quick Start
-----------
Compile an expression:
    >>> from exprcc import compile_expr
    >>> asm = compile_expr("2+3*4")

Run it without an assembler:
    >>> from exprcc import run_expr
    >>> run_expr("2+3*4")
    14

Or use the command-line tool:
    $ exprcc "2+3*4" > tmp.s
    $ cc -o tmp tmp.s && ./tmp; echo $?
    14
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from exprcc.cc import (
    ExprCompiler,
    CompilerOptions,
    CompilerResult,
    compile_expr,
    compile_to_lines,
)
from exprcc.errors import (
    ExprCompilerError,
    SourceLocation,
    EmulatorError,
)
from exprcc.cc.errors import (
    CompileError,
    LexError,
    ParseError,
    LiteralOverflowError,
    DivisionByZeroError,
)
from exprcc.emulator import StackMachine, run_program, run_expr

__all__ = [
    # Version info
    "__version__",
    # Compiler
    "ExprCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expr",
    "compile_to_lines",
    # Exception hierarchy
    "ExprCompilerError",
    "SourceLocation",
    "EmulatorError",
    "CompileError",
    "LexError",
    "ParseError",
    "LiteralOverflowError",
    "DivisionByZeroError",
    # Emulator
    "StackMachine",
    "run_program",
    "run_expr",
]

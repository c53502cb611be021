"""
exprcc - Expression Compiler Command-Line Interface
===================================================

This module implements the `exprcc` command. It takes one expression and
writes an x86-64 assembly translation unit to stdout.

Usage Examples
--------------
Basic compilation:
    $ exprcc "2+3*4" > tmp.s

Full pipeline to an executable:
    $ exprcc "2+3*4" > tmp.s && cc -o tmp tmp.s && ./tmp; echo $?

Debugging:
    $ exprcc --tokens "1 <= 2"
    $ exprcc --ast "1-2+3"
    $ exprcc --run "-7/2"
"""

import logging

import click

from exprcc import __version__
from exprcc.cc import ASTPrinter, CompilerOptions, ExprCompiler, Lexer, parse_expr
from exprcc.cli.errors import handle_cli_exception
from exprcc.emulator import run_program

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging to stderr based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

# Expressions such as "-3+5" look like options; unknown options are passed
# through as the positional argument.
@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("expression")
@click.option(
    "--entry",
    default="main",
    show_default=True,
    help="Name of the exported routine that returns the value",
)
@click.option(
    "--comment",
    is_flag=True,
    help="Put the source expression in a comment at the top of the output",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token sequence and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the expression tree and exit (for debugging)",
)
@click.option(
    "--run",
    is_flag=True,
    help="Execute the program on the built-in emulator and print its result",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output on stderr",
)
@click.version_option(version=__version__, prog_name="exprcc")
def main(
    expression: str,
    entry: str,
    comment: bool,
    tokens: bool,
    ast: bool,
    run: bool,
    verbose: bool,
) -> None:
    """
    Compile an arithmetic expression to x86-64 assembly.

    EXPRESSION is a single expression using integers, + - * /,
    unary + -, parentheses and == != < <= > >=.

    \b
    Examples:
        exprcc "2+3*4"              # Assembly on stdout
        exprcc --run "(2+3)*4"      # Prints 20
        exprcc --ast "1 > 2"        # Shows LT with swapped operands
    """
    setup_logging(verbose)

    options = CompilerOptions(entry_symbol=entry, emit_comments=comment)

    try:
        # Debug dumps stop after the stage they show, so a later stage's
        # error does not hide them
        if tokens:
            for token in Lexer(expression).tokenize():
                click.echo(repr(token))
            return

        if ast:
            click.echo(ASTPrinter().print(parse_expr(expression)))
            return

        logger.debug(f"Compiling {expression!r}")
        result = ExprCompiler(options).compile_source(expression)

        if run:
            click.echo(run_program(result.assembly, entry_symbol=entry))
            return

        click.echo(result.assembly, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()

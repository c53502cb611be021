"""
Stack Machine Emulator
======================

Runs generated assembly without an assembler, linker or x86-64 host.

Usage
-----
>>> from exprcc.emulator import run_expr
>>> run_expr("(2+3)*4")
20
"""

from exprcc.emulator.machine import (
    StackMachine,
    MachineState,
    Flags,
    run_program,
    run_expr,
    to_signed,
)

__all__ = [
    "StackMachine",
    "MachineState",
    "Flags",
    "run_program",
    "run_expr",
    "to_signed",
]

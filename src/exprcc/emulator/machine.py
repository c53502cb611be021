"""
x86-64 Stack Machine Emulator
=============================

Executes the small subset of x86-64 (Intel syntax) that the code
generator emits, so compiled expressions can be checked without an
assembler or linker.

Supported Instructions
----------------------
| Instruction        | Effect                                      |
|--------------------|---------------------------------------------|
| push imm/reg       | push a 64-bit value                         |
| pop reg            | pop into a register                         |
| mov reg, imm/reg   | copy a value                                |
| add / sub reg, reg | two's-complement add / subtract             |
| imul reg, reg      | signed multiply, low 64 bits kept           |
| cqo                | sign-extend RAX into RDX                    |
| idiv reg           | signed divide RDX:RAX, truncating to zero   |
| cmp reg, reg       | set Z, S, O, C flags from the subtraction   |
| sete/setne/setl/setle al | set AL to 0 or 1 from the flags       |
| movzb reg, al      | zero-extend AL                              |
| ret                | stop, returning RAX                         |

Assembler directives (".intel_syntax", ".globl"), labels and '#'
comments are skipped. Execution starts at the entry label when there is
one, otherwise at the first instruction.

All arithmetic wraps at 64 bits, like the hardware. A division by zero
or an INT64_MIN / -1 overflow raises EmulatorError where the hardware
would trap.

The 'ret' instruction must find the stack empty: in the real program the
caller's return address sits right below the expression's values.
"""

import logging
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Optional

from exprcc.errors import EmulatorError

logger = logging.getLogger(__name__)


MASK64 = (1 << 64) - 1
SIGN_BIT = 1 << 63

REGISTERS = ("rax", "rdi", "rdx")


def to_signed(value: int) -> int:
    """Interpret a 64-bit pattern as a signed integer."""
    value &= MASK64
    return value - (1 << 64) if value & SIGN_BIT else value


class Flags(IntFlag):
    """Condition flags set by 'cmp'."""
    C = 0x01  # Carry/Borrow
    Z = 0x40  # Zero
    S = 0x80  # Sign
    O = 0x800  # Overflow


@dataclass
class MachineState:
    """
    Complete machine state.

    Register values are stored as unsigned 64-bit patterns.

    Attributes:
        registers: Register name -> 64-bit value
        stack: Pushed values, top of stack last
        flags: Flags from the last 'cmp'
        steps: Instructions executed so far
        max_depth: Deepest the stack has been
    """
    registers: dict[str, int] = field(
        default_factory=lambda: {name: 0 for name in REGISTERS}
    )
    stack: list[int] = field(default_factory=list)
    flags: Flags = Flags(0)
    steps: int = 0
    max_depth: int = 0


class StackMachine:
    """
    Interpreter for generated assembly.

    Usage:
        machine = StackMachine()
        value = machine.run(assembly_text)

    Attributes:
        entry_symbol: Label to start executing at
        max_steps: Instruction budget before giving up
    """

    def __init__(self, entry_symbol: str = "main", max_steps: int = 1_000_000):
        self.entry_symbol = entry_symbol
        self.max_steps = max_steps
        self.state = MachineState()

    # =========================================================================
    # Register Access
    # =========================================================================

    def _read(self, operand: str) -> int:
        """Value of a register or immediate operand."""
        if operand in self.state.registers:
            return self.state.registers[operand]
        if operand == "al":
            return self.state.registers["rax"] & 0xFF
        try:
            return int(operand, 0) & MASK64
        except ValueError:
            raise EmulatorError(f"invalid operand '{operand}'") from None

    def _write(self, register: str, value: int) -> None:
        if register == "al":
            rax = self.state.registers["rax"]
            self.state.registers["rax"] = (rax & ~0xFF & MASK64) | (value & 0xFF)
            return
        if register not in self.state.registers:
            raise EmulatorError(f"unsupported register '{register}'")
        self.state.registers[register] = value & MASK64

    # =========================================================================
    # Execution
    # =========================================================================

    def run(self, assembly: str) -> int:
        """
        Execute an assembly translation unit.

        Args:
            assembly: Program text, as produced by render_program

        Returns:
            Signed value of RAX when 'ret' executes

        Raises:
            EmulatorError: On any fault
        """
        return self.run_lines(assembly.splitlines())

    def run_lines(self, lines: list[str]) -> int:
        """Execute a list of assembly lines; see run()."""
        self.state = MachineState()
        program = self._load(lines)

        for mnemonic, operands in program:
            self.state.steps += 1
            if self.state.steps > self.max_steps:
                raise EmulatorError(f"step limit of {self.max_steps} exceeded")

            if mnemonic == "ret":
                if self.state.stack:
                    raise EmulatorError(
                        f"unbalanced stack at ret: {len(self.state.stack)} values left"
                    )
                result = to_signed(self.state.registers["rax"])
                logger.debug(f"ret after {self.state.steps} steps, rax={result}")
                return result

            self._execute(mnemonic, operands)

        raise EmulatorError("program ended without 'ret'")

    def _load(self, lines: list[str]) -> list[tuple[str, list[str]]]:
        """Strip directives, labels and comments, and split instructions."""
        program: list[tuple[str, list[str]]] = []
        entry: Optional[int] = None

        for raw in lines:
            line = raw.split("#", 1)[0].strip()
            if not line or line.startswith("."):
                continue
            if line.endswith(":"):
                if line[:-1] == self.entry_symbol:
                    entry = len(program)
                continue

            parts = line.split(None, 1)
            operands = [op.strip() for op in parts[1].split(",")] if len(parts) > 1 else []
            program.append((parts[0].lower(), operands))

        return program[entry:] if entry is not None else program

    def _execute(self, mnemonic: str, operands: list[str]) -> None:
        """Execute one instruction."""
        state = self.state
        regs = state.registers

        if mnemonic == "push":
            state.stack.append(self._read(operands[0]))
            state.max_depth = max(state.max_depth, len(state.stack))
        elif mnemonic == "pop":
            if not state.stack:
                raise EmulatorError("pop from empty stack")
            self._write(operands[0], state.stack.pop())
        elif mnemonic == "mov":
            self._write(operands[0], self._read(operands[1]))
        elif mnemonic == "add":
            self._write(operands[0], self._read(operands[0]) + self._read(operands[1]))
        elif mnemonic == "sub":
            self._write(operands[0], self._read(operands[0]) - self._read(operands[1]))
        elif mnemonic == "imul":
            product = to_signed(self._read(operands[0])) * to_signed(self._read(operands[1]))
            self._write(operands[0], product)
        elif mnemonic == "cqo":
            regs["rdx"] = MASK64 if regs["rax"] & SIGN_BIT else 0
        elif mnemonic == "idiv":
            self._divide(self._read(operands[0]))
        elif mnemonic == "cmp":
            self._compare(self._read(operands[0]), self._read(operands[1]))
        elif mnemonic in ("sete", "setne", "setl", "setle"):
            self._write(operands[0], int(self._condition(mnemonic[3:])))
        elif mnemonic in ("movzb", "movzx"):
            self._write(operands[0], self._read(operands[1]) & 0xFF)
        else:
            raise EmulatorError(f"unsupported instruction '{mnemonic}'")

    def _divide(self, divisor: int) -> None:
        """IDIV: RDX:RAX / divisor -> quotient in RAX, remainder in RDX."""
        regs = self.state.registers
        divisor = to_signed(divisor)
        if divisor == 0:
            raise EmulatorError("division by zero")

        dividend = (regs["rdx"] << 64) | regs["rax"]
        if dividend & (1 << 127):
            dividend -= 1 << 128

        quotient = abs(dividend) // abs(divisor)
        if (dividend < 0) != (divisor < 0):
            quotient = -quotient
        remainder = dividend - quotient * divisor

        if not -(1 << 63) <= quotient < (1 << 63):
            raise EmulatorError("division overflow")

        regs["rax"] = quotient & MASK64
        regs["rdx"] = remainder & MASK64

    def _compare(self, left: int, right: int) -> None:
        """CMP: set flags from left - right."""
        result = (left - right) & MASK64
        flags = Flags(0)
        if result == 0:
            flags |= Flags.Z
        if result & SIGN_BIT:
            flags |= Flags.S
        if (left ^ right) & (left ^ result) & SIGN_BIT:
            flags |= Flags.O
        if left < right:
            flags |= Flags.C
        self.state.flags = flags

    def _condition(self, code: str) -> bool:
        """Evaluate a condition code suffix against the flags."""
        flags = self.state.flags
        zero = bool(flags & Flags.Z)
        less = bool(flags & Flags.S) != bool(flags & Flags.O)
        if code == "e":
            return zero
        if code == "ne":
            return not zero
        if code == "l":
            return less
        return zero or less


# =============================================================================
# Convenience Functions
# =============================================================================

def run_program(assembly: str, entry_symbol: str = "main") -> int:
    """Execute an assembly translation unit and return RAX at 'ret'."""
    return StackMachine(entry_symbol).run(assembly)


def run_expr(source: str) -> int:
    """
    Compile an expression and execute it.

    Raises:
        CompileError: If the expression does not compile
        EmulatorError: If execution faults
    """
    from exprcc.cc.compiler import compile_expr

    return run_program(compile_expr(source))

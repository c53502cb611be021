# =============================================================================
# test_emulator.py - Stack Machine Emulator Tests
# =============================================================================
# Tests for the x86-64 subset interpreter used to check compiled programs.
#
# Test coverage includes:
#   - Individual instructions and flag handling
#   - 64-bit wraparound and signed division
#   - Program loading (directives, labels, comments)
#   - Fault conditions
# =============================================================================

import pytest
from exprcc.emulator import Flags, StackMachine, run_program, to_signed
from exprcc.errors import EmulatorError


# =============================================================================
# Helper Functions
# =============================================================================

def run(*lines: str) -> int:
    """Run bare instruction lines (no entry label)."""
    return StackMachine().run_lines(list(lines))


def binary(left: int, right: int, *operation: str) -> int:
    """Run `operation` with RAX=left and RDI=right, returning RAX."""
    return run(
        f"push {left}",
        f"push {right}",
        "pop rdi",
        "pop rax",
        *operation,
        "ret",
    )


# =============================================================================
# Instruction Tests
# =============================================================================

class TestInstructions:
    """Test individual instructions."""

    def test_push_pop_ret(self):
        assert run("push 5", "pop rax", "ret") == 5

    def test_mov(self):
        assert run("mov rax, 9", "mov rdi, rax", "mov rax, 0", "mov rax, rdi", "ret") == 9

    def test_add(self):
        assert binary(2, 3, "add rax, rdi") == 5

    def test_sub(self):
        assert binary(2, 3, "sub rax, rdi") == -1

    def test_imul(self):
        assert binary(-4, 3, "imul rax, rdi") == -12

    @pytest.mark.parametrize("left, right, expected", [
        (7, 2, 3),
        (-7, 2, -3),
        (7, -2, -3),
        (-7, -2, 3),
        (0, 5, 0),
    ])
    def test_idiv_truncates_toward_zero(self, left, right, expected):
        assert binary(left, right, "cqo", "idiv rdi") == expected

    def test_idiv_remainder_in_rdx(self):
        machine = StackMachine()
        machine.run_lines(["push -7", "push 2", "pop rdi", "pop rax", "cqo", "idiv rdi", "ret"])
        assert to_signed(machine.state.registers["rdx"]) == -1

    @pytest.mark.parametrize("setcc, left, right, expected", [
        ("sete", 3, 3, 1),
        ("sete", 3, 4, 0),
        ("setne", 3, 4, 1),
        ("setne", 3, 3, 0),
        ("setl", 1, 2, 1),
        ("setl", 2, 1, 0),
        ("setl", -1, 0, 1),
        ("setle", 2, 2, 1),
        ("setle", 3, 2, 0),
    ])
    def test_setcc(self, setcc, left, right, expected):
        result = binary(left, right, "cmp rax, rdi", f"{setcc} al", "movzb rax, al")
        assert result == expected

    def test_cmp_flags(self):
        machine = StackMachine()
        machine.run_lines(["mov rax, 1", "mov rdi, 2", "cmp rax, rdi", "ret"])
        assert machine.state.flags & Flags.S
        assert machine.state.flags & Flags.C
        assert not machine.state.flags & Flags.Z

    def test_movzb_clears_upper_bits(self):
        """SETcc only writes AL; MOVZB clears the rest of RAX."""
        assert run("mov rax, -1", "mov rdi, 0", "cmp rax, rdi", "sete al", "movzb rax, al", "ret") == 0


# =============================================================================
# Arithmetic Width Tests
# =============================================================================

class TestWraparound:
    """Arithmetic wraps at 64 bits like the hardware."""

    def test_to_signed(self):
        assert to_signed(0xFFFFFFFFFFFFFFFF) == -1
        assert to_signed(0x7FFFFFFFFFFFFFFF) == 2**63 - 1

    def test_add_overflow_wraps(self):
        assert binary(2**62, 2**62, "add rax, rdi") == -(2**63)

    def test_mul_overflow_wraps(self):
        assert binary(2**32, 2**32, "imul rax, rdi") == 0

    def test_signed_compare_after_overflow(self):
        """setl uses S != O, so it stays correct across signed overflow."""
        assert run(
            "mov rax, -9223372036854775808",
            "mov rdi, 1",
            "cmp rax, rdi",
            "setl al",
            "movzb rax, al",
            "ret",
        ) == 1


# =============================================================================
# Program Loading Tests
# =============================================================================

class TestLoading:
    """Directives, labels and comments."""

    def test_runs_rendered_program(self):
        program = (
            ".intel_syntax noprefix\n"
            ".globl main\n"
            "main:\n"
            "  push 40\n"
            "  push 2\n"
            "  pop rdi\n"
            "  pop rax\n"
            "  add rax, rdi\n"
            "  push rax\n"
            "  pop rax\n"
            "  ret\n"
        )
        assert run_program(program) == 42

    def test_comments_are_ignored(self):
        assert run_program("# header\nmain:\n  push 1 # one\n  pop rax\n  ret\n") == 1

    def test_starts_at_entry_label(self):
        program = "other:\n  push 99\nmain:\n  push 1\n  pop rax\n  ret\n"
        assert run_program(program) == 1

    def test_custom_entry_label(self):
        program = ".globl calc\ncalc:\n  push 3\n  pop rax\n  ret\n"
        assert run_program(program, entry_symbol="calc") == 3

    def test_tracks_max_depth(self):
        machine = StackMachine()
        machine.run_lines(["push 1", "push 2", "push 3", "pop rax", "pop rax", "pop rax", "ret"])
        assert machine.state.max_depth == 3


# =============================================================================
# Fault Tests
# =============================================================================

class TestFaults:
    """Conditions where the hardware would trap or misbehave."""

    def test_division_by_zero(self):
        with pytest.raises(EmulatorError, match="division by zero"):
            binary(1, 0, "cqo", "idiv rdi")

    def test_division_overflow(self):
        with pytest.raises(EmulatorError, match="overflow"):
            run(
                "mov rax, -9223372036854775808",
                "mov rdi, -1",
                "cqo",
                "idiv rdi",
                "ret",
            )

    def test_pop_empty_stack(self):
        with pytest.raises(EmulatorError, match="empty stack"):
            run("pop rax", "ret")

    def test_unbalanced_ret(self):
        with pytest.raises(EmulatorError, match="unbalanced"):
            run("push 1", "push 2", "pop rax", "ret")

    def test_missing_ret(self):
        with pytest.raises(EmulatorError, match="without 'ret'"):
            run("push 1", "pop rax")

    def test_unsupported_instruction(self):
        with pytest.raises(EmulatorError, match="unsupported instruction"):
            run("jmp main")

    def test_unsupported_register(self):
        with pytest.raises(EmulatorError, match="unsupported register"):
            run("push 1", "pop rbx", "ret")

    def test_invalid_operand(self):
        with pytest.raises(EmulatorError, match="invalid operand"):
            run("push foo", "ret")

    def test_step_limit(self):
        machine = StackMachine(max_steps=3)
        with pytest.raises(EmulatorError, match="step limit"):
            machine.run_lines(["push 1", "pop rax", "push 1", "pop rax", "ret"])

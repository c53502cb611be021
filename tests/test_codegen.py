# =============================================================================
# test_codegen.py - Code Generator Unit Tests
# =============================================================================
# Tests for the x86-64 code generator.
#
# Test coverage includes:
#   - Instruction sequences per node kind
#   - Post-order evaluation order (left before right)
#   - The stack-balance invariant (pushes - pops == 1)
#   - Translation unit layout (directives, label, epilogue)
# =============================================================================

import pytest
from exprcc.cc.ast import NodeKind, new_binary, new_number
from exprcc.cc.codegen import CodeGenerator, render_program, stack_depth
from exprcc.cc.parser import parse_expr


# =============================================================================
# Helper Functions
# =============================================================================

def generate(source: str) -> list:
    """Parse and generate, returning the bare instruction lines."""
    return CodeGenerator().generate(parse_expr(source))


def mnemonics(lines: list) -> list:
    return [line.split()[0] for line in lines]


BINARY_PROLOGUE = ["  pop rdi", "  pop rax"]


# =============================================================================
# Node Kind Tests
# =============================================================================

class TestNodeKinds:
    """One instruction sequence per node kind."""

    def test_number(self):
        assert generate("42") == ["  push 42"]

    def test_add(self):
        assert generate("1+2") == [
            "  push 1",
            "  push 2",
            *BINARY_PROLOGUE,
            "  add rax, rdi",
            "  push rax",
        ]

    def test_sub(self):
        assert generate("5-3")[4] == "  sub rax, rdi"

    def test_mul(self):
        assert generate("5*3")[4] == "  imul rax, rdi"

    def test_div_sign_extends(self):
        lines = generate("7/2")
        assert lines[4:7] == ["  cqo", "  idiv rdi", "  push rax"]

    @pytest.mark.parametrize("source, setcc", [
        ("1==2", "sete"),
        ("1!=2", "setne"),
        ("1<2", "setl"),
        ("1<=2", "setle"),
    ])
    def test_comparisons(self, source, setcc):
        lines = generate(source)
        assert lines[4:8] == [
            "  cmp rax, rdi",
            f"  {setcc} al",
            "  movzb rax, al",
            "  push rax",
        ]

    def test_greater_than_reuses_less_than(self):
        """'3>2' generates exactly what '2<3' generates."""
        assert generate("3>2") == generate("2<3")
        assert generate("3>=2") == generate("2<=3")

    def test_hand_built_tree(self):
        tree = new_binary(NodeKind.MUL, new_number(6), new_number(7))
        assert CodeGenerator().generate(tree)[4] == "  imul rax, rdi"

    def test_number_is_not_an_operation(self):
        with pytest.raises(ValueError):
            CodeGenerator()._generate_operation(NodeKind.NUMBER)


# =============================================================================
# Evaluation Order Tests
# =============================================================================

class TestEvaluationOrder:
    """Left subtree is generated before the right subtree."""

    def test_left_before_right(self):
        lines = generate("1-2")
        assert lines[:2] == ["  push 1", "  push 2"]

    def test_post_order_nested(self):
        lines = generate("1*2+3")
        pushes = [line for line in lines if line.startswith("  push ") and line != "  push rax"]
        assert pushes == ["  push 1", "  push 2", "  push 3"]
        # The MUL is computed before 3 is pushed
        assert lines.index("  imul rax, rdi") < lines.index("  push 3")

    def test_unary_minus_pushes_zero_first(self):
        assert generate("-5")[:2] == ["  push 0", "  push 5"]

    def test_generator_is_reusable(self):
        gen = CodeGenerator()
        first = gen.generate(parse_expr("1+2"))
        second = gen.generate(parse_expr("3"))
        assert second == ["  push 3"]
        assert len(first) == 6


# =============================================================================
# Stack Balance Tests
# =============================================================================

class TestStackBalance:
    """Every well-formed tree nets exactly one pushed value."""

    @pytest.mark.parametrize("source", [
        "0",
        "1+2",
        "2+3*4",
        "(2+3)*4",
        "-(2+3)",
        "1-2+3-4+5",
        "((1+2)*(3+4))/(5-6)",
        "1<2==3>=4",
        "-----1",
        "1*2*3*4*5*6*7*8*9",
    ])
    def test_net_push_is_one(self, source):
        assert stack_depth(generate(source)) == 1

    def test_render_program_balances_to_zero(self):
        """The driver's final pop consumes the single value."""
        program = render_program(generate("1+2*3"))
        assert stack_depth(program.splitlines()) == 0

    def test_stack_depth_ignores_other_lines(self):
        assert stack_depth(["", ".globl main", "main:", "  push 1", "  cqo"]) == 1

    def test_long_flat_chain(self):
        """A 2000-term sum generates without deep recursion."""
        lines = generate("+".join(["1"] * 2000))
        assert stack_depth(lines) == 1
        assert lines[:2] == ["  push 1", "  push 1"]
        assert lines.count("  add rax, rdi") == 1999

    def test_long_chain_needs_two_stack_slots(self):
        """Each partial sum is folded before the next term is pushed."""
        lines = generate("-".join(["7"] * 500))
        depth = peak = 0
        for line in lines:
            depth += 1 if line.startswith("  push") else -1 if line.startswith("  pop") else 0
            peak = max(peak, depth)
        assert peak == 2


# =============================================================================
# Translation Unit Tests
# =============================================================================

class TestRenderProgram:
    """Layout of the complete assembly output."""

    def test_layout(self):
        program = render_program(["  push 7"])
        assert program.splitlines() == [
            ".intel_syntax noprefix",
            ".globl main",
            "main:",
            "  push 7",
            "  pop rax",
            "  ret",
        ]
        assert program.endswith("\n")

    def test_custom_entry_symbol(self):
        lines = render_program(["  push 7"], entry_symbol="calc").splitlines()
        assert lines[1:3] == [".globl calc", "calc:"]

    def test_custom_syntax_directive(self):
        program = render_program(["  push 7"], syntax_directive=".intel_syntax")
        assert program.startswith(".intel_syntax\n")

    def test_comment(self):
        lines = render_program(["  push 7"], comment="expr: 7").splitlines()
        assert lines[0] == "# expr: 7"
        assert lines[1] == ".intel_syntax noprefix"

    def test_mnemonic_set_is_minimal(self):
        lines = generate("(1+2)*3/4-5<6<=7==8!=9")
        assert set(mnemonics(lines)) <= {
            "push", "pop", "add", "sub", "imul", "cqo", "idiv",
            "cmp", "sete", "setne", "setl", "setle", "movzb",
        }

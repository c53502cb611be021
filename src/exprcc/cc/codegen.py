"""
x86-64 Code Generator
=====================

This module generates x86-64 assembly (GNU as, Intel syntax) from an
expression tree.

Code Generation Strategy
------------------------
The generator uses a pure stack-machine model. The operand stack is the
machine stack itself; the generator keeps no stack of its own:

1. A NUMBER pushes its value
2. A binary node generates its left operand, then its right operand,
   so the stack holds left below right
3. It pops right into RDI and left into RAX, computes into RAX and
   pushes RAX

Every subtree therefore leaves exactly one value on the stack. The
driver pops that final value into RAX and returns it.

Register Usage
--------------
| Register | Usage                                   |
|----------|-----------------------------------------|
| RAX      | Left operand, result, return value      |
| RDI      | Right operand                           |
| RDX      | High half of the dividend for IDIV      |

Comparison Strategy
-------------------
Comparisons do `cmp rax, rdi`, set AL from the condition code with
SETcc, then zero-extend AL into RAX with MOVZB, giving exactly 0 or 1.
GT and GE never reach the generator: the parser already swapped them
into LT and LE.

Example output for "1+2":
    .intel_syntax noprefix
    .globl main
    main:
      push 1
      push 2
      pop rdi
      pop rax
      add rax, rdi
      push rax
      pop rax
      ret
"""

import logging

from exprcc.cc.ast import Node, NodeKind

logger = logging.getLogger(__name__)


DEFAULT_SYNTAX_DIRECTIVE = ".intel_syntax noprefix"
DEFAULT_ENTRY_SYMBOL = "main"

# SETcc suffix for each comparison kind
SETCC = {
    NodeKind.EQ: "sete",
    NodeKind.NE: "setne",
    NodeKind.LT: "setl",
    NodeKind.LE: "setle",
}


class CodeGenerator:
    """
    Generates x86-64 stack code from an expression tree.

    Usage:
        lines = CodeGenerator().generate(tree)
    """

    def __init__(self):
        self._output: list[str] = []

    def generate(self, node: Node) -> list[str]:
        """
        Generate instruction lines for a tree.

        The lines leave one value on the stack; popping it and
        returning is up to the caller (see render_program).

        Args:
            node: Root of the expression tree

        Returns:
            Instruction lines, each indented by two spaces
        """
        self._output = []
        self._generate_node(node)
        logger.debug(f"Generated {len(self._output)} instructions")
        return self._output

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit_instruction(self, mnemonic: str, *operands: str) -> None:
        """Emit an instruction with optional operands."""
        if operands:
            self._output.append(f"  {mnemonic} {', '.join(operands)}")
        else:
            self._output.append(f"  {mnemonic}")

    # =========================================================================
    # Node Code Generation
    # =========================================================================

    def _generate_node(self, root: Node) -> None:
        """
        Emit post-order code for the tree rooted at `root`.

        Long operator chains build left-deep trees as tall as the chain is
        long, so the walk uses an explicit work stack instead of recursion.
        Each entry is a node and whether its children are already emitted.
        """
        work: list[tuple[Node, bool]] = [(root, False)]

        while work:
            node, children_done = work.pop()

            if node.kind == NodeKind.NUMBER:
                self._emit_instruction("push", str(node.value))
            elif children_done:
                self._emit_instruction("pop", "rdi")
                self._emit_instruction("pop", "rax")
                self._generate_operation(node.kind)
                self._emit_instruction("push", "rax")
            else:
                # Popped in reverse: left subtree, right subtree, then the operation
                work.append((node, True))
                work.append((node.right, False))
                work.append((node.left, False))

    def _generate_operation(self, kind: NodeKind) -> None:
        """Emit the operation for `kind` on RAX (left) and RDI (right)."""
        if kind == NodeKind.ADD:
            self._emit_instruction("add", "rax", "rdi")
        elif kind == NodeKind.SUB:
            self._emit_instruction("sub", "rax", "rdi")
        elif kind == NodeKind.MUL:
            self._emit_instruction("imul", "rax", "rdi")
        elif kind == NodeKind.DIV:
            # Sign-extend RAX into RDX:RAX so negative dividends work
            self._emit_instruction("cqo")
            self._emit_instruction("idiv", "rdi")
        elif kind in SETCC:
            self._emit_instruction("cmp", "rax", "rdi")
            self._emit_instruction(SETCC[kind], "al")
            self._emit_instruction("movzb", "rax", "al")
        else:
            raise ValueError(f"cannot generate code for node kind {kind.name}")


# =============================================================================
# Translation Unit
# =============================================================================

def render_program(
    lines: list[str],
    entry_symbol: str = DEFAULT_ENTRY_SYMBOL,
    syntax_directive: str = DEFAULT_SYNTAX_DIRECTIVE,
    comment: str = "",
) -> str:
    """
    Wrap generated lines into a complete assembly translation unit.

    Adds the syntax directive, exports and labels the entry routine,
    then pops the expression's value into RAX and returns it.

    Args:
        lines: Output of CodeGenerator.generate
        entry_symbol: Name of the exported entry routine
        syntax_directive: Assembler directive selecting operand order
        comment: Optional comment placed above the directives

    Returns:
        Assembly source text ending with a newline
    """
    output = []
    if comment:
        output.append(f"# {comment}")
    output.append(syntax_directive)
    output.append(f".globl {entry_symbol}")
    output.append(f"{entry_symbol}:")
    output.extend(lines)
    output.append("  pop rax")
    output.append("  ret")
    return "\n".join(output) + "\n"


def stack_depth(lines: list[str]) -> int:
    """Net number of values pushed by `lines` (pushes minus pops)."""
    depth = 0
    for line in lines:
        mnemonic = line.split(None, 1)[0] if line.strip() else ""
        if mnemonic == "push":
            depth += 1
        elif mnemonic == "pop":
            depth -= 1
    return depth

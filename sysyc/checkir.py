"""Structural check of generated Koopa IR: every basic block ends in exactly one terminator."""

from __future__ import annotations

EMPTY_BLOCK = 1
MISSING_TERMINATOR = 2
EARLY_TERMINATOR = 3


class IRVerificationError(ValueError):
    """A basic block is malformed; ``code`` tells which rule it broke."""

    def __init__(self, code: int, message: str, block: list[str]) -> None:
        super().__init__(message)
        self.code = code
        self.block = block


def is_terminator(instr: str) -> bool:
    """True for an indented ``br``, ``jump`` or ``ret`` instruction."""
    return instr[2:4] == "br" or instr[2:6] == "jump" or instr[2:5] == "ret"


def split_blocks(ir: str) -> list[list[str]]:
    """Split IR text into basic blocks, each a list of its lines.

    Only label lines and indented instruction lines are kept; a line that
    starts with ``%`` and holds ``:`` opens a new block.
    """
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in ir.split("\n"):
        if "%" not in line and not line.startswith(" "):
            continue
        if line.startswith("%") and ":" in line and current:
            blocks.append(current)
            current = []
        if line:
            current.append(line)
    if current:
        blocks.append(current)
    return blocks


def verify_koopa_blocks(ir: str) -> list[list[str]]:
    """Check every basic block of ``ir`` and return the blocks.

    Raises IRVerificationError if a block is empty, does not end in a
    terminator, or has a terminator before its last line.
    """
    blocks = split_blocks(ir)
    for block in blocks:
        instructions = [line for line in block if line]
        if not instructions:
            raise IRVerificationError(EMPTY_BLOCK, "empty basic block", block)
        if not is_terminator(instructions[-1]):
            raise IRVerificationError(
                MISSING_TERMINATOR,
                f"basic block does not end in a terminator: {instructions[-1]!r}",
                block,
            )
        for instr in instructions[:-1]:
            if is_terminator(instr):
                raise IRVerificationError(
                    EARLY_TERMINATOR,
                    f"terminator in the middle of a basic block: {instr!r}",
                    block,
                )
    return blocks
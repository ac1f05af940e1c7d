from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

import structlog

from ..core.basic_block import BasicBlock
from ..core.instruction import Instruction, JumpInstruction, Opcode, Program
from ..disassembler import identify_basic_blocks

logger = structlog.get_logger(__name__)

# Mapping from opcode to (pops, pushes)
STACK_EFFECTS: Dict[Opcode, Tuple[int, int]] = {
    Opcode.LOAD_VAL: (0, 1),
    Opcode.WRITE_VAR: (1, 0),
    Opcode.READ_VAR: (0, 1),
    Opcode.ADD: (2, 1),
    Opcode.MULTIPLY: (2, 1),
    Opcode.CMP_EQ: (2, 1),
    Opcode.RETURN_VALUE: (1, 0),
    Opcode.JUMP_IF_FALSE: (1, 0),
    Opcode.GOTO: (0, 0),
}


def get_stack_effect(instr: Instruction) -> Tuple[int, int]:
    return STACK_EFFECTS[instr.opcode]


def analyze_stack_locally(block: BasicBlock) -> None:
    """
    Analyze stack effects within a single basic block.

    The height is simulated relative to the block entry, so the minimum height
    reached gives the number of values the block needs on entry.
    """
    stack_height = 0
    total_pushes = 0
    total_pops = 0
    min_height = 0

    for instr in block.instructions:
        pops, pushes = get_stack_effect(instr)

        if stack_height < pops:
            min_height = min(min_height, stack_height - pops)

        stack_height -= pops
        stack_height += pushes
        total_pops += pops
        total_pushes += pushes

    block.stack_height_in = max(0, -min_height)
    block.stack_height_out = block.stack_height_in + stack_height
    block.stack_effect = (total_pushes, total_pops)


def find_invalid_jumps(program: Program) -> List[int]:
    """Positions of jump instructions whose target lies beyond the end of the program."""
    length = len(program)
    return [
        pc for pc, instr in enumerate(program)
        if isinstance(instr, JumpInstruction) and instr.target > length
    ]


def find_reads_before_write(block: BasicBlock) -> Set[str]:
    """Variable names the block reads before it writes them itself."""
    written: Set[str] = set()
    unresolved: Set[str] = set()
    for instr in block.instructions:
        if instr.opcode is Opcode.WRITE_VAR:
            written.add(instr.name)
        elif instr.opcode is Opcode.READ_VAR and instr.name not in written:
            unresolved.add(instr.name)
    return unresolved


@dataclass
class ProgramReport:
    """Static facts about a program. Advisory: the interpreter never needs it."""

    length: int
    blocks: Dict[int, BasicBlock] = field(default_factory=dict)
    invalid_jumps: List[int] = field(default_factory=list)
    entry_underflow: bool = False
    reads_before_write: Set[str] = field(default_factory=set)

    @property
    def ok(self) -> bool:
        return not (self.invalid_jumps or self.entry_underflow or self.reads_before_write)

    def summary(self) -> str:
        lines = [f"instructions: {self.length}", f"blocks: {len(self.blocks)}"]
        for start, block in sorted(self.blocks.items()):
            successors = ", ".join(str(s.start) for s in block.successors) or "-"
            lines.append(
                f"  {block.id}: {block.start}..{block.end} "
                f"needs={block.stack_height_in} leaves={block.stack_height_out} -> {successors}"
            )
        if self.invalid_jumps:
            lines.append(f"invalid jumps at: {', '.join(str(pc) for pc in self.invalid_jumps)}")
        if self.entry_underflow:
            lines.append("entry block underflows an empty stack")
        if self.reads_before_write:
            lines.append(f"read before write: {', '.join(sorted(self.reads_before_write))}")
        return "\n".join(lines)


def analyze_program(program: Program) -> ProgramReport:
    blocks = identify_basic_blocks(program)
    for block in blocks.values():
        analyze_stack_locally(block)

    report = ProgramReport(length=len(program), blocks=blocks, invalid_jumps=find_invalid_jumps(program))
    entry = blocks.get(0)
    if entry is not None:
        report.entry_underflow = entry.stack_height_in > 0
        report.reads_before_write = find_reads_before_write(entry)

    logger.debug(
        "Analyzed program",
        blocks=len(blocks),
        invalid_jumps=report.invalid_jumps,
        entry_underflow=report.entry_underflow,
    )
    return report

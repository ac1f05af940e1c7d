from typing import Dict, Optional, Set

import structlog

from bytevm.core.basic_block import BasicBlock
from bytevm.core.instruction import (
    BLOCK_END_OPCODES,
    TERMINATING_OPCODES,
    Instruction,
    JumpInstruction,
    Program,
)

logger = structlog.get_logger(__name__)


def format_instruction(instr: Instruction) -> str:
    return str(instr)


def find_block_leaders(program: Program) -> Set[int]:
    """
    Positions that start a basic block:
    1. The first instruction (position 0).
    2. Any in-range jump target.
    3. The instruction following a JumpIfFalse, Goto or ReturnValue.
    """
    length = len(program)
    if not length:
        return set()

    leaders = {0}
    for pc, instr in enumerate(program):
        if isinstance(instr, JumpInstruction) and instr.target < length:
            leaders.add(instr.target)
        if instr.opcode in BLOCK_END_OPCODES and pc + 1 < length:
            leaders.add(pc + 1)
    return leaders


def identify_basic_blocks(program: Program) -> Dict[int, BasicBlock]:
    """Partition the program into basic blocks keyed by start position."""
    length = len(program)
    leaders = sorted(find_block_leaders(program))
    basic_blocks: Dict[int, BasicBlock] = {}

    for i, start in enumerate(leaders):
        next_start = leaders[i + 1] if i + 1 < len(leaders) else length
        block = BasicBlock(start=start, end=next_start - 1)
        block.instructions = list(program[start:next_start])
        basic_blocks[start] = block

    for start, block in basic_blocks.items():
        last_instr = block.instructions[-1]

        # Jumps to the end of the program leave the graph
        if isinstance(last_instr, JumpInstruction) and last_instr.target in basic_blocks:
            block.successors.append(basic_blocks[last_instr.target])

        if last_instr.opcode not in TERMINATING_OPCODES:
            fallthrough = block.end + 1
            if fallthrough in basic_blocks and basic_blocks[fallthrough] not in block.successors:
                block.successors.append(basic_blocks[fallthrough])

    for block in basic_blocks.values():
        for successor in block.successors:
            if block not in successor.predecessors:
                successor.predecessors.append(block)

    logger.debug("Identified basic blocks", count=len(basic_blocks), length=length)
    return basic_blocks


def format_program(program: Program, blocks: Optional[Dict[int, BasicBlock]] = None) -> str:
    """
    Render a numbered listing of the program, one instruction per line.

    Lines that start a basic block are marked with '>'.
    """
    if blocks is None:
        blocks = identify_basic_blocks(program)
    width = max(len(str(len(program) - 1)), 1) if program else 1
    lines = []
    for pc, instr in enumerate(program):
        marker = ">" if pc in blocks else " "
        lines.append(f"{marker} {pc:>{width}}: {format_instruction(instr)}")
    return "\n".join(lines)

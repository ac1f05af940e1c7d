from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .instruction import Instruction


@dataclass(eq=False)
class BasicBlock:
    """
    A run of instructions with a single entry at `start`.

    `end` is the position of the last instruction, inclusive. Blocks are
    compared by identity since successor and predecessor edges form cycles.
    """

    start: int
    end: int
    instructions: List[Instruction] = field(default_factory=list)
    predecessors: List["BasicBlock"] = field(default_factory=list, repr=False)
    successors: List["BasicBlock"] = field(default_factory=list, repr=False)
    stack_height_in: Optional[int] = None
    stack_height_out: Optional[int] = None
    stack_effect: Optional[Tuple[int, int]] = None  # (pushes, pops)

    @property
    def id(self) -> str:
        return f"block_{self.start}"

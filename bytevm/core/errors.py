from typing import Optional

from .instruction import Instruction


class ExecutionError(Exception):
    """
    Base class for failures raised while executing a program.

    Carries the program counter and the instruction that failed so callers
    can report where a run stopped.
    """

    def __init__(self, message: str, pc: Optional[int] = None, instruction: Optional[Instruction] = None):
        super().__init__(message)
        self.pc = pc
        self.instruction = instruction

    def __str__(self) -> str:
        message = super().__str__()
        if self.pc is None:
            return message
        return f"{message} (pc={self.pc}, instruction={self.instruction})"


class StackUnderflow(ExecutionError):
    def __init__(self, pc: Optional[int] = None, instruction: Optional[Instruction] = None):
        super().__init__("pop from empty stack", pc, instruction)


class UndefinedVariable(ExecutionError):
    def __init__(self, name: str, pc: Optional[int] = None, instruction: Optional[Instruction] = None):
        super().__init__(f"undefined variable {name!r}", pc, instruction)
        self.name = name


class InvalidJumpTarget(ExecutionError):
    def __init__(self, target: int, program_length: int, pc: Optional[int] = None,
                 instruction: Optional[Instruction] = None):
        super().__init__(f"jump target {target} outside program of length {program_length}", pc, instruction)
        self.target = target
        self.program_length = program_length


class ArithmeticOverflow(ExecutionError):
    """Only raised when the interpreter runs with OverflowPolicy.TRAP."""

    def __init__(self, result: int, pc: Optional[int] = None, instruction: Optional[Instruction] = None):
        super().__init__(f"arithmetic overflow, exact result {result}", pc, instruction)
        self.result = result

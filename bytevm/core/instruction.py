"""
Opcode definitions and instruction types for the interpreter.

A program is a plain sequence of these instructions. Positions in the
sequence are the program counter values, and jump instructions address
those positions directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Sequence

from ..utils.arith import is_value


class Opcode(Enum):
    """Interpreter opcodes"""

    LOAD_VAL = "LoadVal"
    WRITE_VAR = "WriteVar"
    READ_VAR = "ReadVar"
    ADD = "Add"
    MULTIPLY = "Multiply"
    RETURN_VALUE = "ReturnValue"
    CMP_EQ = "CmpEq"
    JUMP_IF_FALSE = "JumpIfFalse"
    GOTO = "Goto"


@dataclass(frozen=True)
class Instruction:
    opcode: ClassVar[Opcode]

    @property
    def operands(self) -> tuple:
        return ()

    def __str__(self) -> str:
        return " ".join([self.opcode.value] + [str(op) for op in self.operands])


@dataclass(frozen=True)
class LoadVal(Instruction):
    value: int
    opcode: ClassVar[Opcode] = Opcode.LOAD_VAL

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"LoadVal expects an int, got {type(self.value).__name__}")
        if not is_value(self.value):
            raise ValueError(f"LoadVal operand out of range: {self.value!r}")

    @property
    def operands(self) -> tuple:
        return (self.value,)


@dataclass(frozen=True)
class _VarInstruction(Instruction):
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError(f"{self.opcode.value} expects a variable name, got {type(self.name).__name__}")

    @property
    def operands(self) -> tuple:
        return (self.name,)


@dataclass(frozen=True)
class WriteVar(_VarInstruction):
    opcode: ClassVar[Opcode] = Opcode.WRITE_VAR


@dataclass(frozen=True)
class ReadVar(_VarInstruction):
    opcode: ClassVar[Opcode] = Opcode.READ_VAR


@dataclass(frozen=True)
class Add(Instruction):
    opcode: ClassVar[Opcode] = Opcode.ADD


@dataclass(frozen=True)
class Multiply(Instruction):
    opcode: ClassVar[Opcode] = Opcode.MULTIPLY


@dataclass(frozen=True)
class ReturnValue(Instruction):
    opcode: ClassVar[Opcode] = Opcode.RETURN_VALUE


@dataclass(frozen=True)
class CmpEq(Instruction):
    opcode: ClassVar[Opcode] = Opcode.CMP_EQ


@dataclass(frozen=True)
class JumpInstruction(Instruction):
    """Base for instructions that may move the program counter to `target`."""

    target: int

    def __post_init__(self):
        if not isinstance(self.target, int) or isinstance(self.target, bool):
            raise TypeError(f"{self.opcode.value} target must be an int, got {type(self.target).__name__}")
        if self.target < 0:
            raise ValueError(f"{self.opcode.value} target must be non-negative: {self.target}")

    @property
    def operands(self) -> tuple:
        return (self.target,)


@dataclass(frozen=True)
class JumpIfFalse(JumpInstruction):
    opcode: ClassVar[Opcode] = Opcode.JUMP_IF_FALSE


@dataclass(frozen=True)
class Goto(JumpInstruction):
    opcode: ClassVar[Opcode] = Opcode.GOTO


# Opcodes after which control never falls through to pc + 1
TERMINATING_OPCODES = {Opcode.GOTO, Opcode.RETURN_VALUE}
# Opcodes that end a basic block
BLOCK_END_OPCODES = {Opcode.GOTO, Opcode.RETURN_VALUE, Opcode.JUMP_IF_FALSE}

Program = Sequence[Instruction]

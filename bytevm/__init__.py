"""
A minimal stack-based bytecode interpreter.
"""

# Instructions
from .core.instruction import (
    Opcode,
    Instruction,
    JumpInstruction,
    LoadVal,
    WriteVar,
    ReadVar,
    Add,
    Multiply,
    ReturnValue,
    CmpEq,
    JumpIfFalse,
    Goto,
)

# Execution
from .core.interpreter import Interpreter
from .core.errors import (
    ExecutionError,
    StackUnderflow,
    UndefinedVariable,
    InvalidJumpTarget,
    ArithmeticOverflow,
)
from .utils.arith import OverflowPolicy

# Tooling
from .disassembler import format_program, identify_basic_blocks
from .analysis.stack_analyzer import analyze_program, ProgramReport

__version__ = "0.1.0"

__all__ = [
    # Instructions
    "Opcode",
    "Instruction",
    "JumpInstruction",
    "LoadVal",
    "WriteVar",
    "ReadVar",
    "Add",
    "Multiply",
    "ReturnValue",
    "CmpEq",
    "JumpIfFalse",
    "Goto",
    # Execution
    "Interpreter",
    "ExecutionError",
    "StackUnderflow",
    "UndefinedVariable",
    "InvalidJumpTarget",
    "ArithmeticOverflow",
    "OverflowPolicy",
    # Tooling
    "format_program",
    "identify_basic_blocks",
    "analyze_program",
    "ProgramReport",
]

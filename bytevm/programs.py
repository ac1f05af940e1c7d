"""
Sample programs for the interpreter.

Each entry in PROGRAMS is a zero-argument builder so callers always get a
fresh list.
"""

from typing import Callable, Dict, List

from bytevm.core.instruction import (
    Add,
    CmpEq,
    Goto,
    Instruction,
    JumpIfFalse,
    LoadVal,
    Multiply,
    ReadVar,
    ReturnValue,
    WriteVar,
)


def from_task() -> List[Instruction]:
    """(x + 1) * y with x = 1, y = 2. Returns 4."""
    return [
        LoadVal(1),
        WriteVar("x"),
        LoadVal(2),
        WriteVar("y"),
        ReadVar("x"),
        LoadVal(1),
        Add(),
        ReadVar("y"),
        Multiply(),
        ReturnValue(),
    ]


def simple_add() -> List[Instruction]:
    return [LoadVal(2), LoadVal(3), Add(), ReturnValue()]


def missing_var() -> List[Instruction]:
    return [ReadVar("x"), ReturnValue()]


def simple_loop() -> List[Instruction]:
    """Counts i from 0 to 10 and falls off the end without returning."""
    return [
        # i = 0
        LoadVal(0),
        WriteVar("i"),
        # i = i + 1
        ReadVar("i"),
        LoadVal(1),
        Add(),
        WriteVar("i"),
        # while i != 10
        ReadVar("i"),
        LoadVal(10),
        CmpEq(),
        JumpIfFalse(2),
    ]


def factorial(n: int = 5) -> List[Instruction]:
    """n! for n >= 1, counting i up from 1. Returns 120 for the default."""
    return [
        LoadVal(1),
        WriteVar("acc"),
        LoadVal(1),
        WriteVar("i"),
        # acc = acc * i
        ReadVar("acc"),
        ReadVar("i"),
        Multiply(),
        WriteVar("acc"),
        # if i == n: done
        ReadVar("i"),
        LoadVal(n),
        CmpEq(),
        JumpIfFalse(13),
        Goto(18),
        # i = i + 1
        ReadVar("i"),
        LoadVal(1),
        Add(),
        WriteVar("i"),
        Goto(4),
        ReadVar("acc"),
        ReturnValue(),
    ]


PROGRAMS: Dict[str, Callable[[], List[Instruction]]] = {
    "from_task": from_task,
    "simple_add": simple_add,
    "missing_var": missing_var,
    "simple_loop": simple_loop,
    "factorial": factorial,
}


class UnknownProgram(KeyError):
    """Raised by get_program for a name missing from PROGRAMS."""


def get_program(name: str) -> List[Instruction]:
    try:
        builder = PROGRAMS[name]
    except KeyError:
        raise UnknownProgram(f"Unknown program {name!r}; available: {', '.join(sorted(PROGRAMS))}") from None
    return builder()

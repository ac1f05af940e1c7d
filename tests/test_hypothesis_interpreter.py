import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from bytevm.core.errors import ArithmeticOverflow, StackUnderflow, UndefinedVariable
from bytevm.core.instruction import (
    Add,
    CmpEq,
    Goto,
    JumpIfFalse,
    LoadVal,
    Multiply,
    ReadVar,
    ReturnValue,
    WriteVar,
)
from bytevm.core.interpreter import Interpreter
from bytevm.utils.arith import MAX_VALUE, OverflowPolicy

values = st.integers(min_value=0, max_value=MAX_VALUE)
names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8)


@settings(max_examples=200, deadline=None)
@given(a=values, b=values)
def test_add_wraps(a, b):
    """LoadVal a, LoadVal b, Add, ReturnValue gives (a + b) mod 2^32."""
    result = Interpreter().execute([LoadVal(a), LoadVal(b), Add(), ReturnValue()])
    assert result == (a + b) % (MAX_VALUE + 1)


@settings(max_examples=200, deadline=None)
@given(a=values, b=values)
def test_multiply_wraps(a, b):
    result = Interpreter().execute([LoadVal(a), LoadVal(b), Multiply(), ReturnValue()])
    assert result == (a * b) % (MAX_VALUE + 1)


@settings(max_examples=200, deadline=None)
@given(a=values, b=values)
def test_add_saturates(a, b):
    result = Interpreter(overflow=OverflowPolicy.SATURATE).execute([LoadVal(a), LoadVal(b), Add(), ReturnValue()])
    assert result == min(a + b, MAX_VALUE)


@settings(max_examples=200, deadline=None)
@given(a=values, b=values)
def test_add_traps_only_on_overflow(a, b):
    interpreter = Interpreter(overflow=OverflowPolicy.TRAP)
    program = [LoadVal(a), LoadVal(b), Add(), ReturnValue()]
    if a + b > MAX_VALUE:
        with pytest.raises(ArithmeticOverflow):
            interpreter.execute(program)
    else:
        assert interpreter.execute(program) == a + b


@settings(max_examples=200, deadline=None)
@given(a=values, b=values)
def test_multiply_saturates(a, b):
    result = Interpreter(overflow=OverflowPolicy.SATURATE).execute([LoadVal(a), LoadVal(b), Multiply(), ReturnValue()])
    assert result == min(a * b, MAX_VALUE)


# Small factors so both sides of the overflow boundary get drawn
factors = st.one_of(st.integers(min_value=0, max_value=0x1FFFF), values)


@settings(max_examples=200, deadline=None)
@given(a=factors, b=factors)
def test_multiply_traps_only_on_overflow(a, b):
    interpreter = Interpreter(overflow=OverflowPolicy.TRAP)
    program = [LoadVal(a), LoadVal(b), Multiply(), ReturnValue()]
    if a * b > MAX_VALUE:
        with pytest.raises(ArithmeticOverflow) as exc_info:
            interpreter.execute(program)
        assert exc_info.value.result == a * b
    else:
        assert interpreter.execute(program) == a * b


@settings(max_examples=100, deadline=None)
@given(a=values, b=values)
def test_cmp_eq_is_symmetric(a, b):
    first = Interpreter().execute([LoadVal(a), LoadVal(b), CmpEq(), ReturnValue()])
    second = Interpreter().execute([LoadVal(b), LoadVal(a), CmpEq(), ReturnValue()])
    assert first == second == (1 if a == b else 0)


@settings(max_examples=100, deadline=None)
@given(stack=st.lists(values, max_size=10), name=names)
def test_read_undefined_always_fails(stack, name):
    """ReadVar of a never-written name fails whatever the stack holds."""
    program = [LoadVal(v) for v in stack] + [ReadVar(name), ReturnValue()]
    with pytest.raises(UndefinedVariable):
        Interpreter().execute(program)


@settings(max_examples=100, deadline=None)
@given(value=values, name=names)
def test_write_then_read_round_trips(value, name):
    program = [LoadVal(value), WriteVar(name), ReadVar(name), ReturnValue()]
    assert Interpreter().execute(program) == value


@settings(max_examples=100, deadline=None)
@given(condition=values)
def test_jump_if_false_branches_on_zero(condition):
    program = [
        LoadVal(condition),
        JumpIfFalse(4),
        LoadVal(1),
        ReturnValue(),
        LoadVal(0),
        ReturnValue(),
    ]
    expected = 0 if condition == 0 else 1
    assert Interpreter().execute(program) == expected


@composite
def straight_line_programs(draw):
    """Programs without jumps, tracked with the stack depth they need."""
    program = []
    depth = 0
    length = draw(st.integers(min_value=0, max_value=30))
    for _ in range(length):
        kind = draw(st.sampled_from(["load", "binary", "write"]))
        if kind == "load":
            program.append(LoadVal(draw(values)))
            depth += 1
        elif kind == "binary" and depth >= 2:
            program.append(draw(st.sampled_from([Add(), Multiply(), CmpEq()])))
            depth -= 1
        elif kind == "write" and depth >= 1:
            program.append(WriteVar(draw(names)))
            depth -= 1
    return program, depth


@settings(max_examples=200, deadline=None)
@given(data=straight_line_programs())
def test_straight_line_stack_depth(data):
    """Without jumps, the final stack depth follows from the stack effects."""
    program, depth = data
    interpreter = Interpreter()
    assert interpreter.execute(program) is None
    assert len(interpreter.stack) == depth
    assert all(0 <= v <= MAX_VALUE for v in interpreter.stack)


@settings(max_examples=200, deadline=None)
@given(data=straight_line_programs())
def test_return_matches_top_of_stack(data):
    program, depth = data
    interpreter = Interpreter()
    if depth == 0:
        with pytest.raises(StackUnderflow):
            interpreter.execute(program + [ReturnValue()])
    else:
        reference = Interpreter()
        reference.execute(program)
        assert interpreter.execute(program + [ReturnValue()]) == reference.stack[-1]


@settings(max_examples=50, deadline=None)
@given(n=st.integers(min_value=1, max_value=50))
def test_counting_loop_terminates(n):
    """A CmpEq/JumpIfFalse loop counting to n ends with i == n."""
    program = [
        LoadVal(0),
        WriteVar("i"),
        ReadVar("i"),
        LoadVal(1),
        Add(),
        WriteVar("i"),
        ReadVar("i"),
        LoadVal(n),
        CmpEq(),
        JumpIfFalse(2),
    ]
    interpreter = Interpreter()
    assert interpreter.execute(program) is None
    assert interpreter.variables["i"] == n


@settings(max_examples=50, deadline=None)
@given(target=st.integers(min_value=1, max_value=4))
def test_forward_goto_resumes_at_target(target):
    """A forward Goto runs the tail from its target, or finishes at len."""
    program = [Goto(target), LoadVal(1), LoadVal(2), LoadVal(3)]
    interpreter = Interpreter()
    assert interpreter.execute(program) is None
    assert len(interpreter.stack) == len(program) - target

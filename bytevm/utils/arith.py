"""Utilities for fixed-width VM arithmetic."""
from enum import Enum

from ..config import VALUE_BITS

VALUE_MASK = (1 << VALUE_BITS) - 1
MAX_VALUE = VALUE_MASK


class OverflowPolicy(Enum):
    """What Add/Multiply do when the exact result leaves the value range."""

    WRAP = "wrap"
    SATURATE = "saturate"
    TRAP = "trap"


def is_value(x) -> bool:
    """True if x is a non-negative integer that fits in VALUE_BITS."""
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= MAX_VALUE


def _fold(result: int, policy: OverflowPolicy) -> int:
    if result <= MAX_VALUE:
        return result
    if policy is OverflowPolicy.WRAP:
        return result & VALUE_MASK
    if policy is OverflowPolicy.SATURATE:
        return MAX_VALUE
    raise OverflowError(f"result {result} does not fit in {VALUE_BITS} bits")


def vm_add(a: int, b: int, policy: OverflowPolicy = OverflowPolicy.WRAP) -> int:
    """Perform VM addition (wrapping at 2^32 by default)."""
    return _fold(a + b, policy)


def vm_mul(a: int, b: int, policy: OverflowPolicy = OverflowPolicy.WRAP) -> int:
    """Perform VM multiplication (wrapping at 2^32 by default)."""
    return _fold(a * b, policy)


def vm_eq(a: int, b: int) -> int:
    """Equal comparison."""
    return 1 if a == b else 0

"""
Arithmetic/logic unit.

Every function is pure and works on unsigned 32-bit ints; results are masked
back to 32 bits so arithmetic wraps around like two's-complement hardware.
"""

MASK32 = 0xFFFFFFFF


def to_unsigned(value: int) -> int:
    return value & MASK32


def to_signed(value: int) -> int:
    """Reinterpret an unsigned 32-bit value as two's-complement."""
    value &= MASK32
    if value & 0x80000000:
        return value - 0x100000000
    return value


def add(a: int, b: int) -> int:
    return (a + b) & MASK32


def subtract(a: int, b: int) -> int:
    return (a - b) & MASK32


def and_(a: int, b: int) -> int:
    return (a & b) & MASK32


def or_(a: int, b: int) -> int:
    return (a | b) & MASK32


def nor(a: int, b: int) -> int:
    return ~(a | b) & MASK32


def shift_left(value: int, amount: int) -> int:
    return (value << (amount & 0x1F)) & MASK32


def shift_right(value: int, amount: int) -> int:
    # logical: zeros shifted in
    return (value & MASK32) >> (amount & 0x1F)


def less_than(a: int, b: int) -> bool:
    return to_signed(a) < to_signed(b)


def less_than_unsigned(a: int, b: int) -> bool:
    return (a & MASK32) < (b & MASK32)


def equal(a: int, b: int) -> bool:
    return (a & MASK32) == (b & MASK32)


def not_equal(a: int, b: int) -> bool:
    return not equal(a, b)


def sign_extend(value: int, bits: int = 16) -> int:
    """Replicate bit ``bits - 1`` into the upper bits of a 32-bit word."""
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value |= MASK32 ^ ((1 << bits) - 1)
    return value


def zero_extend(value: int, bits: int = 16) -> int:
    return value & ((1 << bits) - 1)

"""
32-bit integer helpers and the deterministic string hash used to seed case orders.

All arithmetic wraps at 32 bits so the results match other clients of the
same study bit for bit.
"""

from enum import Enum
from typing import Union

MASK32 = 0xFFFFFFFF


def to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def to_uint32(value: int) -> int:
    return value & MASK32


def imul(a: int, b: int) -> int:
    """32-bit integer multiply with wraparound, result signed."""
    return to_int32((a & MASK32) * (b & MASK32))


def _utf16_code_units(text: str):
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_code(text: str) -> int:
    """
    Non-negative hash of a string: h = h * 31 + code_unit over UTF-16 code units,
    wrapped to signed 32 bits each step, then absolute value.

    The result lies in [0, 2**31]; 2**31 occurs when the wrapped hash is -2**31.
    """
    h = 0
    for unit in _utf16_code_units(text):
        h = to_int32((h << 5) - h + unit)
    return abs(h)


def derive_seed(reader_id: str, condition: Union[str, Enum]) -> int:
    """Seed for one (reader, condition) pair. Same pair, same seed, on every client."""
    if isinstance(condition, Enum):
        condition = condition.value
    return hash_code(f"{reader_id}_{condition}")

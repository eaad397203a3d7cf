"""
Seeded permutation: Fisher-Yates shuffle driven by the Mulberry32 generator.

The mixing constants and truncation steps are a fixed contract. Changing any of
them changes every reader's case order.
"""

from typing import Callable, List, Sequence, TypeVar

from .hashing import imul, to_int32, to_uint32

T = TypeVar("T")

_MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296


def mulberry32(seed: int) -> Callable[[], float]:
    """Return a generator of floats in [0, 1). Same seed, same sequence."""
    state = to_int32(seed)

    def next_float() -> float:
        nonlocal state
        state = to_int32(state + _MULBERRY_INCREMENT)
        t = imul(state ^ (to_uint32(state) >> 15), 1 | state)
        t = to_int32(t + imul(t ^ (to_uint32(t) >> 7), 61 | t)) ^ t
        return to_uint32(t ^ (to_uint32(t) >> 14)) / _TWO_POW_32

    return next_float


def seeded_shuffle(pool: Sequence[T], seed: int) -> List[T]:
    """Return a new list holding a permutation of pool, deterministic in seed."""
    result = list(pool)
    rng = mulberry32(seed)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result

"""Pure helpers: 32-bit hashing and the seeded permutation."""

from .hashing import derive_seed, hash_code, imul, to_int32, to_uint32
from .permutation import mulberry32, seeded_shuffle

__all__ = [
    "derive_seed",
    "hash_code",
    "imul",
    "mulberry32",
    "seeded_shuffle",
    "to_int32",
    "to_uint32",
]

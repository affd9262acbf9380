"""
Seeded random number generation for noise construction.

Mulberry32 arithmetic is masked to uint32, so a seed yields the same
sequence as the editor's JavaScript generator.
"""

from typing import Iterator, Optional, Union

_MASK32 = 0xFFFFFFFF


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer (JavaScript ``n | 0``)."""
    n &= _MASK32
    return n - 0x100000000 if n & 0x80000000 else n


class Mulberry32:
    """
    Mulberry32 PRNG matching the JavaScript version.

    The state is kept as an unsigned 32-bit integer; ``Math.imul`` is
    reproduced by masking the low 32 bits of each product.
    """

    def __init__(self, seed: int = 0):
        self.state = int(seed) & _MASK32

    def next_uint32(self) -> int:
        self.state = (self.state + 0x6D2B79F5) & _MASK32
        s = self.state
        t = ((s ^ (s >> 15)) * (s | 1)) & _MASK32
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & _MASK32)) & _MASK32) ^ t
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        return self.next_uint32() / 4294967296.0

    def __call__(self) -> float:
        return self.random()


def _utf16_units(data: bytes) -> Iterator[int]:
    # Characters above U+FFFF contribute two surrogate units, as charCodeAt sees them
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_seed(seed: Optional[Union[int, float, str]]) -> int:
    """
    Turn a node's ``Seed`` field into an integer seed.

    Numbers are used as-is (truncated), strings get a Java-style 31 hash
    over their UTF-16 code units wrapped to 32 bits, and a missing seed is 0.
    """
    if seed is None or isinstance(seed, bool):
        return 0
    if isinstance(seed, (int, float)):
        if seed != seed or seed in (float("inf"), float("-inf")):
            return 0
        return int(seed)
    data = str(seed).encode("utf-16-le", "surrogatepass")
    h = 0
    for unit in _utf16_units(data):
        h = _int32(31 * h + unit)
    return h

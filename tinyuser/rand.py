"""Small deterministic pseudo-random generators and a busy-work helper."""

from __future__ import annotations

_MASK64 = 0xFFFFFFFFFFFFFFFF
_MODULUS = 0x7FFFFFFF  # 2**31 - 1


class ParkMiller:
    """Park-Miller minimal standard generator: x = 16807 * x mod (2**31 - 1).

    Values are in the range [0, 0x7ffffffd].
    """

    def __init__(self, seed: int = 1) -> None:
        if seed < 0:
            raise ValueError("seed must not be negative")
        self.state = seed & _MASK64

    def next(self) -> int:
        x = (self.state % 0x7FFFFFFE) + 1
        hi, lo = divmod(x, 127773)
        x = 16807 * lo - 2836 * hi
        if x < 0:
            x += _MODULUS
        x -= 1
        self.state = x
        return x

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.next()


class DigitRandom:
    """Generator of a single decimal digit 1..9 taken from a Lehmer sequence."""

    def __init__(self, seed: int = 0x5BD1E995) -> None:
        self.seed = seed & _MASK64

    def next(self) -> int:
        self.seed = (16807 * self.seed) % _MODULUS
        if self.seed == 0:
            raise ValueError("seed is a multiple of the modulus; sequence is stuck at zero")
        t = self.seed * 10
        while t < _MODULUS:
            t *= 10
        return t // _MODULUS

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.next()


def do_work(length: int) -> int:
    """Burn CPU over a ``length`` x ``length`` grid and return the sum."""
    return sum(1 if j % 2 else -1 for _ in range(length) for j in range(length))
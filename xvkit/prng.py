"""The Park-Miller minimal standard pseudo-random number generator."""

from __future__ import annotations

from dataclasses import dataclass

_MODULUS = 0x7FFFFFFF
_RANGE = 0x7FFFFFFE
_MULTIPLIER = 16807
_Q = 127773  # _MODULUS // _MULTIPLIER
_R = 2836  # _MODULUS % _MULTIPLIER
_MASK64 = (1 << 64) - 1


@dataclass
class ParkMiller:
    """A generator whose state is also the last value it returned."""

    state: int = 1

    def __post_init__(self):
        self.state &= _MASK64

    def next(self):
        """Advance and return a value in the range [0, 0x7ffffffd]."""
        x = self.state % _RANGE + 1
        hi, lo = divmod(x, _Q)
        x = _MULTIPLIER * lo - _R * hi
        if x < 0:
            x += _MODULUS
        x -= 1
        self.state = x
        return x

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()
"""Shannon pseudo-random number generator producing values in [0.0, 1.0)."""

from __future__ import annotations

DEFAULT_SEED = 123456789
MULTIPLIER = 16807
MODULUS = 32767
LONG_MAX = 2**63 - 1

_WORD = 2**64
_SIGN = 2**63


def _wrap_signed(value: int) -> int:
    """Reduce an integer to a signed 64-bit value with two's-complement wrap."""
    value %= _WORD
    return value - _WORD if value >= _SIGN else value


def _truncating_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


class ShannonRandom:
    """A small multiplicative generator whose state is a signed 64-bit seed."""

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self.seed = _wrap_signed(int(seed))

    def random(self) -> float:
        """Advance the state and return the next value in [0.0, 1.0)."""
        seed = _wrap_signed(MULTIPLIER * self.seed)
        if seed < 0:
            seed += LONG_MAX
        self.seed = seed
        whole = _truncating_div(seed, MODULUS)
        remainder = seed - whole * MODULUS
        return remainder / float(MODULUS)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self.seed})"


_shared = ShannonRandom()


def randshannon() -> float:
    """Return the next value from the module-wide generator."""
    return _shared.random()
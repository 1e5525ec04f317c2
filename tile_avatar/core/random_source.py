"""Seeded xorshift value source used by the pattern renderer.

Architectural role:
    Supplies every random-looking decision of a render (tile colors and
    corner offsets). One instance is created per render from the seed produced
    by `tile_avatar.core.seed.derive_seed` and is owned by that render only.

Algorithm:
    The state is a signed 32-bit integer. Each draw applies the classic
    13/17/5 xorshift triple with two's-complement wrap-around after every
    step (arithmetic right shift), then reduces the state to three decimal
    digits: `abs(state) % 1000 / 1000`.

Determinism:
    Output is a pure function of `(seed, number of draws)`. Two instances
    built from the same seed produce identical sequences.

Edge cases:
    - Resolution is 1000 distinct values per draw, so `next_range` spans
      that do not divide 1000 are slightly non-uniform. Bounds always hold.
    - A zero state is a fixed point of xorshift. Seed 0 is replaced by
      `ZERO_SEED_SUBSTITUTE` so the stream never collapses to constant 0.
"""

import math

ZERO_SEED_SUBSTITUTE = 0x2545F491
RESOLUTION = 1000


def _to_int32(value: int) -> int:
    """Wrap an arbitrary Python int into signed 32-bit two's complement."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


class SeededRandom:
    """Stateful xorshift generator over a signed 32-bit state.

    Attributes:
        state: Current signed 32-bit state. Mutated by every draw.
    """

    def __init__(self, seed: int):
        state = _to_int32(seed)
        self.state = state if state != 0 else _to_int32(ZERO_SEED_SUBSTITUTE)

    def _advance(self) -> int:
        s = self.state
        s = _to_int32(s ^ (s << 13))
        s = _to_int32(s ^ (s >> 17))
        s = _to_int32(s ^ (s << 5))
        self.state = s
        return s

    def next(self) -> float:
        """Advance the state and return a value in `[0, 1)`."""
        return (abs(self._advance()) % RESOLUTION) / RESOLUTION

    def next_range(self, min_value: int, max_value: int) -> int:
        """Return an integer in the inclusive range `[min_value, max_value]`.

        Raises:
            ValueError: If `max_value < min_value`.
        """
        if max_value < min_value:
            raise ValueError(
                f"invalid range: max_value ({max_value}) < min_value ({min_value})"
            )
        span = max_value - min_value + 1
        return math.floor(self.next() * span) + min_value

    def choice_index(self, length: int) -> int:
        """Pick an index into a sequence of `length` items."""
        return self.next_range(0, length - 1)

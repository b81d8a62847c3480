# -----------------------------------------------------------------------------
#  abacus.py
#  Mixed-radix walk over per-factor digit permutation sets
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterator, Sequence

import gmpy2

from permfactor.cache import PermutationCache
from permfactor.permutations import apply_permutation, generate_permutations
from permfactor.utility import (
    InvalidArgument,
    digits_of,
    max_factor_digits,
    require_positive,
)

_ONE_DIGIT = 9


def digit_permutations(factor: int, *, cache: PermutationCache | None = None) -> tuple[int, ...]:
    """
    Distinct integers obtained by rearranging the decimal digits of ``factor``.

    The enumeration for the digit count is shared through ``cache``, so
    factors of equal length reuse the same index permutations. The result
    keeps first-seen order: ``factor`` itself always comes first. Leading
    zeros collapse, e.g. 101 yields 101, 110 and 11.
    """
    require_positive(factor, "factor")
    if factor <= _ONE_DIGIT:
        return (factor,)

    digits = digits_of(factor)
    limit = max_factor_digits()
    if len(digits) > limit:
        raise InvalidArgument(
            f"Invalid argument: factor {factor} has {len(digits)} digits, "
            f"more than REFACTOR.MAX_FACTOR_DIGITS={limit}.",
            name="factor", value=factor,
        )

    seen: dict[int, None] = {}
    for p in generate_permutations(len(digits), cache=cache):
        arranged = apply_permutation(p, digits, allow_duplicates=True, skip_verification=True)
        seen.setdefault(int("".join(map(str, arranged))), None)
    return tuple(seen)


class Abacus:
    """
    Odometer over independent wheels.

    Each wheel is a non-empty sequence of integers; ``positions`` holds one
    bead index per wheel. The value of a state is the product of the selected
    beads, each raised to its wheel's multiplicity.

    >>> sorted(Abacus([[2], [13, 31]]).products())
    [26, 62]
    """

    def __init__(self, wheels: Sequence[Sequence[int]], multiplicities: Sequence[int] | None = None):
        self.wheels: tuple[tuple[int, ...], ...] = tuple(tuple(w) for w in wheels)
        for i, w in enumerate(self.wheels):
            if not w:
                raise InvalidArgument(f"Invalid argument: wheel {i} is empty.", name="wheels", value=i)

        if multiplicities is None:
            multiplicities = [1] * len(self.wheels)
        if len(multiplicities) != len(self.wheels):
            raise InvalidArgument(
                f"Invalid argument: {len(multiplicities)} multiplicities for {len(self.wheels)} wheels.",
                name="multiplicities", value=list(multiplicities),
            )
        for m in multiplicities:
            require_positive(m, "multiplicity")
        self.multiplicities: tuple[int, ...] = tuple(multiplicities)
        self.positions: list[int] = [0] * len(self.wheels)

    def __len__(self) -> int:
        total = 1
        for w in self.wheels:
            total *= len(w)
        return total

    def selection(self) -> tuple[int, ...]:
        return tuple(w[p] for w, p in zip(self.wheels, self.positions))

    def value(self) -> int:
        acc = gmpy2.mpz(1)
        for bead, mult in zip(self.selection(), self.multiplicities):
            acc *= gmpy2.mpz(bead) ** mult
        return int(acc)

    def advance(self) -> bool:
        """
        Move to the next state. Wheels at their last bead roll back to 0 and
        carry into the next wheel; the first wheel with room is incremented.
        Returns False once every wheel has rolled over (back at all zeros).
        """
        for i, wheel in enumerate(self.wheels):
            if self.positions[i] + 1 < len(wheel):
                self.positions[i] += 1
                return True
            self.positions[i] = 0
        return False

    def reset(self) -> None:
        self.positions = [0] * len(self.wheels)

    def __iter__(self) -> Iterator[int]:
        self.reset()
        while True:
            yield self.value()
            if not self.advance():
                break

    def products(self) -> set[int]:
        return set(self)

    def __repr__(self) -> str:
        return f"Abacus(wheels={len(self.wheels)}, combinations={len(self)}, positions={self.positions})"

# -----------------------------------------------------------------------------
#  permutations.py
#  Successor, enumeration and alphabet mapping for permutations of 0..n-1
# -----------------------------------------------------------------------------

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

from permfactor.cache import PermutationCache
from permfactor.runtime import current as _rt_current
from permfactor.runtime import trace
from permfactor.utility import (
    InvalidAlphabet,
    require_non_negative,
    verify_alphabet,
    verify_permutation,
)

Permutation = tuple[int, ...]


def identity_permutation(n: int) -> Permutation:
    """(0, 1, ..., n-1)"""
    require_non_negative(n)
    return tuple(range(n))


def next_permutation(permutation: Sequence[int], *, skip_verification: bool = False) -> Permutation | None:
    """
    Return the permutation following ``permutation``, or None at the end.

    Rules, with ``base`` the last index:

    * length 0 or 1 has no successor;
    * if the last element sits at home (``p[base] == base``) the last two
      elements are swapped;
    * otherwise, scanning right to left, stop at the first position ``i``
      where ``p[i] >= p[i-1]``. Keep ``p[:i-1]``, place the smallest value
      above ``p[i-1]`` not already kept, and append the remaining values in
      increasing order;
    * if no such position exists the sequence is exhausted.

    Starting from the identity this visits every permutation exactly once,
    ending at ``(n-1, ..., 0)``.

    The input is never modified.
    """
    if not skip_verification:
        verify_permutation(permutation)

    base = len(permutation) - 1
    if base < 1:
        return None

    if permutation[base] == base:
        return (*permutation[:base - 1], permutation[base], permutation[base - 1])

    for i in range(base, 0, -1):
        current_digit = permutation[i]
        preceding_digit = permutation[i - 1]
        if current_digit < preceding_digit:
            continue

        preceding = permutation[:i - 1]
        used = set(preceding)

        new_digit = preceding_digit + 1
        while new_digit in used:
            new_digit += 1
        used.add(new_digit)

        tail = [d for d in range(base + 1) if d not in used]
        return (*preceding, new_digit, *tail)

    return None


def _enumerate(n: int) -> list[Permutation]:
    perm: Permutation | None = identity_permutation(n)
    out: list[Permutation] = []
    while perm is not None:
        out.append(perm)
        perm = next_permutation(perm, skip_verification=True)
    return out


def generate_permutations(n: int, *, cache: PermutationCache | None = None) -> list[Permutation]:
    """
    All n! permutations of 0..n-1, starting at the identity and following
    ``next_permutation``. Memoised per n in ``cache`` (default: the cache of
    the current runtime session).
    """
    require_non_negative(n)
    cache = cache if cache is not None else _rt_current().cache
    found = cache.peek(n)
    if found is None:
        found = cache.get(n, _enumerate)
        trace(f"permutation cache miss for length {n} ({cache.misses} miss(es) this session)")
    return list(found)


def generate_permutations_up_to(n: int, *, cache: PermutationCache | None = None) -> list[list[Permutation]]:
    """Enumerations for every length 0..n-1."""
    require_non_negative(n)
    return [generate_permutations(k, cache=cache) for k in range(n)]


def apply_permutation(
    permutation: Sequence[int],
    alphabet: Sequence[Any],
    *,
    allow_duplicates: bool = False,
    skip_verification: bool = False,
) -> list[Any]:
    """Rearrange ``alphabet`` so that ``result[i] == alphabet[permutation[i]]``."""
    if not skip_verification:
        verify_permutation(permutation)
        verify_alphabet(alphabet, allow_duplicates)
        if len(alphabet) != len(permutation):
            raise InvalidAlphabet(
                f"Invalid argument: alphabet of length {len(alphabet)} does not match "
                f"permutation of length {len(permutation)}."
            )
    return [alphabet[p] for p in permutation]


def generate_random_permutation(n: int, *, rng: random.Random | None = None) -> Permutation:
    require_non_negative(n)
    return tuple((rng or random).sample(range(n), n))

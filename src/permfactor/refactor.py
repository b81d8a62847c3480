from __future__ import annotations

import random
from collections.abc import Sequence

from permfactor.abacus import Abacus, digit_permutations
from permfactor.cache import PermutationCache
from permfactor.context import RefactorResult, Wheel
from permfactor.runtime import current as _rt_current
from permfactor.runtime import trace
from permfactor.utility import (
    digital_root,
    factor_multiplicities,
    factorize,
    generate_random_integer_between,
    require_positive,
    verify_integer_factors,
    verify_refactor_aggregates,
)

_ONE_DIGIT = 9


def factor_wheels(
    n: int,
    factors: Sequence[int] | None = None,
    *,
    cache: PermutationCache | None = None,
) -> tuple[Wheel, ...]:
    """One wheel per distinct factor (first-seen order); explicit 1s are dropped."""
    require_positive(n)
    integer_factors = list(factors) if factors is not None else factorize(n)
    grouped = factor_multiplicities(f for f in integer_factors if f != 1)
    return tuple(
        Wheel(factor=f, values=digit_permutations(f, cache=cache), multiplicity=m)
        for f, m in grouped.items()
    )


def refactor_integer(
    n: int,
    factors: Sequence[int] | None = None,
    *,
    skip_verification: bool = False,
    cache: PermutationCache | None = None,
) -> list[int]:
    """
    Every distinct product of digit-permuted prime factors of ``n``, ascending.

    ``factors`` defaults to ``factorize(n)``; when supplied and verification is
    on they must multiply to ``n``. Integers below 10 and integers with a
    single distinct prime factor are returned as ``[n]``.
    """
    return _refactor(n, factors, skip_verification=skip_verification, cache=cache)[0]


def _refactor(
    n: int,
    factors: Sequence[int] | None,
    *,
    skip_verification: bool,
    cache: PermutationCache | None,
) -> tuple[list[int], tuple[int, ...], tuple[Wheel, ...]]:
    require_positive(n)
    if factors is not None and not skip_verification:
        verify_integer_factors(n, factors)

    integer_factors = list(factors) if factors is not None else factorize(n)
    distinct = {f for f in integer_factors if f != 1}

    if n <= _ONE_DIGIT or len(distinct) <= 1:
        return [n], tuple(integer_factors), ()

    wheels = factor_wheels(n, integer_factors, cache=cache)
    abacus = Abacus([w.values for w in wheels], [w.multiplicity for w in wheels])
    trace(f"refactor({n}): {len(wheels)} wheel(s), {len(abacus)} combination(s)")

    return sorted(abacus.products()), tuple(integer_factors), wheels


def aggregate_integer_refactors(
    n: int,
    *,
    skip_verification: bool | None = None,
    cache: PermutationCache | None = None,
) -> RefactorResult:
    """
    Refactor ``n`` and compute the aggregate (digital root) of ``n`` and of
    each refactor. Unless verification is skipped every refactor aggregate
    must equal that of ``n``; the first mismatch raises AggregateMismatch.

    ``skip_verification=None`` follows the session's BEHAVIOUR.VERIFY.
    """
    require_positive(n)
    if skip_verification is None:
        skip_verification = not _rt_current().verify

    aggregate = digital_root(n)
    refactors, factors, wheels = _refactor(n, factorize(n), skip_verification=True, cache=cache)
    refactor_aggregates = [digital_root(r) for r in refactors]

    if not skip_verification:
        verify_refactor_aggregates(refactor_aggregates, aggregate, refactors, n)

    return RefactorResult(
        integer=n,
        refactors=tuple(refactors),
        aggregate=aggregate,
        refactor_aggregates=tuple(refactor_aggregates),
        factors=factors,
        verified=not skip_verification,
        wheels=wheels,
    )


def aggregate_random_integer_refactors(
    low: int,
    high: int,
    *,
    skip_verification: bool | None = None,
    rng: random.Random | None = None,
    cache: PermutationCache | None = None,
) -> RefactorResult:
    """Refactor a uniformly drawn integer of [low, high)."""
    n = generate_random_integer_between(low, high, rng=rng)
    trace(f"random integer in [{low}, {high}): {n}")
    return aggregate_integer_refactors(n, skip_verification=skip_verification, cache=cache)

# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import random
import sys
from collections.abc import Hashable, Sequence
from typing import Any

from sympy import factorint

from permfactor.runtime import CFG, trace

# --- Errors ------------------------------------------------------------------


class UserInputError(Exception):
    pass


class InvalidArgument(UserInputError, ValueError):
    def __init__(self, msg: str, *, name: str | None = None, value: Any = None):
        super().__init__(msg)
        self.name = name
        self.value = value


class InvalidPermutation(UserInputError, ValueError):
    def __init__(self, msg: str, *, index: int | None = None, value: Any = None,
                 indices: tuple[int, int] | None = None):
        super().__init__(msg)
        self.index = index
        self.value = value
        self.indices = indices


class InvalidAlphabet(UserInputError, ValueError):
    def __init__(self, msg: str, *, index: int | None = None,
                 indices: tuple[int, int] | None = None):
        super().__init__(msg)
        self.index = index
        self.indices = indices


class InvalidFactorSet(UserInputError, ValueError):
    def __init__(self, msg: str, *, product: int | None = None,
                 factors: Sequence[int] | None = None):
        super().__init__(msg)
        self.product = product
        self.factors = list(factors) if factors is not None else None


class AggregateMismatch(UserInputError, AssertionError):
    def __init__(self, msg: str, *, refactor: int, refactor_aggregate: int,
                 aggregate: int, integer: int):
        super().__init__(msg)
        self.refactor = refactor
        self.refactor_aggregate = refactor_aggregate
        self.aggregate = aggregate
        self.integer = integer


_PERMUTATION_PRE = (
    "Invalid argument: permutation must be a sequence of non-negative, "
    "non gapping, sequential integers beginning from 0,"
)
_ALPHABET_PRE = "Invalid argument: alphabet must be a sequence of uniquely hashable values,"
_FACTORS_PRE = "Invalid argument: factors must be a sequence of positive integers,"


# --- Scalar checks -----------------------------------------------------------


def is_integer(n: object) -> bool:
    """True for real ints; bool is rejected even though it subclasses int."""
    return isinstance(n, int) and not isinstance(n, bool)


def is_non_negative_integer(n: object) -> bool:
    return is_integer(n) and n >= 0


def is_positive_integer(n: object) -> bool:
    return is_integer(n) and n > 0


def require_non_negative(n: object, name: str = "n") -> int:
    if not is_non_negative_integer(n):
        raise InvalidArgument(
            f"Invalid argument: {name} must be a non-negative integer, {n!r} was provided.",
            name=name, value=n,
        )
    return n


def require_positive(n: object, name: str = "n") -> int:
    if not is_positive_integer(n):
        raise InvalidArgument(
            f"Invalid argument: {name} must be a positive integer, {n!r} was provided.",
            name=name, value=n,
        )
    return n


def typename(v: object) -> str:
    return type(v).__name__


# --- Random helpers ----------------------------------------------------------


def generate_random_integer_between(low: int, high: int, *, rng: random.Random | None = None) -> int:
    """Uniform integer in [low, high)."""
    require_non_negative(low, "low")
    require_non_negative(high, "high")
    if low >= high:
        raise InvalidArgument(
            f"Invalid argument: low must be smaller than high, {low} and {high} were provided.",
            name="low", value=low,
        )
    return (rng or random).randrange(low, high)


# --- Factorization -----------------------------------------------------------


def factorize(n: int, *, include_one: bool = False) -> list[int]:
    """
    Return the prime factors of ``n`` in ascending order, with multiplicity.

    ``include_one`` prepends an explicit 1. An integer without prime factors
    (only ``n == 1``) is returned as its own single factor, so the product of
    the result always equals ``n``.

    >>> factorize(12)
    [2, 2, 3]
    """
    require_positive(n)

    fac = factorint(n, use_trial=True, use_rho=True, use_pm1=True, verbose=False)
    factors: list[int] = []
    for p, e in sorted(fac.items()):
        factors.extend([int(p)] * int(e))

    if not factors:
        factors = [n]
    if include_one:
        factors.insert(0, 1)

    trace(f"factorize({n}) -> {factors}")
    return factors


def factor_multiplicities(factors: Sequence[int]) -> dict[int, int]:
    """Group a factor multiset by value, keeping first-seen order."""
    out: dict[int, int] = {}
    for f in factors:
        out[f] = out.get(f, 0) + 1
    return out


# --- Digits ------------------------------------------------------------------


def digits_of(n: int) -> list[int]:
    return [int(d) for d in str(abs(n))]


def digit_sum(n: int) -> int:
    """
    Calculate the sum of digits of n.
    Args: n (int): The number.

    Returns: int: The sum of the absolute value digits.
    """
    return sum(int(d) for d in str(abs(n)))


def digital_root_sequence(n: int) -> list[int]:
    """
    Return the digital root sequence for n, repeatedly summing its decimal
    digits until a single-digit is reached, including the starting value.
    """
    _ONE_DIGIT = 9
    seq = [abs(n)]
    while seq[-1] > _ONE_DIGIT:
        seq.append(digit_sum(seq[-1]))
    return seq


def digital_root(n: int) -> int:
    """The aggregate of n: repeated digit sum down to a single digit."""
    require_non_negative(n)
    return digital_root_sequence(n)[-1]


# --- Validation --------------------------------------------------------------


def verify_permutation(permutation: object) -> None:
    if not isinstance(permutation, (list, tuple)):
        raise InvalidPermutation(
            f"{_PERMUTATION_PRE} value of type: {typename(permutation)} was provided.",
            value=permutation,
        )

    seen: dict[int, int] = {}
    for i, v in enumerate(permutation):
        if not is_non_negative_integer(v):
            raise InvalidPermutation(
                f"{_PERMUTATION_PRE} index at {i} has value {v!r}.",
                index=i, value=v,
            )
        if v in seen:
            raise InvalidPermutation(
                f"{_PERMUTATION_PRE} duplicate value of {v} found at indices {seen[v]} and {i}.",
                index=i, value=v, indices=(seen[v], i),
            )
        seen[v] = i

    for i in range(len(permutation)):
        if i not in seen:
            raise InvalidPermutation(f"{_PERMUTATION_PRE} missing value: {i}.", value=i)


def verify_alphabet(alphabet: object, allow_duplicates: bool = False) -> None:
    if not isinstance(alphabet, (list, tuple)):
        raise InvalidAlphabet(f"{_ALPHABET_PRE} value of type: {typename(alphabet)} was provided.")

    seen: dict[Hashable, int] = {}
    for i, letter in enumerate(alphabet):
        try:
            first = seen.get(letter)
        except TypeError:
            raise InvalidAlphabet(
                f"{_ALPHABET_PRE} value at index {i} of type {typename(letter)} is not hashable.",
                index=i,
            ) from None
        if first is not None and not allow_duplicates:
            raise InvalidAlphabet(
                f"{_ALPHABET_PRE} duplicate value of {letter!r} found at indices {first} and {i}.",
                index=i, indices=(first, i),
            )
        if first is None:
            seen[letter] = i


def verify_integer_factors(n: int, factors: object) -> list[int]:
    if not isinstance(factors, (list, tuple)):
        raise InvalidFactorSet(f"{_FACTORS_PRE} value of type: {typename(factors)} was provided.")

    product = 1
    for i, f in enumerate(factors):
        if not is_positive_integer(f):
            raise InvalidFactorSet(
                f"{_FACTORS_PRE} value of {f!r} at index {i} with type {typename(f)} was provided.",
                factors=factors,
            )
        product *= f

    if product != n:
        joined = ",".join(str(f) for f in factors)
        raise InvalidFactorSet(
            f"{_FACTORS_PRE} factors provided [{joined}] multiply to {product}, not {n}.",
            product=product, factors=factors,
        )
    return list(factors)


def verify_refactor_aggregates(
    refactor_aggregates: Sequence[int],
    aggregate: int,
    refactors: Sequence[int],
    n: int,
) -> None:
    for r, agg in zip(refactors, refactor_aggregates):
        if agg != aggregate:
            raise AggregateMismatch(
                f"Refactored integer aggregate of {agg} for refactor {r} does not equal "
                f"provided integer aggregate of {aggregate} for {n}.",
                refactor=r, refactor_aggregate=agg, aggregate=aggregate, integer=n,
            )


# --- Settings helpers ---------------------------------------------------------


def max_factor_digits() -> int:
    return int(CFG("REFACTOR.MAX_FACTOR_DIGITS", 10))


def apply_digit_limit() -> None:
    """Install BEHAVIOUR.MAX_DIGITS as Python's int->str guard."""
    limit = int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000))
    try:
        sys.set_int_max_str_digits(limit)
    except (AttributeError, ValueError):
        pass


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Normalise the --output value. None/"" keeps the profile setting; a value
    ending in a path separator selects per-number files in that directory.
    """
    if output_file is None:
        return None
    s = str(output_file).strip()
    if not s:
        return None
    if any(ch in s for ch in "\0\n\r"):
        raise ValueError("output path contains control characters")
    return s

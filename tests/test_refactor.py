# tests/test_refactor.py
"""
Refactor orchestration and the aggregate invariant.

Run: pytest -v
"""

from __future__ import annotations

import random

import pytest

from permfactor.config import load_settings
from permfactor.refactor import (
    aggregate_integer_refactors,
    aggregate_random_integer_refactors,
    factor_wheels,
    refactor_integer,
)
from permfactor.runtime import APPLY
from permfactor.utility import AggregateMismatch, InvalidArgument, InvalidFactorSet, digital_root
from permfactor.workspace import ensure_workspace_seeded

REFACTOR_CASES = [
    (1,    [1]),
    (7,    [7]),
    (12,   [12]),                 # 2^2 × 3, single-digit wheels only
    (139,  [139]),                # prime
    (169,  [169]),                # 13^2, one distinct factor
    (26,   [26, 62]),             # 2 × 13
    (52,   [52, 124]),            # 2^2 × 13
    (143,  [143, 341]),           # 11 × 13
    (202,  [22, 202, 220]),       # 2 × 101, leading zero collapses
    (1547, [1547, 3689, 6461, 15407]),  # 7 × 13 × 17
]


@pytest.mark.parametrize("n,expected", REFACTOR_CASES, ids=[str(n) for n, _ in REFACTOR_CASES])
def test_refactor_integer(n, expected, shared_cache):
    assert refactor_integer(n, cache=shared_cache) == expected


@pytest.mark.parametrize("n", range(1, 2001))
def test_refactors_include_n(n, shared_cache):
    assert n in refactor_integer(n, cache=shared_cache)


def test_aggregate_invariant_up_to_ten_thousand(shared_cache):
    for n in range(1, 10_001):
        result = aggregate_integer_refactors(n, skip_verification=False, cache=shared_cache)
        assert set(result.refactor_aggregates) == {digital_root(n)}, n


def test_result_record():
    result = aggregate_integer_refactors(26)
    assert result.as_dict() == {
        "integer": 26,
        "refactors": [26, 62],
        "aggregate": 8,
        "refactorAggregates": [8, 8],
    }
    assert result.factors == (2, 13)
    assert result.verified is True
    assert result.combinations == 2


def test_verification_follows_profile():
    APPLY({"BEHAVIOUR": {"VERIFY": False}})
    assert aggregate_integer_refactors(26).verified is False
    assert aggregate_integer_refactors(26, skip_verification=False).verified is True


def test_explicit_factors_are_verified():
    with pytest.raises(InvalidFactorSet) as ei:
        refactor_integer(12, [2, 3])
    assert ei.value.product == 6
    assert "[2,3]" in str(ei.value)

    with pytest.raises(InvalidFactorSet):
        refactor_integer(12, [2, -6, -1])


def test_explicit_factors_need_not_be_prime():
    assert refactor_integer(26, [2, 13]) == [26, 62]
    assert refactor_integer(12, [2, 6]) == [12]
    # an explicit 1 is ignored
    assert refactor_integer(26, [1, 2, 13]) == [26, 62]


def test_unverified_factors_are_trusted():
    assert refactor_integer(26, [2, 13, 1], skip_verification=True) == [26, 62]


@pytest.mark.parametrize("bad", [0, -5, 2.5, "26", None])
def test_rejects_non_positive(bad):
    with pytest.raises(InvalidArgument):
        refactor_integer(bad)
    with pytest.raises(InvalidArgument):
        aggregate_integer_refactors(bad)


def test_factor_wheels():
    wheels = factor_wheels(52)
    assert [(w.factor, w.values, w.multiplicity) for w in wheels] == [
        (2, (2,), 2),
        (13, (13, 31), 1),
    ]


def test_mismatch_is_surfaced(monkeypatch):
    # corrupt the product logic: an extra refactor with a different aggregate
    import permfactor.refactor as mod

    real = mod._refactor

    def broken(n, factors, **kw):
        refactors, facs, wheels = real(n, factors, **kw)
        return [*refactors, n + 1], facs, wheels

    monkeypatch.setattr(mod, "_refactor", broken)
    with pytest.raises(AggregateMismatch) as ei:
        aggregate_integer_refactors(26, skip_verification=False)
    assert ei.value.refactor == 27
    assert ei.value.aggregate == 8
    assert isinstance(ei.value, AssertionError)

    # skipping verification lets it through
    assert 27 in aggregate_integer_refactors(26, skip_verification=True).refactors


def test_random_refactor_in_range():
    rng = random.Random(42)
    for _ in range(20):
        result = aggregate_random_integer_refactors(10, 500, rng=rng)
        assert 10 <= result.integer < 500
        assert result.integer in result.refactors


def test_random_refactor_bad_bounds():
    with pytest.raises(InvalidArgument):
        aggregate_random_integer_refactors(5, 5)


def test_nine_digit_factor_under_default_profile():
    # 200000014 = 2 × 100000007; the 1 and the 7 take 9 × 8 positions
    ensure_workspace_seeded()
    APPLY(load_settings("default"))
    result = aggregate_integer_refactors(2 * 100000007)
    assert result.integer in result.refactors
    assert len(result.refactors) == 72
    assert set(result.refactor_aggregates) == {7}
    assert result.verified

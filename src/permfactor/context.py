from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Wheel:
    factor: int
    values: tuple[int, ...]          # digit permutations; values[0] == factor
    multiplicity: int = 1            # exponent of factor in n


@dataclass(frozen=True)
class RefactorResult:
    # --- non-default fields FIRST ---
    integer: int
    refactors: tuple[int, ...]
    aggregate: int
    refactor_aggregates: tuple[int, ...]

    # --- fields WITH defaults ---
    factors: tuple[int, ...] = ()
    verified: bool = False
    wheels: tuple[Wheel, ...] = field(default=(), compare=False)

    @property
    def combinations(self) -> int:
        total = 1
        for w in self.wheels:
            total *= len(w.values)
        return total

    def as_dict(self) -> dict[str, Any]:
        """Plain record with the public key names."""
        return {
            "integer": self.integer,
            "refactors": list(self.refactors),
            "aggregate": self.aggregate,
            "refactorAggregates": list(self.refactor_aggregates),
        }

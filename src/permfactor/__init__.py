from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("permfactor")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .abacus import Abacus, digit_permutations
from .cache import PermutationCache
from .config import has_profile, load_settings, read_current_profile
from .context import RefactorResult, Wheel
from .permutations import (
    apply_permutation,
    generate_permutations,
    generate_permutations_up_to,
    generate_random_permutation,
    identity_permutation,
    next_permutation,
)
from .refactor import (
    aggregate_integer_refactors,
    aggregate_random_integer_refactors,
    factor_wheels,
    refactor_integer,
)
from .runtime import APPLY, CFG
from .utility import (
    AggregateMismatch,
    InvalidAlphabet,
    InvalidArgument,
    InvalidFactorSet,
    InvalidPermutation,
    UserInputError,
    digital_root,
    factorize,
    generate_random_integer_between,
    verify_alphabet,
    verify_integer_factors,
    verify_permutation,
)
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "Abacus",
    "AggregateMismatch",
    "InvalidAlphabet",
    "InvalidArgument",
    "InvalidFactorSet",
    "InvalidPermutation",
    "PermutationCache",
    "RefactorResult",
    "UserInputError",
    "Wheel",
    "__version__",
    "aggregate_integer_refactors",
    "aggregate_random_integer_refactors",
    "apply_permutation",
    "digit_permutations",
    "digital_root",
    "factor_wheels",
    "factorize",
    "generate_permutations",
    "generate_permutations_up_to",
    "generate_random_integer_between",
    "generate_random_permutation",
    "has_profile",
    "identity_permutation",
    "load_settings",
    "next_permutation",
    "read_current_profile",
    "refactor_integer",
    "verify_alphabet",
    "verify_integer_factors",
    "verify_permutation",
    "workspace_dir",
]

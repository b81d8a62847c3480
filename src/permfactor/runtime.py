# runtime.py
from __future__ import annotations

import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import Any

from colorama import Fore, Style

from permfactor.cache import PermutationCache


@dataclass
class Runtime:
    """
    One session: the applied profile, the flags derived from it and the
    permutation cache shared by every enumeration in the session.
    """
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False   # trace lines + tracebacks
    verify: bool = True   # check refactor aggregates against n
    cache: PermutationCache = field(default_factory=PermutationCache)

    def apply(self, settings: Any) -> None:
        """Install a ``config.Settings`` (or a plain nested dict)."""
        if hasattr(settings, "as_dict"):
            self.profile_name = getattr(settings, "name", None) or "default"
            self.settings = dict(settings.as_dict())
        else:
            self.profile_name = "default"
            self.settings = dict(settings or {})

        for attr, key in (("verify", "BEHAVIOUR.VERIFY"), ("debug", "BEHAVIOUR.DEBUG")):
            flag = self.get(key)
            if isinstance(flag, bool):
                setattr(self, attr, flag)

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. 'REFACTOR.MAX_FACTOR_DIGITS'."""
        if not key:
            return default
        node: Any = self.settings
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("permfactor_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset(rt: Runtime | None = None) -> Runtime:
    """Install a fresh (or the given) session and return it."""
    rt = rt or Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def trace(msg: str) -> None:
    """Debug line to STDERR; silent unless the session runs with debug on."""
    if not current().debug:
        return
    sys.stderr.write(f"{Style.DIM}[debug]{Style.RESET_ALL} {msg}\n")
    sys.stderr.flush()


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(strict: bool = True) -> bool:
    """
    Check that sympy (factorization) and gmpy2 (abacus products) can be
    imported. find_spec() keeps the check free of import side effects.
    """
    missing = [name for name in ("sympy", "gmpy2") if find_spec(name) is None]
    if not missing:
        return True

    print(
        f"{Fore.RED}{Style.BRIGHT}\nMissing dependencies:{Style.RESET_ALL} {', '.join(missing)}"
        f"\nInstall with: {Fore.YELLOW}pip install {' '.join(missing)}{Style.RESET_ALL}"
    )
    return not strict

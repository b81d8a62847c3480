# src/permfactor/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from colorama import Fore, Style

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def format_factorization(fac: Mapping[int, int]) -> str:
    """
    Turn {p: e, ...} into a tidy string like: 2^3 × 3 × 5^2
    """
    parts: list[str] = []
    for p, e in sorted(fac.items()):
        parts.append(f"{p}^{e}" if e > 1 else f"{p}")
    return " × ".join(parts) if parts else "1"


def format_permutation(p: Sequence[object]) -> str:
    return "[" + ",".join(str(x) for x in p) + "]"


def format_int_list(values: Iterable[int], *, max_items: int | None = None,
                    highlight: int | None = None) -> str:
    """
    Comma-separated list; longer than ``max_items`` is cut in the middle
    with a '… (k more) …' marker. ``highlight`` is printed in yellow.
    """
    vals = list(values)
    shown: list[str] = []

    def _one(v: int) -> str:
        if highlight is not None and v == highlight:
            return f"{Fore.YELLOW}{Style.BRIGHT}{v}{Style.RESET_ALL}"
        return str(v)

    if max_items is None or max_items <= 0 or len(vals) <= max_items:
        shown = [_one(v) for v in vals]
        return ", ".join(shown)

    head = max_items // 2
    tail = max_items - head
    hidden = len(vals) - max_items
    shown = [_one(v) for v in vals[:head]]
    shown.append(f"{Style.DIM}… ({hidden} more) …{Style.RESET_ALL}")
    shown.extend(_one(v) for v in vals[-tail:])
    return ", ".join(shown)


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm."""
    MAX_SECONDS = 60
    if seconds < 1:
        ms = round(seconds * 1000)
        return f"{ms} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    return f"{int(m)}:{s:06.3f}"

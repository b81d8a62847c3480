# src/permfactor/display.py
from __future__ import annotations

import json
from collections.abc import Sequence

from colorama import Fore, Style

from permfactor import __version__
from permfactor.config import list_profiles_with_descriptions, read_current_profile
from permfactor.context import RefactorResult
from permfactor.fmt import format_factorization, format_int_list, format_permutation
from permfactor.output_manager import OutputManager
from permfactor.runtime import CFG
from permfactor.utility import digital_root_sequence, factor_multiplicities

ALIGN_WIDTH = 22  # label column


def _row(om: OutputManager, label: str, value: object) -> None:
    om.write(f"{Fore.CYAN}{label:<{ALIGN_WIDTH}}{Style.RESET_ALL}{value}")


def _header(om: OutputManager, title: str) -> None:
    om.write(f"\n{Fore.YELLOW}{Style.BRIGHT}{title}{Style.RESET_ALL}")
    om.write(f"{Style.DIM}{'─' * max(len(title), 20)}{Style.RESET_ALL}")


def print_result(result: RefactorResult, *, om: OutputManager, as_json: bool = False) -> None:
    """Pretty print one RefactorResult."""
    if as_json:
        om.write(json.dumps(result.as_dict()))
        return

    n = result.integer
    max_items = int(CFG("DISPLAY.MAX_ITEMS", 40))

    _header(om, f"Refactors of {n}")
    fac = factor_multiplicities(f for f in result.factors if f != 1)
    _row(om, "Factorization", format_factorization(fac) if fac else str(n))

    for w in result.wheels:
        _row(om, f"Wheel {w.factor}", format_int_list(w.values, max_items=max_items))
    if result.wheels:
        _row(om, "Combinations", result.combinations)

    _row(om, "Refactors", f"{len(result.refactors)}")
    om.write("  " + format_int_list(result.refactors, max_items=max_items, highlight=n))

    seq = " → ".join(str(x) for x in digital_root_sequence(n))
    _row(om, "Aggregate", f"{result.aggregate}  ({seq})")

    if result.verified:
        status = f"{Fore.GREEN}{Style.BRIGHT}OK{Style.RESET_ALL} all refactors share aggregate {result.aggregate}"
    else:
        status = f"{Style.DIM}not verified{Style.RESET_ALL}"
    _row(om, "Verification", status)


def print_permutations(n: int, perms: Sequence[Sequence[int]], *, om: OutputManager) -> None:
    _header(om, f"Permutations of length {n} ({len(perms)})")
    width = len(str(len(perms)))
    for i, p in enumerate(perms):
        om.write(f"{Style.DIM}{i:>{width}}{Style.RESET_ALL}  {format_permutation(p)}")


def print_successor(perm: Sequence[int], nxt: Sequence[int] | None, *, om: OutputManager) -> None:
    if nxt is None:
        om.write(f"{format_permutation(perm)} → {Style.DIM}(none: last permutation){Style.RESET_ALL}")
    else:
        om.write(f"{format_permutation(perm)} → {format_permutation(nxt)}")


def print_scan_summary(low: int, high: int, checked: int, refactors: int, elapsed: str, *, om: OutputManager) -> None:
    _header(om, f"Scan {low}..{high - 1}")
    _row(om, "Integers checked", checked)
    _row(om, "Refactors checked", refactors)
    _row(om, "Elapsed", elapsed)
    _row(om, "Result", f"{Fore.GREEN}{Style.BRIGHT}OK{Style.RESET_ALL} no aggregate mismatches")


def print_profiles_with_descriptions() -> None:
    pairs = list_profiles_with_descriptions()
    if not pairs:
        print("\nAvailable profiles: (none)")
        return

    current = read_current_profile()
    lines = []
    for name, desc in pairs:
        mark = "→" if current and name == current else " "
        lines.append(f"{mark} {name:13} — {desc}")
    print("\nAvailable profiles:\n  " + "\n  ".join(lines))


def show_intro_help() -> None:
    print(f"{Fore.YELLOW}{Style.BRIGHT}permfactor v{__version__}{Style.RESET_ALL}")
    print(
        "\n  <integer>          refactor an integer and check its aggregate"
        "\n  perms <k>          list every permutation of length k"
        "\n  next <p>           successor of a permutation, e.g. next 0,2,1"
        "\n  apply <p> <a>      rearrange an alphabet, e.g. apply 2,0,1 a,b,c"
        "\n  random <lo> <hi>   refactor a random integer of [lo, hi)"
        "\n  scan <lo> <hi>     verify aggregates for every integer of [lo, hi)"
        "\n  <profile>          switch profile (p = list profiles)"
        "\n  debug on|off       toggle trace lines"
        "\n  h                  this help"
        "\n  q                  quit"
    )

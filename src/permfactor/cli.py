# src/permfactor/cli.py

"""
permfactor - permutations of 0..n-1 and digit-permuted prime refactors

Description:
    Enumerates permutations with an in-place successor rule and uses them to
    rearrange the digits of an integer's prime factors. Every product of
    rearranged factors (a "refactor") is checked to share the digital root
    ("aggregate") of the original integer.

usage: see permfactor -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import sys
import textwrap
import threading
import traceback
from importlib.resources import files as pkg_files

from colorama import Fore, Style
from colorama import init as colorama_init

import permfactor.config as CONFIG
from permfactor import __version__ as _ver
from permfactor.display import (
    print_permutations,
    print_profiles_with_descriptions,
    print_result,
    print_scan_summary,
    print_successor,
    show_intro_help,
)
from permfactor.fmt import format_duration, format_permutation
from permfactor.output_manager import OutputManager
from permfactor.permutations import apply_permutation, generate_permutations, next_permutation
from permfactor.progress import Progress
from permfactor.refactor import aggregate_integer_refactors, aggregate_random_integer_refactors
from permfactor.runtime import APPLY, CFG, ensure_runtime_deps
from permfactor.runtime import current as _rt_current
from permfactor.utility import (
    UserInputError,
    apply_digit_limit,
    flatten_dotted,
    require_positive,
    typename,
    validate_output_setting,
)
from permfactor.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = {"perms", "next", "apply", "random", "scan"}


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    else:
        msg = f"{Fore.RED}{msg}{Style.RESET_ALL}"
    print(msg, file=sys.stderr)


# ---- input parsing ----

def _parse_int(text: str) -> int | None:
    s = text.strip().replace("_", "")
    if s.startswith(("+", "-")):
        body = s[1:]
    else:
        body = s
    if not body.isdigit():
        return None
    return int(s)


def _require_int(text: str, what: str) -> int:
    n = _parse_int(text)
    if n is None:
        raise UserInputError(f"Invalid input: {what} must be an integer, got '{text}'.")
    return n


def _parse_permutation(text: str) -> list[int]:
    body = text.strip().strip("[]()")
    if not body:
        return []
    out = []
    for part in body.split(","):
        v = _parse_int(part)
        if v is None:
            raise UserInputError(f"Invalid input: '{part.strip()}' in '{text}' is not an integer.")
        out.append(v)
    return out


def _parse_alphabet(text: str) -> list[str]:
    body = text.strip().strip("[]()")
    return [p.strip() for p in body.split(",")] if body else []


def _resolve_inputs(items: list[str]) -> tuple[str | None, list[str]]:
    """
    Split positionals into (profile, rest).

    A leading word that is neither an integer nor a command is a profile name.
    """
    if not items:
        return None, []
    head = items[0]
    if _parse_int(head) is not None or head.lower() in COMMANDS:
        return None, items
    return head, items[1:]


# ---- commands ----

def run_command(words: list[str], *, om: OutputManager, as_json: bool = False,
                skip_verification: bool | None = None, show_progress: bool = True) -> None:
    """Execute one command line (already split) against the current session."""
    head = words[0].lower()

    if head == "perms":
        if len(words) != 2:
            raise UserInputError("Usage: perms <k>")
        k = _require_int(words[1], "k")
        print_permutations(k, generate_permutations(k), om=om)
        return

    if head == "next":
        if len(words) != 2:
            raise UserInputError("Usage: next <p>   e.g. next 0,2,1")
        perm = _parse_permutation(words[1])
        print_successor(perm, next_permutation(perm), om=om)
        return

    if head == "apply":
        if len(words) != 3:
            raise UserInputError("Usage: apply <p> <alphabet>   e.g. apply 2,0,1 a,b,c")
        perm = _parse_permutation(words[1])
        mapped = apply_permutation(perm, _parse_alphabet(words[2]))
        om.write(f"{format_permutation(perm)} → {format_permutation(mapped)}")
        return

    if head == "random":
        if len(words) != 3:
            raise UserInputError("Usage: random <low> <high>")
        low, high = _require_int(words[1], "low"), _require_int(words[2], "high")
        result = aggregate_random_integer_refactors(low, high, skip_verification=skip_verification)
        print_result(result, om=om, as_json=as_json)
        return

    if head == "scan":
        if len(words) != 3:
            raise UserInputError("Usage: scan <low> <high>")
        low, high = _require_int(words[1], "low"), _require_int(words[2], "high")
        scan_range(low, high, om=om, show_progress=show_progress)
        return

    n = _require_int(words[0], "n")
    result = aggregate_integer_refactors(n, skip_verification=skip_verification)
    print_result(result, om=om, as_json=as_json)


def scan_range(low: int, high: int, *, om: OutputManager, show_progress: bool = True) -> tuple[int, int]:
    """Verify the aggregate invariant for every integer of [low, high)."""
    require_positive(low, "low")
    if high <= low:
        raise UserInputError(f"Invalid input: high must exceed low, got {low} and {high}.")

    bar = Progress(high - low, enabled=show_progress and bool(CFG("SCAN.PROGRESS", True)) and not om.quiet)
    checked = refactors = 0
    try:
        for n in range(low, high):
            result = aggregate_integer_refactors(n, skip_verification=False)
            checked += 1
            refactors += len(result.refactors)
            bar.update(checked, label=str(n))
    finally:
        bar.done()

    print_scan_summary(low, high, checked, refactors, format_duration(bar.elapsed()), om=om)
    return checked, refactors


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      <integer>            refactor an integer and verify its aggregate
      perms <k>            list all permutations of length k
      next <p>             successor of permutation p, e.g. next 0,2,1
      apply <p> <a>        rearrange alphabet a by p, e.g. apply 2,0,1 a,b,c
      random <lo> <hi>     refactor a random integer of [lo, hi)
      scan <lo> <hi>       verify aggregates for every integer of [lo, hi)

      init                 create the workspace and copy sample profiles
      init overwrite       replace sample profiles (requires PERMFACTOR_DEV=1)
      profiles             list profiles
      where                show workspace and package paths

    Without arguments an interactive prompt is started.
    """)

    p = argparse.ArgumentParser(
        prog="permfactor",
        description="Permutation successor enumeration and digit-permuted prime refactors",
        usage="permfactor [profile] [command ...] [--output OUTPUT] [--quiet] [--json] [--no-verify] [--debug]",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[profile] command",
                   help="optional profile name followed by an integer or command")
    p.add_argument("--output", default=None, help="Write results to a file, or to DIR/ (one file per number)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output and progress")
    p.add_argument("--json", action="store_true", help="Print refactor results as JSON records")
    p.add_argument("--no-verify", action="store_true", help="Skip the aggregate check")
    p.add_argument("--debug", action="store_true", help="Show trace lines and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in (argv if argv is not None else sys.argv):
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _apply_profile(name: str, *, debug: bool) -> str:
    """Load and install a profile; returns the name actually applied."""
    if not CONFIG.has_profile(name):
        name = "default"
    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if debug:
        _rt_current().debug = True
    apply_digit_limit()

    if _rt_current().debug:
        print(f"[debug] active profile: {name} ({selected._source})", file=sys.stderr)
        for k, v in sorted(flatten_dotted(_rt_current().settings).items(), key=lambda kv: kv[0].lower()):
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    return name


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    if not ensure_runtime_deps(strict=True):
        return 1

    ensure_workspace_seeded()

    profile, words = _resolve_inputs(args.items)

    if profile == "init":
        if words[:1] == ["overwrite"]:
            if os.environ.get("PERMFACTOR_DEV") != "1":
                print("Refusing to overwrite: set PERMFACTOR_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            print(f"Workspace ready at: {ws} (overwrote existing files)")
        else:
            ws, _, copied = ensure_workspace_seeded()
            print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}")
        return 0
    if profile == "profiles":
        print_profiles_with_descriptions()
        return 0
    if profile == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('permfactor')}")
        return 0

    if profile and not CONFIG.has_profile(profile):
        print(f"Unknown profile: '{profile}'")
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()))
        return 2

    profile_name = _apply_profile(profile or CONFIG.read_current_profile() or "default", debug=args.debug)

    try:
        cli_output = validate_output_setting(args.output)
    except ValueError as e:
        print(f"Fatal error in --output: {e}", file=sys.stderr)
        return 1

    skip = True if args.no_verify else None

    def make_output_manager(number=None) -> OutputManager:
        # read OUTPUT_FILE from runtime each time so profile switches take effect
        target = cli_output if cli_output is not None else (CFG("OUTPUT.OUTPUT_FILE", "") or None)
        return OutputManager(output_file=target, quiet=args.quiet, number=number)

    # --- one-shot path ---
    if words:
        with make_output_manager("-".join(words)) as om:
            run_command(words, om=om, as_json=args.json, skip_verification=skip,
                        show_progress=not args.quiet)
        return 0

    # --- REPL ---
    print(f"{Fore.YELLOW}{Style.BRIGHT}permfactor v{_ver}{Style.RESET_ALL}")

    current_profile = profile_name
    while True:
        try:
            user_input = input(f"\nProfile: {current_profile} — Enter an integer, command or profile (h=Help, q=Quit): ").strip()
            low = user_input.lower()
            if low in {"", "q", "quit"}:
                break

            if low in {"h", "help"}:
                show_intro_help()
                continue

            if low in {"p", "profiles"}:
                print_profiles_with_descriptions()
                continue

            if low.startswith("debug"):
                parts = low.split()
                rt = _rt_current()
                if len(parts) == 1 or parts[1] == "status":
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                elif parts[1] in {"on", "off"}:
                    rt.debug = parts[1] == "on"
                    print(f"Debug mode {'enabled' if rt.debug else 'disabled'} for this session.")
                else:
                    print("Usage: DEBUG [on|off|status]")
                continue

            words = user_input.split()
            if _parse_int(words[0]) is not None or words[0].lower() in COMMANDS:
                try:
                    with make_output_manager("-".join(words)) as om:
                        run_command(words, om=om, as_json=args.json, skip_verification=skip)
                except UserInputError as e:
                    _print_user_error(str(e))
                continue

            if CONFIG.has_profile(user_input):
                current_profile = _apply_profile(user_input, debug=args.debug)
                CONFIG.write_current_profile(current_profile)
                print(f"Applied profile: {current_profile}")
                continue

            print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        except Exception as e:
            if _rt_current().debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")
            continue

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

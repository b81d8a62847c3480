# tests/test_cli.py
from __future__ import annotations

import json

import pytest

import permfactor.cli as cli
from permfactor.fmt import strip_ansi
from permfactor.workspace import workspace_dir


@pytest.fixture(autouse=True)
def _no_colorama(monkeypatch):
    # colorama_init would re-wrap the captured stdout on every call
    monkeypatch.setattr(cli, "colorama_init", lambda **kw: None)


def run(capsys, *argv):
    rc = cli.main(list(argv))
    out, err = capsys.readouterr()
    return rc, strip_ansi(out), strip_ansi(err)


def test_refactor_one_integer(capsys):
    rc, out, _ = run(capsys, "26")
    assert rc == 0
    assert "Refactors of 26" in out
    assert "26, 62" in out
    assert "OK" in out


def test_json_record(capsys):
    rc, out, _ = run(capsys, "--json", "143")
    assert rc == 0
    line = next(ln for ln in out.splitlines() if ln.startswith("{"))
    assert json.loads(line) == {
        "integer": 143,
        "refactors": [143, 341],
        "aggregate": 8,
        "refactorAggregates": [8, 8],
    }


def test_perms_command(capsys):
    rc, out, _ = run(capsys, "perms", "3")
    assert rc == 0
    assert "Permutations of length 3 (6)" in out
    assert out.index("[0,2,1]") < out.index("[1,0,2]")


def test_next_command(capsys):
    rc, out, _ = run(capsys, "next", "2,0,1")
    assert rc == 0
    assert "[2,0,1] → [2,1,0]" in out

    rc, out, _ = run(capsys, "next", "2,1,0")
    assert "last permutation" in out


def test_apply_command(capsys):
    rc, out, _ = run(capsys, "apply", "2,0,1", "a,b,c")
    assert rc == 0
    assert "[c,a,b]" in out


def test_split_output_keeps_separators_in_one_file_name(capsys):
    rc, out, _ = run(capsys, "--output", "out/", "apply", "0,1", "a/b,c")
    assert rc == 0
    assert "[a/b,c]" in out
    written = workspace_dir() / "out" / "apply-0,1-a_b,c.txt"
    assert "[a/b,c]" in written.read_text(encoding="utf-8")


def test_invalid_permutation_exit_code(capsys):
    rc, _, err = run(capsys, "next", "0,1,1")
    assert rc == 2
    assert "duplicate value of 1 found at indices 1 and 2" in err


def test_bad_integer_exit_code(capsys):
    rc, _, err = run(capsys, "perms", "x")
    assert rc == 2
    assert "must be an integer" in err


def test_scan_command(capsys):
    rc, out, _ = run(capsys, "--quiet", "--output", "scan.txt", "scan", "1", "200")
    assert rc == 0
    assert out == ""


def test_scan_summary(capsys):
    rc, out, _ = run(capsys, "fast", "scan", "1", "50")
    assert rc == 0
    assert "Integers checked" in out
    assert "49" in out


def test_random_command(capsys):
    rc, out, _ = run(capsys, "random", "10", "20")
    assert rc == 0
    assert "Refactors of 1" in out


def test_profile_then_integer(capsys):
    rc, out, _ = run(capsys, "fast", "26")
    assert rc == 0
    assert "not verified" in out


def test_unknown_profile(capsys):
    rc, out, _ = run(capsys, "nosuch", "26")
    assert rc == 2
    assert "Unknown profile" in out


def test_where_and_profiles(capsys):
    rc, out, _ = run(capsys, "where")
    assert rc == 0 and "Workspace:" in out
    rc, out, _ = run(capsys, "profiles")
    assert rc == 0 and "default" in out


def test_repl_session(capsys, monkeypatch):
    lines = iter(["perms 2", "26", "next 0,0", "fast", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    rc, out, err = run(capsys)
    assert rc == 0
    assert "[1,0]" in out
    assert "Refactors of 26" in out
    assert "Applied profile: fast" in out
    assert "duplicate value of 0" in err

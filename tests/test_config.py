# tests/test_config.py
from __future__ import annotations

import pytest

from permfactor import config
from permfactor.output_manager import OutputManager
from permfactor.progress import Progress
from permfactor.runtime import APPLY, CFG, Runtime, trace
from permfactor.runtime import current as _rt_current
from permfactor.utility import UserInputError
from permfactor.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def test_workspace_follows_environment(tmp_path):
    assert workspace_dir() == (tmp_path / "workspace").resolve()


def test_seeding_copies_packaged_profiles():
    root, seeded, copied = ensure_workspace_seeded()
    assert seeded
    assert copied["profiles"] >= 3
    assert (root / "profiles" / "default.toml").is_file()

    # second run copies nothing
    _, seeded_again, _ = ensure_workspace_seeded()
    assert not seeded_again


def test_overwrite_restores_edited_profile():
    root, _, _ = ensure_workspace_seeded()
    target = root / "profiles" / "default.toml"
    target.write_text("# edited\n", encoding="utf-8")
    seed_workspace(overwrite=True)
    assert "[BEHAVIOUR]" in target.read_text(encoding="utf-8")


def test_load_default_profile():
    ensure_workspace_seeded()
    settings = config.load_settings(None)
    assert settings.name == "default"
    assert "PROFILE" not in settings.data
    assert settings.data["BEHAVIOUR"]["VERIFY"] is True
    assert settings.description != "(no description)"


def test_profile_listing():
    ensure_workspace_seeded()
    names = config.list_all_profiles()
    assert {"default", "fast", "debug"} <= set(names)
    described = dict(config.list_profiles_with_descriptions())
    assert described["fast"].startswith("No aggregate verification")


def test_apply_profile_syncs_runtime_flags():
    ensure_workspace_seeded()
    APPLY(config.load_settings("fast"))
    rt = _rt_current()
    assert rt.profile_name == "fast"
    assert rt.verify is False
    assert CFG("REFACTOR.MAX_FACTOR_DIGITS") == 10
    assert CFG("DISPLAY.MISSING", "fallback") == "fallback"


def test_broken_toml_is_a_user_error():
    root, _, _ = ensure_workspace_seeded()
    (root / "profiles" / "broken.toml").write_text("[BEHAVIOUR\nDEBUG = true\n", encoding="utf-8")
    with pytest.raises(UserInputError, match="broken.toml"):
        config.load_settings("broken")
    assert ("broken", "(unreadable)") in config.list_profiles_with_descriptions()


def test_non_boolean_flag_is_rejected():
    root, _, _ = ensure_workspace_seeded()
    (root / "profiles" / "odd.toml").write_text('[BEHAVIOUR]\nVERIFY = "yes"\n', encoding="utf-8")
    with pytest.raises(UserInputError, match="BEHAVIOUR.VERIFY"):
        config.load_settings("odd")


def test_missing_profile():
    with pytest.raises(FileNotFoundError):
        config.load_settings("nope")


def test_current_profile_round_trip():
    assert config.read_current_profile() is None
    config.write_current_profile("fast.toml")
    assert config.read_current_profile() == "fast"


def test_runtime_dotted_lookup():
    rt = Runtime()
    rt.apply({"A": {"B": {"C": 3}}, "TOP": 1})
    assert rt.get("A.B.C") == 3
    assert rt.get("TOP") == 1
    assert rt.get("A.X", 5) == 5
    assert rt.get("") is None


# ---------- output manager ----------------------------------------------------


def test_output_single_file_strips_colour(capsys):
    with OutputManager(output_file="runs/all.txt") as om:
        om.write("\x1b[31mred\x1b[0m", 26)
    assert om.path == str(workspace_dir() / "runs" / "all.txt")
    assert open(om.path, encoding="utf-8").read() == "red 26\n\n"
    assert "red" in capsys.readouterr().out


def test_output_split_mode_writes_on_close(capsys):
    om = OutputManager(output_file="per/", quiet=True, number=26)
    om.write("hello")
    assert capsys.readouterr().out == ""
    om.close()
    with open(om.path, encoding="utf-8") as fh:
        assert fh.read() == "hello\n"
    assert om.path.endswith("26.txt")


def test_output_split_mode_needs_number():
    with pytest.raises(ValueError):
        OutputManager(output_file="per/")


# ---------- diagnostics -------------------------------------------------------


def test_trace_is_silent_unless_debug(capsys):
    trace("hidden")
    assert capsys.readouterr().err == ""

    _rt_current().debug = True
    trace("shown")
    err = capsys.readouterr().err
    assert "[debug]" in err
    assert "shown" in err


def test_progress_draws_and_clears(capsys):
    bar = Progress(10, throttle=0.0)
    bar.update(5, label="n=5")
    bar.done()
    out = capsys.readouterr().out
    assert "50%" in out
    assert "n=5" in out
    assert bar.elapsed() >= 0


def test_disabled_progress_is_silent(capsys):
    bar = Progress(10, enabled=False)
    bar.update(5)
    bar.done()
    assert capsys.readouterr().out == ""


def test_output_split_mode_flattens_path_separators(capsys):
    om = OutputManager(output_file="per/", quiet=True, number="apply-0,1-a/b,c")
    assert om.path == str(workspace_dir() / "per" / "apply-0,1-a_b,c.txt")

# src/permfactor/config.py
"""
TOML profiles kept in <workspace>/profiles.

A profile is a plain TOML document. Its optional [PROFILE] table carries
metadata (name, description) and is not part of the settings handed to the
runtime; every other table is (BEHAVIOUR, REFACTOR, DISPLAY, SCAN, OUTPUT).
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from permfactor.utility import UserInputError
from permfactor.workspace import ensure_workspace_seeded, workspace_dir

_BOOL_FLAGS = ("BEHAVIOUR.DEBUG", "BEHAVIOUR.VERIFY")
_CURRENT = ".current"


@dataclass
class Settings:
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as e:
        # TOMLDecodeError carries the position in its message
        raise UserInputError(f"reading {path.name}: {e}.") from None


def _split_meta(raw: dict[str, Any], fallback: str) -> tuple[dict[str, Any], str, str]:
    """(settings without [PROFILE], name, one-line description)"""
    meta = raw.get("PROFILE") or {}
    data = {k: v for k, v in raw.items() if k != "PROFILE"}
    name = str(meta.get("name") or fallback)
    description = " ".join(str(meta.get("description") or "").split()) or "(no description)"
    return data, name, description


def _check_flags(data: dict[str, Any], source: Path) -> None:
    for dotted in _BOOL_FLAGS:
        table, key = dotted.split(".")
        section = data.get(table) or {}
        if key in section and not isinstance(section[key], bool):
            raise UserInputError(
                f"reading {source.name}: {dotted} must be true or false, got {section[key]!r}."
            )


# --- Public API ------------------------------------------------------------


def list_all_profiles() -> list[str]:
    """Profile names (file stems), seeding the workspace first if needed."""
    ensure_workspace_seeded()
    return sorted(p.stem for p in _profiles_dir().glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """[(name, description), ...]; unreadable files are listed, not skipped."""
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _read_toml(p)
        except UserInputError:
            items.append((p.stem, "(unreadable)"))
            continue
        _, name, desc = _split_meta(raw, p.stem)
        items.append((name, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """Load profile ``name`` ('default' when empty)."""
    name = name or "default"
    path = _profile_path(name)
    if not path.exists():
        raise FileNotFoundError(f"Profile '{name}' not found at {path}")

    data, resolved, description = _split_meta(_read_toml(path), path.stem)
    _check_flags(data, path)
    return Settings(data=data, name=resolved, description=description, _source=path)


def read_current_profile() -> str | None:
    """Name of the profile last switched to in the REPL, if any."""
    try:
        s = (_profiles_dir() / _CURRENT).read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s.removesuffix(".toml") or None


def write_current_profile(name: str) -> None:
    _profiles_dir().mkdir(parents=True, exist_ok=True)
    (_profiles_dir() / _CURRENT).write_text(name.strip().removesuffix(".toml"), encoding="utf-8")

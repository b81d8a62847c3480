from __future__ import annotations

import os
import shutil
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

PROFILES = "profiles"


def workspace_dir() -> Path:
    """$PERMFACTOR_HOME, else ~/Documents/Permfactor."""
    env = os.environ.get("PERMFACTOR_HOME")
    root = Path(env).expanduser() if env else Path.home() / "Documents" / "Permfactor"
    return root.resolve()


def _is_profile_file(p: Path) -> bool:
    return p.is_file() and p.suffix.lower() == ".toml" and not p.name.startswith(".")


def seed_workspace(*, overwrite: bool = False) -> tuple[Path, dict[str, int]]:
    """
    Copy the packaged sample profiles into <workspace>/profiles.

    overwrite=False copies only missing files; overwrite=True replaces them
    (developer use, guarded in the CLI).

    Returns (workspace_path, {"profiles": files_copied}).
    """
    root = workspace_dir()
    dest = root / PROFILES
    dest.mkdir(parents=True, exist_ok=True)

    count = 0
    with as_file(pkg_files("permfactor") / PROFILES) as packaged:
        for src in sorted(Path(packaged).glob("*.toml")):
            if not _is_profile_file(src):
                continue
            target = dest / src.name
            if overwrite or not target.exists():
                shutil.copy2(src, target)
                count += 1
    return root, {PROFILES: count}


def ensure_workspace_seeded() -> tuple[Path, bool, dict[str, int]]:
    root, copied = seed_workspace(overwrite=False)
    return root, any(copied.values()), copied

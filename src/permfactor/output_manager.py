# src/permfactor/output_manager.py
from __future__ import annotations

import os

from permfactor.fmt import strip_ansi
from permfactor.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str) -> str:
    """'~' is expanded; relative paths are taken from the workspace root."""
    if not path:
        raise ValueError("Output path is empty")
    path = os.path.expanduser(path)
    if not os.path.isabs(path):
        path = os.path.join(workspace_root, path)
    return os.path.normpath(path)


def _file_stem(number: int | str) -> str:
    """Command words can hold path separators (apply a/b,c); keep them in one name."""
    stem = str(number)
    for sep in {"/", os.sep, os.altsep} - {None}:
        stem = stem.replace(sep, "_")
    return stem


class OutputManager:
    """
    Screen output, optionally mirrored to a file with ANSI codes removed.

    output_file:
        None or ""        screen only
        "dir/" or "."     one file per run: dir/<number>.txt, written on close()
        "path/file.txt"   every run appended to one file, blank line between runs

    quiet suppresses the screen; files are still written.
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, number: int | str | None = None):
        self.quiet = quiet
        self.number = number
        self._lines: list[str] = []
        self._closed = False
        self._mode = "none"
        self._path: str | None = None

        target = output_file or ""
        if not target:
            return

        root = str(workspace_dir())
        if target in (".", "./") or target.endswith(("/", os.sep)):
            if number is None:
                raise ValueError("A number must be provided when outputting to a directory.")
            directory = resolve_output_path(target, root)
            os.makedirs(directory, exist_ok=True)
            self._mode, self._path = "split", os.path.join(directory, f"{_file_stem(number)}.txt")
        else:
            path = resolve_output_path(target, root)
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            self._mode, self._path = "single", path

    @property
    def path(self) -> str | None:
        return self._path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        text = sep.join(str(a) for a in args) + end
        self._lines.append(text)
        if not self.quiet:
            print(text, end="")
        if self._mode == "single":
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))

    def getvalue(self) -> str:
        return "".join(self._lines)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._lines:
            return
        if self._mode == "split":
            with open(self._path, "w", encoding="utf-8") as fh:
                fh.write(strip_ansi(self.getvalue()))
        elif self._mode == "single":
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write("\n")

    def __enter__(self) -> OutputManager:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

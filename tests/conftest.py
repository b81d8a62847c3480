# tests/conftest.py
from __future__ import annotations

import pytest

from permfactor import runtime
from permfactor.cache import PermutationCache


@pytest.fixture(autouse=True)
def fresh_session(tmp_path, monkeypatch):
    """Every test gets its own workspace folder and runtime session."""
    monkeypatch.setenv("PERMFACTOR_HOME", str(tmp_path / "workspace"))
    rt = runtime.reset()
    yield rt
    runtime.reset()


@pytest.fixture(scope="session")
def shared_cache():
    """One enumeration cache reused by the slow exhaustive tests."""
    return PermutationCache()

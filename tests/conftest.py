"""Pytest configuration for test isolation.

Settings are read from ``EXPENSE_AI_*`` environment variables and the CLI
loads a ``.env`` from the working directory. Both would leak a developer's
local configuration into tests, so each test starts from a clean environment
and a fresh working directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Make the workspace `packages/` dir importable without an install.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("EXPENSE_AI_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)

from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

for path in (BASE_DIR, SRC_DIR):
    if str(path) not in sys.path:
        sys.path.append(str(path))


@pytest.fixture(autouse=True)
def _no_inherited_py_trace(monkeypatch: pytest.MonkeyPatch) -> None:
    """Runtime error output must not depend on the developer's shell."""
    monkeypatch.delenv("TREELOX_DEBUG_PY_TRACE", raising=False)

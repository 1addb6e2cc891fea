from __future__ import annotations

import os
import sys
import traceback
from typing import Optional, TextIO

DEBUG_PY_TRACE_ENV = "TREELOX_DEBUG_PY_TRACE"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def debug_py_trace_enabled() -> bool:
    """True when the Python traceback should follow a reported runtime error."""
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").strip().lower() in _TRUTHY


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def print_py_trace(exc: BaseException, err: Optional[TextIO] = None) -> None:
    tb = exc.__traceback__
    if tb is None:
        return

    stream = err if err is not None else sys.stderr
    print("\nPython traceback:", file=stream)
    print("".join(traceback.format_tb(tb)), file=stream, end="")

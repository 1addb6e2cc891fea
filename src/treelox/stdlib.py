"""Native functions registered via treelox.runtime."""

from __future__ import annotations

import time
from typing import List

from .runtime import register_stdlib, LoxNumber, LoxValue

@register_stdlib("clock", arity=0)
def std_clock(_args: List[LoxValue]) -> LoxNumber:
    return LoxNumber(time.time())

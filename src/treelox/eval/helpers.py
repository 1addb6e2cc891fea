from __future__ import annotations

from ..runtime import LoxBool, LoxNil, LoxValue

def is_truthy(val: LoxValue) -> bool:
    """Only nil and false are falsy; 0 and "" are truthy."""
    match val:
        case LoxBool(value=b):
            return b
        case LoxNil():
            return False
        case _:
            return True

def is_equal(lhs: LoxValue, rhs: LoxValue) -> bool:
    # Value dataclasses compare equal only within the same type; callables
    # and instances compare by identity.
    return lhs == rhs

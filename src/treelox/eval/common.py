from __future__ import annotations

from typing import Any

from ..runtime import LoxNumber, LoxString, LoxTypeError
from ..token_types import Tok

def stringify(value: Any) -> str:
    """Text shown by `print` and by interactive-mode expression statements."""
    if isinstance(value, LoxString):
        return value.value

    return repr(value)

def require_number(operator: Tok, operand: Any) -> float:
    if isinstance(operand, LoxNumber):
        return operand.value

    raise LoxTypeError(operator, "Operand must be a number.")

def require_numbers(operator: Tok, left: Any, right: Any) -> tuple[float, float]:
    if isinstance(left, LoxNumber) and isinstance(right, LoxNumber):
        return left.value, right.value

    raise LoxTypeError(operator, "Operands must be numbers.")

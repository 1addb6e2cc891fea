from __future__ import annotations

from ..runtime import (
    LoxBool,
    LoxNumber,
    LoxString,
    LoxTypeError,
    LoxValue,
    LoxZeroDivisionError,
)
from ..token_types import TT, Tok
from .common import require_number, require_numbers
from .helpers import is_equal, is_truthy

def eval_unary(op: Tok, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.MINUS:
            return LoxNumber(-require_number(op, rhs))
        case TT.BANG:
            return LoxBool(not is_truthy(rhs))
        case _:
            raise AssertionError(f"unsupported unary operator {op.lexeme!r}")

def eval_binary(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match op.type:
        case TT.EQUAL_EQUAL:
            return LoxBool(is_equal(lhs, rhs))
        case TT.BANG_EQUAL:
            return LoxBool(not is_equal(lhs, rhs))
        case TT.PLUS:
            return _add(op, lhs, rhs)
        case TT.MINUS:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a - b)
        case TT.STAR:
            a, b = require_numbers(op, lhs, rhs)
            return LoxNumber(a * b)
        case TT.SLASH:
            a, b = require_numbers(op, lhs, rhs)
            if b == 0:
                raise LoxZeroDivisionError(op, "Division by zero.")
            return LoxNumber(a / b)
        case TT.GREATER | TT.GREATER_EQUAL | TT.LESS | TT.LESS_EQUAL:
            a, b = require_numbers(op, lhs, rhs)
            return LoxBool(_compare(op.type, a, b))
        case _:
            raise AssertionError(f"unsupported binary operator {op.lexeme!r}")

def _add(op: Tok, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(value=a), LoxString(value=b)):
            return LoxString(a + b)
        case _:
            raise LoxTypeError(op, "Operands must be two numbers or two strings.")

def _compare(kind: TT, a: float, b: float) -> bool:
    if kind == TT.GREATER:
        return a > b
    if kind == TT.GREATER_EQUAL:
        return a >= b
    if kind == TT.LESS:
        return a < b
    return a <= b

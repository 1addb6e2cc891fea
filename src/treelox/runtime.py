from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, List, Optional

from .token_types import Tok
from .types import (
    LoxNil, LoxBool, LoxNumber, LoxString,
    LoxFunction, LoxClass, LoxInstance, NativeFunction, NativeFn,
    LoxValue, LoxCallable, Environment, Returned,
    LoxRuntimeError, LoxTypeError, LoxArityError, LoxNameError,
    LoxPropertyError, LoxZeroDivisionError,
    Builtins, is_callable,
)

if TYPE_CHECKING:
    from .evaluator import Interpreter

logger = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("treelox.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: int = 0):
    def dec(fn: NativeFn):
        Builtins.natives[name] = NativeFunction(name=name, fn=fn, arity_count=arity)
        return fn

    return dec

def install_natives(env: Environment) -> None:
    init_stdlib()

    for name, native in Builtins.natives.items():
        env.define(name, native)

def call_value(interpreter: 'Interpreter', callee: LoxValue, arguments: List[LoxValue], paren: Tok) -> LoxValue:
    if not is_callable(callee):
        raise LoxTypeError(paren, "Can only call functions and classes.")

    if len(arguments) != callee.arity():
        raise LoxArityError(paren, callee.arity(), len(arguments))

    return _dispatch_call(interpreter, callee, arguments)

def _dispatch_call(interpreter: 'Interpreter', callee: LoxCallable, arguments: List[LoxValue]) -> LoxValue:
    if isinstance(callee, LoxFunction):
        return call_function(interpreter, callee, arguments)

    if isinstance(callee, LoxClass):
        return instantiate(interpreter, callee, arguments)

    return callee.fn(arguments)

def call_function(interpreter: 'Interpreter', fn: LoxFunction, arguments: List[LoxValue]) -> LoxValue:
    """
    Call semantics:
    - the call frame's parent is the closure, never the caller's environment
    - params are bound positionally in that frame; the body runs in it directly
    - initializers always produce the bound `this`, whatever the body returns
    """
    callee_env = Environment(parent=fn.closure)

    for param, value in zip(fn.params, arguments):
        callee_env.define(param.lexeme, value)

    result = interpreter.execute_block(fn.body, callee_env)

    if fn.is_initializer:
        return fn.closure.get_at(0, "this")

    if isinstance(result, Returned):
        return result.value

    return LoxNil()

def instantiate(interpreter: 'Interpreter', klass: LoxClass, arguments: List[LoxValue]) -> LoxInstance:
    instance = LoxInstance(klass)
    initializer = klass.find_method("init")

    if initializer is not None:
        call_function(interpreter, initializer.bind(instance), arguments)

    return instance

def make_class(name: str, superclass: Optional[LoxClass], methods: dict, static_methods: dict) -> LoxClass:
    klass = LoxClass(name, superclass, methods, static_methods)
    logger.debug(
        "class %s created: %d methods, %d static, superclass=%s",
        name, len(methods), len(static_methods), superclass.name if superclass else None,
    )
    return klass

__all__ = [
    "LoxNil", "LoxBool", "LoxNumber", "LoxString",
    "LoxFunction", "LoxClass", "LoxInstance", "NativeFunction",
    "LoxValue", "Environment", "Returned",
    "LoxRuntimeError", "LoxTypeError", "LoxArityError", "LoxNameError",
    "LoxPropertyError", "LoxZeroDivisionError",
    "init_stdlib", "register_stdlib", "install_natives",
    "call_value", "call_function", "instantiate", "make_class",
]

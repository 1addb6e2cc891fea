from __future__ import annotations

from ..runtime import (
    Environment,
    LoxClass,
    LoxInstance,
    LoxPropertyError,
    LoxValue,
)
from ..token_types import Tok

def get_property(obj: LoxValue, name: Tok) -> LoxValue:
    """Instances expose fields then methods; classes expose static methods."""
    if isinstance(obj, (LoxInstance, LoxClass)):
        return obj.get(name)

    raise LoxPropertyError(name, "Only instances have properties.")

def require_instance(obj: LoxValue, name: Tok) -> LoxInstance:
    if not isinstance(obj, LoxInstance):
        raise LoxPropertyError(name, "Only instances have fields.")

    return obj

def set_property(obj: LoxValue, name: Tok, value: LoxValue) -> LoxValue:
    require_instance(obj, name).set(name, value)
    return value

def lookup_super(env: Environment, distance: int, method: Tok) -> LoxValue:
    """
    Resolve `super.method` from the scope holding `super`.

    The `this` scope always sits directly inside the `super` scope. Inside a
    static method `this` is the class itself, so the superclass's static
    table is searched instead of its instance methods.
    """
    superclass = env.get_at(distance, "super")
    receiver = env.get_at(distance - 1, "this")
    assert isinstance(superclass, LoxClass), "super bound to a non-class"

    if isinstance(receiver, LoxClass):
        found = superclass.find_static_method(method.lexeme)
    else:
        found = superclass.find_method(method.lexeme)

    if found is None:
        raise LoxPropertyError(method, f"Undefined property '{method.lexeme}'.")

    return found.bind(receiver)

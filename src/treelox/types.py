from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from typing_extensions import TypeAlias, TypeGuard

from .token_types import Tok
from .tree import Stmt, function_parts

# ---------- Value Model ----------

@dataclass(frozen=True)
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass(frozen=True)
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        return format_number(self.value)

@dataclass(frozen=True)
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

def format_number(v: float) -> str:
    # Integral values print without a fractional part: 3 rather than 3.0.
    if v.is_integer() and abs(v) < 1e16:
        return f"{v:.0f}"

    return repr(v)

@dataclass(eq=False)
class LoxFunction:
    declaration: Stmt
    closure: 'Environment'
    is_initializer: bool = False

    @property
    def name(self) -> Tok:
        return function_parts(self.declaration)[0]

    @property
    def params(self) -> List[Tok]:
        return function_parts(self.declaration)[1]

    @property
    def body(self) -> List[Stmt]:
        return function_parts(self.declaration)[2]

    def arity(self) -> int:
        return len(self.params)

    def bind(self, receiver: 'LoxValue') -> 'LoxFunction':
        """Return a copy of this function whose closure binds `this` to receiver."""
        env = Environment(parent=self.closure)
        env.define("this", receiver)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def __repr__(self) -> str:
        return f"<fn {self.name.lexeme}>"

@dataclass(eq=False)
class LoxClass:
    name: str
    superclass: Optional['LoxClass'] = None
    methods: Dict[str, LoxFunction] = field(default_factory=dict)
    static_methods: Dict[str, LoxFunction] = field(default_factory=dict)

    def find_method(self, name: str) -> Optional[LoxFunction]:
        klass: Optional[LoxClass] = self

        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass

        return None

    def find_static_method(self, name: str) -> Optional[LoxFunction]:
        klass: Optional[LoxClass] = self

        while klass is not None:
            if name in klass.static_methods:
                return klass.static_methods[name]
            klass = klass.superclass

        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        return 0 if initializer is None else initializer.arity()

    def get(self, name: Tok) -> 'LoxValue':
        method = self.find_static_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxPropertyError(name, f"Undefined property '{name.lexeme}'.")

    def __repr__(self) -> str:
        return self.name

@dataclass(eq=False)
class LoxInstance:
    klass: LoxClass
    fields: Dict[str, 'LoxValue'] = field(default_factory=dict)

    def get(self, name: Tok) -> 'LoxValue':
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxPropertyError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Tok, value: 'LoxValue') -> None:
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"

NativeFn = Callable[[List['LoxValue']], 'LoxValue']

@dataclass(eq=False)
class NativeFunction:
    name: str
    fn: NativeFn
    arity_count: int = 0

    def arity(self) -> int:
        return self.arity_count

    def __repr__(self) -> str:
        return "<native fn>"

LoxValue: TypeAlias = (
    LoxNil
    | LoxBool
    | LoxNumber
    | LoxString
    | LoxFunction
    | LoxClass
    | LoxInstance
    | NativeFunction
)

LoxCallable: TypeAlias = LoxFunction | LoxClass | NativeFunction

_CALLABLE_TYPES = (LoxFunction, LoxClass, NativeFunction)

def is_callable(value: LoxValue) -> TypeGuard[LoxCallable]:
    return isinstance(value, _CALLABLE_TYPES)

@dataclass(frozen=True)
class Returned:
    """Statement result carrying a `return` value up to the call boundary."""
    value: LoxValue

class Environment:
    def __init__(self, parent: Optional['Environment']=None):
        self.parent = parent
        self.values: Dict[str, LoxValue] = {}

    def define(self, name: str, val: LoxValue) -> None:
        self.values[name] = val

    def get(self, name: Tok) -> LoxValue:
        if name.lexeme in self.values:
            return self.values[name.lexeme]

        if self.parent is not None:
            return self.parent.get(name)

        raise LoxNameError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Tok, val: LoxValue) -> None:
        if name.lexeme in self.values:
            self.values[name.lexeme] = val
            return

        if self.parent is not None:
            self.parent.assign(name, val)
            return

        raise LoxNameError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> 'Environment':
        env = self

        for _ in range(distance):
            assert env.parent is not None, "resolved distance exceeds scope chain"
            env = env.parent

        return env

    def get_at(self, distance: int, name: str) -> LoxValue:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Tok, val: LoxValue) -> None:
        self.ancestor(distance).values[name.lexeme] = val

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    """Runtime failure tied to the token that triggered it."""

    def __init__(self, token: Tok, message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (line {self.token.line})"

class LoxTypeError(LoxRuntimeError):
    pass

class LoxZeroDivisionError(LoxRuntimeError):
    pass

class LoxNameError(LoxRuntimeError):
    pass

class LoxPropertyError(LoxRuntimeError):
    pass

class LoxArityError(LoxRuntimeError):
    def __init__(self, token: Tok, expected: int, got: int):
        super().__init__(token, f"Expected {expected} arguments but got {got}.")
        self.expected = expected
        self.got = got

class Builtins:
    natives: Dict[str, NativeFunction] = {}

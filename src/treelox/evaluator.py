from __future__ import annotations

import sys
from typing import Dict, List, Optional, TextIO

from lark import Tree, visitors

from .reporting import ErrorReporter
from .resolver import Locals
from .runtime import (
    Environment,
    LoxClass,
    LoxFunction,
    LoxNil,
    LoxRuntimeError,
    LoxTypeError,
    LoxValue,
    Returned,
    call_value,
    install_natives,
    make_class,
)
from .token_types import Tok
from .tree import Expr, Node, Stmt, class_parts, function_parts

from .eval.common import stringify
from .eval.expr import eval_binary, eval_unary
from .eval.helpers import is_truthy
from .eval.objects import get_property, lookup_super, require_instance, set_property

ExecResult = Optional[Returned]


class Interpreter(visitors.Interpreter):
    """
    Tree-walking evaluator.

    Statement handlers return None when they complete normally and a
    `Returned` when a `return` is unwinding towards the enclosing call.
    Expression handlers return the LoxValue they evaluate to.
    """

    def __init__(self, out: Optional[TextIO] = None, interactive: bool = False):
        self.out = out
        self.interactive = interactive
        self.globals = Environment()
        self.environment = self.globals
        self.locals = Locals()
        install_natives(self.globals)

    # ---------------- Public API ----------------

    def interpret(self, statements: List[Stmt], reporter: ErrorReporter) -> None:
        """Run statements in order; a runtime error aborts the rest of the run."""
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as e:
            reporter.runtime_error(e)
        finally:
            self.environment = self.globals

    def execute(self, stmt: Stmt) -> ExecResult:
        return self.visit(stmt)

    def evaluate(self, expr: Expr) -> LoxValue:
        return self.visit(expr)

    def execute_block(self, statements: List[Stmt], environment: Environment) -> ExecResult:
        previous = self.environment

        try:
            self.environment = environment

            for stmt in statements:
                result = self.execute(stmt)
                if result is not None:
                    return result

            return None
        finally:
            self.environment = previous

    def __default__(self, tree: Tree) -> None:
        raise AssertionError(f"interpreter reached unknown node {tree.data!r}")

    # ---------------- Variables ----------------

    def look_up_variable(self, name: Tok, expr: Node) -> LoxValue:
        distance = self.locals.get(expr)

        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)

        return self.globals.get(name)

    def emit(self, value: LoxValue) -> None:
        # Resolve sys.stdout lazily so pytest's capture sees the output.
        print(stringify(value), file=self.out if self.out is not None else sys.stdout)

    # ---------------- Statements ----------------

    def exprstmt(self, tree: Tree) -> ExecResult:
        value = self.evaluate(tree.children[0])

        if self.interactive:
            self.emit(value)

        return None

    def printstmt(self, tree: Tree) -> ExecResult:
        self.emit(self.evaluate(tree.children[0]))
        return None

    def vardecl(self, tree: Tree) -> ExecResult:
        name, initializer = tree.children
        value: LoxValue = LoxNil()

        # an unresolved read of a fresh global in its own initializer sees nil
        if self.environment is self.globals and name.lexeme not in self.globals.values:
            self.globals.define(name.lexeme, value)

        if initializer is not None:
            value = self.evaluate(initializer)

        self.environment.define(name.lexeme, value)
        return None

    def block(self, tree: Tree) -> ExecResult:
        return self.execute_block(tree.children, Environment(parent=self.environment))

    def ifstmt(self, tree: Tree) -> ExecResult:
        condition, then_branch, else_branch = tree.children

        if is_truthy(self.evaluate(condition)):
            return self.execute(then_branch)
        if else_branch is not None:
            return self.execute(else_branch)

        return None

    def whilestmt(self, tree: Tree) -> ExecResult:
        condition, body = tree.children

        while is_truthy(self.evaluate(condition)):
            result = self.execute(body)
            if result is not None:
                return result

        return None

    def fndef(self, tree: Tree) -> ExecResult:
        name = function_parts(tree)[0]
        self.environment.define(name.lexeme, LoxFunction(tree, self.environment))
        return None

    def returnstmt(self, tree: Tree) -> ExecResult:
        _, value_node = tree.children
        value: LoxValue = LoxNil()

        if value_node is not None:
            value = self.evaluate(value_node)

        return Returned(value)

    def classdef(self, tree: Tree) -> ExecResult:
        name, superclass_node, statics, methods = class_parts(tree)

        superclass: Optional[LoxClass] = None
        if superclass_node is not None:
            candidate = self.evaluate(superclass_node)
            if not isinstance(candidate, LoxClass):
                raise LoxTypeError(superclass_node.children[0], "Superclass must be a class.")
            superclass = candidate

        # Bound first so method bodies can name the class they belong to.
        self.environment.define(name.lexeme, LoxNil())

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(parent=self.environment)
            self.environment.define("super", superclass)

        try:
            method_table = self._build_methods(methods, allow_initializer=True)
            static_table = self._build_methods(statics, allow_initializer=False)
        finally:
            self.environment = enclosing

        klass = make_class(name.lexeme, superclass, method_table, static_table)
        self.environment.assign(name, klass)
        return None

    def _build_methods(self, declarations: List[Stmt], allow_initializer: bool) -> Dict[str, LoxFunction]:
        table: Dict[str, LoxFunction] = {}

        for declaration in declarations:
            method_name = function_parts(declaration)[0].lexeme
            is_init = allow_initializer and method_name == "init"
            table[method_name] = LoxFunction(declaration, self.environment, is_init)

        return table

    # ---------------- Expressions ----------------

    def literal(self, tree: Tree) -> LoxValue:
        return tree.children[0]

    def group(self, tree: Tree) -> LoxValue:
        return self.evaluate(tree.children[0])

    def variable(self, tree: Tree) -> LoxValue:
        return self.look_up_variable(tree.children[0], tree)

    def assign(self, tree: Tree) -> LoxValue:
        name, value_node = tree.children
        value = self.evaluate(value_node)
        distance = self.locals.get(tree)

        if distance is not None:
            self.environment.assign_at(distance, name, value)
        else:
            self.globals.assign(name, value)

        return value

    def unary(self, tree: Tree) -> LoxValue:
        op, right = tree.children
        return eval_unary(op, self.evaluate(right))

    def binary(self, tree: Tree) -> LoxValue:
        left, op, right = tree.children
        lhs = self.evaluate(left)
        rhs = self.evaluate(right)
        return eval_binary(op, lhs, rhs)

    def logical(self, tree: Tree) -> LoxValue:
        left, op, right = tree.children
        lhs = self.evaluate(left)

        if op.lexeme == "or":
            if is_truthy(lhs):
                return lhs
        elif not is_truthy(lhs):
            return lhs

        return self.evaluate(right)

    def ternary(self, tree: Tree) -> LoxValue:
        _, condition, if_true, if_false = tree.children

        if is_truthy(self.evaluate(condition)):
            return self.evaluate(if_true)

        return self.evaluate(if_false)

    def call(self, tree: Tree) -> LoxValue:
        callee_node, paren, *argument_nodes = tree.children
        callee = self.evaluate(callee_node)
        arguments = [self.evaluate(arg) for arg in argument_nodes]
        return call_value(self, callee, arguments, paren)

    def field(self, tree: Tree) -> LoxValue:
        obj_node, name = tree.children
        return get_property(self.evaluate(obj_node), name)

    def setfield(self, tree: Tree) -> LoxValue:
        obj_node, name, value_node = tree.children
        # The target is checked before the value is evaluated.
        obj = require_instance(self.evaluate(obj_node), name)
        return set_property(obj, name, self.evaluate(value_node))

    def thisref(self, tree: Tree) -> LoxValue:
        return self.look_up_variable(tree.children[0], tree)

    def superref(self, tree: Tree) -> LoxValue:
        _, method = tree.children
        distance = self.locals.get(tree)
        assert distance is not None, "super reference was not resolved"
        return lookup_super(self.environment, distance, method)

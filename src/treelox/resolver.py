"""Static resolution pass.

Walks the AST once before execution and records, for every variable, `this`
and `super` reference, how many scopes separate it from its declaration.
References that match no enclosing scope are left out of the table and are
looked up in the globals at run time. Scoping mistakes are reported, never
raised, and resolution keeps going after each one.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional, Tuple

from lark import Tree, visitors

from .reporting import ErrorReporter
from .token_types import Tok
from .tree import Expr, Node, Stmt, class_parts, function_parts

logger = logging.getLogger(__name__)


class FunctionKind(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassKind(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Locals:
    """Side-table from expression node identity to scope distance.

    Entries keep their node alive, so an id in the table can never be reused
    by a node parsed later in the same session. The table therefore grows for
    as long as its session lives; ``/reset`` in the REPL starts a new one.
    """

    def __init__(self) -> None:
        self._depths: Dict[int, Tuple[Node, int]] = {}

    def record(self, node: Node, depth: int) -> None:
        self._depths[id(node)] = (node, depth)

    def get(self, node: Node) -> Optional[int]:
        entry = self._depths.get(id(node))
        return None if entry is None else entry[1]

    def __contains__(self, node: Node) -> bool:
        return id(node) in self._depths

    def __len__(self) -> int:
        return len(self._depths)


class Resolver(visitors.Interpreter):
    """Scope analysis over statements and expressions, dispatched on node label."""

    def __init__(self, locals_table: Locals, reporter: ErrorReporter):
        self.locals = locals_table
        self.reporter = reporter
        # Each scope maps a name to whether its initializer has finished.
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionKind.NONE
        self.current_class = ClassKind.NONE

    def resolve(self, nodes: Iterable[Optional[Node]]) -> None:
        for node in nodes:
            self.resolve_node(node)

    def resolve_node(self, node: Optional[Node]) -> None:
        if node is not None:
            self.visit(node)

    def __default__(self, tree: Tree) -> None:
        raise AssertionError(f"resolver reached unknown node {tree.data!r}")

    # ---------------- Scopes ----------------

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Tok) -> None:
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(name, "Already a variable with this name in this scope.")

        scope[name.lexeme] = False

    def define(self, name: Tok) -> None:
        if not self.scopes:
            return

        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Tok) -> None:
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals.record(expr, depth)
                logger.debug("resolved %r at line %d to distance %d", name.lexeme, name.line, depth)
                return

    def resolve_function(self, fndef: Stmt, kind: FunctionKind) -> None:
        _, params, body = function_parts(fndef)
        enclosing = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in params:
            self.declare(param)
            self.define(param)
        self.resolve(body)
        self.end_scope()

        self.current_function = enclosing

    # ---------------- Statements ----------------

    def block(self, tree: Tree) -> None:
        self.begin_scope()
        self.resolve(tree.children)
        self.end_scope()

    def classdef(self, tree: Tree) -> None:
        name, superclass, statics, methods = class_parts(tree)
        enclosing = self.current_class
        self.current_class = ClassKind.CLASS

        self.declare(name)
        self.define(name)

        if superclass is not None:
            super_name = superclass.children[0]
            if super_name.lexeme == name.lexeme:
                self.reporter.token_error(super_name, "A class can't inherit from itself.")

            self.current_class = ClassKind.SUBCLASS
            self.resolve_node(superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in methods:
            method_name = function_parts(method)[0]
            kind = FunctionKind.INITIALIZER if method_name.lexeme == "init" else FunctionKind.METHOD
            self.resolve_function(method, kind)

        for method in statics:
            self.resolve_function(method, FunctionKind.METHOD)

        self.end_scope()
        if superclass is not None:
            self.end_scope()

        self.current_class = enclosing

    def vardecl(self, tree: Tree) -> None:
        name, initializer = tree.children
        self.declare(name)
        self.resolve_node(initializer)
        self.define(name)

    def fndef(self, tree: Tree) -> None:
        name = function_parts(tree)[0]
        # Defined before the body so the function can refer to itself.
        self.declare(name)
        self.define(name)
        self.resolve_function(tree, FunctionKind.FUNCTION)

    def exprstmt(self, tree: Tree) -> None:
        self.resolve_node(tree.children[0])

    def printstmt(self, tree: Tree) -> None:
        self.resolve_node(tree.children[0])

    def ifstmt(self, tree: Tree) -> None:
        self.resolve(tree.children)

    def whilestmt(self, tree: Tree) -> None:
        self.resolve(tree.children)

    def returnstmt(self, tree: Tree) -> None:
        keyword, value = tree.children

        if self.current_function == FunctionKind.NONE:
            self.reporter.token_error(keyword, "Can't return from top-level code.")

        if value is not None:
            if self.current_function == FunctionKind.INITIALIZER:
                self.reporter.token_error(keyword, "Can't return a value from an initializer.")

            self.resolve_node(value)

    # ---------------- Expressions ----------------

    def variable(self, tree: Tree) -> None:
        name = tree.children[0]

        if self.scopes and self.scopes[-1].get(name.lexeme) is False:
            self.reporter.token_error(name, "Can't read local variable in its own initializer.")

        self.resolve_local(tree, name)

    def assign(self, tree: Tree) -> None:
        name, value = tree.children
        self.resolve_node(value)
        self.resolve_local(tree, name)

    def thisref(self, tree: Tree) -> None:
        keyword = tree.children[0]

        if self.current_class == ClassKind.NONE:
            self.reporter.token_error(keyword, "Can't use 'this' outside of a class.")
            return

        self.resolve_local(tree, keyword)

    def superref(self, tree: Tree) -> None:
        keyword = tree.children[0]

        if self.current_class == ClassKind.NONE:
            self.reporter.token_error(keyword, "Can't use 'super' outside of a class.")
            return
        if self.current_class != ClassKind.SUBCLASS:
            self.reporter.token_error(keyword, "Can't use 'super' in a class with no superclass.")
            return

        self.resolve_local(tree, keyword)

    def literal(self, tree: Tree) -> None:
        return None

    def binary(self, tree: Tree) -> None:
        left, _, right = tree.children
        self.resolve_node(left)
        self.resolve_node(right)

    def logical(self, tree: Tree) -> None:
        left, _, right = tree.children
        self.resolve_node(left)
        self.resolve_node(right)

    def unary(self, tree: Tree) -> None:
        self.resolve_node(tree.children[1])

    def ternary(self, tree: Tree) -> None:
        self.resolve(tree.children[1:])

    def group(self, tree: Tree) -> None:
        self.resolve_node(tree.children[0])

    def call(self, tree: Tree) -> None:
        callee, _, *arguments = tree.children
        self.resolve_node(callee)
        self.resolve(arguments)

    def field(self, tree: Tree) -> None:
        self.resolve_node(tree.children[0])

    def setfield(self, tree: Tree) -> None:
        obj, _, value = tree.children
        self.resolve_node(value)
        self.resolve_node(obj)


def resolve_program(statements: List[Stmt], locals_table: Locals, reporter: ErrorReporter) -> None:
    Resolver(locals_table, reporter).resolve(statements)

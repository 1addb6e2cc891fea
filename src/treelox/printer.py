"""Parenthesized prefix rendering of the AST, used by the `--ast` dump."""

from __future__ import annotations

from typing import Any, List

from lark import Tree, visitors

from .eval.common import stringify
from .tree import Node, class_parts, function_parts


class AstPrinter(visitors.Interpreter):
    """
    Renders nodes Lisp-style:

        -123 * (45.67)          =>  (* (- 123) (group 45.67))
        var a = 1;              =>  (var a 1)
        fun add(a, b) { ... }   =>  (fun add (a b) (return (+ a b)))
    """

    def print(self, node: Node) -> str:
        return self.visit(node)

    def __default__(self, tree: Tree) -> str:
        raise AssertionError(f"printer reached unknown node {tree.data!r}")

    def _wrap(self, head: str, *parts: Any) -> str:
        rendered = [head]

        for part in parts:
            if part is None:
                continue
            if isinstance(part, Tree):
                rendered.append(self.visit(part))
            elif isinstance(part, str):
                rendered.append(part)
            else:
                rendered.append(part.lexeme)

        return "(" + " ".join(rendered) + ")"

    def _function(self, head: str, node: Node) -> str:
        name, params, body = function_parts(node)
        param_list = "(" + " ".join(p.lexeme for p in params) + ")"
        return self._wrap(head, name.lexeme, param_list, *body)

    # ---------------- Expressions ----------------

    def literal(self, tree: Tree) -> str:
        return stringify(tree.children[0])

    def variable(self, tree: Tree) -> str:
        return tree.children[0].lexeme

    def assign(self, tree: Tree) -> str:
        name, value = tree.children
        return self._wrap("=", name, value)

    def binary(self, tree: Tree) -> str:
        left, op, right = tree.children
        return self._wrap(op.lexeme, left, right)

    def logical(self, tree: Tree) -> str:
        left, op, right = tree.children
        return self._wrap(op.lexeme, left, right)

    def unary(self, tree: Tree) -> str:
        op, right = tree.children
        return self._wrap(op.lexeme, right)

    def ternary(self, tree: Tree) -> str:
        _, condition, if_true, if_false = tree.children
        return self._wrap("?:", condition, if_true, if_false)

    def group(self, tree: Tree) -> str:
        return self._wrap("group", tree.children[0])

    def call(self, tree: Tree) -> str:
        callee, _, *arguments = tree.children
        return self._wrap("call", callee, *arguments)

    def field(self, tree: Tree) -> str:
        obj, name = tree.children
        return self._wrap(".", obj, name)

    def setfield(self, tree: Tree) -> str:
        obj, name, value = tree.children
        return self._wrap("=", self._wrap(".", obj, name), value)

    def thisref(self, tree: Tree) -> str:
        return "this"

    def superref(self, tree: Tree) -> str:
        return self._wrap("super", tree.children[1])

    # ---------------- Statements ----------------

    def exprstmt(self, tree: Tree) -> str:
        return self._wrap(";", tree.children[0])

    def printstmt(self, tree: Tree) -> str:
        return self._wrap("print", tree.children[0])

    def vardecl(self, tree: Tree) -> str:
        name, initializer = tree.children
        return self._wrap("var", name, initializer)

    def block(self, tree: Tree) -> str:
        return self._wrap("block", *tree.children)

    def ifstmt(self, tree: Tree) -> str:
        condition, then_branch, else_branch = tree.children
        head = "if-else" if else_branch is not None else "if"
        return self._wrap(head, condition, then_branch, else_branch)

    def whilestmt(self, tree: Tree) -> str:
        condition, body = tree.children
        return self._wrap("while", condition, body)

    def fndef(self, tree: Tree) -> str:
        return self._function("fun", tree)

    def returnstmt(self, tree: Tree) -> str:
        return self._wrap("return", tree.children[1])

    def classdef(self, tree: Tree) -> str:
        name, superclass, statics, methods = class_parts(tree)
        parts: List[str] = [name.lexeme]

        if superclass is not None:
            parts.append("< " + superclass.children[0].lexeme)

        parts.extend(self._function("class", m) for m in statics)
        parts.extend(self._function("fun", m) for m in methods)
        return self._wrap("class", *parts)

"""Node layouts and helpers for the lark Trees that make up a Lox AST.

Every node is a ``lark.Tree`` whose ``data`` is one of the labels below and
whose children follow a fixed layout (tokens are :class:`Tok`, optional parts
are ``None``). Node identity is what the resolver keys on, so trees are never
copied or compared structurally once parsed.
"""
from __future__ import annotations
from typing import Any, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

from lark import Tree

from .token_types import Tok

Node: TypeAlias = Tree
Expr: TypeAlias = Tree
Stmt: TypeAlias = Tree

EXPR_LABELS = frozenset({
    'literal',   # [value]
    'variable',  # [name]
    'assign',    # [name, value]
    'binary',    # [left, operator, right]
    'logical',   # [left, operator, right]
    'unary',     # [operator, right]
    'ternary',   # [question, condition, if_true, if_false]
    'group',     # [inner]
    'call',      # [callee, paren, *arguments]
    'field',     # [object, name]
    'setfield',  # [object, name, value]
    'thisref',   # [keyword]
    'superref',  # [keyword, method]
})

STMT_LABELS = frozenset({
    'exprstmt',    # [expression]
    'printstmt',   # [expression]
    'vardecl',     # [name, initializer?]
    'block',       # [*statements]
    'ifstmt',      # [condition, then_branch, else_branch?]
    'whilestmt',   # [condition, body]
    'fndef',       # [name, params, body]
    'returnstmt',  # [keyword, value?]
    'classdef',    # [name, superclass?, statics, methods]
})


def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Tok]:
    return isinstance(node, Tok)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Any) -> List[Any]:
    if not is_tree(node):
        return []

    return list(node.children)

def is_expr(node: Any) -> bool:
    return tree_label(node) in EXPR_LABELS

def is_stmt(node: Any) -> bool:
    return tree_label(node) in STMT_LABELS

# ---------- Construction ----------

def make_fndef(name: Tok, params: List[Tok], body: List[Stmt]) -> Stmt:
    return Tree('fndef', [name, Tree('params', params), Tree('body', body)])

def make_classdef(name: Tok, superclass: Optional[Expr], statics: List[Stmt], methods: List[Stmt]) -> Stmt:
    return Tree('classdef', [name, superclass, Tree('statics', statics), Tree('methods', methods)])

# ---------- Destructuring ----------

def function_parts(node: Stmt) -> Tuple[Tok, List[Tok], List[Stmt]]:
    """Return (name, params, body) of a ``fndef`` node."""
    name, params, body = node.children
    return name, params.children, body.children

def class_parts(node: Stmt) -> Tuple[Tok, Optional[Expr], List[Stmt], List[Stmt]]:
    """Return (name, superclass, statics, methods) of a ``classdef`` node."""
    name, superclass, statics, methods = node.children
    return name, superclass, statics.children, methods.children

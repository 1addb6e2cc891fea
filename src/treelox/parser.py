"""
Recursive Descent Parser for treelox

Structure:
- Scanner: token list from source (see lexer.py)
- Parser: recursive descent, one token of lookahead, explicit precedence levels
- AST: lark Trees with the layouts declared in tree.py

On a syntax error the parser reports it, discards tokens up to the next
statement boundary and carries on, so one run can surface several errors.
"""

from typing import Optional, List

from lark import Tree

from .lexer import tokenize
from .reporting import ErrorReporter, SilentReporter
from .token_types import TT, Tok
from .tree import Expr, Stmt, make_classdef, make_fndef
from .types import LoxBool, LoxNil, LoxNumber, LoxString

MAX_ARGS = 255

COMPARISON_OPS = frozenset({
    TT.EQUAL_EQUAL, TT.BANG_EQUAL,
    TT.GREATER, TT.GREATER_EQUAL,
    TT.LESS, TT.LESS_EQUAL,
})

# Tokens that start a new declaration or statement; synchronisation stops here.
STATEMENT_STARTS = frozenset({
    TT.CLASS, TT.FUN, TT.VAR, TT.FOR, TT.IF, TT.WHILE, TT.PRINT, TT.RETURN,
})

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Unwinds the parser to the enclosing statement after an error was reported"""
    def __init__(self, message: str, token: Tok):
        self.message = message
        self.token = token
        super().__init__(f"{message} at line {token.line}, col {token.column}")

class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=)
    2. ternary (? :)
    3. or
    4. and
    5. equality (==, !=)
    6. comparison (<, <=, >, >=)
    7. term (+, -)
    8. factor (*, /)
    9. unary (!, -)
    10. call (f(), .field)
    11. primary (literals, identifiers, this, super, parens)
    """

    def __init__(self, tokens: List[Tok], reporter: Optional[ErrorReporter] = None):
        self.tokens = tokens
        self.reporter = reporter if reporter is not None else SilentReporter()
        self.pos = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.tokens[self.pos]

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.current.type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and return it"""
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or report and unwind"""
        if self.check(token_type):
            return self.advance()
        raise self.error(self.current, message)

    def error(self, token: Tok, message: str) -> ParseError:
        """Report an error and build the exception used to unwind"""
        self.reporter.token_error(token, message)
        return ParseError(message, token)

    def synchronize(self) -> None:
        """Discard tokens until the next statement boundary"""
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMICOLON:
                return
            if self.current.type in STATEMENT_STARTS:
                return
            self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Stmt]:
        """Parse entire program; statements with syntax errors are dropped"""
        statements = []

        while not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        return statements

    def parse_expression_only(self) -> Optional[Expr]:
        """Parse a lone expression (debug helpers); None after a syntax error"""
        try:
            expr = self.parse_expr()
            if not self.at_end():
                raise self.error(self.current, "Expect end of expression.")
            return expr
        except ParseError:
            return None

    # ========================================================================
    # Declarations
    # ========================================================================

    def parse_declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TT.CLASS):
                return self.parse_class_decl()
            if self.match(TT.FUN):
                return self.parse_function("function")
            if self.match(TT.VAR):
                return self.parse_var_decl()

            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_class_decl(self) -> Stmt:
        """
        classDecl: "class" IDENTIFIER ( "<" IDENTIFIER )? "{" ( "class"? function )* "}"
        A leading "class" on a member marks it static.
        """
        name = self.expect(TT.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TT.LESS):
            super_name = self.expect(TT.IDENTIFIER, "Expect superclass name.")
            superclass = Tree('variable', [super_name])

        self.expect(TT.LEFT_BRACE, "Expect '{' before class body.")

        statics: List[Stmt] = []
        methods: List[Stmt] = []

        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            if self.match(TT.CLASS):
                statics.append(self.parse_function("static method"))
            else:
                methods.append(self.parse_function("method"))

        self.expect(TT.RIGHT_BRACE, "Expect '}' after class body.")
        return make_classdef(name, superclass, statics, methods)

    def parse_function(self, kind: str) -> Stmt:
        """function: IDENTIFIER "(" parameters? ")" block"""
        name = self.expect(TT.IDENTIFIER, f"Expect {kind} name.")
        self.expect(TT.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params: List[Tok] = []
        if not self.check(TT.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    # Reported without unwinding; the parser is still in a known state.
                    self.error(self.current, f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.expect(TT.IDENTIFIER, "Expect parameter name."))
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RIGHT_PAREN, "Expect ')' after parameters.")
        self.expect(TT.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.parse_block()
        return make_fndef(name, params, body)

    def parse_var_decl(self) -> Stmt:
        name = self.expect(TT.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TT.EQUAL):
            initializer = self.parse_expr()

        self.expect(TT.SEMICOLON, "Expect ';' after variable declaration.")
        return Tree('vardecl', [name, initializer])

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Stmt:
        if self.match(TT.FOR):
            return self.parse_for_stmt()
        if self.match(TT.IF):
            return self.parse_if_stmt()
        if self.match(TT.PRINT):
            return self.parse_print_stmt()
        if self.match(TT.RETURN):
            return self.parse_return_stmt()
        if self.match(TT.WHILE):
            return self.parse_while_stmt()
        if self.match(TT.LEFT_BRACE):
            return Tree('block', self.parse_block())

        return self.parse_expr_stmt()

    def parse_for_stmt(self) -> Stmt:
        """
        Parse for loop and desugar it:
        for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        """
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TT.SEMICOLON):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        condition = None
        if not self.check(TT.SEMICOLON):
            condition = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TT.RIGHT_PAREN):
            increment = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.parse_statement()

        if increment is not None:
            body = Tree('block', [body, Tree('exprstmt', [increment])])

        if condition is None:
            condition = Tree('literal', [LoxBool(True)])
        body = Tree('whilestmt', [condition, body])

        if initializer is not None:
            body = Tree('block', [initializer, body])

        return body

    def parse_if_stmt(self) -> Stmt:
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.parse_statement()

        return Tree('ifstmt', [condition, then_branch, else_branch])

    def parse_print_stmt(self) -> Stmt:
        value = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after value.")
        return Tree('printstmt', [value])

    def parse_return_stmt(self) -> Stmt:
        keyword = self.previous()

        value = None
        if not self.check(TT.SEMICOLON):
            value = self.parse_expr()

        self.expect(TT.SEMICOLON, "Expect ';' after return value.")
        return Tree('returnstmt', [keyword, value])

    def parse_while_stmt(self) -> Stmt:
        self.expect(TT.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expr()
        self.expect(TT.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.parse_statement()
        return Tree('whilestmt', [condition, body])

    def parse_block(self) -> List[Stmt]:
        """Parse declarations up to the closing brace (opening brace consumed)"""
        statements = []

        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)

        self.expect(TT.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_expr_stmt(self) -> Stmt:
        expr = self.parse_expr()
        self.expect(TT.SEMICOLON, "Expect ';' after expression.")
        return Tree('exprstmt', [expr])

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        """assignment: ternary ( "=" assignment )?"""
        expr = self.parse_ternary()

        if self.match(TT.EQUAL):
            equals = self.previous()
            value = self.parse_assignment()

            if expr.data == 'variable':
                return Tree('assign', [expr.children[0], value])

            if expr.data == 'field':
                obj, name = expr.children
                return Tree('setfield', [obj, name, value])

            # Reported without unwinding: the right-hand side parsed fine.
            self.error(equals, "Invalid assignment target.")

        return expr

    def parse_ternary(self) -> Expr:
        """ternary: logic_or ( "?" expression ":" expression )?"""
        expr = self.parse_or()

        if self.match(TT.QUESTION):
            question = self.previous()
            if not is_comparison(expr):
                raise self.error(question, "Ternary condition must be a comparison.")

            if_true = self.parse_expr()
            self.expect(TT.COLON, "Expect ':' after then branch of ternary expression.")
            if_false = self.parse_expr()
            return Tree('ternary', [question, expr, if_true, if_false])

        return expr

    def parse_or(self) -> Expr:
        expr = self.parse_and()

        while self.match(TT.OR):
            op = self.previous()
            right = self.parse_and()
            expr = Tree('logical', [expr, op, right])

        return expr

    def parse_and(self) -> Expr:
        expr = self.parse_equality()

        while self.match(TT.AND):
            op = self.previous()
            right = self.parse_equality()
            expr = Tree('logical', [expr, op, right])

        return expr

    def parse_equality(self) -> Expr:
        return self._parse_binary(self.parse_comparison, TT.BANG_EQUAL, TT.EQUAL_EQUAL)

    def parse_comparison(self) -> Expr:
        return self._parse_binary(
            self.parse_term,
            TT.GREATER, TT.GREATER_EQUAL, TT.LESS, TT.LESS_EQUAL,
        )

    def parse_term(self) -> Expr:
        return self._parse_binary(self.parse_factor, TT.MINUS, TT.PLUS)

    def parse_factor(self) -> Expr:
        return self._parse_binary(self.parse_unary, TT.SLASH, TT.STAR)

    def _parse_binary(self, operand, *ops: TT) -> Expr:
        """Left-associative binary level: operand ( op operand )*"""
        expr = operand()

        while self.match(*ops):
            op = self.previous()
            right = operand()
            expr = Tree('binary', [expr, op, right])

        return expr

    def parse_unary(self) -> Expr:
        if self.match(TT.BANG, TT.MINUS):
            op = self.previous()
            right = self.parse_unary()
            return Tree('unary', [op, right])

        return self.parse_call()

    def parse_call(self) -> Expr:
        """call: primary ( "(" arguments? ")" | "." IDENTIFIER )*"""
        expr = self.parse_primary()

        while True:
            if self.match(TT.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TT.DOT):
                name = self.expect(TT.IDENTIFIER, "Expect property name after '.'.")
                expr = Tree('field', [expr, name])
            else:
                break

        return expr

    def finish_call(self, callee: Expr) -> Expr:
        arguments: List[Expr] = []

        if not self.check(TT.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.current, f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self.parse_expr())
                if not self.match(TT.COMMA):
                    break

        paren = self.expect(TT.RIGHT_PAREN, "Expect ')' after arguments.")
        return Tree('call', [callee, paren, *arguments])

    def parse_primary(self) -> Expr:
        if self.match(TT.FALSE):
            return Tree('literal', [LoxBool(False)])
        if self.match(TT.TRUE):
            return Tree('literal', [LoxBool(True)])
        if self.match(TT.NIL):
            return Tree('literal', [LoxNil()])

        if self.match(TT.NUMBER):
            return Tree('literal', [LoxNumber(self.previous().literal)])
        if self.match(TT.STRING):
            return Tree('literal', [LoxString(self.previous().literal)])

        if self.match(TT.THIS):
            return Tree('thisref', [self.previous()])

        if self.match(TT.SUPER):
            keyword = self.previous()
            self.expect(TT.DOT, "Expect '.' after 'super'.")
            method = self.expect(TT.IDENTIFIER, "Expect superclass method name.")
            return Tree('superref', [keyword, method])

        if self.match(TT.IDENTIFIER):
            return Tree('variable', [self.previous()])

        if self.match(TT.LEFT_PAREN):
            expr = self.parse_expr()
            self.expect(TT.RIGHT_PAREN, "Expect ')' after expression.")
            return Tree('group', [expr])

        raise self.error(self.current, "Expect expression.")


def is_comparison(expr: Expr) -> bool:
    """A ternary condition must be a boolean literal or a comparison"""
    if expr.data == 'literal':
        return isinstance(expr.children[0], LoxBool)

    if expr.data == 'binary':
        return expr.children[1].type in COMPARISON_OPS

    return False


def parse_source(source: str, reporter: Optional[ErrorReporter] = None) -> List[Stmt]:
    """Convenience function: scan and parse source"""
    reporter = reporter if reporter is not None else SilentReporter()
    return Parser(tokenize(source, reporter), reporter).parse()

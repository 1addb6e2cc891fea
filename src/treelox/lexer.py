"""
Scanner for treelox

Tokenizes source code into a flat list of tokens.

Features:
- Single-pass tokenization, one character of lookahead (two for comments)
- Position tracking (line, column)
- Errors are reported and scanning continues
"""

from typing import List, Optional
import re

from .reporting import ErrorReporter, SilentReporter
from .token_types import TT, Literal, Tok

# ============================================================================
# Scanner Implementation
# ============================================================================

_ESCAPE_RE = re.compile(r"\\([trn])")
_ESCAPES = {'t': '\t', 'r': '\r', 'n': '\n'}


class Scanner:
    """
    Lox scanner.

    Scanning never stops at an error: unexpected characters and unterminated
    strings are reported through the reporter and skipped.
    """

    # Keyword mapping
    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('!=', TT.BANG_EQUAL),
        ('==', TT.EQUAL_EQUAL),
        ('<=', TT.LESS_EQUAL),
        ('>=', TT.GREATER_EQUAL),

        # Single-character operators
        ('!', TT.BANG),
        ('=', TT.EQUAL),
        ('<', TT.LESS),
        ('>', TT.GREATER),
        ('(', TT.LEFT_PAREN),
        (')', TT.RIGHT_PAREN),
        ('{', TT.LEFT_BRACE),
        ('}', TT.RIGHT_BRACE),
        (',', TT.COMMA),
        ('.', TT.DOT),
        ('-', TT.MINUS),
        ('+', TT.PLUS),
        (';', TT.SEMICOLON),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('?', TT.QUESTION),
        (':', TT.COLON),
    ]

    def __init__(self, source: str, reporter: Optional[ErrorReporter] = None):
        self.source = source
        self.reporter = reporter if reporter is not None else SilentReporter()
        self.start = 0
        self.pos = 0
        self.line = 1
        self.column = 1
        self.start_column = 1
        self.tokens: List[Tok] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def scan_tokens(self) -> List[Tok]:
        """Tokenize entire source, return token list ending in EOF"""
        while not self.at_end():
            self.start = self.pos
            self.start_column = self.column
            self.scan_token()

        self.tokens.append(Tok(TT.EOF, '', None, self.line, self.column))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        # Whitespace
        if ch in (' ', '\r', '\t'):
            self.advance()
            return

        if ch == '\n':
            self.scan_newline()
            return

        # Comments
        if ch == '/' and self.peek(1) == '/':
            self.skip_line_comment()
            return

        if ch == '/' and self.peek(1) == '*':
            self.skip_block_comment()
            return

        # String literals
        if ch == '"':
            self.scan_string()
            return

        # Numbers
        if is_digit(ch):
            self.scan_number()
            return

        # Identifiers and keywords
        if is_alpha(ch):
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        self.advance()
        self.line += 1
        self.column = 1

    def scan_string(self):
        """Scan string literal: "...", possibly spanning lines"""
        self.advance()  # Opening quote

        while not self.at_end() and self.peek() != '"':
            if self.peek() == '\n':
                self.scan_newline()
            else:
                self.advance()

        if self.at_end():
            self.reporter.error(self.line, '', "Unterminated string.")
            return

        self.advance()  # Closing quote
        body = self.source[self.start + 1:self.pos - 1]
        self.emit(TT.STRING, _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], body))

    def scan_number(self):
        """Scan number literal; a trailing '.' without digits is left alone"""
        while is_digit(self.peek()):
            self.advance()

        # Decimal part
        if self.peek() == '.' and is_digit(self.peek(1)):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.emit(TT.NUMBER, float(self.current_lexeme()))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while is_alphanumeric(self.peek()):
            self.advance()

        token_type = self.KEYWORDS.get(self.current_lexeme(), TT.IDENTIFIER)
        self.emit(token_type)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type)
                return

        self.advance()
        self.reporter.error(self.line, '', "Unexpected character.")

    def skip_line_comment(self):
        """Skip comment until end of line"""
        while not self.at_end() and self.peek() != '\n':
            self.advance()

    def skip_block_comment(self):
        """Skip a /* ... */ comment; the first */ closes it (no nesting)"""
        self.advance(2)

        while not self.at_end():
            if self.peek() == '*' and self.peek(1) == '/':
                self.advance(2)
                return

            if self.peek() == '\n':
                self.scan_newline()
            else:
                self.advance()

        self.reporter.error(self.line, '', "Unterminated block comment.")

    # ========================================================================
    # Utilities
    # ========================================================================

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def current_lexeme(self) -> str:
        return self.source[self.start:self.pos]

    def emit(self, token_type: TT, literal: Literal = None):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            lexeme=self.current_lexeme(),
            literal=literal,
            line=self.line,
            column=self.start_column,
        )
        self.tokens.append(tok)


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def is_alpha(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def is_alphanumeric(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)


def tokenize(source: str, reporter: Optional[ErrorReporter] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Scanner(source, reporter).scan_tokens()

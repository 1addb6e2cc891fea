"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer import Scanner
from .reporting import SilentReporter
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "type": "bold ansiblue",
    "operator": "",
    "punctuation": "",
}

_KEYWORDS = {
    TT.AND, TT.CLASS, TT.ELSE, TT.FOR, TT.FUN, TT.IF, TT.OR, TT.PRINT,
    TT.RETURN, TT.SUPER, TT.THIS, TT.VAR, TT.WHILE,
}

_OPERATORS = {
    TT.MINUS, TT.PLUS, TT.SLASH, TT.STAR, TT.QUESTION,
    TT.BANG, TT.BANG_EQUAL, TT.EQUAL, TT.EQUAL_EQUAL,
    TT.GREATER, TT.GREATER_EQUAL, TT.LESS, TT.LESS_EQUAL,
}

_PUNCTUATION = {
    TT.LEFT_PAREN, TT.RIGHT_PAREN, TT.LEFT_BRACE, TT.RIGHT_BRACE,
    TT.COMMA, TT.DOT, TT.SEMICOLON, TT.COLON,
}


def _token_group(tokens: list[Tok], idx: int) -> str:
    tok = tokens[idx]
    t = tok.type

    if t in _KEYWORDS:
        return "keyword"
    if t in (TT.TRUE, TT.FALSE):
        return "boolean"
    if t == TT.NIL:
        return "constant"
    if t == TT.NUMBER:
        return "number"
    if t == TT.STRING:
        return "string"
    if t in _OPERATORS:
        return "operator"
    if t in _PUNCTUATION:
        return "punctuation"

    if t == TT.IDENTIFIER and idx > 0:
        prev = tokens[idx - 1].type
        # Names introduced by `fun`/`class` and superclass names after `<`.
        if prev == TT.FUN:
            return "function"
        if prev == TT.CLASS:
            return "type"
        if prev == TT.LESS and idx > 2 and tokens[idx - 3].type == TT.CLASS:
            return "type"

    return "identifier"


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    # Lexical errors are recorded silently; whatever scanned still gets styled.
    tokens = Scanner(text, SilentReporter()).scan_tokens()

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF or not tok.lexeme:
            continue

        # Find actual position of this lexeme in the line from pos onwards.
        idx = text.find(tok.lexeme, pos)
        if idx < 0:
            continue

        # Unstyled gap before token.
        if idx > pos:
            result.append(("", text[pos:idx]))

        style = GROUP_STYLE.get(_token_group(tokens, i), "")
        result.append((style, tok.lexeme))
        pos = idx + len(tok.lexeme)

    # Trailing unstyled text (comments, unterminated strings).
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the scanner."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line

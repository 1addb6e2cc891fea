from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from tests.support.harness import TT, scan


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    expected_lines: Optional[Tuple[Tuple[str, int], ...]] = None
    msg: Optional[str] = None
    err_line: Optional[int] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("number-int", "123", expected=((TT.NUMBER, 123.0),)),
    Case("number-float", "3.14", expected=((TT.NUMBER, 3.14),)),
    Case("ident-single", "x", expected=((TT.IDENTIFIER, None),)),
    Case("ident-snake", "foo_bar", expected=((TT.IDENTIFIER, None),)),
    Case("ident-leading-underscore", "_tmp1", expected=((TT.IDENTIFIER, None),)),
    Case("string-double", '"hello"', expected=((TT.STRING, "hello"),)),
    Case("string-empty", '""', expected=((TT.STRING, ""),)),
    Case("bool-true", "true", expected=((TT.TRUE, None),)),
    Case("bool-false", "false", expected=((TT.FALSE, None),)),
    Case("nil-literal", "nil", expected=((TT.NIL, None),)),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "+", expected_types=(TT.PLUS,)),
    Case("minus", "-", expected_types=(TT.MINUS,)),
    Case("star", "*", expected_types=(TT.STAR,)),
    Case("slash", "/", expected_types=(TT.SLASH,)),
    Case("question-colon", "?:", expected_types=(TT.QUESTION, TT.COLON)),
    Case("eq", "==", expected_types=(TT.EQUAL_EQUAL,)),
    Case("neq", "!=", expected_types=(TT.BANG_EQUAL,)),
    Case("lte", "<=", expected_types=(TT.LESS_EQUAL,)),
    Case("gte", ">=", expected_types=(TT.GREATER_EQUAL,)),
    Case("lt", "<", expected_types=(TT.LESS,)),
    Case("gt", ">", expected_types=(TT.GREATER,)),
    Case("assign", "=", expected_types=(TT.EQUAL,)),
    Case("bang", "!", expected_types=(TT.BANG,)),
    Case("triple-equal", "===", expected_types=(TT.EQUAL_EQUAL, TT.EQUAL)),
    Case("bang-bang-equal", "!!=", expected_types=(TT.BANG, TT.BANG_EQUAL)),
    Case(
        "punctuation",
        "(){},.;",
        expected_types=(
            TT.LEFT_PAREN, TT.RIGHT_PAREN, TT.LEFT_BRACE, TT.RIGHT_BRACE,
            TT.COMMA, TT.DOT, TT.SEMICOLON,
        ),
    ),
    Case("number-trailing-dot", "1.", expected_types=(TT.NUMBER, TT.DOT)),
    Case("number-leading-dot", ".5", expected_types=(TT.DOT, TT.NUMBER)),
    Case("method-on-number", "1.5.foo", expected_types=(TT.NUMBER, TT.DOT, TT.IDENTIFIER)),
]

KEYWORD_CASES: List[Case] = [
    Case(
        "all-keywords",
        "and class else false for fun if nil or print return super this true var while",
        expected_types=(
            TT.AND, TT.CLASS, TT.ELSE, TT.FALSE, TT.FOR, TT.FUN, TT.IF, TT.NIL,
            TT.OR, TT.PRINT, TT.RETURN, TT.SUPER, TT.THIS, TT.TRUE, TT.VAR, TT.WHILE,
        ),
    ),
    Case("keyword-prefix-ident", "classy orchid variable", expected_types=(TT.IDENTIFIER,) * 3),
    Case("keywords-case-sensitive", "Class NIL True", expected_types=(TT.IDENTIFIER,) * 3),
]

STRING_ESCAPE_CASES: List[Case] = [
    Case("escape-newline", r'"a\nb"', expected=((TT.STRING, "a\nb"),)),
    Case("escape-tab", r'"a\tb"', expected=((TT.STRING, "a\tb"),)),
    Case("escape-return", r'"a\rb"', expected=((TT.STRING, "a\rb"),)),
    Case("unknown-escape-kept", r'"a\qb"', expected=((TT.STRING, "a\\qb"),)),
    Case("multiline", '"one\ntwo"', expected=((TT.STRING, "one\ntwo"),)),
]

POSITION_CASES: List[Case] = [
    Case(
        "lines-across-newlines",
        "var a = 1;\nvar b = 2;\n\nprint c;",
        expected_lines=(("a", 1), ("b", 2), ("c", 4)),
    ),
    Case(
        "multiline-string-advances-line",
        'print "x\ny";\nend',
        expected_lines=(("end", 3),),
    ),
    Case(
        "block-comment-advances-line",
        "/* one\ntwo\nthree */ after",
        expected_lines=(("after", 3),),
    ),
]

LEX_ERROR_CASES: List[Case] = [
    Case("unexpected-char", "var x = @;", msg="Unexpected character.", err_line=1),
    Case("unexpected-char-later-line", "1;\n2;\n#", msg="Unexpected character.", err_line=3),
    Case("unterminated-string", 'print "abc', msg="Unterminated string.", err_line=1),
    Case("unterminated-multiline-string", '"abc\ndef', msg="Unterminated string.", err_line=2),
    Case("unterminated-block-comment", "/* never\nclosed", msg="Unterminated block comment.", err_line=2),
]


def _non_eof_tokens(source: str) -> List[object]:
    tokens, reporter = scan(source)
    assert not reporter.had_error, [str(e) for e in reporter.static_errors]
    return [token for token in tokens if token.type != TT.EOF]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)

    assert case.expected is not None
    assert len(tokens) == len(case.expected)
    for token, (expected_type, expected_literal) in zip(tokens, case.expected):
        assert token.type == expected_type
        assert token.literal == expected_literal
        assert token.lexeme == case.source


@pytest.mark.parametrize("case", OPERATOR_CASES, ids=lambda case: case.name)
def test_operators(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", KEYWORD_CASES, ids=lambda case: case.name)
def test_keywords(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", STRING_ESCAPE_CASES, ids=lambda case: case.name)
def test_string_escapes(case: Case) -> None:
    tokens = [token for token in _non_eof_tokens(case.source) if token.type == TT.STRING]
    assert case.expected is not None
    assert len(tokens) == 1
    assert tokens[0].literal == case.expected[0][1]


def test_comments() -> None:
    source = "x = 5; // trailing comment\n/* block\n comment */ y = 10;"
    tokens = _non_eof_tokens(source)

    expected_types = [
        TT.IDENTIFIER, TT.EQUAL, TT.NUMBER, TT.SEMICOLON,
        TT.IDENTIFIER, TT.EQUAL, TT.NUMBER, TT.SEMICOLON,
    ]
    assert [token.type for token in tokens] == expected_types


def test_block_comments_do_not_nest() -> None:
    tokens = _non_eof_tokens("/* outer /* inner */ x */")
    assert [token.type for token in tokens] == [TT.IDENTIFIER, TT.STAR, TT.SLASH]


def test_division_is_not_a_comment() -> None:
    tokens = _non_eof_tokens("a / b")
    assert [token.type for token in tokens] == [TT.IDENTIFIER, TT.SLASH, TT.IDENTIFIER]


@pytest.mark.parametrize("case", POSITION_CASES, ids=lambda case: case.name)
def test_position_tracking(case: Case) -> None:
    assert case.expected_lines is not None
    tokens = _non_eof_tokens(case.source)
    actual_lines = {token.lexeme: token.line for token in tokens}

    for lexeme, expected_line in case.expected_lines:
        assert lexeme in actual_lines
        assert actual_lines[lexeme] == expected_line


def test_columns_start_at_one() -> None:
    tokens = _non_eof_tokens("var ab = 1;")
    assert [token.column for token in tokens] == [1, 5, 8, 10, 11]


@pytest.mark.parametrize("case", LEX_ERROR_CASES, ids=lambda case: case.name)
def test_lex_errors(case: Case) -> None:
    tokens, reporter = scan(case.source)

    assert reporter.had_error
    err = reporter.static_errors[0]
    assert err.message == case.msg
    assert err.where == ""
    if case.err_line is not None:
        assert err.line == case.err_line, f"expected line {case.err_line}, got {err.line}"

    # Scanning still finishes with exactly one EOF.
    assert tokens[-1].type == TT.EOF
    assert [token.type for token in tokens].count(TT.EOF) == 1


def test_scanning_continues_after_error() -> None:
    tokens, reporter = scan("@ 1 # 2")

    assert [err.message for err in reporter.static_errors] == ["Unexpected character."] * 2
    assert [token.type for token in tokens] == [TT.NUMBER, TT.NUMBER, TT.EOF]


def test_unterminated_string_is_discarded() -> None:
    tokens, _ = scan('1 "open')
    assert [token.type for token in tokens] == [TT.NUMBER, TT.EOF]


def test_empty_source_is_just_eof() -> None:
    tokens, reporter = scan("")
    assert not reporter.had_error
    assert len(tokens) == 1
    assert tokens[0].type == TT.EOF
    assert tokens[0].lexeme == ""


def test_lexemes_reassemble_source() -> None:
    source = 'var greeting = "hi" + name;\nprint greeting >= 1.5;'
    tokens = _non_eof_tokens(source)
    pos = 0

    for token in tokens:
        idx = source.find(token.lexeme, pos)
        assert idx >= 0
        assert source[pos:idx].strip() == ""
        pos = idx + len(token.lexeme)

    assert source[pos:].strip() == ""


def test_token_display() -> None:
    tokens = _non_eof_tokens('x "s" 2')
    assert [str(token) for token in tokens] == [
        "IDENTIFIER x null",
        'STRING "s" s',
        "NUMBER 2 2.0",
    ]

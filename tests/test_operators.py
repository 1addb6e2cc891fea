from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import LoxTypeError, LoxZeroDivisionError, run_output_case

SCENARIOS = [
    pytest.param("print 1 + 2 * 3;", ["7"], None, id="precedence"),
    pytest.param("print (1 + 2) * 3;", ["9"], None, id="grouping"),
    pytest.param("print 10 - 4 - 3;", ["3"], None, id="subtraction-left-assoc"),
    pytest.param("print -(-3);", ["3"], None, id="double-negation"),
    pytest.param("print !true;", ["false"], None, id="not-true"),
    pytest.param("print !nil;", ["true"], None, id="not-nil"),
    pytest.param("print !0;", ["false"], None, id="zero-is-truthy"),
    pytest.param('print !"";', ["false"], None, id="empty-string-is-truthy"),
    pytest.param("print 1 < 2; print 2 <= 2; print 3 > 4; print 4 >= 5;", ["true", "true", "false", "false"], None, id="comparisons"),
    pytest.param("print 1 == 1; print 1 != 1;", ["true", "false"], None, id="number-equality"),
    pytest.param('print "a" == "a"; print "a" == "b";', ["true", "false"], None, id="string-equality"),
    pytest.param("print nil == nil; print nil == false;", ["true", "false"], None, id="nil-equality"),
    pytest.param('print 1 == "1"; print 0 == false;', ["false", "false"], None, id="no-cross-type-equality"),
    pytest.param("print true == 1; print false == 0;", ["false", "false"], None, id="bool-never-equals-number"),
    pytest.param('print "hello" or "world";', ["hello"], None, id="or-returns-truthy-operand"),
    pytest.param('print nil or "fallback";', ["fallback"], None, id="or-falls-through"),
    pytest.param('print nil and "never";', ["nil"], None, id="and-returns-falsey-operand"),
    pytest.param('print 1 and "second";', ["second"], None, id="and-returns-last"),
    pytest.param(
        dedent(
            """\
            fun boom() { print "evaluated"; return true; }
            print true or boom();
            print false and boom();
            """
        ),
        ["true", "false"],
        None,
        id="logical-short-circuit",
    ),
    pytest.param("print 1 < 2 ? \"yes\" : \"no\";", ["yes"], None, id="ternary-true"),
    pytest.param("print 1 > 2 ? \"yes\" : \"no\";", ["no"], None, id="ternary-false"),
    pytest.param(
        "print 1 > 2 ? 1 : 2 > 3 ? 2 : 3;",
        ["3"],
        None,
        id="ternary-chain",
    ),
    pytest.param(
        dedent(
            """\
            fun side(x) { print x; return x; }
            print 1 < 2 ? side("then") : side("else");
            """
        ),
        ["then", "then"],
        None,
        id="ternary-is-lazy",
    ),
    pytest.param(
        dedent(
            """\
            fun side(x) { print x; return x; }
            1 == 1 ? side("a") : side("b");
            1 == 2 ? side("c") : side("d");
            """
        ),
        ["a", "d"],
        None,
        id="ternary-skips-unselected-branch",
    ),
    pytest.param(
        dedent(
            """\
            var x;
            x = false ? 1 : 2;
            print x;
            """
        ),
        ["2"],
        None,
        id="ternary-in-assignment",
    ),
    pytest.param('print -"a";', [], (LoxTypeError, "Operand must be a number."), id="negate-string"),
    pytest.param('print 1 - "a";', [], (LoxTypeError, "Operands must be numbers."), id="subtract-string"),
    pytest.param("print nil * 2;", [], (LoxTypeError, "Operands must be numbers."), id="multiply-nil"),
    pytest.param('print "a" < "b";', [], (LoxTypeError, "Operands must be numbers."), id="compare-strings"),
    pytest.param(
        'print "a" + 1;',
        [],
        (LoxTypeError, "Operands must be two numbers or two strings."),
        id="add-mixed",
    ),
    pytest.param(
        "print true + true;",
        [],
        (LoxTypeError, "Operands must be two numbers or two strings."),
        id="add-bools",
    ),
    pytest.param("print 1 / 0;", [], (LoxZeroDivisionError, "Division by zero."), id="divide-by-zero"),
    pytest.param(
        dedent(
            """\
            fun left() { print "left"; return "a"; }
            fun right() { print "right"; return 1; }
            print left() - right();
            """
        ),
        ["left", "right"],
        (LoxTypeError, "Operands must be numbers."),
        id="operands-evaluated-before-check",
    ),
]


@pytest.mark.parametrize("source, expected_lines, expected_exc", SCENARIOS)
def test_operators(source: str, expected_lines, expected_exc) -> None:
    run_output_case(source, expected_lines, expected_exc)

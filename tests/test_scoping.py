from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    LoxNameError,
    SilentReporter,
    parse_source,
    run_error_case,
    run_output_case,
)
from treelox.resolver import Locals, resolve_program

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            var a = "global";
            {
              fun showA() { print a; }
              showA();
              var a = "block";
              showA();
            }
            """
        ),
        ["global", "global"],
        None,
        id="closure-binds-at-resolution",
    ),
    pytest.param(
        dedent(
            """\
            var a = "outer";
            {
              var a = "inner";
              print a;
            }
            print a;
            """
        ),
        ["inner", "outer"],
        None,
        id="block-shadowing",
    ),
    pytest.param(
        dedent(
            """\
            var a = 1;
            var a = 2;
            print a;
            """
        ),
        ["2"],
        None,
        id="global-redeclaration-allowed",
    ),
    pytest.param(
        dedent(
            """\
            var a = 1;
            {
              a = 2;
              var b = a;
              print b;
            }
            print a;
            """
        ),
        ["2", "2"],
        None,
        id="assign-to-enclosing",
    ),
    pytest.param(
        dedent(
            """\
            fun f() { return later; }
            var later = "defined";
            print f();
            """
        ),
        ["defined"],
        None,
        id="globals-resolved-late",
    ),
    pytest.param(
        "print missing;",
        [],
        (LoxNameError, "Undefined variable 'missing'."),
        id="undefined-global-read",
    ),
    pytest.param(
        "missing = 1;",
        [],
        (LoxNameError, "Undefined variable 'missing'."),
        id="undefined-global-assign",
    ),
    pytest.param(
        dedent(
            """\
            var a;
            print a;
            """
        ),
        ["nil"],
        None,
        id="uninitialized-is-nil",
    ),
    pytest.param(
        dedent(
            """\
            var a = "outer";
            {
              var b = a;
              print b;
            }
            """
        ),
        ["outer"],
        None,
        id="initializer-reads-outer",
    ),
    pytest.param(
        dedent(
            """\
            var a = "global";
            var a = a + "!";
            print a;
            """
        ),
        ["global!"],
        None,
        id="global-initializer-reads-previous",
    ),
    pytest.param(
        "var a = a;\nprint a;",
        ["nil"],
        None,
        id="global-self-initializer-is-nil",
    ),
]

STATIC_ERROR_CASES = [
    pytest.param(
        "{ var a = a; }",
        ["[line 1] Error at 'a': Can't read local variable in its own initializer."],
        id="self-initializer",
    ),
    pytest.param(
        "{ var a = 1; var a = 2; }",
        ["[line 1] Error at 'a': Already a variable with this name in this scope."],
        id="local-redeclaration",
    ),
    pytest.param(
        "fun f(a, a) {}",
        ["[line 1] Error at 'a': Already a variable with this name in this scope."],
        id="duplicate-parameter",
    ),
    pytest.param(
        "return 1;",
        ["[line 1] Error at 'return': Can't return from top-level code."],
        id="top-level-return",
    ),
    pytest.param(
        "class A { init() { return 1; } }",
        ["[line 1] Error at 'return': Can't return a value from an initializer."],
        id="initializer-returns-value",
    ),
    pytest.param(
        "print this;",
        ["[line 1] Error at 'this': Can't use 'this' outside of a class."],
        id="this-outside-class",
    ),
    pytest.param(
        "fun f() { print this; }",
        ["[line 1] Error at 'this': Can't use 'this' outside of a class."],
        id="this-in-plain-function",
    ),
    pytest.param(
        "print super.m;",
        ["[line 1] Error at 'super': Can't use 'super' outside of a class."],
        id="super-outside-class",
    ),
    pytest.param(
        "class A { m() { super.m(); } }",
        ["[line 1] Error at 'super': Can't use 'super' in a class with no superclass."],
        id="super-without-superclass",
    ),
    pytest.param(
        "class A < A {}",
        ["[line 1] Error at 'A': A class can't inherit from itself."],
        id="inherit-from-self",
    ),
    pytest.param(
        dedent(
            """\
            { var a = 1; var a = 2; }
            return;
            """
        ),
        [
            "[line 1] Error at 'a': Already a variable with this name in this scope.",
            "[line 2] Error at 'return': Can't return from top-level code.",
        ],
        id="resolution-continues-after-error",
    ),
]


@pytest.mark.parametrize("source, expected_lines, expected_exc", SCENARIOS)
def test_scoping(source: str, expected_lines, expected_exc) -> None:
    run_output_case(source, expected_lines, expected_exc)


@pytest.mark.parametrize("source, expected", STATIC_ERROR_CASES)
def test_resolver_errors(source: str, expected: list) -> None:
    run_error_case(source, expected)


def test_initializer_may_return_bare() -> None:
    run_output_case(
        dedent(
            """\
            class A {
              init() { print "in"; return; print "unreachable"; }
            }
            print A();
            """
        ),
        ["in", "A instance"],
    )


def test_globals_are_not_recorded() -> None:
    reporter = SilentReporter()
    statements = parse_source("var g = 1; print g; g = 2;", reporter)
    table = Locals()

    resolve_program(statements, table, reporter)

    assert not reporter.had_error
    assert len(table) == 0


def test_local_distances() -> None:
    reporter = SilentReporter()
    source = dedent(
        """\
        {
          var a = 1;
          {
            print a;
            a = 2;
          }
        }
        """
    )
    statements = parse_source(source, reporter)
    table = Locals()

    resolve_program(statements, table, reporter)

    inner_block = statements[0].children[1]
    read = inner_block.children[0].children[0]
    write = inner_block.children[1].children[0]
    assert read.data == "variable"
    assert write.data == "assign"
    assert table.get(read) == 1
    assert table.get(write) == 1
    assert read in table


def test_identical_nodes_resolve_independently() -> None:
    reporter = SilentReporter()
    source = dedent(
        """\
        var a = "global";
        {
          var a = "local";
          print a;
        }
        print a;
        """
    )
    statements = parse_source(source, reporter)
    table = Locals()

    resolve_program(statements, table, reporter)

    local_read = statements[1].children[1].children[0]
    global_read = statements[2].children[0]
    assert local_read.children[0].lexeme == global_read.children[0].lexeme
    assert table.get(local_read) == 0
    assert table.get(global_read) is None

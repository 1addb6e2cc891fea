from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from .evaluator import Interpreter
from .lexer import tokenize
from .parser import Parser
from .printer import AstPrinter
from .reporting import ErrorReporter
from .resolver import resolve_program
from .utils import debug_py_trace_enabled, print_py_trace

logger = logging.getLogger(__name__)

EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

# Deep Lox recursion costs several Python frames per call.
RECURSION_LIMIT = 10_000


@dataclass(frozen=True)
class RunResult:
    had_error: bool = False
    had_runtime_error: bool = False


class Session:
    """
    One interpreter plus its error state.

    Globals and the resolution table survive across `run` calls, so the REPL
    can define something on one line and use it on the next.
    """

    def __init__(self, interactive: bool = False, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.interactive = interactive
        self.reporter = ErrorReporter(err)
        self.interpreter = Interpreter(out=out, interactive=interactive)

    def run(self, source: str) -> RunResult:
        self.reporter.reset()

        tokens = tokenize(source, self.reporter)
        statements = Parser(tokens, self.reporter).parse()
        logger.debug("scanned %d tokens, parsed %d statements", len(tokens), len(statements))

        if self.reporter.had_error:
            logger.debug("syntax errors reported, skipping resolution")
            return self._result()

        resolve_program(statements, self.interpreter.locals, self.reporter)

        if self.reporter.had_error:
            logger.debug("resolution errors reported, skipping execution")
            return self._result()

        self.interpreter.interpret(statements, self.reporter)

        if self.reporter.had_runtime_error and debug_py_trace_enabled():
            print_py_trace(self.reporter.runtime_errors[-1], self.reporter.err)

        return self._result()

    def _result(self) -> RunResult:
        return RunResult(
            had_error=self.reporter.had_error,
            had_runtime_error=self.reporter.had_runtime_error,
        )


def run(source: str, interactive: bool = False, out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> RunResult:
    """Run source once in a fresh session."""
    return Session(interactive=interactive, out=out, err=err).run(source)


def dump_tokens(source: str) -> None:
    reporter = ErrorReporter()

    for tok in tokenize(source, reporter):
        print(tok)


def dump_ast(source: str) -> None:
    reporter = ErrorReporter()
    statements = Parser(tokenize(source, reporter), reporter).parse()
    printer = AstPrinter()

    for stmt in statements:
        print(printer.print(stmt))


def run_file(path: str) -> int:
    source = Path(path).read_text(encoding="utf-8")
    session = Session()

    try:
        result = session.run(source)
    except RecursionError:
        print("Fatal: stack overflow.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if result.had_error:
        return EXIT_STATIC_ERROR
    if result.had_runtime_error:
        return EXIT_RUNTIME_ERROR

    return 0


def _usage() -> int:
    print("Usage: treelox [--tokens | --ast] [-v] [script]")
    return EXIT_USAGE


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    mode = "run"
    verbose = False
    script: Optional[str] = None

    for token in args:
        if token == "--tokens":
            mode = "tokens"
            continue

        if token == "--ast":
            mode = "ast"
            continue

        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token.startswith("-"):
            return _usage()

        if script is None:
            script = token
        else:
            return _usage()

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if mode != "run":
        if script is None:
            return _usage()

        source = Path(script).read_text(encoding="utf-8")
        if mode == "tokens":
            dump_tokens(source)
        else:
            dump_ast(source)
        return 0

    if script is not None:
        return run_file(script)

    from .repl import repl

    repl()
    return 0


if __name__ == "__main__":
    sys.exit(main())

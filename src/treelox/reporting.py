"""Error reporting shared by every pipeline stage.

Static errors (scanner, parser, resolver) are collected here instead of being
raised, so one run can surface several of them. Runtime errors are raised by
the interpreter and handed to :meth:`ErrorReporter.runtime_error` once the run
has been aborted.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO, TYPE_CHECKING

from .token_types import TT, Tok

if TYPE_CHECKING:
    from .types import LoxRuntimeError


@dataclass(frozen=True)
class StaticError:
    line: int
    where: str
    message: str

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


def token_location(token: Tok) -> str:
    if token.type == TT.EOF:
        return " at end"

    return f" at '{token.lexeme}'"


class ErrorReporter:
    """Collects static and runtime errors for one session."""

    def __init__(self, err: Optional[TextIO] = None):
        self.err = err
        self.static_errors: List[StaticError] = []
        self.runtime_errors: List[LoxRuntimeError] = []

    @property
    def had_error(self) -> bool:
        return bool(self.static_errors)

    @property
    def had_runtime_error(self) -> bool:
        return bool(self.runtime_errors)

    def error(self, line: int, where: str, message: str) -> None:
        record = StaticError(line, where, message)
        self.static_errors.append(record)
        self._write(str(record))

    def token_error(self, token: Tok, message: str) -> None:
        self.error(token.line, token_location(token), message)

    def runtime_error(self, exc: LoxRuntimeError) -> None:
        self.runtime_errors.append(exc)
        self._write(f"{exc.message}\n[line {exc.token.line}]")

    def reset(self) -> None:
        self.static_errors.clear()
        self.runtime_errors.clear()

    def _write(self, text: str) -> None:
        # Resolve sys.stderr lazily so pytest's capture sees the output.
        stream = self.err if self.err is not None else sys.stderr
        print(text, file=stream)


class SilentReporter(ErrorReporter):
    """Reporter that records errors without printing them (highlighting, dumps)."""

    def _write(self, text: str) -> None:
        return None

"""ILOC front end: scanner, parser and IR. Public API."""

from __future__ import annotations

import sys
from typing import BinaryIO, TextIO

from .ir import (
    Arithop as Arithop,
    Instruction as Instruction,
    LoadI as LoadI,
    Memop as Memop,
    Nop as Nop,
    Output as Output,
    Record as Record,
    render,
    to_iloc as to_iloc,
    to_source as to_source,
)
from .parse import (
    Diagnostic as Diagnostic,
    DiagnosticSink,
    ParseResult as ParseResult,
    Parser,
    summary as summary,
)
from .tokens import (
    Opcode as Opcode,
    Scanner,
    Token as Token,
    TokenKind,
    tokenize,
)

__all__ = [
    "Arithop",
    "Diagnostic",
    "Instruction",
    "LoadI",
    "Memop",
    "Nop",
    "Opcode",
    "Output",
    "ParseResult",
    "Parser",
    "Record",
    "Scanner",
    "SourceError",
    "Token",
    "TokenKind",
    "load",
    "render",
    "scan_only",
    "summary",
    "to_iloc",
    "to_source",
    "tokenize",
    "validate",
]


class SourceError(Exception):
    """The source could not be read. Fatal to the parse."""

    def __init__(self, path: str, reason: str):
        self.path: str = path
        self.reason: str = reason
        super().__init__(path + ": " + reason)


def _decode(name: str, raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except ValueError as e:
        raise SourceError(name, "invalid utf-8") from e


def load(source: str | TextIO | BinaryIO) -> str:
    """Read a whole ILOC source from a path or an open text or binary stream."""
    if not isinstance(source, str):
        name = str(getattr(source, "name", "<stream>"))
        try:
            data = source.read()
        except UnicodeDecodeError as e:
            raise SourceError(name, "invalid utf-8") from e
        except OSError as e:
            raise SourceError(name, e.strerror or str(e)) from e
        if isinstance(data, bytes):
            return _decode(name, data)
        return data
    try:
        with open(source, "rb") as f:
            raw = f.read()
    except FileNotFoundError as e:
        raise SourceError(source, "No such file or directory") from e
    except OSError as e:
        raise SourceError(source, e.strerror or str(e)) from e
    return _decode(source, raw)


def scan_only(source: str) -> list[tuple[TokenKind, int]]:
    """Tokens as (kind, value) pairs, through the first EOF."""
    return [tok.pair() for tok in tokenize(source)]


def validate(
    source: str,
    dump: bool = False,
    out: TextIO | None = None,
    sink: DiagnosticSink | None = None,
) -> ParseResult:
    """Parse and validate ILOC source.

    Diagnostics go to `sink` as they are found. With `dump`, a clean parse
    also writes one rendered record per line to `out` (stdout by default).
    """
    result = Parser(Scanner(source), sink).parse()
    if dump and result.ok:
        stream = out if out is not None else sys.stdout
        for instr in result.ir:
            print(render(instr), file=stream)
    return result

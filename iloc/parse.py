"""ILOC parser: line-at-a-time predictive parser that builds the IR.

Each line must start with an opcode; the opcode's class selects a fixed
operand grammar from GRAMMARS. The first mismatch on a line produces one
diagnostic and the parser skips to the next line boundary, so a single bad
line never yields more than one report. The whole input is always consumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, NamedTuple

from .ir import Arithop, Instruction, LoadI, Memop, Nop, Output
from .tokens import Opcode, Scanner, Token, TokenKind


class Phase(Enum):
    AWAITING_STATEMENT = "awaiting-statement"
    IN_MEMOP = "memop"
    IN_LOADI = "loadI"
    IN_ARITHOP = "arithop"
    IN_OUTPUT = "output"
    IN_NOP = "nop"
    ERROR = "error"
    DONE = "done"


# Operand sequence checked while in each instruction phase
GRAMMARS: dict[Phase, tuple[TokenKind, ...]] = {
    Phase.IN_MEMOP: (TokenKind.REGISTER, TokenKind.INTO, TokenKind.REGISTER),
    Phase.IN_LOADI: (TokenKind.CONSTANT, TokenKind.INTO, TokenKind.REGISTER),
    Phase.IN_ARITHOP: (
        TokenKind.REGISTER,
        TokenKind.COMMA,
        TokenKind.REGISTER,
        TokenKind.INTO,
        TokenKind.REGISTER,
    ),
    Phase.IN_OUTPUT: (TokenKind.CONSTANT,),
    Phase.IN_NOP: (),
}

# Phase entered on each opcode class
CLASS_PHASES: dict[TokenKind, Phase] = {
    TokenKind.MEMOP: Phase.IN_MEMOP,
    TokenKind.LOADI: Phase.IN_LOADI,
    TokenKind.ARITHOP: Phase.IN_ARITHOP,
    TokenKind.OUTPUT: Phase.IN_OUTPUT,
    TokenKind.NOP: Phase.IN_NOP,
}

TERMINATORS: frozenset[TokenKind] = frozenset(
    {TokenKind.NEWLINE, TokenKind.COMMENT, TokenKind.EOF}
)

VALUE_KINDS: frozenset[TokenKind] = frozenset({TokenKind.REGISTER, TokenKind.CONSTANT})

EXPECTED_NAMES: dict[TokenKind, str] = {
    TokenKind.REGISTER: "a register",
    TokenKind.CONSTANT: "a constant",
    TokenKind.COMMA: "','",
    TokenKind.INTO: "'=>'",
}


@dataclass(frozen=True)
class Diagnostic:
    """A syntax or lexical error attributed to one source line."""

    line: int
    message: str

    def __str__(self) -> str:
        return str(self.line) + ": " + self.message


DiagnosticSink = Callable[[Diagnostic], None]


class ParseResult(NamedTuple):
    """Finished parse: the IR and every diagnostic, both read-only."""

    ir: tuple[Instruction, ...]
    diagnostics: tuple[Diagnostic, ...]

    @property
    def ok(self) -> bool:
        return len(self.diagnostics) == 0

    @property
    def count(self) -> int:
        return len(self.ir)


@dataclass
class ParserState:
    """Line counter and state-machine phase, threaded through every check.

    ERROR means the current line is already reported and its remaining
    tokens are skipped up to the next line boundary.
    """

    line: int = 1
    phase: Phase = Phase.AWAITING_STATEMENT

    @property
    def pending_resync(self) -> bool:
        return self.phase == Phase.ERROR


class Parser:
    """Pulls tokens from a Scanner and validates one statement per line."""

    def __init__(self, scanner: Scanner, sink: DiagnosticSink | None = None):
        self.scanner: Scanner = scanner
        self.sink: DiagnosticSink | None = sink
        self.ir: list[Instruction] = []
        self.diagnostics: list[Diagnostic] = []

    # ── Diagnostics and recovery ─────────────────────────────

    def report(self, state: ParserState, message: str) -> None:
        if self.diagnostics and self.diagnostics[-1].line == state.line:
            return
        diag = Diagnostic(state.line, message)
        self.diagnostics.append(diag)
        if self.sink is not None:
            self.sink(diag)

    def fail(self, state: ParserState, message: str, found: Token) -> None:
        """Report and enter recovery. `found` is the token that broke the line."""
        self.report(state, message)
        if found.kind in TERMINATORS:
            self.end_line(state, found)
        else:
            state.phase = Phase.ERROR

    def end_line(self, state: ParserState, tok: Token) -> None:
        if tok.kind == TokenKind.EOF:
            state.phase = Phase.DONE
            return
        state.line += 1
        state.phase = Phase.AWAITING_STATEMENT

    # ── Top Level ────────────────────────────────────────────

    def parse(self) -> ParseResult:
        state = ParserState()
        while state.phase != Phase.DONE:
            tok = self.scanner.next_token()
            if state.phase == Phase.ERROR:
                if tok.kind in TERMINATORS:
                    self.end_line(state, tok)
                continue
            self.parse_statement(state, tok)
        return ParseResult(tuple(self.ir), tuple(self.diagnostics))

    def parse_statement(self, state: ParserState, head: Token) -> None:
        if head.kind == TokenKind.NEWLINE or head.kind == TokenKind.COMMENT:
            self.end_line(state, head)
            return
        if head.kind == TokenKind.EOF:
            state.phase = Phase.DONE
            return
        if head.kind not in CLASS_PHASES:
            self.fail(
                state, "Statement must start with an Opcode: found " + head.describe(), head
            )
            return
        start_line = state.line
        state.phase = CLASS_PHASES[head.kind]
        values = self.check_operands(state, head)
        if values is None:
            return
        self.ir.append(build_instruction(head, values, start_line))

    def check_operands(self, state: ParserState, head: Token) -> list[int] | None:
        """Match the grammar of the current phase and the line terminator after it.

        Returns the register and constant values in order, or None once the
        line has been reported.
        """
        values: list[int] = []
        for expected in GRAMMARS[state.phase]:
            tok = self.scanner.next_token()
            if tok.kind != expected:
                self.fail(state, syntax_message(head, EXPECTED_NAMES[expected], tok), tok)
                return None
            if expected in VALUE_KINDS:
                values.append(tok.value)
        end = self.scanner.next_token()
        if end.kind not in TERMINATORS:
            self.fail(state, syntax_message(head, "end of line", end), end)
            return None
        self.end_line(state, end)
        return values


def syntax_message(head: Token, expected: str, found: Token) -> str:
    return (
        "Incorrect "
        + head.kind.name
        + " syntax: expected "
        + expected
        + ", found "
        + found.describe()
    )


def build_instruction(head: Token, values: list[int], line: int) -> Instruction:
    opcode = Opcode(head.value)
    if head.kind == TokenKind.MEMOP:
        return Memop(line, opcode, values[0], values[1])
    if head.kind == TokenKind.LOADI:
        return LoadI(line, values[0], values[1])
    if head.kind == TokenKind.ARITHOP:
        return Arithop(line, opcode, values[0], values[1], values[2])
    if head.kind == TokenKind.OUTPUT:
        return Output(line, values[0])
    if head.kind == TokenKind.NOP:
        return Nop(line)
    raise ValueError("not an opcode token: " + head.kind.name)


def parse(source: str, sink: DiagnosticSink | None = None) -> ParseResult:
    """Parse ILOC source into IR plus diagnostics."""
    return Parser(Scanner(source), sink).parse()


def summary(result: ParseResult) -> str:
    if result.ok:
        return "Parse succeeded. Processed " + str(result.count) + " operations."
    return "Parse found errors."

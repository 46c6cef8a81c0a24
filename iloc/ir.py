"""ILOC IR: one record type per instruction class.

The parser appends these in source order. Every class also offers the flat
four-slot view (`Record`) used by listings and by later pipeline stages that
want to treat all operations uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from .tokens import Opcode


# ============================================================
# FLAT VIEW
# ============================================================


class Record(NamedTuple):
    """Fixed-shape view of an instruction. Unused slots are None.

    | Class   | operand1  | operand2 | destination |
    |---------|-----------|----------|-------------|
    | Memop   | src reg   | -        | dst reg     |
    | LoadI   | constant  | -        | dst reg     |
    | Arithop | src1 reg  | src2 reg | dst reg     |
    | Output  | constant  | -        | -           |
    | Nop     | -         | -        | -           |
    """

    opcode: Opcode
    operand1: int | None = None
    operand2: int | None = None
    destination: int | None = None


# ============================================================
# INSTRUCTIONS
# ============================================================


@dataclass(frozen=True)
class Instruction:
    """Base for all instructions. `line` is the 1-indexed source line."""

    line: int

    def record(self) -> Record:
        raise NotImplementedError


@dataclass(frozen=True)
class Memop(Instruction):
    """load / store: `src => dst`."""

    opcode: Opcode
    src: int
    dst: int

    def __post_init__(self) -> None:
        if self.opcode not in (Opcode.LOAD, Opcode.STORE):
            raise ValueError("not a memory opcode: " + self.opcode.mnemonic)

    def record(self) -> Record:
        return Record(self.opcode, self.src, None, self.dst)


@dataclass(frozen=True)
class LoadI(Instruction):
    """loadI: `constant => dst`."""

    constant: int
    dst: int

    def record(self) -> Record:
        return Record(Opcode.LOADI, self.constant, None, self.dst)


@dataclass(frozen=True)
class Arithop(Instruction):
    """add / sub / mult / lshift / rshift: `src1, src2 => dst`."""

    opcode: Opcode
    src1: int
    src2: int
    dst: int

    def __post_init__(self) -> None:
        if self.opcode not in ARITH_OPCODES:
            raise ValueError("not an arithmetic opcode: " + self.opcode.mnemonic)

    def record(self) -> Record:
        return Record(self.opcode, self.src1, self.src2, self.dst)


@dataclass(frozen=True)
class Output(Instruction):
    """output: `constant`."""

    constant: int

    def record(self) -> Record:
        return Record(Opcode.OUTPUT, self.constant)


@dataclass(frozen=True)
class Nop(Instruction):
    """nop: no operands."""

    def record(self) -> Record:
        return Record(Opcode.NOP)


ARITH_OPCODES: frozenset[Opcode] = frozenset(
    {Opcode.ADD, Opcode.SUB, Opcode.MULT, Opcode.LSHIFT, Opcode.RSHIFT}
)


# ============================================================
# RENDERING
# ============================================================


def _slot(value: int | None) -> str:
    if value is None:
        return "-"
    return str(value)


def render(instr: Instruction) -> str:
    """`<mnemonic> <operand1> <operand2> <destination>`, `-` for unused slots."""
    rec = instr.record()
    return (
        rec.opcode.mnemonic
        + " "
        + _slot(rec.operand1)
        + " "
        + _slot(rec.operand2)
        + " "
        + _slot(rec.destination)
    )


def to_iloc(instr: Instruction) -> str:
    """Canonical ILOC text for one instruction."""
    if isinstance(instr, Memop):
        return instr.opcode.mnemonic + " r" + str(instr.src) + " => r" + str(instr.dst)
    if isinstance(instr, LoadI):
        return "loadI " + str(instr.constant) + " => r" + str(instr.dst)
    if isinstance(instr, Arithop):
        return (
            instr.opcode.mnemonic
            + " r"
            + str(instr.src1)
            + ", r"
            + str(instr.src2)
            + " => r"
            + str(instr.dst)
        )
    if isinstance(instr, Output):
        return "output " + str(instr.constant)
    if isinstance(instr, Nop):
        return "nop"
    raise TypeError("unknown instruction: " + type(instr).__name__)


def to_source(ir: tuple[Instruction, ...] | list[Instruction]) -> str:
    """Emit a whole block as ILOC source, one instruction per line."""
    lines: list[str] = []
    for instr in ir:
        lines.append(to_iloc(instr))
    return "\n".join(lines) + "\n" if lines else ""

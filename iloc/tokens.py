"""ILOC scanner: classifies source characters into tokens, one per call."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class TokenKind(IntEnum):
    """Token categories. Values follow the category table of the 412fe front end."""

    MEMOP = 0
    LOADI = 1
    ARITHOP = 2
    OUTPUT = 3
    NOP = 4
    CONSTANT = 5
    REGISTER = 6
    COMMA = 7
    INTO = 8
    EOF = 9
    COMMENT = 10
    NEWLINE = 11
    ERROR = 12


class Opcode(IntEnum):
    """ILOC opcodes. The value is the index into the fixed opcode table."""

    LOAD = 0
    LOADI = 1
    STORE = 2
    ADD = 3
    SUB = 4
    MULT = 5
    LSHIFT = 6
    RSHIFT = 7
    OUTPUT = 8
    NOP = 9

    @property
    def mnemonic(self) -> str:
        return MNEMONICS[self.value]

    @property
    def category(self) -> TokenKind:
        return OPCODE_CATEGORY[self]


class LexError(IntEnum):
    """Codes carried by ERROR tokens."""

    BAD_CHARACTER = 1
    BAD_WORD = 2
    BAD_REGISTER = 3
    BAD_CONSTANT = 4
    BAD_ARROW = 5
    BAD_COMMENT = 6


MNEMONICS: tuple[str, ...] = (
    "load",
    "loadI",
    "store",
    "add",
    "sub",
    "mult",
    "lshift",
    "rshift",
    "output",
    "nop",
)

KEYWORDS: dict[str, Opcode] = {name: Opcode(i) for i, name in enumerate(MNEMONICS)}

OPCODE_CATEGORY: dict[Opcode, TokenKind] = {
    Opcode.LOAD: TokenKind.MEMOP,
    Opcode.STORE: TokenKind.MEMOP,
    Opcode.LOADI: TokenKind.LOADI,
    Opcode.ADD: TokenKind.ARITHOP,
    Opcode.SUB: TokenKind.ARITHOP,
    Opcode.MULT: TokenKind.ARITHOP,
    Opcode.LSHIFT: TokenKind.ARITHOP,
    Opcode.RSHIFT: TokenKind.ARITHOP,
    Opcode.OUTPUT: TokenKind.OUTPUT,
    Opcode.NOP: TokenKind.NOP,
}

OPCODE_KINDS: frozenset[TokenKind] = frozenset(OPCODE_CATEGORY.values())

# Value of tokens that carry nothing (punctuation, layout, EOF)
NO_VALUE = -1


@dataclass(frozen=True)
class Token:
    """A classified lexeme. `value` depends on `kind`:

    - opcode kinds: the `Opcode`
    - REGISTER: the register number; CONSTANT: the integer
    - ERROR: a `LexError` code
    - everything else: NO_VALUE
    """

    kind: TokenKind
    value: int
    line: int
    lexeme: str

    def pair(self) -> tuple[TokenKind, int]:
        return (self.kind, self.value)

    def describe(self) -> str:
        """Short human description, used in diagnostics."""
        if self.kind == TokenKind.ERROR:
            return 'invalid lexeme "' + self.lexeme + '"'
        if self.kind == TokenKind.EOF:
            return "end of file"
        if self.kind == TokenKind.NEWLINE:
            return "end of line"
        if self.kind == TokenKind.COMMENT:
            return "comment"
        return self.kind.name + ' "' + self.lexeme + '"'


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_word(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _is_blank(c: str) -> bool:
    return c == " " or c == "\t" or c == "\r"


def _starts_token(c: str) -> bool:
    return _is_word(c) or _is_blank(c) or c in "\n,=/"


class Scanner:
    """Pull scanner over one source text.

    Owns the cursor and the line count. Lexical errors come back as ERROR
    tokens; nothing here raises on bad input.
    """

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0
        self.line: int = 1

    def _make(self, kind: TokenKind, value: int, start: int) -> Token:
        return Token(kind, value, self.line, self.source[start : self.pos])

    def next_token(self) -> Token:
        src = self.source
        length = len(src)

        while self.pos < length and _is_blank(src[self.pos]):
            self.pos += 1
        if self.pos >= length:
            return Token(TokenKind.EOF, NO_VALUE, self.line, "")

        start = self.pos
        c = src[start]

        if c == "\n":
            self.pos += 1
            tok = Token(TokenKind.NEWLINE, NO_VALUE, self.line, "\\n")
            self.line += 1
            return tok

        if c == "/":
            if start + 1 < length and src[start + 1] == "/":
                while self.pos < length and src[self.pos] != "\n":
                    self.pos += 1
                tok = self._make(TokenKind.COMMENT, NO_VALUE, start)
                # The comment stands in for the line break it runs up to
                if self.pos < length:
                    self.pos += 1
                    self.line += 1
                return tok
            self.pos += 1
            return self._make(TokenKind.ERROR, LexError.BAD_COMMENT, start)

        if c == ",":
            self.pos += 1
            return self._make(TokenKind.COMMA, NO_VALUE, start)

        if c == "=":
            if start + 1 < length and src[start + 1] == ">":
                self.pos += 2
                return self._make(TokenKind.INTO, NO_VALUE, start)
            self.pos += 1
            return self._make(TokenKind.ERROR, LexError.BAD_ARROW, start)

        if _is_digit(c):
            while self.pos < length and _is_digit(src[self.pos]):
                self.pos += 1
            if self.pos < length and _is_alpha(src[self.pos]):
                while self.pos < length and _is_word(src[self.pos]):
                    self.pos += 1
                return self._make(TokenKind.ERROR, LexError.BAD_CONSTANT, start)
            return self._make(TokenKind.CONSTANT, int(src[start : self.pos]), start)

        if _is_alpha(c):
            while self.pos < length and _is_word(src[self.pos]):
                self.pos += 1
            return self._classify_word(start)

        while self.pos < length and not _starts_token(src[self.pos]):
            self.pos += 1
        return self._make(TokenKind.ERROR, LexError.BAD_CHARACTER, start)

    def _classify_word(self, start: int) -> Token:
        word = self.source[start : self.pos]
        opcode = KEYWORDS.get(word)
        if opcode is not None:
            return self._make(opcode.category, opcode, start)
        if word[0] == "r":
            digits = word[1:]
            if digits != "" and all(_is_digit(d) for d in digits):
                return self._make(TokenKind.REGISTER, int(digits), start)
            return self._make(TokenKind.ERROR, LexError.BAD_REGISTER, start)
        return self._make(TokenKind.ERROR, LexError.BAD_WORD, start)


def tokenize(source: str) -> list[Token]:
    """Scan ILOC source into a flat token list ending with the first EOF."""
    scanner = Scanner(source)
    tokens: list[Token] = []
    while True:
        tok = scanner.next_token()
        tokens.append(tok)
        if tok.kind == TokenKind.EOF:
            return tokens

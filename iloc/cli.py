"""iloc-fe CLI: scan, validate, or dump the IR of an ILOC file."""

from __future__ import annotations

import sys

from . import SourceError, load, summary, tokenize, validate
from .parse import Diagnostic


USAGE: str = """\
iloc-fe [-h] [-s | -p | -r] FILE

Scan and parse an ILOC block.

Options:
  -h    Show this help message and exit; other arguments are ignored
  -s    Scan FILE and print the tokens the scanner finds
  -p    Scan and parse FILE, then report success or every error (default)
  -r    Scan and parse FILE, then print the intermediate representation
"""

# Highest priority first
MODES: list[str] = ["-r", "-p", "-s"]


def _print_diagnostic(diag: Diagnostic) -> None:
    print(str(diag), file=sys.stderr)


def run_scan(source: str) -> int:
    for tok in tokenize(source):
        print(str(tok.line) + ": < " + tok.kind.name + ', "' + tok.lexeme + '" >')
    return 0


def run_parse(source: str, dump: bool) -> int:
    result = validate(source, dump=dump, sink=_print_diagnostic)
    # A successful -r run prints only the listing
    if not (dump and result.ok):
        print(summary(result))
    if not result.ok:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    # Help wins wherever it appears, even next to bad arguments
    if "-h" in args or "--help" in args:
        print(USAGE, end="")
        return 0
    modes: list[str] = []
    filepath: str = ""
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in MODES:
            if arg not in modes:
                modes.append(arg)
            i += 1
        elif arg.startswith("-"):
            print("iloc-fe: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("iloc-fe: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("iloc-fe: missing file argument", file=sys.stderr)
        return 2
    if len(modes) > 1:
        print("iloc-fe: use only one mode flag at a time", file=sys.stderr)
    mode = "-p"
    for candidate in MODES:
        if candidate in modes:
            mode = candidate
            break

    try:
        source = load(filepath)
    except SourceError as e:
        print("iloc-fe: " + str(e), file=sys.stderr)
        return 1

    if mode == "-s":
        return run_scan(source)
    return run_parse(source, mode == "-r")


if __name__ == "__main__":
    sys.exit(main())

"""Lovelace CLI — compile a JSON AST to C, or draw it."""

from __future__ import annotations

import logging
import sys

from . import check, compile_program
from .codegen import GenOptions
from .diagram import to_dot, to_text_tree
from .errors import CompileError
from .serialize import dump_program, load_program

logger = logging.getLogger(__name__)

EMIT_KINDS: list[str] = ["c", "tree", "dot", "json"]

USAGE: str = """\
lovelace [OPTIONS] [INPUT] [-o OUTPUT]

Compile a Lovelace program, given as a JSON AST, to C.

Options:
  --emit KIND         Output kind: c, tree, dot, json (default: c)
  --include HEADER    Header to #include; repeatable (default: stdio.h)
  -o, --output FILE   Write output to FILE instead of stdout
  -v, --verbose       Log compilation progress to stderr
  --help              Show this help message
"""


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)
    return (source, 0)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(output)
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    sys.stdout.write(output)
    return 0


def render(source: str, emit: str, options: GenOptions) -> str:
    """Produce the requested output; raises CompileError."""
    program = load_program(source)
    if emit == "c":
        return compile_program(program, options)
    if emit == "json":
        check(program, options)
        return dump_program(program) + "\n"
    if emit == "tree":
        return to_text_tree(program)
    return to_dot(program)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    input_file: str | None = None
    seen_input = False
    output_file: str | None = None
    emit = "c"
    includes: list[str] = []
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--emit" or arg == "--include" or arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                return 2
            value = args[i + 1]
            if arg == "--emit":
                if value not in EMIT_KINDS:
                    print("error: unknown emit kind '" + value + "'", file=sys.stderr)
                    return 2
                emit = value
            elif arg == "--include":
                includes.append(value)
            else:
                output_file = value
            i += 2
        elif arg == "-v" or arg == "--verbose":
            verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            print("error: unknown option '" + arg + "'", file=sys.stderr)
            return 2
        elif not seen_input:
            input_file = None if arg == "-" else arg
            seen_input = True
            i += 1
        else:
            print("error: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    source, code = read_source(input_file)
    if code != 0:
        return code

    options = GenOptions(includes=tuple(includes)) if includes else GenOptions()
    try:
        output = render(source, emit, options)
    except CompileError as e:
        print("error: " + e.kind + ": " + str(e), file=sys.stderr)
        return 1
    logger.debug("writing %d bytes of %s output", len(output), emit)
    return write_output(output, output_file)


if __name__ == "__main__":
    sys.exit(main())

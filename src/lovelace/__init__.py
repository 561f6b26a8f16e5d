"""Lovelace-to-C code generator — public API."""

from __future__ import annotations

from .ast import Program
from .check import Checker, check as check_program
from .codegen import GenOptions as GenOptions, generate as generate
from .errors import (
    ArityMismatch as ArityMismatch,
    CompileError as CompileError,
    DuplicateDeclaration as DuplicateDeclaration,
    DuplicateFunction as DuplicateFunction,
    MalformedAST as MalformedAST,
    TypeMismatch as TypeMismatch,
    UndeclaredFunction as UndeclaredFunction,
    UndeclaredIdentifier as UndeclaredIdentifier,
)
from .serialize import load_program as load_program
from .symbols import FunctionTable


def check(program: Program, options: GenOptions | None = None) -> Checker:
    """Validate and annotate a Program with a fresh function table."""
    opts = options if options is not None else GenOptions()
    return check_program(program, FunctionTable(opts.entry_name))


def compile_program(program: Program, options: GenOptions | None = None) -> str:
    """Check then generate C. All-or-nothing: raises CompileError, never partial text."""
    opts = options if options is not None else GenOptions()
    checker = check(program, opts)
    return generate(program, checker.functions, opts)


def compile_json(text: str, options: GenOptions | None = None) -> str:
    """Load a JSON AST and compile it to C."""
    return compile_program(load_program(text), options)

"""Compile errors raised by the symbol table, checker and generator.

Every error aborts the compilation: nothing is recovered and no partial
output is produced.
"""

from __future__ import annotations

from .ast import Pos


class CompileError(Exception):
    """Base for all Lovelace compile errors, with optional location info."""

    def __init__(self, msg: str, name: str | None = None, pos: Pos | None = None):
        self.msg: str = msg
        self.name: str | None = name
        self.pos: Pos | None = pos
        if pos is not None:
            super().__init__(msg + " at line " + str(pos.line) + " col " + str(pos.col))
        else:
            super().__init__(msg)

    @property
    def kind(self) -> str:
        return type(self).__name__


class DuplicateDeclaration(CompileError):
    """A variable or parameter name declared twice in one scope."""


class DuplicateFunction(CompileError):
    """Two functions with the same name, or a function using a reserved name."""


class UndeclaredIdentifier(CompileError):
    pass


class UndeclaredFunction(CompileError):
    pass


class TypeMismatch(CompileError):
    """Operator/operand, assignment, return or call-argument type conflict."""


class ArityMismatch(CompileError):
    """Call argument count differs from the callee's signature."""


class MalformedAST(CompileError):
    """A node is missing a required child or annotation."""

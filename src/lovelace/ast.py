"""Lovelace AST — typed node definitions.

The front-end builds these nodes once. The checker annotates them in place
(BinaryOp/Call result types, float promotion of integer literals); the code
generator only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import FunctionSignature, Primitive


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


class Expr:
    """Base for all expression nodes."""


@dataclass
class Literal(Expr):
    """Numeric literal. text is the source spelling, e.g. "2" or "15.5"."""

    typ: Primitive | None
    text: str
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class StringLit(Expr):
    """Format string of an I/O intrinsic. value is unescaped."""

    value: str
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class VarRef(Expr):
    name: str
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class BinaryOp(Expr):
    """left op right. typ is the result type, set by the checker."""

    op: str
    left: Expr
    right: Expr
    typ: Primitive | None = None
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class Call(Expr):
    """func(args). typ is the callee's return type (None for void)."""

    func: str
    args: list[Expr]
    typ: Primitive | None = None
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class AddressOf(Expr):
    """&name, only valid as a scanf output argument."""

    name: str
    pos: Pos | None = field(default=None, compare=False)


# ============================================================
# STATEMENTS
# ============================================================


class Stmt:
    """Base for all statement nodes."""


@dataclass
class Assign(Stmt):
    name: str
    value: Expr
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class If(Stmt):
    """if (cond) { then_body } else { else_body }. else_body is None if absent."""

    cond: Expr
    then_body: list[Stmt]
    else_body: list[Stmt] | None = None
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class While(Stmt):
    cond: Expr
    body: list[Stmt]
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class Return(Stmt):
    """return value; value is None for a bare return."""

    value: Expr | None = None
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class ExprStmt(Stmt):
    """Bare expression, typically a call such as printf(...)."""

    expr: Expr
    pos: Pos | None = field(default=None, compare=False)


# ============================================================
# DECLARATIONS
# ============================================================


@dataclass
class LocalDecl:
    """Function-level variable, hoisted to the top of the C body."""

    name: str
    typ: Primitive
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class FunctionDecl:
    signature: FunctionSignature
    locals: list[LocalDecl]
    body: list[Stmt]
    pos: Pos | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return self.signature.name


@dataclass
class MainDecl:
    """Entry point: no parameters, always emitted as int main()."""

    locals: list[LocalDecl]
    body: list[Stmt]
    pos: Pos | None = field(default=None, compare=False)


@dataclass
class Program:
    functions: list[FunctionDecl]
    main: MainDecl

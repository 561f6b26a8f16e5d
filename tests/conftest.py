"""Pytest configuration and AST builders for the Lovelace generator tests."""

from pathlib import Path

from lovelace.ast import (
    BinaryOp,
    Call,
    Expr,
    ExprStmt,
    FunctionDecl,
    Literal,
    LocalDecl,
    MainDecl,
    Program,
    Stmt,
    StringLit,
    VarRef,
)
from lovelace.serialize import load_program
from lovelace.types import FLOAT, INT, FunctionSignature, Param, Primitive

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def discover_fixtures() -> list[str]:
    """Names of fixtures that have both an input AST and expected C."""
    names: list[str] = []
    for path in sorted(FIXTURES_DIR.glob("*.json")):
        if path.with_suffix(".c").exists():
            names.append(path.stem)
    return names


def load_fixture(name: str) -> Program:
    return load_program((FIXTURES_DIR / (name + ".json")).read_text(encoding="utf-8"))


def expected_c(name: str) -> str:
    return (FIXTURES_DIR / (name + ".c")).read_text(encoding="utf-8")


def contains_normalized(haystack: str, needle: str) -> bool:
    """Check if needle appears in haystack, normalizing line-by-line whitespace."""
    needle_lines = [line.strip() for line in needle.strip().split("\n") if line.strip()]
    haystack_lines = [line.strip() for line in haystack.split("\n") if line.strip()]
    if not needle_lines:
        return True
    for i in range(len(haystack_lines)):
        if haystack_lines[i : i + len(needle_lines)] == needle_lines:
            return True
    return False


# ---------------------------------------------------------------------------
# AST builders
# ---------------------------------------------------------------------------


def num(text: str, typ: Primitive = INT) -> Literal:
    return Literal(typ, text)


def flt(text: str) -> Literal:
    return Literal(FLOAT, text)


def var(name: str) -> VarRef:
    return VarRef(name)


def binop(op: str, left: Expr, right: Expr) -> BinaryOp:
    return BinaryOp(op, left, right)


def call(func: str, *args: Expr) -> Call:
    return Call(func, list(args))


def printf(fmt: str, *args: Expr) -> ExprStmt:
    return ExprStmt(Call("printf", [StringLit(fmt), *args]))


def fn(
    name: str,
    params: list[tuple[str, Primitive]],
    ret: Primitive | None,
    body: list[Stmt],
    local_vars: list[tuple[str, Primitive]] | None = None,
) -> FunctionDecl:
    sig = FunctionSignature(name, [Param(n, t) for n, t in params], ret)
    decls = [LocalDecl(n, t) for n, t in (local_vars or [])]
    return FunctionDecl(sig, decls, body)


def program(
    functions: list[FunctionDecl],
    main_body: list[Stmt] | None = None,
    main_locals: list[tuple[str, Primitive]] | None = None,
) -> Program:
    decls = [LocalDecl(n, t) for n, t in (main_locals or [])]
    return Program(functions, MainDecl(decls, main_body or []))

"""C backend: checked Lovelace AST → C source text.

Output layout, in order:
- #include lines, then a blank line
- one prototype per function, then a blank line (omitted when there are none)
- each function body, each followed by a blank line
- int main(), always last

Formatting rules:
- every binary expression is fully parenthesized; no precedence table
- locals are hoisted to the top of their body; parameters are not redeclared
- float literals always carry a decimal point
- if/while bodies are always braced; else-if chains are never collapsed

The generator never infers types. It renders the annotations the checker
wrote, and raises MalformedAST when one is missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .ast import (
    AddressOf,
    Assign,
    BinaryOp,
    Call,
    Expr,
    ExprStmt,
    FunctionDecl,
    If,
    Literal,
    LocalDecl,
    MainDecl,
    Program,
    Return,
    Stmt,
    StringLit,
    VarRef,
    While,
)
from .buffer import EmissionBuffer
from .errors import MalformedAST
from .symbols import FunctionTable
from .types import FLOAT, FLOAT_TEXT_RE, INT, INTRINSICS, FunctionSignature, is_float_text, type_name

logger = logging.getLogger(__name__)

_C_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def escape_string_c(value: str) -> str:
    """Escape a string for use in a C string literal (without quotes).

    Other control characters and DEL become three-digit octal escapes.
    """
    parts: list[str] = []
    for ch in value:
        if ch in _C_ESCAPES:
            parts.append(_C_ESCAPES[ch])
        elif ord(ch) < 0x20 or ch == "\x7f":
            parts.append("\\%03o" % ord(ch))
        else:
            parts.append(ch)
    return "".join(parts)


def format_float_literal(text: str) -> str:
    """Spell a float literal with at least one digit on each side of the point.

    "2" -> "2.0", "2." -> "2.0", ".5" -> "0.5", "1e5" -> "1.0e5"; anything
    already well-formed is returned unchanged so the value round-trips.
    """
    s = text.strip()
    m = FLOAT_TEXT_RE.fullmatch(s)
    if m is None or not is_float_text(s):
        raise MalformedAST("invalid float literal '" + text + "'")
    sign, whole, frac, exp = m.groups()
    if whole == "":
        whole = "0"
    if not frac:
        frac = "0"
    return sign + whole + "." + frac + (exp or "")


@dataclass(frozen=True)
class GenOptions:
    """Generator settings. The defaults reproduce the reference fixtures."""

    includes: tuple[str, ...] = ("stdio.h",)
    indent: str = "    "
    entry_name: str = "main"


class CGenerator:
    """Emit C source from a checked Program."""

    def __init__(self, functions: FunctionTable, options: GenOptions | None = None) -> None:
        self.functions: FunctionTable = functions
        self.options: GenOptions = options if options is not None else GenOptions()
        self.buf: EmissionBuffer = EmissionBuffer(self.options.indent)

    def emit(self, program: Program) -> str:
        """Render the whole program. Nothing is returned unless every part succeeds."""
        self.buf = EmissionBuffer(self.options.indent)
        if program.main is None:
            raise MalformedAST("program has no " + self.options.entry_name)
        self._emit_header()
        self._emit_prototypes(program)
        for fn in program.functions:
            self._emit_function(fn)
        self._emit_main(program.main)
        return self.buf.render()

    # ============================================================
    # DECLARATIONS
    # ============================================================

    def _emit_header(self) -> None:
        for header in self.options.includes:
            self.buf.write("#include <" + header + ">")
        if self.options.includes:
            self.buf.write()

    def _signature(self, fn: FunctionDecl) -> FunctionSignature:
        if fn.name not in self.functions:
            raise MalformedAST("function '" + fn.name + "' was not checked", fn.name, fn.pos)
        return self.functions.resolve(fn.name, fn.pos)

    def _render_signature(self, sig: FunctionSignature) -> str:
        params = ", ".join(type_name(p.typ) + " " + p.name for p in sig.params)
        return type_name(sig.ret) + " " + sig.name + "(" + params + ")"

    def _emit_prototypes(self, program: Program) -> None:
        if not program.functions:
            return
        for fn in program.functions:
            self.buf.write(self._render_signature(self._signature(fn)) + ";")
        self.buf.write()

    def _emit_locals(self, decls: list[LocalDecl]) -> None:
        for decl in decls:
            self.buf.write(type_name(decl.typ) + " " + decl.name + ";")

    def _emit_function(self, fn: FunctionDecl) -> None:
        logger.debug("emitting function %s", fn.name)
        self.buf.write(self._render_signature(self._signature(fn)) + " {")
        self.buf.indent()
        self._emit_locals(fn.locals)
        for stmt in fn.body:
            self._emit_stmt(stmt)
        self.buf.dedent()
        self.buf.write("}")
        self.buf.write()

    def _emit_main(self, main: MainDecl) -> None:
        logger.debug("emitting entry point %s", self.options.entry_name)
        self.buf.write("int " + self.options.entry_name + "() {")
        self.buf.indent()
        self._emit_locals(main.locals)
        for stmt in main.body:
            self._emit_stmt(stmt)
        if not main.body or not isinstance(main.body[-1], Return):
            self.buf.write("return 0;")
        self.buf.dedent()
        self.buf.write("}")

    # ============================================================
    # STATEMENT EMISSION
    # ============================================================

    def _emit_block(self, stmts: list[Stmt]) -> None:
        self.buf.indent()
        for stmt in stmts:
            self._emit_stmt(stmt)
        self.buf.dedent()

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Assign):
            self.buf.write(stmt.name + " = " + self._emit_expr(stmt.value) + ";")
        elif isinstance(stmt, If):
            self._emit_stmt_If(stmt)
        elif isinstance(stmt, While):
            self._emit_stmt_While(stmt)
        elif isinstance(stmt, Return):
            self._emit_stmt_Return(stmt)
        elif isinstance(stmt, ExprStmt):
            self.buf.write(self._emit_expr(stmt.expr) + ";")
        else:
            raise MalformedAST("unknown statement node " + type(stmt).__name__)

    def _emit_stmt_If(self, stmt: If) -> None:
        self.buf.write("if (" + self._emit_expr(stmt.cond) + ") {")
        self._emit_block(stmt.then_body)
        if stmt.else_body is not None:
            # a nested If stays inside the else block
            self.buf.write("} else {")
            self._emit_block(stmt.else_body)
        self.buf.write("}")

    def _emit_stmt_While(self, stmt: While) -> None:
        self.buf.write("while (" + self._emit_expr(stmt.cond) + ") {")
        self._emit_block(stmt.body)
        self.buf.write("}")

    def _emit_stmt_Return(self, stmt: Return) -> None:
        if stmt.value is None:
            self.buf.write("return;")
        else:
            self.buf.write("return " + self._emit_expr(stmt.value) + ";")

    # ============================================================
    # EXPRESSION EMISSION
    # ============================================================

    def _emit_expr(self, expr: Expr | None) -> str:
        """Emit an expression and return C code string."""
        if expr is None:
            raise MalformedAST("missing expression")
        if isinstance(expr, Literal):
            return self._emit_expr_Literal(expr)
        if isinstance(expr, StringLit):
            return '"' + escape_string_c(expr.value) + '"'
        if isinstance(expr, VarRef):
            return expr.name
        if isinstance(expr, BinaryOp):
            return self._emit_expr_BinaryOp(expr)
        if isinstance(expr, Call):
            return self._emit_expr_Call(expr)
        if isinstance(expr, AddressOf):
            return "&" + expr.name
        raise MalformedAST("unknown expression node " + type(expr).__name__)

    def _emit_expr_Literal(self, expr: Literal) -> str:
        if expr.typ == FLOAT:
            return format_float_literal(expr.text)
        if expr.typ == INT:
            return expr.text.strip()
        raise MalformedAST("literal '" + str(expr.text) + "' has no resolved type", None, expr.pos)

    def _emit_expr_BinaryOp(self, expr: BinaryOp) -> str:
        if expr.typ is None:
            raise MalformedAST("binary '" + expr.op + "' has no resolved type", None, expr.pos)
        left = self._emit_expr(expr.left)
        right = self._emit_expr(expr.right)
        return "(" + left + " " + expr.op + " " + right + ")"

    def _emit_expr_Call(self, expr: Call) -> str:
        if expr.func not in INTRINSICS and expr.func not in self.functions:
            raise MalformedAST("call to unchecked function '" + expr.func + "'", expr.func, expr.pos)
        args = ", ".join(self._emit_expr(a) for a in expr.args)
        return expr.func + "(" + args + ")"


def generate(program: Program, functions: FunctionTable, options: GenOptions | None = None) -> str:
    """Emit C for a Program already validated against functions."""
    return CGenerator(functions, options).emit(program)

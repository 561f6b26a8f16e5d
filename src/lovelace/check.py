"""Lovelace checker — validates a Program and annotates it for codegen.

The checker runs in two passes, like the rest of the pipeline expects:
collect every function signature into the FunctionTable first (so calls may
refer to functions defined later), then check each body against a fresh
flat Scope. The first error raised aborts the whole compilation.

Annotations written in place:
- BinaryOp.typ and Call.typ are set to their result types.
- Integer literals appearing directly in float context are retyped FLOAT,
  which makes the generator render them with a trailing ".0".
"""

from __future__ import annotations

import logging
import re

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
    Pos,
    Program,
    Return,
    Stmt,
    StringLit,
    VarRef,
    While,
)
from .errors import ArityMismatch, MalformedAST, TypeMismatch
from .symbols import FunctionTable, Scope
from .types import (
    ARITHMETIC_OPS,
    BINARY_OPS,
    COMPARISON_OPS,
    FLOAT,
    INT,
    INTRINSICS,
    Primitive,
    binary_result,
    is_assignable,
    is_float_text,
    is_int_text,
    type_name,
)

logger = logging.getLogger(__name__)

# printf/scanf conversion specifiers; "%%" is matched so it can be skipped.
_CONVERSION_RE = re.compile(
    r"%(?:(?P<percent>%)|(?P<star>\*)?[-+ #0]*(?P<width>[0-9]+|\*)?"
    r"(?:\.(?P<prec>[0-9]+|\*))?(?:hh|h|ll|l|L|z|j|t)?[diouxXeEfFgGaAcsp])"
)


def count_conversions(fmt: str, func: str = "printf") -> int:
    """Number of arguments a printf/scanf format string consumes.

    In printf each "*" width or precision takes an extra int argument. In
    scanf a leading "*" suppresses assignment, so the conversion takes none.
    """
    n = 0
    for m in _CONVERSION_RE.finditer(fmt):
        if m.group("percent"):
            continue
        if func == "scanf":
            if not m.group("star"):
                n += 1
            continue
        n += 1
        for group in ("star", "width", "prec"):
            if m.group(group) == "*":
                n += 1
    return n


def promote_to_float(expr: Expr) -> None:
    """Retype an integer literal used where a float is expected."""
    if isinstance(expr, Literal) and expr.typ == INT:
        expr.typ = FLOAT


class Checker:
    def __init__(self, functions: FunctionTable | None = None) -> None:
        self.functions: FunctionTable = functions if functions is not None else FunctionTable()
        self.scopes: dict[str, Scope] = {}
        self.current_owner: str = ""
        self.current_ret: Primitive | None = None

    # ── Declarations ──────────────────────────────────────────

    def collect_declarations(self, program: Program) -> None:
        """First pass: register every function signature."""
        for fn in program.functions:
            sig = fn.signature
            for p in sig.params:
                if not isinstance(p.typ, Primitive):
                    raise MalformedAST(
                        "parameter '" + p.name + "' of '" + sig.name + "' has no type", p.name, fn.pos
                    )
            if sig.ret is not None and not isinstance(sig.ret, Primitive):
                raise MalformedAST("function '" + sig.name + "' has an invalid return type", sig.name, fn.pos)
            self.functions.declare(sig, fn.pos)

    def _declare_locals(self, scope: Scope, decls: list[LocalDecl]) -> None:
        for decl in decls:
            if not isinstance(decl.typ, Primitive):
                raise MalformedAST("variable '" + decl.name + "' has no type", decl.name, decl.pos)
            scope.declare(decl.name, decl.typ, "variable", decl.pos)

    # ── Bodies ────────────────────────────────────────────────

    def check_bodies(self, program: Program) -> None:
        for fn in program.functions:
            self.check_function(fn)
        self.check_main(program.main)

    def check_function(self, fn: FunctionDecl) -> None:
        logger.debug("checking function %s", fn.name)
        scope = Scope(fn.name)
        for p in fn.signature.params:
            scope.declare(p.name, p.typ, "parameter", fn.pos)
        self._declare_locals(scope, fn.locals)
        self.current_owner = fn.name
        self.current_ret = fn.signature.ret
        self._check_block(fn.body, scope)
        self.scopes[fn.name] = scope

    def check_main(self, main: MainDecl | None) -> None:
        if main is None:
            raise MalformedAST("program has no " + self.functions.entry_name)
        logger.debug("checking entry point %s", self.functions.entry_name)
        scope = Scope(self.functions.entry_name)
        self._declare_locals(scope, main.locals)
        self.current_owner = self.functions.entry_name
        # int main()
        self.current_ret = INT
        self._check_block(main.body, scope)
        self.scopes[self.functions.entry_name] = scope

    # ── Statements ────────────────────────────────────────────

    def _check_block(self, stmts: list[Stmt] | None, scope: Scope) -> None:
        if stmts is None:
            raise MalformedAST("missing statement block in " + self.current_owner)
        for stmt in stmts:
            self.check_stmt(stmt, scope)

    def check_stmt(self, stmt: Stmt, scope: Scope) -> None:
        if isinstance(stmt, Assign):
            sym = scope.resolve(stmt.name, stmt.pos)
            self._check_value(stmt.value, sym.typ, scope, "assignment to '" + stmt.name + "'", stmt.pos)
            return
        if isinstance(stmt, If):
            self._check_condition(stmt.cond, scope, "if")
            self._check_block(stmt.then_body, scope)
            if stmt.else_body is not None:
                self._check_block(stmt.else_body, scope)
            return
        if isinstance(stmt, While):
            self._check_condition(stmt.cond, scope, "while")
            self._check_block(stmt.body, scope)
            return
        if isinstance(stmt, Return):
            self._check_return(stmt, scope)
            return
        if isinstance(stmt, ExprStmt):
            if isinstance(stmt.expr, Call):
                # void calls are fine as statements
                self._check_call(stmt.expr, scope)
            else:
                self.type_of(stmt.expr, scope)
            return
        raise MalformedAST("unknown statement node " + type(stmt).__name__)

    def _check_condition(self, cond: Expr | None, scope: Scope, what: str) -> None:
        if cond is None:
            raise MalformedAST(what + " without a condition in " + self.current_owner)
        self.type_of(cond, scope)

    def _check_return(self, stmt: Return, scope: Scope) -> None:
        if stmt.value is None:
            if self.current_ret is not None:
                raise TypeMismatch(
                    "'" + self.current_owner + "' must return a " + type_name(self.current_ret) + " value",
                    self.current_owner,
                    stmt.pos,
                )
            return
        if self.current_ret is None:
            raise TypeMismatch(
                "void function '" + self.current_owner + "' cannot return a value",
                self.current_owner,
                stmt.pos,
            )
        self._check_value(
            stmt.value, self.current_ret, scope, "return from '" + self.current_owner + "'", stmt.pos
        )

    def _check_value(
        self, expr: Expr | None, target: Primitive, scope: Scope, what: str, pos: Pos | None
    ) -> None:
        """Check expr is storable into target, promoting literals for float targets."""
        if expr is None:
            raise MalformedAST("missing value in " + what, None, pos)
        t = self.type_of(expr, scope)
        if not is_assignable(t, target):
            raise TypeMismatch(
                "cannot use " + type_name(t) + " value in " + what + " (expected " + type_name(target) + ")",
                None,
                pos,
            )
        if target == FLOAT:
            promote_to_float(expr)

    # ── Expressions ───────────────────────────────────────────

    def type_of(self, expr: Expr | None, scope: Scope) -> Primitive:
        """Resolve the type of a value expression. Void calls are errors here."""
        if expr is None:
            raise MalformedAST("missing expression in " + self.current_owner)
        if isinstance(expr, Literal):
            return self._check_literal(expr)
        if isinstance(expr, VarRef):
            return scope.resolve(expr.name, expr.pos).typ
        if isinstance(expr, BinaryOp):
            return self._check_binary(expr, scope)
        if isinstance(expr, Call):
            t = self._check_call(expr, scope)
            if t is None:
                raise TypeMismatch(
                    "void function '" + expr.func + "' used as a value", expr.func, expr.pos
                )
            return t
        if isinstance(expr, AddressOf):
            raise TypeMismatch(
                "'&" + expr.name + "' is only allowed as a scanf argument", expr.name, expr.pos
            )
        if isinstance(expr, StringLit):
            raise TypeMismatch("string literal is only allowed as a format string", None, expr.pos)
        raise MalformedAST("unknown expression node " + type(expr).__name__)

    def _check_literal(self, expr: Literal) -> Primitive:
        if not isinstance(expr.typ, Primitive):
            raise MalformedAST("literal '" + str(expr.text) + "' has no type", None, expr.pos)
        text = expr.text.strip() if isinstance(expr.text, str) else ""
        if expr.typ == INT:
            if not is_int_text(text):
                raise MalformedAST("invalid int literal '" + text + "'", None, expr.pos)
        elif not is_float_text(text):
            raise MalformedAST("invalid float literal '" + text + "'", None, expr.pos)
        return expr.typ

    def _check_binary(self, expr: BinaryOp, scope: Scope) -> Primitive:
        if expr.op not in BINARY_OPS:
            raise MalformedAST("unknown operator '" + str(expr.op) + "'", None, expr.pos)
        lt = self.type_of(expr.left, scope)
        rt = self.type_of(expr.right, scope)
        if expr.op in ARITHMETIC_OPS or expr.op in COMPARISON_OPS:
            if lt == FLOAT:
                promote_to_float(expr.right)
            if rt == FLOAT:
                promote_to_float(expr.left)
        # && and || accept any numeric operand: every number is truthy or not
        expr.typ = binary_result(expr.op, lt, rt)
        return expr.typ

    def _check_call(self, call: Call, scope: Scope) -> Primitive | None:
        if call.args is None:
            raise MalformedAST("call to '" + call.func + "' has no argument list", call.func, call.pos)
        if call.func in INTRINSICS:
            self._check_intrinsic(call, scope)
            call.typ = INT
            return INT
        sig = self.functions.resolve(call.func, call.pos)
        if len(call.args) != len(sig.params):
            raise ArityMismatch(
                "'"
                + sig.name
                + "' expects "
                + str(len(sig.params))
                + " argument(s), got "
                + str(len(call.args)),
                sig.name,
                call.pos,
            )
        for arg, param in zip(call.args, sig.params):
            self._check_value(
                arg, param.typ, scope, "argument '" + param.name + "' of '" + sig.name + "'", call.pos
            )
        call.typ = sig.ret
        return sig.ret

    def _check_intrinsic(self, call: Call, scope: Scope) -> None:
        if len(call.args) == 0 or not isinstance(call.args[0], StringLit):
            raise TypeMismatch(
                call.func + " requires a format string as its first argument", call.func, call.pos
            )
        expected = count_conversions(call.args[0].value, call.func)
        rest = call.args[1:]
        if expected != len(rest):
            raise ArityMismatch(
                call.func
                + " format expects "
                + str(expected)
                + " argument(s), got "
                + str(len(rest)),
                call.func,
                call.pos,
            )
        for arg in rest:
            if call.func == "scanf":
                if not isinstance(arg, AddressOf):
                    raise TypeMismatch("scanf arguments must be addresses", call.func, call.pos)
                scope.resolve(arg.name, arg.pos)
            else:
                self.type_of(arg, scope)


# ============================================================
# PUBLIC API
# ============================================================


def check(program: Program, functions: FunctionTable | None = None) -> Checker:
    """Validate and annotate a Program. Raises CompileError on the first problem."""
    checker = Checker(functions)
    checker.collect_declarations(program)
    checker.check_bodies(program)
    return checker

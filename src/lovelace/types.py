"""Lovelace type system: scalar types, signatures and operator rules.

There are exactly two value types. Void exists only as a function return
type and is represented as ``None``.

| Kind  | Lovelace | C       |
|-------|----------|---------|
| int   | Bool     | int     |
| float | Float    | float   |
| void  | Void     | void    |
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Primitive:
    """A scalar value type."""

    kind: Literal["int", "float"]

    def __str__(self) -> str:
        return self.kind


INT = Primitive("int")
FLOAT = Primitive("float")

TYPES_BY_NAME: dict[str, Primitive] = {"int": INT, "float": FLOAT}


# ============================================================
# SIGNATURES
# ============================================================


@dataclass
class Param:
    """Formal parameter of a function."""

    name: str
    typ: Primitive


@dataclass
class FunctionSignature:
    """Name, ordered parameters and return type (None = void).

    Owned by the FunctionTable; calls and prototypes refer to the same
    object rather than a copy.
    """

    name: str
    params: list[Param]
    ret: Primitive | None

    @property
    def param_types(self) -> list[Primitive]:
        return [p.typ for p in self.params]


# ============================================================
# OPERATORS
# ============================================================

ARITHMETIC_OPS: frozenset[str] = frozenset({"+", "-", "*", "/"})
COMPARISON_OPS: frozenset[str] = frozenset({"<", ">", "==", "<=", ">=", "!="})
LOGICAL_OPS: frozenset[str] = frozenset({"&&", "||"})
BINARY_OPS: frozenset[str] = ARITHMETIC_OPS | COMPARISON_OPS | LOGICAL_OPS

# Variadic I/O calls; the format string is always the first argument.
INTRINSICS: frozenset[str] = frozenset({"printf", "scanf"})


def type_name(t: Primitive | None) -> str:
    """C spelling of a type; None is void."""
    if t is None:
        return "void"
    return t.kind


def parse_type_name(name: str | None) -> Primitive | None:
    """Inverse of type_name. Raises KeyError for unknown names."""
    if name is None or name == "void":
        return None
    return TYPES_BY_NAME[name]


def arithmetic_result(left: Primitive, right: Primitive) -> Primitive:
    """Usual arithmetic conversion: float wins."""
    if left == FLOAT or right == FLOAT:
        return FLOAT
    return INT


def binary_result(op: str, left: Primitive, right: Primitive) -> Primitive:
    """Result type of a binary operator; comparisons and logic yield int."""
    if op in ARITHMETIC_OPS:
        return arithmetic_result(left, right)
    return INT


def is_assignable(source: Primitive, target: Primitive) -> bool:
    """True if a value of type source may be stored into target.

    int widens to float; float never narrows to int.
    """
    if source == target:
        return True
    return source == INT and target == FLOAT


# ============================================================
# LITERAL SPELLING
# ============================================================

# ASCII digits only; a leading zero would make C read the literal as octal.
INT_TEXT_RE = re.compile(r"-?(?:0|[1-9][0-9]*)")
FLOAT_TEXT_RE = re.compile(r"([-+]?)([0-9]*)(?:\.([0-9]*))?([eE][-+]?[0-9]+)?")


def is_int_text(text: str) -> bool:
    return INT_TEXT_RE.fullmatch(text) is not None


def is_float_text(text: str) -> bool:
    """True for decimal spellings such as "2", "2.", ".5" or "1e5"."""
    m = FLOAT_TEXT_RE.fullmatch(text)
    if m is None:
        return False
    return m.group(2) != "" or bool(m.group(3))

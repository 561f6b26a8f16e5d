"""Symbol table: per-function scopes and the program-wide function table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

from .ast import Pos
from .errors import DuplicateDeclaration, DuplicateFunction, UndeclaredFunction, UndeclaredIdentifier
from .types import INTRINSICS, FunctionSignature, Primitive

SymbolKind = Literal["variable", "parameter"]


@dataclass(frozen=True)
class Symbol:
    name: str
    typ: Primitive
    kind: SymbolKind


class Scope:
    """Flat, insertion-ordered mapping from identifier to Symbol.

    Lovelace has no block scoping: one Scope covers a whole function body,
    parameters included.
    """

    def __init__(self, owner: str) -> None:
        self.owner: str = owner
        self._symbols: dict[str, Symbol] = {}

    def declare(
        self, name: str, typ: Primitive, kind: SymbolKind = "variable", pos: Pos | None = None
    ) -> Symbol:
        if name in self._symbols:
            raise DuplicateDeclaration(
                "'" + name + "' already declared in " + self.owner, name, pos
            )
        sym = Symbol(name, typ, kind)
        self._symbols[name] = sym
        return sym

    def resolve(self, name: str, pos: Pos | None = None) -> Symbol:
        sym = self._symbols.get(name)
        if sym is None:
            raise UndeclaredIdentifier(
                "undeclared identifier '" + name + "' in " + self.owner, name, pos
            )
        return sym

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)


class FunctionTable:
    """All function signatures of one compilation unit, in declaration order.

    Created once per Program and passed explicitly to the checker and the
    generator; there is no module-level table.
    """

    def __init__(self, entry_name: str = "main") -> None:
        self.entry_name: str = entry_name
        self._functions: dict[str, FunctionSignature] = {}

    def declare(self, sig: FunctionSignature, pos: Pos | None = None) -> None:
        if sig.name == self.entry_name or sig.name in INTRINSICS:
            raise DuplicateFunction("'" + sig.name + "' is a reserved function name", sig.name, pos)
        if sig.name in self._functions:
            raise DuplicateFunction("function '" + sig.name + "' already defined", sig.name, pos)
        self._functions[sig.name] = sig

    def resolve(self, name: str, pos: Pos | None = None) -> FunctionSignature:
        sig = self._functions.get(name)
        if sig is None:
            raise UndeclaredFunction("call to undeclared function '" + name + "'", name, pos)
        return sig

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[FunctionSignature]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)

"""Serialization of Lovelace ASTs to and from JSON-compatible dicts.

This is the seam an external front-end uses to hand a program to the
generator. Every node is a dict tagged with "_type"; types are the strings
"int" / "float", and null stands for void.
"""

from __future__ import annotations

import json

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
from .errors import MalformedAST
from .types import FunctionSignature, Param, Primitive, parse_type_name


# ============================================================
# TO DICT
# ============================================================


def serialize(obj: object) -> object:
    """Recursively serialize an AST object to a JSON-compatible structure."""
    if obj is None:
        return None
    if isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, list):
        return [serialize(x) for x in obj]
    if isinstance(obj, Primitive):
        return obj.kind
    if isinstance(obj, Pos):
        return {"line": obj.line, "col": obj.col}
    if isinstance(obj, Expr):
        return _serialize_expr(obj)
    if isinstance(obj, Stmt):
        return _serialize_stmt(obj)
    return _serialize_decl(obj)


def _with_pos(d: dict[str, object], pos: Pos | None) -> dict[str, object]:
    if pos is not None:
        d["pos"] = serialize(pos)
    return d


def _serialize_expr(obj: Expr) -> dict[str, object]:
    if isinstance(obj, Literal):
        d: dict[str, object] = {"_type": "Literal", "typ": serialize(obj.typ), "text": obj.text}
    elif isinstance(obj, StringLit):
        d = {"_type": "StringLit", "value": obj.value}
    elif isinstance(obj, VarRef):
        d = {"_type": "VarRef", "name": obj.name}
    elif isinstance(obj, BinaryOp):
        d = {
            "_type": "BinaryOp",
            "op": obj.op,
            "left": serialize(obj.left),
            "right": serialize(obj.right),
            "typ": serialize(obj.typ),
        }
    elif isinstance(obj, Call):
        d = {
            "_type": "Call",
            "func": obj.func,
            "args": serialize(obj.args),
            "typ": serialize(obj.typ),
        }
    elif isinstance(obj, AddressOf):
        d = {"_type": "AddressOf", "name": obj.name}
    else:
        raise MalformedAST("cannot serialize " + type(obj).__name__)
    return _with_pos(d, obj.pos)


def _serialize_stmt(obj: Stmt) -> dict[str, object]:
    if isinstance(obj, Assign):
        d: dict[str, object] = {"_type": "Assign", "name": obj.name, "value": serialize(obj.value)}
    elif isinstance(obj, If):
        d = {
            "_type": "If",
            "cond": serialize(obj.cond),
            "then_body": serialize(obj.then_body),
            "else_body": serialize(obj.else_body),
        }
    elif isinstance(obj, While):
        d = {"_type": "While", "cond": serialize(obj.cond), "body": serialize(obj.body)}
    elif isinstance(obj, Return):
        d = {"_type": "Return", "value": serialize(obj.value)}
    elif isinstance(obj, ExprStmt):
        d = {"_type": "ExprStmt", "expr": serialize(obj.expr)}
    else:
        raise MalformedAST("cannot serialize " + type(obj).__name__)
    return _with_pos(d, obj.pos)


def _serialize_decl(obj: object) -> dict[str, object]:
    if isinstance(obj, Program):
        return {
            "_type": "Program",
            "functions": serialize(obj.functions),
            "main": serialize(obj.main),
        }
    if isinstance(obj, FunctionDecl):
        sig = obj.signature
        d: dict[str, object] = {
            "_type": "FunctionDecl",
            "name": sig.name,
            "params": [{"name": p.name, "typ": serialize(p.typ)} for p in sig.params],
            "ret": serialize(sig.ret),
            "locals": serialize(obj.locals),
            "body": serialize(obj.body),
        }
        return _with_pos(d, obj.pos)
    if isinstance(obj, MainDecl):
        d = {"_type": "MainDecl", "locals": serialize(obj.locals), "body": serialize(obj.body)}
        return _with_pos(d, obj.pos)
    if isinstance(obj, LocalDecl):
        d = {"_type": "LocalDecl", "name": obj.name, "typ": serialize(obj.typ)}
        return _with_pos(d, obj.pos)
    raise MalformedAST("cannot serialize " + type(obj).__name__)


# ============================================================
# FROM DICT
# ============================================================


def _req(d: dict, key: str) -> object:
    if key not in d:
        raise MalformedAST(str(d.get("_type", "node")) + " is missing '" + key + "'")
    return d[key]


def _coord(p: dict, key: str) -> int:
    value = _req(p, key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedAST("pos " + key + " must be an integer, got " + repr(value))
    return value


def _pos(d: dict) -> Pos | None:
    p = d.get("pos")
    if p is None:
        return None
    if not isinstance(p, dict):
        raise MalformedAST("pos must be an object")
    return Pos(_coord(p, "line"), _coord(p, "col"))


def _typ(value: object) -> Primitive | None:
    if value is not None and not isinstance(value, str):
        raise MalformedAST("type must be a string, got " + repr(value))
    try:
        return parse_type_name(value)
    except KeyError:
        raise MalformedAST("unknown type '" + str(value) + "'") from None


def _value_typ(value: object, what: str) -> Primitive:
    t = _typ(value)
    if t is None:
        raise MalformedAST(what + " cannot be void")
    return t


def _list(d: dict, key: str) -> list:
    value = _req(d, key)
    if not isinstance(value, list):
        raise MalformedAST("'" + key + "' must be a list")
    return value


def _node(d: object, expected: str | None = None) -> dict:
    """Return d as a node dict, checking its "_type" tag when expected is given."""
    if not isinstance(d, dict) or "_type" not in d:
        raise MalformedAST("expected a node object with '_type'")
    if expected is not None and d["_type"] != expected:
        raise MalformedAST("expected " + expected + ", got " + str(d["_type"]))
    return d


def deserialize_expr(obj: object) -> Expr:
    d = _node(obj)
    kind = str(d["_type"])
    if kind == "Literal":
        return Literal(_typ(_req(d, "typ")), str(_req(d, "text")), _pos(d))
    if kind == "StringLit":
        return StringLit(str(_req(d, "value")), _pos(d))
    if kind == "VarRef":
        return VarRef(str(_req(d, "name")), _pos(d))
    if kind == "BinaryOp":
        return BinaryOp(
            str(_req(d, "op")),
            deserialize_expr(_req(d, "left")),
            deserialize_expr(_req(d, "right")),
            _typ(d.get("typ")),
            _pos(d),
        )
    if kind == "Call":
        args = [deserialize_expr(a) for a in _list(d, "args")]
        return Call(str(_req(d, "func")), args, _typ(d.get("typ")), _pos(d))
    if kind == "AddressOf":
        return AddressOf(str(_req(d, "name")), _pos(d))
    raise MalformedAST("unknown expression type '" + kind + "'")


def deserialize_stmt(obj: object) -> Stmt:
    d = _node(obj)
    kind = str(d["_type"])
    if kind == "Assign":
        return Assign(str(_req(d, "name")), deserialize_expr(_req(d, "value")), _pos(d))
    if kind == "If":
        else_body = d.get("else_body")
        return If(
            deserialize_expr(_req(d, "cond")),
            _stmts(d, "then_body"),
            _stmts(d, "else_body") if else_body is not None else None,
            _pos(d),
        )
    if kind == "While":
        return While(deserialize_expr(_req(d, "cond")), _stmts(d, "body"), _pos(d))
    if kind == "Return":
        value = d.get("value")
        return Return(deserialize_expr(value) if value is not None else None, _pos(d))
    if kind == "ExprStmt":
        return ExprStmt(deserialize_expr(_req(d, "expr")), _pos(d))
    raise MalformedAST("unknown statement type '" + kind + "'")


def _stmts(d: dict, key: str) -> list[Stmt]:
    return [deserialize_stmt(s) for s in _list(d, key)]


def _locals(d: dict) -> list[LocalDecl]:
    result: list[LocalDecl] = []
    for item in _list(d, "locals"):
        decl = _node(item, "LocalDecl")
        name = str(_req(decl, "name"))
        result.append(LocalDecl(name, _value_typ(_req(decl, "typ"), "variable '" + name + "'"), _pos(decl)))
    return result


def _function(obj: object) -> FunctionDecl:
    d = _node(obj, "FunctionDecl")
    name = str(_req(d, "name"))
    params: list[Param] = []
    for p in _list(d, "params"):
        if not isinstance(p, dict):
            raise MalformedAST("parameter of '" + name + "' must be an object")
        pname = str(_req(p, "name"))
        params.append(Param(pname, _value_typ(_req(p, "typ"), "parameter '" + pname + "'")))
    sig = FunctionSignature(name, params, _typ(d.get("ret")))
    return FunctionDecl(sig, _locals(d), _stmts(d, "body"), _pos(d))


def deserialize(data: object) -> Program:
    """Build a Program from its dict form. Raises MalformedAST on bad input."""
    root = _node(data, "Program")
    functions = [_function(f) for f in _list(root, "functions")]
    main = _node(_req(root, "main"), "MainDecl")
    return Program(functions, MainDecl(_locals(main), _stmts(main, "body"), _pos(main)))


def load_program(text: str) -> Program:
    """Parse a JSON document into a Program."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedAST("invalid JSON: " + str(e)) from None
    return deserialize(data)


def dump_program(program: Program) -> str:
    return json.dumps(serialize(program), indent=2)

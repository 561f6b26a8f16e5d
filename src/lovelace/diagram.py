"""AST diagrams: box-drawing text tree and Graphviz DOT.

Both renderings walk the same child list per node, so the text tree and
the DOT graph always agree on labels and edge names.
"""

from __future__ import annotations

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
from .codegen import escape_string_c
from .errors import MalformedAST
from .types import type_name

# (edge label, child node); a child is any AST object or a plain label string
Child = tuple[str, object]


# ============================================================
# NODE DESCRIPTIONS
# ============================================================


def _label(node: object) -> str:
    if isinstance(node, str):
        return node
    if isinstance(node, Program):
        return "Prog"
    if isinstance(node, MainDecl):
        return "Main"
    if isinstance(node, FunctionDecl):
        return "Fun: " + node.name + " (return: " + type_name(node.signature.ret) + ")"
    if isinstance(node, LocalDecl):
        return type_name(node.typ) + " " + node.name
    if isinstance(node, Assign):
        return "Assign: " + node.name
    if isinstance(node, If):
        return "If"
    if isinstance(node, While):
        return "While"
    if isinstance(node, Return):
        return "Return" if node.value is not None else "Return (void)"
    if isinstance(node, ExprStmt):
        return "ExprStmt"
    if isinstance(node, Literal):
        return node.text
    if isinstance(node, StringLit):
        return '"' + escape_string_c(node.value) + '"'
    if isinstance(node, VarRef):
        return node.name
    if isinstance(node, BinaryOp):
        return "(" + node.op + ")"
    if isinstance(node, Call):
        return "Call: " + node.func
    if isinstance(node, AddressOf):
        return "&" + node.name
    raise MalformedAST("cannot draw " + type(node).__name__)


def _children(node: object) -> list[Child]:
    if isinstance(node, Program):
        result: list[Child] = [("main", node.main)]
        for i, fn in enumerate(node.functions):
            result.append(("fun[" + str(i) + "]", fn))
        return result
    if isinstance(node, FunctionDecl):
        result = []
        for i, p in enumerate(node.signature.params):
            result.append(("param[" + str(i) + "]", type_name(p.typ) + " " + p.name))
        return result + _body_children(node.locals, node.body)
    if isinstance(node, MainDecl):
        return _body_children(node.locals, node.body)
    if isinstance(node, Assign):
        return [("value", node.value)]
    if isinstance(node, If):
        result = [("cond", node.cond)]
        result += _indexed("body", node.then_body)
        if node.else_body is not None:
            result += _indexed("else", node.else_body)
        return result
    if isinstance(node, While):
        return [("cond", node.cond)] + _indexed("body", node.body)
    if isinstance(node, Return):
        return [("value", node.value)] if node.value is not None else []
    if isinstance(node, ExprStmt):
        return [("expr", node.expr)]
    if isinstance(node, BinaryOp):
        return [("left", node.left), ("right", node.right)]
    if isinstance(node, Call):
        return _indexed("arg", node.args)
    return []


def _indexed(edge: str, items: list[Stmt] | list[Expr]) -> list[Child]:
    return [(edge + "[" + str(i) + "]", item) for i, item in enumerate(items)]


def _body_children(decls: list[LocalDecl], body: list[Stmt]) -> list[Child]:
    result: list[Child] = [("var[" + str(i) + "]", d) for i, d in enumerate(decls)]
    return result + _indexed("cmd", body)


# ============================================================
# TEXT TREE
# ============================================================


def to_text_tree(program: Program) -> str:
    """Render the AST as an indented box-drawing tree."""
    lines: list[str] = [_label(program)]
    children = _children(program)
    for i, (edge, child) in enumerate(children):
        _text_node(lines, child, edge, "", i == len(children) - 1)
    return "\n".join(lines) + "\n"


def _text_node(lines: list[str], node: object, edge: str, prefix: str, is_last: bool) -> None:
    connector = "└── " if is_last else "├── "
    lines.append(prefix + connector + edge + ": " + _label(node))
    child_prefix = prefix + ("    " if is_last else "│   ")
    children = _children(node)
    for i, (child_edge, child) in enumerate(children):
        _text_node(lines, child, child_edge, child_prefix, i == len(children) - 1)


# ============================================================
# DOT
# ============================================================

_PROGRAM_STYLE = 'shape=doubleoctagon, style=filled, fillcolor="#cce5ff"'
_MAIN_STYLE = 'shape=box, style=filled, fillcolor="#fff3cd"'
_FUN_STYLE = 'shape=box, style=filled, fillcolor="#d4edda"'
_DECL_STYLE = 'shape=box, style="rounded,filled", fillcolor="#e2e3e5"'
_STMT_STYLE = 'shape=box, style=filled, fillcolor="#ffd6cc"'
_COND_STYLE = 'shape=diamond, style=filled, fillcolor="#ffd6cc"'
_EXPR_STYLE = 'shape=ellipse, style=filled, fillcolor="#f0f0f0"'


def _escape_dot(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("<", "\\<").replace(">", "\\>")


def _style(node: object) -> str:
    if isinstance(node, Program):
        return _PROGRAM_STYLE
    if isinstance(node, MainDecl):
        return _MAIN_STYLE
    if isinstance(node, FunctionDecl):
        return _FUN_STYLE
    if isinstance(node, (LocalDecl, str)):
        return _DECL_STYLE
    if isinstance(node, (If, While)):
        return _COND_STYLE
    if isinstance(node, Stmt):
        return _STMT_STYLE
    return _EXPR_STYLE


class _DotWriter:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.counter: int = 0

    def visit(self, node: object) -> str:
        node_id = "n" + str(self.counter)
        self.counter += 1
        self.lines.append(
            "    " + node_id + ' [label="' + _escape_dot(_label(node)) + '", ' + _style(node) + "];"
        )
        for edge, child in _children(node):
            child_id = self.visit(child)
            self.lines.append("    " + node_id + " -> " + child_id + ' [label="' + edge + '"];')
        return node_id


def to_dot(program: Program) -> str:
    """Render the AST as a Graphviz digraph."""
    writer = _DotWriter()
    writer.lines.append("digraph AST {")
    writer.lines.append("    rankdir=TB;")
    writer.lines.append('    fontname="Helvetica";')
    writer.lines.append('    node [fontname="Helvetica", fontsize=11];')
    writer.lines.append('    edge [fontname="Helvetica", fontsize=9];')
    writer.lines.append("")
    writer.visit(program)
    writer.lines.append("}")
    return "\n".join(writer.lines) + "\n"

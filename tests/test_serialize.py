"""Tests for the JSON AST format."""

import json

import pytest

from conftest import load_fixture
from lovelace import MalformedAST, check, compile_json, compile_program
from lovelace.ast import BinaryOp, Call, FunctionDecl, Literal, Pos, VarRef
from lovelace.serialize import deserialize, dump_program, load_program, serialize
from lovelace.types import FLOAT, INT


def _minimal(main_body: list, functions: list | None = None, main_locals: list | None = None) -> dict:
    return {
        "_type": "Program",
        "functions": functions or [],
        "main": {"_type": "MainDecl", "locals": main_locals or [], "body": main_body},
    }


def test_fixture_round_trip_compiles_identically():
    prog = load_fixture("exemplo3")
    expected = compile_program(prog)
    again = load_program(dump_program(prog))
    assert compile_program(again) == expected


def test_serialized_nodes_are_tagged():
    data = serialize(load_fixture("exemplo2"))
    assert data["_type"] == "Program"
    assert data["main"]["_type"] == "MainDecl"
    assert all(f["_type"] == "FunctionDecl" for f in data["functions"])


def test_checked_annotations_are_serialized():
    prog = load_fixture("exemplo2")
    check(prog)
    data = json.loads(dump_program(prog))
    value = data["functions"][0]["body"][0]["value"]
    assert value["typ"] == "float"
    assert value["right"]["typ"] == "float"


def test_void_function_has_null_ret():
    prog = load_fixture("exemplo4")
    voids = [f for f in serialize(prog)["functions"] if f["ret"] is None]
    assert voids


def test_positions_survive():
    doc = _minimal(
        [
            {
                "_type": "Assign",
                "name": "n",
                "value": {"_type": "Literal", "typ": "int", "text": "1", "pos": {"line": 2, "col": 9}},
                "pos": {"line": 2, "col": 5},
            }
        ],
        main_locals=[{"_type": "LocalDecl", "name": "n", "typ": "int"}],
    )
    prog = deserialize(doc)
    stmt = prog.main.body[0]
    assert stmt.pos == Pos(2, 5)
    assert stmt.value.pos == Pos(2, 9)
    assert serialize(stmt)["pos"] == {"line": 2, "col": 5}


def test_deserialize_builds_expected_nodes():
    doc = _minimal(
        [],
        functions=[
            {
                "_type": "FunctionDecl",
                "name": "dobro",
                "params": [{"name": "x", "typ": "float"}],
                "ret": "float",
                "locals": [],
                "body": [
                    {
                        "_type": "Return",
                        "value": {
                            "_type": "BinaryOp",
                            "op": "*",
                            "left": {"_type": "VarRef", "name": "x"},
                            "right": {"_type": "Literal", "typ": "int", "text": "2"},
                        },
                    }
                ],
            }
        ],
    )
    prog = deserialize(doc)
    f = prog.functions[0]
    assert isinstance(f, FunctionDecl)
    assert f.signature.params[0].typ == FLOAT
    assert f.signature.ret == FLOAT
    expr = f.body[0].value
    assert expr == BinaryOp("*", VarRef("x"), Literal(INT, "2"))
    assert expr.typ is None


def test_compile_json():
    doc = _minimal(
        [{"_type": "ExprStmt", "expr": {"_type": "Call", "func": "printf", "args": [{"_type": "StringLit", "value": "oi\n"}]}}]
    )
    out = compile_json(json.dumps(doc))
    assert '    printf("oi\\n");\n' in out


def test_call_args_deserialized_in_order():
    doc = _minimal(
        [
            {
                "_type": "ExprStmt",
                "expr": {
                    "_type": "Call",
                    "func": "printf",
                    "args": [
                        {"_type": "StringLit", "value": "%d %d"},
                        {"_type": "Literal", "typ": "int", "text": "1"},
                        {"_type": "Literal", "typ": "int", "text": "2"},
                    ],
                },
            }
        ]
    )
    call = deserialize(doc).main.body[0].expr
    assert isinstance(call, Call)
    assert [a.text for a in call.args[1:]] == ["1", "2"]


# ============================================================
# Rejection
# ============================================================


def test_invalid_json():
    with pytest.raises(MalformedAST):
        load_program("{not json")


def test_top_level_must_be_program():
    with pytest.raises(MalformedAST):
        deserialize({"_type": "MainDecl", "locals": [], "body": []})


def test_unknown_node_type():
    with pytest.raises(MalformedAST):
        deserialize(_minimal([{"_type": "For"}]))


def test_unknown_type_name():
    with pytest.raises(MalformedAST):
        deserialize(_minimal([], main_locals=[{"_type": "LocalDecl", "name": "s", "typ": "string"}]))


def test_void_variable_rejected():
    with pytest.raises(MalformedAST):
        deserialize(_minimal([], main_locals=[{"_type": "LocalDecl", "name": "v", "typ": None}]))


def test_missing_key():
    with pytest.raises(MalformedAST):
        deserialize(_minimal([{"_type": "Assign", "name": "n"}]))


def test_body_must_be_list():
    doc = _minimal([])
    doc["main"]["body"] = {"_type": "Return"}
    with pytest.raises(MalformedAST):
        deserialize(doc)


@pytest.mark.parametrize("line", ["a", None, [1], 1.5, True])
def test_non_integer_position_rejected(line):
    doc = _minimal([{"_type": "Return", "value": None, "pos": {"line": line, "col": 1}}])
    with pytest.raises(MalformedAST):
        deserialize(doc)


def test_node_with_wrong_tag_rejected():
    doc = _minimal([])
    doc["functions"] = [{"_type": "LocalDecl", "name": "x", "typ": "int"}]
    with pytest.raises(MalformedAST):
        deserialize(doc)

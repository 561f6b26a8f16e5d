"""Tests for the lovelace command-line driver."""

import io
import json
import sys

import pytest

from conftest import FIXTURES_DIR, expected_c
from lovelace.cli import main

BAD_PROGRAM = {
    "_type": "Program",
    "functions": [],
    "main": {
        "_type": "MainDecl",
        "locals": [],
        "body": [{"_type": "ExprStmt", "expr": {"_type": "Call", "func": "nada", "args": []}}],
    },
}


def _fixture(name: str) -> str:
    return str(FIXTURES_DIR / (name + ".json"))


def test_compile_to_stdout(capsys):
    assert main([_fixture("exemplo2")]) == 0
    out, err = capsys.readouterr()
    assert out == expected_c("exemplo2")
    assert err == ""


def test_compile_to_file(tmp_path, capsys):
    target = tmp_path / "out.c"
    assert main([_fixture("exemplo4"), "-o", str(target)]) == 0
    assert target.read_text(encoding="utf-8") == expected_c("exemplo4")
    assert capsys.readouterr().out == ""


def test_compile_error_writes_nothing(tmp_path, capsys):
    src = tmp_path / "bad.json"
    src.write_text(json.dumps(BAD_PROGRAM), encoding="utf-8")
    target = tmp_path / "out.c"
    assert main([str(src), "--output", str(target)]) == 1
    out, err = capsys.readouterr()
    assert out == ""
    assert err.startswith("error: UndeclaredFunction: ")
    assert "nada" in err
    assert not target.exists()


def test_read_from_stdin(monkeypatch, capsys):
    data = (FIXTURES_DIR / "exemplo3.json").read_bytes()
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    assert main(["-"]) == 0
    assert capsys.readouterr().out == expected_c("exemplo3")


def test_emit_tree(capsys):
    assert main(["--emit", "tree", _fixture("exemplo4")]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Prog\n├── main: Main\n")
    assert "fun[0]: Fun: mostrar (return: void)" in out


def test_emit_dot(capsys):
    assert main(["--emit", "dot", _fixture("exemplo4")]) == 0
    assert capsys.readouterr().out.startswith("digraph AST {\n")


def test_emit_json_is_annotated(capsys):
    assert main(["--emit", "json", _fixture("exemplo2")]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["functions"][0]["body"][0]["value"]["typ"] == "float"


def test_include_option(capsys):
    assert main([_fixture("exemplo2"), "--include", "stdio.h", "--include", "math.h"]) == 0
    assert capsys.readouterr().out.startswith("#include <stdio.h>\n#include <math.h>\n\n")


def test_help(capsys):
    assert main(["--help"]) == 0
    assert "--emit KIND" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        ["--bogus"],
        ["--emit"],
        ["--emit", "asm", "x.json"],
        ["a.json", "b.json"],
    ],
)
def test_usage_errors(argv, capsys):
    assert main(argv) == 2
    assert capsys.readouterr().err.startswith("error: ")


def test_missing_input_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "cannot open" in capsys.readouterr().err


def test_malformed_json(tmp_path, capsys):
    src = tmp_path / "bad.json"
    src.write_text("{", encoding="utf-8")
    assert main([str(src)]) == 1
    assert capsys.readouterr().err.startswith("error: MalformedAST: ")


def test_bad_position_reports_malformed_ast(tmp_path, capsys):
    doc = json.loads(json.dumps(BAD_PROGRAM))
    doc["main"]["body"] = [{"_type": "Return", "value": None, "pos": {"line": "a", "col": 1}}]
    src = tmp_path / "pos.json"
    src.write_text(json.dumps(doc), encoding="utf-8")
    assert main([str(src)]) == 1
    out, err = capsys.readouterr()
    assert out == ""
    assert err.startswith("error: MalformedAST: ")

"""Tests for the thicket command-line driver."""

import json

import pytest

from pythicket.cli import main, parse_input_string


def _write(tmp_path, name, doc):
    path = tmp_path / name
    path.write_text(json.dumps(doc))
    return str(path)


def _ref(name):
    return {"expressionKind": "variableRef", "variableName": name}


def _call(name, *args):
    return {"expressionKind": "funcCall", "callee": _ref(name), "args": list(args)}


def _main(*body):
    return {"name": "Main", "exports": [], "body": list(body)}


def _return(expr):
    return {"statementKind": "return", "returnedValue": expr}


def _import(module, *names):
    return {"statementKind": "import", "moduleName": module, "imports": list(names)}


class TestParseInputString:
    def test_comma_separated(self):
        assert parse_input_string("1, 2,hello") == ["1", "2", "hello"]

    def test_json_array(self):
        assert parse_input_string('["a b", 3]') == ["a b", "3"]


class TestRun:
    def test_prints_result(self, tmp_path, capsys):
        path = _write(tmp_path, "main.json", _main(
            _return({"expressionKind": "numberLit", "value": 42}),
        ))
        assert main([path]) == 0
        out = capsys.readouterr().out
        assert "Result:" in out
        assert "42" in out

    def test_multiple_files(self, tmp_path, capsys):
        lib = {"name": "Lib", "exports": ["greeting"], "body": [
            {"statementKind": "varDecl", "variableName": "greeting"},
            {"statementKind": "assignment", "variableName": "greeting",
             "variableValue": {"expressionKind": "stringLit", "value": "hello"}},
        ]}
        main_path = _write(tmp_path, "main.json", _main(
            _import("Lib", "greeting"), _return(_ref("greeting")),
        ))
        lib_path = _write(tmp_path, "lib.json", lib)
        assert main([main_path, lib_path]) == 0
        assert '"hello"' in capsys.readouterr().out

    def test_inputs_feed_read_string(self, tmp_path, capsys):
        path = _write(tmp_path, "main.json", _main(
            _import("Native", "readString", "print"),
            {"statementKind": "expression", "expression": _call("print", _call("readString"))},
            _return(_call("readString")),
        ))
        assert main([path, "--inputs", "first,second"]) == 0
        out = capsys.readouterr().out
        assert '"first"\n' in out
        assert '"second"' in out

    def test_runtime_failure(self, tmp_path, capsys):
        path = _write(tmp_path, "main.json", _main(_return(_ref("missing"))))
        assert main([path]) == 1
        out = capsys.readouterr().out
        assert "Evaluation error: NotInScope" in out
        assert "missing" in out

    def test_no_main(self, tmp_path, capsys):
        path = _write(tmp_path, "lib.json", {"name": "Lib", "exports": [], "body": []})
        assert main([path]) == 1
        assert "NoMain" in capsys.readouterr().out

    def test_cycle(self, tmp_path, capsys):
        docs = [
            _main(_import("A", "x")),
            {"name": "A", "exports": ["x"], "body": [_import("B", "y")]},
            {"name": "B", "exports": ["y"], "body": [_import("A", "x")]},
        ]
        path = _write(tmp_path, "program.json", docs)
        assert main([path]) == 1
        assert "Circular dependency" in capsys.readouterr().out

    def test_malformed_file(self, tmp_path, capsys):
        path = _write(tmp_path, "bad.json", {"name": "Main", "body": [{"statementKind": "goto"}]})
        assert main([path]) == 1
        assert "unknown statementKind" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 1
        assert "Could not read" in capsys.readouterr().out


class TestCheckOnly:
    def test_passes(self, tmp_path, capsys):
        path = _write(tmp_path, "main.json", _main(_return(_ref("never evaluated"))))
        assert main([path, "--check-only"]) == 0
        assert "Module checks passed" in capsys.readouterr().out

    def test_missing_module(self, tmp_path, capsys):
        path = _write(tmp_path, "main.json", _main(_import("Ghost", "x")))
        assert main([path, "--check-only"]) == 1
        assert "No such module: Ghost" in capsys.readouterr().out

    def test_cycle(self, tmp_path, capsys):
        docs = [
            {"name": "A", "exports": [], "body": [_import("B", "y")]},
            {"name": "B", "exports": [], "body": [_import("A", "x")]},
        ]
        path = _write(tmp_path, "program.json", docs)
        assert main([path, "--check-only", "-v"]) == 1
        out = capsys.readouterr().out
        assert "Loaded 2 modules: A, B" in out
        assert "Circular dependency" in out


def test_requires_a_file(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2

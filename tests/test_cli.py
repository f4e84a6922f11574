"""
Tests for CLI entry points.
"""

import argparse
import json
import sys
from pathlib import Path

import pytest

from templatecond import cli


def _run(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, "argv", ["prog", *argv])

    with pytest.raises(SystemExit) as exc:
        cli.main()

    return exc.value.code


def test_truthy_condition_exits_zero(monkeypatch, capsys):
    assert _run(monkeypatch, "count > 3", "--var", "count=5") == 0
    assert capsys.readouterr().out == "true\n"


def test_falsy_condition_exits_one(monkeypatch, capsys):
    assert _run(monkeypatch, "count > 3", "--var", "count=2") == 1
    assert capsys.readouterr().out == "false\n"


def test_bare_words_are_strings(monkeypatch, capsys):
    assert _run(monkeypatch, 'name == "bob"', "--var", "name=bob") == 0
    assert capsys.readouterr().out == "true\n"


def test_prints_value_without_operator(monkeypatch, capsys):
    assert _run(monkeypatch, "title", "--var", 'title="Hello there"') == 0
    assert capsys.readouterr().out == "Hello there\n"


def test_vars_file(monkeypatch, capsys, tmp_path: Path):
    vars_path = tmp_path / "vars.json"
    vars_path.write_text(json.dumps({"user": {"admin": True, "tags": ["a", "b"]}}))

    assert _run(monkeypatch, "user.admin and user.tags.size == 2", "--vars-file", str(vars_path)) == 0
    assert capsys.readouterr().out == "true\n"


def test_var_overrides_vars_file(monkeypatch, capsys, tmp_path: Path):
    vars_path = tmp_path / "vars.json"
    vars_path.write_text(json.dumps({"flag": True}))

    assert _run(monkeypatch, "flag", "--vars-file", str(vars_path), "--var", "flag=false") == 1
    assert capsys.readouterr().out == "false\n"


def test_vars_file_must_hold_object(monkeypatch, capsys, tmp_path: Path):
    vars_path = tmp_path / "vars.json"
    vars_path.write_text("[1, 2]")

    assert _run(monkeypatch, "flag", "--vars-file", str(vars_path)) == 1
    assert "JSON object" in capsys.readouterr().err


def test_missing_vars_file(monkeypatch, capsys):
    assert _run(monkeypatch, "flag", "--vars-file", "missing.json") == 1
    assert "not found" in capsys.readouterr().err


def test_syntax_error(monkeypatch, capsys):
    assert _run(monkeypatch, "a ==") == 1
    assert "Error:" in capsys.readouterr().err


def test_unknown_operator_at_evaluation(monkeypatch, capsys):
    assert _run(monkeypatch, "a ~~ b") == 1
    assert "Unknown operator ~~" in capsys.readouterr().err


def test_validate_only_with_errors(monkeypatch, capsys):
    assert _run(monkeypatch, "a ~~ b", "--validate-only") == 1
    assert "[ERROR] unknown_operator" in capsys.readouterr().out


def test_validate_only_valid(monkeypatch, capsys):
    assert _run(monkeypatch, "a == b", "--validate-only") == 0
    assert "Condition is valid" in capsys.readouterr().out


def test_validate_only_with_warnings(monkeypatch, capsys):
    from templatecond import validation
    from templatecond.validation import Diagnostic, Severity

    monkeypatch.setattr(
        validation,
        "validate",
        lambda _c: [Diagnostic(rule="custom", severity=Severity.WARNING, message="warned")],
    )

    assert _run(monkeypatch, "a", "--validate-only") == 0
    assert "[WARN] custom: warned" in capsys.readouterr().out


def test_invalid_var_format(monkeypatch):
    assert _run(monkeypatch, "a", "--var", "novalue") == 2


@pytest.mark.parametrize(
    "assignment, expected",
    [
        ("n=5", ("n", 5)),
        ("f=1.5", ("f", 1.5)),
        ("b=true", ("b", True)),
        ('s="hi there"', ("s", "hi there")),
        ("s=hi there", ("s", "hi there")),
        ("s=bob", ("s", "bob")),
        (" n = 5", ("n", 5)),
    ],
)
def test_parse_assignment(assignment, expected):
    assert cli.parse_assignment(assignment) == expected


def test_parse_assignment_requires_name():
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_assignment("=5")


def test_strict_reports_undefined_variables(monkeypatch, capsys):
    assert _run(monkeypatch, "missing == 1 or user.name == 2", "--strict", "--var", "user=1") == 1

    captured = capsys.readouterr()
    assert captured.out == "false\n"
    assert "Undefined variable 'missing'" in captured.err
    assert "Undefined variable 'user.name'" in captured.err


def test_without_strict_undefined_variables_are_silent(monkeypatch, capsys):
    assert _run(monkeypatch, "missing == nil") == 0

    captured = capsys.readouterr()
    assert captured.out == "true\n"
    assert captured.err == ""


def test_strict_with_defined_variables(monkeypatch, capsys):
    assert _run(monkeypatch, "count > 3", "--strict", "--var", "count=5") == 0
    assert capsys.readouterr().err == ""

"""Tests for the content-upgrade CLI."""

import json
import textwrap

import pytest
from typer.testing import CliRunner

from content_upgrade.cli.main import app

runner = CliRunner()

CATALOG = {
    "Quiz 1.3": {
        "upgradesScript": True,
        "semantics": [
            {"type": "text", "name": "question"},
            {"type": "library", "name": "media", "options": ["Image 1.1"]},
        ],
    },
    "Image 1.1": {"semantics": [{"type": "text", "name": "alt"}]},
}

HOOKS = textwrap.dedent('''
    async def rename_question(params):
        params = dict(params)
        params["question"] = params.pop("text")
        return params


    def register(registry):
        registry.register("Quiz", "1.3", rename_question)
''')


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    (tmp_path / "catalog.json").write_text(json.dumps(CATALOG), encoding="utf-8")
    (tmp_path / "quiz_cli_hooks.py").write_text(HOOKS, encoding="utf-8")
    (tmp_path / "params.json").write_text(json.dumps({
        "text": "2 + 2?",
        "media": {"library": "Image 1.0", "params": {"alt": "sum"}},
    }), encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    return tmp_path


def _run_args(workspace, *extra):
    return [
        "run", str(workspace / "params.json"),
        "--library", "Quiz",
        "--from", "1.2",
        "--to", "1.3",
        "--catalog", str(workspace / "catalog.json"),
        *extra,
    ]


def test_run_prints_upgraded_params(workspace):
    result = runner.invoke(app, _run_args(workspace, "--hooks", "quiz_cli_hooks"))

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "question": "2 + 2?",
        "media": {"library": "Image 1.1", "params": {"alt": "sum"}},
    }


def test_run_writes_output_file(workspace):
    out = workspace / "out.json"
    result = runner.invoke(app, _run_args(workspace, "--hooks", "quiz_cli_hooks", "-o", str(out)))

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8"))["question"] == "2 + 2?"


def test_run_without_hooks_reports_missing_script(workspace):
    result = runner.invoke(app, _run_args(workspace))

    assert result.exit_code == 1
    assert "Quiz 1.3" in result.output


def test_run_with_broken_params(workspace):
    (workspace / "params.json").write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, _run_args(workspace, "--content-id", "c-17"))

    assert result.exit_code == 1
    assert "c-17" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "content-upgrade v" in result.stdout


def test_run_with_broken_catalog(workspace):
    (workspace / "catalog.json").write_text("{broken", encoding="utf-8")
    result = runner.invoke(app, _run_args(workspace))

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert "Cannot load inputs" in result.output
    assert "JSONDecodeError" in result.output


def test_run_with_invalid_descriptor(workspace):
    (workspace / "catalog.json").write_text(
        json.dumps({"Quiz 1.3": {"semantics": "not a list"}}), encoding="utf-8",
    )
    result = runner.invoke(app, _run_args(workspace))

    assert result.exit_code == 1
    assert "ValidationError" in result.output


def test_run_with_missing_hooks_module(workspace):
    result = runner.invoke(app, _run_args(workspace, "--hooks", "no_such_hooks_module"))

    assert result.exit_code == 1
    assert not isinstance(result.exception, ImportError)
    assert "no_such_hooks_module" in result.output

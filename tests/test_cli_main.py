from __future__ import annotations

import json
from io import StringIO
from pathlib import Path
from typing import Any, List

import pytest
from rich.console import Console

from cli_task_runner import CommandDescriptor, Step, Task, run_cli
from cli_task_runner.cli.main import EXIT_REGISTRATION, EXIT_TASK_FAILED


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path) -> None:
    for key in ("TASK_RUNNER_FAILURE_POLICY", "TASK_RUNNER_LOGS_DIR", "TASK_RUNNER_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None, width=120)


def _commands(calls: List[Any]) -> list:
    def explode(configuration: Any) -> None:
        raise RuntimeError("disk full")

    task = Task(
        name="deploy",
        configurator=lambda invocation: {"env": invocation.positional_args[0]},
        steps=[
            Step("saving", explode, error_message="save failed"),
            Step("announcing", calls.append, completion_message="announced"),
        ],
    )
    return [CommandDescriptor(syntax="deploy <env>", options=[("-f, --force",)], action=task)]


def test_run_cli_is_fail_soft_by_default(recorder) -> None:
    calls: List[Any] = []

    code = run_cli(
        _commands(calls),
        "1.0.0",
        package_name="zapp",
        argv=["deploy", "production", "-f"],
        console=_console(),
        task_logger=recorder,
    )

    assert code == 0
    assert calls == [{"env": "production"}]
    assert [c[1] for c in recorder.named("error")] == ["save failed"]


def test_run_cli_fail_fast_returns_failure_code(recorder, monkeypatch) -> None:
    monkeypatch.setenv("TASK_RUNNER_FAILURE_POLICY", "fast")
    calls: List[Any] = []

    code = run_cli(
        _commands(calls),
        "1.0.0",
        package_name="zapp",
        argv=["deploy", "production"],
        console=_console(),
        task_logger=recorder,
    )

    assert code == EXIT_TASK_FAILED
    assert calls == []


def test_run_cli_aborts_on_malformed_descriptor(recorder) -> None:
    console = _console()

    code = run_cli(
        [{"syntax": "broken"}],
        "1.0.0",
        package_name="zapp",
        argv=["broken"],
        console=console,
        task_logger=recorder,
    )

    assert code == EXIT_REGISTRATION
    assert recorder.calls == []
    assert "cannot register command 'broken'" in console.file.getvalue()


def test_run_cli_writes_structured_log(recorder, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASK_RUNNER_LOGS_DIR", str(tmp_path / "logs"))

    run_cli(
        _commands([]),
        "1.0.0",
        package_name="zapp",
        argv=["deploy", "staging"],
        console=_console(),
    )

    lines = (tmp_path / "logs" / "cli-task-runner.jsonl").read_text(encoding="utf-8").splitlines()
    entries = [json.loads(line) for line in lines]
    errors = [e for e in entries if e["level"] == "ERROR"]
    assert errors and errors[0]["message"] == "save failed"
    assert "RuntimeError: disk full" in errors[0]["exception"]


def test_run_cli_rejects_null_logging_section(recorder, tmp_path: Path) -> None:
    (tmp_path / "task-runner.yaml").write_text("logging:\n", encoding="utf-8")
    console = _console()

    code = run_cli([], "1.0", argv=[], console=console, task_logger=recorder)

    assert code == EXIT_REGISTRATION
    assert "logging" in console.file.getvalue()


@pytest.mark.parametrize("argv, expected", [(["deploy"], 2), (["--help"], 0)])
def test_run_cli_returns_argparse_exit_codes(recorder, argv, expected) -> None:
    code = run_cli(
        _commands([]),
        "1.0",
        package_name="zapp",
        argv=argv,
        console=_console(),
        task_logger=recorder,
    )

    assert code == expected

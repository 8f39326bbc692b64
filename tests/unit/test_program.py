from typing import Any, List

import pytest

from cli_task_runner.cli.program import (
    ArgumentSpec,
    Program,
    parse_option_flags,
    parse_syntax,
)


def _recording_action(calls: List[tuple]):
    def action(*args: Any) -> str:
        calls.append(args)
        return "ran"

    return action


def test_parse_syntax_handles_required_optional_and_variadic() -> None:
    name, arguments = parse_syntax("copy <source> [destination] [extra...]")

    assert name == "copy"
    assert arguments == [
        ArgumentSpec("source", required=True),
        ArgumentSpec("destination", required=False),
        ArgumentSpec("extra", required=False, variadic=True),
    ]
    assert [a.nargs for a in arguments] == [None, "?", "*"]


@pytest.mark.parametrize(
    "syntax",
    ["", "   ", "<env>", "deploy <files...> <env>", "deploy <env]", "deploy env"],
)
def test_parse_syntax_rejects_malformed(syntax: str) -> None:
    with pytest.raises(ValueError):
        parse_syntax(syntax)


def test_parse_option_flags_variants() -> None:
    force = parse_option_flags("-f, --force")
    env = parse_option_flags("-e, --env <name>")
    tag = parse_option_flags("--tag [tag]")
    color = parse_option_flags("--no-color")
    dry = parse_option_flags("--dry-run")

    assert (force.flags, force.key, force.value) == (("-f", "--force"), "force", None)
    assert (env.key, env.value, env.metavar) == ("env", "required", "name")
    assert (tag.key, tag.value) == ("tag", "optional")
    assert (color.key, color.negated) == ("color", True)
    assert dry.key == "dry_run"


def test_dispatch_passes_positionals_then_options() -> None:
    calls: List[tuple] = []
    program = Program(prog="tool")
    program.command("deploy <env>").option("-f, --force").action(_recording_action(calls))

    result = program.parse(["deploy", "production", "-f"])

    assert result == "ran"
    assert calls == [("production", {"force": True})]


def test_unset_options_are_absent_and_defaults_present() -> None:
    calls: List[tuple] = []
    program = Program(prog="tool")
    (
        program.command("build [targets...]")
        .option("-f, --force", "force it")
        .option("-j, --jobs <n>", "parallel jobs", int, 1)
        .option("--no-cache", "disable cache")
        .action(_recording_action(calls))
    )

    program.parse(["build"])
    program.parse(["build", "a", "b", "-j", "4", "--no-cache", "--verbose"])

    assert calls[0] == ([], {"jobs": 1, "cache": True})
    assert calls[1] == (["a", "b"], {"verbose": True, "jobs": 4, "cache": False})


def test_optional_value_flag_without_value_is_true() -> None:
    calls: List[tuple] = []
    program = Program(prog="tool")
    program.command("release [version]").option("--tag [tag]").action(_recording_action(calls))

    program.parse(["release", "--tag"])
    program.parse(["release", "1.2.0", "--tag", "beta"])

    assert calls == [(None, {"tag": True}), ("1.2.0", {"tag": "beta"})]


def test_command_declared_verbose_overrides_builtin() -> None:
    calls: List[tuple] = []
    program = Program(prog="tool")
    program.command("run").option("--verbose", "chatty", False).action(_recording_action(calls))

    program.parse(["run"])

    assert calls == [({"verbose": False},)]


@pytest.mark.asyncio
async def test_dispatch_awaits_coroutine_actions() -> None:
    program = Program(prog="tool")

    async def action(options: dict) -> str:
        return f"options={options}"

    program.command("status").action(action)

    assert await program.dispatch(["status"]) == "options={}"


@pytest.mark.asyncio
async def test_dispatch_without_command_prints_help(capsys) -> None:
    program = Program(prog="tool")
    program.command("status").action(lambda options: None)

    assert await program.dispatch([]) is None
    assert "status" in capsys.readouterr().out


def test_duplicate_command_is_rejected() -> None:
    program = Program(prog="tool")
    program.command("status")

    with pytest.raises(ValueError):
        program.command("status <x>")


def test_version_flag_exits(capsys) -> None:
    program = Program(prog="tool").version("1.2.3")

    with pytest.raises(SystemExit):
        program.parse(["--version"])
    assert "tool 1.2.3" in capsys.readouterr().out


def test_discarded_command_is_no_longer_parsed() -> None:
    program = Program(prog="tool")
    program.command("keep").action(lambda options: "kept")
    program.command("drop").action(lambda options: "dropped")

    program.discard("drop")

    assert sorted(program.commands) == ["keep"]
    with pytest.raises(SystemExit):
        program.parser.parse_args(["drop"])

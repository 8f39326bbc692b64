"""
Example tool built on cli-task-runner.

Usage:
  python examples/release_tool.py publish ./dist --tag beta --verbose
  python examples/release_tool.py scaffold my-plugin ./templates ./out
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import Any, Dict

from cli_task_runner import CommandDescriptor, Invocation, Step, Task, run_cli
from cli_task_runner.utils.file import copy_folder, write_json_to_file
from cli_task_runner.utils.shell import exec_command


async def _has_git(invocation: Invocation) -> bool:
    return shutil.which("git") is not None


async def _publish_config(invocation: Invocation) -> Dict[str, Any]:
    (dist,) = invocation.positional_args
    revision = await exec_command("git rev-parse --short HEAD", silent=True)
    return {
        "dist": Path(dist),
        "tag": invocation.options.get("tag", "latest"),
        "revision": revision.strip(),
    }


async def _write_manifest(configuration: Dict[str, Any]) -> None:
    manifest = {"tag": configuration["tag"], "revision": configuration["revision"]}
    await write_json_to_file(configuration["dist"] / "manifest.json", manifest)


async def _list_artifacts(configuration: Dict[str, Any]) -> None:
    configuration["artifacts"] = sorted(p.name for p in configuration["dist"].iterdir())


publish = Task(
    name="publish",
    start_message="Publishing build artifacts",
    prerequisite_checker=_has_git,
    configurator=_publish_config,
    steps=[
        Step(
            start_message="writing manifest",
            run=_write_manifest,
            error_message="could not write manifest.json",
            completion_message="manifest written",
        ),
        Step(
            start_message="collecting artifacts",
            run=_list_artifacts,
            completion_message="artifacts collected",
        ),
    ],
)


def _scaffold_config(invocation: Invocation) -> Dict[str, Any]:
    name, templates, out = invocation.positional_args
    return {"name": name, "templates": Path(templates), "out": Path(out) / name}


async def _copy_templates(configuration: Dict[str, Any]) -> None:
    configuration["out"].mkdir(parents=True, exist_ok=True)
    await copy_folder(configuration["templates"], configuration["out"])


scaffold = Task(
    name="scaffold",
    start_message="Creating a plugin skeleton",
    configurator=_scaffold_config,
    steps=[
        Step(
            start_message="copying templates",
            run=_copy_templates,
            completion_message="templates copied",
        )
    ],
    cleanup=lambda configuration: None,
)

COMMANDS = [
    CommandDescriptor(
        syntax="publish <dist>",
        options=[("-t, --tag <tag>", "release channel", "latest")],
        action=publish,
    ),
    CommandDescriptor(
        syntax="scaffold <name> <templates> <out>",
        action=scaffold,
    ),
]


if __name__ == "__main__":
    sys.exit(run_cli(COMMANDS, "0.1.0", package_name="release-tool"))

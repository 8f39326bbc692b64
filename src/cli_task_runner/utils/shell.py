"""Async shell command helpers for task steps."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from ..exceptions import CommandFailed

__all__ = ["exec_command", "run_package_manager"]

logger = logging.getLogger(__name__)


async def exec_command(
    cmd: str,
    *,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    silent: bool = False,
) -> str:
    """Run ``cmd`` through the shell and return its stdout.

    A non-zero exit raises ``CommandFailed`` whose message is the command's
    stderr. Unless ``silent`` is set, stdout is echoed to the debug log.
    """
    logger.debug("Running command: %s", cmd)
    process = await asyncio.create_subprocess_shell(
        cmd,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    out = stdout.decode("utf-8", errors="replace") if stdout else ""
    err = stderr.decode("utf-8", errors="replace") if stderr else ""
    code = process.returncode
    logger.debug("Command completed with code %s", code)
    if not silent and out:
        logger.debug("%s", out.rstrip())
    if code != 0:
        raise CommandFailed(cmd, code, err)
    return out


async def run_package_manager(
    command: str,
    cwd: Union[str, Path],
    manager: str = "yarn",
) -> str:
    """Run ``<manager> <command>`` inside ``cwd``."""
    try:
        return await exec_command(f"{manager} {command}", cwd=cwd)
    except CommandFailed as exc:
        raise CommandFailed(
            exc.command, exc.code, f"failed to run {manager} {command}"
        ) from exc

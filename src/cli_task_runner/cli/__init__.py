"""CLI layer: argparse front end, registration bridge and entrypoint."""

from .main import run_cli
from .program import CommandHandle, Program
from .register import coerce_descriptor, register_command, register_commands

__all__ = [
    "CommandHandle",
    "Program",
    "coerce_descriptor",
    "register_command",
    "register_commands",
    "run_cli",
]

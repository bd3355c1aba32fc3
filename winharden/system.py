"""Running external programs and the host environment the hardening works on."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Callable

from .registry import MemoryRegistry, WindowsRegistry

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a program cannot be started or exits with a non-zero status."""

    def __init__(self, program: str, args, output: str = "", returncode: int | None = None):
        self.program = program
        self.args_list = tuple(args)
        self.output = output
        self.returncode = returncode
        if returncode is None:
            message = f"could not run {program}"
        else:
            message = f"{program} exited with status {returncode}"
        super().__init__(message)


def run_command(program: str, *args: str) -> str:
    """Run *program* without a console window and return its combined output."""
    try:
        completed = subprocess.run(
            [program, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
        )
    except OSError as exc:
        raise CommandError(program, args, str(exc)) from exc
    if completed.returncode != 0:
        raise CommandError(program, args, completed.stdout, completed.returncode)
    return completed.stdout


def is_elevated() -> bool:
    """Tell whether this process runs with administrative rights."""
    if os.name == "nt":
        try:
            run_command("net", "session")
        except CommandError:
            return False
        return True
    return os.geteuid() == 0


@dataclass
class Host:
    """The registry to change, how to run programs and how to tell the user things."""

    registry: MemoryRegistry | WindowsRegistry
    runner: Callable[..., str] = field(default=run_command)
    notifier: Callable[[str], None] | None = None

    def run(self, program: str, *args: str) -> str:
        """Run a program and return its output; raises CommandError on failure."""
        return self.runner(program, *args)

    def notify(self, message: str) -> None:
        """Show an informational message."""
        if self.notifier is not None:
            self.notifier(message)
        else:
            logger.info("Information: %s", message)


def default_host() -> Host:
    """A host working on the live Windows registry."""
    return Host(registry=WindowsRegistry())
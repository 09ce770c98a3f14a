"""
External command execution.

Every tool the build drives (pandoc, xelatex, plantuml, dot) goes through
run_command() so exit status checking and logging happen in one place.
"""

import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from techdocs.exceptions import MissingDependencyError, ToolInvocationError


@dataclass(frozen=True)
class ToolCommand:
    """
    A single external command.

    Attributes:
        tool: Binary name or path (e.g., "pandoc")
        args: Arguments following the binary
        cwd: Working directory (None for the current one)
        env: Variables added on top of the inherited environment
    """

    tool: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[Path] = None
    env: Optional[Dict[str, str]] = None

    @property
    def argv(self) -> List[str]:
        return [self.tool, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass
class CommandResult:
    """
    Outcome of a finished command.

    Attributes:
        command: The command that ran
        returncode: Exit status
        stdout: Captured standard output
        stderr: Captured standard error
        elapsed_s: Wall time in seconds
    """

    command: ToolCommand
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_s: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(
    command: ToolCommand, check: bool = True, input_text: Optional[str] = None
) -> CommandResult:
    """
    Run a command to completion and capture its output.

    Args:
        command: Command to run
        check: Raise ToolInvocationError on a non-zero exit (default: True)
        input_text: Text fed to the command's standard input

    Returns:
        CommandResult with captured output

    Raises:
        MissingDependencyError: If the binary cannot be executed
        ToolInvocationError: If check is True and the command exits non-zero
    """
    env = None
    if command.env:
        env = {**os.environ, **command.env}

    logger.debug(f"Running: {command}")
    start_time = time.time()

    try:
        completed = subprocess.run(
            command.argv,
            cwd=command.cwd,
            env=env,
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",  # Tool output is not always valid UTF-8
        )
    except FileNotFoundError as e:
        raise MissingDependencyError(command.tool) from e

    result = CommandResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        elapsed_s=time.time() - start_time,
    )

    logger.debug(f"{command.tool} finished with status {result.returncode} ({result.elapsed_s:.2f}s)")

    if check and not result.success:
        raise ToolInvocationError(
            tool=command.tool,
            argv=command.argv,
            returncode=result.returncode,
            stderr=result.stderr or result.stdout,
        )

    return result

"""
Execution wrapper for intercepted commands.

Runs the command through a shell so pipes, redirects and globs behave as the
user wrote them. stderr is merged into stdout, so the bytes are interleaved in
the order the shell wrote them. The output either streams straight into an
open log file or, for callers that pass none, is collected in memory.

A failing command is a normal result here, not an error: the exit code is
recorded and the caller decides what to say about it.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/bash"

# Conventional "command not found" status, used when the shell itself can't start
SPAWN_FAILURE_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandRequest:
    """A command the host is about to run, and where."""

    command: str
    cwd: str | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """Exit code and combined output of one command run."""

    exit_code: int
    output: bytes
    started_at: datetime = field(default_factory=lambda: datetime.now().astimezone())

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")


def resolve_cwd(cwd: str | os.PathLike[str] | None) -> Path | None:
    """Return cwd as a Path if it names an existing directory, else None."""
    if not cwd:
        return None
    path = Path(cwd).expanduser()
    if not path.is_dir():
        logger.debug(f"Ignoring missing working directory: {path}")
        return None
    return path


def execute(
    command: str,
    cwd: str | os.PathLike[str] | None = None,
    shell: str | None = None,
    stdout: BinaryIO | None = None,
) -> ExecutionResult:
    """
    Run a command and capture its combined output.

    Args:
        command: Shell command line
        cwd: Working directory; ignored if it doesn't exist
        shell: Shell executable (defaults to /bin/bash)
        stdout: Open binary file the output is streamed into as it is
            produced. When given, ExecutionResult.output is empty and the
            output lives only in that file.

    Returns:
        ExecutionResult. Never raises for command failures; a shell that
        cannot be spawned is reported as exit code 127.
    """
    started_at = datetime.now().astimezone()
    workdir = resolve_cwd(cwd)
    shell = shell or DEFAULT_SHELL

    try:
        result = subprocess.run(
            [shell, "-c", command],
            cwd=workdir,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE if stdout is None else stdout,
            stderr=subprocess.STDOUT,
        )
    except (OSError, ValueError) as e:
        # ValueError: arguments that can't be passed to exec (NUL bytes, unencodable text)
        logger.warning(f"Failed to spawn {shell}: {e}")
        message = f"{shell}: {e}\n".encode(errors="replace")
        if stdout is not None:
            stdout.write(message)
            stdout.flush()
            message = b""
        return ExecutionResult(
            exit_code=SPAWN_FAILURE_EXIT_CODE,
            output=message,
            started_at=started_at,
        )

    # Negative return codes mean "killed by signal N"; report them the way a shell would
    exit_code = result.returncode if result.returncode >= 0 else 128 - result.returncode
    output = result.stdout or b""
    logger.debug(f"Command exited with {exit_code} ({len(output)} bytes captured in memory)")
    return ExecutionResult(exit_code=exit_code, output=output, started_at=started_at)

"""
Shell command adapter — execute host commands.

This is the most fundamental adapter: it runs commands and captures
their output. The filesystem and systemd adapters are built on the
same ``run_command`` helper.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time

from hostpreflight.adapters.base import Adapter, ExecutionContext
from hostpreflight.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


def is_root() -> bool:
    """Whether the current process runs with uid 0."""
    return os.geteuid() == 0


def sudo_prefix() -> list[str]:
    """Command prefix needed to run something as root.

    Empty when already root. Raises FileNotFoundError when elevation
    is needed but sudo is not installed.
    """
    if is_root():
        return []
    sudo = shutil.which("sudo")
    if sudo is None:
        raise FileNotFoundError("sudo is required to run commands as root but was not found in PATH")
    return [sudo]


def run_command(
    argv: list[str] | str,
    input: str | None = None,
    timeout: int = DEFAULT_TIMEOUT,
    cwd: str | None = None,
) -> subprocess.CompletedProcess:
    """Run a command, capturing text output.

    A string is run through the shell; a list is executed directly.
    Raises subprocess.TimeoutExpired / OSError like subprocess.run.
    """
    use_shell = isinstance(argv, str)
    logger.debug("Executing: %s", argv if use_shell else shlex.join(argv))
    return subprocess.run(
        argv,
        shell=use_shell,
        input=input,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


class ShellCommandAdapter(Adapter):
    """Execute commands and capture output.

    Action params:
        command (str | list[str]): The command to execute.
        input (str): Optional text fed on stdin.
        timeout (int): Timeout in seconds (default: 60).
        cwd (str): Optional working directory.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        # Shell is always available on Unix systems
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.action.params.get("command")
        if not command:
            return False, "Missing required param: 'command'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.action.params["command"]
        stdin = context.action.params.get("input")
        timeout = context.action.params.get("timeout", DEFAULT_TIMEOUT)
        cwd = context.action.params.get("cwd")
        display = command if isinstance(command, str) else shlex.join(command)

        start = time.monotonic()

        try:
            result = run_command(command, input=stdin, timeout=timeout, cwd=cwd)
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{display}: timed out after {timeout}s",
                metadata={"command": display, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{display}: {e}",
                metadata={"command": display},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={
                    "command": display,
                    "return_code": result.returncode,
                    "stderr": stderr,
                },
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=f"{display}: {stderr or f'exited with code {result.returncode}'}",
            duration_ms=elapsed_ms,
            metadata={
                "command": display,
                "return_code": result.returncode,
                "stdout": output,
            },
        )

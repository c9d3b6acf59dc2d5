"""Shared utility functions for sprout.

Provides async command execution, a checked shell wrapper that raises
:class:`~sprout.errors.CommandError`, and the Rich console helpers used for
all user-facing output.
"""

from __future__ import annotations

import asyncio
import os
import shlex
from pathlib import Path

from rich.console import Console

from sprout.errors import CommandError

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 300,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.  No shell is involved, so generator
            references are never interpreted by ``/bin/sh``.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.  A timed-out command reports
        ``-1``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {shlex.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def shell(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 300,
    error_cls: type[CommandError] = CommandError,
) -> str:
    """Run *cmd* and return its stdout, raising *error_cls* on failure.

    The raised error carries the command line, exit status and stderr of the
    failed process.
    """
    cmd_str = shlex.join(cmd)
    try:
        returncode, stdout, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    except FileNotFoundError as exc:
        raise error_cls(
            f"Cannot run {cmd[0]}: {exc}", command=cmd_str, returncode=127
        ) from exc

    if returncode != 0:
        raise error_cls(
            f"Command failed (exit {returncode}): {cmd_str}\n{stderr}".rstrip(),
            command=cmd_str,
            returncode=returncode,
            stderr=stderr,
        )
    return stdout


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str, quiet: bool = False) -> None:
    """Print a dimmed progress line unless *quiet* is set."""
    if not quiet:
        console.print(f"[dim]{message}[/dim]")

"""Package-manager, git and prompt helpers.

Thin wrappers around ``npm``/``yarn`` and ``git`` invoked as opaque shell
operations, plus a Rich-based replacement for interactive prompts.  The
loader binds ``install`` and ``git_init`` to the destination directory before
handing them to a generator.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from rich.prompt import Confirm, IntPrompt, Prompt

from sprout.config import Settings
from sprout.errors import CommandError
from sprout.utils import console, print_info, shell


# ---------------------------------------------------------------------------
# Package manager
# ---------------------------------------------------------------------------


def can_use_yarn() -> bool:
    """Return ``True`` when a ``yarn`` executable is available on ``PATH``."""
    return shutil.which("yarn") is not None


def package_manager(settings: Settings | None = None) -> str:
    """Resolve the package manager to use: ``"yarn"`` or ``"npm"``."""
    settings = settings or Settings()
    if settings.package_manager != "auto":
        return settings.package_manager
    return "yarn" if can_use_yarn() else "npm"


def install_command(
    deps: Sequence[str] = (),
    *,
    manager: str = "npm",
    dev: bool = False,
    silent: bool = False,
) -> list[str]:
    """Build the install command line for *manager*.

    With no *deps* the command installs the dependencies already declared in
    ``package.json``.  Options come before a ``--`` separator so a dependency
    starting with ``-`` is never read as an option.
    """
    if manager == "yarn":
        cmd = ["yarn", "add"] if deps else ["yarn", "install"]
        if deps and dev:
            cmd.append("--dev")
    else:
        cmd = ["npm", "install"]
        if deps and dev:
            cmd.append("--save-dev")
    if silent:
        cmd.append("--silent")
    if deps:
        cmd += ["--", *deps]
    return cmd


async def init_package(
    cwd: str | Path,
    *,
    settings: Settings | None = None,
    error_cls: type[CommandError] = CommandError,
) -> None:
    """Create a default ``package.json`` in *cwd* (``<pm> init -y``)."""
    settings = settings or Settings()
    manager = package_manager(settings)
    await shell(
        [manager, "init", "-y"],
        cwd=cwd,
        timeout=settings.command_timeout,
        error_cls=error_cls,
    )


async def install(
    deps: Sequence[str] = (),
    *,
    cwd: str | Path,
    dev: bool = False,
    silent: bool = False,
    settings: Settings | None = None,
    error_cls: type[CommandError] = CommandError,
) -> None:
    """Install *deps* (or the declared dependencies) into *cwd*."""
    settings = settings or Settings()
    cmd = install_command(
        list(deps), manager=package_manager(settings), dev=dev, silent=silent
    )
    if not silent:
        print_info("Installing dependencies...", settings.quiet)
    await shell(cmd, cwd=cwd, timeout=settings.command_timeout, error_cls=error_cls)


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


async def git_init(
    *,
    cwd: str | Path,
    message: str = "init",
    settings: Settings | None = None,
) -> None:
    """Initialise a git repository in *cwd* and commit everything in it."""
    settings = settings or Settings()
    timeout = settings.command_timeout
    print_info("Initializing git repository...", settings.quiet)
    await asyncio.to_thread(Path(cwd).mkdir, parents=True, exist_ok=True)
    await shell(["git", "init"], cwd=cwd, timeout=timeout)
    await shell(["git", "add", "-A"], cwd=cwd, timeout=timeout)
    await shell(
        ["git", "commit", "--no-gpg-sign", "-m", message], cwd=cwd, timeout=timeout
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def prompts(questions: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Ask one or more questions on the console and return the answers.

    Each question is a mapping with ``name``, ``message`` and optionally
    ``type`` (``"text"``, ``"confirm"``, ``"number"`` or ``"select"``),
    ``initial`` and ``choices``.  Answers are keyed by ``name``.
    """
    if isinstance(questions, Mapping):
        questions = [questions]

    answers: dict[str, Any] = {}
    for question in questions:
        name = question["name"]
        message = question.get("message", name)
        kind = question.get("type", "text")
        kwargs: dict[str, Any] = {"console": console}
        if question.get("initial") is not None:
            kwargs["default"] = question["initial"]

        if kind == "confirm":
            answers[name] = Confirm.ask(message, **kwargs)
        elif kind == "number":
            answers[name] = IntPrompt.ask(message, **kwargs)
        elif kind == "select":
            choices = [str(c) for c in question.get("choices", [])]
            answers[name] = Prompt.ask(message, choices=choices, **kwargs)
        else:
            answers[name] = Prompt.ask(message, **kwargs)
    return answers

"""Generator source resolution.

Turns a generator reference into a directory on disk:

* ``./path``, ``../path``, ``/abs/path`` and ``~/path`` are local and resolve
  to their absolute form without touching the filesystem.
* Anything else is a package reference.  By default it is installed with the
  package manager into an ephemeral workspace; with ``clone=True`` it is
  cloned with git instead (``repo#tag-or-branch`` pins a ref).
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sprout.config import Settings
from sprout.errors import SourceAcquisitionError
from sprout.helpers import init_package, install
from sprout.utils import print_info, shell
from sprout.workspace import create_temp_dir

_LOCAL_PATTERN = re.compile(r"^[~./]")


class SourceKind(str, Enum):
    LOCAL = "local"
    NPM = "npm"
    GIT = "git-clone"


@dataclass(frozen=True)
class ResolvedSource:
    """Absolute directory holding a generator's files, plus its provenance."""

    path: Path
    kind: SourceKind


def is_local(ref: str) -> bool:
    return bool(_LOCAL_PATTERN.match(ref))


def classify(ref: str, clone: bool = False) -> SourceKind:
    """Return how *ref* would be acquired."""
    if is_local(ref):
        return SourceKind.LOCAL
    return SourceKind.GIT if clone else SourceKind.NPM


def split_git_ref(ref: str) -> tuple[str, str | None]:
    """Split ``repo#tag-or-branch`` into its parts.

    Only the first ``#`` separates the ref.  Subfolders and commit hashes are
    not supported.
    """
    repo, _, tag_or_branch = ref.partition("#")
    return repo, tag_or_branch or None


# ---------------------------------------------------------------------------
# Acquisition
# ---------------------------------------------------------------------------


async def download_from_npm(ref: str, settings: Settings | None = None) -> Path:
    """Install *ref* into a fresh workspace and return the installed package dir.

    Precondition: after the install the workspace manifest declares exactly
    one dependency, the package just installed.  The first key of
    ``dependencies`` is taken as its name.
    """
    settings = settings or Settings()
    workspace = create_temp_dir(prefix=settings.temp_prefix)
    print_info(f"Downloading {ref}...", settings.quiet)

    await init_package(workspace, settings=settings, error_cls=SourceAcquisitionError)
    await install(
        [ref],
        cwd=workspace,
        silent=True,
        settings=settings,
        error_cls=SourceAcquisitionError,
    )

    manifest_path = workspace / "package.json"
    manifest = json.loads(await asyncio.to_thread(manifest_path.read_text, "utf-8"))
    dependencies = list((manifest.get("dependencies") or {}).keys())
    if not dependencies:
        raise SourceAcquisitionError(
            f"Installing {ref} declared no dependency in {manifest_path}",
            command=f"install {ref}",
        )
    return workspace / "node_modules" / dependencies[0]


async def download_from_git(ref: str, settings: Settings | None = None) -> Path:
    """Clone *ref* (``repo`` or ``repo#tag-or-branch``) into a fresh workspace."""
    settings = settings or Settings()
    repo, tag_or_branch = split_git_ref(ref)
    workspace = create_temp_dir(prefix=settings.temp_prefix)
    print_info(f"Cloning {repo}...", settings.quiet)

    cmd = ["git", "clone", "--single-branch"]
    if tag_or_branch:
        cmd += ["--branch", tag_or_branch]
    cmd += ["--", repo, str(workspace)]
    await shell(
        cmd, timeout=settings.command_timeout, error_cls=SourceAcquisitionError
    )
    return workspace


async def resolve(
    ref: str, *, clone: bool = False, settings: Settings | None = None
) -> ResolvedSource:
    """Resolve a generator reference to a :class:`ResolvedSource`."""
    kind = classify(ref, clone)
    if kind is SourceKind.LOCAL:
        return ResolvedSource(Path(ref).expanduser().resolve(), kind)
    if kind is SourceKind.GIT:
        return ResolvedSource(await download_from_git(ref, settings), kind)
    return ResolvedSource(await download_from_npm(ref, settings), kind)

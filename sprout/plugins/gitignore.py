"""Drop files matched by the generator's own ignore rules.

The rules are read from ``.gitignore`` at the source root.  Packages published
to npm lose their ``.gitignore``, so a plain ``gitignore`` file is used when
the dotted one is missing.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pathspec

from sprout.stream import FileRecord, Stage

IGNORE_FILENAMES = (".gitignore", "gitignore")


def load_ignore_spec(root: str | Path) -> pathspec.GitIgnoreSpec | None:
    """Return the ignore rules found in *root*, or ``None`` if there are none."""
    for filename in IGNORE_FILENAMES:
        candidate = Path(root) / filename
        if candidate.is_file():
            lines = candidate.read_text(encoding="utf-8").splitlines()
            return pathspec.GitIgnoreSpec.from_lines(lines)
    return None


def gitignore(root: str | Path | None = None) -> Stage:
    """Build a stage dropping records ignored by the rules in *root*.

    *root* defaults to each record's ``cwd``.  Rules are loaded once per root,
    on first use.
    """
    specs: dict[Path, pathspec.GitIgnoreSpec | None] = {}

    async def _filter(record: FileRecord) -> FileRecord | None:
        spec_root = Path(root) if root is not None else record.cwd
        if spec_root not in specs:
            specs[spec_root] = await asyncio.to_thread(load_ignore_spec, spec_root)
        spec = specs[spec_root]
        if spec is None:
            return record

        relative = Path(os.path.relpath(record.path, spec_root)).as_posix()
        if spec.match_file(relative):
            return None
        return record

    return _filter

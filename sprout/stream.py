"""Streaming file pipeline.

Files are read lazily from glob patterns into :class:`FileRecord` objects and
pushed through a chain of stages one record at a time::

    await pipeline(src(["template/**"]), template({"name": "demo"}), dest())

A *stage* is any callable taking a record and returning the record (possibly
mutated or replaced), ``None`` to drop it, or an awaitable of either.  A record
is handed to the next stage only after the previous stage has completely
finished with it, and only one record is in flight per pipeline.
"""

from __future__ import annotations

import asyncio
import glob
import inspect
import os
import re
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import pathspec

from sprout.config import DEFAULT_IGNORE
from sprout.errors import FileSystemError

_MAGIC = re.compile(r"[*?\[]")
_DONE = object()


@dataclass
class FileRecord:
    """One file flowing through a pipeline.

    ``base`` must always be a prefix of ``path``; use :meth:`rebase` to move a
    record so both are updated together.
    """

    contents: bytes
    path: Path
    base: Path
    cwd: Path
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def relative(self) -> Path:
        return self.path.relative_to(self.base)

    @property
    def dirname(self) -> Path:
        return self.path.parent

    @property
    def basename(self) -> str:
        return self.path.name

    def rebase(self, base: str | Path) -> None:
        """Move the record under *base*, keeping its relative path."""
        relative = self.relative
        self.base = Path(base)
        self.path = self.base / relative

    def __repr__(self) -> str:
        return f"<FileRecord {self.relative.as_posix()!r} ({len(self.contents)} bytes)>"


StageResult = Union[FileRecord, None]
Stage = Callable[[FileRecord], Union[StageResult, Awaitable[StageResult]]]


# ---------------------------------------------------------------------------
# Glob expansion
# ---------------------------------------------------------------------------


def glob_parent(pattern: str) -> str:
    """Return the static directory prefix of a glob *pattern*.

    Examples::

        glob_parent("template/**/*.py") -> "template"
        glob_parent("src/*.js")         -> "src"
        glob_parent("README.md")        -> "."
        glob_parent("**")               -> "."
    """
    parts = pattern.replace("\\", "/").split("/")
    static: list[str] = []
    # The last segment is a file name (or a wildcard), never part of the parent.
    for part in parts[:-1]:
        if _MAGIC.search(part):
            break
        static.append(part)
    if not static:
        return "."
    if static == [""]:
        return "/"
    return "/".join(static)


def split_patterns(globs: str | Iterable[str]) -> tuple[list[str], list[str]]:
    """Split *globs* into include patterns and ``!``-prefixed exclusions."""
    patterns = [globs] if isinstance(globs, str) else list(globs)
    includes = [p for p in patterns if not p.startswith("!")]
    excludes = [p[1:] for p in patterns if p.startswith("!")]
    return includes, excludes


async def glob_files(
    globs: str | Iterable[str],
    *,
    cwd: str | Path | None = None,
    ignore: Iterable[str] = (),
    default_ignore: Iterable[str] = DEFAULT_IGNORE,
) -> AsyncIterator[FileRecord]:
    """Yield a :class:`FileRecord` for every file matched by *globs*.

    Patterns are expanded in order, one match at a time; within a pattern the
    order is whatever the filesystem walk produces.  Hidden files are
    included.  ``default_ignore`` plus *ignore* plus any ``!pattern`` entries
    are excluded (gitignore syntax, relative to *cwd*).

    Raises:
        FileSystemError: If a matched file cannot be read.  Records already
            yielded are not affected.
    """
    root = Path(cwd or os.getcwd()).resolve()
    includes, negated = split_patterns(globs)
    excluded = pathspec.GitIgnoreSpec.from_lines([*default_ignore, *ignore, *negated])

    for pattern in includes:
        base = Path(os.path.normpath(root / glob_parent(pattern)))
        matches = glob.iglob(pattern, root_dir=root, recursive=True, include_hidden=True)
        while True:
            name = await asyncio.to_thread(next, matches, _DONE)
            if name is _DONE:
                break

            filename = Path(os.path.normpath(root / name))
            if excluded.match_file(Path(os.path.relpath(filename, root)).as_posix()):
                continue
            if not await asyncio.to_thread(filename.is_file):
                continue

            try:
                contents = await asyncio.to_thread(filename.read_bytes)
            except OSError as exc:
                raise FileSystemError.wrap(exc, f"Cannot read {filename}") from exc

            yield FileRecord(contents=contents, path=filename, base=base, cwd=root)


# ---------------------------------------------------------------------------
# Stages and pipelines
# ---------------------------------------------------------------------------


async def apply_stage(stage: Stage, record: FileRecord) -> FileRecord | None:
    """Run one stage on one record and return what it hands on."""
    result = stage(record)
    if inspect.isawaitable(result):
        result = await result
    if result is not None and not isinstance(result, FileRecord):
        raise TypeError(
            f"Stage {getattr(stage, '__name__', stage)!r} returned "
            f"{type(result).__name__}, expected FileRecord or None"
        )
    return result


class FileStream:
    """A lazy, single-pass stream of records with stages attached.

    Nothing is read until the stream is iterated.  :meth:`pipe` returns a new
    stream and leaves the original untouched.
    """

    def __init__(
        self, source: AsyncIterable[FileRecord], stages: Iterable[Stage] = ()
    ) -> None:
        self._source = source
        self._stages: tuple[Stage, ...] = tuple(stages)

    def pipe(self, *stages: Stage) -> "FileStream":
        return FileStream(self._source, (*self._stages, *stages))

    async def __aiter__(self) -> AsyncIterator[FileRecord]:
        async for record in self._source:
            current: FileRecord | None = record
            for stage in self._stages:
                current = await apply_stage(stage, current)
                if current is None:
                    break
            if current is not None:
                yield current


async def pipeline(source: AsyncIterable[FileRecord], *stages: Stage) -> list[Path]:
    """Drain *source* through *stages*.

    Returns the final paths of the records that made it through every stage.
    The first error raised by the source or any stage aborts the run; files
    written before the failure stay on disk.
    """
    stream = source if isinstance(source, FileStream) else FileStream(source)
    paths: list[Path] = []
    async for record in stream.pipe(*stages):
        paths.append(record.path)
    return paths

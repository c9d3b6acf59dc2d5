"""User transform helpers.

``modify(fn)`` receives the raw bytes, ``modify.text`` the decoded text,
``modify.json`` the parsed document and ``modify.rename`` the relative path.
Each callback also receives the record and may be a coroutine function.
Passing ``pattern`` restricts the stage to records whose relative path
matches it (gitignore syntax); other records pass through unchanged.
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pathspec

from sprout.stream import FileRecord, Stage


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _matcher(pattern: str | list[str] | None) -> Callable[[FileRecord], bool]:
    if pattern is None:
        return lambda record: True
    lines = [pattern] if isinstance(pattern, str) else list(pattern)
    spec = pathspec.GitIgnoreSpec.from_lines(lines)
    return lambda record: spec.match_file(record.relative.as_posix())


class _Modify:
    """Callable namespace: ``modify(fn)``, ``modify.text(fn)`` and friends."""

    def __call__(
        self,
        fn: Callable[[bytes, FileRecord], Any],
        *,
        pattern: str | list[str] | None = None,
    ) -> Stage:
        matches = _matcher(pattern)

        async def _bytes(record: FileRecord) -> FileRecord:
            if matches(record):
                record.contents = await _call(fn, record.contents, record)
            return record

        return _bytes

    def text(
        self,
        fn: Callable[[str, FileRecord], Any],
        *,
        pattern: str | list[str] | None = None,
        encoding: str = "utf-8",
    ) -> Stage:
        matches = _matcher(pattern)

        async def _text(record: FileRecord) -> FileRecord:
            if matches(record):
                text = await _call(fn, record.contents.decode(encoding), record)
                record.contents = text.encode(encoding)
            return record

        return _text

    def json(
        self,
        fn: Callable[[Any, FileRecord], Any],
        *,
        pattern: str | list[str] | None = "*.json",
        indent: int = 2,
    ) -> Stage:
        matches = _matcher(pattern)

        async def _json(record: FileRecord) -> FileRecord:
            if matches(record):
                data = json.loads(record.contents.decode("utf-8"))
                data = await _call(fn, data, record)
                record.contents = (json.dumps(data, indent=indent) + "\n").encode("utf-8")
            return record

        return _json

    def rename(
        self,
        fn: Callable[[str, FileRecord], Any],
        *,
        pattern: str | list[str] | None = None,
    ) -> Stage:
        matches = _matcher(pattern)

        async def _rename(record: FileRecord) -> FileRecord:
            if matches(record):
                relative = await _call(fn, record.relative.as_posix(), record)
                record.path = record.base / Path(relative)
            return record

        return _rename


modify = _Modify()

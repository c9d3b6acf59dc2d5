"""Generator loading and invocation.

:func:`load_generator` validates the arguments, resolves the generator
source, builds the :class:`Api` handed to the generator together with a
:class:`Context`, and picks the generator function: ``generate`` from the
source's ``.sproutrc.py`` when it exists, the built-in default otherwise.
:func:`create` then calls it.

Usage::

    from sprout.loader import ParsedArgs, create

    await create(ParsedArgs(positional=["./my-generator", "./my-app"]))
"""

from __future__ import annotations

import asyncio
import dataclasses
import importlib.machinery
import importlib.util
import inspect
import os
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from sprout import helpers
from sprout.config import Settings
from sprout.default_generator import generate as default_generate
from sprout.errors import (
    FileSystemError,
    MissingDirectoryError,
    MissingGeneratorError,
    UserGeneratorError,
)
from sprout.plugins import gitignore, modify, packages, template
from sprout.resolver import ResolvedSource, resolve
from sprout.stream import FileRecord, FileStream, Stage, glob_files, pipeline
from sprout.utils import console

GeneratorFn = Callable[["Api", "Context"], Any]


class ParsedArgs(BaseModel):
    """Command-line arguments as seen by a generator."""

    positional: list[str] = Field(default_factory=list)
    clone: bool = Field(default=False, description="Acquire package references with git")
    extra: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class Api:
    """Functions a generator uses to read, transform and write files."""

    src: Callable[..., FileStream]
    dest: Callable[..., Stage]
    pipeline: Callable[..., Any]
    packages: Callable[..., Stage]
    modify: Any
    template: Callable[..., Stage]
    install: Callable[..., Any]
    git_init: Callable[..., Any]
    prompts: Callable[..., dict[str, Any]]
    source: ResolvedSource


@dataclass
class Context:
    """Per-run metadata handed to a generator."""

    path: Path
    name: str
    argv: ParsedArgs
    # Deprecated: use the same helpers on ``Api``.
    install: Callable[..., Any] | None = None
    git_init: Callable[..., Any] | None = None
    prompts: Callable[..., dict[str, Any]] | None = None


# ---------------------------------------------------------------------------
# Capability surface
# ---------------------------------------------------------------------------


def make_dest(source_root: Path, destination: Path) -> Callable[..., Stage]:
    """Build ``dest(folder=None)`` for one run.

    Relative folders are resolved against the source root; the default folder
    is the run's destination.
    """

    def dest(folder: str | Path | None = None) -> Stage:
        out_base = Path(os.path.normpath(source_root / (folder or destination)))

        async def _write(record: FileRecord) -> FileRecord:
            record.rebase(out_base)
            try:
                await asyncio.to_thread(record.dirname.mkdir, parents=True, exist_ok=True)
                await asyncio.to_thread(record.path.write_bytes, record.contents)
            except OSError as exc:
                raise FileSystemError.wrap(exc, f"Cannot write {record.path}") from exc
            return record

        return _write

    return dest


def make_src(
    source_root: Path, name: str, settings: Settings
) -> Callable[..., FileStream]:
    """Build ``src(globs, ignore=())`` for one run."""

    def src(globs: str | Sequence[str], *, ignore: Iterable[str] = ()) -> FileStream:
        files = glob_files(
            globs,
            cwd=source_root,
            ignore=ignore,
            default_ignore=settings.default_ignore,
        )
        return FileStream(files).pipe(gitignore(source_root), packages({"name": name}))

    return src


def _apply_overrides(target: Any, overrides: Mapping[str, Any]) -> Any:
    """Shallow-merge *overrides* onto a copy of *target*; new keys are added."""
    known = {f.name for f in dataclasses.fields(target)}
    merged = dataclasses.replace(
        target, **{k: v for k, v in overrides.items() if k in known}
    )
    for key, value in overrides.items():
        if key not in known:
            # Api is frozen
            object.__setattr__(merged, key, value)
    return merged


# ---------------------------------------------------------------------------
# Configuration script
# ---------------------------------------------------------------------------


def load_rc_file(path: Path) -> GeneratorFn:
    """Import a configuration script and return its ``generate`` callable."""
    module_name = f"sprout_rc_{abs(hash(str(path)))}"
    loader = importlib.machinery.SourceFileLoader(module_name, str(path))
    spec = importlib.util.spec_from_loader(module_name, loader)
    module = importlib.util.module_from_spec(spec)
    # dataclasses and pydantic resolve annotations through sys.modules.
    sys.modules[module_name] = module
    try:
        loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise UserGeneratorError(f"Failed to load {path}: {exc}") from exc

    fn = getattr(module, "generate", None)
    if not callable(fn):
        raise UserGeneratorError(f"{path} does not define a generate(api, context) function")
    return fn


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


async def load_generator(
    argv: ParsedArgs,
    *,
    mock: tuple[Mapping[str, Any], Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
) -> tuple[GeneratorFn, Api, Context]:
    """Resolve the generator named in *argv* and prepare its invocation.

    Args:
        argv: Parsed arguments; ``positional`` holds the generator reference
            and the destination directory.
        mock: Optional ``(api_overrides, context_overrides)`` merged over the
            built objects before they are returned.
        settings: Run settings.

    Returns:
        ``(generate, api, context)``.

    Raises:
        MissingGeneratorError: No generator reference given.
        MissingDirectoryError: No destination directory given.
        SourceAcquisitionError: The generator could not be downloaded.
        UserGeneratorError: The configuration script could not be loaded.
    """
    settings = settings or Settings()
    generator = argv.positional[0] if len(argv.positional) > 0 else ""
    directory = argv.positional[1] if len(argv.positional) > 1 else ""

    if not generator:
        raise MissingGeneratorError()
    if not directory:
        raise MissingDirectoryError()

    source = await resolve(generator, clone=argv.clone, settings=settings)

    dest_path = Path(directory).expanduser().resolve()
    name = dest_path.name

    install = partial(helpers.install, cwd=dest_path, settings=settings)
    git_init = partial(helpers.git_init, cwd=dest_path, settings=settings)

    api = Api(
        src=make_src(source.path, name, settings),
        dest=make_dest(source.path, dest_path),
        pipeline=pipeline,
        packages=packages,
        modify=modify,
        template=template,
        install=install,
        git_init=git_init,
        prompts=helpers.prompts,
        source=source,
    )
    context = Context(
        path=dest_path,
        name=name,
        argv=argv,
        install=install,
        git_init=git_init,
        prompts=helpers.prompts,
    )

    if mock:
        api_overrides, context_overrides = mock
        api = _apply_overrides(api, api_overrides or {})
        context = _apply_overrides(context, context_overrides or {})

    if not settings.quiet:
        console.print(f"Creating [green]{name}[/green]...")

    rc_file = source.path / settings.rc_filename
    if await asyncio.to_thread(rc_file.is_file):
        fn = load_rc_file(rc_file)
    else:
        fn = default_generate
    return fn, api, context


async def create(
    argv: ParsedArgs,
    *,
    mock: tuple[Mapping[str, Any], Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
) -> Any:
    """Load the generator and run it, returning whatever it returns."""
    fn, api, context = await load_generator(argv, mock=mock, settings=settings)
    result = fn(api, context)
    if inspect.isawaitable(result):
        result = await result
    return result

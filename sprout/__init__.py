"""sprout -- create projects from generators.

A generator is a local directory, an npm package or a git repository whose
optional ``.sproutrc.py`` defines ``generate(api, context)``.  sprout
resolves the generator, then lets it stream template files through a
pipeline into the new project.

Quick usage::

    from sprout import ParsedArgs, create

    await create(ParsedArgs(positional=["./my-generator", "./my-app"]))
"""

from sprout.config import Settings
from sprout.errors import (
    CommandError,
    FileSystemError,
    MissingArgumentError,
    MissingDirectoryError,
    MissingGeneratorError,
    SourceAcquisitionError,
    SproutError,
    UserGeneratorError,
)
from sprout.loader import Api, Context, ParsedArgs, create, load_generator
from sprout.resolver import ResolvedSource, SourceKind, resolve
from sprout.stream import FileRecord, FileStream, glob_files, pipeline

__version__ = "0.1.0"

__all__ = [
    "Api",
    "CommandError",
    "Context",
    "FileRecord",
    "FileStream",
    "FileSystemError",
    "MissingArgumentError",
    "MissingDirectoryError",
    "MissingGeneratorError",
    "ParsedArgs",
    "ResolvedSource",
    "Settings",
    "SourceAcquisitionError",
    "SourceKind",
    "SproutError",
    "UserGeneratorError",
    "create",
    "glob_files",
    "load_generator",
    "pipeline",
    "resolve",
]

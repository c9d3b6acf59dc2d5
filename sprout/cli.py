"""Command-line entry point.

Usage::

    sprout ./my-generator ./my-app
    sprout my-generator-package ./my-app
    sprout https://github.com/me/my-generator.git#v2 ./my-app --clone

Unrecognised ``--key value`` options are passed to the generator in
``context.argv.extra``.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Coroutine, Mapping, Sequence
from typing import Any

from rich.markup import escape

from sprout.config import Settings
from sprout.errors import MissingArgumentError
from sprout.loader import ParsedArgs, create
from sprout.utils import console, print_error, print_success


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sprout",
        description="Create a project from a generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  sprout ./my-generator ./my-app\n"
            "  sprout my-generator-package ./my-app\n"
            "  sprout git@github.com:me/my-generator.git#main ./my-app --clone\n"
        ),
    )
    parser.add_argument(
        "generator",
        nargs="?",
        default="",
        help="Local path (starting with ~, . or /), npm package, or git repository",
    )
    parser.add_argument(
        "directory", nargs="?", default="", help="Directory to create the project in"
    )
    parser.add_argument(
        "--clone",
        action="store_true",
        help="Clone the generator with git instead of installing it from npm",
    )
    parser.add_argument(
        "--package-manager",
        choices=["auto", "npm", "yarn"],
        default=None,
        help="Package manager for downloads and installs (default: auto)",
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress progress output"
    )
    return parser


def _parse_extra(tokens: Sequence[str]) -> dict[str, Any]:
    """Turn leftover ``--key value`` / ``--flag`` tokens into a dict."""
    extra: dict[str, Any] = {}
    key: str | None = None
    for token in tokens:
        if token.startswith("--"):
            if key is not None:
                extra[key] = True
            name, sep, value = token[2:].partition("=")
            key = name.replace("-", "_")
            if sep:
                extra[key] = value
                key = None
        elif key is not None:
            extra[key] = token
            key = None
    if key is not None:
        extra[key] = True
    return extra


def parse_args(
    args: Sequence[str], settings: Settings | None = None
) -> tuple[ParsedArgs, Settings]:
    """Parse *args* into generator arguments and run settings."""
    namespace, unknown = build_parser().parse_known_args(list(args))
    settings = settings or Settings.from_env()
    updates: dict[str, Any] = {}
    if namespace.package_manager:
        updates["package_manager"] = namespace.package_manager
    if namespace.quiet:
        updates["quiet"] = True
    if updates:
        settings = settings.model_copy(update=updates)

    argv = ParsedArgs(
        positional=[namespace.generator, namespace.directory],
        clone=namespace.clone,
        extra=_parse_extra(unknown),
    )
    return argv, settings


def run(args: Sequence[str] | None = None, settings: Settings | None = None) -> Any:
    """Run sprout with command-line *args*, exiting with status 1 on failure."""
    argv, settings = parse_args(sys.argv[1:] if args is None else args, settings)
    try:
        result = asyncio.run(create(argv, settings=settings))
    except MissingArgumentError as exc:
        print_error(f"Error: {escape(str(exc))}")
        console.print(build_parser().format_usage(), markup=False)
        sys.exit(1)
    except Exception as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)

    if not settings.quiet:
        print_success("Done.")
    return result


def mock(
    generator: str,
    directory: str,
    *,
    api: Mapping[str, Any] | None = None,
    context: Mapping[str, Any] | None = None,
    clone: bool = False,
    settings: Settings | None = None,
    **extra: Any,
) -> Coroutine[Any, Any, Any]:
    """Return a coroutine running *generator* with API/context overrides.

    Intended for generator authors' tests::

        await mock("./", str(tmp_path), api={"install": fake_install})
    """
    argv = ParsedArgs(positional=[generator, directory], clone=clone, extra=extra)
    return create(argv, mock=(api or {}, context or {}), settings=settings)


def main() -> None:
    """Console-script entry point."""
    run()


if __name__ == "__main__":
    main()

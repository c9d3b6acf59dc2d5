"""Exception hierarchy for sprout.

Every error raised by the core derives from :class:`SproutError` so the CLI
can report a failed run with a single ``except`` clause.  The core never
recovers locally: shell exit statuses and ``OSError`` details are carried on
the exceptions instead of being swallowed.
"""

from __future__ import annotations


class SproutError(Exception):
    """Base class for all sprout errors."""


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------


class MissingArgumentError(SproutError):
    """Raised when a required positional argument is absent."""


class MissingGeneratorError(MissingArgumentError):
    def __init__(self) -> None:
        super().__init__("Generator required.")


class MissingDirectoryError(MissingArgumentError):
    def __init__(self) -> None:
        super().__init__("Directory required.")


# ---------------------------------------------------------------------------
# Shell invocation
# ---------------------------------------------------------------------------


class CommandError(SproutError):
    """Raised when an external command (npm, yarn, git) fails."""

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class SourceAcquisitionError(CommandError):
    """Raised when a generator cannot be downloaded, installed or cloned."""


# ---------------------------------------------------------------------------
# Filesystem and user code
# ---------------------------------------------------------------------------


class FileSystemError(SproutError, OSError):
    """Raised when reading, creating or writing pipeline files fails.

    Behaves like the underlying ``OSError`` (``errno``, ``strerror`` and
    ``filename`` are preserved) and is chained to it.
    """

    @classmethod
    def wrap(cls, exc: OSError, action: str) -> "FileSystemError":
        return cls(exc.errno, f"{action}: {exc.strerror or exc}", exc.filename)


class UserGeneratorError(SproutError):
    """Raised when a generator's configuration script cannot be loaded."""

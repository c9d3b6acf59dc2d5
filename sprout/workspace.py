"""Ephemeral workspaces for generator downloads.

Each call returns a freshly created directory under the system temp
directory.  Names are generated by :func:`tempfile.mkdtemp`, which creates the
directory atomically, so concurrent runs never share a workspace.  Workspaces
are not removed by sprout; their lifetime is that of the temp directory.
"""

from __future__ import annotations

import tempfile
from pathlib import Path


def create_temp_dir(prefix: str = "sprout", parent: str | Path | None = None) -> Path:
    """Create and return a new, uniquely named empty directory.

    Args:
        prefix: Leading part of the directory name.
        parent: Directory to create it in.  Defaults to the system temp dir.
    """
    path = tempfile.mkdtemp(prefix=f"{prefix}-", dir=str(parent) if parent else None)
    return Path(path).resolve()

"""Generator used when a source has no configuration script.

Copies every file of the source into the destination, names the project's
``package.json`` after the destination, installs its dependencies and
commits the result to a fresh git repository. An empty source leaves
nothing to commit, so no repository is created.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


async def generate(api: Any, context: Any) -> list[Path]:
    written = await api.pipeline(
        api.src(["**", "!.git/"]),
        api.packages({"name": context.name}, write=True),
        api.dest(),
    )
    if context.path / "package.json" in written:
        await api.install()
    if written:
        await api.git_init()
    return written

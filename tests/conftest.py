"""Shared pytest fixtures for the sprout test suite.

Provides reusable fixtures for:
- Quiet run settings
- Generator source trees built in temporary directories
- Fresh destination directories
- Mock subprocess helpers
- Git identity for tests that commit
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from sprout.config import Settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    """Settings with progress output disabled."""
    return Settings(quiet=True, package_manager="npm")


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

def write_tree(root: Path, files: Mapping[str, str | bytes]) -> Path:
    """Create *files* (relative path -> contents) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, contents in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(contents, bytes):
            target.write_bytes(contents)
        else:
            target.write_text(contents, encoding="utf-8")
    return root


@pytest.fixture
def make_generator(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a generator source directory.

    Usage:
        def test_x(make_generator):
            gen = make_generator({"README.md": "# hi\\n"})
    """
    counter = {"n": 0}

    def factory(files: Mapping[str, str | bytes], name: str | None = None) -> Path:
        counter["n"] += 1
        return write_tree(tmp_path / (name or f"generator-{counter['n']}"), files)

    return factory


BASIC_RC = '''\
async def generate(api, context):
    return await api.pipeline(
        api.src(["template/**"]),
        api.template({"name": context.name}),
        api.dest(),
    )
'''

BASIC_FILES: dict[str, str | bytes] = {
    ".sproutrc.py": BASIC_RC,
    ".gitignore": "*.log\n",
    "template/README.md": "# {{ name }}\n",
    "template/index.js": "module.exports = () => 'hello'\n",
    "template/.editorconfig": "root = true\n",
    "template/packages/core/package.json": '{\n  "name": "core",\n  "version": "1.0.0"\n}\n',
    "template/packages/core/index.js": "export default {}\n",
    "template/debug.log": "should be ignored\n",
    "template/node_modules/dep/index.js": "should be excluded\n",
}


@pytest.fixture
def basic_generator(make_generator) -> Path:
    """A generator whose config script renders ``template/**`` into the destination."""
    return make_generator(BASIC_FILES, name="basic-generator")


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """Path of a destination directory that does not exist yet."""
    return tmp_path / "output" / "my-app"


# ---------------------------------------------------------------------------
# Subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------

@pytest.fixture
def git_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give child git processes an identity so commits succeed in CI."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Sprout Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@sprout.local")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Sprout Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@sprout.local")


@pytest.fixture
def tmp_git_repo(tmp_path: Path, git_identity) -> Path:
    """Temporary git repository holding a generator, tagged ``v1``.

    The ``main`` branch gets a second commit after the tag so tests can tell
    which ref was cloned.
    """
    repo_dir = write_tree(
        tmp_path / "generator-repo",
        {"README.md": "# v1\n", "src/app.js": "console.log('v1')\n"},
    )

    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=repo_dir, check=True, capture_output=True)

    git("init", "-b", "main")
    git("config", "commit.gpgsign", "false")
    git("add", ".")
    git("commit", "-m", "v1")
    git("tag", "v1")
    (repo_dir / "README.md").write_text("# v2\n", encoding="utf-8")
    git("commit", "-am", "v2")
    yield repo_dir

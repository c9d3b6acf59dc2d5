"""End-to-end tests for project creation.

These tests run sprout against real generator directories and, where the
executables are available, real ``git`` and ``npm``:

- Local generator rendering templates and initialising git
- Two runs into different destinations differ only by project name
- Generator cloned from a git repository, default branch and pinned tag
- Generator installed from npm (opt-in, needs network access)
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from sprout.config import Settings
from sprout.loader import ParsedArgs, create

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
requires_npm = pytest.mark.skipif(
    shutil.which("npm") is None or not os.environ.get("SPROUT_NETWORK_TESTS"),
    reason="npm tests need npm and SPROUT_NETWORK_TESTS=1",
)

GIT_RC = '''\
async def generate(api, context):
    await api.pipeline(
        api.src(["template/**"]),
        api.template({"name": context.name}),
        api.dest(),
    )
    await api.git_init()
'''


def _tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file() and ".git" not in p.relative_to(root).parts
    }


@pytest.fixture
def quiet() -> Settings:
    return Settings(quiet=True)


@pytest.mark.integration
@requires_git
class TestLocalGenerator:
    async def test_renders_and_initialises_git(
        self, basic_generator: Path, tmp_path: Path, git_identity, quiet
    ) -> None:
        (basic_generator / ".sproutrc.py").write_text(GIT_RC, encoding="utf-8")
        dest = tmp_path / "fresh-app"

        await create(ParsedArgs(positional=[str(basic_generator), str(dest)]), settings=quiet)

        assert (dest / ".git").is_dir()
        files = _tree(dest)
        assert sorted(files) == [
            ".editorconfig",
            "README.md",
            "index.js",
            "packages/core/index.js",
            "packages/core/package.json",
        ]
        assert files["README.md"] == b"# fresh-app\n"
        assert files["index.js"] == (basic_generator / "template/index.js").read_bytes()

        log = subprocess.run(
            ["git", "log", "--format=%s"], cwd=dest, check=True, capture_output=True, text=True
        )
        assert log.stdout.strip() == "init"

    async def test_runs_are_identical_up_to_name(
        self, basic_generator: Path, tmp_path: Path, quiet
    ) -> None:
        first, second = tmp_path / "alpha", tmp_path / "beta"
        for dest in (first, second):
            await create(ParsedArgs(positional=[str(basic_generator), str(dest)]), settings=quiet)

        first_files, second_files = _tree(first), _tree(second)
        assert sorted(first_files) == sorted(second_files)
        for name, contents in first_files.items():
            assert contents.replace(b"alpha", b"beta") == second_files[name]


@pytest.mark.integration
@requires_git
class TestGitGenerator:
    async def test_clone_default_branch(self, tmp_git_repo: Path, tmp_path: Path, quiet) -> None:
        dest = tmp_path / "cloned-app"
        await create(
            ParsedArgs(positional=[tmp_git_repo.as_uri(), str(dest)], clone=True),
            settings=quiet,
        )
        assert (dest / "README.md").read_text() == "# v2\n"
        assert (dest / "src/app.js").exists()
        assert (dest / ".git").is_dir()

    async def test_clone_pinned_tag(self, tmp_git_repo: Path, tmp_path: Path, quiet) -> None:
        dest = tmp_path / "pinned-app"
        await create(
            ParsedArgs(positional=[f"{tmp_git_repo.as_uri()}#v1", str(dest)], clone=True),
            settings=quiet,
        )
        assert (dest / "README.md").read_text() == "# v1\n"

    async def test_clone_matches_local_checkout(
        self, tmp_git_repo: Path, tmp_path: Path, quiet
    ) -> None:
        cloned, local = tmp_path / "from-git", tmp_path / "from-path"
        await create(
            ParsedArgs(positional=[tmp_git_repo.as_uri(), str(cloned)], clone=True),
            settings=quiet,
        )
        await create(ParsedArgs(positional=[str(tmp_git_repo), str(local)]), settings=quiet)
        assert _tree(cloned) == _tree(local)


@pytest.mark.integration
@requires_npm
class TestNpmGenerator:
    async def test_install_from_npm(self, tmp_path: Path, git_identity) -> None:
        dest = tmp_path / "npm-app"
        settings = Settings(quiet=True, package_manager="npm")
        await create(ParsedArgs(positional=["gogen-pkg", str(dest)]), settings=settings)
        assert (dest / "package.json").exists()
        assert (dest / "node_modules").is_dir()

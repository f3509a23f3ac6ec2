"""Shared fixtures for sdvpack tests."""

from pathlib import Path

import pytest

from sdvpack.config import InvocationContext


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small mod workspace: a.txt, sub/, sub/b.txt."""
    root = tmp_path / "MyMod"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha\n")
    (root / "sub" / "b.txt").write_text("bravo\n")
    return root


@pytest.fixture
def game_path(tmp_path: Path) -> Path:
    path = tmp_path / "Stardew Valley"
    path.mkdir()
    return path


@pytest.fixture
def ctx(workspace: Path, game_path: Path) -> InvocationContext:
    return InvocationContext(workspace_root=workspace, platform="linux", game_path=str(game_path))

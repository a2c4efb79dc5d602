"""
pytest configuration and shared fixtures for xstack tests.

This module provides fixtures and configuration used across all test modules.
Fixtures defined here are automatically available to all tests.

Fixtures
--------
make_config : Callable[..., ProjectConfig]
    Build a configuration whose project lands in a temporary directory.

template_root : Path
    A small template tree (one subtree per language) for engine tests.

fake_run : MagicMock
    ``subprocess.run`` as seen by ``xstack.pipeline``, patched out.

project_files : Callable[[Path], set[str]]
    Lists the files of a generated project.
"""

import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from xstack.models import ProjectConfig


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., ProjectConfig]:
    """
    Factory for configurations rooted in ``tmp_path``.

    Returns
    -------
    Callable[..., ProjectConfig]
        Accepts any ``ProjectConfig`` field as a keyword argument; ``name``
        defaults to ``demo``.
    """
    def factory(**overrides: object) -> ProjectConfig:
        data: dict[str, object] = {"name": "demo", "output_dir": tmp_path}
        data.update(overrides)
        return ProjectConfig(**data)

    return factory


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """
    Create a miniature template tree.

    Layout::

        templates/
        └── typescript/
            ├── README.md.j2
            ├── notes.txt
            └── src/
                ├── db/mongodb/user.model.ts.j2
                ├── db/postgresql/db.ts.j2
                └── middlewares/upload.ts.j2
    """
    root = tmp_path / "templates"
    lang = root / "typescript"
    (lang / "src" / "db" / "mongodb").mkdir(parents=True)
    (lang / "src" / "db" / "postgresql").mkdir(parents=True)
    (lang / "src" / "middlewares").mkdir(parents=True)

    (lang / "README.md.j2").write_text("# {{ project_name }}\n")
    (lang / "notes.txt").write_text("plain {{ language }}\n")
    (lang / "src" / "db" / "mongodb" / "user.model.ts.j2").write_text("mongoose\n")
    (lang / "src" / "db" / "postgresql" / "db.ts.j2").write_text("drizzle\n")
    (lang / "src" / "middlewares" / "upload.ts.j2").write_text("multer\n")
    return root


@pytest.fixture
def fake_run() -> Iterator[MagicMock]:
    """Patch ``subprocess.run`` for the post-scaffold pipeline."""
    with patch("xstack.pipeline.subprocess.run") as mock_run:
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        yield mock_run


def _project_files(project_dir: Path) -> set[str]:
    return {
        path.relative_to(project_dir).as_posix()
        for path in project_dir.rglob("*")
        if path.is_file()
    }


@pytest.fixture
def project_files() -> Callable[[Path], set[str]]:
    """Relative POSIX paths of every file under a project directory."""
    return _project_files


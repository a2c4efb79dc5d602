"""
xstack.errors - Exception Hierarchy
===================================

Every failure xstack knows how to report is a ``ScaffoldError``. Each class
carries a ``cleanup_required`` flag that tells the lifecycle controller
whether the partially created project directory should be removed.

    ScaffoldError (cleanup)
    ├── ConfigurationError    bad project name or incompatible choices
    ├── DirectoryExistsError  destination already exists (no cleanup)
    ├── RenderError           malformed template (cleanup)
    ├── InstallError          package manager failed (cleanup)
    ├── FormatError           formatter failed (never fatal)
    └── ScaffoldCancelled     user interrupt or prompt abort (cleanup)
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""

    cleanup_required: bool = True


class ConfigurationError(ScaffoldError, ValueError):
    """The configuration vector could not be built from the answers."""

    cleanup_required = False


class DirectoryExistsError(ScaffoldError, FileExistsError):
    """
    The project directory already exists.

    Nothing was created by this run, so there is nothing to remove.
    """

    cleanup_required = False

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Directory '{path.name}' already exists. "
            "Please choose a different name or delete it."
        )


class RenderError(ScaffoldError):
    """A template file could not be rendered."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Failed to render {template}: {reason}")


class InstallError(ScaffoldError):
    """Dependency installation exited non-zero or could not start."""


class FormatError(ScaffoldError):
    """The formatter exited non-zero. Reported as a warning only."""

    cleanup_required = False


class ScaffoldCancelled(ScaffoldError):
    """The user aborted a prompt or interrupted the run."""

"""
xstack.pipeline - Post-Scaffold Commands
========================================

Runs the package manager inside the freshly generated project:

    1. ``<pm> install``          failure is fatal (InstallError)
    2. ``<pm> run prettier``     failure is a warning (FormatError)

Output is passed straight through to the terminal. There are no timeouts
and no retries; a hung command blocks until the user interrupts it.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from xstack.errors import FormatError, InstallError
from xstack.models import PackageManager


logger = logging.getLogger(__name__)

FORMAT_SCRIPT = "prettier"


def _run(command: list[str], cwd: Path) -> None:
    logger.debug("Running %s in %s", " ".join(command), cwd)
    subprocess.run(command, cwd=cwd, check=True)


def install_dependencies(project_dir: Path, package_manager: PackageManager) -> None:
    """
    Install the project's dependencies.

    Raises
    ------
    InstallError
        If the package manager is missing or exits non-zero.
    """
    command = [package_manager.value, "install"]
    try:
        _run(command, project_dir)
    except subprocess.CalledProcessError as e:
        raise InstallError(
            f"Failed to install dependencies: '{' '.join(command)}' "
            f"exited with status {e.returncode}"
        ) from e
    except FileNotFoundError as e:
        raise InstallError(
            f"Failed to install dependencies: {package_manager.value} is not installed"
        ) from e


def format_project(
    project_dir: Path,
    package_manager: PackageManager,
    script: str = FORMAT_SCRIPT,
) -> None:
    """
    Format the generated code with the project's formatter script.

    Raises
    ------
    FormatError
        If the script fails. Callers treat this as a warning.
    """
    command = [package_manager.value, "run", script]
    try:
        _run(command, project_dir)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise FormatError(
            f"Code formatting failed: {e}. "
            f"Please run '{' '.join(command)}' manually."
        ) from e

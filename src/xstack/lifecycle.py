"""
xstack.lifecycle - Scaffolding Lifecycle and Cleanup
====================================================

This module owns a scaffolding run from the first prompt to the final
message. It tracks which stage the run is in, honours cancellation, and
removes the project directory when a run fails or is cancelled.

Architecture
------------
The controller is a small state machine:

    IDLE → PROMPTING → SCAFFOLDING → INSTALLING → FORMATTING → DONE
                 └──────────┴─────────────┴────────────┴──→ CANCELLING

- **Fatal errors** (``cleanup_required``): the recorded project directory is
  removed in its entirety, then the error propagates.
- **DirectoryExistsError**: propagates without cleanup, since this run
  created nothing.
- **FormatError**: becomes a warning; the run still reaches DONE.
- **Cancellation**: a ``KeyboardInterrupt`` anywhere, or a cancelled
  ``CancellationToken`` at a stage boundary, moves the run to CANCELLING,
  removes the project directory and raises ``ScaffoldCancelled``.

The project directory is recorded only after this run has created it, so
cleanup never touches anything the run does not own.

Usage Example
-------------
>>> from xstack.lifecycle import create_project
>>> from xstack.models import ProjectConfig
>>> config = ProjectConfig(name="demo")
>>> result = create_project(config, install=False, format_code=False)
>>> result.stage
<Stage.DONE: 'done'>
"""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from xstack.errors import (
    DirectoryExistsError,
    FormatError,
    ScaffoldCancelled,
    ScaffoldError,
)
from xstack.pipeline import format_project, install_dependencies
from xstack.renderer import TEMPLATE_ROOT, Renderer
from xstack.walker import materialize


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from typing import Any

    from xstack.models import ProjectConfig


logger = logging.getLogger(__name__)

# Console for rich output
console = Console()


class Stage(str, Enum):
    """Stages of a scaffolding run."""

    IDLE = "idle"
    PROMPTING = "prompting"
    SCAFFOLDING = "scaffolding"
    INSTALLING = "installing"
    FORMATTING = "formatting"
    DONE = "done"
    CANCELLING = "cancelling"


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Another thread (or a signal handler) calls ``cancel()``; the controller
    and the template walker call ``raise_if_cancelled()`` at safe points.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScaffoldCancelled("Project creation cancelled by user.")


@dataclass
class ScaffoldResult:
    """
    Outcome of a successful run.

    Attributes
    ----------
    config : ProjectConfig
        Configuration the project was created from.

    project_path : Path
        Absolute path of the created project.

    files_created : list[Path]
        Every file written from the templates.

    warnings : list[str]
        Non-fatal problems, such as a formatter failure.

    stage : Stage
        Final stage reached (``DONE`` for a completed run).
    """

    config: ProjectConfig
    project_path: Path
    files_created: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stage: Stage = Stage.DONE


class ScaffoldController:
    """
    Drives one scaffolding run and cleans up after it.

    Parameters
    ----------
    install : bool, default=True
        Run ``<pm> install`` after the templates are written.

    format_code : bool, default=True
        Run the formatter script after installation.

    token : CancellationToken | None
        Token checked at every stage boundary and between template files.

    template_root : Path
        Directory holding one template subtree per language.

    filters, tests : Mapping | None
        Jinja2 helpers handed to the ``Renderer``.

    verbose : bool, default=True
        Print progress to the console.
    """

    def __init__(
        self,
        *,
        install: bool = True,
        format_code: bool = True,
        token: CancellationToken | None = None,
        template_root: Path = TEMPLATE_ROOT,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        tests: Mapping[str, Callable[..., bool]] | None = None,
        verbose: bool = True,
    ) -> None:
        self.install = install
        self.format_code = format_code
        self.token = token or CancellationToken()
        self.template_root = template_root
        self.filters = filters
        self.tests = tests
        self.verbose = verbose

        self.stage = Stage.IDLE
        self.history: list[Stage] = [Stage.IDLE]
        self.destination: Path | None = None

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(self, configure: Callable[[], ProjectConfig]) -> ScaffoldResult:
        """
        Run every stage in order.

        Parameters
        ----------
        configure : Callable[[], ProjectConfig]
            Produces the configuration, usually by prompting the user.
            Called once, during the PROMPTING stage.

        Returns
        -------
        ScaffoldResult
            Details of the created project.

        Raises
        ------
        ScaffoldError
            Any fatal failure, after cleanup where it applies. Cancellation
            surfaces as ``ScaffoldCancelled``.
        """
        try:
            self._enter(Stage.PROMPTING)
            config = configure()
            self.token.raise_if_cancelled()

            self._enter(Stage.SCAFFOLDING)
            result = ScaffoldResult(
                config=config,
                project_path=config.project_dir.resolve(),
            )
            result.files_created = self._scaffold(config)
            self.token.raise_if_cancelled()

            if self.install:
                self._enter(Stage.INSTALLING)
                self._install(config)
                self.token.raise_if_cancelled()

            if self.format_code:
                self._enter(Stage.FORMATTING)
                self._format(config, result)

            self._enter(Stage.DONE)
            result.stage = self.stage
            return result

        except KeyboardInterrupt:
            self.token.cancel()
            error = ScaffoldCancelled("Project creation aborted by user.")
            self._abort(error)
            raise error from None

        except ScaffoldError as e:
            self._abort(e)
            raise

        except OSError as e:
            error = ScaffoldError(
                f"An unexpected error occurred during project creation: {e}"
            )
            self._abort(error)
            raise error from e

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _enter(self, stage: Stage) -> None:
        logger.debug("Stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage
        self.history.append(stage)

    def _scaffold(self, config: ProjectConfig) -> list[Path]:
        project_dir = config.project_dir

        if project_dir.exists():
            raise DirectoryExistsError(project_dir)

        if self.verbose:
            console.print(f"\n[green]Scaffolding project [bold]{config.name}[/bold]...[/]")

        try:
            project_dir.mkdir()
        except FileExistsError as e:
            raise DirectoryExistsError(project_dir) from e
        self.destination = project_dir

        source_root = self.template_root / config.language.template_dir
        renderer = Renderer(source_root, filters=self.filters, tests=self.tests)
        files = materialize(source_root, project_dir, config.flags, renderer, self.token)

        if self.verbose:
            for path in files:
                console.print(f"  [dim]Created[/] {path.relative_to(project_dir)}")

        return files

    def _install(self, config: ProjectConfig) -> None:
        manager = config.package_manager.value
        if self.verbose:
            console.print(f"\n[yellow]Installing dependencies with {manager}...[/]")

        install_dependencies(config.project_dir, config.package_manager)

        if self.verbose:
            console.print("[green]Dependencies installed successfully.[/]")

    def _format(self, config: ProjectConfig, result: ScaffoldResult) -> None:
        if self.verbose:
            console.print("\n[yellow]Formatting code with Prettier...[/]")

        try:
            format_project(config.project_dir, config.package_manager)
        except FormatError as e:
            result.warnings.append(str(e))
            console.print(f"[yellow]Warning: {e}[/]")
            return

        if self.verbose:
            console.print("[green]Code formatted successfully.[/]")

    # -------------------------------------------------------------------------
    # Failure Handling
    # -------------------------------------------------------------------------

    def _abort(self, error: ScaffoldError) -> None:
        if isinstance(error, ScaffoldCancelled):
            self._enter(Stage.CANCELLING)
            console.print(f"\n[yellow]{error}[/]")

        if error.cleanup_required:
            self.cleanup()

    def cleanup(self) -> bool:
        """
        Remove the project directory this run created, if any.

        Returns
        -------
        bool
            True if a directory was removed.
        """
        destination = self.destination
        self.destination = None

        if destination is None or not destination.exists():
            return False

        console.print(
            f"[red]Cleaning up partially created project directory: {destination}[/]"
        )
        try:
            shutil.rmtree(destination)
        except OSError as e:
            console.print(f"[red]Error during cleanup: {e}[/]")
            return False
        return True


def create_project(
    config: ProjectConfig,
    *,
    install: bool = True,
    format_code: bool = True,
    verbose: bool = True,
) -> ScaffoldResult:
    """
    Create a project from an already-built configuration.

    This is the library entry point; the CLI adds prompting on top.

    Parameters
    ----------
    config : ProjectConfig
        Configuration to scaffold.

    install : bool, default=True
        Run ``<pm> install`` afterwards.

    format_code : bool, default=True
        Run ``<pm> run prettier`` afterwards.

    verbose : bool, default=True
        Print progress to the console.

    Returns
    -------
    ScaffoldResult
        Details of the created project.

    Raises
    ------
    ScaffoldError
        On any fatal failure, after cleanup where it applies.
    """
    controller = ScaffoldController(
        install=install,
        format_code=format_code,
        verbose=verbose,
    )
    return controller.run(lambda: config)

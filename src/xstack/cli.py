"""
xstack.cli - Command Line Interface
===================================

This module provides the command-line interface for xstack using Typer,
with questionary for the interactive questionnaire and Rich for output.

Architecture
------------
There is a single command:

    create-xstack [PROJECT_NAME] [OPTIONS]

Every question has a matching flag, so the command is both interactive
(prompts for anything missing) and scriptable (``--yes`` accepts defaults
for anything not given). Answers can also come from a TOML file via
``--config``; flags win over the file.

Branding (program name, tagline, banner) is passed to ``build_app`` and
never reaches the scaffolding engine.

Usage Examples
--------------
Interactive mode:
    $ create-xstack my-api

Non-interactive mode:
    $ create-xstack my-api --database MongoDB --tool JWT --tool Multer --yes

Show help:
    $ create-xstack --help

See Also
--------
- lifecycle.py: Stage tracking, cancellation and cleanup
- models.py: Configuration data models
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import questionary
import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from xstack import __version__
from xstack.errors import ScaffoldCancelled, ScaffoldError
from xstack.lifecycle import CancellationToken, ScaffoldController, ScaffoldResult
from xstack.models import (
    DEFAULT_PROJECT_NAME,
    Database,
    Language,
    OrmOdm,
    PackageManager,
    ProjectConfig,
    Tool,
    load_answers,
    validate_project_name,
)


# Console for rich output
console = Console()


# =============================================================================
# Branding
# =============================================================================

@dataclass(frozen=True)
class Branding:
    """Presentation details of the command."""

    name: str
    tagline: str


DEFAULT_BRANDING = Branding(
    name="create-xstack",
    tagline="Scaffolds a new Express.js backend project.",
)


# =============================================================================
# Logging
# =============================================================================

def configure_logging(verbose: bool) -> None:
    """
    Route diagnostic logging through Rich.

    Parameters
    ----------
    verbose : bool
        Show DEBUG messages (skipped templates, stage changes, commands).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# =============================================================================
# Interactive Prompts
# =============================================================================

def _ask(question: questionary.Question) -> Any:
    """Ask a question; a None answer means the user aborted."""
    answer = question.ask()
    if answer is None:
        raise ScaffoldCancelled("Project creation cancelled by user.")
    return answer


def prompt_project_name() -> str:
    """
    Prompt for the project name with inline validation.

    Returns
    -------
    str
        A name matching ``^[a-z0-9-_]+$``.
    """
    return _ask(questionary.text(
        "What is your project name?",
        default=DEFAULT_PROJECT_NAME,
        validate=validate_project_name,
    ))


def prompt_language() -> Language:
    return _ask(questionary.select(
        "Which language do you want to use?",
        choices=[questionary.Choice(lang.value, value=lang) for lang in Language],
        default=Language.TYPESCRIPT,
    ))


def prompt_database() -> Database:
    return _ask(questionary.select(
        "Which database do you want to use?",
        choices=[questionary.Choice(db.value, value=db) for db in Database],
        default=Database.POSTGRESQL,
    ))


def prompt_orm_odm(database: Database) -> OrmOdm:
    """
    Prompt for the ORM/ODM.

    Only the library that works with ``database`` is offered.
    """
    orm = database.default_orm
    return _ask(questionary.select(
        "Which ORM/ODM do you want to use?",
        choices=[questionary.Choice(orm.value, value=orm)],
        default=orm,
    ))


def prompt_other_tools() -> list[Tool]:
    return _ask(questionary.checkbox(
        "Select other tools you want to include (press space to select):",
        choices=[questionary.Choice(tool.description, value=tool) for tool in Tool],
    ))


def prompt_package_manager() -> PackageManager:
    return _ask(questionary.select(
        "Which package manager do you want to use?",
        choices=[questionary.Choice(pm.value, value=pm) for pm in PackageManager],
        default=PackageManager.PNPM,
    ))


def ask_questions(
    preset: dict[str, Any], *, yes: bool, ask_name: bool = True
) -> dict[str, Any]:
    """
    Fill in every answer missing from ``preset``.

    Parameters
    ----------
    preset : dict[str, Any]
        Answers already known from flags or the config file.

    yes : bool
        Use defaults instead of prompting.

    ask_name : bool, default=True
        Prompt for the project name when ``preset`` has none. False when
        the name was given on the command line.

    Returns
    -------
    dict[str, Any]
        Answers for every question. Defaults are left out when ``yes`` is
        set so the model supplies them.

    Raises
    ------
    ScaffoldCancelled
        If the user aborts a prompt.
    """
    answers = dict(preset)
    if yes:
        answers.setdefault("name", DEFAULT_PROJECT_NAME)
        return answers

    if ask_name and "name" not in answers:
        answers["name"] = prompt_project_name()
    if "language" not in answers:
        answers["language"] = prompt_language()
    if "database" not in answers:
        answers["database"] = prompt_database()
    if "orm_odm" not in answers:
        try:
            database = Database(answers["database"])
        except ValueError:
            pass  # Reported by ProjectConfig validation
        else:
            answers["orm_odm"] = prompt_orm_odm(database)
    if "other_tools" not in answers:
        answers["other_tools"] = prompt_other_tools()
    if "package_manager" not in answers:
        answers["package_manager"] = prompt_package_manager()
    return answers


# =============================================================================
# Output
# =============================================================================

def print_summary(config: ProjectConfig) -> None:
    """Show the selected options as a table."""
    table = Table(title="Options selected", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Project Name", config.name)
    table.add_row("Language", config.language.value)
    table.add_row("Database", config.database.value)
    table.add_row("ORM/ODM", config.orm_odm.value)
    table.add_row(
        "Other Tools",
        ", ".join(tool.value for tool in config.other_tools) or "None",
    )
    table.add_row("Package Manager", config.package_manager.value)

    console.print()
    console.print(table)


def print_next_steps(result: ScaffoldResult) -> None:
    config = result.config
    manager = config.package_manager.value
    console.print()
    console.print(
        Panel(
            f"[bold green]🚀 Project [bold]{config.name}[/bold] created successfully![/]\n\n"
            f"[dim]Location:[/] {result.project_path}\n\n"
            f"[bold]Next steps:[/]\n"
            f"  cd {config.name}\n"
            f"  {manager} install\n"
            f"  {manager} run dev\n\n"
            f"[cyan]Happy coding![/]",
            title="[bold green]Success[/]",
            border_style="green",
        )
    )


# =============================================================================
# Application Factory
# =============================================================================

def build_app(branding: Branding = DEFAULT_BRANDING) -> typer.Typer:
    """
    Build the Typer application for a given branding.

    Parameters
    ----------
    branding : Branding
        Program name and tagline shown in help, banner and ``--version``.

    Returns
    -------
    typer.Typer
        Application with a single command.
    """
    app = typer.Typer(
        name=branding.name,
        help=branding.tagline,
        rich_markup_mode="rich",
        add_completion=False,
    )

    def version_callback(value: bool) -> None:
        if value:
            console.print(Panel(
                f"[bold green]{branding.name}[/] version [cyan]{__version__}[/]\n\n"
                f"[dim]{branding.tagline}[/]",
                border_style="green",
            ))
            raise typer.Exit()

    @app.command(help=branding.tagline)
    def create(
        project_name: Annotated[
            str | None,
            typer.Argument(help="Name of the project to create", show_default=False),
        ] = None,
        language: Annotated[
            Language | None,
            typer.Option("--language", "-l", help="TypeScript or JavaScript", case_sensitive=False),
        ] = None,
        database: Annotated[
            Database | None,
            typer.Option("--database", "-d", help="PostgreSQL or MongoDB", case_sensitive=False),
        ] = None,
        orm: Annotated[
            OrmOdm | None,
            typer.Option("--orm", help="Drizzle or Mongoose (must match the database)", case_sensitive=False),
        ] = None,
        tools: Annotated[
            list[Tool] | None,
            typer.Option("--tool", "-t", help="Extra tool to include (repeatable)", case_sensitive=False),
        ] = None,
        package_manager: Annotated[
            PackageManager | None,
            typer.Option("--package-manager", "-p", help="npm or pnpm", case_sensitive=False),
        ] = None,
        config_file: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="TOML file with answers", exists=True, dir_okay=False),
        ] = None,
        output_dir: Annotated[
            Path | None,
            typer.Option("--output", "-o", help="Directory to create project in (default: current directory)"),
        ] = None,
        yes: Annotated[
            bool,
            typer.Option("--yes", "-y", help="Skip all prompts, use defaults"),
        ] = False,
        skip_install: Annotated[
            bool,
            typer.Option("--skip-install", help="Do not install dependencies"),
        ] = False,
        skip_format: Annotated[
            bool,
            typer.Option("--skip-format", help="Do not run the formatter"),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Show debug output"),
        ] = False,
        version: Annotated[
            bool | None,
            typer.Option(
                "--version",
                "-V",
                help="Show version and exit.",
                callback=version_callback,
                is_eager=True,
            ),
        ] = None,
    ) -> None:
        configure_logging(verbose)

        if project_name is not None:
            verdict = validate_project_name(project_name.strip())
            if verdict is not True:
                rprint(f"[red]Error:[/] Invalid project name '{project_name}'. {verdict}")
                raise typer.Exit(1)

        # Flags win over the config file
        preset: dict[str, Any] = {}
        if config_file is not None:
            try:
                preset.update(load_answers(config_file))
            except ScaffoldError as e:
                rprint(f"[red]Error:[/] {e}")
                raise typer.Exit(1)

        flags = {
            "language": language,
            "database": database,
            "orm_odm": orm,
            "other_tools": tools or None,
            "package_manager": package_manager,
        }
        preset.update({key: value for key, value in flags.items() if value is not None})

        def configure() -> ProjectConfig:
            answers = ask_questions(preset, yes=yes, ask_name=project_name is None)
            config = ProjectConfig.from_answers(
                answers, project_name=project_name, output_dir=output_dir
            )
            print_summary(config)
            return config

        controller = ScaffoldController(
            install=not skip_install,
            format_code=not skip_format,
            token=CancellationToken(),
        )

        try:
            result = controller.run(configure)
        except ScaffoldCancelled:
            # The controller has already reported how the run was stopped
            raise typer.Exit(1)
        except ScaffoldError as e:
            rprint(f"[red]Error:[/] {e}")
            raise typer.Exit(1)

        print_next_steps(result)

    return app


app = build_app()


if __name__ == "__main__":
    app()

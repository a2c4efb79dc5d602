"""
xstack.models - Pydantic Models for the Configuration Vector
============================================================

This module turns the user's answers into the immutable configuration that
drives every later stage. We use Pydantic for validation and clear error
messages, and precompute a flat set of template flags once per run.

Architecture Notes
------------------
    ProjectConfig (frozen)
    ├── name: str                  ^[a-z0-9-_]+$
    ├── language: Language
    ├── database: Database
    ├── orm_odm: OrmOdm            derived from database when omitted
    ├── other_tools: tuple[Tool]   no duplicates
    ├── package_manager: PackageManager
    └── flags -> TemplateFlags     computed once, immutable

Usage Example
-------------
>>> from xstack.models import ProjectConfig, Database
>>> config = ProjectConfig(name="my-api", database=Database.MONGODB)
>>> config.orm_odm
<OrmOdm.MONGOOSE: 'Mongoose'>
>>> config.flags.is_mongoose
True
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from xstack.errors import ConfigurationError


PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9-_]+$")
DEFAULT_PROJECT_NAME = "express-project"


def validate_project_name(value: str) -> bool | str:
    """
    Check a project name, questionary-style.

    Returns ``True`` when the name is acceptable, otherwise the message to
    show the user. Shared by the interactive prompt and the model validator.
    """
    if not value:
        return "Project name cannot be empty."
    if not PROJECT_NAME_PATTERN.match(value):
        return (
            "Project name can only contain lowercase letters, numbers, "
            "hyphens, and underscores."
        )
    return True


# =============================================================================
# Enumerations
# =============================================================================

class Language(str, Enum):
    """Language of the generated backend."""

    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"

    @property
    def template_dir(self) -> str:
        """Name of this language's subtree in the template root."""
        return self.value.lower()


class Database(str, Enum):
    """Database the generated backend talks to."""

    POSTGRESQL = "PostgreSQL"
    MONGODB = "MongoDB"

    @property
    def default_orm(self) -> OrmOdm:
        """The only ORM/ODM offered for this database."""
        return OrmOdm.DRIZZLE if self is Database.POSTGRESQL else OrmOdm.MONGOOSE


class OrmOdm(str, Enum):
    """
    Data access library.

    Drizzle is only valid with PostgreSQL and Mongoose only with MongoDB.
    """

    DRIZZLE = "Drizzle"
    MONGOOSE = "Mongoose"

    @property
    def database(self) -> Database:
        return Database.POSTGRESQL if self is OrmOdm.DRIZZLE else Database.MONGODB


class Tool(str, Enum):
    """Optional utilities that add middleware and dependencies."""

    JWT = "JWT"
    BCRYPT = "Bcrypt"
    MULTER = "Multer"

    @property
    def description(self) -> str:
        """
        Human-readable label for the checkbox prompt.

        Returns
        -------
        str
            The tool name with a short explanation.
        """
        descriptions = {
            Tool.JWT: "JWT (JSON Web Tokens)",
            Tool.BCRYPT: "Bcrypt (password hashing)",
            Tool.MULTER: "Multer (file uploads)",
        }
        return descriptions[self]


class PackageManager(str, Enum):
    """Package manager used to install and format the project."""

    NPM = "npm"
    PNPM = "pnpm"


# =============================================================================
# Template Flags
# =============================================================================

@dataclass(frozen=True)
class TemplateFlags:
    """
    Flat projection of a ``ProjectConfig`` consumed by filters and templates.

    Raw values are kept as plain strings so templates can compare them
    directly, e.g. ``{% if database == "MongoDB" %}`` or
    ``{% if other_tools is containing("JWT") %}``.
    """

    project_name: str
    language: str
    database: str
    orm_odm: str
    other_tools: tuple[str, ...]
    package_manager: str
    is_typescript: bool
    is_javascript: bool
    is_postgres: bool
    is_mongo: bool
    is_drizzle: bool
    is_mongoose: bool
    use_jwt: bool
    use_bcrypt: bool
    use_multer: bool
    is_pnpm: bool
    is_npm: bool

    def as_context(self) -> dict[str, Any]:
        """Template context dictionary; ``other_tools`` becomes a list."""
        context = asdict(self)
        context["other_tools"] = list(self.other_tools)
        return context


# =============================================================================
# Main Configuration Model
# =============================================================================

class ProjectConfig(BaseModel):
    """
    Complete, immutable configuration for one scaffolding run.

    Attributes
    ----------
    name : str
        Project (and directory) name. Lowercase letters, numbers, hyphens
        and underscores only.

    language : Language
        TypeScript or JavaScript.

    database : Database
        PostgreSQL or MongoDB.

    orm_odm : OrmOdm
        Drizzle or Mongoose. Derived from ``database`` when not given, and
        rejected when it does not match.

    other_tools : tuple[Tool, ...]
        Optional utilities. Duplicates are collapsed.

    package_manager : PackageManager
        npm or pnpm.

    output_dir : Path
        Directory in which the project directory is created.

    Examples
    --------
    >>> config = ProjectConfig(name="demo", other_tools=["JWT", "JWT"])
    >>> config.other_tools
    (<Tool.JWT: 'JWT'>,)
    >>> config.project_dir.name
    'demo'
    """

    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(
        description="Project name",
        min_length=1,
        max_length=214,
    )]
    language: Language = Field(
        default=Language.TYPESCRIPT,
        description="Language of the generated backend",
    )
    database: Database = Field(
        default=Database.POSTGRESQL,
        description="Database to use",
    )
    orm_odm: OrmOdm = Field(
        default=OrmOdm.DRIZZLE,
        description="ORM/ODM matching the database",
    )
    other_tools: tuple[Tool, ...] = Field(
        default=(),
        description="Optional utilities",
    )
    package_manager: PackageManager = Field(
        default=PackageManager.PNPM,
        description="Package manager for install and format",
    )
    output_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory where the project will be created",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @model_validator(mode="before")
    @classmethod
    def derive_orm_odm(cls, data: Any) -> Any:
        """Fill in the ORM/ODM from the database when it was not chosen."""
        if not isinstance(data, Mapping) or data.get("orm_odm") is not None:
            return data

        try:
            database = Database(data.get("database", Database.POSTGRESQL))
        except ValueError:
            # Leave it to field validation to report the bad database
            return data

        return {**data, "orm_odm": database.default_orm}

    @field_validator("name")
    @classmethod
    def check_project_name(cls, v: str) -> str:
        v = v.strip()
        verdict = validate_project_name(v)
        if verdict is not True:
            raise ValueError(f"Invalid project name '{v}'. {verdict}")
        return v

    @field_validator("other_tools")
    @classmethod
    def dedupe_tools(cls, v: tuple[Tool, ...]) -> tuple[Tool, ...]:
        return tuple(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_orm_matches_database(self) -> ProjectConfig:
        if self.orm_odm.database is not self.database:
            msg = (
                f"{self.orm_odm.value} cannot be used with {self.database.value}; "
                f"use {self.database.default_orm.value} instead."
            )
            raise ValueError(msg)
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def project_dir(self) -> Path:
        """output_dir / name"""
        return self.output_dir / self.name

    @cached_property
    def flags(self) -> TemplateFlags:
        """
        Boolean and string projections used by filters and templates.

        Computed on first access and reused for the rest of the run.
        """
        tools = {tool.value for tool in self.other_tools}
        return TemplateFlags(
            project_name=self.name,
            language=self.language.value,
            database=self.database.value,
            orm_odm=self.orm_odm.value,
            other_tools=tuple(tool.value for tool in self.other_tools),
            package_manager=self.package_manager.value,
            is_typescript=self.language is Language.TYPESCRIPT,
            is_javascript=self.language is Language.JAVASCRIPT,
            is_postgres=self.database is Database.POSTGRESQL,
            is_mongo=self.database is Database.MONGODB,
            is_drizzle=self.orm_odm is OrmOdm.DRIZZLE,
            is_mongoose=self.orm_odm is OrmOdm.MONGOOSE,
            use_jwt=Tool.JWT.value in tools,
            use_bcrypt=Tool.BCRYPT.value in tools,
            use_multer=Tool.MULTER.value in tools,
            is_pnpm=self.package_manager is PackageManager.PNPM,
            is_npm=self.package_manager is PackageManager.NPM,
        )

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    @classmethod
    def from_answers(
        cls,
        answers: Mapping[str, Any],
        project_name: str | None = None,
        output_dir: Path | None = None,
    ) -> ProjectConfig:
        """
        Build the configuration from questionnaire answers.

        Parameters
        ----------
        answers : Mapping[str, Any]
            Raw answers keyed by field name. Missing keys take defaults.

        project_name : str | None
            Name given on the command line; wins over ``answers["name"]``.

        output_dir : Path | None
            Parent directory for the project (default: current directory).

        Returns
        -------
        ProjectConfig
            Validated configuration.

        Raises
        ------
        ConfigurationError
            If any answer is invalid. Raised before anything touches disk.
        """
        data = {key: value for key, value in answers.items() if value is not None}
        if project_name is not None:
            data["name"] = project_name
        if output_dir is not None:
            data["output_dir"] = output_dir

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            details = "; ".join(_describe_error(err) for err in e.errors())
            raise ConfigurationError(details) from e


def _describe_error(err: Mapping[str, Any]) -> str:
    message = str(err["msg"]).removeprefix("Value error, ")
    location = ".".join(str(part) for part in err.get("loc", ()))
    return f"{location}: {message}" if location else message


def load_answers(path: Path) -> dict[str, Any]:
    """
    Load questionnaire answers from a TOML file.

    Parameters
    ----------
    path : Path
        TOML file with any of the keys ``name``, ``language``, ``database``,
        ``orm_odm``, ``other_tools`` and ``package_manager``.

    Returns
    -------
    dict[str, Any]
        The answers, unvalidated.

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, or has unknown keys.
    """
    import tomli

    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except tomli.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    known = set(ProjectConfig.model_fields) - {"output_dir"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in {path}: {', '.join(unknown)}"
        )
    return data

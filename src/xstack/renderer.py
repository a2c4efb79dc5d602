"""
xstack.renderer - Jinja2 Template Rendering
===========================================

Renders one template file against the template flags and works out the
name it is written under.

Template System
---------------
Templates live in ``xstack/templates/<language>/``. Each template receives
the fields of ``TemplateFlags`` as top-level variables:

    project_name, language, database, orm_odm, other_tools, package_manager,
    is_typescript, is_postgres, is_drizzle, use_jwt, use_multer, is_pnpm, ...

Besides plain ``{{ project_name }}`` interpolation and ``{% if use_jwt %}``
blocks, templates can use equality and membership tests:

    {% if database is eq("MongoDB") %} ... {% endif %}
    {% if other_tools is containing("Bcrypt") %} ... {% endif %}

File naming conventions:
- ``*.j2`` marks a template; the output name drops the suffix
- Dotfiles are stored without the dot (``gitignore.j2`` → ``.gitignore``)
  so they survive packaging
- Every file is rendered, with or without the suffix

Each ``Renderer`` builds its own Jinja2 environment from the filters and
tests it is given, so two renderers never share helper registrations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path, PurePath
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape

from xstack.errors import RenderError
from xstack.models import TemplateFlags


logger = logging.getLogger(__name__)

TEMPLATE_ROOT = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".j2"

# Files stored without their leading dot
DOTFILES = frozenset({"gitignore", "prettierrc", "prettierignore", "env.example"})


def _containing(container: Any, value: Any) -> bool:
    try:
        return value in container
    except TypeError:
        return False


def _snake_case(value: str) -> str:
    return value.replace("-", "_").lower()


def _pascal_case(value: str) -> str:
    return "".join(part.capitalize() for part in value.replace("_", "-").split("-"))


DEFAULT_TESTS: Mapping[str, Callable[..., bool]] = {
    "containing": _containing,
}

DEFAULT_FILTERS: Mapping[str, Callable[..., Any]] = {
    "snake_case": _snake_case,
    "pascal_case": _pascal_case,
}


def output_name(filename: str) -> str:
    """
    Name a template file is written under.

    Examples
    --------
    >>> output_name("server.ts.j2")
    'server.ts'
    >>> output_name("gitignore.j2")
    '.gitignore'
    >>> output_name("README.md")
    'README.md'
    """
    name = filename.removesuffix(TEMPLATE_SUFFIX)
    if name in DOTFILES:
        name = f".{name}"
    return name


class Renderer:
    """
    Renders template files from one template root.

    Parameters
    ----------
    template_root : Path
        Directory that template paths are relative to.

    filters : Mapping[str, Callable] | None
        Jinja2 filters to register. Defaults to ``DEFAULT_FILTERS``.

    tests : Mapping[str, Callable] | None
        Jinja2 tests to register. Defaults to ``DEFAULT_TESTS``.

    Notes
    -----
    Autoescaping is off because the output is source code, not HTML.
    Undefined variables are errors so a typo in a template fails the run
    instead of silently producing an empty string.
    """

    def __init__(
        self,
        template_root: Path,
        *,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        tests: Mapping[str, Callable[..., bool]] | None = None,
    ) -> None:
        self.template_root = Path(template_root)
        self.env = Environment(
            loader=FileSystemLoader(self.template_root),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters.update(DEFAULT_FILTERS if filters is None else filters)
        self.env.tests.update(DEFAULT_TESTS if tests is None else tests)

    def render(self, relative_path: PurePath | str, flags: TemplateFlags) -> str:
        """
        Render one template.

        Parameters
        ----------
        relative_path : PurePath | str
            Template path relative to ``template_root``.

        flags : TemplateFlags
            Variables available to the template.

        Returns
        -------
        str
            Rendered content. Identical inputs give identical output.

        Raises
        ------
        RenderError
            If the template is missing, malformed, not UTF-8, uses an undefined
            name, or fails while evaluating an expression or helper.
        """
        name = PurePath(relative_path).as_posix()
        try:
            template = self.env.get_template(name)
            return template.render(**flags.as_context())
        except (
            TemplateError,
            UnicodeDecodeError,
            TypeError,
            ValueError,
            ArithmeticError,
            LookupError,
        ) as e:
            raise RenderError(name, str(e) or type(e).__name__) from e

    def render_to(
        self,
        relative_path: PurePath | str,
        destination_dir: Path,
        flags: TemplateFlags,
    ) -> Path:
        """Render a template and write it into ``destination_dir``."""
        content = self.render(relative_path, flags)
        destination = destination_dir / output_name(PurePath(relative_path).name)
        destination.write_text(content, encoding="utf-8")
        logger.debug("Rendered %s -> %s", relative_path, destination)
        return destination

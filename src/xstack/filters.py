"""
xstack.filters - Template Inclusion Rules
=========================================

Decides which files of a language's template tree end up in the project.
Each rule pairs a path/name marker with a predicate over the template flags;
a file is skipped when any rule matches it.

Every rule is evaluated for every file so that ``excluded_by`` can report
the complete set of reasons a file was left out.

Template authors must keep these conventions:

    db/mongodb/...        MongoDB only
    db/postgresql/...     PostgreSQL only
    *user.model*          Mongoose only
    *schema*              Drizzle only
    db.*                  Drizzle connector
    *drizzle.config*      Drizzle only
    *auth-check*          JWT only
    *env.d.ts*            JWT only
    *upload*              Multer only
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from xstack.models import TemplateFlags


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InclusionRule:
    """
    One exclusion rule.

    Attributes
    ----------
    name : str
        Short label used in logs.

    matches : Callable[[PurePath], bool]
        Whether the rule applies to a path (relative to the language root).

    applies : Callable[[TemplateFlags], bool]
        Whether the feature behind the matched file was selected. A matched
        file is skipped when this returns False.
    """

    name: str
    matches: Callable[[PurePath], bool]
    applies: Callable[[TemplateFlags], bool]

    def excludes(self, path: PurePath, flags: TemplateFlags) -> bool:
        return self.matches(path) and not self.applies(flags)


def _under(*segments: str) -> Callable[[PurePath], bool]:
    """Match paths containing ``segments`` as consecutive directory parts."""
    size = len(segments)

    def matcher(path: PurePath) -> bool:
        parts = path.parts[:-1]
        return any(
            parts[i:i + size] == segments for i in range(len(parts) - size + 1)
        )

    return matcher


def _name_contains(marker: str) -> Callable[[PurePath], bool]:
    return lambda path: marker in path.name


def _name_startswith(prefix: str) -> Callable[[PurePath], bool]:
    return lambda path: path.name.startswith(prefix)


RULES: tuple[InclusionRule, ...] = (
    InclusionRule("mongo namespace", _under("db", "mongodb"), lambda f: f.is_mongo),
    InclusionRule("mongoose model", _name_contains("user.model"), lambda f: f.is_mongoose),
    InclusionRule("postgres namespace", _under("db", "postgresql"), lambda f: f.is_postgres),
    InclusionRule("drizzle schema", _name_contains("schema"), lambda f: f.is_drizzle),
    InclusionRule("db connector", _name_startswith("db."), lambda f: f.is_drizzle),
    InclusionRule("drizzle config", _name_contains("drizzle.config"), lambda f: f.is_drizzle),
    InclusionRule("auth middleware", _name_contains("auth-check"), lambda f: f.use_jwt),
    InclusionRule("auth type declarations", _name_contains("env.d.ts"), lambda f: f.use_jwt),
    InclusionRule("upload middleware", _name_contains("upload"), lambda f: f.use_multer),
)


def excluded_by(
    relative_path: PurePath | str,
    flags: TemplateFlags,
    rules: tuple[InclusionRule, ...] = RULES,
) -> list[str]:
    """
    Names of every rule that excludes a template file.

    Parameters
    ----------
    relative_path : PurePath | str
        Template path relative to the language root, e.g.
        ``src/db/mongodb/models/user.model.ts.j2``.

    flags : TemplateFlags
        Flags of the current configuration.

    Returns
    -------
    list[str]
        Matching rule names; empty when the file should be included.
    """
    path = PurePath(relative_path)
    return [rule.name for rule in rules if rule.excludes(path, flags)]


def should_include(
    relative_path: PurePath | str,
    flags: TemplateFlags,
    rules: tuple[InclusionRule, ...] = RULES,
) -> bool:
    """Whether a template file is materialized for this configuration."""
    reasons = excluded_by(relative_path, flags, rules)
    if reasons:
        logger.debug("Skipping %s (%s)", relative_path, ", ".join(reasons))
    return not reasons

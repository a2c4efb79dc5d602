"""
xstack - Express.js Backend Scaffolder
======================================

A CLI tool that asks a handful of questions and creates a ready-to-run
Express.js backend with the database, ORM/ODM and utilities you picked.

Features
--------
- **Two Languages**: TypeScript or JavaScript templates
- **Databases**: PostgreSQL with Drizzle, or MongoDB with Mongoose
- **Extras**: JWT auth middleware, Bcrypt password hashing, Multer uploads
- **Package Managers**: npm or pnpm, dependencies installed for you
- **Safe**: a failed or cancelled run leaves nothing behind

Quick Start
-----------
```bash
pip install create-xstack

# Interactive mode
create-xstack my-api

# Or with options
create-xstack my-api --language TypeScript --database MongoDB --tool JWT --yes
```

Example
-------
>>> from xstack import ProjectConfig, create_project
>>> config = ProjectConfig(name="my-api")
>>> result = create_project(config)

Architecture
------------
- ``cli``: Typer command line interface and questionnaire
- ``models``: Pydantic models for the configuration vector
- ``filters``: Which template files apply to a configuration
- ``renderer``: Jinja2 rendering of template files
- ``walker``: Mirrors a template tree into the project directory
- ``pipeline``: Dependency installation and formatting
- ``lifecycle``: Stage tracking, cancellation and cleanup
- ``errors``: Exception hierarchy

License
-------
MIT License - see LICENSE file for details.
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from xstack.errors import ScaffoldError
from xstack.lifecycle import ScaffoldController, ScaffoldResult, create_project
from xstack.models import ProjectConfig, TemplateFlags


__all__ = [
    "ProjectConfig",
    "ScaffoldController",
    "ScaffoldError",
    "ScaffoldResult",
    "TemplateFlags",
    "__version__",
    "create_project",
]

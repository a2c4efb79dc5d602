"""
xstack.walker - Template Tree Materialization
=============================================

Mirrors a language's template tree into the project directory. Directories
are always created; files go through the inclusion filter and the renderer.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from xstack.filters import should_include


if TYPE_CHECKING:
    from xstack.lifecycle import CancellationToken
    from xstack.models import TemplateFlags
    from xstack.renderer import Renderer


logger = logging.getLogger(__name__)


def materialize(
    source_root: Path,
    destination_root: Path,
    flags: TemplateFlags,
    renderer: Renderer,
    token: CancellationToken | None = None,
) -> list[Path]:
    """
    Copy and render a template tree into ``destination_root``.

    Parameters
    ----------
    source_root : Path
        Language template root, e.g. ``templates/typescript``. Paths handed
        to the filter and renderer are relative to it.

    destination_root : Path
        Existing project directory.

    flags : TemplateFlags
        Flags of the current configuration.

    renderer : Renderer
        Renderer rooted at ``source_root``.

    token : CancellationToken | None
        Checked before every entry; a cancelled token stops the walk.

    Returns
    -------
    list[Path]
        Files written, in walk order.

    Raises
    ------
    RenderError
        If a template cannot be rendered.
    ScaffoldCancelled
        If the token is cancelled mid-walk.
    """
    written: list[Path] = []
    _walk(source_root, PurePath(), destination_root, flags, renderer, token, written)
    return written


def _walk(
    source_root: Path,
    relative_dir: PurePath,
    destination_dir: Path,
    flags: TemplateFlags,
    renderer: Renderer,
    token: CancellationToken | None,
    written: list[Path],
) -> None:
    for entry in sorted((source_root / relative_dir).iterdir()):
        if token is not None:
            token.raise_if_cancelled()

        relative_path = relative_dir / entry.name

        if entry.is_dir():
            target = destination_dir / entry.name
            target.mkdir(exist_ok=True)
            _walk(source_root, relative_path, target, flags, renderer, token, written)
            continue

        if not should_include(relative_path, flags):
            continue

        written.append(renderer.render_to(relative_path, destination_dir, flags))

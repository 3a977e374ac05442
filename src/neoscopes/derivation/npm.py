"""Scopes derived from ``package.json`` workspaces.

Each workspace package matched by the manifest's globs becomes a scope
named ``npm:<package dir>`` whose only directory is the package directory.
"""

from __future__ import annotations

import glob
import json
import logging
import os
from pathlib import Path
from typing import Optional

from neoscopes.errors import ValidationError
from neoscopes.models.scope import Scope

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "package.json"

NPM_ORIGIN = "npm"
NPM_NAME_PREFIX = "npm:"


def scopes_from_package_json(
    cwd: Optional[str] = None,
    name_prefix: str = NPM_NAME_PREFIX,
) -> list[Scope]:
    """Return one scope per workspace package declared in ``package.json``.

    The manifest is read from *cwd* (default: the current working
    directory).  Workspace globs are taken from ``workspaces.packages`` or,
    in the shorthand form, from ``workspaces`` itself when it is a list.
    Matches of each glob are sorted; globs are processed in declared order.

    Returns
    -------
    list[Scope]
        Unregistered scopes.  Empty when the manifest is absent or declares
        no workspaces.

    Raises
    ------
    ValidationError
        If the manifest exists but is not a JSON object.
    """
    root = Path(cwd) if cwd is not None else Path.cwd()
    manifest_path = root / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        logger.debug("No %s in %s.", MANIFEST_FILE_NAME, root)
        return []

    try:
        with open(manifest_path, "r", encoding="utf-8") as fp:
            manifest = json.load(fp)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(f"{manifest_path} is not valid JSON: {exc}") from exc
    if not isinstance(manifest, dict):
        raise ValidationError(f"{manifest_path} does not contain a JSON object")

    scopes: list[Scope] = []
    for pattern in _workspace_globs(manifest):
        matches = glob.glob(
            f"{pattern}/{MANIFEST_FILE_NAME}", root_dir=str(root)
        )
        for match in sorted(matches):
            directory = os.path.dirname(match)
            scopes.append(
                Scope(
                    name=f"{name_prefix}{directory}",
                    dirs=[directory],
                    files=[],
                    origin=NPM_ORIGIN,
                )
            )
    logger.debug("Derived %d npm workspace scopes.", len(scopes))
    return scopes


def _workspace_globs(manifest: dict) -> list[str]:
    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if not isinstance(workspaces, list):
        return []
    return [pattern for pattern in workspaces if isinstance(pattern, str)]

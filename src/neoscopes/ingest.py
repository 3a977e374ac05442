"""Configuration ingestion -- populate a registry from configuration sources.

Two sources are combined: the caller's configuration and the optional
project-level config file found in the working directory.  For every step
the caller's values are applied first and the project file's second; both
are applied, so a scope declared in both is registered twice (the project
file's definition wins).

Steps, in order:

1. literal ``scopes``
2. npm workspace scopes, once, if either source enables them
3. ``git:`` branch-diff scopes
4. ``git_ancestor:`` ancestor-diff scopes
5. ``add_dirs_to_all_scopes`` (caller only)
6. ``current_scope`` selection (caller only)
7. ``on_scope_selected`` callback (caller only)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from neoscopes.config import ScopesConfig, load_project_config
from neoscopes.derivation.git import scopes_from_git_ancestors, scopes_from_git_diffs
from neoscopes.derivation.npm import scopes_from_package_json
from neoscopes.derivation.runner import CommandRunner, run_lines
from neoscopes.registry import ScopeRegistry

logger = logging.getLogger(__name__)


def setup(
    registry: ScopeRegistry,
    config: Any = None,
    cwd: Optional[str] = None,
    runner: CommandRunner = run_lines,
) -> Optional[ScopesConfig]:
    """Ingest *config* and the project-level config file into *registry*.

    Parameters
    ----------
    registry:
        The registry to populate.
    config:
        A :class:`ScopesConfig` or a mapping of its fields.  When *None*,
        nothing happens (the project file is not read either).
    cwd:
        Working directory used to find the project file, ``package.json``
        and to run ``git``.  Defaults to the current working directory.
    runner:
        Command runner for the git derivations.

    Returns
    -------
    ScopesConfig or None
        The resolved caller configuration, or *None* for a no-op.

    Raises
    ------
    ValidationError
        If either configuration source is malformed.  Validation happens
        before anything is registered.
    NotFoundError
        If ``current_scope`` names a scope that was not registered.
    """
    if config is None:
        return None

    resolved = ScopesConfig.resolve(config)
    project = load_project_config(cwd, resolved.neoscopes_config_filename)
    sources = (resolved, project)

    for source in sources:
        if source.scopes:
            registry.add_all(source.scopes)

    if any(source.enable_scopes_from_npm for source in sources):
        registry.add_all(scopes_from_package_json(cwd))

    for source in sources:
        if source.diff_branches_for_scopes:
            registry.add_all(
                scopes_from_git_diffs(
                    source.diff_branches_for_scopes,
                    registry.add,
                    cwd=cwd,
                    runner=runner,
                )
            )

    for source in sources:
        if source.diff_ancestors_for_scopes:
            registry.add_all(
                scopes_from_git_ancestors(
                    source.diff_ancestors_for_scopes,
                    registry.add,
                    cwd=cwd,
                    runner=runner,
                    refresh_with_ancestor_diff=resolved.refresh_ancestors_with_ancestor_diff,
                )
            )

    if resolved.add_dirs_to_all_scopes:
        registry.add_dirs_to_all_scopes(resolved.add_dirs_to_all_scopes)

    if resolved.current_scope:
        registry.set_current(resolved.current_scope)

    if resolved.on_scope_selected is not None:
        registry.on_scope_selected = resolved.on_scope_selected

    logger.info("Setup complete: %d scopes registered.", len(registry))
    return resolved

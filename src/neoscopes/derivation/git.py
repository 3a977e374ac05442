"""Scopes derived from ``git diff`` against other branches.

Two strategies are available:

- :func:`scopes_from_git_diffs` lists the files that differ between the
  working tree and a branch (``git diff --name-only --relative <branch>``),
  relative to the working directory.
- :func:`scopes_from_git_ancestors` lists the files changed since the merge
  base with a branch (``git diff --name-only <branch>...``), made absolute
  with the repository top level.

Every derived scope carries an ``on_select`` callback that re-runs the diff
and re-registers the scope, so the file list reflects the repository at the
time of selection.  Ancestor scopes refresh with the two-dot branch diff
unless ``refresh_with_ancestor_diff`` is set.

Branch names follow ``--end-of-options`` so a name starting with a dash is
read as a revision.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Sequence
from typing import Any, Callable, Optional

from neoscopes.derivation.runner import CommandRunner, run_lines
from neoscopes.models.scope import Scope

logger = logging.getLogger(__name__)

GIT_ORIGIN = "git"
GIT_NAME_PREFIX = "git:"
GIT_ANCESTOR_NAME_PREFIX = "git_ancestor:"

# Receives a refreshed scope; normally ScopeRegistry.add.
Register = Callable[[Scope], Any]


def scopes_from_git_diffs(
    branches: Sequence[str],
    register: Register,
    cwd: Optional[str] = None,
    runner: CommandRunner = run_lines,
    name_prefix: str = GIT_NAME_PREFIX,
) -> list[Scope]:
    """Return one scope per branch holding the files that differ from it.

    Parameters
    ----------
    branches:
        Branch (or any revision) names, processed in order.
    register:
        Called with the refreshed scope whenever a derived scope is selected.
    cwd:
        Working directory for ``git``; file paths are relative to it.
    runner:
        Command runner, see :mod:`neoscopes.derivation.runner`.
    name_prefix:
        Prefix of the scope names.

    Returns
    -------
    list[Scope]
        Unregistered scopes.  A branch whose diff cannot be run is omitted.
    """
    scopes: list[Scope] = []
    for branch in branches:
        lines = runner(
            ["git", "diff", "--name-only", "--relative", "--end-of-options", branch], cwd
        )
        if lines is None:
            logger.debug("Skipping git scope for %s: diff unavailable.", branch)
            continue
        scopes.append(
            Scope(
                name=f"{name_prefix}{branch}",
                dirs=[],
                files=lines,
                origin=GIT_ORIGIN,
                on_select=_refresher(
                    scopes_from_git_diffs, branch, register, cwd, runner, name_prefix
                ),
            )
        )
    return scopes


def scopes_from_git_ancestors(
    branches: Sequence[str],
    register: Register,
    cwd: Optional[str] = None,
    runner: CommandRunner = run_lines,
    name_prefix: str = GIT_ANCESTOR_NAME_PREFIX,
    refresh_with_ancestor_diff: bool = False,
) -> list[Scope]:
    """Return one scope per branch holding the files changed since its merge base.

    File paths are absolute: each line reported by ``git diff`` is prefixed
    with the output of ``git rev-parse --show-toplevel``.

    By default the ``on_select`` refresh re-derives the scope with
    :func:`scopes_from_git_diffs` (two-dot diff, relative paths) under the
    same name.  Pass ``refresh_with_ancestor_diff=True`` to refresh with
    this ancestor strategy instead.

    Returns
    -------
    list[Scope]
        Unregistered scopes.  A branch is omitted when either git command
        cannot be run.
    """
    strategy: Callable[..., list[Scope]] = scopes_from_git_diffs
    if refresh_with_ancestor_diff:
        strategy = functools.partial(scopes_from_git_ancestors, refresh_with_ancestor_diff=True)

    scopes: list[Scope] = []
    for branch in branches:
        changed = runner(["git", "diff", "--name-only", "--end-of-options", f"{branch}..."], cwd)
        toplevel = runner(["git", "rev-parse", "--show-toplevel"], cwd)
        if changed is None or not toplevel:
            logger.debug("Skipping git ancestor scope for %s: diff unavailable.", branch)
            continue
        root = toplevel[0].strip()
        scopes.append(
            Scope(
                name=f"{name_prefix}{branch}",
                dirs=[],
                files=[f"{root}/{line}" for line in changed],
                origin=GIT_ORIGIN,
                on_select=_refresher(
                    strategy, branch, register, cwd, runner, name_prefix
                ),
            )
        )
    return scopes


def _refresher(
    derive: Callable[..., list[Scope]],
    branch: str,
    register: Register,
    cwd: Optional[str],
    runner: CommandRunner,
    name_prefix: str,
) -> Callable[[], None]:
    """Build the ``on_select`` callback that re-derives and re-registers one branch."""

    def refresh() -> None:
        for scope in derive([branch], register, cwd, runner, name_prefix):
            register(scope)
        logger.debug("Refreshed git scope %s%s.", name_prefix, branch)

    return refresh

"""Derivation of scopes from external sources: npm workspaces and git diffs."""

from neoscopes.derivation.git import scopes_from_git_ancestors, scopes_from_git_diffs
from neoscopes.derivation.npm import scopes_from_package_json
from neoscopes.derivation.runner import CommandRunner, run_lines

__all__ = [
    "CommandRunner",
    "run_lines",
    "scopes_from_git_ancestors",
    "scopes_from_git_diffs",
    "scopes_from_package_json",
]

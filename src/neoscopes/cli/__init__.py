"""Click CLI commands for inspecting and selecting scopes.

Provides the ``neoscopes`` CLI entry point with subcommands:
- ``neoscopes list``   -- List all scopes registered from the project config.
- ``neoscopes show``   -- Show the directories and files of one scope.
- ``neoscopes paths``  -- Print the paths of a scope, one per line.
- ``neoscopes select`` -- Pick a scope interactively and print its paths.
- ``neoscopes init``   -- Write a starter project config file.
- ``neoscopes serve``  -- Run the MCP server over stdio.
"""

from neoscopes.cli.main import cli, init, list_scopes, paths, select, serve, show

__all__ = ["cli", "init", "list_scopes", "paths", "select", "serve", "show"]

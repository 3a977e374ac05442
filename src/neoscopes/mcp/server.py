"""FastMCP server exposing a scope registry to MCP clients.

The server loads the project-level configuration once, keeps the
populated :class:`~neoscopes.registry.ScopeRegistry` for its lifetime, and
lets clients list, add, and select scopes and query the current scope's
paths.  An agent can then restrict its file searches to those paths.

Typical usage::

    # Via the CLI:
    #   neoscopes --cwd /path/to/project serve

    # Or programmatically:
    from neoscopes.mcp.server import create_server
    server = create_server(cwd="/path/to/project")
    server.run(transport="stdio")
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastmcp import FastMCP

from neoscopes import __version__
from neoscopes.config import ScopesConfig
from neoscopes.errors import ScopeError
from neoscopes.ingest import setup
from neoscopes.registry import ScopeRegistry

logger = logging.getLogger(__name__)

# Module-level singletons, created by create_server().  All tools share the
# same registry.
_server_instance: Optional[FastMCP] = None
_registry: Optional[ScopeRegistry] = None
_config: Optional[ScopesConfig] = None
_cwd: Optional[str] = None


def create_server(
    cwd: Optional[str] = None,
    config_filename: Optional[str] = None,
) -> FastMCP:
    """Create and configure the FastMCP server instance.

    1. Resolves configuration (explicit file name -> env -> defaults).
    2. Builds a registry from the project-level config file in *cwd*.
    3. Instantiates the FastMCP server and registers the scope tools.

    Parameters
    ----------
    cwd:
        Project directory.  Defaults to the current working directory.
    config_filename:
        Project-level config file name.  Defaults to
        ``neoscopes.config.json`` (or ``NEOSCOPES_CONFIG_FILENAME``).

    Raises
    ------
    ValidationError
        If the project config file is malformed.
    """
    global _server_instance, _registry, _config, _cwd

    overrides: dict = {}
    if config_filename:
        overrides["neoscopes_config_filename"] = config_filename
    config = ScopesConfig.resolve(overrides)
    config.configure_logging()

    resolved_cwd = str(Path(cwd).resolve()) if cwd else str(Path.cwd())
    registry = ScopeRegistry()
    setup(registry, config, cwd=resolved_cwd)

    logger.info("Initializing neoscopes MCP server v%s", __version__)
    logger.info("Project directory: %s", resolved_cwd)
    logger.info("Scopes registered: %d", len(registry))

    server = FastMCP(
        name="neoscopes",
        instructions=(
            "neoscopes manages named scopes: sets of directories and files "
            "that partition a workspace. Use list_scopes to see them, "
            "set_current_scope to select one, and get_current_paths to get "
            "the paths to restrict file searches to."
        ),
        version=__version__,
    )
    _register_tools(server)

    _server_instance = server
    _registry = registry
    _config = config
    _cwd = resolved_cwd
    return server


def get_server() -> FastMCP:
    """Return the existing server instance, creating it if necessary."""
    if _server_instance is None:
        return create_server()
    return _server_instance


def get_registry() -> ScopeRegistry:
    """Return the registry used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _registry is None:
        raise RuntimeError(
            "Server has not been initialized. Call create_server() first."
        )
    return _registry


def get_config() -> ScopesConfig:
    """Return the resolved configuration used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _config is None:
        raise RuntimeError(
            "Server has not been initialized. Call create_server() first."
        )
    return _config


def reset_server() -> None:
    """Reset the server singletons (primarily for testing)."""
    global _server_instance, _registry, _config, _cwd
    _server_instance = None
    _registry = None
    _config = None
    _cwd = None
    logger.debug("Server singleton reset.")


# ---------------------------------------------------------------------------
# Tool registration
# ---------------------------------------------------------------------------


def _register_tools(server: FastMCP) -> None:
    """Register all MCP tools on the server instance."""

    @server.tool()
    def health_check() -> dict:
        """Check the health and status of the neoscopes MCP server.

        Returns:
            A dictionary with the server version, project directory, number
            of registered scopes, the current scope name (or null), the
            cross-scope directories, and a timestamp.
        """
        registry = get_registry()
        current = registry.get_current_scope()
        return {
            "server_version": __version__,
            "status": "healthy",
            "project_dir": _cwd,
            "config_filename": get_config().neoscopes_config_filename,
            "scope_count": len(registry),
            "current_scope": current.name if current else None,
            "cross_scope_dirs": registry.cross_scope_dirs,
            "timestamp": _now(),
        }

    @server.tool()
    def list_scopes() -> dict:
        """List all registered scopes, sorted by name.

        Returns:
            A dictionary with ``scopes`` (name, dirs, files, origin of each)
            and ``current_scope`` (name or null).
        """
        registry = get_registry()
        current = registry.get_current_scope()
        return {
            "error": False,
            "scopes": [registry.get(name).to_summary() for name in registry.names()],
            "current_scope": current.name if current else None,
        }

    @server.tool()
    def get_scope(name: str) -> dict:
        """Get the directories and files of one scope.

        Args:
            name: The scope name.
        """
        try:
            scope = get_registry().get(name)
        except ScopeError as exc:
            return _error_response(exc)
        return {"error": False, "scope": scope.to_summary()}

    @server.tool()
    def add_scope(
        name: str,
        dirs: list[str],
        files: Optional[list[str]] = None,
    ) -> dict:
        """Register a scope, replacing any scope with the same name.

        Cross-scope directories are appended to ``dirs``.

        Args:
            name: Unique scope name.
            dirs: Directories of the scope, absolute or relative.
            files: Optional individual files of the scope.
        """
        try:
            scope = get_registry().add({"name": name, "dirs": dirs, "files": files})
        except ScopeError as exc:
            return _error_response(exc)
        logger.info("Scope %s added via MCP.", name)
        return {"error": False, "scope": scope.to_summary()}

    @server.tool()
    def add_dirs_to_all_scopes(dirs: list[str]) -> dict:
        """Add directories to every scope, present and future.

        Args:
            dirs: Directories to add, in order.
        """
        registry = get_registry()
        try:
            registry.add_dirs_to_all_scopes(dirs)
        except ScopeError as exc:
            return _error_response(exc)
        return {
            "error": False,
            "cross_scope_dirs": registry.cross_scope_dirs,
            "scope_count": len(registry),
        }

    @server.tool()
    def set_current_scope(name: str) -> dict:
        """Select the current scope.  Git scopes refresh their file list.

        Args:
            name: The scope name to select.
        """
        try:
            scope = get_registry().set_current(name)
        except ScopeError as exc:
            return _error_response(exc)
        return {"error": False, "current_scope": scope.to_summary()}

    @server.tool()
    def get_current_scope() -> dict:
        """Get the current scope, or null when none is selected."""
        scope = get_registry().get_current_scope()
        return {
            "error": False,
            "current_scope": scope.to_summary() if scope else None,
        }

    @server.tool()
    def get_current_paths(dirs_only: bool = False) -> dict:
        """Get the paths of the current scope: directories first, then files.

        Args:
            dirs_only: Return directories only.
        """
        registry = get_registry()
        try:
            if dirs_only:
                paths = registry.get_current_dirs()
            else:
                paths = registry.get_current_paths()
        except ScopeError as exc:
            return _error_response(exc)
        return {"error": False, "paths": list(paths)}

    @server.tool()
    def clear_scopes() -> dict:
        """Remove all scopes and unset the current scope.

        Cross-scope directories are kept and apply to scopes added later.
        """
        get_registry().clear()
        return {"error": False, "scope_count": 0}


def _error_response(exc: Exception) -> dict:
    logger.warning("Tool call failed: %s", exc)
    return {
        "error": True,
        "message": str(exc),
        "timestamp": _now(),
    }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

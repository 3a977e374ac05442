"""FastMCP server exposing the scope registry as tools."""

from neoscopes.mcp.server import create_server, get_registry, get_server, reset_server

__all__ = ["create_server", "get_registry", "get_server", "reset_server"]

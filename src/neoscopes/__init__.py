"""neoscopes - Named scopes of directories and files for file-search tooling."""

__version__ = "0.1.0"

from neoscopes.config import ScopesConfig
from neoscopes.errors import NotFoundError, ScopeError, StateError, ValidationError
from neoscopes.ingest import setup
from neoscopes.models.scope import Scope
from neoscopes.registry import ScopeRegistry, get_registry, reset_registry

__all__ = [
    "NotFoundError",
    "Scope",
    "ScopeError",
    "ScopeRegistry",
    "ScopesConfig",
    "StateError",
    "ValidationError",
    "__version__",
    "get_registry",
    "reset_registry",
    "setup",
]

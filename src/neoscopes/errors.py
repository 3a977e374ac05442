"""Exception hierarchy for the scope registry.

All errors raised by :mod:`neoscopes` derive from :class:`ScopeError` so
callers can catch the whole family at once.  Each concrete error also
inherits from the closest built-in exception, which keeps ``except
ValueError`` style handlers in calling code working.
"""

from __future__ import annotations


class ScopeError(Exception):
    """Base class for all scope registry errors."""


class ValidationError(ScopeError, ValueError):
    """Malformed input to a mutating operation.

    Raised for a missing scope name, a ``dirs`` / ``files`` value that is
    not a list, an unparseable project config file or ``package.json``.
    """


class NotFoundError(ScopeError, LookupError):
    """A scope name was referenced that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Scope {name!r} does not exist, call add(scope) first."
        )


class StateError(ScopeError, RuntimeError):
    """Current-scope data was queried before any scope was selected."""

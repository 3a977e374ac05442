"""ScopeRegistry -- the store of named scopes and the current-scope pointer.

The registry is an explicit context object: an application creates one (or
uses the process default from :func:`get_registry`) and passes it to every
operation.  It owns three pieces of state:

- the mapping of scope name to :class:`~neoscopes.models.Scope`,
- the *cross-scope directories*, appended to every scope present and future,
- the *current scope*, changed only through :meth:`ScopeRegistry.set_current`.

Typical usage::

    registry = ScopeRegistry()
    registry.add({"name": "api", "dirs": ["services/api"]})
    registry.add_dirs_to_all_scopes(["~/dotfiles"])
    registry.set_current("api")
    registry.get_current_paths()   # ["services/api", "~/dotfiles"]

Execution is single threaded and synchronous.  Selection callbacks run
inline and may call back into :meth:`ScopeRegistry.add`.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from neoscopes.errors import NotFoundError, StateError, ValidationError
from neoscopes.models.scope import Scope

if TYPE_CHECKING:
    from neoscopes.picker import Picker

logger = logging.getLogger(__name__)

# Name of the scope registered by add_startup_scope().
STARTUP_SCOPE_NAME = "<startup>"

# Invocation flags whose following argument is a value, not a path.
DEFAULT_VALUE_FLAGS = ("-u",)

ScopeLike = Union[Scope, Mapping[str, Any]]


def _ignore_selection(scope: Scope) -> None:
    pass


class ScopeRegistry:
    """Registry of named scopes with a current-scope selection.

    Parameters
    ----------
    on_scope_selected:
        Callback invoked with the scope after every successful
        :meth:`set_current`.  Defaults to a no-op and can be replaced later
        through :attr:`on_scope_selected`.
    """

    def __init__(
        self,
        on_scope_selected: Optional[Callable[[Scope], Any]] = None,
    ) -> None:
        self._scopes: dict[str, Scope] = {}
        self._current: Optional[Scope] = None
        self._cross_scope_dirs: list[str] = []
        self.on_scope_selected: Callable[[Scope], Any] = (
            on_scope_selected or _ignore_selection
        )

    # ------------------------------------------------------------------
    # Scope store
    # ------------------------------------------------------------------

    def add(self, scope: ScopeLike) -> Scope:
        """Register *scope*, replacing any scope with the same name.

        The accumulated cross-scope directories are appended to the scope's
        ``dirs`` list in place before it is stored.  The replacement is
        total: nothing from a previous scope of the same name is kept.

        Parameters
        ----------
        scope:
            A :class:`Scope` or a mapping with ``name``, ``dirs`` and
            optionally ``files``, ``origin`` and ``on_select``.

        Returns
        -------
        Scope
            The stored scope.

        Raises
        ------
        ValidationError
            If the name is missing or ``dirs`` / ``files`` are not lists.
        """
        record = Scope.coerce(scope)
        record.dirs.extend(self._cross_scope_dirs)
        replaced = record.name in self._scopes
        self._scopes[record.name] = record
        logger.debug(
            "%s scope %s (%d dirs, %d files).",
            "Replaced" if replaced else "Registered",
            record.name,
            len(record.dirs),
            len(record.files),
        )
        return record

    def add_all(self, scopes: Iterable[ScopeLike]) -> list[Scope]:
        """Register each scope in order.

        A failure aborts the remaining scopes; scopes already added stay
        registered.
        """
        return [self.add(scope) for scope in scopes]

    def clear(self) -> None:
        """Remove every scope and unset the current scope.

        Cross-scope directories survive and still apply to scopes added
        afterwards.
        """
        self._scopes = {}
        self._current = None
        logger.debug("Cleared all scopes.")

    def get_all_scopes(self) -> Mapping[str, Scope]:
        """Return a read-only view of all scopes keyed by name."""
        return MappingProxyType(self._scopes)

    def get(self, name: str) -> Scope:
        """Return the scope registered under *name*.

        Raises
        ------
        NotFoundError
            If no such scope is registered.
        """
        try:
            return self._scopes[name]
        except KeyError:
            raise NotFoundError(name) from None

    def names(self) -> list[str]:
        """Return the registered scope names, sorted."""
        return sorted(self._scopes)

    def __contains__(self, name: object) -> bool:
        return name in self._scopes

    def __len__(self) -> int:
        return len(self._scopes)

    # ------------------------------------------------------------------
    # Cross-scope directories
    # ------------------------------------------------------------------

    @property
    def cross_scope_dirs(self) -> list[str]:
        """Copy of the accumulated cross-scope directories, in order."""
        return list(self._cross_scope_dirs)

    def add_dirs_to_all_scopes(self, dirs: Sequence[str]) -> None:
        """Add *dirs* to every registered scope and to all future scopes.

        Raises
        ------
        ValidationError
            If *dirs* is not a list or tuple of strings.
        """
        if not isinstance(dirs, (list, tuple)):
            raise ValidationError("dirs must be a list of directory paths")
        for directory in dirs:
            if not isinstance(directory, str):
                raise ValidationError(
                    f"dirs entries must be strings, got {type(directory).__name__}"
                )
        for directory in dirs:
            self._cross_scope_dirs.append(directory)
            for scope in self._scopes.values():
                scope.dirs.append(directory)
        logger.debug(
            "Added %d cross-scope dirs to %d scopes.",
            len(dirs),
            len(self._scopes),
        )

    # ------------------------------------------------------------------
    # Selection protocol
    # ------------------------------------------------------------------

    def set_current(self, name: str) -> Scope:
        """Make the scope registered under *name* the current scope.

        The scope's own ``on_select`` callback runs first, then the
        registry-wide :attr:`on_scope_selected` callback.  Both run on every
        call, including when *name* is already current.  When ``on_select``
        re-registers a scope under the same name, the current scope follows
        the new record.  An exception from either callback propagates and
        the current scope is not rolled back.

        Raises
        ------
        NotFoundError
            If *name* is not registered.
        """
        scope = self._scopes.get(name)
        if scope is None:
            raise NotFoundError(name)
        self._current = scope
        if scope.on_select is not None:
            scope.on_select()
            refreshed = self._scopes.get(name)
            if refreshed is not None and refreshed is not scope:
                self._current = refreshed
        logger.info("Selected scope %s.", name)
        self.on_scope_selected(self._current)
        return self._current

    def get_current_scope(self) -> Optional[Scope]:
        """Return the current scope, or *None* when nothing is selected."""
        return self._current

    def get_current_dirs(self) -> list[str]:
        """Return the current scope's directory list.

        Raises
        ------
        StateError
            If no scope has been selected.
        """
        return self._require_current().dirs

    def get_current_paths(self) -> list[str]:
        """Return the current scope's directories followed by its files.

        Raises
        ------
        StateError
            If no scope has been selected.
        """
        return self._require_current().paths()

    def select(self, picker: Optional["Picker"] = None) -> Optional[Scope]:
        """Let the user pick the current scope interactively.

        Uses :func:`neoscopes.picker.default_picker` when *picker* is not
        given.  Returns the selected scope, or *None* if the user cancelled
        (the current scope is then left unchanged).
        """
        if picker is None:
            from neoscopes.picker import default_picker

            picker = default_picker()
        choice = picker.choose(list(self._scopes.values()))
        if choice is None:
            logger.debug("Scope selection cancelled.")
            return None
        return self.set_current(choice)

    # ------------------------------------------------------------------
    # Startup scope
    # ------------------------------------------------------------------

    def add_startup_scope(
        self,
        argv: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
        value_flags: Sequence[str] = DEFAULT_VALUE_FLAGS,
    ) -> Scope:
        """Register and select a scope built from the invocation arguments.

        Every argument after the program name that is not a flag (and not
        the value of a flag listed in *value_flags*) is classified: an
        existing directory is used as is, an existing file contributes its
        parent directory, anything else is ignored.  If no directory is
        found, *cwd* (default: the current working directory) is used.
        """
        if argv is None:
            argv = sys.argv
        dirs: list[str] = []
        for index, arg in enumerate(argv):
            if index == 0 or argv[index - 1] in value_flags:
                continue
            if arg.startswith("-"):
                continue
            path = Path(arg)
            if path.is_dir():
                dirs.append(arg)
            elif path.is_file():
                dirs.append(os.path.dirname(arg) or ".")
        if not dirs:
            dirs.append(cwd if cwd is not None else os.getcwd())
        self.add(Scope(name=STARTUP_SCOPE_NAME, dirs=dirs))
        return self.set_current(STARTUP_SCOPE_NAME)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def setup(self, config: Any = None, **kwargs: Any) -> None:
        """Ingest a configuration into this registry.

        Shortcut for :func:`neoscopes.ingest.setup`; see there for the
        accepted keyword arguments.
        """
        from neoscopes.ingest import setup

        setup(self, config, **kwargs)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_current(self) -> Scope:
        if self._current is None:
            raise StateError(
                "Current scope not set, call set_current(scope_name) or select() first."
            )
        return self._current


# Process-wide default registry, created on first use.
_default_registry: Optional[ScopeRegistry] = None


def get_registry() -> ScopeRegistry:
    """Return the process-wide default registry, creating it if necessary."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ScopeRegistry()
    return _default_registry


def reset_registry() -> None:
    """Drop the process-wide default registry (primarily for testing)."""
    global _default_registry
    _default_registry = None

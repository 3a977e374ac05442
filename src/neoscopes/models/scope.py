"""Scope model -- a named, mutable collection of filesystem locations.

A scope is the unit the registry stores and selects.  Directories and
files are kept in separate ordered lists; neither list is deduplicated and
no path is checked for existence.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from neoscopes.errors import ValidationError

# Messages reported for each invalid field, keyed by the field name.
_FIELD_MESSAGES = {
    "name": "scope.name must be set",
    "dirs": "scope.dirs must be a list of directory paths",
    "files": (
        "scope.files must be a list of individual files to include in the "
        "scope (it is okay to be empty)"
    ),
    "origin": "scope.origin must be a string",
    "on_select": "scope.on_select must be callable",
}


class Scope(BaseModel):
    """A named set of directories and files representing a working area.

    Registering a scope through :meth:`ScopeRegistry.add` appends the
    registry's cross-scope directories onto :attr:`dirs` in place, so a
    ``Scope`` handed to the registry should be treated as owned by it.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    name: str = Field(
        ...,
        min_length=1,
        description="Unique scope name within a registry.",
    )
    dirs: list[str] = Field(
        ...,
        description="Directories of the scope, absolute or relative to the working directory.",
    )
    files: list[str] = Field(
        default_factory=list,
        description="Individual files of the scope, kept apart from dirs.",
    )
    origin: Optional[str] = Field(
        default=None,
        description="Derivation source: 'npm', 'git', or None for user scopes.",
    )
    on_select: Optional[Callable[[], Any]] = Field(
        default=None,
        exclude=True,
        description="Zero-argument callback invoked when the scope becomes current.",
    )

    @field_validator("dirs", "files", mode="before")
    @classmethod
    def require_ordered_paths(cls, value: Any, info: ValidationInfo) -> Any:
        """Accept only lists and tuples; ``files=None`` means no files."""
        if value is None and info.field_name == "files":
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{info.field_name} must be a list or tuple")
        return value

    @classmethod
    def coerce(cls, value: Any) -> "Scope":
        """Return *value* as a :class:`Scope`, validating mappings.

        ``Scope`` instances are returned unchanged so the caller's object is
        the one the registry stores.  Any invalid input raises
        :class:`~neoscopes.errors.ValidationError`.
        """
        if isinstance(value, Scope):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"scope must be a Scope or a mapping, got {type(value).__name__}"
            )
        try:
            return cls.model_validate(dict(value))
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

    def paths(self) -> list[str]:
        """Return directories followed by files, each in stored order."""
        return [*self.dirs, *self.files]

    def to_summary(self) -> dict:
        """Return a JSON-safe dictionary of the scope (without the callback)."""
        return {
            "name": self.name,
            "dirs": list(self.dirs),
            "files": list(self.files),
            "origin": self.origin,
            "refreshes_on_select": self.on_select is not None,
        }


def _describe(exc: pydantic.ValidationError) -> str:
    """Turn the first pydantic error into a scope-specific message."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    loc = errors[0].get("loc") or ()
    field = loc[0] if loc else None
    return _FIELD_MESSAGES.get(field, errors[0].get("msg", str(exc)))

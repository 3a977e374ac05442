"""Configuration model and project-level config file handling.

Provides :class:`ScopesConfig`, the structured form of everything
:func:`neoscopes.ingest.setup` accepts.  Every field is optional.  Values
are resolved in priority order:

1. **Explicit values** (highest priority) -- passed by the caller
2. **Environment variables** -- ``NEOSCOPES_*``
3. **Defaults** (lowest priority)

A project can also ship a JSON file (``neoscopes.config.json`` by default)
next to its sources.  It is read by :func:`load_project_config` and merged
by the ingestion step, not by this module.

Typical usage::

    config = ScopesConfig.resolve({"scopes": [...], "current_scope": "api"})
    project = load_project_config("/path/to/project", config.neoscopes_config_filename)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from neoscopes.errors import ValidationError
from neoscopes.models.scope import Scope

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Project-level config file, resolved relative to the working directory.
DEFAULT_CONFIG_FILE_NAME = "neoscopes.config.json"

# Environment variable prefix, e.g. ``NEOSCOPES_LOG_LEVEL=DEBUG``.
ENV_PREFIX = "NEOSCOPES_"

# Keys written to and read from the project-level config file.
PROJECT_FILE_KEYS = (
    "scopes",
    "enable_scopes_from_npm",
    "diff_branches_for_scopes",
    "diff_ancestors_for_scopes",
    "add_dirs_to_all_scopes",
)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ScopesConfig(BaseModel):
    """Structured configuration for a scope registry.

    Attributes
    ----------
    scopes:
        Literal scope definitions to register.
    add_dirs_to_all_scopes:
        Directories injected into every scope, present and future.
    current_scope:
        Name of the scope to select once all scopes are registered.
    enable_scopes_from_npm:
        Derive one scope per ``package.json`` workspace package.
    diff_branches_for_scopes:
        Branches to diff the working tree against (``git:<branch>`` scopes).
    diff_ancestors_for_scopes:
        Branches to diff against their merge base (``git_ancestor:<branch>``).
    on_scope_selected:
        Callback receiving the scope after every selection.
    neoscopes_config_filename:
        Project-level config file name, relative to the working directory.
    refresh_ancestors_with_ancestor_diff:
        Refresh ``git_ancestor:`` scopes with the ancestor diff on selection
        instead of the two-dot branch diff.
    log_level:
        Level applied by :meth:`configure_logging`.
    """

    model_config = ConfigDict(extra="ignore")

    scopes: Optional[list[Scope]] = Field(
        default=None,
        description="Literal scope definitions to register.",
    )
    add_dirs_to_all_scopes: Optional[list[str]] = Field(
        default=None,
        description="Directories to include in all scopes.",
    )
    current_scope: Optional[str] = Field(
        default=None,
        description="Scope to select after registration.",
    )
    enable_scopes_from_npm: bool = Field(
        default=False,
        description="Load scopes from ./package.json workspaces.",
    )
    diff_branches_for_scopes: Optional[list[str]] = Field(
        default=None,
        description="Branches to diff for git-diff scopes.",
    )
    diff_ancestors_for_scopes: Optional[list[str]] = Field(
        default=None,
        description="Branches to diff from their common ancestor.",
    )
    on_scope_selected: Optional[Callable[[Scope], Any]] = Field(
        default=None,
        exclude=True,
        description="Callback invoked with the scope on every selection.",
    )
    neoscopes_config_filename: str = Field(
        default=DEFAULT_CONFIG_FILE_NAME,
        min_length=1,
        description="Project-level config file name.",
    )
    refresh_ancestors_with_ancestor_diff: bool = Field(
        default=False,
        description="Refresh ancestor scopes with the ancestor diff on selection.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL.",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_log_level(self) -> "ScopesConfig":
        """Normalise and validate the log level string."""
        normalised = self.log_level.upper().strip()
        if normalised not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}."
            )
        self.log_level = normalised
        return self

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def resolve(cls, value: Any = None) -> "ScopesConfig":
        """Build a fully resolved configuration: explicit -> env -> defaults.

        Parameters
        ----------
        value:
            A :class:`ScopesConfig`, a mapping of field names, or *None*.
            Scope instances inside ``scopes`` are kept as given.

        Raises
        ------
        ValidationError
            If any field is malformed.
        """
        if value is None:
            explicit: dict = {}
        elif isinstance(value, ScopesConfig):
            explicit = {name: getattr(value, name) for name in value.model_fields_set}
        elif isinstance(value, Mapping):
            explicit = dict(value)
        else:
            raise ValidationError(
                f"config must be a mapping or ScopesConfig, got {type(value).__name__}"
            )

        merged = _load_env_overrides()
        merged.update(explicit)
        return _validate(merged, source="config")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, config_path: str) -> Path:
        """Write the project-level keys of this configuration as JSON.

        Callbacks are not serialisable and are left out.

        Returns
        -------
        Path
            The path to the written file.
        """
        target = Path(config_path).resolve()
        target.parent.mkdir(parents=True, exist_ok=True)

        data: dict = {}
        if self.scopes is not None:
            data["scopes"] = [
                {"name": scope.name, "dirs": scope.dirs, "files": scope.files}
                for scope in self.scopes
            ]
        data["enable_scopes_from_npm"] = self.enable_scopes_from_npm
        for key in (
            "diff_branches_for_scopes",
            "diff_ancestors_for_scopes",
            "add_dirs_to_all_scopes",
        ):
            value = getattr(self, key)
            if value is not None:
                data[key] = value

        with open(target, "w", encoding="utf-8") as fp:
            json.dump(data, fp, indent=2, ensure_ascii=False)
            fp.write("\n")

        logger.info("Saved project configuration to %s", target)
        return target

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Apply the configured log level to the ``neoscopes`` logger.

        Idempotent: the stream handler is only attached once.
        """
        pkg_logger = logging.getLogger("neoscopes")
        pkg_logger.setLevel(self.log_level)

        if not pkg_logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(self.log_level)
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)


# ---------------------------------------------------------------------------
# Project-level config file
# ---------------------------------------------------------------------------


def load_project_config(
    cwd: Optional[str] = None,
    filename: str = DEFAULT_CONFIG_FILE_NAME,
) -> ScopesConfig:
    """Read the project-level config file from *cwd*.

    Only :data:`PROJECT_FILE_KEYS` are taken from the file.  A missing file
    yields an empty configuration.

    Raises
    ------
    ValidationError
        If the file exists but is not a JSON object, or one of its keys is
        malformed.
    """
    path = Path(cwd) if cwd is not None else Path.cwd()
    path = path / filename
    if not path.is_file():
        logger.debug("No project config file at %s.", path)
        return ScopesConfig()

    try:
        with open(path, "r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Config file {path} contains invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {path} does not contain a JSON object.")

    logger.info("Loaded project configuration from %s", path)
    return _validate(
        {key: data[key] for key in PROJECT_FILE_KEYS if key in data},
        source=str(path),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _validate(data: dict, source: str) -> ScopesConfig:
    try:
        return ScopesConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", str(exc))
        raise ValidationError(f"Invalid {source}: {where}: {message}") from exc


def _load_env_overrides() -> dict:
    """Read ``NEOSCOPES_*`` environment variables and return overrides.

    Supported variables:

    - ``NEOSCOPES_CONFIG_FILENAME`` -- override neoscopes_config_filename
    - ``NEOSCOPES_LOG_LEVEL`` -- override log_level
    """
    overrides: dict = {}

    filename = os.environ.get(f"{ENV_PREFIX}CONFIG_FILENAME")
    if filename:
        overrides["neoscopes_config_filename"] = filename

    log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        overrides["log_level"] = log_level

    if overrides:
        logger.debug(
            "Environment overrides applied: %s",
            ", ".join(overrides.keys()),
        )
    return overrides

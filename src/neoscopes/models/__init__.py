"""Pydantic data models for scopes."""

from neoscopes.models.scope import Scope

__all__ = ["Scope"]

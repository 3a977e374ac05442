"""Tests for the Scope model and the error hierarchy."""

from __future__ import annotations

import pytest

from neoscopes.errors import NotFoundError, ScopeError, StateError, ValidationError
from neoscopes.models.scope import Scope


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestScopeConstruction:
    """Scope accepts the documented fields and defaults the optional ones."""

    def test_minimal_scope(self) -> None:
        scope = Scope(name="api", dirs=["services/api"])
        assert scope.name == "api"
        assert scope.dirs == ["services/api"]
        assert scope.files == []
        assert scope.origin is None
        assert scope.on_select is None

    def test_empty_dirs_allowed(self) -> None:
        scope = Scope(name="empty", dirs=[])
        assert scope.dirs == []

    def test_duplicates_are_kept(self) -> None:
        scope = Scope(name="dup", dirs=["a", "a"], files=["f", "f"])
        assert scope.dirs == ["a", "a"]
        assert scope.files == ["f", "f"]

    def test_paths_are_dirs_then_files(self) -> None:
        scope = Scope(name="p", dirs=["d1", "d2"], files=["f1"])
        assert scope.paths() == ["d1", "d2", "f1"]

    def test_on_select_is_excluded_from_dump(self) -> None:
        scope = Scope(name="cb", dirs=[], on_select=lambda: None)
        assert "on_select" not in scope.model_dump()

    def test_to_summary(self) -> None:
        scope = Scope(name="git:main", dirs=[], files=["a.py"], origin="git", on_select=lambda: None)
        assert scope.to_summary() == {
            "name": "git:main",
            "dirs": [],
            "files": ["a.py"],
            "origin": "git",
            "refreshes_on_select": True,
        }


# ---------------------------------------------------------------------------
# Coercion and validation
# ---------------------------------------------------------------------------


class TestScopeCoerce:
    """Scope.coerce validates mappings and passes instances through."""

    def test_instance_is_returned_unchanged(self) -> None:
        scope = Scope(name="a", dirs=["x"])
        assert Scope.coerce(scope) is scope

    def test_mapping_is_validated(self) -> None:
        scope = Scope.coerce({"name": "a", "dirs": ["x"], "files": ["y"], "origin": "npm"})
        assert isinstance(scope, Scope)
        assert scope.files == ["y"]
        assert scope.origin == "npm"

    def test_missing_files_defaults_to_empty(self) -> None:
        assert Scope.coerce({"name": "a", "dirs": []}).files == []

    def test_none_files_defaults_to_empty(self) -> None:
        assert Scope.coerce({"name": "a", "dirs": [], "files": None}).files == []

    def test_missing_name_raises(self) -> None:
        with pytest.raises(ValidationError, match="scope.name must be set"):
            Scope.coerce({"dirs": ["x"]})

    def test_empty_name_raises(self) -> None:
        with pytest.raises(ValidationError, match="scope.name"):
            Scope.coerce({"name": "", "dirs": ["x"]})

    def test_missing_dirs_raises(self) -> None:
        with pytest.raises(ValidationError, match="scope.dirs"):
            Scope.coerce({"name": "a"})

    def test_string_dirs_raises(self) -> None:
        with pytest.raises(ValidationError, match="scope.dirs"):
            Scope.coerce({"name": "a", "dirs": "src"})

    def test_non_list_files_raises(self) -> None:
        with pytest.raises(ValidationError, match="scope.files"):
            Scope.coerce({"name": "a", "dirs": [], "files": "main.py"})

    def test_non_callable_on_select_raises(self) -> None:
        with pytest.raises(ValidationError, match="on_select"):
            Scope.coerce({"name": "a", "dirs": [], "on_select": "nope"})

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(ValidationError, match="mapping"):
            Scope.coerce(["a", ["x"]])


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    """Error classes share a base and map onto built-in exceptions."""

    def test_hierarchy(self) -> None:
        assert issubclass(ValidationError, ScopeError)
        assert issubclass(ValidationError, ValueError)
        assert issubclass(NotFoundError, LookupError)
        assert issubclass(StateError, RuntimeError)

    def test_not_found_carries_name(self) -> None:
        exc = NotFoundError("missing")
        assert exc.name == "missing"
        assert "missing" in str(exc)

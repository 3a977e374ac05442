"""Tests for package initialization and basic imports."""


def test_package_imports():
    """Verify the main package can be imported."""
    import neoscopes

    assert neoscopes is not None


def test_version_defined():
    """Verify __version__ is set and follows semver format."""
    from neoscopes import __version__

    assert __version__ is not None
    assert isinstance(__version__, str)
    parts = __version__.split(".")
    assert len(parts) == 3, f"Expected semver (X.Y.Z), got {__version__}"
    for part in parts:
        assert part.isdigit(), f"Version part '{part}' is not a digit in {__version__}"


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import neoscopes.cli
    import neoscopes.derivation
    import neoscopes.mcp
    import neoscopes.models

    assert neoscopes.cli is not None
    assert neoscopes.derivation is not None
    assert neoscopes.mcp is not None
    assert neoscopes.models is not None


def test_public_api_exports():
    """The top-level package re-exports the registry API."""
    import neoscopes

    for name in (
        "Scope",
        "ScopeRegistry",
        "ScopesConfig",
        "ValidationError",
        "NotFoundError",
        "StateError",
        "setup",
        "get_registry",
    ):
        assert hasattr(neoscopes, name), name


def test_cli_group_exists():
    """Verify the Click CLI group can be imported."""
    from neoscopes.cli.main import cli

    assert cli is not None
    assert callable(cli)

"""Tests for the Click CLI: list, show, paths, select, init.

All tests use real project config files in temporary directories and the
Click test runner.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from neoscopes.cli.main import cli
from neoscopes.config import DEFAULT_CONFIG_FILE_NAME, ENV_PREFIX


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env():
    """Remove all NEOSCOPES_* env vars for the duration of each test."""
    saved = {k: os.environ.pop(k) for k in list(os.environ) if k.startswith(ENV_PREFIX)}
    yield
    os.environ.update(saved)


@pytest.fixture()
def runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A project with two literal scopes and a shared directory."""
    (tmp_path / DEFAULT_CONFIG_FILE_NAME).write_text(json.dumps({
        "scopes": [
            {"name": "api", "dirs": ["services/api", "libs"], "files": ["Makefile"]},
            {"name": "web", "dirs": ["apps/web"]},
        ],
    }))
    return tmp_path


def _invoke(runner: CliRunner, project: Path, *args: str, **kwargs):
    return runner.invoke(cli, ["--cwd", str(project), *args], **kwargs)


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


class TestCLIGroup:
    """The CLI group is configured with version and help."""

    def test_cli_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "neoscopes" in result.output
        for command in ("list", "show", "paths", "select", "init", "serve"):
            assert command in result.output

    def test_cli_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "neoscopes" in result.output
        assert "0.1.0" in result.output


# ---------------------------------------------------------------------------
# list / show
# ---------------------------------------------------------------------------


class TestList:
    """neoscopes list shows the configured scopes."""

    def test_text_output(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "list")
        assert result.exit_code == 0
        assert "api" in result.output
        assert "2 dirs, 1 files" in result.output
        assert "web" in result.output

    def test_json_output(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "list", "--json-output")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["current_scope"] is None
        assert [scope["name"] for scope in data["scopes"]] == ["api", "web"]

    def test_empty_project(self, runner: CliRunner, tmp_path: Path) -> None:
        result = _invoke(runner, tmp_path, "list")
        assert result.exit_code == 0
        assert "No scopes defined" in result.output

    def test_malformed_config_fails(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_FILE_NAME).write_text("{oops")
        result = _invoke(runner, tmp_path, "list")
        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output

    def test_undecodable_config_fails(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_FILE_NAME).write_bytes(b"\xff\xfe")
        result = _invoke(runner, tmp_path, "list")
        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output

    def test_config_option(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "alt.json").write_text(json.dumps({"scopes": [{"name": "alt", "dirs": []}]}))
        result = _invoke(runner, tmp_path, "--config", "alt.json", "list", "--json-output")
        assert result.exit_code == 0
        assert json.loads(result.output)["scopes"][0]["name"] == "alt"

    def test_config_env_var(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "env.json").write_text(json.dumps({"scopes": [{"name": "env", "dirs": []}]}))
        result = runner.invoke(
            cli,
            ["--cwd", str(tmp_path), "list", "--json-output"],
            env={"NEOSCOPES_CONFIG_FILENAME": "env.json"},
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["scopes"][0]["name"] == "env"


class TestShow:
    """neoscopes show prints one scope."""

    def test_text_output(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "show", "api")
        assert result.exit_code == 0
        assert "services/api" in result.output
        assert "Makefile" in result.output

    def test_json_output(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "show", "web", "--json-output")
        assert result.exit_code == 0
        assert json.loads(result.output)["dirs"] == ["apps/web"]

    def test_unknown_scope(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "show", "ghost")
        assert result.exit_code == 1
        assert "ghost" in result.output


# ---------------------------------------------------------------------------
# paths
# ---------------------------------------------------------------------------


class TestPaths:
    """neoscopes paths prints dirs then files, one per line."""

    def test_named_scope(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "paths", "--scope", "api")
        assert result.exit_code == 0
        assert result.output.splitlines() == ["services/api", "libs", "Makefile"]

    def test_dirs_only(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "paths", "--scope", "api", "--dirs-only")
        assert result.output.splitlines() == ["services/api", "libs"]

    def test_unknown_scope(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "paths", "--scope", "ghost")
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_startup_scope_defaults_to_project_dir(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "paths")
        assert result.exit_code == 0
        assert result.output.splitlines() == [str(project.resolve())]

    def test_startup_scope_from_targets(self, runner: CliRunner, project: Path) -> None:
        target = project / "services"
        target.mkdir()
        source = project / "main.py"
        source.write_text("")
        result = _invoke(runner, project, "paths", str(target), str(source))
        assert result.exit_code == 0
        assert result.output.splitlines() == [str(target), str(project)]


# ---------------------------------------------------------------------------
# select / init
# ---------------------------------------------------------------------------


class TestSelect:
    """neoscopes select --plain prompts and prints the chosen scope."""

    def test_plain_selection(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "select", "--plain", input="2\n")
        assert result.exit_code == 0
        assert result.output.splitlines()[-1] == "apps/web"

    def test_cancel(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "select", "--plain", input="0\n")
        assert result.exit_code == 0
        assert "No scope selected" in result.output


class TestInit:
    """neoscopes init writes a starter config."""

    def test_writes_config(self, runner: CliRunner, tmp_path: Path) -> None:
        result = _invoke(runner, tmp_path, "init")
        assert result.exit_code == 0
        data = json.loads((tmp_path / DEFAULT_CONFIG_FILE_NAME).read_text())
        assert data["scopes"] == [{"name": "project", "dirs": ["."], "files": []}]

        listed = _invoke(runner, tmp_path, "list", "--json-output")
        assert json.loads(listed.output)["scopes"][0]["name"] == "project"

    def test_refuses_to_overwrite(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "init")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_force_overwrites(self, runner: CliRunner, project: Path) -> None:
        result = _invoke(runner, project, "init", "--force")
        assert result.exit_code == 0
        data = json.loads((project / DEFAULT_CONFIG_FILE_NAME).read_text())
        assert [scope["name"] for scope in data["scopes"]] == ["project"]

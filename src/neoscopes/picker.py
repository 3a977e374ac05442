"""Interactive scope pickers.

Two interchangeable implementations of the :class:`Picker` protocol:

- :class:`RichPicker` -- a numbered ``rich`` table with origin and a
  directory preview, for interactive terminals.
- :class:`PlainPicker` -- a plain numbered list through ``click``, usable
  anywhere stdin is readable.

:func:`default_picker` picks the rich one when the console is a terminal
and falls back to the plain one otherwise.  Both return the chosen scope
name, or *None* when the user cancels.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, TextIO

import click
from rich.console import Console
from rich.prompt import IntPrompt
from rich.table import Table

from neoscopes.models.scope import Scope

logger = logging.getLogger(__name__)

PROMPT_TEXT = "Select scope"

# Directories shown per scope in the rich table.
PREVIEW_DIRS = 3


class Picker(Protocol):
    """Presents scopes and returns the chosen name, or *None* if cancelled."""

    def choose(self, scopes: list[Scope]) -> Optional[str]:
        ...


class RichPicker:
    """Picker rendering a ``rich`` table and reading a number.

    Parameters
    ----------
    console:
        Console to render to.  Defaults to a new :class:`rich.console.Console`.
    stream:
        Optional input stream for the prompt (stdin when *None*).
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._console = console or Console()
        self._stream = stream

    def choose(self, scopes: list[Scope]) -> Optional[str]:
        ordered = sorted(scopes, key=lambda scope: scope.name)
        if not ordered:
            self._console.print("[yellow]No scopes registered.[/yellow]")
            return None

        table = Table(title="Scopes")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Origin", style="dim")
        table.add_column("Directories")
        for index, scope in enumerate(ordered, start=1):
            preview = scope.dirs[:PREVIEW_DIRS]
            if len(scope.dirs) > PREVIEW_DIRS:
                preview = [*preview, f"... (+{len(scope.dirs) - PREVIEW_DIRS})"]
            if scope.files:
                preview = [*preview, f"{len(scope.files)} files"]
            table.add_row(str(index), scope.name, scope.origin or "", "\n".join(preview))
        self._console.print(table)

        try:
            choice = IntPrompt.ask(
                f"{PROMPT_TEXT} (0 to cancel)",
                console=self._console,
                choices=[str(number) for number in range(len(ordered) + 1)],
                show_choices=False,
                default=0,
                stream=self._stream,
            )
        except (EOFError, KeyboardInterrupt):
            logger.debug("Rich picker aborted.")
            self._console.print()
            return None
        if not choice:
            return None
        return ordered[choice - 1].name


class PlainPicker:
    """Picker printing a sorted, numbered list of scope names."""

    def choose(self, scopes: list[Scope]) -> Optional[str]:
        names = sorted(scope.name for scope in scopes)
        if not names:
            click.secho("No scopes registered.", fg="yellow")
            return None

        for index, name in enumerate(names, start=1):
            click.echo(f"  {index:3d}) {name}")
        try:
            choice = click.prompt(
                f"{PROMPT_TEXT} (0 to cancel)",
                type=click.IntRange(0, len(names)),
                default=0,
                show_default=False,
            )
        except click.Abort:
            logger.debug("Plain picker aborted.")
            return None
        if not choice:
            return None
        return names[choice - 1]


def default_picker(console: Optional[Console] = None) -> Picker:
    """Return a :class:`RichPicker` on a terminal, else a :class:`PlainPicker`."""
    console = console or Console()
    if console.is_terminal:
        return RichPicker(console)
    return PlainPicker()

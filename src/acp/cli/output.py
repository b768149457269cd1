"""Output handling shared by all commands: JSON or human, never both."""

from __future__ import annotations

import json
from typing import Any, Callable, NoReturn

import click
from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


class Output:
    """Renders results as JSON (``--json``) or as rich text."""

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode

    def emit(self, data: Any, human: Callable[[], None]) -> None:
        if self.json_mode:
            click.echo(json.dumps(data, indent=2, default=str))
        else:
            human()

    def fatal(self, message: str) -> NoReturn:
        if self.json_mode:
            click.echo(json.dumps({"error": message}))
        else:
            err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
        raise SystemExit(1)

    def warn(self, message: str) -> None:
        # stderr in both modes, so JSON on stdout stays parseable
        err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}", soft_wrap=True)

    def success(self, message: str) -> None:
        console.print(f"  [green]✓[/green] {escape(message)}")

    def heading(self, text: str) -> None:
        console.print(f"\n  [bold]{escape(text)}[/bold]\n")

    def log(self, text: str = "", style: str | None = None) -> None:
        if not self.json_mode:
            console.print(text, style=style, markup=False, soft_wrap=True)

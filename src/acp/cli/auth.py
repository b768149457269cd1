"""CLI commands for the stored session token."""

import click

from acp.cli.output import Output, console
from acp.config import ConfigError, edit_config, get_settings, load_config


@click.group()
def auth():
    """Manage the marketplace session used by agent commands."""
    pass


@auth.command()
@click.option("--token", default=None, help="Session token (prompted if omitted)")
@click.pass_obj
def login(out: Output, token: str | None):
    """Store a session token issued by the marketplace."""
    if token is None:
        token = click.prompt("Paste session token", hide_input=True, default="", show_default=False)
    token = token.strip()
    if not token:
        out.fatal("No session token given.")
    try:
        with edit_config() as config:
            config.session_token = token
    except ConfigError as e:
        out.fatal(str(e))
    out.emit({"loggedIn": True}, lambda: out.success("Session token saved."))


@auth.command()
@click.pass_obj
def logout(out: Output):
    """Forget the stored session token."""
    try:
        with edit_config() as config:
            had_token = config.session_token is not None
            config.session_token = None
    except ConfigError as e:
        out.fatal(str(e))

    def human() -> None:
        if had_token:
            console.print("[green]Logged out successfully.[/green]")
        else:
            console.print("[dim]Not currently logged in.[/dim]")

    out.emit({"loggedOut": had_token}, human)


@auth.command()
@click.pass_obj
def status(out: Output):
    """Show where the session token comes from."""
    try:
        config = load_config()
    except ConfigError as e:
        out.fatal(str(e))

    if get_settings().session_token:
        source = "environment"
    elif config.session_token:
        source = "config"
    else:
        source = None

    def human() -> None:
        if source:
            console.print(f"[green]Logged in[/green] [dim](token from {source})[/dim]")
        else:
            console.print("[dim]Not logged in. Use 'acp auth login' to store a session token.[/dim]")

    out.emit({"loggedIn": source is not None, "source": source}, human)

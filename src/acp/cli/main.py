"""ACP CLI - main entry point."""

import logging

import click

from acp import __version__
from acp.cli.agent import agent
from acp.cli.auth import auth
from acp.cli.config_cmd import config
from acp.cli.output import Output
from acp.cli.search import search


@click.group()
@click.version_option(version=__version__, prog_name="acp")
@click.option("--json", "json_mode", is_flag=True, help="Machine-readable JSON output")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, json_mode: bool, verbose: bool):
    """ACP - search the agent marketplace and manage your agents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Output(json_mode=json_mode)


cli.add_command(search)
cli.add_command(agent)
cli.add_command(auth)
cli.add_command(config)


if __name__ == "__main__":
    cli()

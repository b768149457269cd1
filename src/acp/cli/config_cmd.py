"""CLI commands for configuration."""

import click

from acp.agents import redact_api_key
from acp.cli.output import Output, console
from acp.config import ConfigError, get_settings, load_config


@click.group(name="config")
def config():
    """Inspect ACP CLI configuration."""
    pass


@config.command()
@click.pass_obj
def show(out: Output):
    """Show current configuration."""
    settings = get_settings()
    try:
        local = load_config(settings.config_file)
    except ConfigError as e:
        out.fatal(str(e))
    active = local.active_agent

    def human() -> None:
        console.print(f"Search URL:    {settings.search_url}")
        console.print(f"API URL:       {settings.api_url}")
        console.print(f"Timeout:       {settings.timeout}s")
        console.print(f"Config file:   {settings.config_file}")
        console.print(f"Agents saved:  {len(local.agents)}")
        console.print(f"Active agent:  {active.name if active else '(none)'}")
        console.print(f"API key:       {redact_api_key(local.current_api_key)}")

    out.emit(
        {
            "searchUrl": settings.search_url,
            "apiUrl": settings.api_url,
            "timeout": settings.timeout,
            "configFile": str(settings.config_file),
            "agents": len(local.agents),
            "activeAgent": active.name if active else None,
        },
        human,
    )

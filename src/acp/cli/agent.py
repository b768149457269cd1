"""CLI commands for managing local agent identities."""

from __future__ import annotations

import logging

import click
from rich.markup import escape

from acp.agents import (
    AgentNotFoundError,
    MissingApiKeyError,
    activate_agent,
    find_agent_by_name,
    record_created_agent,
    redact_api_key,
    sync_agents_to_config,
)
from acp.api import ApiError
from acp.auth import AuthError, create_agent_api, ensure_session, fetch_agents, regenerate_api_key
from acp.cli.output import Output, console
from acp.config import ConfigError, load_config
from acp.models import LocalConfig

logger = logging.getLogger(__name__)


def _load(out: Output) -> LocalConfig:
    try:
        return load_config()
    except ConfigError as e:
        out.fatal(str(e))


def _session(out: Output, config: LocalConfig) -> str:
    try:
        return ensure_session(config)
    except AuthError as e:
        out.fatal(str(e))


def _display_agents(out: Output, config: LocalConfig) -> None:
    out.heading("Agents")
    for a in config.agents:
        marker = " [green](active)[/green]" if config.is_active(a.id) else ""
        console.print(f"  [bold]{escape(a.name)}[/bold]{marker}")
        console.print(f"    [dim]Wallet[/dim]  {a.wallet_address}")
        if a.api_key:
            console.print(f"    [dim]API Key[/dim] {redact_api_key(a.api_key)}")
        console.print()


@click.group()
def agent():
    """List, switch and create your marketplace agents."""
    pass


@agent.command("list")
@click.pass_obj
def list_agents(out: Output):
    """Show all agents, refreshed from the server."""
    config = _load(out)
    token = _session(out, config)

    try:
        config = sync_agents_to_config(fetch_agents(token))
    except (ApiError, ConfigError) as e:
        logger.warning("Agent refresh failed: %s", e)
        out.warn(f"Could not fetch agents from server: {e}")
        out.log("  Showing locally saved agents.\n")

    if not config.agents:
        out.emit(
            {"agents": []},
            lambda: out.log("  No agents found. Run `acp agent create <name>` to create one.\n"),
        )
        return

    out.emit(
        [
            {
                "name": a.name,
                "id": a.id,
                "walletAddress": a.wallet_address,
                "active": config.is_active(a.id),
            }
            for a in config.agents
        ],
        lambda: _display_agents(out, config),
    )


@agent.command("switch")
@click.argument("name")
@click.pass_obj
def switch_agent(out: Output, name: str):
    """Make NAME the active agent (regenerates its API key)."""
    if not name.strip():
        out.fatal("Usage: acp agent switch <name>")

    config = _load(out)
    target = find_agent_by_name(config, name)
    if target is None:
        names = ", ".join(a.name for a in config.agents)
        out.fatal(
            f'Agent "{name}" not found. Run `acp agent list` first. '
            f"Available: {names or '(none)'}"
        )

    token = _session(out, config)
    out.log(f"  Switching to {target.name}...\n")
    try:
        api_key = regenerate_api_key(token, target.wallet_address)
        activate_agent(target.id, api_key)
    except (ApiError, AgentNotFoundError, ConfigError) as e:
        out.fatal(f"Failed to switch agent: {e}")

    def human() -> None:
        out.success(f"Switched to agent: {target.name}")
        out.log(f"    Wallet:  {target.wallet_address}")
        out.log(f"    API Key: {redact_api_key(api_key)} (regenerated)\n")

    out.emit(
        {"switched": True, "name": target.name, "walletAddress": target.wallet_address},
        human,
    )


@agent.command("create")
@click.argument("name")
@click.pass_obj
def create_agent(out: Output, name: str):
    """Create a new agent called NAME and make it active."""
    if not name.strip():
        out.fatal("Usage: acp agent create <name>")

    config = _load(out)
    token = _session(out, config)
    try:
        created = create_agent_api(token, name)
        entry = record_created_agent(created, name)
    except MissingApiKeyError as e:
        out.fatal(str(e))
    except (ApiError, ConfigError) as e:
        out.fatal(f"Create agent failed: {e}")

    def human() -> None:
        out.success(f"Agent created: {entry.name}")
        out.log(f"    Wallet:  {entry.wallet_address}")
        out.log(f"    API Key: {redact_api_key(entry.api_key)} (saved to config)\n")

    out.emit(
        {"created": True, "name": entry.name, "id": entry.id, "walletAddress": entry.wallet_address},
        human,
    )

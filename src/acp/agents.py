"""Reconciles the server's agents with the locally stored identities.

The server is authoritative for which agents exist; only the local config
knows each agent's API key and which one is active.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from acp.config import edit_config
from acp.models import AgentEntry, AgentNotFoundError, CreatedAgent, LocalConfig, ServerAgent

logger = logging.getLogger(__name__)

__all__ = [
    "AgentNotFoundError",
    "MissingApiKeyError",
    "activate_agent",
    "find_agent_by_name",
    "reconcile",
    "record_created_agent",
    "redact_api_key",
    "sync_agents_to_config",
]


class MissingApiKeyError(Exception):
    pass


def reconcile(config: LocalConfig, server_agents: Iterable[ServerAgent]) -> LocalConfig:
    """Build the agent list to persist from the server's view.

    Keys and the active id carry over by agent id. Local entries the server
    no longer reports are dropped. Nothing becomes active here.
    """
    agents = []
    for remote in server_agents:
        local = config.get(remote.id)
        agents.append(
            AgentEntry(
                id=remote.id,
                name=remote.name,
                wallet_address=remote.wallet_address or "",
                api_key=local.api_key if local else None,
            )
        )
    active_id = config.active_agent_id
    if active_id is not None and not any(a.id == active_id for a in agents):
        logger.debug("Active agent %s no longer on server", active_id)
        active_id = None
    return config.model_copy(update={"agents": agents, "active_agent_id": active_id})


def sync_agents_to_config(
    server_agents: Iterable[ServerAgent], path: Optional[Path] = None
) -> LocalConfig:
    """Reconcile against the stored config and persist the result."""
    with edit_config(path) as config:
        synced = reconcile(config, server_agents)
        config.agents = synced.agents
        config.active_agent_id = synced.active_agent_id
    logger.debug("Synced %d agent(s) to config", len(config.agents))
    return config


def activate_agent(agent_id: int, api_key: str, path: Optional[Path] = None) -> AgentEntry:
    """Persist ``agent_id`` as the only active agent.

    Nothing is written when the id is unknown.
    """
    with edit_config(path) as config:
        return config.activate(agent_id, api_key)


def record_created_agent(
    created: CreatedAgent, fallback_name: str, path: Optional[Path] = None
) -> AgentEntry:
    """Store a freshly created agent as the active one."""
    if not created.api_key:
        raise MissingApiKeyError("Create agent failed: no API key returned.")
    entry = AgentEntry(
        id=created.id,
        name=created.name or fallback_name,
        wallet_address=created.wallet_address,
        api_key=created.api_key,
    )
    with edit_config(path) as config:
        return config.add_active(entry)


def find_agent_by_name(config: LocalConfig, name: str) -> Optional[AgentEntry]:
    for entry in config.agents:
        if entry.name == name:
            return entry
    folded = [e for e in config.agents if e.name.lower() == name.lower()]
    return folded[0] if len(folded) == 1 else None


def redact_api_key(key: Optional[str]) -> str:
    if not key or len(key) < 8:
        return "(not available)"
    return f"{key[:4]}...{key[-4:]}"

"""Shared Pydantic models for the ACP CLI."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentNotFoundError(LookupError):
    pass


# === Server Models ===


class AgentMetrics(_WireModel):
    model_config = ConfigDict(extra="allow")

    successful_job_count: Optional[Union[int, float]] = None
    success_rate: Optional[float] = None
    unique_buyer_count: Optional[Union[int, float]] = None
    mins_from_last_online_time: Optional[float] = None
    is_online: Optional[bool] = None


class ServerAgent(_WireModel):
    """An agent as the marketplace reports it, live metrics included.

    Only the fields this client reads are typed; the rest of the record
    (jobs, resources, token details) is kept as the server sent it.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    description: Optional[str] = None
    wallet_address: Optional[str] = None
    cluster: Optional[str] = None
    category: Optional[str] = None
    metrics: AgentMetrics = Field(default_factory=AgentMetrics)
    jobs: list[Any] = Field(default_factory=list)
    resources: list[Any] = Field(default_factory=list)

    @field_validator("metrics", "jobs", "resources", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return {} if info.field_name == "metrics" else []
        return v


class CreatedAgent(_WireModel):
    id: int
    name: str = ""
    wallet_address: str
    api_key: Optional[str] = None


# === Local Models ===


class AgentEntry(_WireModel):
    """An agent identity remembered in the local config."""

    id: int
    name: str
    wallet_address: str
    api_key: Optional[str] = None


class LocalConfig(_WireModel):
    """The local config document.

    Which agent is active is a single optional id, so at most one entry can
    ever be active. Only the active entry holds an API key.
    """

    agents: list[AgentEntry] = Field(default_factory=list)
    active_agent_id: Optional[int] = None
    current_api_key: Optional[str] = Field(default=None, alias="LITE_AGENT_API_KEY")
    session_token: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def upgrade_active_flags(cls, data: Any) -> Any:
        # Older files mark the active agent with a per-entry "active" flag.
        if not isinstance(data, dict):
            return data
        if data.get("activeAgentId") is not None or data.get("active_agent_id") is not None:
            return data
        for raw in data.get("agents") or []:
            if isinstance(raw, dict) and raw.get("active") is True:
                return {**data, "activeAgentId": raw.get("id")}
        return data

    def get(self, agent_id: int) -> Optional[AgentEntry]:
        return next((a for a in self.agents if a.id == agent_id), None)

    def is_active(self, agent_id: int) -> bool:
        return self.active_agent_id is not None and self.active_agent_id == agent_id

    @property
    def active_agent(self) -> Optional[AgentEntry]:
        if self.active_agent_id is None:
            return None
        return self.get(self.active_agent_id)

    def activate(self, agent_id: int, api_key: str) -> AgentEntry:
        """Make ``agent_id`` the only active agent, holding ``api_key``.

        Raises AgentNotFoundError without touching the config if the id is
        not present.
        """
        target = self.get(agent_id)
        if target is None:
            raise AgentNotFoundError(f"No local agent with id {agent_id}")
        for entry in self.agents:
            entry.api_key = api_key if entry.id == agent_id else None
        self.active_agent_id = agent_id
        self.current_api_key = api_key
        return target

    def add_active(self, entry: AgentEntry) -> AgentEntry:
        """Append ``entry`` and make it the only active agent."""
        if not entry.api_key:
            raise ValueError("An active agent needs an API key")
        for existing in self.agents:
            existing.api_key = None
        self.agents.append(entry)
        self.active_agent_id = entry.id
        self.current_api_key = entry.api_key
        return entry

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


# === Request Models ===


class SearchOptions(BaseModel):
    """Friendly search options, before translation into query params."""

    mode: Optional[str] = None
    online: Optional[bool] = None
    graduated: Optional[bool] = None
    high_risk: Optional[bool] = None
    cluster: Optional[str] = None
    contains: Optional[str] = None
    match: Optional[str] = None
    rerank: Optional[bool] = None
    performance_weight: Optional[float] = None
    similarity_cutoff: Optional[float] = None
    sparse_cutoff: Optional[float] = None

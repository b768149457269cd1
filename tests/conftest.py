"""Shared fixtures: isolated settings and a fake marketplace server."""

from __future__ import annotations

from typing import Callable, Union

import httpx
import pytest
from click.testing import CliRunner

from acp import api
from acp import config as acp_config
from acp.config import ACPSettings, save_config
from acp.models import AgentEntry, LocalConfig

API_URL = "https://api.test"
SEARCH_URL = "https://search.test/agents/search"


@pytest.fixture(autouse=True)
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.delenv("ACP_SESSION_TOKEN", raising=False)
    s = ACPSettings(
        api_url=API_URL,
        search_url=SEARCH_URL,
        config_file=tmp_path / "acp" / "config.json",
        session_token=None,
    )
    monkeypatch.setattr(acp_config, "_settings", s)
    return s


Handler = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeServer:
    """Routes requests by (method, url-without-query) to canned responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {}

    def route(self, method: str, url: str, handler: Handler) -> None:
        self.routes[(method, url)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        handler = self.routes.get((request.method, url))
        if handler is None:
            return httpx.Response(404, json={"error": "Not found"})
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(request)
        return handler


@pytest.fixture
def server(monkeypatch):
    fake = FakeServer()

    def make_client(token=None):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return httpx.Client(transport=httpx.MockTransport(fake), headers=headers)

    monkeypatch.setattr(api, "_make_client", make_client)
    return fake


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def stored_config(settings):
    """Two known agents, alpha active, plus a session token."""
    config = LocalConfig(
        agents=[
            AgentEntry(id=1, name="alpha", wallet_address="0xA", api_key="alpha-key-1234"),
            AgentEntry(id=2, name="beta", wallet_address="0xB"),
        ],
        active_agent_id=1,
        current_api_key="alpha-key-1234",
        session_token="tok",
    )
    save_config(config, settings.config_file)
    return config

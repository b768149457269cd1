"""Tests for the agent, auth and config commands."""

import json
import logging

import httpx

from acp.cli.main import cli
from acp.config import load_config

from conftest import API_URL


def _agents_response(*agents):
    return httpx.Response(200, json={"data": list(agents)})


ALPHA = {"id": 1, "name": "alpha", "walletAddress": "0xA", "description": "first"}
GAMMA = {"id": 3, "name": "gamma", "walletAddress": "0xC"}


def test_list_syncs_from_server(runner, server, stored_config, settings):
    server.route("GET", f"{API_URL}/agents", _agents_response(ALPHA, GAMMA))

    result = runner.invoke(cli, ["--json", "agent", "list"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        {"name": "alpha", "id": 1, "walletAddress": "0xA", "active": True},
        {"name": "gamma", "id": 3, "walletAddress": "0xC", "active": False},
    ]
    assert server.requests[0].headers["Authorization"] == "Bearer tok"

    stored = load_config(settings.config_file)
    assert [a.id for a in stored.agents] == [1, 3]
    assert stored.get(1).api_key == "alpha-key-1234"


def test_list_human_output(runner, server, stored_config):
    server.route("GET", f"{API_URL}/agents", _agents_response(ALPHA))

    result = runner.invoke(cli, ["agent", "list"])

    assert result.exit_code == 0
    assert "alpha (active)" in result.output
    assert "alph...1234" in result.output


def test_list_falls_back_to_local_agents(runner, server, stored_config, settings):
    server.route("GET", f"{API_URL}/agents", httpx.Response(401, json={"message": "Session expired"}))
    before = settings.config_file.read_text()

    result = runner.invoke(cli, ["agent", "list"])

    assert result.exit_code == 0
    assert "Could not fetch agents from server: HTTP 401: Session expired" in result.output
    assert "Showing locally saved agents." in result.output
    assert "beta" in result.output
    assert settings.config_file.read_text() == before


def test_list_fallback_is_logged(runner, server, stored_config, caplog):
    server.route("GET", f"{API_URL}/agents", httpx.Response(401, json={"message": "Session expired"}))

    with caplog.at_level(logging.WARNING, logger="acp.cli.agent"):
        result = runner.invoke(cli, ["agent", "list"])

    assert result.exit_code == 0
    assert any(
        r.levelno == logging.WARNING and "Agent refresh failed" in r.getMessage()
        for r in caplog.records
    )


def test_json_list_fallback_warns_on_stderr(runner, server, stored_config):
    server.route("GET", f"{API_URL}/agents", httpx.Response(401, json={"message": "Session expired"}))

    result = runner.invoke(cli, ["--json", "agent", "list"])

    assert result.exit_code == 0
    assert [a["name"] for a in json.loads(result.stdout)] == ["alpha", "beta"]
    assert "Could not fetch agents from server" in result.stderr


def test_list_without_agents(runner, server, settings):
    runner.invoke(cli, ["auth", "login", "--token", "tok"])
    server.route("GET", f"{API_URL}/agents", _agents_response())

    result = runner.invoke(cli, ["agent", "list"])

    assert result.exit_code == 0
    assert "No agents found" in result.output


def test_list_requires_session(runner, server):
    result = runner.invoke(cli, ["agent", "list"])
    assert result.exit_code == 1
    assert "Not logged in" in result.output
    assert server.requests == []


def test_switch_regenerates_and_activates(runner, server, stored_config, settings):
    server.route(
        "POST",
        f"{API_URL}/agents/0xB/api-key",
        httpx.Response(200, json={"data": {"apiKey": "beta-key-5678"}}),
    )

    result = runner.invoke(cli, ["agent", "switch", "beta"])

    assert result.exit_code == 0, result.output
    assert "Switched to agent: beta" in result.output
    assert "beta...5678" in result.output

    stored = load_config(settings.config_file)
    assert stored.active_agent_id == 2
    assert stored.get(2).api_key == "beta-key-5678"
    assert stored.get(1).api_key is None
    assert stored.current_api_key == "beta-key-5678"


def test_switch_unknown_agent(runner, server, stored_config):
    result = runner.invoke(cli, ["agent", "switch", "zeta"])

    assert result.exit_code == 1
    assert 'Agent "zeta" not found' in result.output
    assert "Available: alpha, beta" in result.output
    assert server.requests == []


def test_switch_failure_leaves_config(runner, server, stored_config, settings):
    server.route("POST", f"{API_URL}/agents/0xB/api-key", httpx.Response(500, json={"error": "boom"}))
    before = settings.config_file.read_text()

    result = runner.invoke(cli, ["agent", "switch", "beta"])

    assert result.exit_code == 1
    assert "Failed to switch agent: HTTP 500: boom" in result.output
    assert settings.config_file.read_text() == before


def test_create_appends_active_agent(runner, server, stored_config, settings):
    def handler(request):
        assert json.loads(request.content) == {"name": "gamma"}
        return httpx.Response(201, json={"data": {**GAMMA, "apiKey": "gamma-key-0000"}})

    server.route("POST", f"{API_URL}/agents", handler)

    result = runner.invoke(cli, ["--json", "agent", "create", "gamma"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "created": True,
        "name": "gamma",
        "id": 3,
        "walletAddress": "0xC",
    }
    stored = load_config(settings.config_file)
    assert [a.id for a in stored.agents] == [1, 2, 3]
    assert stored.active_agent_id == 3
    assert [a.api_key for a in stored.agents] == [None, None, "gamma-key-0000"]
    assert stored.current_api_key == "gamma-key-0000"


def test_create_without_api_key_is_fatal(runner, server, stored_config, settings):
    server.route("POST", f"{API_URL}/agents", httpx.Response(201, json={"data": GAMMA}))
    before = settings.config_file.read_text()

    result = runner.invoke(cli, ["agent", "create", "gamma"])

    assert result.exit_code == 1
    assert "no API key returned" in result.output
    assert settings.config_file.read_text() == before


def test_login_logout(runner, settings):
    result = runner.invoke(cli, ["auth", "login"], input="secret-token\n")
    assert result.exit_code == 0
    assert load_config(settings.config_file).session_token == "secret-token"

    result = runner.invoke(cli, ["--json", "auth", "status"])
    assert json.loads(result.output) == {"loggedIn": True, "source": "config"}

    result = runner.invoke(cli, ["auth", "logout"])
    assert "Logged out" in result.output
    assert load_config(settings.config_file).session_token is None


def test_config_show(runner, stored_config, settings):
    result = runner.invoke(cli, ["--json", "config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["activeAgent"] == "alpha"
    assert data["agents"] == 2
    assert data["configFile"] == str(settings.config_file)

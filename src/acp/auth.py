"""Session and agent API calls.

Sessions are issued elsewhere; this module only finds the stored token and
uses it against the agent endpoints.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from acp.api import ApiError, request, unwrap
from acp.config import get_settings, load_config
from acp.models import CreatedAgent, LocalConfig, ServerAgent

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


def ensure_session(config: Optional[LocalConfig] = None) -> str:
    """Return a session token from the environment or the local config."""
    settings = get_settings()
    if settings.session_token:
        return settings.session_token
    config = config if config is not None else load_config()
    if config.session_token:
        return config.session_token
    raise AuthError(
        "Not logged in. Run `acp auth login` or set ACP_SESSION_TOKEN."
    )


def _agents_url(*parts: str) -> str:
    return "/".join([get_settings().api_url.rstrip("/"), "agents", *parts])


def fetch_agents(token: str) -> list[ServerAgent]:
    body = unwrap(request("GET", _agents_url(), token=token))
    if not isinstance(body, list):
        raise ApiError("Unexpected agent list response")
    try:
        return [ServerAgent.model_validate(a) for a in body]
    except ValidationError as e:
        raise ApiError(f"Malformed agent in response: {e}") from e


def create_agent_api(token: str, name: str) -> CreatedAgent:
    body = unwrap(request("POST", _agents_url(), token=token, json={"name": name}))
    try:
        return CreatedAgent.model_validate(body)
    except ValidationError as e:
        raise ApiError(f"Malformed create response: {e}") from e


def regenerate_api_key(token: str, wallet_address: str) -> str:
    body = unwrap(
        request("POST", _agents_url(wallet_address, "api-key"), token=token)
    )
    api_key = body.get("apiKey") if isinstance(body, dict) else None
    if not api_key:
        raise ApiError("No API key returned")
    logger.debug("Regenerated API key for %s", wallet_address)
    return api_key

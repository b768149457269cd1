"""Agent search: option translation and the search endpoint call."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from acp.api import ApiError, request
from acp.config import get_settings
from acp.models import SearchOptions, ServerAgent

logger = logging.getLogger(__name__)


class SearchUsageError(Exception):
    pass


# Server-side defaults, used for help text and the summary line only.
SEARCH_DEFAULTS = {
    "mode": "hybrid",
    "online": True,
    "graduated": True,
    "rerank": True,
    "performance_weight": 0.97,
    "similarity_cutoff": 0.42,
    "sparse_cutoff": 0.0,
    "match": "all",
}

MODE_MAP = {
    "hybrid": "hybrid",
    "vector": "dense",
    "keyword": "sparse",
}

# Markers of the server's SQL error for filters that can never match
_EMPTY_RESULT_MARKERS = ("syntax", "SQL")


def validate_query(query: str) -> str:
    if not query or not query.strip():
        raise SearchUsageError(
            "Usage: acp search <query>\n  Run `acp search --help` for all options."
        )
    return query


def to_param(value: Any) -> str:
    """Canonical text form of a query parameter value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_params(query: str, opts: SearchOptions) -> dict[str, str]:
    """Translate friendly options into the search endpoint's query params.

    Only ``isOnline`` and ``hasGraduated`` are always sent; everything else
    goes out only when the caller set it, leaving defaults to the server.
    """
    if opts.match and not opts.contains:
        raise SearchUsageError("--match requires --contains")

    params = {"query": query}

    if opts.mode:
        api_mode = MODE_MAP.get(opts.mode)
        if api_mode is None:
            raise SearchUsageError(
                f'Invalid search mode "{opts.mode}". Use: {", ".join(MODE_MAP)}'
            )
        params["searchMode"] = api_mode

    online = opts.online if opts.online is not None else SEARCH_DEFAULTS["online"]
    graduated = opts.graduated if opts.graduated is not None else SEARCH_DEFAULTS["graduated"]
    params["isOnline"] = to_param(online)
    params["hasGraduated"] = to_param(graduated)
    if opts.high_risk is not None:
        params["isHighRisk"] = to_param(opts.high_risk)

    if opts.cluster:
        params["cluster"] = opts.cluster
    if opts.contains:
        params["fullTextFilter"] = opts.contains
    if opts.match:
        params["fullTextMatch"] = opts.match

    for field, name in (
        ("rerank", "rerank"),
        ("performance_weight", "performanceWeight"),
        ("similarity_cutoff", "similarityCutoff"),
        ("sparse_cutoff", "sparseCutoff"),
    ):
        value = getattr(opts, field)
        if value is not None:
            params[name] = to_param(value)

    return params


def fetch_search_results(params: dict[str, str]) -> list[dict[str, Any]]:
    """Query the search endpoint and return its agents as sent.

    A missing or non-list ``data`` is no results.
    """
    body = request("GET", get_settings().search_url, params=params)
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list):
        return []
    return data


def parse_search_agents(raw: list[dict[str, Any]]) -> list[ServerAgent]:
    try:
        return [ServerAgent.model_validate(a) for a in raw]
    except ValidationError as e:
        raise ApiError(f"Malformed agent in search response: {e}") from e


def is_empty_result_error(message: str) -> bool:
    """True for the server's SQL failure on filter combinations that match nothing.

    String matching is the only signal the server gives for this case.
    """
    return any(marker in message for marker in _EMPTY_RESULT_MARKERS)

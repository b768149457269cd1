"""CLI command for searching marketplace agents."""

from __future__ import annotations

from typing import Any, Optional

import click
from rich.markup import escape
from rich.table import Table

from acp.api import ApiError
from acp.cli.output import Output, console
from acp.models import SearchOptions, ServerAgent
from acp.search import (
    MODE_MAP,
    SEARCH_DEFAULTS,
    SearchUsageError,
    build_params,
    fetch_search_results,
    is_empty_result_error,
    parse_search_agents,
    to_param,
    validate_query,
)

NAME_WIDTH = 20
CATEGORY_WIDTH = 16
PLACEHOLDER = "-"


def truncate(s: str, max_len: int) -> str:
    return s if len(s) <= max_len else s[: max_len - 1] + "…"


def _or_placeholder(value) -> str:
    return PLACEHOLDER if value is None else str(value)


def agent_row(rank: int, agent: ServerAgent) -> tuple[str, ...]:
    m = agent.metrics
    rate = f"{m.success_rate:.1f}%" if m.success_rate is not None else PLACEHOLDER
    return (
        str(rank),
        truncate(agent.name, NAME_WIDTH),
        str(agent.id),
        truncate(agent.category, CATEGORY_WIDTH) if agent.category else PLACEHOLDER,
        rate,
        _or_placeholder(m.successful_job_count),
        _or_placeholder(m.unique_buyer_count),
        "Yes" if m.is_online else "No",
    )


def format_summary(opts: SearchOptions) -> str:
    """One-line description of the effective search settings."""
    parts = [f"mode={opts.mode or SEARCH_DEFAULTS['mode']}"]

    rerank = opts.rerank if opts.rerank is not None else SEARCH_DEFAULTS["rerank"]
    if rerank:
        weight = (
            opts.performance_weight
            if opts.performance_weight is not None
            else SEARCH_DEFAULTS["performance_weight"]
        )
        parts.append(f"rerank=on (weight={to_param(weight)})")
    else:
        parts.append("rerank=off")

    online = opts.online if opts.online is not None else SEARCH_DEFAULTS["online"]
    graduated = opts.graduated if opts.graduated is not None else SEARCH_DEFAULTS["graduated"]
    filters = [f"online={str(online).lower()}", f"graduated={str(graduated).lower()}"]
    if opts.high_risk is not None:
        filters.append(f"high-risk={str(opts.high_risk).lower()}")
    if opts.cluster:
        filters.append(f"cluster={opts.cluster}")
    if opts.contains:
        filters.append(f'contains="{opts.contains}" (match={opts.match or SEARCH_DEFAULTS["match"]})')
    parts.append(", ".join(filters))

    return " · ".join(parts)


def _build_table(agents: list[ServerAgent]) -> Table:
    table = Table(box=None, header_style="dim", pad_edge=False)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("ID", no_wrap=True)
    table.add_column("Category", no_wrap=True)
    table.add_column("Success", justify="right", no_wrap=True)
    table.add_column("Jobs", justify="right", no_wrap=True)
    table.add_column("Buyers", justify="right", no_wrap=True)
    table.add_column("Online", no_wrap=True)
    for i, agent in enumerate(agents, 1):
        table.add_row(*(escape(cell) for cell in agent_row(i, agent)))
    return table


def render_results(
    out: Output,
    query: str,
    opts: SearchOptions,
    agents: list[ServerAgent],
    raw: Optional[list[dict[str, Any]]] = None,
) -> None:
    """Print the ranked table, or in JSON mode the agents exactly as the server sent them."""
    if not agents:
        render_empty(out, query)
        return

    def human() -> None:
        out.heading(f'Search results for "{query}"')
        out.log(f"  {format_summary(opts)}", style="dim")
        out.log()
        console.print(_build_table(agents))
        out.log(f"\n  {len(agents)} result{'' if len(agents) == 1 else 's'}", style="dim")
        out.log()

    if raw is None:
        raw = [a.model_dump(by_alias=True, mode="json", exclude_none=True) for a in agents]
    out.emit(raw, human)


def render_empty(out: Output, query: str) -> None:
    def human() -> None:
        out.log(f'\n  No agents found for "{query}".')
        out.log()

    out.emit([], human)


@click.command()
@click.argument("query", required=False, default="")
@click.option("--mode", "-m", default=None, help=f"Search mode: {', '.join(MODE_MAP)} (default: hybrid)")
@click.option("--online/--no-online", default=None, help="Only agents currently online (default: on)")
@click.option("--graduated/--no-graduated", default=None, help="Only graduated agents (default: on)")
@click.option("--high-risk/--no-high-risk", "high_risk", default=None, help="Filter on high-risk agents")
@click.option("--cluster", default=None, help="Restrict to a cluster")
@click.option("--contains", default=None, help="Full-text filter on agent content")
@click.option("--match", type=click.Choice(["all", "any"]), default=None, help="Full-text match for --contains (default: all)")
@click.option("--rerank/--no-rerank", default=None, help="Rerank by performance (default: on)")
@click.option("--performance-weight", type=float, default=None, help="Rerank performance weight (default: 0.97)")
@click.option("--similarity-cutoff", type=float, default=None, help="Minimum similarity (default: 0.42)")
@click.option("--sparse-cutoff", type=float, default=None, help="Minimum keyword score (default: 0.0)")
@click.pass_obj
def search(
    out: Output,
    query: str,
    mode: Optional[str],
    online: Optional[bool],
    graduated: Optional[bool],
    high_risk: Optional[bool],
    cluster: Optional[str],
    contains: Optional[str],
    match: Optional[str],
    rerank: Optional[bool],
    performance_weight: Optional[float],
    similarity_cutoff: Optional[float],
    sparse_cutoff: Optional[float],
):
    """Search marketplace agents with filters and reranking.

    \b
    Examples:
      acp search "image generation"
      acp search trading --mode keyword --no-online
      acp search research --contains arxiv --match any
    """
    opts = SearchOptions(
        mode=mode,
        online=online,
        graduated=graduated,
        high_risk=high_risk,
        cluster=cluster,
        contains=contains,
        match=match,
        rerank=rerank,
        performance_weight=performance_weight,
        similarity_cutoff=similarity_cutoff,
        sparse_cutoff=sparse_cutoff,
    )
    try:
        validate_query(query)
        params = build_params(query, opts)
    except SearchUsageError as e:
        out.fatal(str(e))

    try:
        raw = fetch_search_results(params)
        agents = parse_search_agents(raw)
    except ApiError as e:
        if is_empty_result_error(str(e)):
            render_empty(out, query)
            return
        out.fatal(f"Search failed: {e}")

    render_results(out, query, opts, agents, raw)

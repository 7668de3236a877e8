"""vseek search / explain commands - query a vault from the shell."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from vaultseek.config.loader import load_config
from vaultseek.core.errors import VaultSeekError
from vaultseek.core.logging import configure_logging
from vaultseek.core.progress import pluralize, status
from vaultseek.search.engine import VaultSearch
from vaultseek.search.models import MatchAnalysis, RankedCandidate
from vaultseek.search.selection import SelectionTarget
from vaultseek.vault.scanner import VaultScanner

_vault_argument = click.argument(
    "vault", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of <vault>/.vaultseek/config.yaml",
)


def _open_vault(
    ctx: click.Context,
    vault: Path,
    config_path: Path | None,
    *,
    limit: int | None = None,
    filter_key: str | None = None,
) -> VaultSearch:
    """Load config, scan the vault and return a ready engine."""
    overrides: dict[str, Any] = {"search": {"max_results": limit}} if limit else {}
    config = load_config(vault, config_path, **overrides)
    if not (ctx.obj or {}).get("verbose"):
        configure_logging(config=config.logging)

    engine = VaultSearch(config, source=VaultScanner(vault))
    count = engine.load()
    if filter_key:
        engine.apply_filter(filter_key)
    status(f"Loaded {pluralize(count, 'entry', 'entries')} from {vault}", style="success")
    return engine


def _analysis_dict(analysis: MatchAnalysis, target: SelectionTarget) -> dict[str, Any]:
    return {
        "intent": analysis.intent.label,
        "confidence": round(analysis.confidence, 4),
        "display": {"kind": analysis.display.kind.value, "text": analysis.display.text},
        "jump_to_heading": analysis.jump_to_heading,
        "matched_heading": analysis.matched_heading,
        "action": target.action.value,
        "path": target.path,
        "link": target.link,
        "url": target.url,
    }


def _suggestion_rows(
    engine: VaultSearch, suggestions: list[RankedCandidate], query: str
) -> list[dict[str, Any]]:
    rows = []
    for rank, candidate in enumerate(suggestions, start=1):
        analysis, target = engine.resolve_selection(candidate, query)
        rows.append(
            {
                "rank": rank,
                "score": round(candidate.rank_score, 4),
                "matcher_score": round(candidate.raw.score, 4),
                **_analysis_dict(analysis, target),
            }
        )
    return rows


@click.command()
@_vault_argument
@click.argument("query")
@click.option("--filter", "filter_key", default=None, help="File type or extension, e.g. pdf")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum suggestions")
@_config_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search_command(
    ctx: click.Context,
    vault: Path,
    query: str,
    filter_key: str | None,
    limit: int | None,
    config_path: Path | None,
    as_json: bool,
) -> None:
    """Rank suggestions for QUERY over the notes in VAULT."""
    try:
        engine = _open_vault(ctx, vault, config_path, limit=limit, filter_key=filter_key)
        suggestions = engine.get_suggestions(query)
        rows = _suggestion_rows(engine, suggestions, query)
        create = None if suggestions else engine.creation_suggestion(query)
    except VaultSeekError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        payload = {
            "query": query,
            "results": rows,
            "create": create.entry.path if create is not None else None,
        }
        click.echo(json.dumps(payload))
        return

    if not rows:
        click.echo(f"No matches for '{query}'.")
        if create is not None:
            click.echo(f"Create: {create.entry.path}")
        return

    table = Table(title=f"Suggestions for '{query}'")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("Score", justify="right")
    table.add_column("Intent")
    table.add_column("Action")
    for row in rows:
        table.add_row(
            str(row["rank"]),
            row["display"]["text"],
            row["path"],
            f"{row['score']:.3f}",
            row["intent"],
            row["action"],
        )
    Console().print(table)


@click.command()
@_vault_argument
@click.argument("query")
@_config_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def explain_command(
    ctx: click.Context,
    vault: Path,
    query: str,
    config_path: Path | None,
    as_json: bool,
) -> None:
    """Explain what selecting the top suggestion for QUERY would do."""
    try:
        engine = _open_vault(ctx, vault, config_path)
        suggestions = engine.get_suggestions(query)
        candidate = suggestions[0] if suggestions else engine.creation_suggestion(query)
        if candidate is None:
            raise click.ClickException(f"Nothing to explain for '{query}'")
        analysis, target = engine.resolve_selection(candidate, query)
    except VaultSeekError as e:
        raise click.ClickException(str(e)) from e

    info = {"query": query, "entry": candidate.entry.path, **_analysis_dict(analysis, target)}
    if candidate.factors.total:
        info["factors"] = {
            "field_priority": round(candidate.factors.field_priority, 4),
            "match_ratio": round(candidate.factors.match_ratio, 4),
            "position": round(candidate.factors.position, 4),
            "match_count": round(candidate.factors.match_count, 4),
        }

    if as_json:
        click.echo(json.dumps(info))
        return

    click.echo(f"Entry: {info['entry']}")
    click.echo(f"Intent: {info['intent']} (confidence {info['confidence']:.3f})")
    click.echo(f"Display: {info['display']['text']} [{info['display']['kind']}]")
    click.echo(f"Jump to heading: {'yes' if analysis.jump_to_heading else 'no'}")
    line = f"Action: {info['action']} {info['path']}"
    if target.link:
        line += f" -> {target.link}"
    click.echo(line)
    if "factors" in info:
        factors = ", ".join(f"{k}={v}" for k, v in info["factors"].items())
        click.echo(f"Factors: {factors}")

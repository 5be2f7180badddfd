"""
cli.py — Click CLI entrypoint for the matching engine.

Usage:
    tendermatch match --token $TOKEN
    tendermatch match --token $TOKEN --province Gauteng --min-score 30 --no-ai
    tendermatch browse --page 2 --limit 50 --search security
"""

from __future__ import annotations

import asyncio
from datetime import datetime

import click
import httpx
import structlog

from tendermatch_shared.config import settings
from tendermatch_shared.constants import CATEGORIES, PROVINCES, SORT_KEYS, STATUSES
from tendermatch_shared.models.matching import FilterState, MatchResult

from tendermatch_engine.errors import InvalidDateRangeError, ProfileUnavailableError, SourceError
from tendermatch_engine.pipelines.session import MatchSession, build_session, default_window
from tendermatch_engine.sources.tenders import TenderSource
from tendermatch_engine.transforms.profile import business_strengths, display_name
from tendermatch_engine.utils.logging import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
def main(log_level: str) -> None:
    """tendermatch tender matching engine."""
    configure_logging(log_level=log_level)


def _print_match(rank: int, match: MatchResult) -> None:
    record = match.record
    closing = record.closing_date.date().isoformat() if record.closing_date else "n/a"
    click.echo(f"{rank:3d}. [{match.score:3d} pts] {record.title}")
    click.echo(f"      {record.id}  {record.province or '-'}  {record.category or '-'}  closes {closing}")
    for reason in match.reasons:
        click.echo(f"      + {reason}")
    if match.has_ai:
        click.echo(f"      AI {match.ai_score}/100 ({match.ai_confidence}): {match.ai_recommendation}")
        for concern in match.ai_concerns or []:
            click.echo(f"      ! {concern}")


@main.command()
@click.option("--token", envvar="TENDERMATCH_TOKEN", required=True, help="Bearer token for the profile service")
@click.option("--date-from", default=None, help="YYYY-MM-DD (default: lookback_days ago)")
@click.option("--date-to", default=None, help="YYYY-MM-DD (default: today)")
@click.option("--keywords", default="", help="Substring filter")
@click.option("--province", default=None, type=click.Choice(PROVINCES))
@click.option("--category", default=None, type=click.Choice(CATEGORIES))
@click.option("--status", default=None, type=click.Choice(STATUSES))
@click.option(
    "--closing-before",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only tenders closing on or before this day",
)
@click.option("--min-score", default=0, type=click.IntRange(min=0), help="Minimum match points")
@click.option("--sort", "sort_key", default="score-desc", type=click.Choice(SORT_KEYS))
@click.option("--limit", default=20, type=click.IntRange(min=1), help="Matches to print")
@click.option("--no-ai", is_flag=True, help="Skip the AI overlay")
def match(
    token: str,
    date_from: str | None,
    date_to: str | None,
    keywords: str,
    province: str | None,
    category: str | None,
    status: str | None,
    closing_before: datetime | None,
    min_score: int,
    sort_key: str,
    limit: int,
    no_ai: bool,
) -> None:
    """Rank tenders against the profile behind TOKEN."""
    default_from, default_to = default_window(settings.lookback_days)
    date_from = date_from or default_from
    date_to = date_to or default_to
    state = FilterState.for_matches(
        keywords=keywords,
        province=province,
        category=category,
        status=status,
        closing_before=closing_before.date() if closing_before else None,
        min_score=min_score,
        sort_key=sort_key,
    )

    async def _run() -> None:
        async with httpx.AsyncClient() as http:
            cfg = settings.model_copy(update={"openai_api_key": ""}) if no_ai else settings
            session = build_session(http, token, cfg)
            log.info("match_run_start", date_from=date_from, date_to=date_to, ai_enabled=cfg.ai_enabled)

            def on_update(s: MatchSession) -> None:
                if s.loading:
                    click.echo(f"  loaded {len(s.records)} tenders ({s.progress:.0%})", err=True)

            await session.refresh(date_from, date_to, on_update=on_update)
            await session.wait_for_ai()

            page = session.view(state)
            click.echo(f"Hi {display_name(session.profile or {})}, matching on:")
            for label, value in business_strengths(session.profile or {}):
                click.echo(f"  {label}: {value}")
            click.echo(
                f"{page.total_count} matches for {date_from}..{date_to} "
                f"({len(session.records)} tenders scanned{', cached' if session.from_cache else ''})"
            )
            for rank, m in enumerate(page.items[:limit], start=1):
                _print_match(rank, m)
            if session.summary:
                click.echo("")
                click.echo(session.summary)

    try:
        asyncio.run(_run())
    except (InvalidDateRangeError, ProfileUnavailableError) as exc:
        log.error("match_run_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.option("--page", default=1, type=click.IntRange(min=1))
@click.option("--limit", default=50, type=click.IntRange(min=1))
@click.option("--search", default=None)
@click.option("--date-from", default=None)
@click.option("--date-to", default=None)
def browse(page: int, limit: int, search: str | None, date_from: str | None, date_to: str | None) -> None:
    """Print one page of normalized upstream tenders."""

    async def _run() -> None:
        async with httpx.AsyncClient() as http:
            source = TenderSource(http, settings.tenders_source_url, timeout=settings.http_timeout_s)
            result = await source.fetch_page(page, limit, date_from, date_to, search=search)
            total = result.total if result.total is not None else "?"
            click.echo(f"page {page}: {len(result.records)} tenders (total {total})")
            for record in result.records:
                closing = record.closing_date.date().isoformat() if record.closing_date else "n/a"
                click.echo(f"  {record.id}  closes {closing}  {record.title}")

    try:
        asyncio.run(_run())
    except SourceError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()

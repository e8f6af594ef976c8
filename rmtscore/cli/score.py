"""CLI command: rmtscore score — Run the scoring pipeline."""

from __future__ import annotations

import json
import logging

import click

logger = logging.getLogger(__name__)


@click.command("score")
@click.option("--creator", "-c", default=None, help="Score a single creator (slug)")
@click.option("--dry-run", is_flag=True, help="Score but don't persist to database")
@click.option("--json", "as_json", is_flag=True, help="Print full results as JSON")
@click.option("--detail", is_flag=True, help="Print the component breakdown per creator")
@click.pass_context
def score_cmd(
    ctx: click.Context,
    creator: str | None,
    dry_run: bool,
    as_json: bool,
    detail: bool,
) -> None:
    """Score creators from their completed tips.

    Runs the full scoring pipeline: load each creator's resolved tips,
    compute the RMT score, and persist the current score plus today's
    snapshot.
    """
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.engine.pipeline import run_scoring_pipeline
    from rmtscore.output.report import (
        format_score_detail,
        format_score_line,
        load_latest_score_history,
        save_score_history,
    )
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))
    history_dir = resolve_path(config.output.score_history_dir)

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        result = run_scoring_pipeline(
            config=config,
            db=db,
            creator_filter=creator.strip().lower() if creator else None,
            dry_run=dry_run,
        )

    if as_json:
        payload = {
            "run": result.tracker.to_dict(),
            "scores": {slug: res.to_dict() for slug, res in sorted(result.scores.items())},
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo("RMT Scoring Pipeline")
        click.echo("=" * 40)
        if creator:
            click.echo(f"Single creator mode: {creator}")
        if dry_run:
            click.echo("DRY RUN - results will not be persisted")

        previous = load_latest_score_history(history_dir)
        min_tips = config.scoring.display.min_tips_for_display

        click.echo(f"\nScored: {result.n_scored} creator(s)")
        for slug, rmt in result.leaderboard:
            line = format_score_line(slug, result.scores[slug], min_tips)
            prev = previous.get(slug, {}).get("rmt_score")
            if prev is not None:
                line += f"  ({rmt - prev:+.1f})"
            click.echo(line)

        if detail:
            for slug, _ in result.leaderboard:
                click.echo("")
                click.echo(format_score_detail(slug, result.scores[slug]))

    if not dry_run and result.scores:
        save_score_history(
            result.scores,
            output_dir=history_dir,
            now=result.now,
            run_metadata=result.tracker.to_dict(),
        )

    tracker = result.tracker
    if tracker.errors:
        click.echo(f"\nErrors ({len(tracker.errors)}):", err=True)
        for err in tracker.errors[:5]:
            click.echo(f"  {err}", err=True)
        if tracker.creators_scored == 0:
            raise SystemExit(1)

"""CLI command: rmtscore history — Daily score snapshots for a creator."""

from __future__ import annotations

import click


@click.command("history")
@click.argument("slug")
@click.option("--limit", "-n", default=30, show_default=True, help="Max days to show")
@click.pass_context
def history_cmd(ctx: click.Context, slug: str, limit: int) -> None:
    """Show a creator's daily score history, most recent first."""
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema
    from rmtscore.storage.queries import get_creator_by_slug, get_creator_score, get_score_history

    config = load_config(ctx.obj.get("config_path"))
    slug = slug.strip().lower()

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        creator = get_creator_by_slug(db, slug)
        if creator is None:
            click.echo(f"Creator {slug} not found.", err=True)
            raise SystemExit(1)
        current = get_creator_score(db, creator["id"])
        rows = get_score_history(db, creator["id"], limit=limit)

    if current is not None:
        click.echo(
            f"{slug}: RMT {current['rmt_score']:.1f} ± {current['confidence_interval']:.1f}"
            f" [{current['tier']}] as of {current['calculated_at'][:10]}"
        )
    if not rows:
        click.echo("No score history.")
        return

    click.echo(f"\n{'Date':<12} {'RMT':>6} {'Acc':>6} {'Risk':>6} {'Cons':>6} {'Vol':>6} {'Tips':>6}")
    click.echo("-" * 54)
    for r in rows:
        click.echo(
            f"{r['date']:<12} {r['rmt_score']:6.1f} {r['accuracy_score']:6.1f}"
            f" {r['risk_adjusted_score']:6.1f} {r['consistency_score']:6.1f}"
            f" {r['volume_factor_score']:6.1f} {r['total_scored_tips']:6d}"
        )

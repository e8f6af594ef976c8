"""CLI command: rmtscore import — Load resolved tips into the database."""

from __future__ import annotations

import logging

import click

from rmtscore.data.tip_import import IMPORTABLE_STATUSES

logger = logging.getLogger(__name__)


@click.group("import")
def import_group() -> None:
    """Import data into the rmtscore database."""
    pass


@import_group.command("tips", epilog=f"Accepted statuses: {', '.join(IMPORTABLE_STATUSES)}")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--creator", "-c", default=None,
    help="Assign every row to this creator slug (otherwise read from a creator_slug column)",
)
@click.pass_context
def import_tips(ctx: click.Context, path: str, creator: str | None) -> None:
    """Import resolved tips from a CSV file.

    PATH: CSV with direction, entry_price, target1, stop_loss, timeframe,
    status, tip_timestamp and closed_at columns.
    """
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.data.tip_import import import_tips_csv
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        try:
            result = import_tips_csv(db, path, creator_slug=creator.strip().lower() if creator else None)
        except ValueError as e:
            click.echo(f"Import failed: {e}", err=True)
            raise SystemExit(1) from None

    for slug, count in result.creators.items():
        click.echo(f"  {slug}: {count} tip(s)")
    click.echo(f"Imported {result.tips_imported} tips for {len(result.creators)} creator(s)")

    if result.rejected:
        click.echo(f"\nRejected {len(result.rejected)} row(s):")
        for message in result.rejected[:20]:
            click.echo(f"  {message}")
        if len(result.rejected) > 20:
            click.echo(f"  ... and {len(result.rejected) - 20} more")

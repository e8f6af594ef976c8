"""Creator management CLI commands: add, list."""

from __future__ import annotations

import click


@click.group("creator")
def creator_group() -> None:
    """Manage the creator roster."""
    pass


@creator_group.command("add")
@click.argument("slug")
@click.option("--name", default=None, help="Display name")
@click.pass_context
def creator_add(ctx: click.Context, slug: str, name: str | None) -> None:
    """Register a creator (or update its display name)."""
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema
    from rmtscore.storage.queries import get_creator_by_slug, upsert_creator

    config = load_config(ctx.obj.get("config_path"))
    slug = slug.strip().lower()

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        existing = get_creator_by_slug(db, slug)
        upsert_creator(db, slug, display_name=name)

    if existing:
        click.echo(f"Updated {slug}.")
    else:
        click.echo(f"Registered {slug}.")


@creator_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive creators")
@click.pass_context
def creator_list(ctx: click.Context, show_all: bool) -> None:
    """List creators with tier and tip counts."""
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema
    from rmtscore.storage.queries import list_creators

    config = load_config(ctx.obj.get("config_path"))

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        creators = list_creators(db, active_only=not show_all)

    if not creators:
        click.echo("No creators registered.")
        return

    click.echo(f"{'Slug':<24} {'Tier':<9} {'Completed':>9} {'Total':>7}")
    click.echo("-" * 52)
    for c in creators:
        click.echo(
            f"{c['slug']:<24} {c['tier']:<9} {c['completed_tips']:>9} {c['total_tips']:>7}"
        )
    click.echo(f"\n{len(creators)} creator(s)")

"""Top-level CLI entry point for rmtscore."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import click

from rmtscore import __version__


@click.group()
@click.version_option(version=__version__, prog_name="rmtscore")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="RMTSCORE_CONFIG",
    help="Path to config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """RMT Score -- reliability scoring for creators of financial tips."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from rmtscore.cli.config_cmd import config_group  # noqa: E402
from rmtscore.cli.creator_cmd import creator_group  # noqa: E402
from rmtscore.cli.history_cmd import history_cmd  # noqa: E402
from rmtscore.cli.import_cmd import import_group  # noqa: E402
from rmtscore.cli.score import score_cmd  # noqa: E402

cli.add_command(config_group, "config")
cli.add_command(creator_group, "creator")
cli.add_command(history_cmd, "history")
cli.add_command(import_group, "import")
cli.add_command(score_cmd, "score")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize rmtscore: create directories, database, and example config."""
    from rmtscore.config.loader import load_config, resolve_path
    from rmtscore.storage.database import Database
    from rmtscore.storage.migrations import ensure_schema

    config_path = ctx.obj.get("config_path")
    config = load_config(config_path)

    history_dir = resolve_path(config.output.score_history_dir)
    history_dir.mkdir(parents=True, exist_ok=True)
    click.echo(f"  Created {history_dir}")

    db_path = resolve_path(config.database.path)
    click.echo(f"  Database: {db_path}")
    with Database(db_path) as db:
        version = ensure_schema(db)
        click.echo(f"  Schema version: {version}")

    # Only seed the user config when no explicit config was given
    if config_path is None:
        user_config = Path("~/.rmtscore/config.yaml").expanduser()
        example = Path(__file__).resolve().parent.parent.parent / "config.yaml.example"
        if not user_config.exists() and example.exists():
            user_config.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(example, user_config)
            click.echo(f"  Copied example config to {user_config}")

    click.echo("\nrmtscore initialized successfully.")
    click.echo("Next steps:")
    click.echo("  1. Run: rmtscore creator add <slug>      (to register creators)")
    click.echo("  2. Run: rmtscore import tips tips.csv     (to load resolved tips)")
    click.echo("  3. Run: rmtscore score                    (to score everyone)")

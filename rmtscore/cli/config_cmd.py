"""Config CLI commands: show, validate."""

from __future__ import annotations

import click
import yaml


@click.group("config")
def config_group() -> None:
    """Inspect configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration as YAML."""
    from rmtscore.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    click.echo(yaml.safe_dump(config.model_dump(by_alias=True), sort_keys=False))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate config.yaml against the schema."""
    from rmtscore.config.loader import load_config
    from rmtscore.config.schema import ScoringConfig

    try:
        config = load_config(ctx.obj.get("config_path"))
    except (ValueError, yaml.YAMLError) as e:  # pydantic.ValidationError is a ValueError
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None

    weights = config.scoring.weights
    click.echo("Config is valid.")
    click.echo(f"  Version: {config.version}")
    click.echo(
        f"  Weights: accuracy={weights.accuracy}, risk_adjusted={weights.risk_adjusted}, "
        f"consistency={weights.consistency}, volume_factor={weights.volume_factor}"
    )
    click.echo(f"  Half-life: {config.scoring.recency.half_life_days} days")
    if config.scoring == ScoringConfig():
        click.echo("  Scoring: published defaults")
    else:
        click.echo("  Scoring: custom (not comparable with the public leaderboard)")
    click.echo(f"  Database: {config.database.path}")

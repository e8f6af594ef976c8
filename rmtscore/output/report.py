"""Terminal formatting and JSON score history files.

Score history files are the file-system counterpart of the daily snapshot
table: one ``rmt_scores_YYYY-MM-DD.json`` per run day, keyed by creator slug.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import click

from rmtscore.config.defaults import DISPLAY, SCORING_VERSION
from rmtscore.engine.models import CreatorTier, ScoreResult, TipTimeframe

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DIR = "~/.rmtscore/history"
HISTORY_PATTERN = "rmt_scores_*.json"

TIER_COLORS = {
    CreatorTier.UNRATED: "white",
    CreatorTier.BRONZE: "yellow",
    CreatorTier.SILVER: "bright_white",
    CreatorTier.GOLD: "bright_yellow",
    CreatorTier.PLATINUM: "cyan",
    CreatorTier.DIAMOND: "bright_cyan",
}


# ---------------------------------------------------------------------------
# Terminal formatting
# ---------------------------------------------------------------------------

def _pct(value: float | None, signed: bool = False) -> str:
    if value is None:
        return "n/a"
    return f"{value:+.1f}%" if signed else f"{value:.1f}%"


def format_score_line(
    slug: str,
    result: ScoreResult,
    min_tips_for_display: int = DISPLAY["min_tips_for_display"],
) -> str:
    """One leaderboard row: slug, RMT ± CI, tier, tip count."""
    tier = click.style(f"{result.tier.value:<8}", fg=TIER_COLORS[result.tier])
    if result.total_scored_tips < min_tips_for_display:
        score = f"{'(hidden)':>14}"
    else:
        score = f"{result.rmt_score:6.1f} ± {result.confidence_interval:5.1f}"
    return f"  {slug:<24} {score}  {tier}  {result.total_scored_tips:>5} tips"


def format_score_detail(slug: str, result: ScoreResult) -> str:
    """Multi-line breakdown of one creator's score."""
    lines = [
        click.style(f"{slug}", bold=True)
        + f"  RMT {result.rmt_score:.1f} ± {result.confidence_interval:.1f}"
        + f"  [{result.tier.value}]",
        f"  Accuracy       {result.accuracy_score:6.1f}"
        f"  (raw {result.accuracy_rate * 100:.1f}%,"
        f" weighted {result.weighted_accuracy_rate * 100:.1f}%)",
        f"  Risk-adjusted  {result.risk_adjusted_score:6.1f}"
        f"  (avg return {_pct(result.avg_return_pct, signed=True)},"
        f" avg R:R {result.avg_risk_reward_ratio:.2f})",
        f"  Consistency    {result.consistency_score:6.1f}"
        f"  ({result.months_with_data} months, CV {result.coefficient_of_variation:.2f})",
        f"  Volume         {result.volume_factor_score:6.1f}"
        f"  ({result.total_scored_tips} tips)",
        f"  Best / worst   {_pct(result.best_tip_return_pct, signed=True)}"
        f" / {_pct(result.worst_tip_return_pct, signed=True)}",
    ]

    if result.win_streak:
        lines.append(f"  Streak         {result.win_streak} win(s)")
    elif result.loss_streak:
        lines.append(f"  Streak         {result.loss_streak} loss(es)")

    tf_parts = []
    for timeframe in TipTimeframe:
        rate = result.timeframe_accuracy.get(timeframe)
        tf_parts.append(f"{timeframe.value}={_pct(rate * 100 if rate is not None else None)}")
    lines.append("  Timeframes     " + "  ".join(tf_parts))

    lines.append(
        f"  Period         {result.score_period_start:%Y-%m-%d}"
        f" → {result.score_period_end:%Y-%m-%d}"
    )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Score history files
# ---------------------------------------------------------------------------

def save_score_history(
    scores: dict[str, ScoreResult],
    output_dir: str | Path | None = None,
    now: datetime | None = None,
    run_metadata: dict[str, Any] | None = None,
) -> Path:
    """Write a run's scores to ``rmt_scores_<date>.json``.

    A second run on the same day overwrites that day's file.

    Returns:
        Path to the saved JSON file.
    """
    if now is None:
        now = datetime.now().astimezone()
    output_dir = Path(output_dir or DEFAULT_HISTORY_DIR).expanduser()
    output_dir.mkdir(parents=True, exist_ok=True)

    output: dict[str, Any] = {
        "_metadata": {
            "scoring_version": SCORING_VERSION,
            "scored_at": now.isoformat(),
            "creators": len(scores),
        },
        "scores": {slug: result.to_dict() for slug, result in sorted(scores.items())},
    }
    if run_metadata:
        output["run_metadata"] = run_metadata

    path = output_dir / f"rmt_scores_{now:%Y-%m-%d}.json"
    with open(path, "w") as f:
        json.dump(output, f, indent=2)
    logger.info("Score history saved: %s", path)
    return path


def load_latest_score_history(output_dir: str | Path | None = None) -> dict[str, Any]:
    """Load the most recent history file's ``scores`` mapping.

    Returns {} when no file exists or the newest one cannot be read.
    """
    output_dir = Path(output_dir or DEFAULT_HISTORY_DIR).expanduser()
    if not output_dir.exists():
        return {}

    files = sorted(output_dir.glob(HISTORY_PATTERN), reverse=True)
    if not files:
        return {}

    try:
        with open(files[0]) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load score history %s: %s", files[0], e)
        return {}
    return data.get("scores", {})

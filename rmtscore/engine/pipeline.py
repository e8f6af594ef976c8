"""Batch scoring pipeline orchestrator.

Coordinates a full scoring run over the creator roster:
  1. Build the creator list (all active creators, or one by slug)
  2. Fetch each creator's completed tips from the database
  3. Score creators concurrently via scorer.calculate_composite_score()
  4. Persist current scores, daily snapshots and creator tiers

This module is the core of ``rmtscore score``. Database access stays on the
calling thread; only the pure scoring calls run in the worker pool.
"""

from __future__ import annotations

import json
import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from rmtscore.config.defaults import SCORING_VERSION
from rmtscore.config.schema import RMTConfig
from rmtscore.engine.context import ScoringContext, utc_now
from rmtscore.engine.models import CompletedTip, ScoreResult, to_utc
from rmtscore.engine.scorer import calculate_composite_score
from rmtscore.storage.database import Database
from rmtscore.storage.queries import (
    get_completed_tips,
    get_creator_by_slug,
    insert_scoring_run,
    list_creators,
    update_creator_tier,
    update_scoring_run,
    upsert_creator_score,
    upsert_score_snapshot,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Run tracker
# ---------------------------------------------------------------------------

@dataclass
class RunTracker:
    """Tracks the state and metrics of a scoring run."""

    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    started_at: datetime = field(default_factory=utc_now)
    creators_scored: int = 0
    creators_failed: int = 0
    creators_skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "creators_scored": self.creators_scored,
            "creators_failed": self.creators_failed,
            "creators_skipped": self.creators_skipped,
            "errors": self.errors,
        }


# ---------------------------------------------------------------------------
# Pipeline result
# ---------------------------------------------------------------------------

@dataclass
class PipelineResult:
    """Result from a full scoring pipeline run."""

    run_id: str = ""
    now: datetime | None = None
    """Reference instant shared by every score in the run."""
    scores: dict[str, ScoreResult] = field(default_factory=dict)
    """creator slug -> ScoreResult for each scored creator."""
    creator_ids: dict[str, str] = field(default_factory=dict)
    """creator slug -> creator id."""
    tracker: RunTracker = field(default_factory=RunTracker)
    dry_run: bool = False

    @property
    def n_scored(self) -> int:
        return len(self.scores)

    @property
    def leaderboard(self) -> list[tuple[str, float]]:
        """(slug, RMT) for every scored creator, highest first."""
        ranked = [(slug, res.rmt_score) for slug, res in self.scores.items()]
        ranked.sort(key=lambda x: (-x[1], x[0]))
        return ranked


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------

def _select_creators(
    db: Database,
    creator_filter: str | None,
) -> list[dict[str, Any]]:
    if creator_filter is None:
        return list_creators(db)
    creator = get_creator_by_slug(db, creator_filter)
    return [creator] if creator is not None else []


def run_scoring_pipeline(
    config: RMTConfig,
    db: Database,
    *,
    creator_filter: str | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
) -> PipelineResult:
    """Score every active creator (or one) and persist the results.

    Parameters:
        config: Resolved RMTConfig.
        db: Open Database with schema applied.
        creator_filter: If provided, only score the creator with this slug.
        dry_run: If True, compute scores but don't write to the database.
        now: Reference instant for the whole run. Read from the clock once
             when omitted.

    Returns:
        PipelineResult with per-creator scores and run counts.
    """
    ctx = ScoringContext(now=to_utc(now), config=config) if now is not None \
        else ScoringContext.create(config)
    tracker = RunTracker()
    result = PipelineResult(
        run_id=tracker.run_id, now=ctx.now, tracker=tracker, dry_run=dry_run,
    )

    # ------------------------------------------------------------------
    # Step 1: Build creator list
    # ------------------------------------------------------------------
    logger.info("[1/4] Building creator list...")
    creators = _select_creators(db, creator_filter)
    if not creators:
        if creator_filter is not None:
            logger.warning("Creator %s not found in database", creator_filter)
        else:
            logger.warning("No active creators to score")
        return result

    # ------------------------------------------------------------------
    # Step 2: Fetch completed tips
    # ------------------------------------------------------------------
    logger.info("[2/4] Loading completed tips for %d creator(s)...", len(creators))
    histories: dict[str, list[CompletedTip]] = {}
    for creator in creators:
        slug = creator["slug"]
        try:
            tips = get_completed_tips(db, creator["id"])
        except Exception as e:
            tracker.creators_failed += 1
            tracker.errors.append(f"{slug}: {e}")
            logger.error("  %s: failed to load tips: %s", slug, e)
            continue

        if not tips:
            tracker.creators_skipped += 1
            logger.debug("  %s: no completed tips", slug)
            continue
        histories[slug] = tips
        result.creator_ids[slug] = creator["id"]

    # ------------------------------------------------------------------
    # Step 3: Score creators
    # ------------------------------------------------------------------
    workers = min(config.pipeline.max_workers, max(1, len(histories)))
    logger.info("[3/4] Scoring %d creator(s) on %d worker(s)...", len(histories), workers)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures: dict[Future[ScoreResult], str] = {
            pool.submit(
                calculate_composite_score,
                tips,
                ctx.half_life_days,
                now=ctx.now,
                config=ctx.config,
            ): slug
            for slug, tips in histories.items()
        }
        for future in as_completed(futures):
            slug = futures[future]
            try:
                result.scores[slug] = future.result()
                tracker.creators_scored += 1
            except Exception as e:
                tracker.creators_failed += 1
                tracker.errors.append(f"{slug}: {e}")
                result.creator_ids.pop(slug, None)
                logger.error("  %s: scoring error: %s", slug, e)

    logger.info(
        "  Scored %d, skipped %d, failed %d",
        tracker.creators_scored,
        tracker.creators_skipped,
        tracker.creators_failed,
    )
    if result.scores:
        top = ", ".join(f"{s}={v:.1f}" for s, v in result.leaderboard[:3])
        logger.info("  Top RMT: %s", top)

    # ------------------------------------------------------------------
    # Step 4: Persist
    # ------------------------------------------------------------------
    if not dry_run:
        logger.info("[4/4] Persisting results...")
        _persist_results(db, result, tracker)
    else:
        logger.info("[4/4] Dry run, skipping persistence")

    return result


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def _persist_results(
    db: Database,
    result: PipelineResult,
    tracker: RunTracker,
) -> None:
    """Write the run record, then each creator's score, snapshot and tier.

    Each creator's three writes commit together or not at all. A failed
    write for one creator is logged and counted; the rest continue.
    """
    insert_scoring_run(
        db,
        tracker.run_id,
        started_at=tracker.started_at.isoformat(),
        scoring_version=SCORING_VERSION,
    )
    snapshot_date = result.now.date() if result.now is not None else utc_now().date()

    for slug, score in sorted(result.scores.items()):
        creator_id = result.creator_ids[slug]
        try:
            with db.transaction():
                upsert_creator_score(
                    db, creator_id, score, run_id=tracker.run_id, commit=False,
                )
                upsert_score_snapshot(db, creator_id, score, snapshot_date, commit=False)
                update_creator_tier(
                    db, creator_id, score.tier, score.total_scored_tips, commit=False,
                )
        except Exception as e:
            tracker.creators_failed += 1
            tracker.errors.append(f"{slug}: persistence: {e}")
            logger.error("  %s: persistence error: %s", slug, e)

    update_scoring_run(
        db,
        tracker.run_id,
        completed_at=utc_now().isoformat(),
        creators_scored=tracker.creators_scored,
        creators_failed=tracker.creators_failed,
        creators_skipped=tracker.creators_skipped,
        status="completed" if not tracker.errors else "completed_with_errors",
        errors=json.dumps(tracker.errors) if tracker.errors else None,
    )
    logger.info(
        "  Persisted %d score(s) for run %s",
        len(result.scores),
        tracker.run_id,
    )

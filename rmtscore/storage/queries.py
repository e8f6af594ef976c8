"""Named query functions for database operations."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, timezone
from typing import Any

from rmtscore.engine.models import TERMINAL_STATUSES, CompletedTip, CreatorTier, ScoreResult
from rmtscore.storage.database import Database

TIP_COLUMNS = (
    "id", "creator_id", "stock_symbol", "direction", "entry_price",
    "target1", "target2", "target3", "stop_loss", "timeframe", "status",
    "tip_timestamp", "closed_at", "closed_price", "return_pct",
    "risk_reward_ratio",
)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Creators
# ---------------------------------------------------------------------------

def upsert_creator(
    db: Database,
    slug: str,
    *,
    display_name: str | None = None,
    is_active: bool = True,
) -> str:
    """Insert or update a creator by slug. Returns the creator id."""
    existing = get_creator_by_slug(db, slug)
    if existing is not None:
        db.execute(
            """UPDATE creators SET
                display_name = COALESCE(?, display_name),
                is_active = ?,
                updated_at = datetime('now')
            WHERE id = ?""",
            (display_name, int(is_active), existing["id"]),
        )
        db.conn.commit()
        return existing["id"]

    creator_id = uuid.uuid4().hex
    db.execute(
        "INSERT INTO creators (id, slug, display_name, is_active) VALUES (?, ?, ?, ?)",
        (creator_id, slug, display_name, int(is_active)),
    )
    db.conn.commit()
    return creator_id


def get_creator_by_slug(db: Database, slug: str) -> dict[str, Any] | None:
    return db.fetchone("SELECT * FROM creators WHERE slug = ?", (slug,))


def list_creators(db: Database, *, active_only: bool = True) -> list[dict[str, Any]]:
    """All creators ordered by slug."""
    if active_only:
        return db.fetchall("SELECT * FROM creators WHERE is_active = 1 ORDER BY slug")
    return db.fetchall("SELECT * FROM creators ORDER BY slug")


def update_creator_tier(
    db: Database,
    creator_id: str,
    tier: CreatorTier,
    completed_tips: int,
    *,
    commit: bool = True,
) -> None:
    db.execute(
        """UPDATE creators SET tier = ?, completed_tips = ?, updated_at = datetime('now')
        WHERE id = ?""",
        (tier.value, completed_tips, creator_id),
    )
    if commit:
        db.conn.commit()


# ---------------------------------------------------------------------------
# Tips
# ---------------------------------------------------------------------------

def insert_tips(db: Database, creator_id: str, tips: list[dict[str, Any]]) -> int:
    """Insert tip records for a creator. Existing ids are replaced.

    Missing columns are stored as NULL; a tip without an id gets a new one.
    Returns the number of rows written.
    """
    rows = []
    for tip in tips:
        values = {col: tip.get(col) for col in TIP_COLUMNS}
        values["id"] = str(values["id"]) if values["id"] is not None else uuid.uuid4().hex
        values["creator_id"] = creator_id
        for col in ("tip_timestamp", "closed_at"):
            if isinstance(values[col], datetime):
                values[col] = _iso(values[col])
        for col in ("direction", "timeframe", "status"):
            if values[col] is not None:
                values[col] = getattr(values[col], "value", values[col])
        rows.append(tuple(values[col] for col in TIP_COLUMNS))

    with db.transaction() as cur:
        cur.executemany(
            f"INSERT OR REPLACE INTO tips ({', '.join(TIP_COLUMNS)}) "
            f"VALUES ({', '.join('?' * len(TIP_COLUMNS))})",
            rows,
        )
        cur.execute(
            """UPDATE creators SET
                total_tips = (SELECT COUNT(*) FROM tips WHERE creator_id = ?),
                updated_at = datetime('now')
            WHERE id = ?""",
            (creator_id, creator_id),
        )
    return len(rows)


def get_completed_tips(db: Database, creator_id: str) -> list[CompletedTip]:
    """All terminal tips for a creator, most recently closed first."""
    statuses = sorted(s.value for s in TERMINAL_STATUSES)
    placeholders = ", ".join("?" * len(statuses))
    rows = db.fetchall(
        f"""SELECT * FROM tips
        WHERE creator_id = ? AND closed_at IS NOT NULL AND status IN ({placeholders})
        ORDER BY closed_at DESC""",
        (creator_id, *statuses),
    )
    return [CompletedTip.from_record(row) for row in rows]


# ---------------------------------------------------------------------------
# Scoring Runs
# ---------------------------------------------------------------------------

def insert_scoring_run(db: Database, run_id: str, **kwargs: Any) -> str:
    """Insert a new scoring run. Returns run_id."""
    kwargs.setdefault("started_at", datetime.now(timezone.utc).isoformat())
    cols = ["run_id"] + list(kwargs.keys())
    values = [run_id] + list(kwargs.values())
    db.execute(
        f"INSERT INTO scoring_runs ({', '.join(cols)}) VALUES ({', '.join('?' * len(cols))})",
        tuple(values),
    )
    db.conn.commit()
    return run_id


def update_scoring_run(db: Database, run_id: str, **kwargs: Any) -> None:
    sets = ", ".join(f"{k} = ?" for k in kwargs)
    values = list(kwargs.values()) + [run_id]
    db.execute(f"UPDATE scoring_runs SET {sets} WHERE run_id = ?", tuple(values))
    db.conn.commit()


def get_scoring_run(db: Database, run_id: str) -> dict[str, Any] | None:
    return db.fetchone("SELECT * FROM scoring_runs WHERE run_id = ?", (run_id,))


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

def upsert_creator_score(
    db: Database,
    creator_id: str,
    result: ScoreResult,
    run_id: str | None = None,
    *,
    commit: bool = True,
) -> None:
    """Overwrite the creator's current score with ``result``.

    Pass ``commit=False`` to leave the write inside the caller's transaction.
    """
    tf = result.timeframe_accuracy
    db.execute(
        """INSERT OR REPLACE INTO creator_scores (
            creator_id, run_id, rmt_score, confidence_interval, tier,
            accuracy_score, risk_adjusted_score, consistency_score,
            volume_factor_score, accuracy_rate, weighted_accuracy_rate,
            avg_return_pct, avg_risk_reward_ratio, best_tip_return_pct,
            worst_tip_return_pct, win_streak, loss_streak,
            intraday_accuracy, swing_accuracy, positional_accuracy,
            long_term_accuracy, monthly_breakdown, total_scored_tips,
            score_period_start, score_period_end, calculated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            creator_id, run_id, result.rmt_score, result.confidence_interval,
            result.tier.value, result.accuracy_score, result.risk_adjusted_score,
            result.consistency_score, result.volume_factor_score,
            result.accuracy_rate, result.weighted_accuracy_rate,
            result.avg_return_pct, result.avg_risk_reward_ratio,
            result.best_tip_return_pct, result.worst_tip_return_pct,
            result.win_streak, result.loss_streak,
            tf.intraday, tf.swing, tf.positional, tf.long_term,
            json.dumps(result.to_dict()["monthly_breakdown"]),
            result.total_scored_tips,
            _iso(result.score_period_start), _iso(result.score_period_end),
            _iso(result.calculated_at),
        ),
    )
    if commit:
        db.conn.commit()


def get_creator_score(db: Database, creator_id: str) -> dict[str, Any] | None:
    row = db.fetchone("SELECT * FROM creator_scores WHERE creator_id = ?", (creator_id,))
    if row is not None and row["monthly_breakdown"]:
        row["monthly_breakdown"] = json.loads(row["monthly_breakdown"])
    return row


def upsert_score_snapshot(
    db: Database,
    creator_id: str,
    result: ScoreResult,
    snapshot_date: date,
    *,
    commit: bool = True,
) -> None:
    """Record the day's snapshot; a rerun on the same day replaces it."""
    db.execute(
        """INSERT INTO score_snapshots (
            creator_id, date, rmt_score, accuracy_score, risk_adjusted_score,
            consistency_score, volume_factor_score, accuracy_rate, total_scored_tips
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(creator_id, date) DO UPDATE SET
            rmt_score=excluded.rmt_score, accuracy_score=excluded.accuracy_score,
            risk_adjusted_score=excluded.risk_adjusted_score,
            consistency_score=excluded.consistency_score,
            volume_factor_score=excluded.volume_factor_score,
            accuracy_rate=excluded.accuracy_rate,
            total_scored_tips=excluded.total_scored_tips
        """,
        (
            creator_id, snapshot_date.isoformat(), result.rmt_score,
            result.accuracy_score, result.risk_adjusted_score,
            result.consistency_score, result.volume_factor_score,
            result.accuracy_rate, result.total_scored_tips,
        ),
    )
    if commit:
        db.conn.commit()


def get_score_history(
    db: Database, creator_id: str, limit: int = 90
) -> list[dict[str, Any]]:
    """Daily snapshots for a creator, most recent first."""
    return db.fetchall(
        "SELECT * FROM score_snapshots WHERE creator_id = ? ORDER BY date DESC LIMIT ?",
        (creator_id, limit),
    )

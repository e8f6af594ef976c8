"""Bulk import of resolved tips from CSV.

Each row is validated by building a ``CompletedTip`` from it; rows that
fail (missing fields, bad prices, open status, closed before issued) are
reported by line number and not written.

Column names are matched case-insensitively, and camelCase headers
(``entryPrice``, ``closedAt``) are accepted alongside snake_case.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from rmtscore.engine.models import CompletedTip, TipStatus, is_terminal
from rmtscore.storage.database import Database
from rmtscore.storage.queries import insert_tips, upsert_creator

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = frozenset({
    "direction", "entry_price", "target1", "stop_loss", "timeframe",
    "status", "tip_timestamp", "closed_at",
})

# Header spellings seen in exports, after snake-casing
_COLUMN_ALIASES = {
    "creator": "creator_slug",
    "slug": "creator_slug",
    "symbol": "stock_symbol",
    "target_1": "target1",
    "target_2": "target2",
    "target_3": "target3",
    "stoploss": "stop_loss",
    "tip_id": "id",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

IMPORTABLE_STATUSES = tuple(s.value for s in TipStatus if is_terminal(s))


@dataclass
class TipImportResult:
    """Result of a CSV import."""

    tips_imported: int = 0
    creators: dict[str, int] = field(default_factory=dict)
    """creator slug -> tips written."""
    rejected: list[str] = field(default_factory=list)


def _snake(name: str) -> str:
    name = _CAMEL_BOUNDARY.sub("_", str(name).strip())
    name = name.lower().replace(" ", "_").replace("-", "_")
    return _COLUMN_ALIASES.get(name, name)


def read_tips_csv(path: str | Path) -> pd.DataFrame:
    """Read a tips CSV with normalized snake_case column names."""
    # str dtype keeps ids like "0012" intact; floats are parsed per row
    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    df.columns = [_snake(c) for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"{path}: missing required column(s): {', '.join(sorted(missing))}")
    # NaN -> None so optional fields read as absent
    return df.astype(object).where(pd.notna(df), None)


def _validate_row(record: dict[str, Any]) -> CompletedTip:
    tip = CompletedTip.from_record(record)
    if not is_terminal(tip.status):
        raise ValueError(f"status {tip.status.value} is not terminal")
    for name in ("entry_price", "target1", "stop_loss"):
        if getattr(tip, name) <= 0:
            raise ValueError(f"{name} must be positive")
    if tip.closed_at < tip.tip_timestamp:
        raise ValueError("closed_at is before tip_timestamp")
    return tip


def parse_tip_rows(
    df: pd.DataFrame,
    creator_slug: str | None = None,
) -> tuple[dict[str, list[dict[str, Any]]], list[str]]:
    """Split rows into per-creator tip records and rejection messages.

    ``creator_slug`` applies to every row; otherwise each row needs a
    ``creator_slug`` column value.
    """
    by_creator: dict[str, list[dict[str, Any]]] = {}
    rejected: list[str] = []

    for idx, row in enumerate(df.to_dict(orient="records")):
        line = idx + 2  # header is line 1
        slug = creator_slug or row.get("creator_slug")
        if not slug:
            rejected.append(f"line {line}: no creator")
            continue
        try:
            tip = _validate_row(row)
        except (KeyError, TypeError, ValueError) as e:
            rejected.append(f"line {line}: {e}")
            continue

        record = asdict(tip)
        record["stock_symbol"] = row.get("stock_symbol")
        by_creator.setdefault(str(slug).strip(), []).append(record)

    return by_creator, rejected


def import_tips_csv(
    db: Database,
    path: str | Path,
    creator_slug: str | None = None,
) -> TipImportResult:
    """Validate a CSV of resolved tips and write the good rows.

    Creators named in the file are registered if they do not exist yet.
    """
    result = TipImportResult()
    df = read_tips_csv(path)
    by_creator, result.rejected = parse_tip_rows(df, creator_slug)

    for slug, records in sorted(by_creator.items()):
        creator_id = upsert_creator(db, slug)
        written = insert_tips(db, creator_id, records)
        result.creators[slug] = written
        result.tips_imported += written
        logger.info("Imported %d tip(s) for %s", written, slug)

    for message in result.rejected:
        logger.warning("Rejected %s", message)
    return result

"""Shared test fixtures for rmtscore.

Config, database and tip-history fixtures reused across test modules.
Tip builders live in helpers.py.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from helpers import BASE_DATE, make_hit, make_miss, month_tips
from rmtscore.config.schema import RMTConfig
from rmtscore.engine.models import CompletedTip
from rmtscore.storage.database import Database
from rmtscore.storage.migrations import ensure_schema


# ---------------------------------------------------------------------------
# Core infrastructure
# ---------------------------------------------------------------------------

@pytest.fixture
def base_date() -> datetime:
    return BASE_DATE


@pytest.fixture
def default_config() -> RMTConfig:
    return RMTConfig()


@pytest.fixture
def test_config(tmp_path: Path) -> RMTConfig:
    """Default scoring config with temp database and history paths."""
    return RMTConfig(
        database={"path": str(tmp_path / "test.db")},
        output={"score_history_dir": str(tmp_path / "history")},
        pipeline={"max_workers": 4},
    )


@pytest.fixture
def test_db(tmp_path: Path) -> Database:
    """Database with schema applied, using temp file."""
    db = Database(tmp_path / "test.db")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Database:
    """In-memory database for fast unit tests."""
    db = Database(":memory:")
    ensure_schema(db)
    yield db
    db.close()


# ---------------------------------------------------------------------------
# Tip histories
# ---------------------------------------------------------------------------

@pytest.fixture
def eighteen_and_two() -> list[CompletedTip]:
    """18 wins (most recent) then 2 older losses, all SWING."""
    wins = [make_hit(days_ago=d) for d in range(18)]
    losses = [make_miss(days_ago=d) for d in (18, 19)]
    return wins + losses


@pytest.fixture
def three_steady_months() -> list[CompletedTip]:
    """Three months at exactly 2/3 accuracy each."""
    return (
        month_tips(2025, 4, hits=2, misses=1)
        + month_tips(2025, 5, hits=4, misses=2)
        + month_tips(2025, 6, hits=2, misses=1)
    )

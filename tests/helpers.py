"""Tip builders pinned to a fixed reference instant, shared by test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from rmtscore.engine.models import CompletedTip

# Every test reads "now" from here, never from the clock
BASE_DATE = datetime(2025, 7, 15, 10, 0, tzinfo=timezone.utc)


def make_tip(
    status: str = "TARGET_1_HIT",
    *,
    days_ago: float = 0,
    closed_at: datetime | None = None,
    hold_days: int = 5,
    direction: str = "BUY",
    entry_price: float = 100.0,
    target1: float = 110.0,
    target2: float | None = None,
    target3: float | None = None,
    stop_loss: float = 95.0,
    timeframe: str = "SWING",
    **kwargs: Any,
) -> CompletedTip:
    """A completed tip closed ``days_ago`` days before BASE_DATE."""
    if closed_at is None:
        closed_at = BASE_DATE - timedelta(days=days_ago)
    return CompletedTip(
        direction=direction,
        entry_price=entry_price,
        target1=target1,
        target2=target2,
        target3=target3,
        stop_loss=stop_loss,
        timeframe=timeframe,
        status=status,
        tip_timestamp=closed_at - timedelta(days=hold_days),
        closed_at=closed_at,
        **kwargs,
    )


def make_hit(**kwargs: Any) -> CompletedTip:
    return make_tip("TARGET_1_HIT", **kwargs)


def make_miss(**kwargs: Any) -> CompletedTip:
    return make_tip("STOPLOSS_HIT", **kwargs)


def month_tips(year: int, month: int, hits: int, misses: int, **kwargs: Any) -> list[CompletedTip]:
    """``hits`` + ``misses`` tips all closing mid-month (UTC)."""
    closed = datetime(year, month, 15, 12, tzinfo=timezone.utc)
    tips = [make_hit(closed_at=closed + timedelta(hours=i), **kwargs) for i in range(hits)]
    tips += [
        make_miss(closed_at=closed + timedelta(hours=hits + i), **kwargs)
        for i in range(misses)
    ]
    return tips


"""Current win/loss streak, counted back from the most recent close."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rmtscore.engine.models import CompletedTip, is_hit


@dataclass(frozen=True)
class StreakResult:
    win_streak: int
    loss_streak: int


def calc_streaks(tips: Sequence[CompletedTip]) -> StreakResult:
    """Length of the run that includes the most recent tip.

    Tips are ordered by ``closed_at`` descending here, so callers may pass
    them in any order. Exactly one of the two counts is nonzero for
    non-empty input.
    """
    if not tips:
        return StreakResult(win_streak=0, loss_streak=0)

    # sorted() is stable: tips closing at the same instant keep input order
    ordered = sorted(tips, key=lambda t: t.closed_at, reverse=True)
    latest = is_hit(ordered[0].status)

    run = 0
    for tip in ordered:
        if is_hit(tip.status) != latest:
            break
        run += 1

    if latest:
        return StreakResult(win_streak=run, loss_streak=0)
    return StreakResult(win_streak=0, loss_streak=run)

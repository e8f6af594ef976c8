"""ScoringContext -- shared per-run scoring context.

Bundles the reference instant and the resolved configuration so that every
``calculate_composite_score()`` call in a run sees the same "now".

Built once per scoring run, then passed to every creator's scoring call.
Creator-specific data (the tip list) remains positional.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from rmtscore.config.schema import RMTConfig
from rmtscore.engine.models import to_utc


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScoringContext:
    """Shared per-run scoring context.

    Usage::

        ctx = ScoringContext.create(config)

        for creator_id, tips in histories.items():
            result = calculate_composite_score(
                tips, now=ctx.now, config=ctx.config,
            )
    """

    now: datetime
    """Reference instant for recency decay, captured once per run (UTC)."""

    config: RMTConfig = field(default_factory=RMTConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "now", to_utc(self.now))

    @classmethod
    def create(
        cls,
        config: RMTConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> "ScoringContext":
        """Read the clock once and bind it to ``config``."""
        return cls(now=clock(), config=config if config is not None else RMTConfig())

    @property
    def half_life_days(self) -> float:
        return self.config.scoring.recency.half_life_days

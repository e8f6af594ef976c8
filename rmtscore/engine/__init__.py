"""Creator scoring engine.

Public API:
  calculate_composite_score — Score one creator's completed tips -> ScoreResult
  CompletedTip              — Immutable input record
  ScoreResult               — Frozen output snapshot
  ScoringContext            — Shared per-run context (reference instant, config)
"""

from rmtscore.engine.context import ScoringContext
from rmtscore.engine.models import (
    CompletedTip,
    CreatorTier,
    NonTerminalTipError,
    ScoreResult,
    TipDirection,
    TipStatus,
    TipTimeframe,
)
from rmtscore.engine.scorer import calculate_composite_score

__all__ = [
    "CompletedTip",
    "CreatorTier",
    "NonTerminalTipError",
    "ScoreResult",
    "ScoringContext",
    "TipDirection",
    "TipStatus",
    "TipTimeframe",
    "calculate_composite_score",
]

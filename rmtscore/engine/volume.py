"""Volume factor component (10% of RMT).

Logarithmic credit for sample size, saturating at ``max_expected_tips``:

  volume_factor = clamp(log10(n) / log10(max_expected_tips), 0, 1)

Early tips count most: 10 tips already earn ~30 points, 100 tips ~61,
2000 tips the full 100. Volume dampens thin histories, it does not gate them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from rmtscore.config.defaults import VOLUME


@dataclass(frozen=True)
class VolumeFactorResult:
    volume_factor: float
    """0-1."""
    volume_factor_score: float
    """0-100."""


def calc_volume_factor(
    total_scored_tips: int,
    max_expected_tips: int = VOLUME["max_expected_tips"],
) -> VolumeFactorResult:
    if max_expected_tips <= 1:
        raise ValueError(f"max_expected_tips must be greater than 1, got {max_expected_tips}")

    if total_scored_tips <= 0:
        return VolumeFactorResult(volume_factor=0.0, volume_factor_score=0.0)

    factor = math.log10(total_scored_tips) / math.log10(max_expected_tips)
    factor = min(1.0, max(0.0, factor))

    return VolumeFactorResult(volume_factor=factor, volume_factor_score=factor * 100)

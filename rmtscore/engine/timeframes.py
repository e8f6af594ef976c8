"""Accuracy per trade horizon.

A horizon with no tips reports None: a creator who never posts intraday
calls is unrated there, not 0% accurate.
"""

from __future__ import annotations

from collections.abc import Sequence

from rmtscore.engine.accuracy import calc_filtered_accuracy
from rmtscore.engine.models import CompletedTip, TimeframeAccuracy, TipTimeframe


def calc_timeframe_accuracy(tips: Sequence[CompletedTip]) -> TimeframeAccuracy:
    rates = {
        timeframe.value.lower(): calc_filtered_accuracy(
            tips, lambda t, tf=timeframe: t.timeframe is tf,
        )
        for timeframe in TipTimeframe
    }
    return TimeframeAccuracy(**rates)

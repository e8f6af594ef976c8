"""Default values for the RMT scoring engine.

These constants are the published, versioned scoring contract: the public
leaderboard and every score dispute are re-derived from them.

Do not change these without bumping SCORING_VERSION.
"""

SCORING_VERSION = 1

# ---------------------------------------------------------------------------
# RMT Component Weights (must sum to exactly 1.0)
# ---------------------------------------------------------------------------
RMT_WEIGHTS = {
    "accuracy": 0.40,       # Recency-weighted hit rate
    "risk_adjusted": 0.30,  # Return and reward-to-risk quality
    "consistency": 0.20,    # Month-over-month stability
    "volume_factor": 0.10,  # Sample-size credit
}

# ---------------------------------------------------------------------------
# Recency Decay
# ---------------------------------------------------------------------------
RECENCY = {
    "half_life_days": 90,  # A tip closed 90 days ago carries weight 0.5
}

# ---------------------------------------------------------------------------
# Volume Factor
# ---------------------------------------------------------------------------
VOLUME = {
    "max_expected_tips": 2000,  # log10 saturation point (score 100)
}

# ---------------------------------------------------------------------------
# Risk-Adjusted Normalization
# ---------------------------------------------------------------------------
RISK_ADJUSTED = {
    "rr_floor": -2.0,         # avg reward/risk of -2 maps to 0
    "rr_ceiling": 5.0,        # avg reward/risk of +5 maps to 100
    "return_floor": -10.0,    # avg return of -10% maps to 0
    "return_ceiling": 20.0,   # expected-return ceiling: +20% maps to 100
    "min_risk_pct": 0.01,     # Substituted when entry == stop-loss
}

# Blend of the two normalized risk-adjusted metrics (must sum to 1.0)
RISK_ADJUSTED_BLEND = {
    "risk_reward": 0.50,
    "return": 0.50,
}

# Multi-target return weighting by number of targets defined
TARGET_WEIGHTS = {
    "two_targets": [0.50, 0.50],
    "three_targets_t2": [0.50, 0.50],
    "three_targets_t3": [0.33, 0.33, 0.34],
}

# ---------------------------------------------------------------------------
# Consistency
# ---------------------------------------------------------------------------
CONSISTENCY = {
    "min_months": 3,        # Fewer distinct months -> neutral score
    "neutral_score": 50.0,
    "cv_cutoff": 1.0,       # CV at or above this scores 0
}

# ---------------------------------------------------------------------------
# Confidence Interval (binomial proportion, 95%)
# ---------------------------------------------------------------------------
CONFIDENCE = {
    "z_score": 1.96,
}

# ---------------------------------------------------------------------------
# Creator Tiers (lower bound of each tier, inclusive)
# ---------------------------------------------------------------------------
TIER_THRESHOLDS = {
    "BRONZE": 20,
    "SILVER": 50,
    "GOLD": 200,
    "PLATINUM": 500,
    "DIAMOND": 1000,
}

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------
DISPLAY = {
    "min_tips_for_display": 5,   # Below this the CLI marks the score hidden
}

# ---------------------------------------------------------------------------
# Batch Pipeline
# ---------------------------------------------------------------------------
PIPELINE = {
    "max_workers": 8,
}

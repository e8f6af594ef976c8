"""Pydantic models for config.yaml validation."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from rmtscore.config.defaults import (
    CONFIDENCE,
    CONSISTENCY,
    DISPLAY,
    PIPELINE,
    RECENCY,
    RISK_ADJUSTED,
    RISK_ADJUSTED_BLEND,
    RMT_WEIGHTS,
    SCORING_VERSION,
    TARGET_WEIGHTS,
    TIER_THRESHOLDS,
    VOLUME,
)


def _sums_to_one(values: list[float]) -> bool:
    return math.fsum(values) == 1.0


# ---------------------------------------------------------------------------
# Scoring Configs
# ---------------------------------------------------------------------------

class ScoringWeightsConfig(BaseModel):
    accuracy: float = RMT_WEIGHTS["accuracy"]
    risk_adjusted: float = RMT_WEIGHTS["risk_adjusted"]
    consistency: float = RMT_WEIGHTS["consistency"]
    volume_factor: float = RMT_WEIGHTS["volume_factor"]

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringWeightsConfig":
        values = [self.accuracy, self.risk_adjusted, self.consistency, self.volume_factor]
        if any(v < 0 for v in values):
            raise ValueError("RMT weights must be non-negative")
        if not _sums_to_one(values):
            raise ValueError(f"RMT weights must sum to 1.0, got {math.fsum(values)}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "risk_adjusted": self.risk_adjusted,
            "consistency": self.consistency,
            "volume_factor": self.volume_factor,
        }


class RecencyConfig(BaseModel):
    half_life_days: float = RECENCY["half_life_days"]

    @field_validator("half_life_days")
    @classmethod
    def positive_half_life(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("half_life_days must be positive")
        return v


class VolumeConfig(BaseModel):
    max_expected_tips: int = VOLUME["max_expected_tips"]

    @field_validator("max_expected_tips")
    @classmethod
    def ceiling_above_one(cls, v: int) -> int:
        if v <= 1:
            raise ValueError("max_expected_tips must be greater than 1")
        return v


class RiskAdjustedBlendConfig(BaseModel):
    risk_reward: float = RISK_ADJUSTED_BLEND["risk_reward"]
    return_: float = Field(RISK_ADJUSTED_BLEND["return"], alias="return")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def blend_sums_to_one(self) -> "RiskAdjustedBlendConfig":
        if not _sums_to_one([self.risk_reward, self.return_]):
            raise ValueError("Risk-adjusted blend weights must sum to 1.0")
        return self


class TargetWeightsConfig(BaseModel):
    two_targets: list[float] = Field(
        default_factory=lambda: list(TARGET_WEIGHTS["two_targets"])
    )
    three_targets_t2: list[float] = Field(
        default_factory=lambda: list(TARGET_WEIGHTS["three_targets_t2"])
    )
    three_targets_t3: list[float] = Field(
        default_factory=lambda: list(TARGET_WEIGHTS["three_targets_t3"])
    )


class RiskAdjustedConfig(BaseModel):
    rr_floor: float = RISK_ADJUSTED["rr_floor"]
    rr_ceiling: float = RISK_ADJUSTED["rr_ceiling"]
    return_floor: float = RISK_ADJUSTED["return_floor"]
    return_ceiling: float = RISK_ADJUSTED["return_ceiling"]
    min_risk_pct: float = RISK_ADJUSTED["min_risk_pct"]
    blend: RiskAdjustedBlendConfig = Field(default_factory=RiskAdjustedBlendConfig)
    target_weights: TargetWeightsConfig = Field(default_factory=TargetWeightsConfig)

    @model_validator(mode="after")
    def floors_below_ceilings(self) -> "RiskAdjustedConfig":
        if self.rr_floor >= self.rr_ceiling:
            raise ValueError("rr_floor must be below rr_ceiling")
        if self.return_floor >= self.return_ceiling:
            raise ValueError("return_floor must be below return_ceiling")
        if self.min_risk_pct <= 0:
            raise ValueError("min_risk_pct must be positive")
        return self


class ConsistencyConfig(BaseModel):
    min_months: int = CONSISTENCY["min_months"]
    neutral_score: float = CONSISTENCY["neutral_score"]
    cv_cutoff: float = CONSISTENCY["cv_cutoff"]


class ConfidenceConfig(BaseModel):
    z_score: float = CONFIDENCE["z_score"]


class TierThresholdsConfig(BaseModel):
    BRONZE: int = TIER_THRESHOLDS["BRONZE"]
    SILVER: int = TIER_THRESHOLDS["SILVER"]
    GOLD: int = TIER_THRESHOLDS["GOLD"]
    PLATINUM: int = TIER_THRESHOLDS["PLATINUM"]
    DIAMOND: int = TIER_THRESHOLDS["DIAMOND"]

    @model_validator(mode="after")
    def thresholds_ascending(self) -> "TierThresholdsConfig":
        ordered = [self.BRONZE, self.SILVER, self.GOLD, self.PLATINUM, self.DIAMOND]
        if ordered != sorted(set(ordered)):
            raise ValueError(f"Tier thresholds must be strictly ascending, got {ordered}")
        return self


class DisplayConfig(BaseModel):
    min_tips_for_display: int = DISPLAY["min_tips_for_display"]


class ScoringConfig(BaseModel):
    weights: ScoringWeightsConfig = Field(default_factory=ScoringWeightsConfig)
    recency: RecencyConfig = Field(default_factory=RecencyConfig)
    volume: VolumeConfig = Field(default_factory=VolumeConfig)
    risk_adjusted: RiskAdjustedConfig = Field(default_factory=RiskAdjustedConfig)
    consistency: ConsistencyConfig = Field(default_factory=ConsistencyConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    tiers: TierThresholdsConfig = Field(default_factory=TierThresholdsConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


# ---------------------------------------------------------------------------
# Pipeline Config
# ---------------------------------------------------------------------------

class PipelineConfig(BaseModel):
    max_workers: int = PIPELINE["max_workers"]

    @field_validator("max_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v


# ---------------------------------------------------------------------------
# Output Config
# ---------------------------------------------------------------------------

class OutputConfig(BaseModel):
    score_history_dir: str = "~/.rmtscore/history"


# ---------------------------------------------------------------------------
# Database Config
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    path: str = "~/.rmtscore/rmtscore.db"


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class RMTConfig(BaseModel):
    """Root configuration model for the RMT scoring engine."""

    version: int = SCORING_VERSION
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Drop them so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

# studio/engine/activation.py
from __future__ import annotations

import enum

from .thresholds import THRESHOLDS, ThresholdConfig


class ActivationTier(str, enum.Enum):
    ACTIVE = "active"
    SUBTHRESHOLD = "subthreshold"
    NONE = "none"


class ClinicalSignificance(str, enum.Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very_low"


class TierRange(str, enum.Enum):
    CLINICAL = "clinical"
    AT_RISK = "at_risk"
    MODERATE = "moderate"
    LOW = "low"

    @property
    def label(self) -> str:
        return TIER_RANGE_LABELS[self]


TIER_RANGE_LABELS = {
    TierRange.CLINICAL: "Clinical Range",
    TierRange.AT_RISK: "At-Risk Range",
    TierRange.MODERATE: "Moderate Range",
    TierRange.LOW: "Low Range",
}


# The three band systems below share cut points in places (60 is both
# `active` and `at_risk`) but stay separate functions; each one is allowed
# to move on its own.

def classify(tscore: float, config: ThresholdConfig = THRESHOLDS) -> ActivationTier:
    """
    Activation tier for a T-score. Lower bounds are inclusive, so a score
    sitting exactly on a cut point belongs to the tier that cut point names.
    Negative and out-of-range scores are valid input.
    """
    if tscore >= config.active:
        return ActivationTier.ACTIVE
    if tscore >= config.subthreshold_min:
        return ActivationTier.SUBTHRESHOLD
    return ActivationTier.NONE


def clinical_significance(
    tscore: float, config: ThresholdConfig = THRESHOLDS
) -> ClinicalSignificance:
    bands = config.clinical
    if tscore >= bands.very_high:
        return ClinicalSignificance.VERY_HIGH
    if tscore >= bands.high:
        return ClinicalSignificance.HIGH
    if tscore >= bands.moderate:
        return ClinicalSignificance.MODERATE
    if tscore >= bands.low:
        return ClinicalSignificance.LOW
    return ClinicalSignificance.VERY_LOW


def tier_range(tscore: float, config: ThresholdConfig = THRESHOLDS) -> TierRange:
    bands = config.tier_ranges
    if tscore >= bands.clinical:
        return TierRange.CLINICAL
    if tscore >= bands.at_risk:
        return TierRange.AT_RISK
    if tscore >= bands.moderate:
        return TierRange.MODERATE
    return TierRange.LOW


def meets_tier_threshold(
    tscore: float, tier: ActivationTier, config: ThresholdConfig = THRESHOLDS
) -> bool:
    """True when `tscore` falls inside the half-open interval of `tier`."""
    if tier == ActivationTier.ACTIVE:
        return tscore >= config.active
    if tier == ActivationTier.SUBTHRESHOLD:
        return config.subthreshold_min <= tscore < config.active
    if tier == ActivationTier.NONE:
        return tscore < config.subthreshold_min
    return False

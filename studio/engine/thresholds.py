# studio/engine/thresholds.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ClinicalBands:
    """Fine clinical banding, evaluated highest-first. Below `low` is very_low."""
    very_high: float = 75
    high: float = 65
    moderate: float = 55
    low: float = 40


@dataclass(frozen=True)
class TierRangeBands:
    """Coarse UI range labels. Below `moderate` is the low range."""
    clinical: float = 70
    at_risk: float = 60
    moderate: float = 50


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Versioned cut points for every T-score classification in the app.

    Nothing else may hardcode these numbers: classifiers take a config
    (defaulting to THRESHOLDS) so a new version changes classification
    everywhere without touching classifier logic.
    """
    version: str = "thresholds-2025.1"

    # T >= active: clinically reliable, full detail
    active: float = 60
    # T in [subthreshold_min, active): emerging pattern
    subthreshold_min: float = 50

    # UI behaviour
    secondary_count: int = 2
    coach_toggle_default: bool = True  # True = exploratory

    clinical: ClinicalBands = field(default_factory=ClinicalBands)
    tier_ranges: TierRangeBands = field(default_factory=TierRangeBands)

    def __post_init__(self) -> None:
        if self.subthreshold_min > self.active:
            raise ValueError("subthreshold_min must not exceed active")

        c = self.clinical
        if not (c.very_high >= c.high >= c.moderate >= c.low):
            raise ValueError("clinical bands must be ordered highest-first")

        r = self.tier_ranges
        if not (r.clinical >= r.at_risk >= r.moderate):
            raise ValueError("tier ranges must be ordered highest-first")

        if self.secondary_count < 0:
            raise ValueError("secondary_count must be >= 0")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


THRESHOLDS = ThresholdConfig()


def get_thresholds() -> ThresholdConfig:
    return THRESHOLDS

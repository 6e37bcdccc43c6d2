# studio/engine/secondary.py
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

from .activation import ActivationTier, classify
from .scores import SchemaScore
from .thresholds import THRESHOLDS, ThresholdConfig


def _by_tscore_desc(scores: Sequence[SchemaScore]) -> List[SchemaScore]:
    return sorted(scores, key=lambda s: s.t_score, reverse=True)


def build_secondary(
    scores: Sequence[SchemaScore], config: ThresholdConfig = THRESHOLDS
) -> List[SchemaScore]:
    """
    Top `secondary_count` schemas for the Secondary section.

    Prefers schemas that clear `subthreshold_min`; when there are not enough
    of them the section falls back to the top N overall, so it is never empty
    while any score exists.
    """
    if not scores:
        return []

    n = config.secondary_count
    ranked = _by_tscore_desc(scores)
    eligible = [s for s in ranked if classify(s.t_score, config) != ActivationTier.NONE]

    if len(eligible) >= n:
        return eligible[:n]
    return ranked[:n]


def categorize_by_tier(
    scores: Sequence[SchemaScore], config: ThresholdConfig = THRESHOLDS
) -> Dict[ActivationTier, List[SchemaScore]]:
    result: Dict[ActivationTier, List[SchemaScore]] = {tier: [] for tier in ActivationTier}
    for s in _by_tscore_desc(scores):
        result[classify(s.t_score, config)].append(s)
    return result


@dataclass
class SecondaryStats:
    total_schemas: int = 0
    active_count: int = 0
    subthreshold_count: int = 0
    none_count: int = 0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    average_score: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def secondary_stats(
    scores: Sequence[SchemaScore], config: ThresholdConfig = THRESHOLDS
) -> SecondaryStats:
    if not scores:
        return SecondaryStats()

    tiers = categorize_by_tier(scores, config)
    t_scores = [s.t_score for s in scores]
    return SecondaryStats(
        total_schemas=len(scores),
        active_count=len(tiers[ActivationTier.ACTIVE]),
        subthreshold_count=len(tiers[ActivationTier.SUBTHRESHOLD]),
        none_count=len(tiers[ActivationTier.NONE]),
        highest_score=max(t_scores),
        lowest_score=min(t_scores),
        # half-up, so 50.5 -> 51
        average_score=math.floor(sum(t_scores) / len(t_scores) + 0.5),
    )

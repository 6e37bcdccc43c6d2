# studio/engine/profile.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .activation import (
    ActivationTier,
    ClinicalSignificance,
    TierRange,
    classify,
    clinical_significance,
    tier_range,
)
from .coping import CopingAggregate, aggregate_coping
from .display_policy import DisplayPolicy, ViewMode, policy_for, resolve_view_mode
from .modes import ModeLibrary
from .schema_mapping import SchemaMapping
from .scores import ResolvedScores, SchemaScore, SkippedInput
from .secondary import SecondaryStats, build_secondary, secondary_stats
from .thresholds import THRESHOLDS, ThresholdConfig


@dataclass
class SchemaView:
    schema_id: str
    name: str
    domain_id: str
    leadership_persona: str
    z_score: float
    t_score: float
    tier: ActivationTier
    clinical_significance: ClinicalSignificance
    tier_range: TierRange
    policy: DisplayPolicy

    def as_dict(self) -> Dict[str, Any]:
        # hidden policies withhold the persona and clinical name
        return {
            "schema_id": self.schema_id,
            "name": self.name if self.policy.show_clinical else None,
            "domain_id": self.domain_id,
            "leadership_persona": self.leadership_persona if self.policy.show_leadership else None,
            "z_score": self.z_score,
            "t_score": self.t_score,
            "tier": self.tier.value,
            "clinical_significance": self.clinical_significance.value,
            "tier_range": self.tier_range.value,
            "tier_range_label": self.tier_range.label,
            "policy": self.policy.as_dict(),
        }


@dataclass
class ScoredProfile:
    view_mode: ViewMode
    thresholds_version: str
    schemas: List[SchemaView] = field(default_factory=list)
    secondary: List[SchemaView] = field(default_factory=list)
    stats: SecondaryStats = field(default_factory=SecondaryStats)
    coping: Optional[CopingAggregate] = None
    skipped: List[SkippedInput] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "view_mode": self.view_mode.value,
            "thresholds_version": self.thresholds_version,
            "schemas": [s.as_dict() for s in self.schemas],
            "secondary": [s.as_dict() for s in self.secondary],
            "stats": self.stats.as_dict(),
            "coping": self.coping.as_dict() if self.coping else None,
            "skipped": [s.as_dict() for s in self.skipped],
        }


def view_for(
    score: SchemaScore,
    mapping: SchemaMapping,
    view_mode: ViewMode,
    config: ThresholdConfig = THRESHOLDS,
) -> SchemaView:
    # tier/policy are recomputed on every call; thresholds can change
    # independently of stored scores
    entry = mapping.by_clinical_id(score.schema_id)
    tier = classify(score.t_score, config)
    return SchemaView(
        schema_id=score.schema_id,
        name=entry.clinical_schema_canonical if entry else score.schema_id,
        domain_id=entry.domain_id if entry else "",
        leadership_persona=entry.leadership_persona if entry else "",
        z_score=score.z_score,
        t_score=score.t_score,
        tier=tier,
        clinical_significance=clinical_significance(score.t_score, config),
        tier_range=tier_range(score.t_score, config),
        policy=policy_for(tier, view_mode),
    )


def build_profile(
    resolved: ResolvedScores,
    mapping: SchemaMapping,
    modes: Optional[ModeLibrary],
    view_mode: ViewMode | str | None = None,
    config: ThresholdConfig = THRESHOLDS,
) -> ScoredProfile:
    """
    Tier + display policy per schema and one coping breakdown.

    Only visible schemas are listed under `schemas`; `stats` counts all of
    them. `coping` is None when no mode library is available.
    """
    mode = resolve_view_mode(view_mode, config)
    ranked = sorted(resolved.scores, key=lambda s: s.t_score, reverse=True)
    views = [view_for(s, mapping, mode, config) for s in ranked]

    return ScoredProfile(
        view_mode=mode,
        thresholds_version=config.version,
        schemas=[v for v in views if v.policy.visible],
        secondary=[view_for(s, mapping, mode, config) for s in build_secondary(ranked, config)],
        stats=secondary_stats(ranked, config),
        coping=aggregate_coping(resolved.scores, modes) if modes is not None else None,
        skipped=list(resolved.skipped),
    )

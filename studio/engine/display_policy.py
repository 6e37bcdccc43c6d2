# studio/engine/display_policy.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict

from .activation import ActivationTier
from .thresholds import THRESHOLDS, ThresholdConfig


class ViewMode(str, enum.Enum):
    STRICT = "strict"            # active tier only
    EXPLORATORY = "exploratory"  # active + subthreshold


class DetailLevel(str, enum.Enum):
    FULL = "full"
    BRIEF = "brief"
    NONE = "none"


class Disclaimer(str, enum.Enum):
    NONE = "none"
    SUBTHRESHOLD = "subthreshold"


@dataclass(frozen=True)
class DisplayPolicy:
    """
    What the coach-facing view may render for one schema.

    detail_level NONE means "render nothing for this schema"; it is not an
    error condition. The show_* flags gate the leadership persona, the
    clinical name and the Secondary section independently.
    """
    detail_level: DetailLevel
    disclaimer: Disclaimer = Disclaimer.NONE
    show_leadership: bool = True
    show_clinical: bool = True
    show_in_secondary: bool = True

    @property
    def visible(self) -> bool:
        return self.detail_level != DetailLevel.NONE

    def as_dict(self) -> Dict[str, Any]:
        return {
            "detail_level": self.detail_level.value,
            "disclaimer": self.disclaimer.value,
            "visible": self.visible,
            "show_leadership": self.show_leadership,
            "show_clinical": self.show_clinical,
            "show_in_secondary": self.show_in_secondary,
        }


FULL_POLICY = DisplayPolicy(DetailLevel.FULL)
BRIEF_POLICY = DisplayPolicy(DetailLevel.BRIEF, Disclaimer.SUBTHRESHOLD)
HIDDEN_POLICY = DisplayPolicy(
    DetailLevel.NONE, show_leadership=False, show_clinical=False, show_in_secondary=False
)


def is_visible_in_view_mode(tier: ActivationTier, view_mode: ViewMode) -> bool:
    if tier == ActivationTier.ACTIVE:
        return True
    if tier == ActivationTier.SUBTHRESHOLD:
        return view_mode == ViewMode.EXPLORATORY
    return False


def policy_for(tier: ActivationTier, view_mode: ViewMode) -> DisplayPolicy:
    """
    active       -> full, whatever the view mode
    subthreshold -> brief + disclaimer in exploratory, hidden in strict
    none         -> hidden
    """
    if not is_visible_in_view_mode(tier, view_mode):
        return HIDDEN_POLICY
    if tier == ActivationTier.ACTIVE:
        return FULL_POLICY
    return BRIEF_POLICY


def default_view_mode(config: ThresholdConfig = THRESHOLDS) -> ViewMode:
    return ViewMode.EXPLORATORY if config.coach_toggle_default else ViewMode.STRICT


def resolve_view_mode(
    value: ViewMode | str | None, config: ThresholdConfig = THRESHOLDS
) -> ViewMode:
    """Coach's choice if given, otherwise the configured default."""
    if value is None or value == "":
        return default_view_mode(config)
    return ViewMode(value)

# studio/engine/__init__.py
from .thresholds import THRESHOLDS, ThresholdConfig, get_thresholds
from .activation import ActivationTier, classify, clinical_significance, tier_range, meets_tier_threshold
from .display_policy import DisplayPolicy, ViewMode, policy_for, is_visible_in_view_mode, default_view_mode
from .coping import CopingAggregate, CopingStyle, aggregate_coping, coping_from_raw
from .schema_mapping import CanonicalSchemaEntry, SchemaMapping
from .modes import CopingStrategy, Mode, ModeLibrary
from .normalization import DEFAULT_INSTRUMENT, percentile_to_t, raw_to_t
from .scores import SchemaScore, resolve_scores, average_item_responses, item_scores
from .profile import ScoredProfile, build_profile

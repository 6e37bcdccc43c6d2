# studio/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Annotated, Any, Dict, Literal

from pydantic import BaseModel, Field, StringConstraints, ConfigDict, field_validator, model_validator

from .engine.normalization import DEFAULT_INSTRUMENT
from .models import SourceEnum


ScoreScale = Literal["z", "t", "percentile"]
ViewModeIn = Literal["strict", "exploratory"]


class ScoresIn(BaseModel):
    # values stay untyped: a malformed score is skipped, not a 422
    scores: Dict[str, Any] = Field(default_factory=dict)
    scale: ScoreScale = "z"


class ProfileIn(ScoresIn):
    view_mode: Optional[ViewModeIn] = None


class AssessmentCreate(BaseModel):
    client_ref: Annotated[
        str,
        StringConstraints(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-\$]+$"),
    ]
    source: SourceEnum = SourceEnum.WEB
    scale: ScoreScale = "z"
    scores: Dict[str, Any] = Field(default_factory=dict)
    # item-level answers keyed like "1.1.R1"; used when `scores` is empty
    items: Dict[str, Any] = Field(default_factory=dict)
    # conversion table for `items`; unknown names use the linear fallback
    instrument: str = Field(DEFAULT_INSTRUMENT, min_length=1, max_length=80)
    view_mode: Optional[ViewModeIn] = None

    @model_validator(mode="after")
    def _needs_input(self):
        if not self.scores and not self.items:
            raise ValueError("Provide either 'scores' or 'items'")
        return self


class SkippedOut(BaseModel):
    identifier: str
    reason: str


class AssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_ref: str
    source: SourceEnum
    created_at: Optional[datetime] = None

    scores: Dict[str, float] = Field(default_factory=dict)
    skipped: List[SkippedOut] = Field(default_factory=list)

    app_version: Optional[str] = None
    reference_version: Optional[str] = None

    # recomputed per read, never stored
    profile: Optional[Dict[str, Any]] = None

    @field_validator("skipped", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any):
        if v is None:
            return []
        if isinstance(v, list):
            return v
        return []

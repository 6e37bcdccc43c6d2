# studio/routes/scoring.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..engine.coping import aggregate_coping
from ..engine.profile import build_profile
from ..engine.scores import resolve_scores
from ..logging_config import log_event
from ..reference import ReferenceData, get_reference
from ..settings import get_settings

router = APIRouter(prefix="/scoring", tags=["scoring"])
settings = get_settings()


def _check_size(scores: dict) -> None:
    if len(scores) > settings.MAX_SCORES_PER_REQUEST:
        raise HTTPException(413, f"At most {settings.MAX_SCORES_PER_REQUEST} scores per request")


@router.post("/profile")
def score_profile(body: schemas.ProfileIn, ref: ReferenceData = Depends(get_reference)):
    """Per-schema tier + display policy, secondary section and coping breakdown."""
    _check_size(body.scores)

    resolved = resolve_scores(body.scores, ref.mapping, body.scale)
    profile = build_profile(resolved, ref.mapping, ref.modes, body.view_mode, ref.thresholds)

    log_event("PROFILE_SCORED", "Scored ad-hoc profile", {
        "resolved": len(resolved.scores),
        "skipped": len(resolved.skipped),
        "view_mode": profile.view_mode.value,
    })
    return profile.as_dict()


@router.post("/coping")
def score_coping(body: schemas.ScoresIn, ref: ReferenceData = Depends(get_reference)):
    _check_size(body.scores)

    if ref.modes is None:
        raise HTTPException(404, "Mode library unavailable")

    resolved = resolve_scores(body.scores, ref.mapping, body.scale)
    out = aggregate_coping(resolved.scores, ref.modes).as_dict()
    out["skipped"] = [s.as_dict() for s in resolved.skipped]
    return out

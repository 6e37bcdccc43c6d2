# studio/routes/assessments.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..engine.profile import build_profile
from ..engine.scores import (
    ResolvedScores,
    SchemaScore,
    SkippedInput,
    item_scores,
    resolve_scores,
)
from ..logging_config import log_event, log_failure
from ..reference import ReferenceData, get_reference
from ..settings import get_settings

router = APIRouter(prefix="/assessments", tags=["assessments"])
settings = get_settings()


def _resolve_input(body: schemas.AssessmentCreate, ref: ReferenceData) -> ResolvedScores:
    if body.scores:
        return resolve_scores(body.scores, ref.mapping, body.scale)
    return item_scores(body.items, ref.mapping, body.instrument)


def _snapshot(obj: models.Assessment) -> ResolvedScores:
    # stored rows only ever hold canonical ids with finite z-scores
    return ResolvedScores(
        scores=[SchemaScore(cid, float(z)) for cid, z in (obj.scores or {}).items()],
        skipped=[SkippedInput(s.get("identifier", ""), s.get("reason", "")) for s in (obj.skipped or [])],
    )


def _respond(obj: models.Assessment, ref: ReferenceData, view_mode: Optional[str]) -> schemas.AssessmentResponse:
    resp = schemas.AssessmentResponse.model_validate(obj)
    resp.profile = build_profile(
        _snapshot(obj), ref.mapping, ref.modes, view_mode, ref.thresholds
    ).as_dict()
    return resp


@router.post("/", response_model=schemas.AssessmentResponse, status_code=201)
def create_assessment(
    body: schemas.AssessmentCreate,
    response: Response,
    db: Session = Depends(get_db),
    ref: ReferenceData = Depends(get_reference),
):
    response.headers["X-App-Version"] = settings.APP_VERSION

    if len(body.scores) > settings.MAX_SCORES_PER_REQUEST:
        raise HTTPException(413, f"At most {settings.MAX_SCORES_PER_REQUEST} scores per request")
    if len(body.items) > settings.MAX_ITEMS_PER_REQUEST:
        raise HTTPException(413, f"At most {settings.MAX_ITEMS_PER_REQUEST} item responses per request")

    resolved = _resolve_input(body, ref)
    if not resolved.scores:
        log_failure("NO_RESOLVABLE_SCORES", {
            "client_ref": body.client_ref,
            "skipped": [s.as_dict() for s in resolved.skipped],
        })
        raise HTTPException(422, "No input resolved to a known schema")

    obj = models.Assessment(
        client_ref=body.client_ref,
        source=body.source,
        scores=resolved.z_by_schema(),
        skipped=[s.as_dict() for s in resolved.skipped],
        app_version=settings.APP_VERSION,
        reference_version=settings.REFERENCE_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )

    try:
        db.add(obj)
        db.commit()
        db.refresh(obj)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Duplicate insert")

    log_event("ASSESSMENT_CREATED", "Stored assessment snapshot", {
        "assessment_id": obj.id,
        "schemas": len(obj.scores),
        "skipped": len(obj.skipped),
    })
    return _respond(obj, ref, body.view_mode)


@router.get("/", response_model=list[schemas.AssessmentResponse])
def list_assessments(
    client_ref: Optional[str] = None,
    limit: int = Query(50, ge=1),
    db: Session = Depends(get_db),
):
    limit = min(limit, settings.MAX_LIST_LIMIT)
    q = db.query(models.Assessment)
    if client_ref:
        q = q.filter(models.Assessment.client_ref == client_ref)
    rows = q.order_by(models.Assessment.created_at.desc()).limit(limit).all()
    # listing carries raw snapshots only; fetch one to get its profile
    return [schemas.AssessmentResponse.model_validate(r) for r in rows]


@router.get("/{assessment_id}", response_model=schemas.AssessmentResponse)
def get_assessment(
    assessment_id: str,
    view_mode: Optional[schemas.ViewModeIn] = None,
    db: Session = Depends(get_db),
    ref: ReferenceData = Depends(get_reference),
):
    obj = db.query(models.Assessment).filter(models.Assessment.id == assessment_id).first()
    if not obj:
        raise HTTPException(404, "Assessment not found")
    return _respond(obj, ref, view_mode)

# studio/routes/catalog.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..reference import ReferenceData, get_reference

router = APIRouter(tags=["catalog"])


def _schema_out(entry, ref: ReferenceData) -> dict:
    out = entry.model_dump()
    if ref.modes is not None:
        out["modes"] = [m.id for m in ref.modes.by_schema(entry.clinical_id)]
    return out


@router.get("/thresholds")
def get_thresholds(ref: ReferenceData = Depends(get_reference)):
    return ref.thresholds.as_dict()


@router.get("/schemas")
def list_schemas(domain: Optional[str] = None, ref: ReferenceData = Depends(get_reference)):
    entries = ref.mapping.by_domain().get(domain, []) if domain else list(ref.mapping)
    return [_schema_out(e, ref) for e in entries]


@router.get("/schemas/domains")
def list_domains(ref: ReferenceData = Depends(get_reference)):
    out = []
    for domain_id, entries in ref.mapping.by_domain().items():
        first = entries[0]
        out.append({
            "domain_id": domain_id,
            "domain_canonical": first.domain_canonical,
            "section_id": first.section_id,
            "schemas": [e.clinical_id for e in entries],
        })
    return out


@router.get("/schemas/{identifier}")
def get_schema(identifier: str, ref: ReferenceData = Depends(get_reference)):
    """Accepts a clinical ID, a variable ID ("1.1") or a label."""
    entry = ref.mapping.resolve(identifier)
    if entry is None:
        raise HTTPException(404, "Schema not found")
    return _schema_out(entry, ref)


@router.get("/modes")
def list_modes(
    category: Optional[str] = None,
    schema: Optional[str] = None,
    ref: ReferenceData = Depends(get_reference),
):
    if ref.modes is None:
        raise HTTPException(404, "Mode library unavailable")

    modes = ref.modes.all()
    if category:
        modes = [m for m in modes if m.category == category]
    if schema:
        entry = ref.mapping.resolve(schema)
        if entry is None:
            return []
        modes = [m for m in modes if entry.clinical_id in m.linked_schemas]

    return [m.model_dump(mode="json") for m in modes]


@router.get("/modes/categories")
def list_mode_categories(ref: ReferenceData = Depends(get_reference)):
    if ref.modes is None:
        raise HTTPException(404, "Mode library unavailable")
    return ref.modes.categories()


@router.get("/modes/{mode_id}")
def get_mode(mode_id: str, ref: ReferenceData = Depends(get_reference)):
    mode = ref.modes.get(mode_id) if ref.modes is not None else None
    if mode is None:
        raise HTTPException(404, "Mode not found")
    return mode.model_dump(mode="json")

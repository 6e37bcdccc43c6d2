# studio/engine/scores.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

from .normalization import DEFAULT_INSTRUMENT, percentile_to_t, raw_to_t, t_in_range
from .schema_mapping import SchemaMapping

log = logging.getLogger(__name__)

ScoreScale = Literal["z", "t", "percentile"]

T_MEAN = 50.0
T_SD = 10.0


def z_to_t(z: float) -> float:
    return T_MEAN + T_SD * z


def t_to_z(t: float) -> float:
    return (t - T_MEAN) / T_SD


def finite_or_none(value: Any) -> Optional[float]:
    """float(value) when it is a finite number, else None. Booleans are not scores."""
    if isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


@dataclass(frozen=True)
class SchemaScore:
    """One schema's standardized score for one assessment snapshot."""
    schema_id: str
    z_score: float

    @property
    def t_score(self) -> float:
        return z_to_t(self.z_score)

    @classmethod
    def from_t_score(cls, schema_id: str, t_score: float) -> "SchemaScore":
        return cls(schema_id, t_to_z(t_score))


@dataclass(frozen=True)
class SkippedInput:
    identifier: str
    reason: str  # unresolved / malformed / out_of_range / duplicate

    def as_dict(self) -> Dict[str, str]:
        return {"identifier": self.identifier, "reason": self.reason}


@dataclass
class ResolvedScores:
    scores: List[SchemaScore] = field(default_factory=list)
    skipped: List[SkippedInput] = field(default_factory=list)

    def z_by_schema(self) -> Dict[str, float]:
        return {s.schema_id: s.z_score for s in self.scores}


def _to_score(schema_id: str, number: float, scale: ScoreScale) -> Optional[SchemaScore]:
    if scale == "z":
        return SchemaScore(schema_id, number)
    if scale == "t":
        return SchemaScore.from_t_score(schema_id, number) if t_in_range(number) else None
    t = percentile_to_t(number)
    return SchemaScore.from_t_score(schema_id, t) if t is not None else None


def resolve_scores(
    raw: Mapping[str, Any],
    mapping: SchemaMapping,
    scale: ScoreScale = "z",
) -> ResolvedScores:
    """
    Convert {identifier: score} under any naming convention into canonical
    SchemaScores. Nothing here raises: unknown identifiers, malformed or
    out-of-range values and duplicates are reported in `skipped`. On
    duplicates the last identifier wins.
    """
    if scale not in ("z", "t", "percentile"):
        raise ValueError(f"Unknown score scale: {scale}")

    out = ResolvedScores()
    chosen: Dict[str, tuple[str, SchemaScore]] = {}

    for identifier, value in (raw or {}).items():
        entry = mapping.resolve(identifier)
        if entry is None:
            log.warning("Skipping unresolved schema identifier %r", identifier)
            out.skipped.append(SkippedInput(str(identifier), "unresolved"))
            continue

        number = finite_or_none(value)
        if number is None:
            log.warning("Skipping malformed score for %r: %r", identifier, value)
            out.skipped.append(SkippedInput(str(identifier), "malformed"))
            continue

        score = _to_score(entry.clinical_id, number, scale)
        if score is None:
            log.warning("Skipping out-of-range %s score for %r: %r", scale, identifier, value)
            out.skipped.append(SkippedInput(str(identifier), "out_of_range"))
            continue

        previous = chosen.get(entry.clinical_id)
        if previous is not None:
            out.skipped.append(SkippedInput(previous[0], "duplicate"))
        chosen[entry.clinical_id] = (str(identifier), score)

    out.scores = [score for _, score in chosen.values()]
    return out


def average_item_responses(
    responses: Mapping[str, Any], mapping: SchemaMapping
) -> Dict[str, float]:
    """
    Average item-level answers per schema.

    Item IDs look like "1.1.R1": the first two segments are the variable ID.
    Non-numeric answers and unknown variable IDs are skipped.
    """
    buckets: Dict[str, List[float]] = {}
    mapped = skipped = 0

    for item_id, value in (responses or {}).items():
        variable_id = ".".join(str(item_id).split(".")[:2])
        clinical_id = mapping.variable_to_clinical_id(variable_id)
        number = finite_or_none(value)
        if clinical_id is None or number is None:
            skipped += 1
            continue
        buckets.setdefault(clinical_id, []).append(number)
        mapped += 1

    if skipped:
        log.warning("Item averaging: %d mapped, %d skipped", mapped, skipped)

    return {cid: sum(vals) / len(vals) for cid, vals in buckets.items()}


def item_scores(
    responses: Mapping[str, Any],
    mapping: SchemaMapping,
    instrument: str = DEFAULT_INSTRUMENT,
) -> ResolvedScores:
    """Item-level answers -> per-schema averages -> T via the instrument table."""
    averages = average_item_responses(responses, mapping)
    return ResolvedScores(
        scores=[SchemaScore.from_t_score(cid, raw_to_t(avg, instrument)) for cid, avg in averages.items()],
    )

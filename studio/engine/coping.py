# studio/engine/coping.py
"""
Coping-style breakdown.

Each mode belongs to one coping strategy. A bucket's raw total is the sum,
over every mode in the bucket and every schema that mode links, of that
schema's z-score. The unit of weight is the linkage: a schema linked by two
surrender modes counts twice toward S. The three totals are turned into
probabilities with a max-shifted softmax.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Union

import numpy as np

from .modes import CopingStrategy, Mode
from .scores import SchemaScore, finite_or_none

log = logging.getLogger(__name__)


class CopingStyle(str, enum.Enum):
    S = "S"  # surrender
    A = "A"  # avoidance
    O = "O"  # overcompensation

    @property
    def label(self) -> str:
        return STYLE_LABELS[self]


STYLE_LABELS = {
    CopingStyle.S: "Surrender",
    CopingStyle.A: "Avoidance",
    CopingStyle.O: "Overcompensation",
}

# Declaration order doubles as the tie-break for the dominant style.
BUCKET_PRIORITY = (CopingStyle.S, CopingStyle.A, CopingStyle.O)

STRATEGY_TO_STYLE = {
    CopingStrategy.SURRENDER: CopingStyle.S,
    CopingStrategy.AVOIDANCE: CopingStyle.A,
    CopingStrategy.OVERCOMPENSATION: CopingStyle.O,
}

MIN_TEMPERATURE = 0.1
# floor for each probability; keeps every style strictly inside (0, 1)
EPS = 1e-12


@dataclass(frozen=True)
class Linkage:
    mode_id: str
    schema_id: str
    z_score: float


@dataclass
class CopingAggregate:
    raw: Dict[CopingStyle, float]
    probabilities: Dict[CopingStyle, float]
    dominant: CopingStyle
    entropy: float
    degenerate: bool = False
    contributions: Dict[CopingStyle, List[Linkage]] = field(default_factory=dict)

    @property
    def cS(self) -> float:
        return self.probabilities[CopingStyle.S]

    @property
    def cA(self) -> float:
        return self.probabilities[CopingStyle.A]

    @property
    def cO(self) -> float:
        return self.probabilities[CopingStyle.O]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "raw": {k.value: self.raw[k] for k in BUCKET_PRIORITY},
            "probabilities": {f"c{k.value}": self.probabilities[k] for k in BUCKET_PRIORITY},
            "dominant": self.dominant.value,
            "dominant_label": self.dominant.label,
            "entropy": self.entropy,
            "degenerate": self.degenerate,
            "contributions": {
                k.value: [
                    {"mode_id": l.mode_id, "schema_id": l.schema_id, "z_score": l.z_score}
                    for l in self.contributions.get(k, [])
                ]
                for k in BUCKET_PRIORITY
            },
        }


def softmax(values: Iterable[float], temperature: float = 1.0) -> np.ndarray:
    """Max-shifted softmax. Shift invariance keeps the result identical."""
    t = max(MIN_TEMPERATURE, float(temperature))
    scaled = np.asarray(list(values), dtype=float) / t
    exps = np.exp(scaled - scaled.max())
    return exps / exps.sum()


def entropy(probabilities: Iterable[float]) -> float:
    """Shannon entropy in nats."""
    return float(-sum(p * math.log(p) for p in probabilities if p > 0))


def dominant_style(probabilities: Mapping[CopingStyle, float]) -> CopingStyle:
    """argmax with ties going to the earlier bucket in BUCKET_PRIORITY."""
    best = BUCKET_PRIORITY[0]
    for style in BUCKET_PRIORITY[1:]:
        if probabilities[style] > probabilities[best]:
            best = style
    return best


def coping_from_raw(
    raw: Mapping[CopingStyle | str, float],
    temperature: float = 1.0,
    contributions: Dict[CopingStyle, List[Linkage]] | None = None,
) -> CopingAggregate:
    """
    Probabilities for three raw bucket totals. Missing buckets are neutral (0).

    NaN or +inf totals (or all totals at -inf) never reach softmax: the
    result falls back to the uniform distribution and is flagged
    degenerate. A -inf bucket alongside usable ones gets probability 0.
    With finite totals every probability is floored at EPS.
    """
    totals = {style: float(raw.get(style, raw.get(style.value, 0.0))) for style in BUCKET_PRIORITY}
    values = [totals[s] for s in BUCKET_PRIORITY]
    t = max(MIN_TEMPERATURE, float(temperature))
    scaled = [v / t for v in values]

    degenerate = (
        any(math.isnan(v) or v == math.inf for v in scaled)
        or all(v == -math.inf for v in scaled)
    )
    if degenerate:
        log.warning("Non-finite coping totals %s; using uniform distribution", values)
        ps = [1.0 / len(BUCKET_PRIORITY)] * len(BUCKET_PRIORITY)
    else:
        arr = softmax(values, temperature)
        if all(math.isfinite(v) for v in scaled):
            arr = np.clip(arr, EPS, 1.0)
            arr = arr / arr.sum()
        ps = [float(p) for p in arr]

    probabilities = dict(zip(BUCKET_PRIORITY, ps))
    return CopingAggregate(
        raw=totals,
        probabilities=probabilities,
        dominant=dominant_style(probabilities),
        entropy=entropy(ps),
        degenerate=degenerate,
        contributions=contributions or {s: [] for s in BUCKET_PRIORITY},
    )


def _z_lookup(scores: Union[Iterable[SchemaScore], Mapping[str, Any]]) -> Dict[str, float]:
    items = scores.items() if isinstance(scores, Mapping) else ((s.schema_id, s.z_score) for s in scores)
    lookup: Dict[str, float] = {}
    for schema_id, value in items:
        z = finite_or_none(value)
        if z is None:
            # one bad score must not sink the whole breakdown
            log.warning("Malformed z-score for %s (%r); contributing 0", schema_id, value)
            z = 0.0
        lookup[schema_id] = z
    return lookup


def aggregate_coping(
    scores: Union[Iterable[SchemaScore], Mapping[str, Any]],
    modes: Iterable[Mode],
    temperature: float = 1.0,
) -> CopingAggregate:
    z = _z_lookup(scores)

    raw = {style: 0.0 for style in BUCKET_PRIORITY}
    contributions: Dict[CopingStyle, List[Linkage]] = {style: [] for style in BUCKET_PRIORITY}

    for mode in modes:
        style = STRATEGY_TO_STYLE[mode.coping_strategy]
        for schema_id in mode.linked_schemas:
            value = z.get(schema_id)
            if value is None:
                continue
            raw[style] += value
            contributions[style].append(Linkage(mode.id, schema_id, value))

    return coping_from_raw(raw, temperature=temperature, contributions=contributions)

import math

import pytest

from studio.engine.coping import (
    BUCKET_PRIORITY,
    CopingStyle,
    aggregate_coping,
    coping_from_raw,
    dominant_style,
    softmax,
)
from studio.engine.modes import Mode
from studio.engine.scores import SchemaScore


def _mode(mode_id: str, strategy: str, *schemas: str) -> Mode:
    return Mode(id=mode_id, name=mode_id.title(), linkedSchemas=list(schemas), copingStrategy=strategy)


def _probs(agg) -> list[float]:
    return [agg.cS, agg.cA, agg.cO]


# -------------------------
# SOFTMAX PROPERTIES
# -------------------------
@pytest.mark.parametrize(
    "raw",
    [
        {"S": 0, "A": 0, "O": 0},
        {"S": 2.5, "A": -1.0, "O": 0.3},
        {"S": -40, "A": 12, "O": 700},
        {"S": 1e-9, "A": 3.14, "O": -3.14},
    ],
)
def test_probabilities_sum_to_one(raw):
    agg = coping_from_raw(raw)
    assert abs(sum(_probs(agg)) - 1.0) < 1e-9
    assert all(0.0 <= p <= 1.0 for p in _probs(agg))


def test_probabilities_strictly_inside_unit_interval_for_moderate_totals():
    agg = coping_from_raw({"S": 3, "A": -2, "O": 0.5})
    assert all(0.0 < p < 1.0 for p in _probs(agg))


def test_softmax_shift_invariance():
    a = coping_from_raw({"S": 2, "A": 1, "O": 0})
    b = coping_from_raw({"S": 102, "A": 101, "O": 100})
    for pa, pb in zip(_probs(a), _probs(b)):
        assert pa == pytest.approx(pb, abs=1e-12)


def test_softmax_matches_closed_form():
    ps = softmax([2.0, 1.0, 0.0])
    denom = math.exp(2) + math.exp(1) + 1.0
    assert ps[0] == pytest.approx(math.exp(2) / denom)
    assert ps[2] == pytest.approx(1.0 / denom)


def test_large_totals_do_not_overflow():
    agg = coping_from_raw({"S": 1000.0, "A": 999.0, "O": -1000.0})
    assert not agg.degenerate
    assert all(math.isfinite(p) for p in _probs(agg))
    assert agg.dominant == CopingStyle.S


def test_temperature_flattens_distribution():
    sharp = coping_from_raw({"S": 2, "A": 0, "O": 0})
    flat = coping_from_raw({"S": 2, "A": 0, "O": 0}, temperature=4.0)
    assert flat.cS < sharp.cS
    assert flat.entropy > sharp.entropy


# -------------------------
# TIE-BREAK
# -------------------------
def test_equal_totals_pick_surrender_every_time():
    for _ in range(20):
        agg = coping_from_raw({"S": 5, "A": 5, "O": 5})
        assert agg.dominant == CopingStyle.S
        assert agg.cS == agg.cA == agg.cO


def test_tie_between_later_buckets_goes_to_avoidance():
    assert dominant_style({CopingStyle.S: 0.2, CopingStyle.A: 0.4, CopingStyle.O: 0.4}) == CopingStyle.A


def test_bucket_priority_order():
    assert BUCKET_PRIORITY == (CopingStyle.S, CopingStyle.A, CopingStyle.O)


# -------------------------
# AGGREGATION
# -------------------------
def test_end_to_end_linkage_example():
    scores = [
        SchemaScore("abandonment_instability", 2.1),
        SchemaScore("defectiveness_shame", -0.5),
    ]
    modes = [
        _mode("detached_self_soother", "avoidance", "abandonment_instability"),
        _mode("compliant_surrenderer", "surrender", "abandonment_instability"),
        _mode("self_aggrandizer", "overcompensation", "defectiveness_shame"),
    ]
    agg = aggregate_coping(scores, modes)

    assert agg.raw[CopingStyle.S] == pytest.approx(2.1)
    assert agg.raw[CopingStyle.A] == pytest.approx(2.1)
    assert agg.raw[CopingStyle.O] == pytest.approx(-0.5)
    assert agg.cS == agg.cA
    assert agg.cS > agg.cO
    assert agg.dominant == CopingStyle.S
    assert abs(sum(_probs(agg)) - 1.0) < 1e-9


def test_schema_counts_once_per_linking_mode():
    scores = [SchemaScore("subjugation", 1.5)]
    modes = [
        _mode("compliant_surrenderer", "surrender", "subjugation"),
        _mode("helpless_surrenderer", "surrender", "subjugation"),
    ]
    agg = aggregate_coping(scores, modes)
    assert agg.raw[CopingStyle.S] == pytest.approx(3.0)
    assert len(agg.contributions[CopingStyle.S]) == 2


def test_empty_bucket_is_neutral():
    agg = aggregate_coping([SchemaScore("failure", 1.0)], [_mode("m1", "surrender", "failure")])
    assert agg.raw[CopingStyle.A] == 0.0
    assert agg.raw[CopingStyle.O] == 0.0
    assert agg.cA == pytest.approx(agg.cO)
    assert agg.dominant == CopingStyle.S


def test_missing_scores_contribute_zero():
    agg = aggregate_coping([], [_mode("m1", "avoidance", "failure", "punitiveness")])
    assert agg.raw == {CopingStyle.S: 0.0, CopingStyle.A: 0.0, CopingStyle.O: 0.0}
    assert agg.cS == pytest.approx(1 / 3)


def test_no_modes_gives_uniform_distribution():
    agg = aggregate_coping([SchemaScore("failure", 2.0)], [])
    assert _probs(agg) == pytest.approx([1 / 3] * 3)
    assert agg.dominant == CopingStyle.S


def test_accepts_plain_mapping_of_scores():
    agg = aggregate_coping({"failure": 1.0}, [_mode("m1", "overcompensation", "failure")])
    assert agg.raw[CopingStyle.O] == 1.0


# -------------------------
# MALFORMED / NON-FINITE INPUT
# -------------------------
@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf"), "high", None, True])
def test_malformed_score_contributes_zero(bad):
    modes = [
        _mode("m1", "surrender", "failure"),
        _mode("m2", "avoidance", "punitiveness"),
    ]
    agg = aggregate_coping({"failure": bad, "punitiveness": 1.0}, modes)
    assert agg.raw[CopingStyle.S] == 0.0
    assert agg.raw[CopingStyle.A] == 1.0
    assert not any(math.isnan(p) for p in _probs(agg))
    assert abs(sum(_probs(agg)) - 1.0) < 1e-9


def test_nan_schema_score_object_does_not_leak_nan():
    agg = aggregate_coping([SchemaScore("failure", float("nan"))], [_mode("m1", "surrender", "failure")])
    assert not any(math.isnan(p) for p in _probs(agg))


def test_non_finite_raw_totals_fall_back_to_uniform():
    agg = coping_from_raw({"S": float("nan"), "A": float("inf"), "O": float("-inf")})
    assert agg.degenerate
    assert _probs(agg) == pytest.approx([1 / 3] * 3)
    assert agg.dominant == CopingStyle.S


def test_overflowing_sum_is_degenerate_not_nan():
    modes = [
        _mode("m1", "surrender", "failure"),
        _mode("m2", "surrender", "failure"),
    ]
    agg = aggregate_coping({"failure": 1e308}, modes)
    assert agg.degenerate
    assert not any(math.isnan(p) for p in _probs(agg))


def test_as_dict_is_plain_data():
    agg = coping_from_raw({"S": 1, "A": 0, "O": 0})
    out = agg.as_dict()
    assert set(out["raw"]) == {"S", "A", "O"}
    assert set(out["probabilities"]) == {"cS", "cA", "cO"}
    assert out["dominant"] == "S"
    assert out["dominant_label"] == "Surrender"


def test_negative_infinity_bucket_keeps_a_real_softmax():
    agg = coping_from_raw({"S": float("-inf"), "A": 1.0, "O": 2.0})
    assert not agg.degenerate
    assert agg.cS == 0.0
    denom = math.e + math.e ** 2
    assert agg.cA == pytest.approx(math.e / denom)
    assert agg.cO == pytest.approx(math.e ** 2 / denom)
    assert agg.dominant == CopingStyle.O


def test_all_negative_infinity_is_degenerate():
    agg = coping_from_raw({"S": float("-inf"), "A": float("-inf"), "O": float("-inf")})
    assert agg.degenerate
    assert _probs(agg) == pytest.approx([1 / 3] * 3)


def test_far_apart_finite_totals_stay_strictly_inside_unit_interval():
    agg = coping_from_raw({"S": 800.0, "A": 0.0, "O": 0.0})
    assert not agg.degenerate
    assert all(0.0 < p < 1.0 for p in _probs(agg))
    assert agg.dominant == CopingStyle.S
    assert abs(sum(_probs(agg)) - 1.0) < 1e-9

import json
import threading
import time

import pytest

from studio.engine.modes import CopingStrategy
from studio.reference import (
    DATA_DIR,
    MAPPING_FILE,
    MODES_FILE,
    ReferenceData,
    ReferenceDataError,
    ReferenceStore,
    load_mode_library,
    load_reference_data,
    load_schema_mapping,
)


def _copy_mapping(tmp_path):
    (tmp_path / MAPPING_FILE).write_text((DATA_DIR / MAPPING_FILE).read_text(encoding="utf-8"), encoding="utf-8")


def test_load_bundled_reference():
    ref = load_reference_data()
    assert len(ref.mapping) == 18
    assert ref.modes is not None
    assert len(ref.modes) > 0
    summary = ref.summary()
    assert summary["schema_count"] == 18
    assert summary["thresholds_version"] == ref.thresholds.version


def test_mode_links_all_resolve_to_canonical_ids():
    ref = load_reference_data()
    for mode in ref.modes:
        for schema_id in mode.linked_schemas:
            assert schema_id in ref.mapping


def test_mode_library_accessors():
    modes = load_reference_data().modes
    assert modes.get("detached_protector").coping_strategy == CopingStrategy.AVOIDANCE
    assert modes.get("nope") is None
    assert {m.id for m in modes.by_schema("mistrust_abuse")} >= {"detached_protector", "bully_attack"}
    assert all(m.category == "detachment" for m in modes.by_category("detachment"))
    assert modes.categories()[0] == "compliance"
    assert {m.coping_strategy for m in modes.by_strategy("surrender")} == {CopingStrategy.SURRENDER}
    assert modes.version


def test_missing_mode_library_is_not_fatal(tmp_path):
    _copy_mapping(tmp_path)
    ref = load_reference_data(tmp_path)
    assert ref.modes is None
    assert ref.summary()["mode_count"] == 0


def test_missing_mapping_is_fatal(tmp_path):
    with pytest.raises(ReferenceDataError):
        load_reference_data(tmp_path)


def test_corrupt_mapping_fails_fast(tmp_path):
    rows = json.loads((DATA_DIR / MAPPING_FILE).read_text(encoding="utf-8"))
    del rows[0]["clinical_id"]
    path = tmp_path / MAPPING_FILE
    path.write_text(json.dumps(rows), encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_schema_mapping(path)


def test_duplicate_mapping_entry_fails_fast(tmp_path):
    rows = json.loads((DATA_DIR / MAPPING_FILE).read_text(encoding="utf-8"))
    rows.append(dict(rows[0]))
    path = tmp_path / MAPPING_FILE
    path.write_text(json.dumps(rows), encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_schema_mapping(path)


def test_invalid_json_fails_fast(tmp_path):
    path = tmp_path / MAPPING_FILE
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_schema_mapping(path)


def test_unknown_coping_strategy_fails_fast(tmp_path):
    path = tmp_path / MODES_FILE
    path.write_text(json.dumps({"metadata": {}, "modes": [
        {"id": "m", "name": "M", "type": "coping", "linkedSchemas": ["failure"], "copingStrategy": "denial", "category": "x"}
    ]}), encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_mode_library(path)


def test_duplicate_mode_id_fails_fast(tmp_path):
    mode = {"id": "m", "name": "M", "linkedSchemas": [], "copingStrategy": "surrender"}
    path = tmp_path / MODES_FILE
    path.write_text(json.dumps({"modes": [mode, mode]}), encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_mode_library(path)


def test_mode_links_resolved_through_mapping(tmp_path):
    mapping = load_schema_mapping(DATA_DIR / MAPPING_FILE)
    path = tmp_path / MODES_FILE
    path.write_text(json.dumps({"modes": [
        {"id": "m", "name": "M", "linkedSchemas": ["1.1", "Failure", "outside_pack"], "copingStrategy": "Surrender"}
    ]}), encoding="utf-8")
    lib = load_mode_library(path, mapping)
    assert lib.get("m").linked_schemas == ("abandonment_instability", "failure", "outside_pack")


# -------------------------
# LOAD-ONCE STORE
# -------------------------
def test_store_loads_once_under_concurrent_first_calls():
    calls = []
    real = load_reference_data()

    def slow_loader(_data_dir):
        calls.append(1)
        time.sleep(0.05)
        return real

    store = ReferenceStore(loader=slow_loader)
    results = []
    threads = [threading.Thread(target=lambda: results.append(store.get())) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 16
    assert all(r is real for r in results)


def test_store_clear_forces_reload():
    calls = []

    def loader(_data_dir):
        calls.append(1)
        return ReferenceData(mapping=load_schema_mapping(DATA_DIR / MAPPING_FILE), modes=None)

    store = ReferenceStore(loader=loader)
    assert not store.loaded
    first = store.get()
    assert store.get() is first
    store.clear()
    assert not store.loaded
    assert store.get() is not first
    assert len(calls) == 2

# studio/reference.py
"""
Bundled reference tables: canonical schema mapping + mode library.

Both are build-time artifacts. A corrupt table is a deployment defect and
fails loudly at load; a missing mode library only disables the coping
breakdown.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import Request
from pydantic import ValidationError

from .engine.modes import Mode, ModeLibrary, ModeLibraryError
from .engine.schema_mapping import CanonicalSchemaEntry, SchemaMapping, SchemaMappingError
from .engine.thresholds import THRESHOLDS, ThresholdConfig
from .logging_config import log_event

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
MAPPING_FILE = "canonical_schema_mapping.json"
MODES_FILE = "modes.json"

log = logging.getLogger(__name__)


class ReferenceDataError(RuntimeError):
    pass


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ReferenceDataError(f"Invalid JSON in {path}: {e}") from e


def load_schema_mapping(path: Path) -> SchemaMapping:
    if not path.exists():
        raise ReferenceDataError(f"Schema mapping missing: {path}")

    data = _read_json(path)
    if not isinstance(data, list):
        raise ReferenceDataError(f"{path.name} must be a JSON array")

    try:
        entries = [CanonicalSchemaEntry.model_validate(row) for row in data]
        return SchemaMapping(entries)
    except (ValidationError, SchemaMappingError) as e:
        raise ReferenceDataError(f"Corrupt schema mapping {path.name}: {e}") from e


def _canonical_links(mode: Mode, mapping: SchemaMapping) -> Mode:
    linked = []
    for schema_id in mode.linked_schemas:
        entry = mapping.resolve(schema_id)
        if entry is None:
            log.warning("Mode %s links unknown schema %r", mode.id, schema_id)
            linked.append(schema_id)
        else:
            linked.append(entry.clinical_id)
    return mode.model_copy(update={"linked_schemas": tuple(linked)})


def load_mode_library(path: Path, mapping: Optional[SchemaMapping] = None) -> Optional[ModeLibrary]:
    if not path.exists():
        log.warning("Mode library not found at %s; coping breakdown disabled", path)
        return None

    data = _read_json(path)
    if not isinstance(data, dict) or not isinstance(data.get("modes"), list):
        raise ReferenceDataError(f"{path.name} must be an object with a 'modes' array")

    meta = data.get("metadata") or {}
    try:
        modes = [Mode.model_validate(row) for row in data["modes"]]
        if mapping is not None:
            modes = [_canonical_links(m, mapping) for m in modes]
        return ModeLibrary(
            modes,
            version=str(meta.get("version", "")),
            description=str(meta.get("description", "")),
            created_at=str(meta.get("createdAt", "")),
        )
    except (ValidationError, ModeLibraryError) as e:
        raise ReferenceDataError(f"Corrupt mode library {path.name}: {e}") from e


@dataclass(frozen=True)
class ReferenceData:
    """Everything the scoring core reads, built once and handed to consumers."""
    mapping: SchemaMapping
    modes: Optional[ModeLibrary]
    thresholds: ThresholdConfig = THRESHOLDS

    def summary(self) -> dict:
        return {
            "schema_count": len(self.mapping),
            "mode_count": len(self.modes) if self.modes is not None else 0,
            "mode_library_version": self.modes.version if self.modes is not None else None,
            "thresholds_version": self.thresholds.version,
        }


def load_reference_data(
    data_dir: Path | str | None = None, thresholds: ThresholdConfig = THRESHOLDS
) -> ReferenceData:
    base = Path(data_dir) if data_dir else DATA_DIR
    mapping = load_schema_mapping(base / MAPPING_FILE)
    modes = load_mode_library(base / MODES_FILE, mapping)
    ref = ReferenceData(mapping=mapping, modes=modes, thresholds=thresholds)
    log_event("REFERENCE_LOADED", f"Reference data loaded from {base}", ref.summary())
    return ref


class ReferenceStore:
    """
    Load-once holder for ReferenceData.

    Concurrent first callers block on the lock; only one of them parses the
    files. `clear()` is the development reload hook.
    """

    def __init__(
        self,
        data_dir: Path | str | None = None,
        loader: Callable[..., ReferenceData] = load_reference_data,
    ):
        self._data_dir = data_dir
        self._loader = loader
        self._lock = threading.Lock()
        self._ref: Optional[ReferenceData] = None

    @property
    def loaded(self) -> bool:
        return self._ref is not None

    def get(self) -> ReferenceData:
        ref = self._ref
        if ref is not None:
            return ref
        with self._lock:
            if self._ref is None:
                self._ref = self._loader(self._data_dir)
            return self._ref

    def clear(self) -> None:
        with self._lock:
            self._ref = None


def get_reference(request: Request) -> ReferenceData:
    return request.app.state.reference_store.get()

# studio/engine/schema_mapping.py
"""
Canonical schema identity.

Assessment files, the persona survey and the clinical library all name the
same eighteen schemas differently ("Abandonment", "1.1",
"abandonment_instability"). Every identifier is resolved through this table
before it is used as a key, so scores imported under any convention land on
one clinical ID.

A failed lookup returns None. Upstream sources may reference schemas outside
the active pack, so callers skip those inputs instead of failing.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SchemaMappingError(ValueError):
    """The mapping table breaks the one-entry-per-schema invariant."""


class CanonicalSchemaEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    section_id: int
    section_name_in_file: str = Field(..., min_length=1)
    domain_canonical: str = Field(..., min_length=1)
    domain_id: str = Field(..., min_length=1)
    variable_id: str = Field(..., min_length=1)
    leadership_persona: str = Field(..., min_length=1)
    healthy_persona: str = Field(..., min_length=1)
    clinical_label_in_file: str = Field(..., min_length=1)
    clinical_schema_canonical: str = Field(..., min_length=1)
    clinical_id: str = Field(..., min_length=1)
    leadership_id: str = Field(..., min_length=1)


@dataclass(frozen=True)
class LeadershipPersona:
    leadership_persona: str
    healthy_persona: str
    leadership_id: str


@dataclass(frozen=True)
class DomainInfo:
    domain_canonical: str
    domain_id: str
    section_id: int


def _fold(label: str) -> str:
    return label.strip().lower()


class SchemaMapping:
    """Read-only lookup table built once from the canonical entries."""

    def __init__(self, entries: Iterable[CanonicalSchemaEntry]):
        self._entries: tuple[CanonicalSchemaEntry, ...] = tuple(entries)
        self._by_clinical: Dict[str, CanonicalSchemaEntry] = {}
        self._by_variable: Dict[str, CanonicalSchemaEntry] = {}
        self._by_label: Dict[str, CanonicalSchemaEntry] = {}

        for entry in self._entries:
            if entry.clinical_id in self._by_clinical:
                raise SchemaMappingError(f"Duplicate clinical_id: {entry.clinical_id}")
            self._by_clinical[entry.clinical_id] = entry

            if entry.variable_id in self._by_variable:
                raise SchemaMappingError(f"Duplicate variable_id: {entry.variable_id}")
            self._by_variable[entry.variable_id] = entry

            # file label and canonical name may be identical for one entry,
            # but must never point at two different entries
            for label in {_fold(entry.clinical_label_in_file), _fold(entry.clinical_schema_canonical)}:
                other = self._by_label.get(label)
                if other is not None and other.clinical_id != entry.clinical_id:
                    raise SchemaMappingError(
                        f"Label '{label}' maps to both {other.clinical_id} and {entry.clinical_id}"
                    )
                self._by_label[label] = entry

    # ---------- primary lookups ----------
    def by_variable_id(self, variable_id: str) -> Optional[CanonicalSchemaEntry]:
        if not isinstance(variable_id, str):
            return None
        return self._by_variable.get(variable_id.strip())

    def by_clinical_id(self, clinical_id: str) -> Optional[CanonicalSchemaEntry]:
        if not isinstance(clinical_id, str):
            return None
        return self._by_clinical.get(clinical_id.strip())

    def by_label(self, label: str) -> Optional[CanonicalSchemaEntry]:
        """Case-insensitive match on the file label or the canonical clinical name."""
        if not isinstance(label, str):
            return None
        return self._by_label.get(_fold(label))

    def resolve(self, identifier: str) -> Optional[CanonicalSchemaEntry]:
        """Any identifier kind: clinical ID, variable ID, or label."""
        if not isinstance(identifier, str) or not identifier.strip():
            return None
        return (
            self.by_clinical_id(identifier)
            or self.by_clinical_id(_fold(identifier))
            or self.by_variable_id(identifier)
            or self.by_label(identifier)
        )

    # ---------- derived accessors ----------
    def variable_to_clinical_id(self, variable_id: str) -> Optional[str]:
        entry = self.by_variable_id(variable_id)
        return entry.clinical_id if entry else None

    def label_to_clinical_id(self, label: str) -> Optional[str]:
        entry = self.by_label(label)
        return entry.clinical_id if entry else None

    def leadership_persona(self, clinical_id: str) -> Optional[LeadershipPersona]:
        entry = self.by_clinical_id(clinical_id)
        if not entry:
            return None
        return LeadershipPersona(
            leadership_persona=entry.leadership_persona,
            healthy_persona=entry.healthy_persona,
            leadership_id=entry.leadership_id,
        )

    def domain_info(self, clinical_id: str) -> Optional[DomainInfo]:
        entry = self.by_clinical_id(clinical_id)
        if not entry:
            return None
        return DomainInfo(
            domain_canonical=entry.domain_canonical,
            domain_id=entry.domain_id,
            section_id=entry.section_id,
        )

    def by_domain(self) -> Dict[str, List[CanonicalSchemaEntry]]:
        domains: Dict[str, List[CanonicalSchemaEntry]] = {}
        for entry in self._entries:
            domains.setdefault(entry.domain_id, []).append(entry)
        return domains

    def variable_to_clinical(self) -> Dict[str, str]:
        return {e.variable_id: e.clinical_id for e in self._entries}

    def is_valid_clinical_id(self, clinical_id: str) -> bool:
        return self.by_clinical_id(clinical_id) is not None

    def clinical_ids(self) -> List[str]:
        return [e.clinical_id for e in self._entries]

    def __contains__(self, clinical_id: object) -> bool:
        return isinstance(clinical_id, str) and self.is_valid_clinical_id(clinical_id)

    def __iter__(self) -> Iterator[CanonicalSchemaEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

# studio/engine/modes.py
from __future__ import annotations

import enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CopingStrategy(str, enum.Enum):
    SURRENDER = "surrender"
    AVOIDANCE = "avoidance"
    OVERCOMPENSATION = "overcompensation"


class ModeLibraryError(ValueError):
    pass


class Mode(BaseModel):
    """A coping mode and the schemas it expresses. Field aliases follow modes.json."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: str = "coping"
    linked_schemas: Tuple[str, ...] = Field(default=(), alias="linkedSchemas")
    coping_strategy: CopingStrategy = Field(..., alias="copingStrategy")
    category: str = ""
    is_adaptive: bool = Field(False, alias="isAdaptive")

    @field_validator("coping_strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("linked_schemas", mode="before")
    @classmethod
    def _strip_ids(cls, v):
        if v is None:
            return ()
        return tuple(str(s).strip() for s in v if str(s).strip())


class ModeLibrary:
    """Immutable mode table, built once and shared by every request."""

    def __init__(
        self,
        modes: Iterable[Mode],
        version: str = "",
        description: str = "",
        created_at: str = "",
    ):
        self.version = version
        self.description = description
        self.created_at = created_at
        self._modes: tuple[Mode, ...] = tuple(modes)
        self._by_id: Dict[str, Mode] = {}
        for mode in self._modes:
            if mode.id in self._by_id:
                raise ModeLibraryError(f"Duplicate mode id: {mode.id}")
            self._by_id[mode.id] = mode

    def get(self, mode_id: str) -> Optional[Mode]:
        return self._by_id.get(mode_id)

    def all(self) -> List[Mode]:
        return list(self._modes)

    def by_category(self, category: str) -> List[Mode]:
        return [m for m in self._modes if m.category == category]

    def by_schema(self, schema_id: str) -> List[Mode]:
        return [m for m in self._modes if schema_id in m.linked_schemas]

    def by_strategy(self, strategy: CopingStrategy | str) -> List[Mode]:
        strategy = CopingStrategy(strategy)
        return [m for m in self._modes if m.coping_strategy == strategy]

    def categories(self) -> List[str]:
        seen: Dict[str, None] = {}
        for m in self._modes:
            seen.setdefault(m.category, None)
        return list(seen)

    def __iter__(self) -> Iterator[Mode]:
        return iter(self._modes)

    def __len__(self) -> int:
        return len(self._modes)

# studio/models.py
from __future__ import annotations

import enum
import uuid
import json

from sqlalchemy import (
    Column,
    String,
    Enum as SAEnum,
    DateTime,
)
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator, TEXT

from .db import Base


# -------------------------
# SQLite-safe JSON columns
# -------------------------
class JsonList(TypeDecorator):
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "[]"
        if isinstance(value, list):
            return json.dumps(value, ensure_ascii=False)
        return "[]"

    def process_result_value(self, value, dialect):
        if not value:
            return []
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, list) else []
        except ValueError:
            return []


class JsonDict(TypeDecorator):
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "{}"
        if isinstance(value, dict):
            return json.dumps(value, ensure_ascii=False)
        return "{}"

    def process_result_value(self, value, dialect):
        if not value:
            return {}
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, dict) else {}
        except ValueError:
            return {}


class SourceEnum(str, enum.Enum):
    WEB = "WEB"
    IMPORT = "IMPORT"
    API = "API"


def _uuid() -> str:
    return str(uuid.uuid4())


class Assessment(Base):
    """
    Immutable assessment snapshot: canonical z-scores only.

    Tiers, display policies and the coping breakdown are never stored; they
    are recomputed from `scores` on every read.
    """
    __tablename__ = "assessments"

    id = Column(String, primary_key=True, default=_uuid)

    client_ref = Column(String, nullable=False, index=True)
    source = Column(SAEnum(SourceEnum), nullable=False, default=SourceEnum.WEB)

    # {clinical_id: z_score}
    scores = Column(JsonDict, default=dict, nullable=False)
    # [{"identifier": ..., "reason": ...}] from import
    skipped = Column(JsonList, default=list, nullable=False)

    # Provenance
    app_version = Column(String, nullable=True)
    reference_version = Column(String, nullable=True)
    schema_version = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

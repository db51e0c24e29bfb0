"""SQLAlchemy models for the audit system."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JSONType(TypeDecorator):
    """Platform-independent JSON type.

    Uses JSONB for PostgreSQL and JSON for other databases (like SQLite).
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class AuditEventModel(Base):
    """
    Audit events table model.

    One row per intake step. Details hold run metadata (kind, strategy,
    reasons, counts, provenance); documents themselves are never stored.
    """
    __tablename__ = "intake_audit_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_type = Column(String(50), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utc_now)
    document_id = Column(String(255), nullable=True)
    run_id = Column(Uuid, nullable=True)
    details = Column(JSONType)

    __table_args__ = (
        Index("idx_intake_audit_events_event_type", "event_type"),
        Index("idx_intake_audit_events_timestamp", "timestamp"),
        Index("idx_intake_audit_events_document_id", "document_id"),
        Index("idx_intake_audit_events_run_id", "run_id"),
    )

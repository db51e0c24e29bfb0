"""Audit logger implementation for the CDM Trade Intake System."""

import csv
import io
import json
import logging
import uuid
from collections import Counter
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, select

from ..interfaces.audit import AuditEvent, AuditEventType, IAuditLogger
from .database import DatabaseManager
from .models import AuditEventModel, utc_now

logger = logging.getLogger(__name__)


class AuditLogger(IAuditLogger):
    """
    Audit logger implementation with a SQLAlchemy backend.

    Records each step of an intake run (classification, extraction,
    repair, derivation, reporting) and supports querying and exporting
    the trail per document. Only run metadata is recorded.
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        database_url: Optional[str] = None,
    ):
        """
        Initialize the audit logger.

        Args:
            db_manager: Optional DatabaseManager instance. If not provided,
                       a new one will be created.
            database_url: Database URL for creating a new DatabaseManager.
        """
        if db_manager is not None:
            self._db_manager = db_manager
            self._owns_db_manager = False
        else:
            self._db_manager = DatabaseManager(database_url=database_url)
            self._owns_db_manager = True

    def _to_model(self, event: AuditEvent) -> AuditEventModel:
        """Convert AuditEvent dataclass to SQLAlchemy model."""
        return AuditEventModel(
            id=uuid.UUID(event.id) if isinstance(event.id, str) else event.id,
            event_type=event.event_type.value,
            timestamp=event.timestamp,
            document_id=event.document_id,
            run_id=uuid.UUID(event.run_id) if event.run_id else None,
            details=event.details or {},
        )

    def _from_model(self, model: AuditEventModel) -> AuditEvent:
        """Convert SQLAlchemy model to AuditEvent dataclass."""
        return AuditEvent(
            id=str(model.id),
            event_type=AuditEventType(model.event_type),
            timestamp=model.timestamp,
            document_id=model.document_id,
            run_id=str(model.run_id) if model.run_id else None,
            details=model.details or {},
        )

    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event to the database.

        Args:
            event: The audit event to record.
        """
        model = self._to_model(event)
        with self._db_manager.get_session() as session:
            session.add(model)
        logger.debug(f"Audit event {event.event_type.value} recorded for {event.document_id}")

    def get_events(
        self,
        document_id: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """
        Query audit events with optional filters.

        Args:
            document_id: Filter by document ID.
            event_type: Filter by event type.
            start_time: Filter events after this time.
            end_time: Filter events before this time.

        Returns:
            List of matching audit events, newest first.
        """
        with self._db_manager.get_session() as session:
            query = select(AuditEventModel)

            conditions = []
            if document_id:
                conditions.append(AuditEventModel.document_id == document_id)
            if event_type:
                conditions.append(AuditEventModel.event_type == event_type.value)
            if start_time:
                conditions.append(AuditEventModel.timestamp >= start_time)
            if end_time:
                conditions.append(AuditEventModel.timestamp <= end_time)

            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(AuditEventModel.timestamp.desc())

            result = session.execute(query)
            models = result.scalars().all()

            return [self._from_model(m) for m in models]

    def export_log(
        self,
        document_id: str,
        format: str = "json",
    ) -> str:
        """
        Export audit log for a document.

        Args:
            document_id: The document ID to export logs for.
            format: Export format ("json" or "csv").

        Returns:
            Exported log content as a string.

        Raises:
            ValueError: If format is not supported.
        """
        if format not in ("json", "csv"):
            raise ValueError(f"Unsupported export format: {format}. Use 'json' or 'csv'.")

        events = self.get_events(document_id=document_id)

        if format == "json":
            return self._export_json(document_id, events)
        else:
            return self._export_csv(events)

    def _export_json(self, document_id: str, events: List[AuditEvent]) -> str:
        """Export events to JSON with a per-type summary."""
        counts = Counter(e.event_type.value for e in events)
        data = {
            "export_timestamp": utc_now().isoformat(),
            "document_id": document_id,
            "event_count": len(events),
            "event_summary": dict(sorted(counts.items())),
            "events": [
                {
                    "id": e.id,
                    "event_type": e.event_type.value,
                    "timestamp": e.timestamp.isoformat() if e.timestamp else None,
                    "document_id": e.document_id,
                    "run_id": e.run_id,
                    "details": e.details,
                }
                for e in events
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _export_csv(self, events: List[AuditEvent]) -> str:
        """Export events to CSV format."""
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["id", "event_type", "timestamp", "document_id", "run_id", "details"])

        for e in events:
            writer.writerow([
                e.id,
                e.event_type.value,
                e.timestamp.isoformat() if e.timestamp else "",
                e.document_id or "",
                e.run_id or "",
                json.dumps(e.details, ensure_ascii=False, sort_keys=True),
            ])

        return output.getvalue()

    def close(self) -> None:
        """Close the audit logger and release resources."""
        if self._owns_db_manager:
            self._db_manager.close()

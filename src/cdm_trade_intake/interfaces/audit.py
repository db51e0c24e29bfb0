"""Audit logger interface for the CDM Trade Intake System."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AuditEventType(Enum):
    """Types of audit events tracked by the system."""
    DOCUMENT_CLASSIFIED = "document_classified"
    TRADE_EXTRACTED = "trade_extracted"
    EXTRACTION_FAILED = "extraction_failed"
    COUNTERPARTIES_REPAIRED = "counterparties_repaired"
    FIELDS_DERIVED = "fields_derived"
    REPORT_GENERATED = "report_generated"


@dataclass
class AuditEvent:
    """
    Audit event record.

    Represents a single auditable step of an intake run. Details carry
    run metadata only, never the input document itself.
    """
    id: str
    event_type: AuditEventType
    timestamp: datetime
    document_id: Optional[str] = None
    run_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}


class IAuditLogger(ABC):
    """
    Abstract interface for audit logging.

    Implementations of this interface handle recording and
    querying of audit events for traceability.
    """

    @abstractmethod
    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Args:
            event: The audit event to record.
        """
        pass

    @abstractmethod
    def get_events(
        self,
        document_id: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """
        Query audit events with optional filters.

        Returns:
            List of matching audit events, newest first.
        """
        pass

    @abstractmethod
    def export_log(self, document_id: str, format: str = "json") -> str:
        """
        Export audit log for a document.

        Args:
            document_id: The document ID to export logs for.
            format: Export format ("json" or "csv").

        Raises:
            ValueError: If format is not supported.
        """
        pass

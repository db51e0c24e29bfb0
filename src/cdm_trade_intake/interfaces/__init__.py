"""Abstract interfaces for the CDM Trade Intake System."""

from .extractor import IExtractionStrategy, ITradeExtractor
from .reporting import IReportingCollaborator, ReportingSideAssignment
from .audit import AuditEvent, AuditEventType, IAuditLogger

__all__ = [
    "IExtractionStrategy",
    "ITradeExtractor",
    "IReportingCollaborator",
    "ReportingSideAssignment",
    "AuditEvent",
    "AuditEventType",
    "IAuditLogger",
]

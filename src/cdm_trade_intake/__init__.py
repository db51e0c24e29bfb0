"""
CDM Trade Intake System

Classifies CDM trade documents by envelope shape, extracts a canonical
trade record, repairs counterparty linkage, derives secondary fields
with provenance, and produces diagnostic reports.
"""

__version__ = "0.1.0"

# Export main components
from .models.document import DocumentTree
from .models.enums import (
    CounterpartyRole,
    DocumentKind,
    ExecutionVenueType,
    Provenance,
    RepairStatus,
    Severity,
    StrategyName,
)
from .models.trade import CanonicalTradeRecord, Counterparty, Party, PartyIdentifier, TradeIdentifier
from .models.extraction import ExtractionFailure, ExtractionResult, ExtractionSuccess, StrategyRejection
from .models.derivation import DerivedField, DerivedFields
from .models.diagnostics import DiagnosticFinding, DiagnosticReport
from .parsers import DocumentLoader, RecordSerializer, StructuralError, DecodeError, ExtractionError
from .extractors import KindClassifier, TradeRecordExtractor, classify
from .repair import CounterpartyRepairer, RepairResult, repair_counterparty_linkage
from .derivation import FieldDeriver
from .diagnostics import DiagnosticReportBuilder, DiagnosticReportRenderer
from .interfaces.audit import AuditEvent, AuditEventType, IAuditLogger
from .interfaces.reporting import IReportingCollaborator, ReportingSideAssignment
from .audit import AuditLogger, DatabaseManager
from .config import ConfigurationManager, ConfigurationError, DerivationDefaults, ValidationResult
from .pipeline import PipelineConfig, PipelineResult, TradeIntakePipeline

__all__ = [
    "DocumentTree",
    "CounterpartyRole",
    "DocumentKind",
    "ExecutionVenueType",
    "Provenance",
    "RepairStatus",
    "Severity",
    "StrategyName",
    "CanonicalTradeRecord",
    "Counterparty",
    "Party",
    "PartyIdentifier",
    "TradeIdentifier",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
    "StrategyRejection",
    "DerivedField",
    "DerivedFields",
    "DiagnosticFinding",
    "DiagnosticReport",
    "DocumentLoader",
    "RecordSerializer",
    "StructuralError",
    "DecodeError",
    "ExtractionError",
    "KindClassifier",
    "TradeRecordExtractor",
    "classify",
    "CounterpartyRepairer",
    "RepairResult",
    "repair_counterparty_linkage",
    "FieldDeriver",
    "DiagnosticReportBuilder",
    "DiagnosticReportRenderer",
    "AuditEvent",
    "AuditEventType",
    "IAuditLogger",
    "AuditLogger",
    "DatabaseManager",
    "IReportingCollaborator",
    "ReportingSideAssignment",
    "ConfigurationManager",
    "ConfigurationError",
    "DerivationDefaults",
    "ValidationResult",
    "PipelineConfig",
    "PipelineResult",
    "TradeIntakePipeline",
]

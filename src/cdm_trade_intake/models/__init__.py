"""Data models and enums for the CDM Trade Intake System."""

from .enums import (
    CounterpartyRole,
    DocumentKind,
    ExecutionVenueType,
    Provenance,
    RepairStatus,
    Severity,
    StrategyName,
)
from .document import DocumentTree, format_path
from .trade import (
    CanonicalTradeRecord,
    Counterparty,
    Party,
    PartyIdentifier,
    TradeIdentifier,
)
from .extraction import (
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    StrategyRejection,
)
from .derivation import DerivedField, DerivedFields
from .diagnostics import DiagnosticFinding, DiagnosticReport

__all__ = [
    # Enums
    "CounterpartyRole",
    "DocumentKind",
    "ExecutionVenueType",
    "Provenance",
    "RepairStatus",
    "Severity",
    "StrategyName",
    # Document models
    "DocumentTree",
    "format_path",
    # Trade models
    "CanonicalTradeRecord",
    "Counterparty",
    "Party",
    "PartyIdentifier",
    "TradeIdentifier",
    # Extraction models
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
    "StrategyRejection",
    # Derivation models
    "DerivedField",
    "DerivedFields",
    # Diagnostic models
    "DiagnosticFinding",
    "DiagnosticReport",
]

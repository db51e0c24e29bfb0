"""Enumerations for the CDM Trade Intake System."""

from enum import Enum


class DocumentKind(Enum):
    """Top-level envelope shapes an input document can take."""
    TRADE_RECORD_WITH_STATE = "trade_record_with_state"
    BARE_TRADE_RECORD = "bare_trade_record"
    LIFECYCLE_EVENT_ENVELOPE = "lifecycle_event_envelope"  # reportable event
    LIFECYCLE_EVENT_STEP = "lifecycle_event_step"  # workflow step
    BUSINESS_EVENT_RECORD = "business_event_record"
    UNKNOWN = "unknown"


class StrategyName(Enum):
    """Extraction strategies, in chain order."""
    DIRECT = "direct"
    VIA_LIFECYCLE_STEP = "via_lifecycle_step"
    VIA_LIFECYCLE_ENVELOPE = "via_lifecycle_envelope"
    VIA_BUSINESS_EVENT = "via_business_event"
    VIA_BARE_TRADE = "via_bare_trade"


class CounterpartyRole(Enum):
    """Abstract counterparty roles, using the CDM role names."""
    PARTY_1 = "Party1"
    PARTY_2 = "Party2"


class Provenance(Enum):
    """Whether a derived value was read from the input or substituted by policy."""
    EXTRACTED = "extracted"
    DEFAULTED = "defaulted"


class Severity(Enum):
    """Severity of a diagnostic finding."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


class RepairStatus(Enum):
    """Outcome of the counterparty linkage repair."""
    ALREADY_LINKED = "already_linked"
    LINKED_TWO = "linked_two"
    LINKED_ONE = "linked_one"
    IMPOSSIBLE = "impossible"


class ExecutionVenueType(Enum):
    """Execution venue categories inferred from execution details."""
    SEF = "SEF"
    DCM = "DCM"
    OFF_FACILITY = "OFF_FACILITY"

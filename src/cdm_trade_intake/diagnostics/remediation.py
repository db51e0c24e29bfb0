"""Remediation advice keyed by document kind."""

from typing import Dict, List

from ..models.enums import DocumentKind

DEFAULT_REMEDIATION = "consider loading the document as a different envelope shape"

REMEDIATION_BY_KIND: Dict[DocumentKind, str] = {
    DocumentKind.TRADE_RECORD_WITH_STATE: "ensure field 'trade' is populated and structured correctly",
    DocumentKind.LIFECYCLE_EVENT_ENVELOPE: "navigate via the embedded step's business event to reach trade state",
    DocumentKind.LIFECYCLE_EVENT_STEP: "extract trade state from business event's after-states or instructions",
    DocumentKind.UNKNOWN: "verify the document matches a supported envelope shape",
}


def remediation_for(kind: DocumentKind) -> List[str]:
    """Fixed remediation text for a document kind."""
    return [REMEDIATION_BY_KIND.get(kind, DEFAULT_REMEDIATION)]

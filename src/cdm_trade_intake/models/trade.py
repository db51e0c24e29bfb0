"""Canonical trade record models for the CDM Trade Intake System."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Mapping, Optional

from .enums import CounterpartyRole


LEI_IDENTIFIER_TYPE = "LEI"
UTI_IDENTIFIER_TYPE = "UniqueTransactionIdentifier"


@dataclass
class TradeIdentifier:
    """
    Identifier assigned to a trade.

    Carries the identifier type (e.g. UniqueTransactionIdentifier),
    the first assigned identifier value, and the issuer if known.
    """
    identifier_type: Optional[str] = None
    assigned_value: Optional[str] = None
    issuer: Optional[str] = None


@dataclass
class PartyIdentifier:
    """Identifier-type / value pair attached to a party."""
    identifier_type: Optional[str] = None
    identifier_value: Optional[str] = None


@dataclass
class Party:
    """
    A party to the trade.

    The key is what counterparty links refer to. It comes from the
    party's external key, its global key, or a positional fallback.
    """
    key: str
    party_ids: List[PartyIdentifier] = field(default_factory=list)
    name: Optional[str] = None
    global_key: Optional[str] = None

    def __post_init__(self):
        if self.party_ids is None:
            self.party_ids = []

    @property
    def lei(self) -> Optional[str]:
        """First LEI-typed identifier value, if any."""
        for party_id in self.party_ids:
            if party_id.identifier_type == LEI_IDENTIFIER_TYPE and party_id.identifier_value:
                return party_id.identifier_value
        return None

    def is_referenced_by(self, reference: str) -> bool:
        """Check if a party reference points at this party."""
        return reference == self.key or (
            self.global_key is not None and reference == self.global_key
        )


@dataclass
class Counterparty:
    """Link between an abstract counterparty role and a concrete party."""
    role: Optional[CounterpartyRole] = None
    party_reference: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """Check if both role and party reference are set."""
        return self.role is not None and bool(self.party_reference)


@dataclass
class CanonicalTradeRecord:
    """
    Normalized trade representation all supported envelopes reduce to.

    If counterparty links are present, every link that carries a party
    reference must point at a party in the party list.
    """
    trade_identifiers: List[TradeIdentifier] = field(default_factory=list)
    parties: List[Party] = field(default_factory=list)
    counterparties: Optional[List[Counterparty]] = None
    product: Optional[Mapping[str, Any]] = None
    trade_date: Optional[date] = None
    executions: List[Mapping[str, Any]] = field(default_factory=list)
    state: Optional[Mapping[str, Any]] = None

    def __post_init__(self):
        if self.trade_identifiers is None:
            self.trade_identifiers = []
        if self.parties is None:
            self.parties = []
        if self.executions is None:
            self.executions = []
        for link in self.counterparties or []:
            if link.party_reference and self.find_party(link.party_reference) is None:
                raise ValueError(
                    f"Counterparty link {link.role} references unknown party "
                    f"'{link.party_reference}'"
                )

    def find_party(self, reference: str) -> Optional[Party]:
        """Resolve a party reference against the party list."""
        for party in self.parties:
            if party.is_referenced_by(reference):
                return party
        return None

    @property
    def has_counterparty_linkage(self) -> bool:
        """Check if at least one complete counterparty link exists."""
        return any(link.is_complete for link in self.counterparties or [])

    @property
    def has_uti(self) -> bool:
        """Check if any trade identifier is a unique transaction identifier."""
        return any(
            identifier.identifier_type == UTI_IDENTIFIER_TYPE
            for identifier in self.trade_identifiers
        )

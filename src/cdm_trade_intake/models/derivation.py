"""Derived field models for the CDM Trade Intake System."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Generic, Iterator, Optional, TypeVar

from .enums import ExecutionVenueType, Provenance

T = TypeVar("T")


@dataclass(frozen=True)
class DerivedField(Generic[T]):
    """
    A derived value tagged with its provenance.

    Unpacks as (value, provenance). The source names the fallback step
    that produced the value.
    """
    value: Optional[T]
    provenance: Provenance
    source: str = ""

    @classmethod
    def extracted(cls, value: T, source: str) -> "DerivedField[T]":
        return cls(value=value, provenance=Provenance.EXTRACTED, source=source)

    @classmethod
    def defaulted(cls, value: Optional[T], source: str = "default") -> "DerivedField[T]":
        return cls(value=value, provenance=Provenance.DEFAULTED, source=source)

    @property
    def is_defaulted(self) -> bool:
        return self.provenance is Provenance.DEFAULTED

    @property
    def is_known(self) -> bool:
        """False for a defaulted-absent value; callers must not treat it as zero."""
        return self.value is not None

    def __iter__(self) -> Iterator[Any]:
        yield self.value
        yield self.provenance

    def to_dict(self) -> Dict[str, Any]:
        value = self.value
        if isinstance(value, (date, Decimal)):
            value = str(value)
        elif isinstance(value, ExecutionVenueType):
            value = value.value
        return {
            "value": value,
            "provenance": self.provenance.value,
            "source": self.source,
        }


@dataclass(frozen=True)
class DerivedFields:
    """Secondary fields derived from one canonical trade record."""
    currency: DerivedField[str]
    notional_amount: DerivedField[Decimal]
    event_date: DerivedField[date]
    reporting_lei: DerivedField[str]
    execution_venue: DerivedField[ExecutionVenueType]
    large_size_trade: DerivedField[bool]

    def as_dict(self) -> Dict[str, DerivedField]:
        """Derived fields keyed by name, in declaration order."""
        return {
            "currency": self.currency,
            "notional_amount": self.notional_amount,
            "event_date": self.event_date,
            "reporting_lei": self.reporting_lei,
            "execution_venue": self.execution_venue,
            "large_size_trade": self.large_size_trade,
        }

    def defaulted_names(self):
        """Names of the fields that fell back to a policy default."""
        return [name for name, derived in self.as_dict().items() if derived.is_defaulted]

    def to_dict(self) -> Dict[str, Any]:
        return {name: derived.to_dict() for name, derived in self.as_dict().items()}

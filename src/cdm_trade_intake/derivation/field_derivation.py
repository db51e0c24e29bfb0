"""
Field derivation with provenance-tagged fallback chains.

Each derived field has an ordered fallback table of (source, step)
pairs. The first step that yields a non-null value wins and the result
is tagged Extracted with that source; if no step yields a value, the
field's policy default is returned tagged Defaulted. Derivation never
raises for missing or oddly shaped data.
"""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional, Tuple

from ..config.models import DerivationDefaults
from ..models.derivation import DerivedField, DerivedFields
from ..models.enums import ExecutionVenueType
from ..models.trade import CanonicalTradeRecord

logger = logging.getLogger(__name__)

Step = Callable[[CanonicalTradeRecord], Any]

# Where economic terms sit under tradableProduct, by CDM generation.
ECONOMIC_TERMS_PATHS = (
    ("product", "contractualProduct", "economicTerms"),
    ("product", "economicTerms"),
    ("economicTerms",),
)

SEF_MARKERS = ("sef", "swap execution facility")
DCM_MARKERS = ("dcm", "designated contract market")


def dig(value: Any, *keys: Any) -> Any:
    """Follow mapping keys and list indexes; None if any step is missing."""
    for key in keys:
        if isinstance(key, int):
            if not isinstance(value, list) or len(value) <= key:
                return None
            value = value[key]
        else:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
        if value is None:
            return None
    return value


def unwrap(value: Any) -> Any:
    """Unwrap a CDM field-with-meta ({"value": ...})."""
    if isinstance(value, Mapping) and "value" in value:
        return value["value"]
    return value


def to_decimal(value: Any) -> Optional[Decimal]:
    value = unwrap(value)
    if value is None or isinstance(value, (bool, Mapping, list)):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def to_date(value: Any) -> Optional[date]:
    value = unwrap(value)
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def economic_terms(record: CanonicalTradeRecord) -> Optional[Mapping]:
    for path in ECONOMIC_TERMS_PATHS:
        terms = dig(record.product, *path)
        if isinstance(terms, Mapping):
            return terms
    return None


def first_payout_leg(record: CanonicalTradeRecord) -> Optional[Mapping]:
    """
    First payout leg of the product.

    Handles the keyed payout object (interestRatePayout first, then any
    other payout list) and the flat payout list where each entry wraps
    one payout type.
    """
    payout = dig(economic_terms(record), "payout")

    if isinstance(payout, Mapping):
        legs = payout.get("interestRatePayout")
        if not isinstance(legs, list) or not legs:
            legs = next(
                (v for v in payout.values() if isinstance(v, list) and v),
                None,
            )
        leg = legs[0] if legs else None
        return leg if isinstance(leg, Mapping) else None

    if isinstance(payout, list) and payout and isinstance(payout[0], Mapping):
        entry = payout[0]
        wrapped = [v for k, v in entry.items() if k.endswith("Payout") and isinstance(v, Mapping)]
        return wrapped[0] if wrapped else entry

    return None


def notional_object(record: CanonicalTradeRecord) -> Optional[Mapping]:
    """Notional of the first payout leg as a {amount|value, currency|unit} mapping."""
    leg = first_payout_leg(record)
    for path in (("notionalAmount",), ("priceQuantity", "quantitySchedule")):
        notional = dig(leg, *path)
        if isinstance(notional, Mapping):
            if isinstance(notional.get("value"), Mapping):
                notional = notional["value"]
            return notional
    return None


class FieldDeriver:
    """
    Derives secondary fields from a canonical trade record.

    Policy defaults come from DerivationDefaults; the clock supplies the
    processing date used when no event date can be extracted.
    """

    def __init__(
        self,
        defaults: Optional[DerivationDefaults] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.defaults = defaults or DerivationDefaults()
        self._clock = clock

        self.currency_chain: List[Tuple[str, Step]] = [
            ("payout.notional.currency", self._notional_currency),
        ]
        self.notional_chain: List[Tuple[str, Step]] = [
            ("payout.notional.amount", self._notional_amount),
            ("payout.notionalSchedule.notionalStepSchedule[0]", self._notional_schedule_amount),
        ]
        self.event_date_chain: List[Tuple[str, Step]] = [
            ("tradeDate", lambda record: record.trade_date),
            ("execution[0].executionDateTime", self._execution_date),
            ("economicTerms.effectiveDate.adjustableDate.unadjustedDate", self._effective_date),
        ]
        self.reporting_lei_chain: List[Tuple[str, Step]] = [
            ("party.partyId[LEI]", self._first_lei),
        ]
        self.execution_venue_chain: List[Tuple[str, Step]] = [
            ("execution[0].executionVenue.name", self._venue_from_name),
            ("execution[0].executionType", self._venue_from_execution_type),
        ]

    # =========================================================================
    # Public derivations
    # =========================================================================

    def derive(self, record: CanonicalTradeRecord) -> DerivedFields:
        """Derive every secondary field of a record."""
        fields = DerivedFields(
            currency=self.derive_currency(record),
            notional_amount=self.derive_notional(record),
            event_date=self.derive_event_date(record),
            reporting_lei=self.derive_reporting_lei(record),
            execution_venue=self.derive_execution_venue(record),
            large_size_trade=self.derive_large_size_trade(record),
        )
        defaulted = fields.defaulted_names()
        if defaulted:
            logger.info(f"Defaulted derived fields: {', '.join(defaulted)}")
        return fields

    def derive_currency(self, record: CanonicalTradeRecord) -> DerivedField[str]:
        return self._run_chain(record, self.currency_chain) or DerivedField.defaulted(
            self.defaults.default_currency
        )

    def derive_notional(self, record: CanonicalTradeRecord) -> DerivedField[Decimal]:
        """Notional of the first payout leg; Defaulted-absent (None) when unknown."""
        return self._run_chain(record, self.notional_chain) or DerivedField.defaulted(None)

    def derive_event_date(self, record: CanonicalTradeRecord) -> DerivedField[date]:
        return self._run_chain(record, self.event_date_chain) or DerivedField.defaulted(
            self._clock(), source="processing date"
        )

    def derive_reporting_lei(self, record: CanonicalTradeRecord) -> DerivedField[str]:
        return self._run_chain(record, self.reporting_lei_chain) or DerivedField.defaulted(
            self.defaults.placeholder_lei
        )

    def derive_execution_venue(
        self, record: CanonicalTradeRecord
    ) -> DerivedField[ExecutionVenueType]:
        return self._run_chain(record, self.execution_venue_chain) or DerivedField.defaulted(
            ExecutionVenueType(self.defaults.default_execution_venue)
        )

    def derive_large_size_trade(self, record: CanonicalTradeRecord) -> DerivedField[bool]:
        """
        Compare the notional with the large-size threshold of its currency.

        An unknown notional yields Defaulted False.
        """
        notional = self.derive_notional(record)
        if not notional.is_known:
            return DerivedField.defaulted(False)

        currency = self.derive_currency(record).value
        threshold = self.defaults.threshold_for(currency)
        return DerivedField.extracted(
            notional.value >= threshold,
            source=f"{notional.source} >= {threshold} {currency}",
        )

    # =========================================================================
    # Chain evaluation
    # =========================================================================

    def _run_chain(
        self,
        record: CanonicalTradeRecord,
        chain: List[Tuple[str, Step]],
    ) -> Optional[DerivedField]:
        for source, step in chain:
            value = step(record)
            if value is not None:
                return DerivedField.extracted(value, source)
        return None

    # =========================================================================
    # Steps
    # =========================================================================

    def _notional_currency(self, record: CanonicalTradeRecord) -> Optional[str]:
        notional = notional_object(record)
        for path in (("currency",), ("unit", "currency")):
            currency = unwrap(dig(notional, *path))
            if isinstance(currency, str) and currency:
                return currency
        return None

    def _notional_amount(self, record: CanonicalTradeRecord) -> Optional[Decimal]:
        notional = notional_object(record)
        if notional is None:
            return None
        amount = to_decimal(notional.get("amount"))
        if amount is None:
            amount = to_decimal(notional.get("value"))
        return amount

    def _notional_schedule_amount(self, record: CanonicalTradeRecord) -> Optional[Decimal]:
        steps = dig(first_payout_leg(record), "notionalSchedule", "notionalStepSchedule")
        if isinstance(steps, list):
            return to_decimal(dig(steps, 0, "notionalAmount"))
        if isinstance(steps, Mapping):
            return to_decimal(steps.get("initialValue"))
        return None

    def _execution_date(self, record: CanonicalTradeRecord) -> Optional[date]:
        return to_date(dig(record.executions, 0, "executionDateTime"))

    def _effective_date(self, record: CanonicalTradeRecord) -> Optional[date]:
        return to_date(
            dig(economic_terms(record), "effectiveDate", "adjustableDate", "unadjustedDate")
        )

    def _first_lei(self, record: CanonicalTradeRecord) -> Optional[str]:
        for party in record.parties:
            if party.lei:
                return party.lei
        return None

    def _venue_from_name(self, record: CanonicalTradeRecord) -> Optional[ExecutionVenueType]:
        name = unwrap(dig(record.executions, 0, "executionVenue", "name"))
        if not isinstance(name, str):
            return None
        name = name.lower()
        if any(marker in name for marker in SEF_MARKERS):
            return ExecutionVenueType.SEF
        if any(marker in name for marker in DCM_MARKERS):
            return ExecutionVenueType.DCM
        return None

    def _venue_from_execution_type(
        self, record: CanonicalTradeRecord
    ) -> Optional[ExecutionVenueType]:
        execution_type = unwrap(dig(record.executions, 0, "executionType"))
        if isinstance(execution_type, str) and "electronic" in execution_type.lower():
            return ExecutionVenueType.SEF
        return None


_default_deriver = FieldDeriver()


def derive_fields(record: CanonicalTradeRecord) -> DerivedFields:
    """Derive every secondary field with the built-in defaults."""
    return _default_deriver.derive(record)

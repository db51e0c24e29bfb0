"""Unit tests for provenance-tagged field derivation."""

from datetime import date
from decimal import Decimal

import pytest

from cdm_trade_intake.config import DerivationDefaults
from cdm_trade_intake.derivation import FieldDeriver, derive_fields
from cdm_trade_intake.models.enums import ExecutionVenueType, Provenance
from cdm_trade_intake.models.trade import CanonicalTradeRecord, Party, PartyIdentifier

from tests.documents import make_product


PROCESSING_DATE = date(2024, 1, 2)


@pytest.fixture
def deriver():
    return FieldDeriver(clock=lambda: PROCESSING_DATE)


@pytest.fixture
def irs_record():
    """Record with an EUR 250m interest rate swap and two LEI parties."""
    return CanonicalTradeRecord(
        parties=[
            Party(key="bank", party_ids=[PartyIdentifier("BIC", "BANKGB2L")]),
            Party(key="fund", party_ids=[PartyIdentifier("LEI", "549300SZJ9VS8SGXAN81")]),
        ],
        product=make_product(),
        trade_date=date(2024, 3, 15),
    )


def flat_payout_product(notional):
    return {
        "economicTerms": {
            "payout": [
                {"interestRatePayout": {"priceQuantity": {"quantitySchedule": notional}}},
            ]
        }
    }


class TestCurrency:
    """Tests for the currency fallback chain."""

    def test_extracted_from_notional(self, deriver, irs_record):
        currency = deriver.derive_currency(irs_record)

        assert tuple(currency) == ("EUR", Provenance.EXTRACTED)
        assert currency.source == "payout.notional.currency"

    def test_defaulted_when_absent(self, deriver):
        """No product at all yields ("USD", Defaulted)."""
        assert tuple(deriver.derive_currency(CanonicalTradeRecord())) == (
            "USD", Provenance.DEFAULTED
        )

    def test_unit_currency_on_quantity_schedule(self, deriver):
        record = CanonicalTradeRecord(product=flat_payout_product(
            {"value": {"value": 5000000, "unit": {"currency": {"value": "GBP"}}}}
        ))
        assert tuple(deriver.derive_currency(record)) == ("GBP", Provenance.EXTRACTED)

    def test_configured_default(self):
        deriver = FieldDeriver(defaults=DerivationDefaults(default_currency="EUR"))
        assert deriver.derive_currency(CanonicalTradeRecord()).value == "EUR"


class TestNotional:
    """Tests for the notional fallback chain."""

    def test_extracted_from_first_leg(self, deriver, irs_record):
        notional = deriver.derive_notional(irs_record)

        assert tuple(notional) == (Decimal("250000000"), Provenance.EXTRACTED)

    def test_quantity_schedule_value(self, deriver):
        record = CanonicalTradeRecord(product=flat_payout_product(
            {"value": {"value": 5000000, "unit": {"currency": {"value": "GBP"}}}}
        ))
        assert deriver.derive_notional(record).value == Decimal("5000000")

    def test_notional_step_schedule(self, deriver):
        product = {"economicTerms": {"payout": {"interestRatePayout": [
            {"notionalSchedule": {"notionalStepSchedule": [{"notionalAmount": "7500000"}]}},
        ]}}}
        notional = deriver.derive_notional(CanonicalTradeRecord(product=product))

        assert notional.value == Decimal("7500000")
        assert notional.source == "payout.notionalSchedule.notionalStepSchedule[0]"

    def test_unknown_notional_is_defaulted_absent(self, deriver):
        """An unknown notional is never reported as zero."""
        notional = deriver.derive_notional(CanonicalTradeRecord())

        assert notional.value is None
        assert notional.provenance == Provenance.DEFAULTED
        assert not notional.is_known

    @pytest.mark.parametrize("product", [
        {"economicTerms": {"payout": "garbage"}},
        {"economicTerms": {"payout": {"interestRatePayout": "x"}}},
        {"economicTerms": {"payout": [1, 2]}},
        {"economicTerms": []},
        {"product": None},
    ])
    def test_oddly_shaped_products_do_not_raise(self, deriver, product):
        fields = deriver.derive(CanonicalTradeRecord(product=product))
        assert fields.notional_amount.is_defaulted


class TestEventDate:
    """Tests for the event date fallback chain."""

    def test_trade_date_first(self, deriver, irs_record):
        event_date = deriver.derive_event_date(irs_record)

        assert tuple(event_date) == (date(2024, 3, 15), Provenance.EXTRACTED)
        assert event_date.source == "tradeDate"

    def test_execution_date_time(self, deriver):
        record = CanonicalTradeRecord(executions=[{"executionDateTime": "2024-03-14T10:00:00Z"}])
        event_date = deriver.derive_event_date(record)

        assert event_date.value == date(2024, 3, 14)
        assert event_date.source == "execution[0].executionDateTime"

    def test_effective_date(self, deriver):
        event_date = deriver.derive_event_date(CanonicalTradeRecord(product=make_product()))

        assert event_date.value == date(2024, 3, 19)
        assert event_date.provenance == Provenance.EXTRACTED

    def test_processing_date_fallback(self, deriver):
        event_date = deriver.derive_event_date(CanonicalTradeRecord())

        assert tuple(event_date) == (PROCESSING_DATE, Provenance.DEFAULTED)
        assert event_date.source == "processing date"


class TestReportingLei:
    """Tests for the reporting LEI fallback chain."""

    def test_first_lei_among_parties(self, deriver, irs_record):
        lei = deriver.derive_reporting_lei(irs_record)
        assert tuple(lei) == ("549300SZJ9VS8SGXAN81", Provenance.EXTRACTED)

    def test_placeholder_when_no_lei(self, deriver):
        record = CanonicalTradeRecord(parties=[Party(key="a")])
        assert tuple(deriver.derive_reporting_lei(record)) == (
            "UNKNOWN-LEI-PLACEHOLDER", Provenance.DEFAULTED
        )


class TestExecutionVenue:
    """Tests for execution venue inference."""

    @pytest.mark.parametrize("execution,expected", [
        ({"executionVenue": {"name": "Example SEF"}}, ExecutionVenueType.SEF),
        ({"executionVenue": {"name": {"value": "Swap Execution Facility One"}}}, ExecutionVenueType.SEF),
        ({"executionVenue": {"name": "Example DCM"}}, ExecutionVenueType.DCM),
        ({"executionVenue": {"name": "A Designated Contract Market"}}, ExecutionVenueType.DCM),
        ({"executionType": {"value": "Electronic"}}, ExecutionVenueType.SEF),
    ])
    def test_inferred_venues(self, deriver, execution, expected):
        venue = deriver.derive_execution_venue(CanonicalTradeRecord(executions=[execution]))
        assert tuple(venue) == (expected, Provenance.EXTRACTED)

    def test_off_facility_default(self, deriver):
        record = CanonicalTradeRecord(executions=[{"executionType": "OffFacility"}])
        assert tuple(deriver.derive_execution_venue(record)) == (
            ExecutionVenueType.OFF_FACILITY, Provenance.DEFAULTED
        )


class TestLargeSizeTrade:
    """Tests for the large-size flag."""

    def test_above_currency_threshold(self, deriver, irs_record):
        flag = deriver.derive_large_size_trade(irs_record)
        assert tuple(flag) == (True, Provenance.EXTRACTED)

    def test_below_threshold(self, deriver):
        record = CanonicalTradeRecord(product=make_product(amount=50000000, currency="USD"))
        assert tuple(deriver.derive_large_size_trade(record)) == (False, Provenance.EXTRACTED)

    def test_threshold_depends_on_currency(self, deriver):
        """90m is large in GBP but not in USD."""
        gbp = CanonicalTradeRecord(product=make_product(amount=90000000, currency="GBP"))
        usd = CanonicalTradeRecord(product=make_product(amount=90000000, currency="USD"))

        assert deriver.derive_large_size_trade(gbp).value is True
        assert deriver.derive_large_size_trade(usd).value is False

    def test_unknown_notional_defaults_to_false(self, deriver):
        assert tuple(deriver.derive_large_size_trade(CanonicalTradeRecord())) == (
            False, Provenance.DEFAULTED
        )

    def test_configured_thresholds(self):
        defaults = DerivationDefaults(large_size_thresholds={"EUR": Decimal("300000000")})
        deriver = FieldDeriver(defaults=defaults)
        record = CanonicalTradeRecord(product=make_product())

        assert deriver.derive_large_size_trade(record).value is False


class TestDeriveAll:
    """Tests for deriving every field at once."""

    def test_derive(self, deriver, irs_record):
        fields = deriver.derive(irs_record)

        assert fields.defaulted_names() == ["execution_venue"]
        assert fields.to_dict()["notional_amount"] == {
            "value": "250000000",
            "provenance": "extracted",
            "source": "payout.notional.amount",
        }
        assert fields.to_dict()["execution_venue"]["value"] == "OFF_FACILITY"

    def test_empty_record_defaults_everything(self, deriver):
        fields = deriver.derive(CanonicalTradeRecord())
        assert fields.defaulted_names() == list(fields.as_dict())

    def test_module_level_function(self, irs_record):
        assert derive_fields(irs_record).currency.value == "EUR"

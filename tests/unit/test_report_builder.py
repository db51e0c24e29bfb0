"""Unit tests for diagnostic reports and their text rendering."""

import pytest

from cdm_trade_intake.derivation import FieldDeriver
from cdm_trade_intake.diagnostics import (
    DiagnosticReportBuilder,
    DiagnosticReportRenderer,
    build_report,
    remediation_for,
)
from cdm_trade_intake.extractors import KindClassifier, TradeRecordExtractor
from cdm_trade_intake.models.diagnostics import DiagnosticReport
from cdm_trade_intake.models.enums import DocumentKind, Severity
from cdm_trade_intake.repair import CounterpartyRepairer

from tests.documents import LEI_BANK, LEI_FUND, make_party, make_trade, make_trade_state


def run_checks(doc, repair=True, derive=True):
    """Classify, extract, repair, derive and build a report for a document."""
    kind = KindClassifier().classify(doc)
    extraction = TradeRecordExtractor().extract(doc)
    repaired = derived = None
    if extraction.success and repair:
        repaired = CounterpartyRepairer().repair(extraction.record)
        if derive:
            derived = FieldDeriver().derive(repaired.record)
    return DiagnosticReportBuilder().build(doc, kind, extraction, repaired=repaired, derived=derived)


class TestSuccessfulExtractionReport:
    """Tests for reports on documents that extract."""

    def test_two_party_trade_has_no_critical(self, trade_state_doc):
        report = run_checks(trade_state_doc)

        assert report.kind == DocumentKind.TRADE_RECORD_WITH_STATE
        assert not report.has_critical
        assert report.count(Severity.CRITICAL) == 0
        assert report.count(Severity.OK) > 0

    def test_walk_order(self, trade_state_doc):
        """Findings follow the fixed check order."""
        report = run_checks(trade_state_doc)
        paths = [f.path for f in report.findings]

        assert paths[0] == ()
        assert paths.index(("trade",)) < paths.index(("trade", "tradeIdentifier"))
        assert paths.index(("trade", "tradeIdentifier")) < paths.index(("trade", "tradeDate"))
        assert paths.index(("trade", "tradeDate")) < paths.index(("trade", "tradableProduct"))
        assert paths.index(("trade", "tradableProduct")) < paths.index(("trade", "party"))
        assert paths.index(("trade", "party")) < paths.index(("derived", "currency"))

    def test_repair_and_linkage_findings(self, trade_state_doc):
        report = run_checks(trade_state_doc)
        findings = report.findings_at("trade", "tradableProduct", "counterparty")

        assert [f.severity for f in findings] == [Severity.WARNING, Severity.OK]
        assert findings[0].message == "no counterparty-role linkage"
        assert "Party1 -> party-bank" in findings[1].message
        assert "Party2 -> party-fund" in findings[1].message

    def test_defaulted_derived_fields_are_warnings(self, trade_state_doc):
        report = run_checks(trade_state_doc)

        venue = report.findings_at("derived", "execution_venue")
        currency = report.findings_at("derived", "currency")
        assert venue[0].severity == Severity.WARNING
        assert venue[0].message == "defaulted to OFF_FACILITY"
        assert currency[0].severity == Severity.OK
        assert currency[0].message == "EUR (from payout.notional.currency)"

    def test_zero_parties_has_exactly_one_critical(self, zero_party_trade_state):
        report = run_checks(zero_party_trade_state)

        assert report.count(Severity.CRITICAL) == 1
        critical = report.critical_findings[0]
        assert critical.path == ("trade", "party")
        assert "repair is impossible" in critical.message

    def test_one_party_is_a_warning(self, one_party_trade):
        report = run_checks(make_trade_state(one_party_trade))

        party = report.findings_at("trade", "party")
        assert party[0].severity == Severity.WARNING
        assert not report.has_critical

    def test_missing_trade_date_and_uti(self):
        report = run_checks(make_trade_state(make_trade(trade_date=None, with_uti=False)))

        assert report.findings_at("trade", "tradeDate")[0].severity == Severity.WARNING
        uti = [f for f in report.findings_at("trade", "tradeIdentifier")
               if "UniqueTransactionIdentifier" in f.message]
        assert uti[0].severity == Severity.WARNING

    def test_unreachable_economic_terms(self):
        report = run_checks(make_trade_state(make_trade(product={})))

        assert report.findings_at("trade", "tradableProduct")[0].severity == Severity.OK
        terms = report.findings_at("trade", "tradableProduct", "economicTerms")
        assert terms[0].severity == Severity.WARNING
        assert terms[0].message == "economic terms not reachable"

    def test_parties_beyond_the_first_two(self):
        parties = [
            make_party("p1", "First", lei=LEI_BANK),
            make_party("p2", "Second", lei=LEI_FUND),
            make_party("p3", "Third", other_id="BANKGB2L"),
        ]
        report = run_checks(make_trade_state(make_trade(parties=parties)))

        messages = [f.message for f in report.findings_at("trade", "party")]
        assert messages[0] == "3 parties"
        assert "1 parties beyond the first two will not be linked to a counterparty role" in messages
        assert not report.has_critical

    def test_no_identifiers_is_critical(self):
        trade = make_trade()
        del trade["tradeIdentifier"]
        report = run_checks(make_trade_state(trade))

        assert report.findings_at("trade", "tradeIdentifier")[0].severity == Severity.CRITICAL

    def test_lifecycle_step_reports_after_states(self, workflow_step_doc):
        report = run_checks(workflow_step_doc)

        after = report.findings_at("businessEvent", "after")
        assert after[0].severity == Severity.OK
        assert after[0].message == "1 after-state(s)"

    def test_report_without_repair_or_derivation(self, trade_state_doc):
        report = run_checks(trade_state_doc, repair=False)
        assert not any(f.path and f.path[0] == "derived" for f in report.findings)


class TestFailedExtractionReport:
    """Tests for reports on documents no strategy could read."""

    def test_empty_after_envelope(self, empty_after_envelope_doc):
        report = run_checks(empty_after_envelope_doc)

        assert report.kind == DocumentKind.LIFECYCLE_EVENT_ENVELOPE
        assert report.count(Severity.CRITICAL) == 1
        assert report.critical_findings[0].message == (
            "no extraction strategy produced a trade record (5 attempted)"
        )
        after = report.findings_at("originatingWorkflowStep", "businessEvent", "after")
        assert after[0].message == "business event has no after-states"

    def test_rejections_are_listed_as_warnings(self, empty_after_envelope_doc):
        report = run_checks(empty_after_envelope_doc)

        # the five rejections come last, in chain order
        tail = report.findings[-5:]
        assert all(f.severity == Severity.WARNING for f in tail)
        assert tail[0].message.startswith("direct: ")
        assert tail[-1].message.startswith("via_bare_trade: ")

    def test_null_trade_payload(self):
        report = run_checks({"trade": None, "state": {}})

        assert report.count(Severity.CRITICAL) == 2
        assert report.findings_at("trade")[0].message == "trade payload is null"

    def test_unknown_document(self):
        report = run_checks({"foo": 1, "bar": 2})

        assert report.kind == DocumentKind.UNKNOWN
        assert report.findings[1].severity == Severity.WARNING
        assert "foo, bar" in report.findings[1].message

    @pytest.mark.parametrize("doc", [[], "text", {}])
    def test_non_object_or_empty_root(self, doc):
        report = run_checks(doc)
        assert report.findings[0].path == ()
        assert report.findings[0].severity == Severity.WARNING


class TestRemediation:
    """Tests for remediation text selection."""

    @pytest.mark.parametrize("kind,text", [
        (DocumentKind.TRADE_RECORD_WITH_STATE,
         "ensure field 'trade' is populated and structured correctly"),
        (DocumentKind.LIFECYCLE_EVENT_ENVELOPE,
         "navigate via the embedded step's business event to reach trade state"),
        (DocumentKind.LIFECYCLE_EVENT_STEP,
         "extract trade state from business event's after-states or instructions"),
        (DocumentKind.UNKNOWN,
         "verify the document matches a supported envelope shape"),
        (DocumentKind.BARE_TRADE_RECORD,
         "consider loading the document as a different envelope shape"),
        (DocumentKind.BUSINESS_EVENT_RECORD,
         "consider loading the document as a different envelope shape"),
    ])
    def test_remediation_for_kind(self, kind, text):
        assert remediation_for(kind) == [text]

    def test_report_carries_remediation(self, empty_after_envelope_doc):
        report = run_checks(empty_after_envelope_doc)
        assert report.remediation == remediation_for(DocumentKind.LIFECYCLE_EVENT_ENVELOPE)

    def test_module_level_build(self, trade_state_doc):
        kind = KindClassifier().classify(trade_state_doc)
        report = build_report(trade_state_doc, kind, TradeRecordExtractor().extract(trade_state_doc))
        assert isinstance(report, DiagnosticReport)
        assert report.remediation


class TestReportRenderer:
    """Tests for plain-text rendering."""

    @pytest.fixture
    def renderer(self):
        return DiagnosticReportRenderer()

    def test_render_success(self, renderer, trade_state_doc):
        text = renderer.render(run_checks(trade_state_doc), source="trade.json")
        lines = text.splitlines()

        assert lines[0] == "CDM document diagnostics: trade_record_with_state"
        assert "Source: trade.json" in lines
        assert any(line.startswith("✓ $: document is an object") for line in lines)
        assert "    ✓ trade.party: 2 parties" in lines
        assert "⚠" in text
        assert "✗" not in text
        assert "Summary: " in text
        assert "  - ensure field 'trade' is populated and structured correctly" in lines

    def test_render_failure(self, renderer, empty_after_envelope_doc):
        text = renderer.render(run_checks(empty_after_envelope_doc))

        assert "✗ $: no extraction strategy produced a trade record (5 attempted)" in text
        assert "Source:" not in text
        assert "Summary: " in text and "1 critical" in text

    def test_summary_counts(self, renderer, trade_state_doc):
        report = run_checks(trade_state_doc)
        summary = report.to_dict()["summary"]

        text = renderer.render(report)

        assert (
            f"Summary: {summary['ok']} ok, {summary['warning']} warning, 0 critical" in text
        )

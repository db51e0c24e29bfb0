"""
Diagnostic report builder.

Walks a document and its extraction outcome through an explicit,
enumerated list of field-presence checks, in a fixed order:

1. document well-formedness
2. document kind (and envelope structure for lifecycle kinds)
3. trade payload, trade identifiers, trade date, product reference,
   party list, counterparty linkage (when extraction succeeded)
4. repair outcome and derived-field provenance (when supplied)
5. per-strategy rejection reasons (when extraction failed)

Each check appends one finding; remediation text is then selected by
document kind.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..derivation.field_derivation import economic_terms
from ..models.derivation import DerivedFields
from ..models.diagnostics import DiagnosticReport
from ..models.document import DocumentTree
from ..models.enums import DocumentKind, RepairStatus, Severity
from ..models.extraction import ExtractionFailure, ExtractionResult, ExtractionSuccess
from ..models.trade import CanonicalTradeRecord
from ..repair.counterparty_repair import ROLE_ORDER, RepairResult
from .remediation import remediation_for

logger = logging.getLogger(__name__)

TRADE = ("trade",)


class DiagnosticReportBuilder:
    """Builds ordered diagnostic reports for troubleshooting intake runs."""

    def build(
        self,
        doc: Union[DocumentTree, Mapping],
        kind: DocumentKind,
        extraction_result: ExtractionResult,
        repaired: Optional[RepairResult] = None,
        derived: Optional[DerivedFields] = None,
    ) -> DiagnosticReport:
        """
        Build a diagnostic report.

        Args:
            doc: The input document.
            kind: Its classified kind.
            extraction_result: Outcome of the extraction chain.
            repaired: Optional counterparty repair outcome.
            derived: Optional derived fields.

        Returns:
            DiagnosticReport with findings in walk order and remediation.
        """
        tree = doc if isinstance(doc, DocumentTree) else DocumentTree(doc)
        report = DiagnosticReport(kind=kind)

        self._check_document(report, tree)
        self._check_kind(report, tree, kind)

        if isinstance(extraction_result, ExtractionSuccess):
            record = extraction_result.record
            report.add(
                TRADE, Severity.OK,
                f"trade payload found via {extraction_result.strategy.value} "
                f"at {extraction_result.source_path}",
            )
            self._check_identifiers(report, record)
            self._check_trade_date(report, record)
            self._check_product(report, record)
            self._check_parties(report, record)
            self._check_linkage(report, record)
            if repaired is not None:
                self._check_repair(report, repaired)
            if derived is not None:
                self._check_derived(report, derived)
        elif isinstance(extraction_result, ExtractionFailure):
            self._check_failure(report, tree, extraction_result)

        report.remediation = remediation_for(kind)
        logger.debug(
            f"Built diagnostic report for {kind.value}: "
            f"{report.count(Severity.CRITICAL)} critical, {report.count(Severity.WARNING)} warning"
        )
        return report

    # =========================================================================
    # Document checks
    # =========================================================================

    def _check_document(self, report: DiagnosticReport, tree: DocumentTree) -> None:
        if not tree.is_object:
            report.add((), Severity.WARNING,
                       f"document root is {type(tree.root).__name__}, expected an object")
        elif tree.size() == 0:
            report.add((), Severity.WARNING, "document is an empty object")
        else:
            report.add((), Severity.OK, f"document is an object with {tree.size()} top-level fields")

    def _check_kind(self, report: DiagnosticReport, tree: DocumentTree, kind: DocumentKind) -> None:
        if kind is DocumentKind.UNKNOWN:
            fields = ", ".join(tree.field_names()) or "none"
            report.add((), Severity.WARNING, f"document kind not recognised (root fields: {fields})")
            return

        report.add((), Severity.OK, f"document kind: {kind.value}")
        if kind is DocumentKind.LIFECYCLE_EVENT_ENVELOPE:
            step = tree.child("originatingWorkflowStep")
            self._check_step(report, step, ("originatingWorkflowStep",))
            if tree.field("reportableTrade") is not None:
                report.add(("reportableTrade",), Severity.OK, "reportable trade present")
        elif kind is DocumentKind.LIFECYCLE_EVENT_STEP:
            self._check_step(report, tree, ())

    def _check_step(self, report: DiagnosticReport, step: Optional[DocumentTree], path) -> None:
        if step is None:
            report.add(path, Severity.WARNING, "workflow step is missing or not an object")
            return

        event = step.child("businessEvent")
        if event is not None:
            after = event.field("after")
            after_path = path + ("businessEvent", "after")
            if isinstance(after, list) and after:
                report.add(after_path, Severity.OK, f"{len(after)} after-state(s)")
            else:
                report.add(after_path, Severity.WARNING, "business event has no after-states")

        instructions = step.field("instruction")
        if isinstance(instructions, list) and instructions:
            with_before = sum(
                1 for i in instructions if isinstance(i, Mapping) and i.get("before") is not None
            )
            report.add(path + ("instruction",), Severity.OK,
                       f"{len(instructions)} instruction(s), {with_before} with a before-state")

        if step.field("proposedEvent") is not None:
            report.add(path + ("proposedEvent",), Severity.OK, "proposed event present")

    # =========================================================================
    # Trade record checks
    # =========================================================================

    def _check_identifiers(self, report: DiagnosticReport, record: CanonicalTradeRecord) -> None:
        path = TRADE + ("tradeIdentifier",)
        if not record.trade_identifiers:
            report.add(path, Severity.CRITICAL, "no trade identifiers")
            return

        report.add(path, Severity.OK, f"{len(record.trade_identifiers)} trade identifier(s)")
        for i, identifier in enumerate(record.trade_identifiers):
            if not identifier.assigned_value:
                report.add(path + (f"[{i}]", "assignedIdentifier"), Severity.WARNING,
                           "identifier has no assigned value")
        if not record.has_uti:
            report.add(path, Severity.WARNING, "no UniqueTransactionIdentifier among identifiers")

    def _check_trade_date(self, report: DiagnosticReport, record: CanonicalTradeRecord) -> None:
        if record.trade_date is None:
            report.add(TRADE + ("tradeDate",), Severity.WARNING, "trade date missing")
        else:
            report.add(TRADE + ("tradeDate",), Severity.OK, f"trade date {record.trade_date.isoformat()}")

    def _check_product(self, report: DiagnosticReport, record: CanonicalTradeRecord) -> None:
        path = TRADE + ("tradableProduct",)
        if record.product is None:
            report.add(path, Severity.WARNING, "product reference missing")
            return

        report.add(path, Severity.OK, "product reference present")
        if economic_terms(record) is None:
            report.add(path + ("economicTerms",), Severity.WARNING, "economic terms not reachable")

    def _check_parties(self, report: DiagnosticReport, record: CanonicalTradeRecord) -> None:
        path = TRADE + ("party",)
        count = len(record.parties)
        if count == 0:
            report.add(path, Severity.CRITICAL, "no parties; counterparty repair is impossible")
            return
        if count < 2:
            report.add(path, Severity.WARNING, f"fewer than two parties ({count})")
        else:
            report.add(path, Severity.OK, f"{count} parties")

        for i, party in enumerate(record.parties):
            party_path = path + (f"[{i}]",)
            if not party.party_ids:
                report.add(party_path + ("partyId",), Severity.WARNING,
                           f"party '{party.key}' has no identifiers")
            if not party.name:
                report.add(party_path + ("name",), Severity.WARNING,
                           f"party '{party.key}' has no name")

        if count > len(ROLE_ORDER):
            report.add(path, Severity.WARNING,
                       f"{count - len(ROLE_ORDER)} parties beyond the first two will not be "
                       f"linked to a counterparty role")

    def _check_linkage(self, report: DiagnosticReport, record: CanonicalTradeRecord) -> None:
        path = TRADE + ("tradableProduct", "counterparty")
        if record.has_counterparty_linkage:
            linked = sum(1 for link in record.counterparties if link.is_complete)
            report.add(path, Severity.OK, f"{linked} counterparty-role link(s)")
        else:
            report.add(path, Severity.WARNING, "no counterparty-role linkage")

    def _check_repair(self, report: DiagnosticReport, repaired: RepairResult) -> None:
        path = TRADE + ("tradableProduct", "counterparty")
        if repaired.status is RepairStatus.ALREADY_LINKED:
            report.add(path, Severity.OK, "repair not needed")
        elif repaired.status is RepairStatus.IMPOSSIBLE:
            report.add(path, Severity.WARNING, "repair not possible without parties")
        else:
            links = ", ".join(
                f"{link.role.value} -> {link.party_reference}"
                for link in repaired.record.counterparties
            )
            report.add(path, Severity.OK, f"repair synthesized {repaired.links_added} link(s): {links}")

    def _check_derived(self, report: DiagnosticReport, derived: DerivedFields) -> None:
        for name, field in derived.as_dict().items():
            value = field.to_dict()["value"]
            if field.is_defaulted:
                shown = "unknown" if value is None else value
                report.add(("derived", name), Severity.WARNING, f"defaulted to {shown}")
            else:
                report.add(("derived", name), Severity.OK, f"{value} (from {field.source})")

    # =========================================================================
    # Failure checks
    # =========================================================================

    def _check_failure(
        self,
        report: DiagnosticReport,
        tree: DocumentTree,
        failure: ExtractionFailure,
    ) -> None:
        if tree.has_field("trade") and tree.field("trade") is None:
            report.add(TRADE, Severity.CRITICAL, "trade payload is null")

        report.add((), Severity.CRITICAL,
                   f"no extraction strategy produced a trade record "
                   f"({len(failure.attempts)} attempted)")
        for rejection in failure.attempts:
            report.add(rejection.path, Severity.WARNING, rejection.describe())


_default_builder = DiagnosticReportBuilder()


def build_report(
    doc: Union[DocumentTree, Mapping[str, Any]],
    kind: DocumentKind,
    extraction_result: ExtractionResult,
) -> DiagnosticReport:
    """Build a diagnostic report with the default builder."""
    return _default_builder.build(doc, kind, extraction_result)

"""End-to-end intake pipeline for the CDM Trade Intake System.

This module wires the components together in their fixed order:
classify, extract, repair counterparty linkage, derive secondary fields,
build the diagnostic report, and optionally hand the trade over to an
external reporting collaborator.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from .audit.audit_logger import AuditLogger
from .audit.database import DatabaseManager
from .config.config_manager import ConfigurationManager
from .config.models import ConfigurationError
from .derivation.field_derivation import FieldDeriver
from .diagnostics.renderer import DiagnosticReportRenderer
from .diagnostics.report_builder import DiagnosticReportBuilder
from .extractors.kind_classifier import KindClassifier
from .extractors.strategy_chain import TradeRecordExtractor
from .interfaces.audit import AuditEvent, AuditEventType, IAuditLogger
from .interfaces.extractor import ITradeExtractor
from .interfaces.reporting import IReportingCollaborator, ReportingSideAssignment
from .models.derivation import DerivedFields
from .models.diagnostics import DiagnosticReport
from .models.document import DocumentTree
from .models.enums import DocumentKind, Severity
from .models.extraction import ExtractionResult
from .models.trade import CanonicalTradeRecord
from .parsers.loader import DocumentLoader
from .repair.counterparty_repair import CounterpartyRepairer, RepairResult


logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for the intake pipeline."""

    # Audit trail
    database_url: Optional[str] = None
    enable_audit_logging: bool = False
    init_audit_schema: bool = True

    # Directory holding derivation.json
    config_dir: Optional[str] = None

    # Attach plain-text rendering of the diagnostic report to results
    render_reports: bool = True


@dataclass
class PipelineResult:
    """Result of one intake run."""

    success: bool
    document_id: Optional[str] = None
    run_id: Optional[str] = None
    kind: DocumentKind = DocumentKind.UNKNOWN
    extraction: Optional[ExtractionResult] = None
    record: Optional[CanonicalTradeRecord] = None
    repair: Optional[RepairResult] = None
    derived: Optional[DerivedFields] = None
    report: Optional[DiagnosticReport] = None
    report_text: Optional[str] = None
    submission: Any = None
    submitted: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0


@dataclass
class PipelineStats:
    """Statistics about pipeline execution."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    repairs_performed: int = 0
    average_processing_time: float = 0.0
    total_processing_time: float = 0.0


class TradeIntakePipeline:
    """
    Main intake pipeline for CDM trade documents.

    Each call processes one document independently; extraction failure
    and impossible repairs are reported in the result, never raised.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        loader: Optional[DocumentLoader] = None,
        classifier: Optional[KindClassifier] = None,
        extractor: Optional[ITradeExtractor] = None,
        repairer: Optional[CounterpartyRepairer] = None,
        deriver: Optional[FieldDeriver] = None,
        report_builder: Optional[DiagnosticReportBuilder] = None,
        renderer: Optional[DiagnosticReportRenderer] = None,
        audit_logger: Optional[IAuditLogger] = None,
        config_manager: Optional[ConfigurationManager] = None,
        reporting_collaborator: Optional[IReportingCollaborator] = None,
    ):
        """
        Initialize the intake pipeline.

        Args:
            config: Pipeline configuration.
            loader: Optional document loader (created if not provided).
            classifier: Optional kind classifier (created if not provided).
            extractor: Optional trade extractor (created if not provided).
            repairer: Optional counterparty repairer (created if not provided).
            deriver: Optional field deriver (created from configuration if not provided).
            report_builder: Optional diagnostic report builder.
            renderer: Optional diagnostic report renderer.
            audit_logger: Optional audit logger (created if audit logging is enabled).
            config_manager: Optional configuration manager (created if not provided).
            reporting_collaborator: Optional external reporting engine.
        """
        self.config = config or PipelineConfig()
        self.stats = PipelineStats()
        self._stats_lock = Lock()

        self._config_manager = config_manager or ConfigurationManager(
            config_dir=self.config.config_dir
        )
        if self.config.config_dir:
            try:
                result = self._config_manager.load_from_directory(self.config.config_dir)
                for warning in result.warnings:
                    logger.warning(warning)
                for error in result.errors:
                    logger.error(error)
                logger.info(f"Loaded configuration from {self.config.config_dir}")
            except ConfigurationError as e:
                logger.warning(f"Failed to load configuration: {e.message}")

        self._loader = loader or DocumentLoader()
        self._classifier = classifier or KindClassifier()
        self._extractor = extractor or TradeRecordExtractor()
        self._repairer = repairer or CounterpartyRepairer()
        self._deriver = deriver or FieldDeriver(defaults=self._config_manager.defaults)
        self._report_builder = report_builder or DiagnosticReportBuilder()
        self._renderer = renderer
        if self._renderer is None and self.config.render_reports:
            self._renderer = DiagnosticReportRenderer()
        self._collaborator = reporting_collaborator

        self._db_manager = None
        self._audit_logger = audit_logger
        if self._audit_logger is None and self.config.enable_audit_logging:
            self._db_manager = DatabaseManager(database_url=self.config.database_url)
            if self.config.init_audit_schema:
                self._db_manager.init_database()
            self._audit_logger = AuditLogger(db_manager=self._db_manager)

        logger.info("Intake pipeline initialized")

    # =========================================================================
    # Single-step operations
    # =========================================================================

    def classify(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> DocumentKind:
        """Classify a document by envelope shape."""
        return self._classifier.classify(doc)

    def extract(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> ExtractionResult:
        """Run the extraction strategy chain."""
        return self._extractor.extract(doc)

    def diagnose(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> DiagnosticReport:
        """Classify, extract, and build a diagnostic report without repairing."""
        tree = self._loader.wrap(doc)
        kind = self.classify(tree)
        return self._report_builder.build(tree, kind, self.extract(tree))

    def render(self, report: DiagnosticReport, source: Optional[str] = None) -> str:
        """Render a diagnostic report as plain text."""
        renderer = self._renderer or DiagnosticReportRenderer()
        return renderer.render(report, source=source)

    # =========================================================================
    # Full run
    # =========================================================================

    def process_file(
        self,
        path: Union[str, Path],
        assignment: Optional[ReportingSideAssignment] = None,
    ) -> PipelineResult:
        """
        Load a JSON file and process it.

        Raises:
            StructuralError: If the file cannot be read or decoded.
        """
        tree = self._loader.load(path)
        return self.process(tree, document_id=str(path), assignment=assignment)

    def process(
        self,
        doc: Union[DocumentTree, Mapping[str, Any]],
        document_id: Optional[str] = None,
        assignment: Optional[ReportingSideAssignment] = None,
    ) -> PipelineResult:
        """
        Execute the complete intake pipeline for one document.

        Args:
            doc: Parsed document (tree or raw mapping).
            document_id: Label used for audit and report headers.
            assignment: Reporting-side assignment for the hand-off.

        Returns:
            PipelineResult with the repaired record, derived fields and
            diagnostic report, or the extraction failure.
        """
        start_time = time.time()
        tree = self._loader.wrap(doc)
        document_id = document_id or tree.source or str(uuid.uuid4())
        run_id = str(uuid.uuid4())
        result = PipelineResult(success=False, document_id=document_id, run_id=run_id)

        try:
            result.kind = self.classify(tree)
            self._audit(AuditEventType.DOCUMENT_CLASSIFIED, document_id, run_id, {
                "kind": result.kind.value,
                "root_fields": tree.field_names(),
            })

            extraction = self.extract(tree)
            result.extraction = extraction

            if not extraction.success:
                result.errors.extend(extraction.reasons)
                self._audit(AuditEventType.EXTRACTION_FAILED, document_id, run_id, {
                    "attempt_count": len(extraction.attempts),
                    "reasons": extraction.reasons,
                })
                result.report = self._report_builder.build(tree, result.kind, extraction)
            else:
                self._audit(AuditEventType.TRADE_EXTRACTED, document_id, run_id, {
                    "strategy": extraction.strategy.value,
                    "source_path": extraction.source_path,
                    "rejected_strategies": [r.strategy.value for r in extraction.rejections],
                })

                repair = self._repairer.repair(extraction.record)
                result.repair = repair
                result.record = repair.record
                self._audit(AuditEventType.COUNTERPARTIES_REPAIRED, document_id, run_id, {
                    "status": repair.status.value,
                    "links_added": repair.links_added,
                })

                derived = self._deriver.derive(repair.record)
                result.derived = derived
                self._audit(AuditEventType.FIELDS_DERIVED, document_id, run_id, {
                    "provenance": {
                        name: f.provenance.value for name, f in derived.as_dict().items()
                    },
                    "defaulted": derived.defaulted_names(),
                })

                result.report = self._report_builder.build(
                    tree, result.kind, extraction, repaired=repair, derived=derived
                )
                result.warnings.extend(
                    f"{finding.dotted_path}: {finding.message}"
                    for finding in result.report.warnings
                )
                result.success = True

                if assignment is not None:
                    self._hand_off(result, assignment)

            summary = result.report.to_dict()["summary"]
            self._audit(AuditEventType.REPORT_GENERATED, document_id, run_id, {"summary": summary})
            if self._renderer is not None:
                result.report_text = self._renderer.render(result.report, source=document_id)

            if result.report.has_critical:
                logger.warning(
                    f"{document_id}: {result.report.count(Severity.CRITICAL)} critical finding(s)"
                )
        finally:
            result.processing_time = time.time() - start_time
            self._update_stats(result)

        logger.info(
            f"Processed {document_id} as {result.kind.value} "
            f"({'extracted' if result.success else 'failed'}) in {result.processing_time:.3f}s"
        )
        return result

    def _hand_off(self, result: PipelineResult, assignment: ReportingSideAssignment) -> None:
        """Submit the repaired record to the reporting collaborator."""
        if self._collaborator is None:
            result.warnings.append("reporting-side assignment given but no reporting collaborator configured")
            return

        for key in (assignment.reporting_party, assignment.reporting_counterparty):
            if key is not None and result.record.find_party(key) is None:
                result.warnings.append(f"assignment references unknown party '{key}'")

        result.submission = self._collaborator.submit(result.record, result.derived, assignment)
        result.submitted = True
        logger.info(f"Submitted {result.document_id} to reporting collaborator")

    def _audit(
        self,
        event_type: AuditEventType,
        document_id: str,
        run_id: str,
        details: Dict[str, Any],
    ) -> None:
        """Record an audit event; audit failures never fail the run."""
        if self._audit_logger is None:
            return
        try:
            self._audit_logger.log_event(AuditEvent(
                id=str(uuid.uuid4()),
                event_type=event_type,
                timestamp=datetime.now(timezone.utc),
                document_id=document_id,
                run_id=run_id,
                details=details,
            ))
        except SQLAlchemyError as e:
            logger.warning(f"Failed to record audit event {event_type.value}: {e}")

    def _update_stats(self, result: PipelineResult) -> None:
        """Update pipeline statistics."""
        with self._stats_lock:
            self.stats.total_executions += 1

            if result.success:
                self.stats.successful_executions += 1
            else:
                self.stats.failed_executions += 1
            if result.repair is not None and result.repair.changed:
                self.stats.repairs_performed += 1

            self.stats.total_processing_time += result.processing_time
            self.stats.average_processing_time = (
                self.stats.total_processing_time / self.stats.total_executions
            )

    def get_stats(self) -> PipelineStats:
        """Snapshot of pipeline execution statistics."""
        with self._stats_lock:
            return replace(self.stats)

    @property
    def audit_logger(self) -> Optional[IAuditLogger]:
        return self._audit_logger

    def close(self) -> None:
        """Close the pipeline and release resources."""
        if isinstance(self._audit_logger, AuditLogger):
            self._audit_logger.close()
        if self._db_manager:
            self._db_manager.close()
        logger.info("Intake pipeline closed")

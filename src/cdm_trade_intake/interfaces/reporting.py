"""Reporting collaborator interface for the CDM Trade Intake System."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..models.derivation import DerivedFields
from ..models.trade import CanonicalTradeRecord


@dataclass(frozen=True)
class ReportingSideAssignment:
    """
    Who reports and who is the reporting counterparty.

    Supplied from outside the intake core; values are party keys of the
    canonical record.
    """
    reporting_party: str
    reporting_counterparty: Optional[str] = None


class IReportingCollaborator(ABC):
    """
    Abstract interface for the external rule-evaluation engine.

    Receives a repaired canonical record with its derived fields and
    turns them into a jurisdiction-specific transaction report.
    """

    @abstractmethod
    def submit(
        self,
        record: CanonicalTradeRecord,
        derived: DerivedFields,
        assignment: ReportingSideAssignment,
    ) -> Any:
        """
        Hand a trade over for report generation.

        Args:
            record: Canonical trade record after counterparty repair.
            derived: Derived fields with provenance.
            assignment: Reporting-side assignment.

        Returns:
            Whatever the collaborator produces (opaque to the intake core).
        """
        pass

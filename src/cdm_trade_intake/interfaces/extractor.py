"""Extraction interfaces for the CDM Trade Intake System."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Union

from ..models.document import DocumentTree
from ..models.enums import StrategyName
from ..models.extraction import ExtractionResult


class IExtractionStrategy(ABC):
    """
    Abstract interface for a single extraction strategy.

    A strategy handles one envelope family. It either produces a
    canonical trade record or a rejection; it never raises for
    documents of the wrong shape.
    """

    @property
    @abstractmethod
    def name(self) -> StrategyName:
        """Strategy identifier used in results and rejection reasons."""
        pass

    @abstractmethod
    def attempt(self, doc: DocumentTree) -> ExtractionResult:
        """
        Try to reduce the document to a canonical trade record.

        Args:
            doc: The parsed input document.

        Returns:
            ExtractionSuccess, or ExtractionFailure holding this
            strategy's single rejection.
        """
        pass


class ITradeExtractor(ABC):
    """
    Abstract interface for canonical trade record extraction.

    Implementations reduce a document of any supported envelope shape
    to a canonical trade record, or report why they could not.
    """

    @abstractmethod
    def extract(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> ExtractionResult:
        """
        Extract a canonical trade record from a document.

        Args:
            doc: The parsed input document.

        Returns:
            ExtractionSuccess with the record and producing strategy, or
            ExtractionFailure with every strategy's rejection reason.
            Never raises for business-data absence.
        """
        pass

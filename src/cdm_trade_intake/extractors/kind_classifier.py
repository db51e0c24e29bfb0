"""Document kind classification.

This module identifies the envelope shape of an input document from its
top-level field names, using a fixed-priority signature table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Union

from ..models.document import DocumentTree
from ..models.enums import DocumentKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KindSignature:
    """Predicate over a document's root fields and the kind it implies."""
    kind: DocumentKind
    predicate: Callable[[DocumentTree], bool]
    description: str


class KindClassifier:
    """
    Envelope-shape classifier for input documents.

    Evaluates the signature table in order and returns the kind of the
    first matching signature. Total: unmatched input yields UNKNOWN.
    """

    def __init__(self):
        self._signatures = self._build_signatures()

    def _build_signatures(self) -> List[KindSignature]:
        """Build the ordered signature table."""
        return [
            KindSignature(
                kind=DocumentKind.LIFECYCLE_EVENT_ENVELOPE,
                predicate=lambda doc: doc.has_field("originatingWorkflowStep"),
                description="has 'originatingWorkflowStep'",
            ),
            KindSignature(
                kind=DocumentKind.LIFECYCLE_EVENT_STEP,
                predicate=lambda doc: doc.has_field("businessEvent"),
                description="has 'businessEvent'",
            ),
            KindSignature(
                kind=DocumentKind.BARE_TRADE_RECORD,
                predicate=lambda doc: doc.has_field("trade") and not doc.has_field("state"),
                description="has 'trade' without 'state'",
            ),
            KindSignature(
                kind=DocumentKind.TRADE_RECORD_WITH_STATE,
                predicate=lambda doc: doc.has_field("trade") and doc.has_field("state"),
                description="has 'trade' and 'state'",
            ),
            KindSignature(
                kind=DocumentKind.LIFECYCLE_EVENT_STEP,
                predicate=lambda doc: doc.has_field("instruction") or doc.has_field("proposedEvent"),
                description="has 'instruction' or 'proposedEvent'",
            ),
        ]

    @property
    def signatures(self) -> List[KindSignature]:
        """The signature table in evaluation order."""
        return list(self._signatures)

    def classify(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> DocumentKind:
        """
        Classify a document by its top-level field names.

        Args:
            doc: The parsed document (tree or raw mapping).

        Returns:
            The DocumentKind of the first matching signature, or UNKNOWN.
        """
        tree = doc if isinstance(doc, DocumentTree) else DocumentTree(doc)

        for signature in self._signatures:
            if signature.predicate(tree):
                logger.debug(f"Classified as {signature.kind.value}: {signature.description}")
                return signature.kind

        logger.debug(f"Unknown structure, root fields: {', '.join(tree.field_names())}")
        return DocumentKind.UNKNOWN


_default_classifier = KindClassifier()


def classify(doc: Union[DocumentTree, Mapping[str, Any]]) -> DocumentKind:
    """Classify a document with the default signature table."""
    return _default_classifier.classify(doc)

"""Ordered extraction strategy chain."""

import logging
from typing import Any, List, Mapping, Optional, Union

from ..interfaces.extractor import IExtractionStrategy, ITradeExtractor
from ..models.document import DocumentTree
from ..models.extraction import ExtractionFailure, ExtractionResult, StrategyRejection
from .decoders import TradePayloadDecoder
from .strategies import (
    BareTradeStrategy,
    BusinessEventStrategy,
    DirectStrategy,
    LifecycleEnvelopeStrategy,
    LifecycleStepStrategy,
)

logger = logging.getLogger(__name__)


class TradeRecordExtractor(ITradeExtractor):
    """
    Reduces heterogeneous CDM envelopes to a canonical trade record.

    Strategies are tried strictly in list order and the first success is
    returned. Order never depends on document content, so a given input
    always yields the same strategy.

    Usage:
        extractor = TradeRecordExtractor()
        result = extractor.extract(tree)
        if result.success:
            record = result.record
        else:
            print("\\n".join(result.reasons))
    """

    DEFAULT_STRATEGIES = (
        DirectStrategy,
        LifecycleStepStrategy,
        LifecycleEnvelopeStrategy,
        BusinessEventStrategy,
        BareTradeStrategy,
    )

    def __init__(self, strategies: Optional[List[IExtractionStrategy]] = None):
        if strategies is None:
            decoder = TradePayloadDecoder()
            strategies = [cls(decoder) for cls in self.DEFAULT_STRATEGIES]
        self._strategies = list(strategies)

    @property
    def strategies(self) -> List[IExtractionStrategy]:
        return list(self._strategies)

    def extract(self, doc: Union[DocumentTree, Mapping[str, Any]]) -> ExtractionResult:
        tree = doc if isinstance(doc, DocumentTree) else DocumentTree(doc)
        rejections: List[StrategyRejection] = []

        for strategy in self._strategies:
            result = strategy.attempt(tree)
            if result.success:
                result.rejections = rejections
                logger.info(
                    f"Extracted trade record via {result.strategy.value} "
                    f"from {result.source_path}"
                )
                return result
            rejections.extend(result.attempts)

        logger.warning(
            f"No extraction strategy matched ({len(rejections)} attempted)"
            + (f" for {tree.source}" if tree.source else "")
        )
        return ExtractionFailure(attempts=rejections)


def extract_trade_record(doc: Union[DocumentTree, Mapping[str, Any]]) -> ExtractionResult:
    """Extract with a chain of the default strategies."""
    return TradeRecordExtractor().extract(doc)

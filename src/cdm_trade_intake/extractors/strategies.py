"""
Extraction strategies for CDM trade documents.

Each strategy reduces one envelope family to a canonical trade record.
Strategies are tried by the chain in a fixed order:

1. DirectStrategy - the document is itself a trade state
2. LifecycleStepStrategy - trade state in businessEvent.after[0]
3. LifecycleEnvelopeStrategy - embedded step's after-state, then reportableTrade
4. BusinessEventStrategy - the document is a business event; after[0]
5. BareTradeStrategy - the document is a trade payload without a state wrapper
"""

import logging
from abc import abstractmethod
from typing import Tuple

from ..interfaces.extractor import IExtractionStrategy
from ..models.document import DocumentTree, format_path
from ..models.enums import StrategyName
from ..models.extraction import (
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    StrategyRejection,
)
from ..models.trade import CanonicalTradeRecord
from ..parsers.exceptions import DecodeError
from .decoders import (
    TRADE_FIELDS,
    TradePayloadDecoder,
    first_after_state,
    require_mapping,
)

logger = logging.getLogger(__name__)


class ExtractionStrategy(IExtractionStrategy):
    """
    Base class for extraction strategies.

    Subclasses implement _extract, which either returns the record and
    the path it was found at or raises DecodeError. The base class turns
    decode errors into rejections so no strategy can abort the chain.
    """

    def __init__(self, decoder: TradePayloadDecoder = None):
        self.decoder = decoder or TradePayloadDecoder()

    @abstractmethod
    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        pass

    def attempt(self, doc: DocumentTree) -> ExtractionResult:
        try:
            record, source_path = self._extract(doc)
        except DecodeError as e:
            reason = f"{e.message} at {e.location}" if e.location else e.message
            logger.debug(f"{self.name.value} rejected document: {reason}")
            return ExtractionFailure(
                attempts=[StrategyRejection(strategy=self.name, reason=reason, path=e.path)]
            )
        return ExtractionSuccess(record=record, strategy=self.name, source_path=source_path)


class DirectStrategy(ExtractionStrategy):
    """Decodes the whole document as a trade state with a non-null trade."""

    @property
    def name(self) -> StrategyName:
        return StrategyName.DIRECT

    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        return self.decoder.decode_trade_state(doc.root), "$"


class LifecycleStepStrategy(ExtractionStrategy):
    """Decodes a workflow step and takes the trade state in businessEvent.after[0]."""

    @property
    def name(self) -> StrategyName:
        return StrategyName.VIA_LIFECYCLE_STEP

    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        step = require_mapping(doc.root, (), what="workflow step")
        state, path = first_after_state(step.get("businessEvent"), ("businessEvent",))
        return self.decoder.decode_trade_state(state, path), format_path(path)


class LifecycleEnvelopeStrategy(ExtractionStrategy):
    """
    Decodes a reportable event envelope.

    Prefers the trade state reached through the embedded workflow step;
    falls back to the envelope's own reportableTrade field when that
    path does not decode.
    """

    @property
    def name(self) -> StrategyName:
        return StrategyName.VIA_LIFECYCLE_ENVELOPE

    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        envelope = require_mapping(doc.root, (), what="reportable event")
        step_path = ("originatingWorkflowStep",)
        step = require_mapping(
            envelope.get("originatingWorkflowStep"), step_path, what="originatingWorkflowStep"
        )

        try:
            state, path = first_after_state(
                step.get("businessEvent"), step_path + ("businessEvent",)
            )
            return self.decoder.decode_trade_state(state, path), format_path(path)
        except DecodeError as step_error:
            if envelope.get("reportableTrade") is None:
                raise
            logger.debug(
                f"Embedded step did not decode ({step_error.message}), "
                f"falling back to reportableTrade"
            )

        path = ("reportableTrade",)
        return self.decoder.decode_trade_state(envelope["reportableTrade"], path), format_path(path)


class BusinessEventStrategy(ExtractionStrategy):
    """Decodes the document as a business event and takes after[0]."""

    @property
    def name(self) -> StrategyName:
        return StrategyName.VIA_BUSINESS_EVENT

    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        state, path = first_after_state(doc.root, ())
        return self.decoder.decode_trade_state(state, path), format_path(path)


class BareTradeStrategy(ExtractionStrategy):
    """Decodes the document as a trade payload and wraps it without a state."""

    @property
    def name(self) -> StrategyName:
        return StrategyName.VIA_BARE_TRADE

    def _extract(self, doc: DocumentTree) -> Tuple[CanonicalTradeRecord, str]:
        trade = require_mapping(doc.root, (), what="trade")
        if not any(trade.get(name) is not None for name in TRADE_FIELDS):
            raise DecodeError(
                message=f"no trade fields found (expected one of {', '.join(TRADE_FIELDS)})"
            )
        return self.decoder.decode_trade(trade), "$ (wrapped trade)"

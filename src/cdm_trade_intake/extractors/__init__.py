"""Classification and extraction components for CDM trade documents."""

from .kind_classifier import KindClassifier, KindSignature, classify
from .decoders import TradePayloadDecoder
from .strategies import (
    BareTradeStrategy,
    BusinessEventStrategy,
    DirectStrategy,
    ExtractionStrategy,
    LifecycleEnvelopeStrategy,
    LifecycleStepStrategy,
)
from .strategy_chain import TradeRecordExtractor, extract_trade_record

__all__ = [
    "KindClassifier",
    "KindSignature",
    "classify",
    "TradePayloadDecoder",
    "ExtractionStrategy",
    "DirectStrategy",
    "LifecycleStepStrategy",
    "LifecycleEnvelopeStrategy",
    "BusinessEventStrategy",
    "BareTradeStrategy",
    "TradeRecordExtractor",
    "extract_trade_record",
]

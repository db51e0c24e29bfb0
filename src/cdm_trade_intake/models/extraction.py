"""Extraction result models for the CDM Trade Intake System."""

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from .enums import StrategyName
from .trade import CanonicalTradeRecord


@dataclass
class StrategyRejection:
    """
    Why a single extraction strategy did not produce a trade record.

    The path points at the field where decoding or validation stopped.
    """
    strategy: StrategyName
    reason: str
    path: Tuple[str, ...] = ()

    def describe(self) -> str:
        """One-line description: '<strategy>: <reason>'."""
        return f"{self.strategy.value}: {self.reason}"


@dataclass
class ExtractionSuccess:
    """A canonical trade record together with the strategy that produced it."""
    record: CanonicalTradeRecord
    strategy: StrategyName
    source_path: str = "$"
    rejections: List[StrategyRejection] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return True


@dataclass
class ExtractionFailure:
    """
    No strategy produced a trade record.

    Holds every strategy's rejection in attempt order.
    """
    attempts: List[StrategyRejection] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return False

    @property
    def reasons(self) -> List[str]:
        """Rejection descriptions in attempt order."""
        return [attempt.describe() for attempt in self.attempts]

    def raise_for_failure(self, source=None) -> None:
        """Raise an ExtractionError carrying the aggregated reasons."""
        from ..parsers.exceptions import ExtractionError

        raise ExtractionError(
            message=f"No extraction strategy matched ({len(self.attempts)} attempted)",
            source=source,
            details={"reasons": self.reasons},
        )


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]

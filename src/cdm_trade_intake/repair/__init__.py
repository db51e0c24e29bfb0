"""Structural repair of canonical trade records."""

from .counterparty_repair import (
    CounterpartyRepairer,
    RepairResult,
    repair_counterparty_linkage,
)

__all__ = [
    "CounterpartyRepairer",
    "RepairResult",
    "repair_counterparty_linkage",
]

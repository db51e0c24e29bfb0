"""
Counterparty linkage repair.

Downstream reporting needs role-qualified counterparty references and
produces incomplete output when a trade only carries a flat party list.
The repairer synthesizes the missing links from party order: the first
party takes Party1 and the second takes Party2.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import List

from ..models.enums import CounterpartyRole, RepairStatus
from ..models.trade import CanonicalTradeRecord, Counterparty

logger = logging.getLogger(__name__)

ROLE_ORDER = (CounterpartyRole.PARTY_1, CounterpartyRole.PARTY_2)


@dataclass
class RepairResult:
    """Repaired record and what the repair did."""
    record: CanonicalTradeRecord
    status: RepairStatus

    @property
    def changed(self) -> bool:
        return self.status in (RepairStatus.LINKED_TWO, RepairStatus.LINKED_ONE)

    @property
    def links_added(self) -> int:
        if not self.changed:
            return 0
        return len(self.record.counterparties or [])


class CounterpartyRepairer:
    """
    Synthesizes counterparty-role links for records that lack them.

    Idempotent: a record that already has a complete link (role and
    party reference both set) is returned unchanged, and every record
    this repairer produces has such a link or no parties at all.
    The input record is never modified.
    """

    def repair(self, record: CanonicalTradeRecord) -> RepairResult:
        if record.has_counterparty_linkage:
            logger.debug("Counterparty linkage already present")
            return RepairResult(record=record, status=RepairStatus.ALREADY_LINKED)

        if not record.parties:
            logger.warning("Cannot repair counterparty linkage: trade has no parties")
            return RepairResult(record=record, status=RepairStatus.IMPOSSIBLE)

        links: List[Counterparty] = [
            Counterparty(role=role, party_reference=party.key)
            for role, party in zip(ROLE_ORDER, record.parties)
        ]
        status = RepairStatus.LINKED_TWO if len(links) == 2 else RepairStatus.LINKED_ONE

        if len(record.parties) > len(ROLE_ORDER):
            logger.info(
                f"{len(record.parties) - len(ROLE_ORDER)} parties beyond the first two "
                f"left unlinked"
            )
        logger.info(
            "Synthesized counterparty links: "
            + ", ".join(f"{link.role.value} -> {link.party_reference}" for link in links)
        )

        return RepairResult(
            record=dataclasses.replace(record, counterparties=links),
            status=status,
        )


_default_repairer = CounterpartyRepairer()


def repair_counterparty_linkage(record: CanonicalTradeRecord) -> CanonicalTradeRecord:
    """Return the record with counterparty links synthesized where missing."""
    return _default_repairer.repair(record).record

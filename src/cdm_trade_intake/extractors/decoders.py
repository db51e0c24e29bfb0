"""Decoding of CDM trade payloads into canonical trade records.

Decoders are strict about shape (wrong container types raise DecodeError
with the offending field path) and lenient about absence (missing
optional fields decode to empty values).
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, List, Optional, Tuple

from ..models.document import format_path
from ..models.enums import CounterpartyRole
from ..models.trade import (
    LEI_IDENTIFIER_TYPE,
    CanonicalTradeRecord,
    Counterparty,
    Party,
    PartyIdentifier,
    TradeIdentifier,
)
from ..parsers.exceptions import DecodeError

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]

# Fields that mark a mapping as a bare trade payload.
TRADE_FIELDS = ("tradeIdentifier", "party", "tradableProduct", "tradeDate", "execution")

LEI_SCHEME_MARKER = "iso17442"


def index(position: int) -> str:
    """Path element for a list position."""
    return f"[{position}]"


def require_mapping(value: Any, path: Path, what: str = "value") -> Mapping:
    """Return value if it is a JSON object, else raise DecodeError."""
    if value is None:
        raise DecodeError(message=f"{what} is missing", path=path)
    if not isinstance(value, Mapping):
        raise DecodeError(
            message=f"{what} must be an object, got {type(value).__name__}",
            path=path,
        )
    return value


def optional_list(container: Mapping, name: str, path: Path) -> List[Any]:
    """Return container[name] as a list; absent or null decodes to []."""
    value = container.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(
            message=f"'{name}' must be a list, got {type(value).__name__}",
            path=path + (name,),
        )
    return value


def scalar_value(value: Any) -> Optional[str]:
    """Unwrap a CDM field-with-meta ({"value": ...}) into a plain string."""
    if isinstance(value, Mapping):
        value = value.get("value")
    if value is None or isinstance(value, (Mapping, list)):
        return None
    return str(value)


def reference_keys(reference: Any) -> List[str]:
    """Candidate party keys a CDM reference can resolve to, in preference order."""
    if isinstance(reference, str):
        return [reference]
    if not isinstance(reference, Mapping):
        return []
    keys = [
        reference.get("externalReference"),
        reference.get("globalReference"),
    ]
    embedded = reference.get("value")
    if isinstance(embedded, Mapping):
        meta = embedded.get("meta") or {}
        if isinstance(meta, Mapping):
            keys.extend([meta.get("externalKey"), meta.get("globalKey")])
    return [k for k in keys if isinstance(k, str) and k]


def positional_party_keys(entries: List[Any]) -> List[str]:
    """
    Fallback key for each party position.

    A party without meta keys is known as party-<n>. When another party
    already declares that key, a suffix is added so every party key
    still resolves to exactly one party.
    """
    taken = set()
    for entry in entries:
        meta = entry.get("meta") if isinstance(entry, Mapping) else None
        if isinstance(meta, Mapping):
            taken.update(
                k for k in (meta.get("externalKey"), meta.get("globalKey"))
                if isinstance(k, str) and k
            )

    keys = []
    for position in range(len(entries)):
        key = base = f"party-{position + 1}"
        suffix = 1
        while key in taken:
            suffix += 1
            key = f"{base}-{suffix}"
        taken.add(key)
        keys.append(key)
    return keys


def first_after_state(business_event: Any, path: Path) -> Tuple[Mapping, Path]:
    """
    Return the first after-state of a business event and its path.

    Raises:
        DecodeError: If the event is missing, 'after' is absent or empty,
            or the first entry is empty.
    """
    event = require_mapping(business_event, path, what="businessEvent")
    after = optional_list(event, "after", path)
    after_path = path + ("after",)
    if not after:
        raise DecodeError(message="'after' is empty", path=after_path)
    state_path = after_path + (index(0),)
    state = require_mapping(after[0], state_path, what="after[0]")
    if not state:
        raise DecodeError(message="after[0] is empty", path=state_path)
    return state, state_path


class TradePayloadDecoder:
    """
    Decodes CDM trade-state and trade payloads.

    Produces CanonicalTradeRecord instances whose counterparty links
    always reference parties of the same record.
    """

    def decode_trade_state(self, value: Any, path: Path = ()) -> CanonicalTradeRecord:
        """
        Decode a trade state ({"trade": ..., "state": ...}).

        Raises:
            DecodeError: If the value is not an object or its trade is null.
        """
        trade_state = require_mapping(value, path, what="trade state")
        trade = trade_state.get("trade")
        if trade is None:
            raise DecodeError(message="trade payload is null", path=path + ("trade",))

        state = trade_state.get("state")
        if state is not None:
            require_mapping(state, path + ("state",), what="state")
        return self.decode_trade(trade, path + ("trade",), state=state)

    def decode_trade(
        self,
        value: Any,
        path: Path = (),
        state: Optional[Mapping] = None,
    ) -> CanonicalTradeRecord:
        """
        Decode a trade payload.

        Raises:
            DecodeError: If the payload or one of its parts has the wrong shape.
        """
        trade = require_mapping(value, path, what="trade")

        identifiers = [
            self._decode_trade_identifier(entry, path + ("tradeIdentifier", index(i)))
            for i, entry in enumerate(optional_list(trade, "tradeIdentifier", path))
        ]
        party_entries = optional_list(trade, "party", path)
        fallback_keys = positional_party_keys(party_entries)
        parties = [
            self._decode_party(entry, path + ("party", index(i)), fallback_key=fallback_keys[i])
            for i, entry in enumerate(party_entries)
        ]

        product = trade.get("tradableProduct")
        if product is not None:
            require_mapping(product, path + ("tradableProduct",), what="tradableProduct")

        counterparties = self._decode_counterparties(
            product, parties, path + ("tradableProduct",)
        )

        return CanonicalTradeRecord(
            trade_identifiers=identifiers,
            parties=parties,
            counterparties=counterparties,
            product=product,
            trade_date=self._decode_date(trade.get("tradeDate"), path + ("tradeDate",)),
            executions=self._decode_executions(trade, path),
            state=state,
        )

    def _decode_trade_identifier(self, value: Any, path: Path) -> TradeIdentifier:
        entry = require_mapping(value, path, what="tradeIdentifier")
        assigned = optional_list(entry, "assignedIdentifier", path)
        assigned_value = None
        if assigned and isinstance(assigned[0], Mapping):
            assigned_value = scalar_value(assigned[0].get("identifier"))

        issuer = scalar_value(entry.get("issuer"))
        if issuer is None:
            keys = reference_keys(entry.get("issuerReference"))
            issuer = keys[0] if keys else None

        return TradeIdentifier(
            identifier_type=scalar_value(entry.get("identifierType")),
            assigned_value=assigned_value,
            issuer=issuer,
        )

    def _decode_party(self, value: Any, path: Path, fallback_key: str) -> Party:
        entry = require_mapping(value, path, what="party")
        meta = entry.get("meta")
        if not isinstance(meta, Mapping):
            meta = {}
        external_key = meta.get("externalKey")
        global_key = meta.get("globalKey")

        party_ids = [
            self._decode_party_identifier(item, path + ("partyId", index(i)))
            for i, item in enumerate(optional_list(entry, "partyId", path))
        ]

        return Party(
            key=external_key or global_key or fallback_key,
            party_ids=party_ids,
            name=scalar_value(entry.get("name")),
            global_key=global_key if external_key else None,
        )

    def _decode_party_identifier(self, value: Any, path: Path) -> PartyIdentifier:
        if not isinstance(value, Mapping):
            # Older documents list bare identifier strings
            return PartyIdentifier(identifier_value=scalar_value(value))

        if "identifier" in value:
            identifier = value.get("identifier")
        else:
            identifier = value
        identifier_type = scalar_value(value.get("identifierType"))

        if identifier_type is None:
            scheme = None
            for holder in (identifier, value):
                if isinstance(holder, Mapping) and isinstance(holder.get("meta"), Mapping):
                    scheme = holder["meta"].get("scheme") or scheme
            if scheme and LEI_SCHEME_MARKER in str(scheme).lower():
                identifier_type = LEI_IDENTIFIER_TYPE

        return PartyIdentifier(
            identifier_type=identifier_type,
            identifier_value=scalar_value(identifier),
        )

    def _decode_counterparties(
        self,
        product: Optional[Mapping],
        parties: List[Party],
        path: Path,
    ) -> Optional[List[Counterparty]]:
        if product is None or product.get("counterparty") is None:
            return None

        links: List[Counterparty] = []
        for i, entry in enumerate(optional_list(product, "counterparty", path)):
            entry_path = path + ("counterparty", index(i))
            entry = require_mapping(entry, entry_path, what="counterparty")

            role = None
            role_value = scalar_value(entry.get("role"))
            if role_value is not None:
                try:
                    role = CounterpartyRole(role_value)
                except ValueError:
                    logger.debug(f"Ignoring unrecognised counterparty role '{role_value}'")

            candidates = reference_keys(entry.get("partyReference"))
            if not candidates:
                links.append(Counterparty(role=role, party_reference=None))
                continue

            resolved = None
            for key in candidates:
                party = next((p for p in parties if p.is_referenced_by(key)), None)
                if party is not None:
                    resolved = party.key
                    break

            if resolved is None:
                logger.warning(
                    f"Dropping counterparty link at {format_path(entry_path)}: "
                    f"reference {candidates[0]!r} matches no party"
                )
                continue
            links.append(Counterparty(role=role, party_reference=resolved))

        return links

    def _decode_date(self, value: Any, path: Path) -> Optional[date]:
        text = scalar_value(value)
        if text is None:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise DecodeError(message=f"invalid date '{text}'", path=path)

    def _decode_executions(self, trade: Mapping, path: Path) -> List[Mapping]:
        executions = optional_list(trade, "execution", path)
        if not executions and isinstance(trade.get("executionDetails"), Mapping):
            executions = [trade["executionDetails"]]
        for i, execution in enumerate(executions):
            require_mapping(execution, path + ("execution", index(i)), what="execution")
        return list(executions)
